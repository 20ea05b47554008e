"""
Tests for the SVG and ASCII previews.

Tests:
- Fixed-size SVG slots, connectors and labels
- Simple SVG variant
- Data URI wrapping
- ASCII flow line built from XML
"""

import base64
from urllib.parse import unquote

import pytest
from conftest import make_element, make_model
from lxml import etree

from bpmn_generator.core.exceptions import UnsupportedFormatError
from bpmn_generator.generation import generate_model
from bpmn_generator.models.bpmn_elements import ElementKind
from bpmn_generator.stages.ascii_preview import ARROW, BANNER, to_ascii
from bpmn_generator.stages.svg_rendering import (
    SVG_NAMESPACE,
    svg_data_uri,
    to_simple_svg,
    to_svg,
)
from bpmn_generator.stages.xml_generation import to_xml


def svg_children(svg: str, tag: str):
    root = etree.fromstring(svg.encode("utf-8"))
    return root, root.findall(f"{{{SVG_NAMESPACE}}}{tag}")


class TestPreviewSVG:
    def test_canvas_size(self, scenario_text):
        root, _ = svg_children(to_svg(generate_model(scenario_text)), "text")
        assert (root.get("width"), root.get("height")) == ("600", "140")

    def test_title_and_labels(self, scenario_text):
        _, texts = svg_children(to_svg(generate_model(scenario_text)), "text")

        assert [t.text for t in texts] == [
            "申請を受け付けるプロセス",
            "申請を受け付け",
            "担当者が内容を確...",
            "承認されたら通知",
        ]
        assert texts[0].get("font-weight") == "bold"

    def test_gateway_slot_skipped_when_absent(self, scenario_text):
        svg = to_svg(generate_model(scenario_text))
        _, paths = svg_children(svg, "path")
        _, lines = svg_children(svg, "line")

        assert paths == []
        assert [(line.get("x1"), line.get("x2")) for line in lines] == [("100", "180"), ("290", "490")]

    def test_all_slots(self, branching_text):
        svg = to_svg(generate_model(branching_text))
        _, circles = svg_children(svg, "circle")
        _, rects = svg_children(svg, "rect")
        _, paths = svg_children(svg, "path")
        _, lines = svg_children(svg, "line")

        assert [c.get("cx") for c in circles] == ["80", "520"]
        assert rects[0].get("x") == "190" and rects[0].get("width") == "100"
        assert paths[0].get("d") == "M 400 60 L 420 80 L 400 100 L 380 80 Z"
        assert len(lines) == 3

    def test_only_first_of_each_kind(self):
        model = make_model(
            [make_element("task_1", name="一"), make_element("task_2", name="二")], []
        )
        _, rects = svg_children(to_svg(model), "rect")
        _, texts = svg_children(to_svg(model), "text")

        assert len(rects) == 1
        assert texts[1].text == "一"

    def test_names_are_escaped(self):
        model = make_model([make_element("task_1", ElementKind.TASK, "<&>")], [])
        svg = to_svg(model)
        assert "&lt;&amp;&gt;" in svg

    def test_control_characters_in_text(self):
        _, texts = svg_children(to_svg(generate_model("書類を\x01作成する。")), "text")
        assert [t.text for t in texts] == ["書類を作成するプロセス", "プロセス開始", "書類を作成", "プロセス完了"]

    def test_control_characters_in_built_model(self):
        model = make_model([make_element("task_1", ElementKind.TASK, "一\x02二")], [])
        _, texts = svg_children(to_simple_svg(model), "text")
        assert texts[1].text == "一二"


class TestSimpleSVG:
    def test_canvas_and_colors(self, scenario_text):
        svg = to_simple_svg(generate_model(scenario_text))
        root, texts = svg_children(svg, "text")

        assert (root.get("width"), root.get("height")) == ("400", "120")
        assert all(t.get("fill") == "white" for t in texts[1:])

    def test_gateways_not_drawn(self, branching_text):
        _, paths = svg_children(to_simple_svg(generate_model(branching_text)), "path")
        assert paths == []


class TestDataURI:
    def test_utf8(self):
        uri = svg_data_uri("<svg>あ</svg>")
        assert uri.startswith("data:image/svg+xml;charset=utf-8,")
        assert unquote(uri.split(",", 1)[1]) == "<svg>あ</svg>"

    def test_base64(self):
        uri = svg_data_uri("<svg/>", "base64")
        payload = uri.split(",", 1)[1]
        assert uri.startswith("data:image/svg+xml;base64,")
        assert base64.b64decode(payload) == b"<svg/>"

    def test_unknown_encoding(self):
        with pytest.raises(UnsupportedFormatError):
            svg_data_uri("<svg/>", "hex")


class TestASCIIPreview:
    def test_scenario_line(self, scenario_text):
        preview = to_ascii(to_xml(generate_model(scenario_text)))
        lines = preview.split("\n")

        assert lines[0] == ""
        assert "\n".join(lines[1:4]) == BANNER
        assert lines[5] == "🟢 申請を受け付け ─► 📋 担当者が内容を確認 ─► 🔴 承認されたら通知"
        assert preview.endswith("\n")

    def test_accepts_model(self, scenario_text):
        model = generate_model(scenario_text)
        assert to_ascii(model) == to_ascii(to_xml(model))

    def test_truncation(self):
        model = make_model(
            [
                make_element("start_1", ElementKind.START_EVENT, "あ" * 9),
                make_element("task_1", ElementKind.TASK, "い" * 11),
                make_element("end_1", ElementKind.END_EVENT, "う" * 8),
            ],
            [],
        )
        line = to_ascii(model).split("\n")[5]
        assert line == ARROW.join(["🟢 " + "あ" * 8 + "...", "📋 " + "い" * 10 + "...", "🔴 " + "う" * 8])

    def test_every_task_listed(self, branching_text):
        line = to_ascii(generate_model(branching_text)).split("\n")[5]
        assert line.count("📋") == 2
        assert "在庫がある場合" not in line

    def test_escaped_names_are_restored(self):
        model = make_model([make_element("task_1", ElementKind.TASK, 'A&"B"')], [])
        assert '📋 A&"B"' in to_ascii(model)

    def test_empty_xml(self):
        assert to_ascii("<bpmn:definitions/>").split("\n")[5] == ""
