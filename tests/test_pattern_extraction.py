"""
Tests for Stage 1 (Pattern Extraction).

Tests:
- Rule tables and per-category matching
- Label trimming and truncation
- Fallback defaults
- Process name derivation
- Per-call ID counters
"""

import re

import pytest

from bpmn_generator.core.config import NamingConfig
from bpmn_generator.models.bpmn_elements import ElementKind, ExtractionCategory
from bpmn_generator.stages.pattern_extraction import (
    CATEGORY_SPECS,
    DEFAULT_RULES,
    PatternExtractor,
    PatternRule,
    clean_label,
    extract_elements,
    extract_process_name,
    truncate_label,
)


@pytest.fixture
def extractor():
    return PatternExtractor()


class TestRuleTables:
    """Each rule matches its own vocabulary."""

    def test_every_category_has_rules_and_settings(self):
        for category in ExtractionCategory:
            assert DEFAULT_RULES[category]
            assert CATEGORY_SPECS[category].category == category

    def test_rule_ids_are_unique(self):
        rule_ids = [rule.rule_id for rules in DEFAULT_RULES.values() for rule in rules]
        assert len(rule_ids) == len(set(rule_ids))

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("申請を受け付ける。", "申請を受け付け"),
            ("依頼メールを受信した。", "依頼メールを受信"),
            ("注文が到着する。", "注文が到着"),
        ],
    )
    def test_request_received_rule(self, text, expected):
        rule = DEFAULT_RULES[ExtractionCategory.START][0]
        assert [m.captured for m in rule.find(text)] == [expected]

    def test_process_begins_rule(self):
        rule = DEFAULT_RULES[ExtractionCategory.START][1]
        assert [m.captured for m in rule.find("月次の処理を開始する。")] == ["月次の処理を開始"]

    def test_task_rule_skips_passive_condition(self):
        rule = DEFAULT_RULES[ExtractionCategory.TASK][0]
        assert list(rule.find("承認されたら通知する。")) == []
        assert list(rule.find("承認されれば通知する。")) == []
        assert [m.captured for m in rule.find("部長が承認する。")] == ["部長が承認"]

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("データが登録される。", "データが登録"),
            ("メールが送信される。", "メールが送信"),
            ("部下に確認させる。", "部下に確認"),
        ],
    )
    def test_task_rule_accepts_passive_and_causative(self, text, expected):
        rule = DEFAULT_RULES[ExtractionCategory.TASK][0]
        assert [m.captured for m in rule.find(text)] == [expected]

    def test_gateway_rule(self):
        rule = DEFAULT_RULES[ExtractionCategory.GATEWAY][0]
        assert [m.captured for m in rule.find("金額が大きい場合は差し戻す。")] == ["金額が大きい場合"]

    def test_matches_do_not_cross_sentences(self):
        rule = DEFAULT_RULES[ExtractionCategory.TASK][0]
        captures = [m.captured for m in rule.find("書類を受け取る。内容を確認する。")]
        assert captures == ["内容を確認"]

    def test_match_offsets(self):
        rule = DEFAULT_RULES[ExtractionCategory.END][0]
        text = "作業が完了する。"
        match = next(rule.find(text))
        assert text[match.start : match.end] == match.captured


class TestExtraction:
    """Full extraction over all categories."""

    def test_scenario_text(self, extractor, scenario_text):
        process_name, elements = extractor.extract(scenario_text)

        assert process_name == "申請を受け付けるプロセス"
        assert [e.name for e in elements.start_events] == ["申請を受け付け"]
        assert [e.name for e in elements.tasks] == ["担当者が内容を確認"]
        assert elements.gateways == []
        assert [e.name for e in elements.end_events] == ["承認されたら通知"]

    def test_branching_text(self, extractor, branching_text):
        _, elements = extractor.extract(branching_text)

        assert [e.id for e in elements.ordered()] == [
            "start_1",
            "task_1",
            "task_2",
            "gateway_1",
            "end_1",
        ]
        assert elements.gateways[0].name == "在庫がある場合"
        assert elements.gateways[0].xml_tag == "exclusiveGateway"

    def test_element_kinds_and_subtypes(self, extractor, branching_text):
        _, elements = extractor.extract(branching_text)

        assert all(e.kind == ElementKind.START_EVENT for e in elements.start_events)
        assert all(e.kind == ElementKind.TASK and e.subtype == "userTask" for e in elements.tasks)
        assert all(e.kind == ElementKind.END_EVENT for e in elements.end_events)

    def test_categories_overlap(self, extractor):
        # One phrase may be both a task and a gateway
        _, elements = extractor.extract("内容を確認するかどうか判断する。")
        assert elements.tasks
        assert elements.gateways

    def test_provenance_recorded(self, extractor, scenario_text):
        _, elements = extractor.extract(scenario_text)
        task = elements.tasks[0]

        assert task.provenance is not None
        assert task.provenance.rule_id == "task.action_verb"
        assert task.provenance.category == ExtractionCategory.TASK
        assert scenario_text[task.provenance.start : task.provenance.end] == "担当者が内容を確認"
        assert not task.is_fallback

    def test_global_scan_finds_every_match(self, extractor):
        _, elements = extractor.extract("書類を作成する。書類を送信する。台帳に登録する。")
        assert [e.id for e in elements.tasks] == ["task_1", "task_2", "task_3"]
        assert [e.name for e in elements.tasks] == ["書類を作成", "書類を送信", "台帳に登録"]

    def test_counters_reset_per_call(self, extractor, scenario_text):
        extractor.extract(scenario_text)
        _, elements = extractor.extract(scenario_text)
        assert elements.tasks[0].id == "task_1"

    def test_module_function(self, scenario_text):
        process_name, elements = extract_elements(scenario_text)
        assert process_name.endswith("プロセス")
        assert len(elements) == 3


class TestFallbacks:
    """Categories without matches fall back to defaults."""

    def test_empty_input(self, extractor):
        process_name, elements = extractor.extract("")

        assert process_name == "プロセス"
        assert [e.name for e in elements.start_events] == ["プロセス開始"]
        assert [e.name for e in elements.tasks] == ["処理実行"]
        assert elements.gateways == []
        assert [e.name for e in elements.end_events] == ["プロセス完了"]
        assert all(e.is_fallback for e in elements.ordered())

    def test_fallback_ids_follow_convention(self, extractor):
        _, elements = extractor.extract("")
        assert [e.id for e in elements.ordered()] == ["start_1", "task_1", "end_1"]

    def test_non_japanese_text_uses_defaults(self, extractor):
        _, elements = extractor.extract("The quick brown fox.")
        assert len(elements) == 3
        assert elements.counts() == {"start_events": 1, "tasks": 1, "gateways": 0, "end_events": 1}

    def test_partial_fallback(self, extractor):
        _, elements = extractor.extract("内容を確認する。")
        assert elements.tasks[0].name == "内容を確認"
        assert elements.start_events[0].is_fallback
        assert elements.end_events[0].is_fallback

    def test_passive_action_is_not_a_fallback(self, extractor):
        _, elements = extractor.extract("データが登録される。")
        assert [e.name for e in elements.tasks] == ["データが登録"]
        assert not elements.tasks[0].is_fallback

    def test_empty_capture_uses_default_label(self):
        rule = PatternRule(
            rule_id="task.anything",
            category=ExtractionCategory.TASK,
            pattern=re.compile(r"(\s*)確認"),
        )
        extractor = PatternExtractor(rules={**DEFAULT_RULES, ExtractionCategory.TASK: (rule,)})
        _, elements = extractor.extract("確認する。")
        assert [e.name for e in elements.tasks] == ["タスク実行"]


class TestTruncation:
    """Label and process-name truncation."""

    def test_task_name_of_twelve_chars_is_kept(self, extractor):
        name = "あ" * 10 + "確認"
        _, elements = extractor.extract(name + "する。")
        assert elements.tasks[0].name == name

    def test_task_name_of_thirteen_chars_is_truncated(self, extractor):
        name = "あ" * 11 + "確認"
        _, elements = extractor.extract(name + "する。")
        assert elements.tasks[0].name == name[:12] + "..."

    def test_truncate_label(self):
        assert truncate_label("abc", 3) == "abc"
        assert truncate_label("abcd", 3) == "abc..."

    def test_whitespace_is_trimmed(self, extractor):
        _, elements = extractor.extract("  内容を確認する。")
        assert elements.tasks[0].name == "内容を確認"

    def test_long_process_name(self):
        sentence = "あ" * 31
        assert extract_process_name(sentence + "。") == "あ" * 30 + "...プロセス"

    def test_process_name_at_limit(self):
        sentence = "あ" * 30
        assert extract_process_name(sentence) == sentence + "プロセス"

    def test_process_name_stops_at_fullwidth_period(self):
        assert extract_process_name("受付する．次へ") == "受付するプロセス"

    def test_custom_naming(self):
        naming = NamingConfig(process_name_max=5, process_suffix="フロー")
        assert extract_process_name("あいうえおか", naming) == "あいうえお...フロー"

    def test_process_name_keeps_leading_whitespace(self):
        assert extract_process_name(" 申請を受け付ける。") == " 申請を受け付けるプロセス"


class TestControlCharacters:
    """Characters XML cannot carry never reach a label."""

    def test_clean_label(self):
        assert clean_label("a\x00b\x08c\x1fd") == "abcd"
        assert clean_label("a\tb\nc\rd") == "a\tb\nc\rd"

    def test_task_label(self, extractor):
        _, elements = extractor.extract("書類を\x01作成する。")
        assert elements.tasks[0].name == "書類を作成"
        assert elements.tasks[0].provenance.matched_text == "書類を\x01作成"

    def test_label_of_only_control_characters(self):
        rule = PatternRule(
            rule_id="task.control",
            category=ExtractionCategory.TASK,
            pattern=re.compile("(\x02)"),
        )
        extractor = PatternExtractor(rules={**DEFAULT_RULES, ExtractionCategory.TASK: (rule,)})
        _, elements = extractor.extract("\x02")
        assert [e.name for e in elements.tasks] == ["タスク実行"]

    def test_process_name(self):
        assert extract_process_name("申請\x07を受け付ける。") == "申請を受け付けるプロセス"


class TestCustomRules:
    """Rule tables are data and can be replaced."""

    def test_custom_task_rule(self):
        rules = dict(DEFAULT_RULES)
        rules[ExtractionCategory.TASK] = (
            PatternRule(
                rule_id="task.ship",
                category=ExtractionCategory.TASK,
                pattern=re.compile("([^。]*出荷)"),
            ),
        )
        _, elements = PatternExtractor(rules=rules).extract("商品を出荷する。")
        assert [e.name for e in elements.tasks] == ["商品を出荷"]
        assert elements.tasks[0].provenance.rule_id == "task.ship"
