"""Pytest configuration for bpmn-generator tests."""

import pytest
from loguru import logger

from bpmn_generator.core.observability import ObservabilityManager
from bpmn_generator.models.bpmn_elements import Element, ElementKind, Flow, ProcessModel

SCENARIO_TEXT = "申請を受け付ける。担当者が内容を確認する。承認されたら通知する。"


@pytest.fixture(autouse=True)
def reset_observability():
    """Give every test a fresh observability singleton and loguru sinks."""
    ObservabilityManager.reset()
    yield
    ObservabilityManager.reset()
    logger.remove()


# ===========================
# Text Fixtures
# ===========================


@pytest.fixture
def scenario_text():
    """Application received, checked, then notified."""
    return SCENARIO_TEXT


@pytest.fixture
def branching_text():
    """Text with a condition phrase that yields a gateway."""
    return "注文を受信する。在庫を確認する。在庫がある場合は出荷する。処理が完了する。"


# ===========================
# Model Fixtures
# ===========================


def make_element(element_id: str, kind: ElementKind = ElementKind.TASK, name: str = "") -> Element:
    """Helper to create an element with a default name."""
    return Element(id=element_id, name=name or element_id, kind=kind)


def make_model(elements, flows) -> ProcessModel:
    """Helper to create a model from (source, target) flow pairs."""
    return ProcessModel(
        process_name="テストプロセス",
        elements=elements,
        flows=[
            Flow(id=f"flow_{i}", source_ref=source, target_ref=target)
            for i, (source, target) in enumerate(flows, start=1)
        ],
    )


@pytest.fixture
def linear_model():
    """A valid start -> task -> end model."""
    return make_model(
        [
            make_element("start_1", ElementKind.START_EVENT, "申請受付"),
            make_element("task_1", ElementKind.TASK, "内容確認"),
            make_element("end_1", ElementKind.END_EVENT, "通知"),
        ],
        [("start_1", "task_1"), ("task_1", "end_1")],
    )


@pytest.fixture
def cyclic_model():
    """Elements A, B, C with flows A->B, B->C, C->A."""
    return make_model(
        [make_element("A"), make_element("B"), make_element("C")],
        [("A", "B"), ("B", "C"), ("C", "A")],
    )
