"""
Stage 1: Pattern-Based Element Extraction

Derives typed process elements from Japanese business-process text using
ordered, data-driven pattern rule tables:

- One table per category (start events, tasks, gateways, end events)
- Every non-overlapping match of every rule yields one candidate
- Categories are independent passes over the same text, so one phrase
  may produce both a task and a gateway
- Categories with no match fall back to a single default element
  (gateways excepted)

The extractor is a pure function of its input and never fails.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from bpmn_generator.core.config import NamingConfig
from bpmn_generator.models.bpmn_elements import (
    Element,
    ElementKind,
    ElementSet,
    ExtractionCategory,
    GatewayType,
    MatchProvenance,
    TaskType,
)

logger = logging.getLogger(__name__)

# Sentence terminators (full-width period and full-width full stop)
SENTENCE_TERMINATORS = "。．"
_SENTENCE_SPLIT = re.compile(f"[{SENTENCE_TERMINATORS}]")
_CLAUSE = f"[^{SENTENCE_TERMINATORS}]*"

# C0 control characters that XML 1.0 cannot carry (tab, LF and CR are allowed)
_XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass(frozen=True)
class CategorySpec:
    """Per-category settings shared by all rules of the category."""

    category: ExtractionCategory
    kind: ElementKind
    id_prefix: str
    max_length: int
    default_label: str
    subtype: Optional[str] = None
    has_fallback: bool = True
    # Name of the element synthesized when the category has no match
    fallback_label: Optional[str] = None

    @property
    def fallback_name(self) -> str:
        return self.fallback_label or self.default_label


CATEGORY_SPECS: Dict[ExtractionCategory, CategorySpec] = {
    ExtractionCategory.START: CategorySpec(
        category=ExtractionCategory.START,
        kind=ElementKind.START_EVENT,
        id_prefix="start",
        max_length=15,
        default_label="プロセス開始",
    ),
    ExtractionCategory.TASK: CategorySpec(
        category=ExtractionCategory.TASK,
        kind=ElementKind.TASK,
        id_prefix="task",
        max_length=12,
        default_label="タスク実行",
        subtype=TaskType.USER_TASK.value,
        fallback_label="処理実行",
    ),
    ExtractionCategory.GATEWAY: CategorySpec(
        category=ExtractionCategory.GATEWAY,
        kind=ElementKind.GATEWAY,
        id_prefix="gateway",
        max_length=10,
        default_label="条件判定",
        subtype=GatewayType.EXCLUSIVE.value,
        has_fallback=False,
    ),
    ExtractionCategory.END: CategorySpec(
        category=ExtractionCategory.END,
        kind=ElementKind.END_EVENT,
        id_prefix="end",
        max_length=15,
        default_label="プロセス完了",
    ),
}


@dataclass(frozen=True)
class RuleMatch:
    """One match of a pattern rule."""

    rule_id: str
    captured: str
    start: int
    end: int


@dataclass(frozen=True)
class PatternRule:
    """A single extraction rule: a regex whose first group is the label."""

    rule_id: str
    category: ExtractionCategory
    pattern: "re.Pattern[str]"
    description: str = ""

    def find(self, text: str) -> Iterator[RuleMatch]:
        """Yield every non-overlapping match, left to right."""
        for match in self.pattern.finditer(text):
            yield RuleMatch(
                rule_id=self.rule_id,
                captured=match.group(1) or "",
                start=match.start(1),
                end=match.end(1),
            )


def _keywords(*words: str) -> str:
    return "(?:" + "|".join(words) + ")"


def _rule(
    rule_id: str, category: ExtractionCategory, regex: str, description: str = ""
) -> PatternRule:
    return PatternRule(
        rule_id=rule_id,
        category=category,
        pattern=re.compile(regex),
        description=description,
    )


# Ordered rule tables. Each regex captures the clause leading up to and
# including its keyword; clauses never cross a sentence terminator before
# the first keyword.
DEFAULT_RULES: Dict[ExtractionCategory, Tuple[PatternRule, ...]] = {
    ExtractionCategory.START: (
        _rule(
            "start.request_received",
            ExtractionCategory.START,
            f"({_CLAUSE}{_keywords('申請', '依頼', '要求', '注文')}"
            f".*?{_keywords('受け付け', '受信', '到着')})",
            "A request, application or order arrives",
        ),
        _rule(
            "start.process_begins",
            ExtractionCategory.START,
            f"({_CLAUSE}{_keywords('プロセス', '処理', '手続き')}"
            f".*?{_keywords('開始', 'スタート')})",
            "A process or procedure starts",
        ),
    ),
    ExtractionCategory.TASK: (
        _rule(
            "task.action_verb",
            ExtractionCategory.TASK,
            f"({_CLAUSE}"
            f"{_keywords('確認', 'チェック', '検証', '処理', '実行', '作成', '送信', '登録', '保存', '承認', '却下')})"
            # 「承認されたら」 is a condition on the action, not the action
            "(?!され(?:たら|れば))",
            "An action verb such as check, create, send or approve",
        ),
    ),
    ExtractionCategory.GATEWAY: (
        _rule(
            "gateway.condition",
            ExtractionCategory.GATEWAY,
            f"({_CLAUSE}{_keywords('もし', '場合', 'なら', 'ならば', 'かどうか', '判断', '条件')})",
            "A conditional or decision phrase",
        ),
    ),
    ExtractionCategory.END: (
        _rule(
            "end.completion",
            ExtractionCategory.END,
            f"({_CLAUSE}{_keywords('完了', '終了', '通知', '結果', '完成')})",
            "Completion, termination or notification",
        ),
    ),
}


def truncate_label(text: str, max_length: int, ellipsis: str = "...") -> str:
    """Truncate a label to ``max_length`` characters, marking the cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ellipsis


def clean_label(text: str) -> str:
    """Drop characters that cannot appear in an XML document."""
    return _XML_INVALID_CHARS.sub("", text)


def extract_process_name(text: str, naming: Optional[NamingConfig] = None) -> str:
    """Derive the process name from the first sentence of the text, kept as written."""
    naming = naming or NamingConfig()
    first_sentence = clean_label(_SENTENCE_SPLIT.split(text, maxsplit=1)[0])
    if len(first_sentence) > naming.process_name_max:
        return first_sentence[: naming.process_name_max] + naming.ellipsis + naming.process_suffix
    return first_sentence + naming.process_suffix


@dataclass
class ExtractionContext:
    """Per-call extraction state: the ID counters for each category."""

    counters: Dict[ExtractionCategory, int] = field(default_factory=dict)

    def next_id(self, spec: CategorySpec) -> str:
        count = self.counters.get(spec.category, 0) + 1
        self.counters[spec.category] = count
        return f"{spec.id_prefix}_{count}"


class PatternExtractor:
    """Extracts start events, tasks, gateways and end events from text.

    Rules run category by category, and within a category in declaration
    order. All state lives in a fresh ExtractionContext per call, so one
    extractor may be shared between threads.
    """

    def __init__(
        self,
        naming: Optional[NamingConfig] = None,
        rules: Optional[Mapping[ExtractionCategory, Sequence[PatternRule]]] = None,
        category_specs: Optional[Mapping[ExtractionCategory, CategorySpec]] = None,
    ):
        """Initialize the extractor.

        Args:
            naming: Label and process-name truncation settings
            rules: Rule tables per category (defaults to DEFAULT_RULES)
            category_specs: Per-category settings (defaults to CATEGORY_SPECS)
        """
        self.naming = naming or NamingConfig()
        self.rules = dict(rules) if rules is not None else dict(DEFAULT_RULES)
        self.category_specs = (
            dict(category_specs) if category_specs is not None else dict(CATEGORY_SPECS)
        )

    def extract(self, text: str) -> Tuple[str, ElementSet]:
        """Extract the process name and element set from text.

        Args:
            text: Japanese business-process description (may be empty)

        Returns:
            (process_name, element_set)
        """
        text = text or ""
        context = ExtractionContext()
        elements = ElementSet()

        for category in ExtractionCategory:
            spec = self.category_specs[category]
            found = elements.by_category(category)
            found.extend(self._extract_category(text, spec, context))

            if not found and spec.has_fallback:
                found.append(self._fallback_element(spec, context))
                logger.debug(f"No {category.value} matches; using fallback '{spec.fallback_name}'")

        process_name = extract_process_name(text, self.naming)
        logger.debug(f"Extracted '{process_name}': {elements.counts()}")
        return process_name, elements

    def _extract_category(
        self, text: str, spec: CategorySpec, context: ExtractionContext
    ) -> List[Element]:
        """Run every rule of one category over the whole text."""
        results: List[Element] = []
        for rule in self.rules.get(spec.category, ()):
            for match in rule.find(text):
                results.append(
                    Element(
                        id=context.next_id(spec),
                        name=self._label(match.captured, spec),
                        kind=spec.kind,
                        subtype=spec.subtype,
                        provenance=MatchProvenance(
                            category=spec.category,
                            rule_id=match.rule_id,
                            start=match.start,
                            end=match.end,
                            matched_text=match.captured,
                        ),
                    )
                )
        return results

    def _label(self, captured: str, spec: CategorySpec) -> str:
        label = clean_label(captured).strip() or spec.default_label
        return truncate_label(label, spec.max_length, self.naming.ellipsis)

    def _fallback_element(self, spec: CategorySpec, context: ExtractionContext) -> Element:
        return Element(
            id=context.next_id(spec),
            name=spec.fallback_name,
            kind=spec.kind,
            subtype=spec.subtype,
        )


def extract_elements(text: str, naming: Optional[NamingConfig] = None) -> Tuple[str, ElementSet]:
    """Extract (process_name, elements) with the default rule tables."""
    return PatternExtractor(naming=naming).extract(text)


__all__ = [
    "CATEGORY_SPECS",
    "DEFAULT_RULES",
    "SENTENCE_TERMINATORS",
    "CategorySpec",
    "ExtractionContext",
    "PatternExtractor",
    "PatternRule",
    "RuleMatch",
    "clean_label",
    "extract_elements",
    "extract_process_name",
    "truncate_label",
]
