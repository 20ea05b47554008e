"""
Graph Validation for Process Models

Structural checks over a process model or a JSON definitions document:
- Required element fields (id, type)
- Start/end event presence
- Orphaned elements and flows referencing unknown elements
- Duplicate IDs across elements and flows
- Cycles in the sequence-flow graph
- Pluggable custom rules

Validation is advisory. Defects are reported as data and never raised, so
callers may still serialize an invalid model.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from bpmn_generator.models.bpmn_elements import ProcessModel

logger = logging.getLogger(__name__)

SEQUENCE_FLOW_TYPE = "bpmn:SequenceFlow"
START_EVENT_TYPE = "bpmn:StartEvent"
END_EVENT_TYPE = "bpmn:EndEvent"
PROCESS_TYPE = "bpmn:Process"
DEFINITIONS_TYPE = "bpmn:Definitions"


class Severity(str, Enum):
    """Validation issue severity."""

    ERROR = "error"
    WARNING = "warning"


class ValidationIssueCode(str, Enum):
    """Codes for structural validation issues."""

    MISSING_ID = "MISSING_ID"
    MISSING_TYPE = "MISSING_TYPE"
    NO_ROOT_ELEMENTS = "NO_ROOT_ELEMENTS"
    NO_PROCESSES = "NO_PROCESSES"
    NO_START_EVENT = "NO_START_EVENT"
    NO_END_EVENT = "NO_END_EVENT"
    ORPHANED_ELEMENTS = "ORPHANED_ELEMENTS"
    UNCONNECTED_FLOWS = "UNCONNECTED_FLOWS"
    DUPLICATE_ID = "DUPLICATE_ID"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    RULE_EXECUTION_ERROR = "RULE_EXECUTION_ERROR"


@dataclass
class ValidationIssue:
    """A validation issue found during validation."""

    code: str
    message: str
    element_id: Optional[str] = None
    element_type: Optional[str] = None
    severity: Severity = Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "elementId": self.element_id,
            "elementType": self.element_type,
            "severity": self.severity.value,
        }


@dataclass
class ValidationReport:
    """Errors, warnings and cycle traces for one validation run."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    circular_references: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Valid when there are no errors; warnings never affect validity."""
        return not self.errors

    @property
    def error_codes(self) -> List[str]:
        return [issue.code for issue in self.errors]

    @property
    def warning_codes(self) -> List[str]:
        return [issue.code for issue in self.warnings]

    def add(self, issue: ValidationIssue) -> None:
        """Route an issue to errors or warnings by its severity."""
        if issue.severity == Severity.WARNING:
            self.warnings.append(issue)
        else:
            self.errors.append(issue)

    def extend(self, issues: Iterable[ValidationIssue]) -> None:
        for issue in issues:
            self.add(issue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "circularReferences": list(self.circular_references),
        }

    def summary(self) -> str:
        """Human-readable multi-line summary."""
        status = "valid" if self.is_valid else "invalid"
        lines = [f"Validation: {status} ({len(self.errors)} errors, {len(self.warnings)} warnings)"]
        for issue in self.errors + self.warnings:
            target = f" [{issue.element_id}]" if issue.element_id else ""
            lines.append(f"  {issue.severity.value.upper()} {issue.code}{target}: {issue.message}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FlowElementRecord:
    """Uniform view of one flow element, from a model or a JSON document."""

    id: Optional[str]
    type: Optional[str]
    source_ref: Optional[str] = None
    target_ref: Optional[str] = None

    @property
    def is_flow(self) -> bool:
        return self.type == SEQUENCE_FLOW_TYPE


RuleCheck = Callable[[List[FlowElementRecord]], List[ValidationIssue]]


@dataclass
class ValidationRule:
    """A named custom check over the flow element records of a process."""

    name: str
    check: RuleCheck
    description: str = ""


def model_records(model: ProcessModel) -> List[FlowElementRecord]:
    """Flow element records for a model: elements first, then flows."""
    records = [
        FlowElementRecord(id=element.id, type=element.bpmn_type or None)
        for element in model.elements
    ]
    records.extend(
        FlowElementRecord(
            id=flow.id,
            type=flow.bpmn_type,
            source_ref=flow.source_ref,
            target_ref=flow.target_ref,
        )
        for flow in model.flows
    )
    return records


def _text(value: Any) -> Optional[str]:
    # IDs, types and references are non-empty strings; anything else is absent
    return value if isinstance(value, str) and value else None


def _ref(value: Any) -> Optional[str]:
    # bpmn-moddle documents may hold a reference object instead of an id
    if isinstance(value, Mapping):
        value = value.get("id")
    return _text(value)


def _entries(value: Any) -> List[Any]:
    # Anything other than a JSON array holds no entries
    return list(value) if isinstance(value, (list, tuple)) else []


def document_record(item: Any) -> FlowElementRecord:
    """Record for one ``flowElements`` entry; non-objects have no ID or type."""
    if not isinstance(item, Mapping):
        return FlowElementRecord(id=None, type=None)
    return FlowElementRecord(
        id=_text(item.get("id")),
        type=_text(item.get("$type")),
        source_ref=_ref(item.get("sourceRef")),
        target_ref=_ref(item.get("targetRef")),
    )


def document_records(flow_elements: Sequence[Any]) -> List[FlowElementRecord]:
    """Flow element records for the ``flowElements`` of a JSON process."""
    return [document_record(item) for item in flow_elements]


def validate_record(record: FlowElementRecord) -> List[ValidationIssue]:
    """Check that a record carries an ID and a type."""
    issues = []
    if not record.id:
        issues.append(
            ValidationIssue(
                code=ValidationIssueCode.MISSING_ID.value,
                message="Element has no ID",
                element_id=record.id,
                element_type=record.type,
            )
        )
    if not record.type:
        issues.append(
            ValidationIssue(
                code=ValidationIssueCode.MISSING_TYPE.value,
                message="Element has no type",
                element_id=record.id,
                element_type=record.type,
            )
        )
    return issues


def validate_unique_ids(records: Sequence[FlowElementRecord]) -> List[ValidationIssue]:
    """One DUPLICATE_ID error per repeated ID; first occurrences are exempt."""
    issues = []
    seen: Set[str] = set()
    for record in records:
        if not record.id:
            continue
        if record.id in seen:
            issues.append(
                ValidationIssue(
                    code=ValidationIssueCode.DUPLICATE_ID.value,
                    message=f'Duplicate ID "{record.id}"',
                    element_id=record.id,
                    element_type=record.type,
                )
            )
        else:
            seen.add(record.id)
    return issues


def validate_with_rules(
    records: List[FlowElementRecord], rules: Sequence[ValidationRule]
) -> List[ValidationIssue]:
    """Run custom rules; a rule that raises yields one RULE_EXECUTION_ERROR."""
    issues: List[ValidationIssue] = []
    for rule in rules:
        try:
            issues.extend(rule.check(records))
        except Exception as e:
            logger.warning(f"Validation rule '{rule.name}' failed: {e}")
            issues.append(
                ValidationIssue(
                    code=ValidationIssueCode.RULE_EXECUTION_ERROR.value,
                    message=f'Validation rule "{rule.name}" failed: {e}',
                )
            )
    return issues


def build_adjacency(records: Sequence[FlowElementRecord]) -> Dict[str, List[str]]:
    """Source ID -> target IDs, in flow declaration order."""
    adjacency: Dict[str, List[str]] = {}
    for record in records:
        if record.is_flow and record.source_ref and record.target_ref:
            adjacency.setdefault(record.source_ref, []).append(record.target_ref)
    return adjacency


def _first_cycle_from(
    root: str, adjacency: Mapping[str, List[str]], visited: Set[str]
) -> Optional[List[str]]:
    """Depth-first walk from ``root`` that stops at the first back edge."""
    path = [root]
    on_path = {root}
    visited.add(root)
    stack = [iter(adjacency.get(root, ()))]

    while stack:
        neighbor = next(stack[-1], None)
        if neighbor is None:
            stack.pop()
            on_path.discard(path.pop())
            continue
        if neighbor in on_path:
            return path[path.index(neighbor):] + [neighbor]
        if neighbor in visited:
            continue
        visited.add(neighbor)
        path.append(neighbor)
        on_path.add(neighbor)
        stack.append(iter(adjacency.get(neighbor, ())))

    return None


def detect_cycles(adjacency: Mapping[str, List[str]]) -> List[List[str]]:
    """Detect cycles using DFS.

    Roots are tried in adjacency insertion order; each unvisited root
    contributes at most one cycle.

    Args:
        adjacency: Source ID -> target IDs

    Returns:
        List of detected cycles (each as list of node IDs, first node repeated last)
    """
    visited: Set[str] = set()
    cycles = []
    for root in adjacency:
        if root in visited:
            continue
        cycle = _first_cycle_from(root, adjacency, visited)
        if cycle:
            cycles.append(cycle)
    return cycles


def format_cycle(cycle: Sequence[str]) -> str:
    return " -> ".join(cycle)


class GraphValidator:
    """Structural validator for process models and definitions documents.

    Checks run in a fixed order and are never short-circuited, so the same
    input always yields the same issues in the same order.
    """

    def __init__(self, rules: Optional[Sequence[ValidationRule]] = None):
        """Initialize validator.

        Args:
            rules: Custom rules run after the built-in checks
        """
        self.rules = list(rules or [])

    def validate(self, model: ProcessModel) -> ValidationReport:
        """Validate a process model.

        Args:
            model: Model to check

        Returns:
            ValidationReport (never raises for structural defects)
        """
        report = ValidationReport()
        self.check_process(report, model_records(model), model.process_id)
        logger.debug(
            f"Validated {model.process_id}: {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )
        return report

    def validate_definitions(self, document: Mapping[str, Any]) -> ValidationReport:
        """Validate a JSON definitions document (the shape ``to_json`` produces).

        Args:
            document: Definitions root with ``rootElements``, or the
                ``{"definitions": ...}`` wrapper around it

        Returns:
            ValidationReport covering the definitions and every process
        """
        if "$type" not in document and isinstance(document.get("definitions"), Mapping):
            document = document["definitions"]

        report = ValidationReport()
        definitions_id = _text(document.get("id"))
        definitions_type = _text(document.get("$type"))
        report.extend(validate_record(FlowElementRecord(id=definitions_id, type=definitions_type)))

        root_elements = _entries(document.get("rootElements"))
        if not root_elements:
            report.add(
                ValidationIssue(
                    code=ValidationIssueCode.NO_ROOT_ELEMENTS.value,
                    message="Definitions contain no root elements",
                    element_id=definitions_id,
                    element_type=definitions_type,
                )
            )
            return report

        processes = [
            r for r in root_elements if isinstance(r, Mapping) and r.get("$type") == PROCESS_TYPE
        ]
        if not processes:
            report.add(
                ValidationIssue(
                    code=ValidationIssueCode.NO_PROCESSES.value,
                    message="Definitions contain no process",
                    element_id=definitions_id,
                    element_type=definitions_type,
                )
            )

        for process in processes:
            process_id = _text(process.get("id"))
            report.extend(validate_record(FlowElementRecord(id=process_id, type=PROCESS_TYPE)))
            records = document_records(_entries(process.get("flowElements")))
            self.check_process(report, records, process_id)

        return report

    def check_process(
        self,
        report: ValidationReport,
        records: List[FlowElementRecord],
        process_id: Optional[str],
    ) -> None:
        """Run every process-level check over ``records`` into ``report``."""
        for record in records:
            report.extend(validate_record(record))

        node_ids = [r.id for r in records if not r.is_flow and r.id]
        flows = [r for r in records if r.is_flow]

        if not any(r.type == START_EVENT_TYPE for r in records):
            report.add(
                self._process_issue(
                    ValidationIssueCode.NO_START_EVENT,
                    "Process has no start event",
                    process_id,
                    Severity.WARNING,
                )
            )

        if not any(r.type == END_EVENT_TYPE for r in records):
            report.add(
                self._process_issue(
                    ValidationIssueCode.NO_END_EVENT,
                    "Process has no end event",
                    process_id,
                    Severity.WARNING,
                )
            )

        connected = {ref for flow in flows for ref in (flow.source_ref, flow.target_ref) if ref}
        orphans = [node_id for node_id in node_ids if node_id not in connected]
        if orphans:
            report.add(
                self._process_issue(
                    ValidationIssueCode.ORPHANED_ELEMENTS,
                    f"Elements not connected to any flow: {', '.join(orphans)}",
                    process_id,
                    Severity.WARNING,
                )
            )

        known = set(node_ids)
        dangling = [
            flow.id or "?"
            for flow in flows
            if (flow.source_ref and flow.source_ref not in known)
            or (flow.target_ref and flow.target_ref not in known)
        ]
        if dangling:
            report.add(
                self._process_issue(
                    ValidationIssueCode.UNCONNECTED_FLOWS,
                    f"Flows reference unknown elements: {', '.join(dangling)}",
                    process_id,
                    Severity.ERROR,
                )
            )

        report.extend(validate_unique_ids(records))

        for cycle in detect_cycles(build_adjacency(records)):
            trace = format_cycle(cycle)
            report.circular_references.append(trace)
            report.add(
                self._process_issue(
                    ValidationIssueCode.CIRCULAR_REFERENCE,
                    f"Circular reference detected: {trace}",
                    process_id,
                    Severity.ERROR,
                )
            )

        if self.rules:
            report.extend(validate_with_rules(records, self.rules))

    @staticmethod
    def _process_issue(
        code: ValidationIssueCode, message: str, process_id: Optional[str], severity: Severity
    ) -> ValidationIssue:
        return ValidationIssue(
            code=code.value,
            message=message,
            element_id=process_id,
            element_type=PROCESS_TYPE,
            severity=severity,
        )


def validate_model(
    model: ProcessModel, rules: Optional[Sequence[ValidationRule]] = None
) -> ValidationReport:
    """Convenience function to validate a process model."""
    return GraphValidator(rules).validate(model)


def validate_definitions(
    document: Mapping[str, Any], rules: Optional[Sequence[ValidationRule]] = None
) -> ValidationReport:
    """Convenience function to validate a JSON definitions document."""
    return GraphValidator(rules).validate_definitions(document)


__all__ = [
    "Severity",
    "ValidationIssueCode",
    "ValidationIssue",
    "ValidationReport",
    "FlowElementRecord",
    "ValidationRule",
    "GraphValidator",
    "build_adjacency",
    "detect_cycles",
    "document_records",
    "format_cycle",
    "model_records",
    "validate_definitions",
    "validate_model",
    "validate_record",
    "validate_unique_ids",
    "validate_with_rules",
]
