"""
Stage 2: Flow Assembly

Threads the extracted elements into a single linear chain of sequence
flows. Categories are concatenated in a fixed order (start events, tasks,
gateways, end events) and every adjacent pair is joined by one flow, so N
elements always yield N-1 flows. Gateways are chained like any other node;
no branch or merge topology is created.
"""

import logging
from typing import List, Optional, Sequence, Union

from bpmn_generator.models.bpmn_elements import PROCESS_ID, Element, ElementSet, Flow, ProcessModel

logger = logging.getLogger(__name__)


def chain_flows(elements: Sequence[Element]) -> List[Flow]:
    """Create ``flow_i`` from element ``i-1`` to element ``i`` for each adjacent pair."""
    return [
        Flow(id=f"flow_{i}", source_ref=source.id, target_ref=target.id)
        for i, (source, target) in enumerate(zip(elements, elements[1:]), start=1)
    ]


class FlowAssembler:
    """Builds an immutable ProcessModel from an ElementSet."""

    def __init__(self, process_id: str = PROCESS_ID):
        self.process_id = process_id

    def assemble(
        self,
        elements: Union[ElementSet, Sequence[Element]],
        process_name: Optional[str] = None,
    ) -> ProcessModel:
        """Assemble a process model.

        Args:
            elements: Extracted element set, or an already ordered sequence
            process_name: Process name (defaults to the generic suffix only)

        Returns:
            ProcessModel with elements in assembly order and chained flows
        """
        ordered = elements.ordered() if isinstance(elements, ElementSet) else list(elements)
        flows = chain_flows(ordered)

        logger.debug(f"Assembled {len(ordered)} elements into {len(flows)} flows")

        return ProcessModel(
            process_id=self.process_id,
            process_name=process_name if process_name is not None else "プロセス",
            elements=ordered,
            flows=flows,
        )


__all__ = ["FlowAssembler", "chain_flows"]
