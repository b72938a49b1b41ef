"""
Amazon States Language (ASL) to Graph Transformer

This module converts an ASL state machine definition back into the node/edge
graph shown in the Flow Builder. Every node keeps the original state verbatim
in ``full_state`` so that fields without a graph representation are not lost.

Node ids are handed out by a NodeIdGenerator supplied by the caller (usually the
editing session); a fresh generator is used per call when none is supplied.
"""

import copy
import logging
import math
from typing import Any, Dict, List, Optional

from ..data_schema.models import DEFAULT_LABEL, DEFAULT_STATE_TYPE, Edge, Node, NodeData, Position, clone_state

logger = logging.getLogger(__name__)

GRID_SPACING_X = 300
GRID_SPACING_Y = 200
GRID_OFFSET = 100


class NodeIdGenerator:
    """
    Hands out sequential node ids such as ``node-1``, ``node-2``.

    The generator is owned by whoever owns the graph, so id assignment is
    deterministic and restartable without any module-level counter.
    """

    def __init__(self, prefix: str = "node", start: int = 1):
        self.prefix = prefix
        self.next_value = start

    def peek(self) -> int:
        """Return the number the next id will use without consuming it."""
        return self.next_value

    def __call__(self) -> str:
        node_id = f"{self.prefix}-{self.next_value}"
        self.next_value += 1
        return node_id


def grid_position(index: int, count: int) -> Position:
    """
    Lay nodes out on a square-ish grid.

    Args:
        index: Position of the node in iteration order
        count: Total number of nodes

    Returns:
        A Position distinct for every index below count
    """
    cols = max(1, math.ceil(math.sqrt(count)))
    row, col = divmod(index, cols)
    return Position(x=col * GRID_SPACING_X + GRID_OFFSET, y=row * GRID_SPACING_Y + GRID_OFFSET)


class ASLToGraphTransformer:
    """
    Transforms an ASL definition into Flow Builder nodes and edges.

    Attributes:
        id_generator (NodeIdGenerator): Source of node ids for this transformer
    """

    def __init__(self, id_generator: Optional[NodeIdGenerator] = None):
        self.id_generator = id_generator or NodeIdGenerator()

    def transform_definition(self, definition: Any) -> Optional[Dict[str, List[Any]]]:
        """
        Transform an ASL definition into a graph.

        Only a missing StartAt or a missing/empty States mapping makes the
        definition unusable; individual malformed states or dangling transitions
        are tolerated and produce a partial graph.

        Args:
            definition: ASL definition dictionary

        Returns:
            Dictionary with "nodes" (List[Node]) and "edges" (List[Edge]), or None
        """
        if not isinstance(definition, dict):
            return None
        states = definition.get("States")
        if not states or not isinstance(states, dict) or not definition.get("StartAt"):
            return None

        nodes: List[Node] = []
        state_to_node_id: Dict[str, str] = {}
        count = len(states)

        for index, (state_name, state) in enumerate(states.items()):
            node_id = self.id_generator()
            state_to_node_id[state_name] = node_id
            nodes.append(self._transform_state(node_id, state_name, state, grid_position(index, count)))

        edges: List[Edge] = []
        for state_name, state in states.items():
            if isinstance(state, dict):
                edges.extend(self._transform_transitions(state_to_node_id[state_name], state, state_to_node_id))

        return {"nodes": nodes, "edges": edges}

    def _transform_state(self, node_id: str, state_name: str, state: Any, position: Position) -> Node:
        """Build the node for one state, keeping a copy of the whole state."""
        full_state = clone_state(state)
        data = NodeData(
            label=full_state.get("Comment") or state_name,
            state_type=full_state.get("Type") or DEFAULT_STATE_TYPE,
            state_name=state_name,
            resource=full_state.get("Resource"),
            parameters=clone_state(full_state["Parameters"]) if isinstance(full_state.get("Parameters"), dict) else None,
            result=copy.deepcopy(full_state.get("Result")),
            full_state=full_state,
        )
        return Node(id=node_id, data=data, position=position)

    def _transform_transitions(self, source_id: str, state: Dict[str, Any], state_to_node_id: Dict[str, str]) -> List[Edge]:
        """
        Build the outgoing edges of one state.

        Next gives a plain edge; a Choice state gives one labelled edge per rule
        and one "Default" edge. Targets missing from the definition are skipped.
        """
        edges = []

        next_state = state.get("Next")
        if next_state:
            target_id = state_to_node_id.get(next_state)
            if target_id:
                edges.append(Edge(id=f"edge-{source_id}-{target_id}", source=source_id, target=target_id))
            else:
                logger.debug("Skipping Next of %s: no state named %r", source_id, next_state)

        if state.get("Type") != "Choice":
            return edges

        choices = state.get("Choices")
        for index, choice in enumerate(choices if isinstance(choices, list) else []):
            if not isinstance(choice, dict) or not choice.get("Next"):
                continue
            target_id = state_to_node_id.get(choice["Next"])
            if not target_id:
                logger.debug("Skipping choice %d of %s: no state named %r", index, source_id, choice["Next"])
                continue
            edges.append(Edge(
                id=f"edge-{source_id}-{target_id}-{index}",
                source=source_id,
                target=target_id,
                label=choice.get("Variable") or f"Choice {index + 1}",
            ))

        default = state.get("Default")
        if default:
            target_id = state_to_node_id.get(default)
            if target_id:
                edges.append(Edge(
                    id=f"edge-{source_id}-{target_id}-default",
                    source=source_id,
                    target=target_id,
                    label=DEFAULT_LABEL,
                ))
            else:
                logger.debug("Skipping Default of %s: no state named %r", source_id, default)

        return edges


def convert_from_asl(definition: Any, id_generator: Optional[NodeIdGenerator] = None) -> Optional[Dict[str, List[Any]]]:
    """
    Convert an ASL definition to Flow Builder nodes and edges.

    Returns None when the definition lacks StartAt or a non-empty States mapping.
    """
    return ASLToGraphTransformer(id_generator).transform_definition(definition)
