"""
Flow Session

This module holds the editable graph of one Flow Builder session together with
the definition it was imported from, if any.

Session lifecycle:
- empty -> editing (add/connect/delete) -> exported
- empty -> imported (original definition retained) -> editing -> exported

A structural edit after an import discards the retained definition, so the
next export is derived from the graph and the edit shows up in the output.
"""

import copy
import json
import logging
import random
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..data_schema.models import DEFAULT_LABEL, Edge, Node, NodeData, Position, as_edge, as_node, graph_to_dict
from ..errors import EmptyGraphError, GraphEditError, MalformedDefinitionError
from ..transform import NodeIdGenerator, convert_from_asl, convert_to_asl

logger = logging.getLogger(__name__)


class ExportStrategy(Enum):
    """How a definition is produced on export."""

    PRESERVED = "preserved"  # re-emit the imported definition untouched
    DERIVED = "derived"  # rebuild from the graph


class SessionStatus(Enum):
    EMPTY = "empty"
    EDITING = "editing"
    IMPORTED = "imported"
    EXPORTED = "exported"


class FlowSession:
    """
    Editable graph state for one Flow Builder session.

    Attributes:
        nodes (List[Node]): Nodes on the canvas, in insertion order
        edges (List[Edge]): Edges on the canvas, in insertion order
        id_generator (NodeIdGenerator): Source of ids for added and imported nodes
        imported_definition (Optional[Dict[str, Any]]): Definition retained since the last import
        status (SessionStatus): Current lifecycle status
    """

    def __init__(self, id_generator: Optional[NodeIdGenerator] = None):
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.id_generator = id_generator or NodeIdGenerator()
        self.imported_definition: Optional[Dict[str, Any]] = None
        self.status = SessionStatus.EMPTY

    @property
    def has_imported_definition(self) -> bool:
        return self.imported_definition is not None

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def _structural_edit(self) -> None:
        """Record a structural edit, dropping any retained imported definition."""
        if self.imported_definition is not None:
            logger.debug("Structural edit after import, discarding retained definition")
        self.imported_definition = None
        self.status = SessionStatus.EDITING if self.nodes else SessionStatus.EMPTY

    def add_pass_state(self, position: Optional[Position] = None) -> Node:
        """
        Add a new Pass state node with a generated id and label.

        Args:
            position: Canvas position; a random spot is used when omitted

        Returns:
            The created node
        """
        number = self.id_generator.peek()
        node_id = self.id_generator()
        if position is None:
            position = Position(x=random.random() * 400 + 100, y=random.random() * 400 + 100)
        node = Node(id=node_id, data=NodeData(label=f"Pass State {number}", state_type="Pass"), position=position)
        return self.add_node(node)

    def add_node(self, node: Any) -> Node:
        """Add an existing node to the canvas."""
        node = as_node(node)
        if self.get_node(node.id) is not None:
            raise GraphEditError(f"Node '{node.id}' already exists")
        self.nodes.append(node)
        self._reserve_ids([node])
        self._structural_edit()
        return node

    def _reserve_ids(self, nodes: Iterable[Node]) -> None:
        """Advance the id generator past any ``<prefix>-<n>`` id among nodes."""
        prefix = f"{self.id_generator.prefix}-"
        for node in nodes:
            suffix = node.id[len(prefix):] if node.id.startswith(prefix) else ""
            if suffix.isdigit() and int(suffix) >= self.id_generator.next_value:
                self.id_generator.next_value = int(suffix) + 1

    def connect(self, source: str, target: str, label: Optional[str] = None) -> Edge:
        """
        Connect two nodes.

        Connecting an already connected pair with the same label returns the
        existing edge and is not treated as an edit.

        Args:
            source: Source node id
            target: Target node id
            label: Optional Choice discriminant, "Default" for the fallback branch

        Returns:
            The edge between the two nodes

        Raises:
            GraphEditError: If either node is not on the canvas
        """
        for node_id in (source, target):
            if self.get_node(node_id) is None:
                raise GraphEditError(f"Cannot connect: node '{node_id}' does not exist")

        for edge in self.edges:
            if edge.source == source and edge.target == target and edge.label == label:
                return edge

        edge_id = f"edge-{source}-{target}"
        existing_ids = {e.id for e in self.edges}
        suffix = 1
        while edge_id in existing_ids:
            edge_id = f"edge-{source}-{target}-{suffix}"
            suffix += 1

        edge = Edge(id=edge_id, source=source, target=target, label=label)
        self.edges.append(edge)
        self._structural_edit()
        return edge

    def connect_default(self, source: str, target: str) -> Edge:
        """Connect a Choice node to its fallback branch."""
        return self.connect(source, target, DEFAULT_LABEL)

    def delete_nodes(self, node_ids: Iterable[str]) -> List[Node]:
        """
        Delete nodes and every edge touching them.

        Args:
            node_ids: Ids of the nodes to delete

        Returns:
            The deleted nodes

        Raises:
            GraphEditError: If any id is not on the canvas
        """
        node_ids = set(node_ids)
        missing = node_ids - {n.id for n in self.nodes}
        if missing:
            raise GraphEditError(f"Cannot delete: unknown node(s) {', '.join(sorted(missing))}")

        deleted = [n for n in self.nodes if n.id in node_ids]
        self.nodes = [n for n in self.nodes if n.id not in node_ids]
        self.edges = [e for e in self.edges if e.source not in node_ids and e.target not in node_ids]
        self._structural_edit()
        return deleted

    def move_node(self, node_id: str, x: float, y: float) -> Node:
        """Move a node on the canvas. Positions have no meaning in ASL, so this is not a structural edit."""
        node = self.get_node(node_id)
        if node is None:
            raise GraphEditError(f"Cannot move: node '{node_id}' does not exist")
        node.position = Position(x=x, y=y)
        return node

    def clear(self) -> None:
        """Remove everything from the canvas."""
        self.nodes = []
        self.edges = []
        self.imported_definition = None
        self.status = SessionStatus.EMPTY

    def import_definition(self, definition: Dict[str, Any]) -> Dict[str, List[Any]]:
        """
        Replace the canvas with the graph of an ASL definition.

        The definition is retained so an unedited graph exports it unchanged.

        Args:
            definition: ASL definition dictionary

        Returns:
            Dictionary with the imported "nodes" and "edges"

        Raises:
            MalformedDefinitionError: If the definition lacks StartAt or States
        """
        graph = convert_from_asl(definition, self.id_generator)
        if graph is None:
            raise MalformedDefinitionError()

        self.nodes = list(graph["nodes"])
        self.edges = list(graph["edges"])
        self.imported_definition = copy.deepcopy(definition)
        self.status = SessionStatus.IMPORTED
        return graph

    def export_definition(self, strategy: Optional[ExportStrategy] = None) -> Dict[str, Any]:
        """
        Produce the ASL definition for the current canvas.

        Without an explicit strategy the retained imported definition is
        re-emitted when there is one, otherwise the definition is derived
        from the graph.

        Args:
            strategy: Force PRESERVED or DERIVED export

        Returns:
            The ASL definition dictionary

        Raises:
            EmptyGraphError: If there is nothing to export
        """
        if strategy is None:
            strategy = ExportStrategy.PRESERVED if self.has_imported_definition else ExportStrategy.DERIVED

        if strategy is ExportStrategy.PRESERVED and self.has_imported_definition:
            definition = copy.deepcopy(self.imported_definition)
        else:
            definition = convert_to_asl(self.nodes, self.edges)
            if definition is None:
                raise EmptyGraphError()

        if not self.has_imported_definition:
            self.status = SessionStatus.EXPORTED
        return definition

    def export_json(self, strategy: Optional[ExportStrategy] = None, indent: int = 2) -> str:
        """Export the definition as pretty-printed JSON."""
        return json.dumps(self.export_definition(strategy), indent=indent)

    def to_graph_dict(self) -> Dict[str, Any]:
        """Serialize the canvas to the graph editor's JSON shape."""
        return graph_to_dict(self.nodes, self.edges)

    def load_graph(self, nodes: Iterable[Any], edges: Iterable[Any]) -> None:
        """
        Replace the canvas with an editor graph.

        Loading a saved graph counts as a structural edit. The id generator is
        advanced past any ``<prefix>-<n>`` id so new nodes do not collide.
        """
        self.nodes = [as_node(n) for n in nodes]
        self.edges = [as_edge(e) for e in edges]
        self._reserve_ids(self.nodes)
        self._structural_edit()
