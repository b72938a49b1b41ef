"""
Data schema package for the Flow Builder.

This package provides the graph data model (nodes, edges, positions) and
centralized access to bundled sample ASL definitions.
"""

from .models import (
    DEFAULT_LABEL,
    DEFAULT_STATE_TYPE,
    STATE_TYPES,
    Edge,
    Node,
    NodeData,
    Position,
    as_edge,
    as_node,
    graph_to_dict,
)
from .utils import get_sample_definition, list_sample_definitions

__all__ = [
    "STATE_TYPES",
    "DEFAULT_STATE_TYPE",
    "DEFAULT_LABEL",
    "Node",
    "NodeData",
    "Edge",
    "Position",
    "as_node",
    "as_edge",
    "graph_to_dict",
    "get_sample_definition",
    "list_sample_definitions",
]
