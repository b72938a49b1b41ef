"""
Graph data model for the Flow Builder.

This module defines the node and edge structures exchanged with the graph editor.
Nodes carry a typed core (label, state kind, resource, parameters, result) and an
opaque ``full_state`` holding the original ASL state verbatim when the node was
produced from an imported definition.

ASL definitions themselves stay plain JSON-compatible dictionaries.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

STATE_TYPES = ("Pass", "Task", "Choice", "Wait", "Succeed", "Fail", "Parallel", "Map")
DEFAULT_STATE_TYPE = "Pass"
DEFAULT_NODE_TYPE = "pass"
DEFAULT_LABEL = "Default"

# camelCase wire keys used by the graph editor
_DATA_KEYS = {
    "label": "label",
    "stateType": "state_type",
    "stateName": "state_name",
    "resource": "resource",
    "parameters": "parameters",
    "result": "result",
    "fullState": "full_state",
}


@dataclass
class Position:
    """Canvas position of a node."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Position":
        if not data:
            return cls()
        return cls(x=data.get("x", 0.0), y=data.get("y", 0.0))

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass
class NodeData:
    """
    Data bag attached to a graph node.

    Attributes:
        label: Display label, exported as the state Comment
        state_type: Claimed ASL state kind (Pass, Task, Choice, ...)
        state_name: Original state name when imported from a definition
        resource: Resource ARN for Task states
        parameters: Parameters mapping
        result: Result value for Pass states
        full_state: Original state object, kept verbatim for fields the graph cannot model
        extra: Any other editor keys, preserved untouched
    """

    label: str = ""
    state_type: str = DEFAULT_STATE_TYPE
    state_name: Optional[str] = None
    resource: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    result: Any = None
    full_state: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NodeData":
        data = data or {}
        kwargs = {attr: data[key] for key, attr in _DATA_KEYS.items() if data.get(key) is not None}
        extra = {k: v for k, v in data.items() if k not in _DATA_KEYS}
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        for key, attr in _DATA_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result


@dataclass
class Node:
    """A single workflow step on the canvas."""

    id: str
    data: NodeData = field(default_factory=NodeData)
    type: str = DEFAULT_NODE_TYPE
    position: Position = field(default_factory=Position)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            id=str(data["id"]),
            data=NodeData.from_dict(data.get("data")),
            type=data.get("type") or DEFAULT_NODE_TYPE,
            position=Position.from_dict(data.get("position")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "data": self.data.to_dict(),
            "position": self.position.to_dict(),
        }


@dataclass
class Edge:
    """A transition between two nodes, optionally labelled with a Choice discriminant."""

    id: str
    source: str
    target: str
    label: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.label == DEFAULT_LABEL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        source = str(data["source"])
        target = str(data["target"])
        return cls(
            id=str(data.get("id") or f"edge-{source}-{target}"),
            source=source,
            target=target,
            label=data.get("label"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": self.id, "source": self.source, "target": self.target}
        if self.label is not None:
            result["label"] = self.label
        return result


def as_node(node: Any) -> Node:
    """Accept a Node or its editor dictionary form."""
    if isinstance(node, Node):
        return node
    return Node.from_dict(node)


def as_edge(edge: Any) -> Edge:
    """Accept an Edge or its editor dictionary form."""
    if isinstance(edge, Edge):
        return edge
    return Edge.from_dict(edge)


def graph_to_dict(nodes, edges) -> Dict[str, Any]:
    """Serialize a graph to the editor's JSON shape."""
    return {
        "nodes": [as_node(n).to_dict() for n in nodes],
        "edges": [as_edge(e).to_dict() for e in edges],
    }


def clone_state(state: Any) -> Dict[str, Any]:
    """Deep copy an ASL state, treating anything but a dict as an empty state."""
    if not isinstance(state, dict):
        return {}
    return copy.deepcopy(state)
