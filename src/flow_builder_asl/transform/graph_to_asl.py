"""
Graph to Amazon States Language (ASL) Transformer

This module converts the node/edge graph drawn in the Flow Builder into an ASL
state machine definition that can be deployed to AWS Step Functions.

The transformer handles:
- Start state detection (first node without incoming edges, falling back to the first node)
- Plain transitions (Next, last edge from a node wins)
- Choice fan-out (Choices rules per labelled edge plus Default)
- Terminal states (End for every node without outgoing edges)
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..data_schema.models import DEFAULT_STATE_TYPE, STATE_TYPES, Edge, Node, as_edge, as_node

logger = logging.getLogger(__name__)

GENERATED_COMMENT = "State machine generated from Flow Builder"

# Fields rebuilt from graph edges, never copied from a preserved state
_TRANSITION_FIELDS = ("Next", "End", "Choices", "Default")


class GraphToASLTransformer:
    """
    Transforms a Flow Builder graph into an ASL state machine definition.

    The transformer is stateless between calls; each call to ``transform_graph``
    works on its own copies of the states it builds.
    """

    def transform_graph(self, nodes: Sequence[Any], edges: Sequence[Any]) -> Optional[Dict[str, Any]]:
        """
        Transform nodes and edges into an ASL definition.

        Args:
            nodes: Graph nodes, as Node objects or editor dictionaries
            edges: Graph edges, as Edge objects or editor dictionaries

        Returns:
            The ASL definition dictionary, or None when there are no nodes to export
        """
        if not nodes:
            return None

        nodes = [as_node(n) for n in nodes]
        edges = self._resolvable_edges(nodes, [as_edge(e) for e in edges])

        state_names = {node.id: self._get_state_name(node.id) for node in nodes}
        nodes_by_id = {node.id: node for node in nodes}
        start_node = self._find_start_node(nodes, edges)

        states: Dict[str, Dict[str, Any]] = {}
        for node in nodes:
            states[state_names[node.id]] = self._transform_node(node)

        outgoing: Dict[str, List[Edge]] = {}
        for edge in edges:
            outgoing.setdefault(edge.source, []).append(edge)

        for node in nodes:
            node_edges = outgoing.get(node.id)
            if not node_edges:
                continue
            state = states[state_names[node.id]]
            if state["Type"] == "Choice":
                self._link_choice(state, node, node_edges, state_names, nodes_by_id)
            else:
                for edge in node_edges:
                    state.pop("End", None)
                    state["Next"] = state_names[edge.target]

        # Nodes without outgoing edges end the execution regardless of edge order
        for node in nodes:
            if node.id not in outgoing:
                state = states[state_names[node.id]]
                state.pop("Next", None)
                state["End"] = True

        return {
            "Comment": GENERATED_COMMENT,
            "StartAt": state_names[start_node.id],
            "States": states,
        }

    def _get_state_name(self, node_id: str) -> str:
        """
        Derive the state name for a node.

        State names are a pure function of the node id so that exporting an
        unmodified graph twice gives the same definition.
        """
        return f"State_{node_id}"

    def _resolvable_edges(self, nodes: List[Node], edges: List[Edge]) -> List[Edge]:
        """Drop edges whose source or target is not on the canvas."""
        node_ids = {node.id for node in nodes}
        resolvable = []
        for edge in edges:
            if edge.source in node_ids and edge.target in node_ids:
                resolvable.append(edge)
            else:
                logger.debug("Ignoring edge %s with unknown endpoint %s -> %s", edge.id, edge.source, edge.target)
        return resolvable

    def _find_start_node(self, nodes: List[Node], edges: List[Edge]) -> Node:
        """
        Pick the start node: the first node without incoming edges.

        When every node has an incoming edge (the graph is a ring) the first node is
        used as is; no attempt is made to validate that it is a sensible entry point.
        """
        targets = {edge.target for edge in edges}
        for node in nodes:
            if node.id not in targets:
                return node
        logger.debug("Every node has an incoming edge, starting at first node %s", nodes[0].id)
        return nodes[0]

    def _transform_node(self, node: Node) -> Dict[str, Any]:
        """
        Build the ASL state for a single node.

        Unknown or missing state kinds fall back to Pass. Fields of the preserved
        original state that the graph cannot represent are carried over as long as
        the node still claims the original state's type.

        Args:
            node: The node to transform

        Returns:
            The state dictionary, optimistically marked with "End": True
        """
        data = node.data
        state_type = data.state_type if data.state_type in STATE_TYPES else DEFAULT_STATE_TYPE
        if state_type != data.state_type:
            logger.debug("Node %s has unknown state type %r, using %s", node.id, data.state_type, state_type)

        state: Dict[str, Any] = {"Type": state_type}
        full_state = data.full_state if isinstance(data.full_state, dict) else {}
        if full_state.get("Type") == state_type:
            for key, value in full_state.items():
                if key not in _TRANSITION_FIELDS:
                    state[key] = copy.deepcopy(value)

        state["Comment"] = data.label or f"{state_type} state {node.id}"
        if data.resource is not None:
            state["Resource"] = data.resource
        if data.parameters is not None:
            state["Parameters"] = copy.deepcopy(data.parameters)
        if state_type == "Pass":
            state["Result"] = copy.deepcopy(data.result) if data.result is not None else (data.label or "Pass")

        state["End"] = True
        return state

    def _link_choice(self, state: Dict[str, Any], node: Node, edges: List[Edge],
                     state_names: Dict[str, str], nodes_by_id: Dict[str, Node]) -> None:
        """
        Turn the outgoing edges of a Choice node into Choices rules and a Default.

        An edge labelled "Default" becomes the Default target; every other edge
        becomes one rule, in edge order. Rules reuse the preserved original rule
        of the branch so comparison operators survive a round trip: first by the
        rule's original Next matching the target node's imported state name,
        then by an unambiguous label (the rule's Variable or "Choice <n>").

        An edge with neither a label nor a preserved rule has no condition. It
        becomes the Default when that is free and is dropped otherwise. A Choice
        node whose edges all lack a condition is linked like a plain state.

        Args:
            state: The Choice state being built, modified in place
            node: The Choice node
            edges: Outgoing edges of the node, all resolvable
            state_names: Mapping of node id to state name
            nodes_by_id: Mapping of node id to node
        """
        original_rules: List[Tuple[int, Dict[str, Any]]] = []
        if isinstance(node.data.full_state, dict):
            choices = node.data.full_state.get("Choices")
            original_rules = [(i, r) for i, r in enumerate(choices if isinstance(choices, list) else []) if isinstance(r, dict)]

        matched = self._match_rules(edges, original_rules, nodes_by_id)

        if all(not edge.label and position not in matched for position, edge in enumerate(edges)):
            logger.debug("Choice node %s has no conditional edges, linking it with Next", node.id)
            state.pop("End", None)
            state["Next"] = state_names[edges[-1].target]
            return

        state.pop("End", None)
        state.pop("Next", None)
        rules = []
        for position, edge in enumerate(edges):
            target = state_names[edge.target]
            if edge.is_default:
                state["Default"] = target
                continue
            if position in matched:
                rule = matched[position]
            elif edge.label:
                rule = {"Variable": edge.label}
            elif "Default" not in state and not any(e.is_default for e in edges):
                logger.debug("Unlabelled edge %s of Choice node %s used as Default", edge.id, node.id)
                state["Default"] = target
                continue
            else:
                logger.debug("Dropping unlabelled edge %s of Choice node %s", edge.id, node.id)
                continue
            rule["Next"] = target
            rules.append(rule)

        if rules:
            state["Choices"] = rules

    def _match_rules(self, edges: List[Edge], original_rules: List[Tuple[int, Dict[str, Any]]],
                     nodes_by_id: Dict[str, Node]) -> Dict[int, Dict[str, Any]]:
        """
        Pair non-default edges with preserved rules.

        Matching by the target's original state name runs over all edges before
        any label is considered, so a label shared by several rules never takes
        a rule whose branch is still on the canvas.

        Returns:
            Mapping of edge position to a fresh copy of its rule without Next
        """
        used = set()
        pairs: Dict[int, int] = {}
        rules_by_index = dict(original_rules)

        for position, edge in enumerate(edges):
            if edge.is_default:
                continue
            state_name = nodes_by_id[edge.target].data.state_name
            if state_name is None:
                continue
            same_target = [index for index, rule in original_rules if index not in used and rule.get("Next") == state_name]
            if not same_target:
                continue
            # several rules may share a target; the label decides between them
            labelled = [index for index in same_target if self._label_matches(edge.label, index, rules_by_index[index])]
            index = (labelled or same_target)[0]
            pairs[position] = index
            used.add(index)

        for position, edge in enumerate(edges):
            if edge.is_default or position in pairs or not edge.label:
                continue
            candidates = [
                index for index, rule in original_rules
                if index not in used and self._label_matches(edge.label, index, rule)
            ]
            if len(candidates) == 1:
                pairs[position] = candidates[0]
                used.add(candidates[0])
            elif candidates:
                logger.debug("Label %r of edge %s matches %d rules, not reusing any", edge.label, edge.id, len(candidates))

        return {
            position: {k: copy.deepcopy(v) for k, v in rules_by_index[index].items() if k != "Next"}
            for position, index in pairs.items()
        }

    def _label_matches(self, label: Optional[str], index: int, rule: Dict[str, Any]) -> bool:
        """Whether an edge label names a rule, by its Variable or as "Choice <n>"."""
        if not label:
            return False
        return rule.get("Variable") == label or label == f"Choice {index + 1}"


def convert_to_asl(nodes: Sequence[Any], edges: Sequence[Any]) -> Optional[Dict[str, Any]]:
    """
    Convert Flow Builder nodes and edges to an ASL definition.

    Returns None when there are no nodes, signalling that export should be refused.
    """
    return GraphToASLTransformer().transform_graph(nodes, edges)
