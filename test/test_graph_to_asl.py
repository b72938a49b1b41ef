"""
Tests for GraphToASLTransformer

Tests designed for Coverlay compatibility:
- BrazilPython-Pytest-6.x
- Python-Pytest-cov-3.x and Coverage-6.x
"""

import copy

import pytest

from flow_builder_asl.data_schema.models import Edge, Node, NodeData
from flow_builder_asl.transform.graph_to_asl import GENERATED_COMMENT, GraphToASLTransformer, convert_to_asl


def _node(node_id, label=None, state_type="Pass", **data):
    return {"id": node_id, "data": {"stateType": state_type, "label": label or node_id, **data}}


def _edge(source, target, label=None):
    edge = {"id": f"e-{source}-{target}", "source": source, "target": target}
    if label is not None:
        edge["label"] = label
    return edge


class TestEmptyInput:
    """Test conversion of an empty graph."""

    def test_no_nodes_returns_none(self):
        """Test that an empty graph yields no definition."""
        assert convert_to_asl([], []) is None

    def test_no_nodes_with_edges_returns_none(self):
        """Test that edges alone do not produce a definition."""
        assert convert_to_asl([], [_edge("1", "2")]) is None


class TestLinearGraph:
    """Test conversion of plain sequential graphs."""

    def test_two_node_scenario(self):
        """Test the basic two node Pass chain."""
        nodes = [
            {"id": "1", "data": {"stateType": "Pass", "label": "A"}},
            {"id": "2", "data": {"stateType": "Pass", "label": "B"}},
        ]
        edges = [{"id": "e1", "source": "1", "target": "2"}]

        definition = convert_to_asl(nodes, edges)

        assert definition["Comment"] == GENERATED_COMMENT
        assert definition["StartAt"] == "State_1"
        assert list(definition["States"]) == ["State_1", "State_2"]
        state_1 = definition["States"]["State_1"]
        state_2 = definition["States"]["State_2"]
        assert state_1["Type"] == "Pass"
        assert state_1["Next"] == "State_2"
        assert "End" not in state_1
        assert state_1["Comment"] == "A"
        assert state_1["Result"] == "A"
        assert state_2["Type"] == "Pass"
        assert state_2["End"] is True
        assert "Next" not in state_2

    def test_single_node_is_start_and_end(self):
        """Test a lone node."""
        definition = convert_to_asl([_node("only")], [])

        assert definition["StartAt"] == "State_only"
        assert definition["States"]["State_only"]["End"] is True

    def test_start_node_is_first_without_incoming_edge(self):
        """Test that the start node is found regardless of node order."""
        nodes = [_node("b"), _node("a"), _node("c")]
        edges = [_edge("a", "b"), _edge("b", "c")]

        definition = convert_to_asl(nodes, edges)

        assert definition["StartAt"] == "State_a"
        assert definition["States"]["State_a"]["Next"] == "State_b"
        assert definition["States"]["State_b"]["Next"] == "State_c"
        assert definition["States"]["State_c"]["End"] is True

    def test_cycle_falls_back_to_first_node(self):
        """Test that a ring starts at the first node in order."""
        nodes = [_node("x"), _node("y")]
        edges = [_edge("x", "y"), _edge("y", "x")]

        definition = convert_to_asl(nodes, edges)

        assert definition["StartAt"] == "State_x"
        assert definition["States"]["State_x"]["Next"] == "State_y"
        assert definition["States"]["State_y"]["Next"] == "State_x"

    def test_last_edge_wins_for_plain_fan_out(self):
        """Test that plain nodes keep only the last outgoing edge."""
        nodes = [_node("1"), _node("2"), _node("3")]
        edges = [_edge("1", "2"), _edge("1", "3")]

        definition = convert_to_asl(nodes, edges)

        assert definition["States"]["State_1"]["Next"] == "State_3"
        assert definition["States"]["State_2"]["End"] is True

    def test_disconnected_nodes_are_all_converted(self):
        """Test that unreachable nodes still become states."""
        nodes = [_node("1"), _node("2"), _node("island")]
        edges = [_edge("1", "2")]

        definition = convert_to_asl(nodes, edges)

        assert len(definition["States"]) == 3
        assert definition["States"]["State_island"]["End"] is True


class TestDanglingEdges:
    """Test edges referencing nodes that are not on the canvas."""

    def test_edge_to_unknown_target_is_ignored(self):
        """Test that an edge to a missing node does not create a transition."""
        definition = convert_to_asl([_node("1")], [_edge("1", "ghost")])

        state = definition["States"]["State_1"]
        assert state["End"] is True
        assert "Next" not in state

    def test_edge_from_unknown_source_does_not_affect_start(self):
        """Test that a dangling incoming edge does not disqualify the start node."""
        nodes = [_node("1"), _node("2")]
        edges = [_edge("ghost", "1"), _edge("1", "2")]

        definition = convert_to_asl(nodes, edges)

        assert definition["StartAt"] == "State_1"


class TestStateFields:
    """Test how node data maps onto state fields."""

    def test_unknown_type_defaults_to_pass(self):
        """Test that an unknown state type is exported as Pass."""
        definition = convert_to_asl([_node("1", state_type="Teleport")], [])

        assert definition["States"]["State_1"]["Type"] == "Pass"

    def test_missing_data_defaults(self):
        """Test a node with no data bag at all."""
        definition = convert_to_asl([{"id": "7"}], [])

        state = definition["States"]["State_7"]
        assert state["Type"] == "Pass"
        assert state["Comment"] == "Pass state 7"
        assert state["Result"] == "Pass"

    def test_task_fields(self):
        """Test resource and parameters on a Task node."""
        node = _node(
            "t",
            label="Call lambda",
            state_type="Task",
            resource="arn:aws:lambda:us-east-1:123456789012:function:f",
            parameters={"key.$": "$.value"},
        )

        state = convert_to_asl([node], [])["States"]["State_t"]

        assert state["Type"] == "Task"
        assert state["Resource"] == "arn:aws:lambda:us-east-1:123456789012:function:f"
        assert state["Parameters"] == {"key.$": "$.value"}
        assert "Result" not in state

    def test_pass_result_preferred_over_label(self):
        """Test that an explicit result is used for Pass states."""
        state = convert_to_asl([_node("1", label="L", result={"x": 1})], [])["States"]["State_1"]

        assert state["Result"] == {"x": 1}

    def test_preserved_fields_pass_through(self):
        """Test that fields of the preserved state without graph representation survive."""
        node = Node(
            id="w",
            data=NodeData(
                label="Wait a bit",
                state_type="Wait",
                full_state={"Type": "Wait", "Seconds": 30, "Next": "Old", "Comment": "old comment"},
            ),
        )

        state = convert_to_asl([node], [])["States"]["State_w"]

        assert state["Seconds"] == 30
        assert state["Comment"] == "Wait a bit"
        assert state["End"] is True
        assert "Next" not in state

    def test_preserved_fields_dropped_when_type_changed(self):
        """Test that preserved fields are ignored once the node claims another type."""
        node = Node(id="w", data=NodeData(label="now pass", state_type="Pass", full_state={"Type": "Wait", "Seconds": 30}))

        state = convert_to_asl([node], [])["States"]["State_w"]

        assert "Seconds" not in state

    def test_accepts_model_objects(self):
        """Test that Node and Edge objects are accepted as well as dictionaries."""
        nodes = [Node(id="1", data=NodeData(label="A")), Node(id="2", data=NodeData(label="B"))]
        edges = [Edge(id="e", source="1", target="2")]

        definition = convert_to_asl(nodes, edges)

        assert definition["States"]["State_1"]["Next"] == "State_2"


class TestChoiceFanOut:
    """Test Choice nodes with labelled outgoing edges."""

    @pytest.fixture
    def choice_graph(self):
        nodes = [_node("c", state_type="Choice"), _node("a"), _node("b"), _node("d")]
        edges = [
            _edge("c", "a", "$.status"),
            _edge("c", "b", "$.retry"),
            _edge("c", "d", "Default"),
        ]
        return nodes, edges

    def test_choice_emits_choices_and_default(self, choice_graph):
        """Test that a Choice node emits one rule per edge plus Default."""
        state = convert_to_asl(*choice_graph)["States"]["State_c"]

        assert state["Type"] == "Choice"
        assert state["Choices"] == [
            {"Variable": "$.status", "Next": "State_a"},
            {"Variable": "$.retry", "Next": "State_b"},
        ]
        assert state["Default"] == "State_d"
        assert "Next" not in state
        assert "End" not in state

    def test_choice_reuses_preserved_rules(self):
        """Test that preserved comparison operators survive export."""
        full_state = {
            "Type": "Choice",
            "Choices": [
                {"Variable": "$.status", "StringEquals": "PAID", "Next": "Ship"},
                {"And": [{"Variable": "$.a", "IsPresent": True}], "Next": "Retry"},
            ],
            "Default": "Cancel",
        }
        nodes = [
            Node(id="c", data=NodeData(label="c", state_type="Choice", full_state=full_state)),
            Node(id="s", data=NodeData(label="s")),
            Node(id="r", data=NodeData(label="r")),
        ]
        edges = [
            Edge(id="1", source="c", target="s", label="$.status"),
            Edge(id="2", source="c", target="r", label="Choice 2"),
        ]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert state["Choices"] == [
            {"Variable": "$.status", "StringEquals": "PAID", "Next": "State_s"},
            {"And": [{"Variable": "$.a", "IsPresent": True}], "Next": "State_r"},
        ]
        assert "Default" not in state
        assert full_state["Choices"][0]["Next"] == "Ship"

    def test_choice_without_edges_is_terminal(self):
        """Test that a Choice node without outgoing edges is marked End."""
        state = convert_to_asl([_node("c", state_type="Choice")], [])["States"]["State_c"]

        assert state["End"] is True
        assert "Choices" not in state


class TestChoiceRuleMatching:
    """Test which preserved rule each Choice edge picks up."""

    @pytest.fixture
    def range_check(self):
        return {
            "Type": "Choice",
            "Choices": [
                {"Variable": "$.x", "NumericLessThan": 10, "Next": "Small"},
                {"Variable": "$.x", "NumericGreaterThanEquals": 10, "Next": "Large"},
            ],
            "Default": "Other",
        }

    def _imported(self, node_id, state_name, state_type="Pass"):
        return Node(id=node_id, data=NodeData(label=state_name, state_type=state_type, state_name=state_name))

    def test_rule_follows_its_original_target(self, range_check):
        """Test that a branch keeps its own condition when a sibling on the same Variable is gone."""
        choice = Node(id="c", data=NodeData(label="Check", state_type="Choice", state_name="Check", full_state=range_check))
        nodes = [choice, self._imported("large", "Large"), self._imported("other", "Other")]
        edges = [
            Edge(id="1", source="c", target="large", label="$.x"),
            Edge(id="2", source="c", target="other", label="Default"),
        ]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert state["Choices"] == [{"Variable": "$.x", "NumericGreaterThanEquals": 10, "Next": "State_large"}]
        assert state["Default"] == "State_other"

    def test_rules_sharing_a_target_are_told_apart_by_label(self):
        """Test two rules with the same Next but different Variables."""
        full_state = {
            "Type": "Choice",
            "Choices": [
                {"Variable": "$.a", "IsPresent": True, "Next": "T"},
                {"Variable": "$.b", "IsPresent": True, "Next": "T"},
            ],
        }
        choice = Node(id="c", data=NodeData(label="c", state_type="Choice", full_state=full_state))
        nodes = [choice, self._imported("t", "T")]
        edges = [
            Edge(id="1", source="c", target="t", label="$.b"),
            Edge(id="2", source="c", target="t", label="$.a"),
        ]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert [r["Variable"] for r in state["Choices"]] == ["$.b", "$.a"]

    def test_ambiguous_label_does_not_reuse_a_rule(self, range_check):
        """Test that a label shared by several unmatched rules borrows no operator."""
        choice = Node(id="c", data=NodeData(label="c", state_type="Choice", full_state=range_check))
        nodes = [choice, Node(id="new", data=NodeData(label="new"))]
        edges = [Edge(id="1", source="c", target="new", label="$.x")]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert state["Choices"] == [{"Variable": "$.x", "Next": "State_new"}]


class TestUnlabelledChoiceEdges:
    """Test Choice edges that carry no condition."""

    def test_single_unlabelled_edge_links_with_next(self):
        """Test that a Choice without any conditional edge is linked like a plain state."""
        definition = convert_to_asl([_node("c", state_type="Choice"), _node("a")], [_edge("c", "a")])

        state = definition["States"]["State_c"]
        assert state["Next"] == "State_a"
        assert "Choices" not in state
        assert "End" not in state

    def test_unlabelled_edge_becomes_default(self):
        """Test that an unlabelled edge next to labelled ones fills the free Default."""
        nodes = [_node("c", state_type="Choice"), _node("a"), _node("b")]
        edges = [_edge("c", "a", "$.flag"), _edge("c", "b")]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert state["Choices"] == [{"Variable": "$.flag", "Next": "State_a"}]
        assert state["Default"] == "State_b"

    def test_unlabelled_edge_dropped_when_default_taken(self):
        """Test that no rule without a condition is emitted."""
        nodes = [_node("c", state_type="Choice"), _node("a"), _node("b"), _node("d")]
        edges = [_edge("c", "a", "$.flag"), _edge("c", "b"), _edge("c", "d", "Default")]

        state = convert_to_asl(nodes, edges)["States"]["State_c"]

        assert state["Choices"] == [{"Variable": "$.flag", "Next": "State_a"}]
        assert state["Default"] == "State_d"


class TestGuarantees:
    """Test properties that hold for every export."""

    @pytest.fixture
    def graph(self):
        nodes = [_node(str(i)) for i in range(1, 6)] + [_node("c", state_type="Choice")]
        edges = [
            _edge("1", "2"), _edge("2", "c"), _edge("c", "3", "$.x"),
            _edge("c", "4", "Default"), _edge("3", "5"), _edge("4", "5"), _edge("1", "ghost"),
        ]
        return nodes, edges

    def test_export_is_idempotent(self, graph):
        """Test that exporting an unmodified graph twice gives identical definitions."""
        assert convert_to_asl(*graph) == convert_to_asl(*graph)

    def test_next_and_end_are_mutually_exclusive(self, graph):
        """Test that every non-Choice state has exactly one of Next and End."""
        for name, state in convert_to_asl(*graph)["States"].items():
            if state["Type"] == "Choice" and ("Choices" in state or "Default" in state):
                assert "Next" not in state and "End" not in state, name
            else:
                assert ("Next" in state) != ("End" in state), name

    def test_inputs_are_not_mutated(self, graph):
        """Test that conversion leaves its inputs untouched."""
        nodes, edges = graph
        before = (copy.deepcopy(nodes), copy.deepcopy(edges))

        convert_to_asl(nodes, edges)

        assert (nodes, edges) == before

    def test_state_names_derive_from_node_ids(self):
        """Test the State_<id> naming scheme."""
        assert GraphToASLTransformer()._get_state_name("node-42") == "State_node-42"
