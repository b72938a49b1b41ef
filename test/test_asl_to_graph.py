"""
Tests for ASLToGraphTransformer

Tests designed for Coverlay compatibility:
- BrazilPython-Pytest-6.x
- Python-Pytest-cov-3.x and Coverage-6.x
"""

import copy

import pytest

from flow_builder_asl.data_schema import get_sample_definition
from flow_builder_asl.metrics.structural_metric import StructuralMetric
from flow_builder_asl.transform.asl_to_graph import ASLToGraphTransformer, NodeIdGenerator, convert_from_asl, grid_position
from flow_builder_asl.transform.graph_to_asl import convert_to_asl


class TestNodeIdGenerator:
    """Test NodeIdGenerator."""

    def test_sequential_ids(self):
        """Test ids are handed out in order."""
        generator = NodeIdGenerator()

        assert [generator(), generator(), generator()] == ["node-1", "node-2", "node-3"]

    def test_custom_prefix_and_start(self):
        """Test prefix and starting number."""
        generator = NodeIdGenerator(prefix="step", start=10)

        assert generator.peek() == 10
        assert generator() == "step-10"
        assert generator.peek() == 11


class TestGridPosition:
    """Test grid_position layout."""

    def test_first_positions(self):
        """Test the first row of a nine node grid."""
        assert grid_position(0, 9).to_dict() == {"x": 100, "y": 100}
        assert grid_position(1, 9).to_dict() == {"x": 400, "y": 100}
        assert grid_position(3, 9).to_dict() == {"x": 100, "y": 300}

    def test_positions_are_distinct(self):
        """Test that every node gets its own spot."""
        positions = {(p.x, p.y) for p in (grid_position(i, 7) for i in range(7))}

        assert len(positions) == 7


class TestStructuralPreconditions:
    """Test definitions that cannot be imported."""

    @pytest.mark.parametrize("definition", [
        {"States": {}, "StartAt": "x"},
        {"StartAt": "x"},
        {"States": {"A": {"Type": "Pass", "End": True}}},
        {"States": ["not", "a", "mapping"], "StartAt": "x"},
        None,
        "not a dict",
    ])
    def test_returns_none(self, definition):
        """Test that missing StartAt or States yields no graph."""
        assert convert_from_asl(definition) is None


class TestNodes:
    """Test node creation."""

    @pytest.fixture
    def definition(self):
        return {
            "StartAt": "First",
            "States": {
                "First": {"Type": "Task", "Comment": "Do work", "Resource": "arn:res", "Parameters": {"a": 1}, "Next": "Second"},
                "Second": {"Type": "Pass", "Result": {"ok": True}, "End": True},
            },
        }

    def test_node_ids_and_data(self, definition):
        """Test node ids, labels, and typed data."""
        graph = convert_from_asl(definition)
        first, second = graph["nodes"]

        assert first.id == "node-1"
        assert second.id == "node-2"
        assert first.type == "pass"
        assert first.data.label == "Do work"
        assert first.data.state_type == "Task"
        assert first.data.state_name == "First"
        assert first.data.resource == "arn:res"
        assert first.data.parameters == {"a": 1}
        assert second.data.label == "Second"
        assert second.data.result == {"ok": True}

    def test_full_state_is_preserved_verbatim(self, definition):
        """Test that the original state is kept on the node as a copy."""
        graph = convert_from_asl(definition)

        assert graph["nodes"][0].data.full_state == definition["States"]["First"]
        assert graph["nodes"][0].data.full_state is not definition["States"]["First"]

    def test_input_is_not_mutated(self, definition):
        """Test that conversion leaves the definition untouched."""
        before = copy.deepcopy(definition)
        graph = convert_from_asl(definition)
        graph["nodes"][0].data.full_state["Comment"] = "changed"

        assert definition == before

    def test_fresh_ids_per_call(self, definition):
        """Test that each call without a generator starts at node-1."""
        assert convert_from_asl(definition)["nodes"][0].id == "node-1"
        assert convert_from_asl(definition)["nodes"][0].id == "node-1"

    def test_supplied_generator_continues(self, definition):
        """Test that a supplied generator is used and advanced."""
        generator = NodeIdGenerator(start=5)

        graph = ASLToGraphTransformer(generator).transform_definition(definition)

        assert [n.id for n in graph["nodes"]] == ["node-5", "node-6"]
        assert generator.peek() == 7

    def test_missing_type_and_malformed_state(self):
        """Test that odd states still become nodes."""
        graph = convert_from_asl({"StartAt": "A", "States": {"A": {"Next": "B"}, "B": "garbage"}})

        assert [n.data.state_type for n in graph["nodes"]] == ["Pass", "Pass"]
        assert graph["nodes"][1].data.full_state == {}
        assert len(graph["edges"]) == 1


class TestEdges:
    """Test edge creation."""

    def test_next_edges(self):
        """Test plain Next transitions."""
        graph = convert_from_asl({
            "StartAt": "A",
            "States": {"A": {"Type": "Pass", "Next": "B"}, "B": {"Type": "Pass", "End": True}},
        })

        assert len(graph["edges"]) == 1
        edge = graph["edges"][0]
        assert (edge.id, edge.source, edge.target, edge.label) == ("edge-node-1-node-2", "node-1", "node-2", None)

    def test_choice_fan_out(self):
        """Test that two rules plus Default give three labelled edges."""
        graph = convert_from_asl({
            "StartAt": "Check",
            "States": {
                "Check": {
                    "Type": "Choice",
                    "Choices": [
                        {"Variable": "$.status", "StringEquals": "PAID", "Next": "Ship"},
                        {"And": [], "Next": "Retry"},
                    ],
                    "Default": "Cancel",
                },
                "Ship": {"Type": "Succeed"},
                "Retry": {"Type": "Pass", "End": True},
                "Cancel": {"Type": "Fail"},
            },
        })

        outgoing = [e for e in graph["edges"] if e.source == "node-1"]
        assert len(outgoing) == 3
        assert [(e.target, e.label) for e in outgoing] == [
            ("node-2", "$.status"),
            ("node-3", "Choice 2"),
            ("node-4", "Default"),
        ]
        assert outgoing[0].id == "edge-node-1-node-2-0"
        assert outgoing[2].id == "edge-node-1-node-4-default"

    def test_dangling_references_are_skipped(self):
        """Test that transitions to unknown states produce no edges."""
        graph = convert_from_asl({
            "StartAt": "A",
            "States": {
                "A": {"Type": "Pass", "Next": "NoSuchState"},
                "C": {"Type": "Choice", "Choices": [{"Variable": "$.x", "Next": "Nope"}], "Default": "Gone"},
            },
        })

        assert len(graph["nodes"]) == 2
        assert graph["edges"] == []

    def test_edges_reference_existing_nodes(self):
        """Test that every edge endpoint is a returned node and ids are unique."""
        graph = convert_from_asl(get_sample_definition("order_choice"))
        node_ids = [n.id for n in graph["nodes"]]

        assert len(node_ids) == len(set(node_ids))
        for edge in graph["edges"]:
            assert edge.source in node_ids
            assert edge.target in node_ids
        assert len({e.id for e in graph["edges"]}) == len(graph["edges"])


class TestRoundTrip:
    """Test definition -> graph -> definition."""

    def test_linear_pass_chain_round_trip(self):
        """Test that a linear Pass chain keeps its shape and terminal state."""
        definition = {
            "StartAt": "One",
            "States": {
                "One": {"Type": "Pass", "Next": "Two"},
                "Two": {"Type": "Pass", "Next": "Three"},
                "Three": {"Type": "Pass", "End": True},
            },
        }

        graph = convert_from_asl(definition)
        exported = convert_to_asl(graph["nodes"], graph["edges"])

        assert len(exported["States"]) == 3
        path = []
        current = exported["StartAt"]
        while current:
            path.append(current)
            current = exported["States"][current].get("Next")
        assert path == ["State_node-1", "State_node-2", "State_node-3"]
        assert exported["States"]["State_node-3"]["End"] is True

    def test_sample_round_trip_is_structurally_equivalent(self):
        """Test the Choice sample keeps its structure through a round trip."""
        definition = get_sample_definition("order_choice")
        graph = convert_from_asl(definition)
        exported = convert_to_asl(graph["nodes"], graph["edges"])

        analysis = StructuralMetric().definition_structural_analysis(exported, definition)

        assert analysis["checks"]["state_count_match"]
        assert analysis["checks"]["type_counts_match"]
        assert analysis["checks"]["main_path_match"]
        assert analysis["checks"]["transition_count_match"]
        check = exported["States"]["State_node-2"]
        assert check["Choices"][0]["StringEquals"] == "PAID"
        assert exported["States"]["State_node-3"]["Seconds"] == 30
