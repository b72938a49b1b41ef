"""
Structural Metric for ASL Definition Comparison

This module compares two ASL definitions by shape rather than by name: state
counts and types, the main path walked from StartAt, terminal states, and the
number of transitions. State names and node ids are ignored, which makes it
suitable for checking graph/definition round trips where names are regenerated.
"""

from collections import Counter


class StructuralMetric:
    """
    A class for calculating structural metrics between ASL definitions.
    """

    def definition_structural_analysis(self, generated_definition, reference_definition):
        """
        Compare the structure of two definitions.

        Args:
            generated_definition (dict): The definition to check
            reference_definition (dict): The definition to compare against

        Returns:
            dict: Analysis with state counts, type histograms, main paths, terminal
            types, transition counts, and a structurally_equivalent flag
        """
        generated = self._summarize(generated_definition)
        reference = self._summarize(reference_definition)

        type_difference = dict((Counter(reference["type_counts"]) - Counter(generated["type_counts"])) +
                               (Counter(generated["type_counts"]) - Counter(reference["type_counts"])))

        checks = {
            "state_count_match": generated["state_count"] == reference["state_count"],
            "type_counts_match": generated["type_counts"] == reference["type_counts"],
            "main_path_match": generated["main_path"] == reference["main_path"],
            "terminal_types_match": generated["terminal_type"] == reference["terminal_type"],
            "transition_count_match": generated["transition_count"] == reference["transition_count"],
        }

        return {
            "generated": generated,
            "reference": reference,
            "type_difference": type_difference,
            "checks": checks,
            "structurally_equivalent": all(checks.values()),
        }

    def _summarize(self, definition):
        """
        Extract the name-independent shape of a definition.

        The main path follows Next (or, for Choice states, Default and then the
        first rule) from StartAt until a state without a transition or a revisit.
        """
        states = (definition or {}).get("States") or {}
        type_counts = Counter(state.get("Type", "Pass") for state in states.values() if isinstance(state, dict))

        main_path = []
        seen = set()
        current = (definition or {}).get("StartAt")
        terminal_type = None
        while current in states and current not in seen:
            seen.add(current)
            state = states[current] if isinstance(states[current], dict) else {}
            main_path.append(state.get("Type", "Pass"))
            terminal_type = state.get("Type", "Pass")
            current = self._main_successor(state)

        transition_count = sum(len(self._successors(s)) for s in states.values() if isinstance(s, dict))

        return {
            "state_count": len(states),
            "type_counts": dict(type_counts),
            "main_path": main_path,
            "terminal_type": terminal_type,
            "transition_count": transition_count,
        }

    def _main_successor(self, state):
        if state.get("Next"):
            return state["Next"]
        if state.get("Type") == "Choice":
            if state.get("Default"):
                return state["Default"]
            rules = [r for r in state.get("Choices") or [] if isinstance(r, dict) and r.get("Next")]
            if rules:
                return rules[0]["Next"]
        return None

    def _successors(self, state):
        successors = []
        if state.get("Next"):
            successors.append(state["Next"])
        if state.get("Type") == "Choice":
            successors.extend(r["Next"] for r in state.get("Choices") or [] if isinstance(r, dict) and r.get("Next"))
            if state.get("Default"):
                successors.append(state["Default"])
        return successors
