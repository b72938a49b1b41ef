"""
Definition Loader

This module provides functionality to load ASL definitions and Flow Builder
graphs from JSON text or files, normalize them, and validate them before they
are handed to the converters. It is the import surface of the Flow Builder.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from ..data_schema.models import STATE_TYPES, as_edge, as_node
from .base import Colors


class DefinitionLoader:
    """Handles loading and validation of ASL definitions and editor graphs."""

    def __init__(self, use_colors: bool = True):
        """Initialize the definition loader.

        Args:
            use_colors: Whether to use colored output for messages
        """
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color formatting to text if colors are enabled.

        Args:
            text: Text to colorize
            color: Color code to apply

        Returns:
            Colorized text if use_colors is True, otherwise original text
        """
        if self.use_colors:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _print_status(self, message: str, color: str = Colors.WHITE) -> None:
        """Print a status message with optional color formatting."""
        print(self._colorize(message, color))

    def load_definition_from_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load and validate an ASL definition from a JSON file.

        Args:
            file_path: Path to the JSON file

        Returns:
            Same result dictionary as load_definition_from_json_string
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                json_string = f.read()
        except OSError as e:
            self._print_status(f"✘ Cannot read file {file_path}: {e}", Colors.RED)
            return {"success": False, "definition": None, "errors": [f"Cannot read file {file_path}: {e}"], "warnings": []}
        return self.load_definition_from_json_string(json_string)

    def load_definition_from_json_string(self, json_string: str) -> Dict[str, Any]:
        """
        Load and validate an ASL definition from a JSON string.

        Parses the JSON text, extracts the definition from one of the accepted
        wrappers, normalizes it, and validates it with colored feedback.

        Args:
            json_string: JSON string containing the definition

        Returns:
            Dict with validation result containing:
            - success: Boolean indicating if the definition was loaded and is valid
            - definition: Normalized definition if it could be extracted, None otherwise
            - errors: List of error messages
            - warnings: List of issues the converters tolerate (e.g. dangling transitions)
        """
        result = {"success": False, "definition": None, "errors": [], "warnings": []}
        try:
            data = json.loads(json_string.strip())
            result["definition"] = self._extract_definition_from_data(data)
            result["definition"] = self._normalize_definition_structure(result["definition"])
        except json.JSONDecodeError as e:
            self._print_status(f"✘ Invalid JSON format: {e}", Colors.RED)
            result["errors"].append(f"Invalid JSON format: {e}")
            return result
        except ValueError as e:
            self._print_status(f"✘ Error extracting definition: {e}", Colors.RED)
            result["errors"].append(f"Error extracting definition: {e}")
            return result

        validation_result = self.validate_definition(result["definition"])
        result["warnings"].extend(validation_result["warnings"])
        if validation_result["is_valid"]:
            result["success"] = True
            self._print_status(
                f"✓ Successfully loaded definition starting at: {result['definition']['StartAt']}\n"
                f"  Total states: {validation_result['state_count']}\n"
                f"  State types: {', '.join(sorted(validation_result['state_types']))}", Colors.GREEN
            )
            for warning in validation_result["warnings"]:
                self._print_status(f"⚠ {warning}", Colors.YELLOW)
        else:
            errors_str = "\n".join(validation_result["errors"])
            self._print_status(f"✘ Definition validation failed:\n{errors_str}", Colors.RED)
            result["errors"].extend(validation_result["errors"])
        return result

    def _extract_definition_from_data(self, data: Any) -> Dict[str, Any]:
        """
        Extract the definition from loaded JSON data supporting multiple formats.

        Handles two formats:
        1. A bare ASL definition with StartAt and States
        2. A create-state-machine request body with the definition under "definition"

        Raises:
            ValueError: If no definition structure is found
        """
        def _looks_like_definition(candidate: Any) -> bool:
            return isinstance(candidate, dict) and ("States" in candidate or "StartAt" in candidate)

        if _looks_like_definition(data):
            return data
        if isinstance(data, dict) and "definition" in data:
            definition = data["definition"]
            if isinstance(definition, str):
                definition = json.loads(definition)
            if _looks_like_definition(definition):
                return definition

        raise ValueError("No ASL definition (StartAt/States) found in the provided data")

    def _normalize_definition_structure(self, definition: Dict[str, Any]) -> Dict[str, Any]:
        """
        Normalize the definition so that States is a dictionary.

        States given as a JSON string are parsed. Follows the principle of
        immutability by returning a copy.

        Raises:
            json.JSONDecodeError: If States is a string that is not valid JSON
            ValueError: If States is neither a dictionary nor a JSON string
        """
        normalized = definition.copy()
        states = normalized.get("States")
        if isinstance(states, str):
            try:
                states = json.loads(states)
            except json.JSONDecodeError as e:
                self._print_status(f"✘ Invalid JSON in 'States': {e}", Colors.RED)
                raise e
        if states is not None and not isinstance(states, dict):
            raise ValueError(f"'States' property must be a dictionary or valid JSON string, got {type(states).__name__}")
        if states is not None:
            normalized["States"] = states
        return normalized

    def validate_definition(self, definition: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate definition structure and collect metadata.

        Errors are problems that make the definition unusable for Step Functions
        (missing StartAt/States, StartAt not a state, missing Type, Next and End
        both set or both missing). Dangling transition targets and unknown state
        types are reported as warnings since the converters tolerate them.

        Args:
            definition: Definition dictionary to validate

        Returns:
            Dict containing:
            - is_valid: Boolean indicating if the definition passed all validations
            - state_count: Number of states
            - state_types: Set of state types found
            - errors: List of validation error messages
            - warnings: List of tolerated issues
        """
        errors: List[str] = []
        warnings: List[str] = []
        state_types: Set[str] = set()
        validation_result: Dict[str, Any] = {
            "is_valid": False,
            "state_count": 0,
            "state_types": state_types,
            "errors": errors,
            "warnings": warnings,
        }

        if not isinstance(definition, dict):
            errors.append("Definition must be a dictionary")
            return validation_result

        states = definition.get("States")
        if not isinstance(states, dict) or not states:
            errors.append("Definition must have a non-empty 'States' property")
            return validation_result
        validation_result["state_count"] = len(states)

        start_at = definition.get("StartAt")
        if not start_at:
            errors.append("Definition must have a 'StartAt' property")
        elif start_at not in states:
            errors.append(f"'StartAt' references unknown state '{start_at}'")

        for state_name, state in states.items():
            self._validate_state(state_name, state, states, validation_result)

        validation_result["is_valid"] = len(errors) == 0
        return validation_result

    def _validate_state(self, state_name: str, state: Any, states: Dict[str, Any], validation_result: Dict[str, Any]) -> None:
        """Validate one state and record its type, errors, and warnings."""
        errors = validation_result["errors"]
        warnings = validation_result["warnings"]
        path = f"States.{state_name}"

        if not isinstance(state, dict):
            errors.append(f"State at '{path}' must be a dictionary")
            return

        state_type = state.get("Type")
        if not state_type:
            errors.append(f"State at '{path}' must have a 'Type' property")
            return
        validation_result["state_types"].add(state_type)
        if state_type not in STATE_TYPES:
            warnings.append(f"Unknown state type '{state_type}' at '{path}' will be exported as Pass")

        has_next = "Next" in state
        has_end = bool(state.get("End"))
        if state_type == "Choice":
            if not state.get("Choices") and not has_end:
                errors.append(f"Choice state at '{path}' must have 'Choices'")
        elif state_type in ("Succeed", "Fail"):
            if has_next:
                errors.append(f"Terminal {state_type} state at '{path}' must not have 'Next'")
        elif has_next and has_end:
            errors.append(f"State at '{path}' must not have both 'Next' and 'End'")
        elif not has_next and not has_end:
            errors.append(f"State at '{path}' must have either 'Next' or 'End'")

        for target, where in self._transition_targets(state):
            if target not in states:
                warnings.append(f"{where} at '{path}' references unknown state '{target}' and will be ignored")

    def _transition_targets(self, state: Dict[str, Any]):
        """Yield (target, field description) for every transition of a state."""
        if state.get("Next"):
            yield state["Next"], "'Next'"
        if state.get("Type") == "Choice":
            for index, choice in enumerate(state.get("Choices") or []):
                if isinstance(choice, dict) and choice.get("Next"):
                    yield choice["Next"], f"'Choices[{index}].Next'"
            if state.get("Default"):
                yield state["Default"], "'Default'"

    def load_graph_from_json_string(self, json_string: str) -> Dict[str, Any]:
        """
        Load a Flow Builder graph (nodes and edges) from a JSON string.

        Args:
            json_string: JSON object with "nodes" and "edges" lists

        Returns:
            Dict with success, nodes (List[Node]), edges (List[Edge]), and errors
        """
        result = {"success": False, "nodes": [], "edges": [], "errors": []}
        try:
            data = json.loads(json_string.strip())
            if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
                raise ValueError("Graph must be an object with a 'nodes' list")
            result["nodes"] = [as_node(n) for n in data["nodes"]]
            result["edges"] = [as_edge(e) for e in data.get("edges") or []]
        except json.JSONDecodeError as e:
            self._print_status(f"✘ Invalid JSON format: {e}", Colors.RED)
            result["errors"].append(f"Invalid JSON format: {e}")
            return result
        except (KeyError, TypeError, ValueError) as e:
            self._print_status(f"✘ Error extracting graph: {e}", Colors.RED)
            result["errors"].append(f"Error extracting graph: {e}")
            return result

        result["success"] = True
        self._print_status(
            f"✓ Successfully loaded graph: {len(result['nodes'])} nodes, {len(result['edges'])} edges", Colors.GREEN
        )
        return result
