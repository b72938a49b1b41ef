"""
Definition Visualizer

Renders an ASL definition as an ASCII tree walked from StartAt, for previewing
what the Flow Builder is about to export or deploy.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Set, Tuple, Union

from .base import BaseVisualizer, Colors, Icons


class DefinitionVisualizer(BaseVisualizer):
    """Visualizes ASL definitions as trees of state transitions."""

    def export_json(self, definition: Dict[str, Any], indent: int = 2) -> str:
        """Pretty-print a definition as JSON for the export preview."""
        return json.dumps(definition, indent=indent)

    def visualize_definition(self, definition: Dict[str, Any]) -> str:
        """
        Build the tree view of a definition.

        The walk follows Next, each Choice rule, and Default. A state already
        shown is printed again as a revisit marker rather than expanded, so
        loops terminate. States not reachable from StartAt are listed last.

        Args:
            definition: ASL definition dictionary

        Returns:
            The rendered tree as a string
        """
        states = definition.get("States") or {}
        start_at = definition.get("StartAt")
        lines: List[str] = []

        title = definition.get("Comment") or "State Machine"
        lines.append(self._colorize(f"{self._iconize(Icons.DEFINITION)}{title}", Colors.DEFINITION_TITLE))
        lines.append(self._colorize(f"{self._iconize(Icons.START)}StartAt: {start_at}", Colors.DESCRIPTION))

        visited: Set[str] = set()
        if start_at in states:
            self._render_tree(start_at, states, visited, lines)
        else:
            lines.append(self._colorize(f"StartAt '{start_at}' is not a state", Colors.RED))

        unreachable = [name for name in states if name not in visited]
        if unreachable:
            lines.append(self._colorize(f"{self._iconize(Icons.UNREACHABLE)}Unreachable states:", Colors.YELLOW))
            for name in unreachable:
                state = states[name] if isinstance(states[name], dict) else {}
                lines.append(f"  - {self._format_state(name, state)}")

        return "\n".join(lines)

    def _render_tree(self, start_at: str, states: Dict[str, Any], visited: Set[str], lines: List[str]) -> None:
        """
        Render the states reachable from start_at, depth first.

        Uses an explicit stack of (name, prefix, is_last, edge label) so long
        Next chains do not hit the recursion limit.
        """
        stack: List[Tuple[str, str, bool, Any]] = [(start_at, "", True, None)]
        while stack:
            name, prefix, is_last, edge_label = stack.pop()
            connector = self.branch_chars["last"] if is_last else self.branch_chars["tee"]
            label = f"[{edge_label}] " if edge_label else ""
            state = states.get(name)

            if state is None:
                lines.append(f"{prefix}{connector} {label}{self._colorize(f'{name} (missing)', Colors.RED)}")
                continue
            if name in visited:
                lines.append(f"{prefix}{connector} {label}{self._iconize(Icons.REVISIT)}{self._colorize(name, Colors.DIM)}")
                continue

            visited.add(name)
            state = state if isinstance(state, dict) else {}
            line = f"{prefix}{connector} {label}{self._format_state(name, state)}"
            if state.get("End"):
                line += f" {self._iconize(Icons.END).strip()}"
            lines.append(line)

            child_prefix = prefix + (self.branch_chars["space"] + " " if is_last else self.branch_chars["pipe"] + "   ")
            transitions = self._transitions(state)
            # reversed so the first transition is popped first
            for index in range(len(transitions) - 1, -1, -1):
                target, edge = transitions[index]
                stack.append((target, child_prefix, index == len(transitions) - 1, edge))

    def _transitions(self, state: Dict[str, Any]) -> List[tuple]:
        """Outgoing transitions of a state as (target, edge label) pairs."""
        transitions = []
        if state.get("Type") == "Choice":
            for index, choice in enumerate(state.get("Choices") or []):
                if isinstance(choice, dict) and choice.get("Next"):
                    transitions.append((choice["Next"], self._highlight_variables(choice.get("Variable") or f"Choice {index + 1}")))
            if state.get("Default"):
                transitions.append((state["Default"], f"{self._iconize(Icons.DEFAULT)}Default"))
        if state.get("Next"):
            transitions.append((state["Next"], None))
        return transitions

    def _format_state(self, name: str, state: Dict[str, Any]) -> str:
        state_type = state.get("Type", "?")
        color, icon = self._style_for(state_type)
        text = f"{self._iconize(icon)}{self._colorize(name, color)} ({state_type})"
        comment = state.get("Comment")
        if comment and comment != name:
            text += " " + self._colorize(f"- {comment}", Colors.DESCRIPTION)
        if state.get("Resource"):
            text += " " + self._colorize(state["Resource"], Colors.DIM)
        return text

    def save_definition_visualization(self, definition: Dict[str, Any], output_path: Union[str, Path]) -> Path:
        """
        Save the tree view and JSON of a definition to a markdown file.

        Args:
            definition: ASL definition dictionary
            output_path: Destination file

        Returns:
            The path written
        """
        output_path = Path(output_path)
        tree = self._strip_ansi_codes(self.visualize_definition(definition))
        content = (
            "# State Machine Visualization\n\n"
            "```\n" + tree + "\n```\n\n"
            "## Definition\n\n"
            "```json\n" + self.export_json(definition) + "\n```\n"
        )
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
        return output_path
