"""
Shared styling for the definition loader and visualizer.

State types map to an ANSI color and an icon; BaseVisualizer applies them
and can be switched to plain text for files and tests.
"""

import re
from typing import Any, Tuple

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")
_JSONPATH = re.compile(r"(\${1,2}(?:\.[\w\-]+|\[\d+\])*)")


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    DIM = "\033[2m"

    PASS = "\033[92m"
    TASK = "\033[94m"
    CHOICE = "\033[95m"
    WAIT = "\033[91m"
    SUCCEED = "\033[32m"
    FAIL = "\033[31m"
    PARALLEL = "\033[97m"
    MAP = "\033[96m"

    VARIABLE = "\033[33m"  # JSONPath references
    DESCRIPTION = "\033[90m"
    DEFINITION_TITLE = "\033[1;36m"

    WHITE = "\033[97m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    RED = "\033[91m"


class Icons:
    """Unicode icons for state types and tree markers."""

    PASS = "➡️"
    TASK = "🔧"
    CHOICE = "🔀"
    WAIT = "⏳"
    SUCCEED = "✅"
    FAIL = "❌"
    PARALLEL = "⏩"
    MAP = "🔁"
    UNKNOWN = "❔"

    DEFINITION = "🔄"
    START = "📥"
    END = "🏁"
    DEFAULT = "↩️"
    REVISIT = "🔂"
    UNREACHABLE = "🚫"


STATE_TYPE_STYLES = {
    "Pass": (Colors.PASS, Icons.PASS),
    "Task": (Colors.TASK, Icons.TASK),
    "Choice": (Colors.CHOICE, Icons.CHOICE),
    "Wait": (Colors.WAIT, Icons.WAIT),
    "Succeed": (Colors.SUCCEED, Icons.SUCCEED),
    "Fail": (Colors.FAIL, Icons.FAIL),
    "Parallel": (Colors.PARALLEL, Icons.PARALLEL),
    "Map": (Colors.MAP, Icons.MAP),
}


class BaseVisualizer:
    """Color, icon, and tree-drawing helpers shared by the visualizers."""

    def __init__(self, use_colors: bool = True, use_icons: bool = True):
        self.use_colors = use_colors
        self.use_icons = use_icons
        self.branch_chars = {"pipe": "│", "tee": "├──", "last": "└──", "space": " " * 3}

    def _colorize(self, text: str, color: str) -> str:
        return f"{color}{text}{Colors.RESET}" if self.use_colors else text

    def _iconize(self, icon: str) -> str:
        return f"{icon} " if self.use_icons else ""

    def _style_for(self, state_type: str) -> Tuple[str, str]:
        """Color and icon for a state type; unknown types get a neutral style."""
        return STATE_TYPE_STYLES.get(state_type, (Colors.WHITE, Icons.UNKNOWN))

    def _highlight_variables(self, text: str) -> str:
        """Highlight JSONPath references such as $.orderId or $$.Execution.Id."""
        if not self.use_colors:
            return text

        def replace_var(match: Any) -> str:
            return self._colorize(match.group(1), Colors.VARIABLE)

        return _JSONPATH.sub(replace_var, text)

    def _strip_ansi_codes(self, text: str) -> str:
        return _ANSI_ESCAPE.sub("", text)
