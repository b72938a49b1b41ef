"""
Definition Comparator

This module formats the structural comparison of two ASL definitions as a
colored terminal summary.
"""

from .structural_metric import StructuralMetric

# Color codes for enhanced readability
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    HEADER = "\033[1;36m"  # Bold Cyan
    SECTION = "\033[1;35m"  # Bold Magenta

    SUCCESS = "\033[92m"  # Green
    ERROR = "\033[91m"  # Red
    VALUE = "\033[97m"  # White

def _colorize(text, color):
    """Apply color to text."""
    return f"{color}{text}{Colors.RESET}"


def format_check(passed):
    """Format a boolean check as a colored mark."""
    return _colorize("✓", Colors.SUCCESS) if passed else _colorize("✘", Colors.ERROR)


def compare_definitions(generated_definition, reference_definition):
    """
    Get a formatted summary of the structural comparison of two definitions.

    Returns:
        tuple: (summary string, analysis dict from StructuralMetric)
    """
    analysis = StructuralMetric().definition_structural_analysis(generated_definition, reference_definition)
    generated = analysis["generated"]
    reference = analysis["reference"]

    summary = []
    summary.append(_colorize("=" * 80, Colors.HEADER))
    summary.append(_colorize("DEFINITION STRUCTURE COMPARISON", Colors.HEADER + Colors.BOLD))
    summary.append(_colorize("=" * 80, Colors.HEADER))
    summary.append("")

    rows = [
        ("State count", "state_count_match", generated["state_count"], reference["state_count"]),
        ("State types", "type_counts_match", generated["type_counts"], reference["type_counts"]),
        ("Main path", "main_path_match", " -> ".join(generated["main_path"]), " -> ".join(reference["main_path"])),
        ("Terminal state", "terminal_types_match", generated["terminal_type"], reference["terminal_type"]),
        ("Transitions", "transition_count_match", generated["transition_count"], reference["transition_count"]),
    ]
    summary.append(_colorize("Checks (generated | reference)", Colors.SECTION))
    for title, key, gen_value, ref_value in rows:
        summary.append(f"  {format_check(analysis['checks'][key])} {title}: "
                       f"{_colorize(str(gen_value), Colors.VALUE)} | {_colorize(str(ref_value), Colors.VALUE)}")

    summary.append("")
    verdict = "STRUCTURALLY EQUIVALENT" if analysis["structurally_equivalent"] else "STRUCTURE DIFFERS"
    color = Colors.SUCCESS if analysis["structurally_equivalent"] else Colors.ERROR
    summary.append(_colorize(verdict, color + Colors.BOLD))

    return "\n".join(summary), analysis
