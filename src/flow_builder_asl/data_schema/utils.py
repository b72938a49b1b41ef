"""
Schema utilities for the Flow Builder.

This module provides access to the bundled sample ASL definitions used by the
interactive shell and by tests.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

_SAMPLES_DIR = Path(__file__).parent / "samples"


def list_sample_definitions() -> List[str]:
    """
    List the names of bundled sample definitions.

    Returns:
        List[str]: Sample names without the ``.asl.json`` suffix, sorted.
    """
    return sorted(p.name[: -len(".asl.json")] for p in _SAMPLES_DIR.glob("*.asl.json"))


def get_sample_definition(name: str = "hello_world") -> Dict[str, Any]:
    """
    Get a bundled sample ASL definition.

    Args:
        name: Sample name, e.g. "hello_world" or "order_choice"

    Returns:
        Dict[str, Any]: The sample definition dictionary.

    Raises:
        FileNotFoundError: If no sample with that name is bundled.
    """
    sample_path = _SAMPLES_DIR / f"{name}.asl.json"
    with open(sample_path, "r", encoding="utf-8") as f:
        return json.load(f)
