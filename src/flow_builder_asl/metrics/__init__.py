"""
Metrics package for ASL definition comparison.

This package compares definitions by structure (state types, main path,
terminal state, transitions) independently of state names.

Main Interface:
    compare_definitions: Formatted summary plus the raw analysis

Individual Components:
    StructuralMetric: Structural analysis of definitions
"""

from .structural_metric import StructuralMetric
from .utils import compare_definitions

__all__ = [
    'StructuralMetric',
    'compare_definitions',
]
