"""
Visualizer Module

This module provides the import and preview surfaces of the Flow Builder.

Available visualizers:
- DefinitionVisualizer: For previewing ASL definitions as ASCII trees and pretty JSON

Available loaders:
- DefinitionLoader: For loading and validating ASL definitions and editor graphs
  from JSON text or files
"""

from .base import Colors, Icons
from .definition_loader import DefinitionLoader
from .definition_visualizer import DefinitionVisualizer

__all__ = [
    "DefinitionVisualizer",
    "DefinitionLoader",
    "Colors",
    "Icons",
]
