"""
Transform package for converting between the Flow Builder graph and ASL.

This package provides the two conversion directions used by the Flow Builder:
graph to Amazon States Language (ASL) for export and deployment, and ASL back
to a graph for import.
"""

from .asl_to_graph import ASLToGraphTransformer, NodeIdGenerator, convert_from_asl, grid_position
from .graph_to_asl import GENERATED_COMMENT, GraphToASLTransformer, convert_to_asl

__all__ = [
    "GraphToASLTransformer",
    "ASLToGraphTransformer",
    "NodeIdGenerator",
    "convert_to_asl",
    "convert_from_asl",
    "grid_position",
    "GENERATED_COMMENT",
]
