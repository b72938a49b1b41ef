"""
Flow Builder ASL

Converts workflow graphs drawn in the Flow Builder into Amazon States Language
(ASL) state machines and back, and deploys the result to AWS Step Functions.

Main Components:
- data_schema: Graph data model (nodes, edges) and sample definitions.
- transform: Graph to ASL and ASL to graph conversion.
- session: Editable graph of one session, with import/export strategies.
- visualizer: Loading, validation, and preview of definitions.
- deploy: Step Functions deployment and execution monitoring.
- metrics: Structural comparison of definitions.

Usage:
    from flow_builder_asl import convert_to_asl, convert_from_asl

    definition = convert_to_asl(nodes, edges)
    graph = convert_from_asl(definition)
"""

# Version information
__version__ = "1.0.0"
__description__ = "Flow Builder graph to Amazon States Language converter"

from .config import FlowBuilderConfig
from .data_schema import STATE_TYPES, Edge, Node, NodeData, Position, get_sample_definition
from .deploy import StepFunctionsDeployer
from .errors import (
    DeploymentError,
    EmptyGraphError,
    FlowBuilderError,
    GraphEditError,
    InvalidRequestError,
    MalformedDefinitionError,
)
from .metrics import StructuralMetric, compare_definitions
from .session import ExportStrategy, FlowSession, SessionStatus
from .transform import ASLToGraphTransformer, GraphToASLTransformer, NodeIdGenerator, convert_from_asl, convert_to_asl
from .visualizer import DefinitionLoader, DefinitionVisualizer

__all__ = [
    # Package metadata
    "__version__",
    "__description__",
    # Conversion
    "convert_to_asl",
    "convert_from_asl",
    "GraphToASLTransformer",
    "ASLToGraphTransformer",
    "NodeIdGenerator",
    # Data model
    "STATE_TYPES",
    "Node",
    "NodeData",
    "Edge",
    "Position",
    "get_sample_definition",
    # Session
    "FlowSession",
    "ExportStrategy",
    "SessionStatus",
    # Loading and preview
    "DefinitionLoader",
    "DefinitionVisualizer",
    # Deployment
    "FlowBuilderConfig",
    "StepFunctionsDeployer",
    # Metrics
    "StructuralMetric",
    "compare_definitions",
    # Errors
    "FlowBuilderError",
    "EmptyGraphError",
    "MalformedDefinitionError",
    "GraphEditError",
    "InvalidRequestError",
    "DeploymentError",
]

# Package-level configuration
import logging

# Set up package-level logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())  # Prevent "No handlers" warnings


def get_package_info():
    """Get information about the package and available components."""
    info = {
        "version": __version__,
        "description": __description__,
        "public_api": __all__,
    }
    return info
