"""
Exceptions raised by the Flow Builder collaborators.

The conversion functions themselves never raise for data-shape problems; they
return None. These exceptions are used by the editing session and the deployer
to surface user-facing messages.
"""


class FlowBuilderError(Exception):
    """Base class for all Flow Builder errors."""


class EmptyGraphError(FlowBuilderError):
    """Raised when exporting or deploying a graph without nodes."""

    def __init__(self, message: str = "Cannot export: No nodes in the flow"):
        super().__init__(message)


class MalformedDefinitionError(FlowBuilderError):
    """Raised when a definition lacks States or StartAt and cannot be imported."""

    def __init__(self, message: str = "Cannot import: definition must contain 'StartAt' and a non-empty 'States'"):
        super().__init__(message)


class GraphEditError(FlowBuilderError):
    """Raised when an edit references a node that is not on the canvas."""


class InvalidRequestError(FlowBuilderError):
    """Raised when a deploy request is missing a required field."""


class DeploymentError(FlowBuilderError):
    """
    Raised when a Step Functions call fails.

    Attributes:
        details: Message of the underlying client error
    """

    def __init__(self, message: str, details: str = ""):
        super().__init__(f"{message}: {details}" if details else message)
        self.details = details
