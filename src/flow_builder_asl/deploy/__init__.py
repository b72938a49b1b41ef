"""
Deploy package for handing Flow Builder definitions to AWS Step Functions.
"""

from .step_functions_deployer import TERMINAL_STATUSES, StepFunctionsDeployer

__all__ = ["StepFunctionsDeployer", "TERMINAL_STATUSES"]
