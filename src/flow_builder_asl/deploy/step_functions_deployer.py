"""
Step Functions Deployer

Hands ASL definitions produced by the Flow Builder to AWS Step Functions and
reads execution status back. This is the deploy surface around the converters:
create, validate, and delete state machines; start, describe, list, and poll
executions.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import boto3
from colorama import Fore, Style

from ..config import FlowBuilderConfig
from ..errors import DeploymentError, InvalidRequestError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("SUCCEEDED", "FAILED", "TIMED_OUT", "ABORTED")


class StepFunctionsDeployer:
    """
    Thin wrapper over the boto3 ``stepfunctions`` client.

    Attributes:
        config (FlowBuilderConfig): Region, role, credentials, and polling settings
        verbose (bool): Whether to print coloured status lines
    """

    def __init__(self, config: Optional[FlowBuilderConfig] = None, client: Any = None, verbose: bool = True):
        """
        Initialize the deployer.

        Args:
            config: Deployment configuration; read from the environment when omitted
            client: Pre-built Step Functions client, created lazily when omitted
            verbose: Whether to print coloured status lines
        """
        self.config = config or FlowBuilderConfig.from_env()
        self._client = client
        self.verbose = verbose

    @property
    def client(self) -> Any:
        """The Step Functions client, created on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> Any:
        kwargs: Dict[str, Any] = {
            "region_name": self.config.aws_region,
            "config": boto3.session.Config(retries={"max_attempts": 3, "mode": "standard"}),
        }
        if self.config.has_explicit_credentials:
            kwargs["aws_access_key_id"] = self.config.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.config.aws_secret_access_key
        return boto3.client("stepfunctions", **kwargs)

    def _print_status(self, message: str, color: str = Fore.WHITE) -> None:
        if self.verbose:
            print(f"{color}{message}{Style.RESET_ALL}")

    def _fail(self, message: str, error: Exception) -> DeploymentError:
        logger.warning("%s: %s", message, error)
        self._print_status(f"❌ {message}: {error}", Fore.RED)
        return DeploymentError(message, str(error))

    def validate_definition(self, definition: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a definition with Step Functions before deploying it.

        Args:
            definition: ASL definition dictionary

        Returns:
            Dict with "valid" (bool) and "diagnostics" (list of severity/code/message/location dicts)
        """
        if not definition:
            raise InvalidRequestError("Missing required field: definition")
        try:
            response = self.client.validate_state_machine_definition(definition=json.dumps(definition))
        except Exception as e:
            raise self._fail("Validate State Machine Definition Process Failed", e) from e

        diagnostics = response.get("diagnostics", [])
        valid = response.get("result") == "OK"
        if valid:
            self._print_status("✅ State Machine definition is valid", Fore.GREEN)
        else:
            self._print_status(f"State Machine definition is invalid: {response.get('result')}", Fore.RED)
        for diag in diagnostics:
            color = Fore.YELLOW if valid else Fore.RED
            self._print_status(
                f"{'⚠️ ' if valid else '❌'} {diag.get('severity')}: {diag.get('code')}, {diag.get('message')} at {diag.get('location')}",
                color,
            )
        return {"valid": valid, "diagnostics": diagnostics}

    def create_state_machine(self, name: str, definition: Dict[str, Any], role_arn: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a state machine from an ASL definition.

        Args:
            name: State machine name
            definition: ASL definition dictionary
            role_arn: IAM role ARN; falls back to the configured role

        Returns:
            Dict with success, stateMachineArn, creationDate, and message

        Raises:
            InvalidRequestError: If name, definition, or role ARN is missing
            DeploymentError: If Step Functions rejects the request
        """
        if not name or not definition:
            raise InvalidRequestError("Missing required fields: name and definition")

        execution_role_arn = role_arn or self.config.role_arn
        if not execution_role_arn:
            raise InvalidRequestError(
                "Missing IAM Role ARN. Provide AWS_STEP_FUNCTIONS_ROLE_ARN or pass role_arn."
            )

        try:
            response = self.client.create_state_machine(
                name=name,
                definition=json.dumps(definition),
                roleArn=execution_role_arn,
                type=self.config.state_machine_type,
            )
        except Exception as e:
            raise self._fail("Failed to create state machine", e) from e

        state_machine_arn = response.get("stateMachineArn")
        self._print_status(f"State Machine ARN: {state_machine_arn} deployed successfully!", Fore.GREEN)
        return {
            "success": True,
            "stateMachineArn": state_machine_arn,
            "creationDate": response.get("creationDate"),
            "message": "State machine created successfully!",
        }

    def delete_state_machine(self, state_machine_arn: str) -> Dict[str, Any]:
        """Delete a deployed state machine."""
        if not state_machine_arn:
            raise InvalidRequestError("Missing required parameter: stateMachineArn")
        try:
            self.client.delete_state_machine(stateMachineArn=state_machine_arn)
        except Exception as e:
            raise self._fail("Failed to delete state machine", e) from e

        self._print_status(f"State machine: {state_machine_arn} deleted successfully!", Fore.GREEN)
        return {"success": True, "message": "State machine deleted successfully!"}

    def start_execution(self, state_machine_arn: str, execution_input: Any = None, name: Optional[str] = None) -> Dict[str, Any]:
        """
        Start an execution of a deployed state machine.

        Args:
            state_machine_arn: ARN of the state machine
            execution_input: JSON-serializable input, "{}" when omitted
            name: Optional execution name

        Returns:
            Dict with success, executionArn, startDate, and message
        """
        if not state_machine_arn:
            raise InvalidRequestError("Missing required field: stateMachineArn")

        kwargs: Dict[str, Any] = {
            "stateMachineArn": state_machine_arn,
            "input": json.dumps(execution_input) if execution_input else "{}",
        }
        if name:
            kwargs["name"] = name

        try:
            response = self.client.start_execution(**kwargs)
        except Exception as e:
            raise self._fail("Failed to start execution", e) from e

        self._print_status(f"Execution ARN: {response.get('executionArn')}", Fore.GREEN)
        return {
            "success": True,
            "executionArn": response.get("executionArn"),
            "startDate": response.get("startDate"),
            "message": "Execution started successfully!",
        }

    def describe_execution(self, execution_arn: str) -> Dict[str, Any]:
        """
        Get the status, input, and output of an execution.

        Input and output are decoded from JSON when possible and returned raw otherwise.
        """
        if not execution_arn:
            raise InvalidRequestError("Missing required parameter: executionArn")
        try:
            response = self.client.describe_execution(executionArn=execution_arn)
        except Exception as e:
            raise self._fail("Failed to get execution details", e) from e

        return {
            "success": True,
            "executionArn": response.get("executionArn"),
            "stateMachineArn": response.get("stateMachineArn"),
            "name": response.get("name"),
            "status": response.get("status"),
            "startDate": response.get("startDate"),
            "stopDate": response.get("stopDate"),
            "input": self._decode_payload(response.get("input")),
            "output": self._decode_payload(response.get("output")),
            "error": response.get("error"),
            "cause": response.get("cause"),
        }

    def list_executions(self, state_machine_arn: str, max_results: int = 10) -> Dict[str, Any]:
        """List recent executions of a state machine."""
        if not state_machine_arn:
            raise InvalidRequestError("Missing required parameter: stateMachineArn")
        try:
            response = self.client.list_executions(stateMachineArn=state_machine_arn, maxResults=max_results)
        except Exception as e:
            raise self._fail("Failed to list executions", e) from e
        return {"success": True, "executions": response.get("executions") or []}

    def wait_for_execution(self, execution_arn: str) -> Dict[str, Any]:
        """
        Poll an execution until it leaves RUNNING or the attempt cap is reached.

        Returns:
            The last describe_execution result
        """
        attempts = 0
        while True:
            execution = self.describe_execution(execution_arn)
            status = execution.get("status")
            if status != "RUNNING" or attempts >= self.config.poll_max_attempts:
                break
            attempts += 1
            time.sleep(self.config.poll_interval_seconds)

        if status == "SUCCEEDED":
            self._print_status(f"Execution {status}", Fore.GREEN)
        elif status in TERMINAL_STATUSES:
            self._print_status(f"Execution {status}: {execution.get('error') or ''} {execution.get('cause') or ''}".rstrip(), Fore.RED)
        else:
            self._print_status(f"Execution still {status} after {attempts} polls", Fore.YELLOW)
        return execution

    def _decode_payload(self, payload: Optional[str]) -> Any:
        if not payload:
            return None
        try:
            return json.loads(payload)
        except (TypeError, ValueError):
            return payload
