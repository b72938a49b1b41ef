"""
Runtime configuration for the Flow Builder.

Values for the deploy surface are read from the environment, mirroring the
variables the Step Functions backend expects.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_REGION = "us-east-1"


@dataclass
class FlowBuilderConfig:
    """
    Configuration for deploying and monitoring state machines.

    Attributes:
        aws_region: Region of the Step Functions client
        role_arn: IAM role assumed by deployed state machines
        aws_access_key_id: Explicit access key, only used together with the secret
        aws_secret_access_key: Explicit secret key, only used together with the key id
        state_machine_type: STANDARD or EXPRESS
        poll_interval_seconds: Delay between execution status polls
        poll_max_attempts: Number of polls before giving up on a RUNNING execution
    """

    aws_region: str = DEFAULT_REGION
    role_arn: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    state_machine_type: str = "STANDARD"
    poll_interval_seconds: float = 1.0
    poll_max_attempts: int = 60

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FlowBuilderConfig":
        """Build a configuration from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            aws_region=env.get("AWS_REGION") or DEFAULT_REGION,
            role_arn=env.get("AWS_STEP_FUNCTIONS_ROLE_ARN") or None,
            aws_access_key_id=env.get("AWS_ACCESS_KEY_ID") or None,
            aws_secret_access_key=env.get("AWS_SECRET_ACCESS_KEY") or None,
        )

    @property
    def has_explicit_credentials(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)
