"""
AWS session and client ownership.
"""

from typing import Optional

import boto3

from .config import SdkConfig


class AwsSession:
    """Create the boto3 clients every manager talks to."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        config: Optional[SdkConfig] = None,
        session: Optional[boto3.Session] = None,
    ):
        """
        Initialize AWS clients.

        Args:
            region: AWS region (uses config default if not provided)
            profile: AWS profile to use
            config: SDK configuration
            session: Existing boto3 session; region and profile are ignored
        """
        self.config = config or SdkConfig()
        self.region = region or self.config.aws_region
        self.profile = profile or self.config.aws_profile

        if session is None:
            session_args = {"region_name": self.region}
            if self.profile:
                session_args["profile_name"] = self.profile
            session = boto3.Session(**session_args)

        self.cloudformation = session.client("cloudformation")
        self.ecs = session.client("ecs")
        self.ec2 = session.client("ec2")
        self.elbv2 = session.client("elbv2")
        self.logs = session.client("logs")
        self.iam = session.client("iam")
        self.secretsmanager = session.client("secretsmanager")
