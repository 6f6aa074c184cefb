"""
Single entry point combining stack convergence and resource lookups.
"""

from typing import Optional

import boto3

from .cloudformation import StackManager
from .config import SdkConfig, load_config
from .resources import ResourceClient


class Sdk(StackManager, ResourceClient):
    """Every AWS operation the deployment backend needs, on one session."""


def new_api(
    session: Optional[boto3.Session] = None, config: Optional[SdkConfig] = None
) -> Sdk:
    """Create an Sdk from an existing session, or from the loaded configuration."""
    return Sdk(config=config or load_config(), session=session)
