"""
ECS SDK - CloudFormation stack convergence and AWS resource lookups for ECS
deployments.
"""

__version__ = "0.1.0"

from .cloudformation import StackManager
from .config import SdkConfig, load_config
from .resources import ResourceClient
from .sdk import Sdk, new_api
from .types import USE_PREVIOUS_VALUE, Secret, StackEvent, StackOperation, TaskStatus

__all__ = [
    "Sdk",
    "new_api",
    "StackManager",
    "ResourceClient",
    "SdkConfig",
    "load_config",
    "Secret",
    "StackEvent",
    "StackOperation",
    "TaskStatus",
    "USE_PREVIOUS_VALUE",
]
