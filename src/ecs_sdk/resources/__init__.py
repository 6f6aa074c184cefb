"""
Thin lookup client over the ECS, EC2, ELBv2, IAM, Secrets Manager and
CloudWatch Logs APIs: one method per cloud operation.
"""

from ..session import AwsSession
from .ecs import ClusterMixin, service_from_group
from .elb import LoadBalancerMixin
from .iam import IamMixin
from .logs import LogsMixin, LogTail
from .network import NetworkMixin
from .secrets import SecretsMixin


class ResourceClient(
    ClusterMixin,
    NetworkMixin,
    IamMixin,
    SecretsMixin,
    LoadBalancerMixin,
    LogsMixin,
    AwsSession,
):
    """Resource lookups sharing one boto3 session."""


__all__ = ["ResourceClient", "LogTail", "service_from_group"]
