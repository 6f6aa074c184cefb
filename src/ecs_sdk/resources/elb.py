"""
Load balancer lookups.
"""

import logging
import threading
from typing import Optional

from botocore.exceptions import ClientError

from ..polling import raise_if_cancelled

logger = logging.getLogger(__name__)


class LoadBalancerMixin:
    """ELBv2 calls. Expects ``self.elbv2`` to be an ELBv2 client."""

    def load_balancer_exists(self, name: str, cancel: Optional[threading.Event] = None) -> bool:
        """Check if a load balancer exists. Only LoadBalancerNotFound means False."""
        logger.debug(f"Check if load balancer exists: {name}")
        raise_if_cancelled(cancel, f"Describing load balancer {name}")
        try:
            response = self.elbv2.describe_load_balancers(Names=[name])
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "LoadBalancerNotFound":
                return False
            raise
        return len(response.get("LoadBalancers", [])) > 0

    def get_load_balancer_arn(self, name: str, cancel: Optional[threading.Event] = None) -> str:
        """Get the ARN of a load balancer."""
        logger.debug(f"Retrieve load balancer ARN: {name}")
        raise_if_cancelled(cancel, f"Describing load balancer {name}")
        response = self.elbv2.describe_load_balancers(Names=[name])
        return str(response["LoadBalancers"][0]["LoadBalancerArn"])
