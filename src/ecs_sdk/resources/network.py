"""
VPC, subnet and network interface lookups.
"""

import logging
import threading
from typing import Dict, List, Optional

from botocore.exceptions import ClientError

from ..errors import NoDefaultVpcError
from ..polling import raise_if_cancelled

logger = logging.getLogger(__name__)


class NetworkMixin:
    """EC2 networking calls. Expects ``self.ec2`` to be an EC2 client."""

    def vpc_exists(self, vpc_id: str, cancel: Optional[threading.Event] = None) -> bool:
        """Check if a VPC exists. Only InvalidVpcID.NotFound means False."""
        logger.debug(f"Check if VPC exists: {vpc_id}")
        raise_if_cancelled(cancel, f"Describing VPC {vpc_id}")
        try:
            response = self.ec2.describe_vpcs(VpcIds=[vpc_id])
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "InvalidVpcID.NotFound":
                return False
            raise
        return len(response.get("Vpcs", [])) > 0

    def get_default_vpc(self, cancel: Optional[threading.Event] = None) -> str:
        """Get the ID of the account's default VPC."""
        logger.debug("Retrieve default VPC")
        raise_if_cancelled(cancel, "Describing default VPC")
        response = self.ec2.describe_vpcs(
            Filters=[{"Name": "isDefault", "Values": ["true"]}]
        )
        vpcs = response.get("Vpcs", [])
        if not vpcs:
            raise NoDefaultVpcError("account has no default VPC")
        return str(vpcs[0]["VpcId"])

    def get_subnets(self, vpc_id: str, cancel: Optional[threading.Event] = None) -> List[str]:
        """Get the default-for-AZ subnet IDs of a VPC."""
        logger.debug(f"Retrieve subnets of {vpc_id}")
        raise_if_cancelled(cancel, f"Describing subnets of {vpc_id}")
        response = self.ec2.describe_subnets(
            Filters=[
                {"Name": "vpc-id", "Values": [vpc_id]},
                {"Name": "default-for-az", "Values": ["true"]},
            ]
        )
        return [subnet["SubnetId"] for subnet in response.get("Subnets", [])]

    def get_public_ips(
        self, *interfaces: str, cancel: Optional[threading.Event] = None
    ) -> Dict[str, str]:
        """Map network interface IDs to their public IP, skipping private-only ones."""
        raise_if_cancelled(cancel, "Describing network interfaces")
        response = self.ec2.describe_network_interfaces(
            NetworkInterfaceIds=list(interfaces)
        )
        public_ips = {}
        for interface in response.get("NetworkInterfaces", []):
            association = interface.get("Association")
            if association and association.get("PublicIp"):
                public_ips[interface["NetworkInterfaceId"]] = association["PublicIp"]
        return public_ips
