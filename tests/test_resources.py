"""
Tests for the resource lookup client.
"""

import json
from unittest.mock import Mock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from ecs_sdk.errors import ClusterDeletionError, NoDefaultVpcError
from ecs_sdk.resources import ResourceClient, service_from_group
from ecs_sdk.types import Secret, TaskStatus


def create_client() -> ResourceClient:
    """Create a test client with mocked AWS clients."""
    with patch("boto3.Session"):
        client = ResourceClient(region="us-east-1")

        # Mock AWS clients
        client.ecs = Mock()
        client.ec2 = Mock()
        client.elbv2 = Mock()
        client.iam = Mock()
        client.secretsmanager = Mock()

        return client


class TestClusters:
    """Test ECS cluster and task calls."""

    @mock_aws
    def test_create_and_check_cluster(self) -> None:
        """Test creating a cluster and checking it exists."""
        client = ResourceClient(region="us-east-1")

        assert client.cluster_exists("test-cluster") is False
        assert client.create_cluster("test-cluster") == "ACTIVE"
        assert client.cluster_exists("test-cluster") is True

    def test_cluster_exists_inactive(self) -> None:
        """Test that an INACTIVE cluster is reported as missing."""
        client = create_client()
        client.ecs.describe_clusters.return_value = {
            "clusters": [{"clusterName": "test-cluster", "status": "INACTIVE"}]
        }

        assert client.cluster_exists("test-cluster") is False
        client.ecs.describe_clusters.assert_called_once_with(clusters=["test-cluster"])

    def test_delete_cluster(self) -> None:
        """Test deleting a cluster."""
        client = create_client()
        client.ecs.delete_cluster.return_value = {"cluster": {"status": "INACTIVE"}}

        client.delete_cluster("test-cluster")

        client.ecs.delete_cluster.assert_called_once_with(cluster="test-cluster")

    def test_delete_cluster_still_active(self) -> None:
        """Test that a cluster left ACTIVE after deletion raises."""
        client = create_client()
        client.ecs.delete_cluster.return_value = {"cluster": {"status": "ACTIVE"}}

        with pytest.raises(ClusterDeletionError) as exc_info:
            client.delete_cluster("test-cluster")

        assert "ACTIVE" in str(exc_info.value)

    def test_list_tasks(self) -> None:
        """Test listing task ARNs across pages."""
        client = create_client()
        client.ecs.get_paginator.return_value.paginate.return_value = [
            {"taskArns": ["arn:task/1", "arn:task/2"]},
            {"taskArns": ["arn:task/3"]},
        ]

        arns = client.list_tasks("test-cluster", "web")

        assert arns == ["arn:task/1", "arn:task/2", "arn:task/3"]
        client.ecs.get_paginator.assert_called_once_with("list_tasks")
        client.ecs.get_paginator.return_value.paginate.assert_called_once_with(
            cluster="test-cluster", serviceName="web"
        )

    def test_describe_tasks(self) -> None:
        """Test extracting service name and network interface from tasks."""
        client = create_client()
        client.ecs.describe_tasks.return_value = {
            "tasks": [
                {
                    "lastStatus": "RUNNING",
                    "group": "service:web",
                    "attachments": [
                        {
                            "type": "ElasticNetworkInterface",
                            "details": [
                                {"name": "subnetId", "value": "subnet-1"},
                                {"name": "networkInterfaceId", "value": "eni-12345"},
                            ],
                        }
                    ],
                },
                {"lastStatus": "PENDING", "group": "family:batch", "attachments": []},
            ]
        }

        tasks = client.describe_tasks("test-cluster", "arn:task/1", "arn:task/2")

        assert tasks == [
            TaskStatus(state="RUNNING", service="web", network_interface="eni-12345"),
            TaskStatus(state="PENDING", service="family:batch", network_interface=""),
        ]
        client.ecs.describe_tasks.assert_called_once_with(
            cluster="test-cluster", tasks=["arn:task/1", "arn:task/2"]
        )

    def test_service_from_group(self) -> None:
        """Test that the service: prefix is stripped exactly once."""
        assert service_from_group("service:web") == "web"
        assert service_from_group("service:service:web") == "service:web"
        assert service_from_group("web") == "web"


class TestNetwork:
    """Test VPC, subnet and ENI lookups."""

    @mock_aws
    def test_default_vpc(self) -> None:
        """Test finding the default VPC."""
        client = ResourceClient(region="us-east-1")

        vpc_id = client.get_default_vpc()

        assert vpc_id.startswith("vpc-")
        assert client.vpc_exists(vpc_id) is True

    @mock_aws
    def test_vpc_exists_not_found(self) -> None:
        """Test that an unknown VPC is reported as missing."""
        client = ResourceClient(region="us-east-1")

        assert client.vpc_exists("vpc-12345678") is False

    def test_vpc_exists_propagates_other_errors(self) -> None:
        """Test that VPC lookup errors other than not-found propagate."""
        client = create_client()
        client.ec2.describe_vpcs.side_effect = ClientError(
            {"Error": {"Code": "UnauthorizedOperation", "Message": "denied"}},
            "DescribeVpcs",
        )

        with pytest.raises(ClientError):
            client.vpc_exists("vpc-12345678")

    def test_no_default_vpc(self) -> None:
        """Test an account without default VPC."""
        client = create_client()
        client.ec2.describe_vpcs.return_value = {"Vpcs": []}

        with pytest.raises(NoDefaultVpcError):
            client.get_default_vpc()

    def test_get_subnets(self) -> None:
        """Test listing default subnets of a VPC."""
        client = create_client()
        client.ec2.describe_subnets.return_value = {
            "Subnets": [{"SubnetId": "subnet-1"}, {"SubnetId": "subnet-2"}]
        }

        assert client.get_subnets("vpc-1") == ["subnet-1", "subnet-2"]
        client.ec2.describe_subnets.assert_called_once_with(
            Filters=[
                {"Name": "vpc-id", "Values": ["vpc-1"]},
                {"Name": "default-for-az", "Values": ["true"]},
            ]
        )

    def test_get_public_ips(self) -> None:
        """Test mapping network interfaces to public IPs."""
        client = create_client()
        client.ec2.describe_network_interfaces.return_value = {
            "NetworkInterfaces": [
                {"NetworkInterfaceId": "eni-1", "Association": {"PublicIp": "1.2.3.4"}},
                {"NetworkInterfaceId": "eni-2"},
            ]
        }

        assert client.get_public_ips("eni-1", "eni-2") == {"eni-1": "1.2.3.4"}
        client.ec2.describe_network_interfaces.assert_called_once_with(
            NetworkInterfaceIds=["eni-1", "eni-2"]
        )


class TestIam:
    """Test IAM role lookups."""

    @mock_aws
    def test_get_role_arn(self) -> None:
        """Test resolving a role ARN."""
        iam = boto3.client("iam", region_name="us-east-1")
        role = iam.create_role(
            RoleName="ecsTaskExecutionRole",
            AssumeRolePolicyDocument=json.dumps(
                {
                    "Version": "2012-10-17",
                    "Statement": [
                        {
                            "Effect": "Allow",
                            "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                            "Action": "sts:AssumeRole",
                        }
                    ],
                }
            ),
        )
        client = ResourceClient(region="us-east-1")

        assert client.get_role_arn("ecsTaskExecutionRole") == role["Role"]["Arn"]

    @mock_aws
    def test_get_role_arn_missing(self) -> None:
        """Test that a missing role is an error, not an empty value."""
        client = ResourceClient(region="us-east-1")

        with pytest.raises(ClientError):
            client.get_role_arn("missing-role")


class TestSecrets:
    """Test Secrets Manager calls."""

    @mock_aws
    def test_secret_lifecycle(self) -> None:
        """Test create, inspect, list and delete of a secret."""
        client = ResourceClient(region="us-east-1")
        secret = Secret(
            name="registry-creds",
            description="Registry credentials",
            labels={"project": "app-1"},
            username="user",
            password="pass",
        )

        arn = client.create_secret(secret)

        inspected = client.inspect_secret(arn)
        assert inspected.id == arn
        assert inspected.name == "registry-creds"
        assert inspected.description == "Registry credentials"
        assert inspected.labels == {"project": "app-1"}

        assert [s.name for s in client.list_secrets()] == ["registry-creds"]

        raw = boto3.client("secretsmanager", region_name="us-east-1").get_secret_value(
            SecretId=arn
        )
        assert json.loads(raw["SecretString"]) == {"username": "user", "password": "pass"}

        client.delete_secret(arn, recover=False)

        with pytest.raises(ClientError):
            client.inspect_secret(arn)

    def test_delete_secret_recoverable(self) -> None:
        """Test that a recoverable delete does not force deletion."""
        client = create_client()

        client.delete_secret("registry-creds", recover=True)

        client.secretsmanager.delete_secret.assert_called_once_with(
            SecretId="registry-creds", ForceDeleteWithoutRecovery=False
        )

    def test_inspect_secret_without_description(self) -> None:
        """Test inspecting a secret with no description or tags."""
        client = create_client()
        client.secretsmanager.describe_secret.return_value = {
            "ARN": "arn:secret:1",
            "Name": "plain",
        }

        secret = client.inspect_secret("plain")

        assert secret == Secret(name="plain", id="arn:secret:1")


class TestLoadBalancers:
    """Test load balancer lookups."""

    def test_load_balancer_exists(self) -> None:
        """Test an existing load balancer."""
        client = create_client()
        client.elbv2.describe_load_balancers.return_value = {
            "LoadBalancers": [{"LoadBalancerArn": "arn:lb:1"}]
        }

        assert client.load_balancer_exists("app-lb") is True
        assert client.get_load_balancer_arn("app-lb") == "arn:lb:1"
        client.elbv2.describe_load_balancers.assert_called_with(Names=["app-lb"])

    def test_load_balancer_not_found(self) -> None:
        """Test that LoadBalancerNotFound means the load balancer is missing."""
        client = create_client()
        client.elbv2.describe_load_balancers.side_effect = ClientError(
            {"Error": {"Code": "LoadBalancerNotFound", "Message": "not found"}},
            "DescribeLoadBalancers",
        )

        assert client.load_balancer_exists("app-lb") is False

        with pytest.raises(ClientError):
            client.get_load_balancer_arn("app-lb")

    def test_load_balancer_other_error(self) -> None:
        """Test that other load balancer errors propagate."""
        client = create_client()
        client.elbv2.describe_load_balancers.side_effect = ClientError(
            {"Error": {"Code": "Throttling", "Message": "Rate exceeded"}},
            "DescribeLoadBalancers",
        )

        with pytest.raises(ClientError):
            client.load_balancer_exists("app-lb")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
