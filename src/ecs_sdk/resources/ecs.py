"""
ECS cluster and task operations.
"""

import logging
import threading
from typing import List, Optional

from ..errors import ClusterDeletionError
from ..polling import raise_if_cancelled
from ..types import TaskStatus

logger = logging.getLogger(__name__)

SERVICE_GROUP_PREFIX = "service:"


def service_from_group(group: str) -> str:
    """Strip the ``service:`` prefix ECS puts on service task groups."""
    if group.startswith(SERVICE_GROUP_PREFIX):
        return group[len(SERVICE_GROUP_PREFIX):]
    return group


class ClusterMixin:
    """ECS calls. Expects ``self.ecs`` to be an ECS client."""

    def cluster_exists(self, name: str, cancel: Optional[threading.Event] = None) -> bool:
        """Check if cluster was already created. INACTIVE clusters count as gone."""
        logger.debug(f"Check if cluster was already created: {name}")
        raise_if_cancelled(cancel, f"Describing cluster {name}")
        response = self.ecs.describe_clusters(clusters=[name])
        return any(c.get("status") != "INACTIVE" for c in response.get("clusters", []))

    def create_cluster(self, name: str, cancel: Optional[threading.Event] = None) -> str:
        """Create a cluster and return its status."""
        logger.debug(f"Create cluster {name}")
        raise_if_cancelled(cancel, f"Creating cluster {name}")
        response = self.ecs.create_cluster(clusterName=name)
        return str(response["cluster"]["status"])

    def delete_cluster(self, name: str, cancel: Optional[threading.Event] = None) -> None:
        """Delete a cluster. Raises ClusterDeletionError unless it ends up INACTIVE."""
        logger.debug(f"Delete cluster {name}")
        raise_if_cancelled(cancel, f"Deleting cluster {name}")
        response = self.ecs.delete_cluster(cluster=name)
        status = response["cluster"]["status"]
        if status != "INACTIVE":
            raise ClusterDeletionError(name, status)

    def list_tasks(
        self, cluster: str, service: str, cancel: Optional[threading.Event] = None
    ) -> List[str]:
        """List the ARNs of the tasks run by a service."""
        arns: List[str] = []
        paginator = self.ecs.get_paginator("list_tasks")
        for page in paginator.paginate(cluster=cluster, serviceName=service):
            raise_if_cancelled(cancel, f"Listing tasks of {service}")
            arns.extend(page.get("taskArns", []))
        return arns

    def describe_tasks(
        self, cluster: str, *arns: str, cancel: Optional[threading.Event] = None
    ) -> List[TaskStatus]:
        """Describe tasks, resolving their service name and network interface."""
        raise_if_cancelled(cancel, f"Describing tasks in {cluster}")
        response = self.ecs.describe_tasks(cluster=cluster, tasks=list(arns))

        result = []
        for task in response.get("tasks", []):
            network_interface = ""
            for attachment in task.get("attachments", []):
                if attachment.get("type") != "ElasticNetworkInterface":
                    continue
                for pair in attachment.get("details", []):
                    if pair.get("name") == "networkInterfaceId":
                        network_interface = pair["value"]

            result.append(
                TaskStatus(
                    state=task.get("lastStatus", ""),
                    service=service_from_group(task.get("group", "")),
                    network_interface=network_interface,
                )
            )
        return result
