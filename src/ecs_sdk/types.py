"""
Domain types shared by the stack engine and the resource client.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from troposphere import Template


class _UsePreviousValue:
    """Marker for a stack parameter whose deployed value must be kept."""

    def __repr__(self) -> str:
        return "USE_PREVIOUS_VALUE"


USE_PREVIOUS_VALUE = _UsePreviousValue()

ParameterValue = Union[str, _UsePreviousValue]
TemplateBody = Union[Template, Dict[str, Any], str]


class StackOperation(Enum):
    """Kind of stack operation that can be awaited."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


def serialize_template(template: TemplateBody) -> str:
    """Render a template as the JSON body CloudFormation expects."""
    if isinstance(template, Template):
        return str(template.to_json())
    if isinstance(template, dict):
        return json.dumps(template)
    if isinstance(template, str):
        return template
    raise TypeError(f"Unsupported template type: {type(template).__name__}")


@dataclass
class StackEvent:
    """One resource transition reported by DescribeStackEvents."""

    event_id: str
    stack_id: str
    stack_name: str
    logical_id: str
    resource_type: str
    status: str
    timestamp: datetime
    physical_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def from_api(cls, event: Dict[str, Any]) -> "StackEvent":
        """Create an event from a raw DescribeStackEvents entry."""
        return cls(
            event_id=event["EventId"],
            stack_id=event["StackId"],
            stack_name=event["StackName"],
            logical_id=event.get("LogicalResourceId", ""),
            resource_type=event.get("ResourceType", ""),
            status=event.get("ResourceStatus", ""),
            timestamp=event["Timestamp"],
            physical_id=event.get("PhysicalResourceId"),
            reason=event.get("ResourceStatusReason"),
        )


@dataclass
class Secret:
    """A Secrets Manager secret holding registry-style credentials."""

    name: str
    id: str = ""
    description: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    username: str = field(default="", repr=False)
    password: str = field(default="", repr=False)

    def get_cred_string(self) -> str:
        """Return the secret string stored in Secrets Manager."""
        return json.dumps({"username": self.username, "password": self.password})


@dataclass
class TaskStatus:
    """Summary of a running ECS task."""

    state: str
    service: str
    network_interface: str = ""


@dataclass
class LogEvent:
    """A CloudWatch log line attributed to a service container."""

    service: str
    container: str
    message: str
    timestamp: int
    ingestion_time: int
    event_id: str


class LogConsumer(ABC):
    """Receives tailed log lines."""

    @abstractmethod
    def log(self, service: str, container: str, message: str) -> None:
        """Handle one log line of a service container."""


LogSink = Union[LogConsumer, Callable[[str, str, str], None]]
