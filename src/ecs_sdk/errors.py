"""
Errors raised by the SDK itself.

Provider failures are never wrapped: botocore's ClientError reaches the
caller unchanged so that retry policy stays with the caller.
"""

from typing import Optional


class SdkError(Exception):
    """Base class for errors raised by ecs_sdk."""


class OperationCancelledError(SdkError):
    """The caller fired the cancellation event while an operation was pending."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} cancelled")
        self.operation = operation


class WaitTimeoutError(SdkError):
    """A poll loop ran out of attempts before reaching a terminal state."""

    def __init__(self, description: str, attempts: int, last_state: Optional[str] = None):
        message = f"Timed out waiting for {description} after {attempts} attempts"
        if last_state:
            message += f" (last state: {last_state})"
        super().__init__(message)
        self.description = description
        self.attempts = attempts
        self.last_state = last_state


class StackOperationError(SdkError):
    """A stack reached a failure state while an operation was awaited."""

    def __init__(
        self,
        stack_name: str,
        operation: str,
        status: Optional[str],
        reason: Optional[str] = None,
    ):
        message = f"Stack {stack_name} {operation.lower()} failed: {status or 'stack does not exist'}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.stack_name = stack_name
        self.operation = operation
        self.status = status
        self.reason = reason


class ChangeSetError(SdkError):
    """Change set creation failed for a reason other than an empty diff."""

    def __init__(self, change_set_id: str, reason: Optional[str]):
        super().__init__(f"Change set {change_set_id} failed: {reason or 'no reason provided'}")
        self.change_set_id = change_set_id
        self.reason = reason


class UnknownStackOperationError(SdkError, ValueError):
    """Internal error: a stack wait was requested for an unsupported operation."""

    def __init__(self, operation: object):
        super().__init__(f"internal error: unexpected stack operation {operation!r}")
        self.operation = operation


class NoDefaultVpcError(SdkError):
    """The account has no default VPC in the selected region."""


class ClusterDeletionError(SdkError):
    """An ECS cluster was not INACTIVE after deletion."""

    def __init__(self, cluster: str, status: str):
        super().__init__(f"Failed to delete cluster {cluster}, status: {status}")
        self.cluster = cluster
        self.status = status
