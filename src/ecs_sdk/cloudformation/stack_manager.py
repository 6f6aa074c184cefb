"""
CloudFormation stack convergence operations.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import ClientError

from ..errors import ChangeSetError, StackOperationError, UnknownStackOperationError
from ..polling import poll_until, raise_if_cancelled
from ..session import AwsSession
from ..types import (
    USE_PREVIOUS_VALUE,
    ParameterValue,
    StackEvent,
    StackOperation,
    TemplateBody,
    serialize_template,
)
from .progress import StackProgress

logger = logging.getLogger(__name__)

CAPABILITIES = ["CAPABILITY_IAM"]

NO_CHANGES_REASONS = (
    "The submitted information didn't contain changes.",
    "No updates are to be performed.",
)

# (success states, failure states, whether a vanished stack counts as success)
WAIT_STATES = {
    StackOperation.CREATE: (
        {"CREATE_COMPLETE"},
        {
            "CREATE_FAILED",
            "ROLLBACK_IN_PROGRESS",
            "ROLLBACK_COMPLETE",
            "ROLLBACK_FAILED",
            "DELETE_IN_PROGRESS",
            "DELETE_COMPLETE",
            "DELETE_FAILED",
        },
        False,
    ),
    StackOperation.UPDATE: (
        {"UPDATE_COMPLETE"},
        {
            "UPDATE_FAILED",
            "UPDATE_ROLLBACK_FAILED",
            "UPDATE_ROLLBACK_COMPLETE",
            "DELETE_IN_PROGRESS",
            "DELETE_COMPLETE",
            "DELETE_FAILED",
        },
        False,
    ),
    StackOperation.DELETE: (
        {"DELETE_COMPLETE"},
        {"DELETE_FAILED"},
        True,
    ),
}

_ABSENT = "ABSENT"


def is_stack_missing(error: ClientError) -> bool:
    """Check whether a DescribeStacks error means the stack does not exist."""
    details = error.response.get("Error", {})
    return details.get("Code") == "ValidationError" and "does not exist" in details.get(
        "Message", ""
    )


def is_no_changes_reason(reason: Optional[str]) -> bool:
    """Check whether a change set status reason reports an empty diff."""
    return bool(reason) and reason.startswith(NO_CHANGES_REASONS)


class StackManager(AwsSession):
    """Converge CloudFormation stacks to a desired template."""

    def _describe_stack(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> Optional[Dict[str, Any]]:
        """Describe a stack, or return None when it does not exist."""
        raise_if_cancelled(cancel, f"Describing stack {stack_name}")
        try:
            response = self.cloudformation.describe_stacks(StackName=stack_name)
        except ClientError as e:
            if is_stack_missing(e):
                return None
            raise
        if response["Stacks"]:
            return dict(response["Stacks"][0])
        return None

    def stack_exists(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> bool:
        """Check whether a stack exists. Only a "does not exist" error means False."""
        stack = self._describe_stack(stack_name, cancel=cancel)
        return stack is not None and stack["StackStatus"] != "DELETE_COMPLETE"

    def get_stack_status(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> Optional[str]:
        """Get current stack status."""
        stack = self._describe_stack(stack_name, cancel=cancel)
        if stack is None:
            return None
        return str(stack["StackStatus"])

    def get_stack_id(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> str:
        """Get the immutable stack ID behind a stack name."""
        raise_if_cancelled(cancel, f"Describing stack {stack_name}")
        response = self.cloudformation.describe_stacks(StackName=stack_name)
        return str(response["Stacks"][0]["StackId"])

    def get_stack_outputs(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> Dict[str, str]:
        """Get outputs from a CloudFormation stack."""
        stack = self._describe_stack(stack_name, cancel=cancel)
        if stack is None:
            return {}
        return {
            output["OutputKey"]: output["OutputValue"]
            for output in stack.get("Outputs", [])
        }

    def create_stack(
        self,
        stack_name: str,
        template: TemplateBody,
        parameters: Optional[Dict[str, ParameterValue]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Submit a new stack. Completion must be awaited with wait_stack_complete.

        Args:
            stack_name: Name of the CloudFormation stack
            template: Template document
            parameters: Template parameters
            cancel: Optional cancellation event

        Returns:
            The new stack ID
        """
        logger.debug(f"Create CloudFormation stack {stack_name}")
        body = serialize_template(template)

        cf_params = []
        for key, value in (parameters or {}).items():
            if value is USE_PREVIOUS_VALUE:
                raise ValueError(
                    f"Parameter {key} cannot reuse a previous value on stack creation"
                )
            cf_params.append({"ParameterKey": key, "ParameterValue": value})

        raise_if_cancelled(cancel, f"Creating stack {stack_name}")
        response = self.cloudformation.create_stack(
            StackName=stack_name,
            TemplateBody=body,
            Parameters=cf_params,
            OnFailure="DELETE",
            TimeoutInMinutes=self.config.stack_create_timeout,
            Capabilities=CAPABILITIES,
        )
        return str(response.get("StackId", ""))

    def create_change_set(
        self,
        stack_name: str,
        template: TemplateBody,
        parameters: Optional[Dict[str, ParameterValue]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Create an update change set for an existing stack and wait for it.

        Parameters keep their deployed values: only the keys of ``parameters``
        are sent, each with UsePreviousValue.

        Returns:
            The change set ID. A change set without changes is returned too;
            execute_change_set detects and discards it.
        """
        logger.debug(f"Create CloudFormation change set for {stack_name}")
        body = serialize_template(template)

        cf_params = [
            {"ParameterKey": key, "UsePreviousValue": True} for key in (parameters or {})
        ]

        change_set_name = "Update-" + datetime.now(timezone.utc).strftime(
            "%Y-%m-%d-%H-%M-%S"
        )

        raise_if_cancelled(cancel, f"Creating change set for {stack_name}")
        response = self.cloudformation.create_change_set(
            ChangeSetName=change_set_name,
            ChangeSetType="UPDATE",
            StackName=stack_name,
            TemplateBody=body,
            Parameters=cf_params,
            Capabilities=CAPABILITIES,
        )
        change_set_id = str(response["Id"])

        self._wait_change_set_created(change_set_id, cancel=cancel)
        return change_set_id

    def _wait_change_set_created(
        self, change_set_id: str, cancel: Optional[threading.Event] = None
    ) -> None:
        def check() -> Optional[str]:
            desc = self.cloudformation.describe_change_set(ChangeSetName=change_set_id)
            status = desc["Status"]
            if status == "FAILED":
                reason = desc.get("StatusReason")
                if is_no_changes_reason(reason):
                    return "NO_CHANGES"
                logger.warning(f"Change set {change_set_id} failed, discarding it: {reason}")
                self.cloudformation.delete_change_set(ChangeSetName=change_set_id)
                raise ChangeSetError(change_set_id, reason)
            return str(status)

        poll_until(
            check,
            lambda status: status in ("CREATE_COMPLETE", "NO_CHANGES"),
            f"change set {change_set_id}",
            self.config.change_set_wait_delay,
            self.config.change_set_wait_max_attempts,
            cancel=cancel,
        )

    def execute_change_set(
        self, change_set_id: str, cancel: Optional[threading.Event] = None
    ) -> bool:
        """
        Execute a change set unless it holds no changes.

        Returns:
            True if the change set was executed, False for an empty change set
        """
        raise_if_cancelled(cancel, f"Describing change set {change_set_id}")
        desc = self.cloudformation.describe_change_set(ChangeSetName=change_set_id)

        if is_no_changes_reason(desc.get("StatusReason")):
            logger.warning(f"Change set {change_set_id} contains no changes, discarding it")
            self.cloudformation.delete_change_set(ChangeSetName=change_set_id)
            return False

        raise_if_cancelled(cancel, f"Executing change set {change_set_id}")
        self.cloudformation.execute_change_set(ChangeSetName=change_set_id)
        return True

    update_stack = execute_change_set

    def wait_stack_complete(
        self,
        stack_name: str,
        operation: StackOperation,
        cancel: Optional[threading.Event] = None,
        on_status: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        """
        Block until the stack reaches the terminal state of ``operation``.

        Args:
            stack_name: Stack name or ID. Waiting on the ID keeps a stack that
                OnFailure=DELETE removed visible as DELETE_COMPLETE.
            operation: Operation being awaited
            cancel: Optional cancellation event
            on_status: Called with the described stack at every poll
        """
        if not isinstance(operation, StackOperation):
            raise UnknownStackOperationError(operation)

        success, failures, absent_ok = WAIT_STATES[operation]

        def check() -> Optional[str]:
            stack = self._describe_stack(stack_name)
            if stack is None:
                if absent_ok:
                    return _ABSENT
                raise StackOperationError(stack_name, operation.value, None)

            if on_status is not None:
                on_status(stack)

            status = str(stack["StackStatus"])
            if status in failures:
                raise StackOperationError(
                    stack.get("StackName", stack_name),
                    operation.value,
                    status,
                    stack.get("StackStatusReason"),
                )
            return status

        status = poll_until(
            check,
            lambda state: state in success or state == _ABSENT,
            f"stack {stack_name} {operation.value.lower()}",
            self.config.stack_wait_delay,
            self.config.stack_wait_max_attempts,
            cancel=cancel,
        )
        logger.debug(f"Stack {stack_name} reached {status}")

    def delete_stack(
        self, stack_name: str, cancel: Optional[threading.Event] = None
    ) -> None:
        """Submit stack deletion. Completion must be awaited with wait_stack_complete."""
        logger.debug(f"Delete CloudFormation stack {stack_name}")
        raise_if_cancelled(cancel, f"Deleting stack {stack_name}")
        self.cloudformation.delete_stack(StackName=stack_name)

    def describe_stack_events(
        self, stack_id: str, cancel: Optional[threading.Event] = None
    ) -> List[StackEvent]:
        """
        Fetch every event of a stack, following continuation tokens.

        Events are returned in the order CloudFormation sends them. A failing
        page aborts the whole fetch.
        """
        events: List[StackEvent] = []
        next_token: Optional[str] = None

        while True:
            raise_if_cancelled(cancel, f"Describing events of {stack_id}")
            params = {"StackName": stack_id}
            if next_token:
                params["NextToken"] = next_token

            response = self.cloudformation.describe_stack_events(**params)
            events.extend(StackEvent.from_api(e) for e in response["StackEvents"])

            next_token = response.get("NextToken")
            if not next_token:
                return events

    def converge(
        self,
        stack_name: str,
        template: TemplateBody,
        parameters: Optional[Dict[str, ParameterValue]] = None,
        progress: Optional[Callable[[StackEvent], None]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[StackOperation]:
        """
        Apply a template to a stack, creating or updating it as needed.

        Args:
            stack_name: Name of the CloudFormation stack
            template: Desired template document
            parameters: Template parameters
            progress: Receives new stack events while the operation runs
            cancel: Optional cancellation event

        Returns:
            The operation performed, or None when the stack was already up to date
        """
        status = self.get_stack_status(stack_name, cancel=cancel)

        if status == "ROLLBACK_COMPLETE":
            # A failed creation cannot be updated, only replaced
            logger.warning(f"Stack {stack_name} is in ROLLBACK_COMPLETE, deleting it first")
            self.delete_stack(stack_name, cancel=cancel)
            self.wait_stack_complete(stack_name, StackOperation.DELETE, cancel=cancel)
            status = None

        if status is None or status == "DELETE_COMPLETE":
            logger.info(f"Creating stack {stack_name}")
            stack_id = self.create_stack(stack_name, template, parameters, cancel=cancel)
            tracker = StackProgress(self, progress, cancel) if progress else None
            self.wait_stack_complete(
                stack_id or stack_name,
                StackOperation.CREATE,
                cancel=cancel,
                on_status=tracker,
            )
            logger.info(f"Stack {stack_name} created")
            return StackOperation.CREATE

        logger.info(f"Updating stack {stack_name}")
        change_set_id = self.create_change_set(
            stack_name, template, parameters, cancel=cancel
        )

        tracker = None
        if progress:
            tracker = StackProgress(self, progress, cancel)
            tracker.prime(stack_name)

        if not self.execute_change_set(change_set_id, cancel=cancel):
            logger.info(f"Stack {stack_name} is up to date")
            return None

        self.wait_stack_complete(
            stack_name, StackOperation.UPDATE, cancel=cancel, on_status=tracker
        )
        logger.info(f"Stack {stack_name} updated")
        return StackOperation.UPDATE
