"""
Cancellable polling primitives.

Every blocking call in the SDK waits through these helpers so that a fired
``threading.Event`` stops the wait at the next poll boundary.
"""

import threading
import time
from typing import Callable, Optional

from .errors import OperationCancelledError, WaitTimeoutError


def is_cancelled(cancel: Optional[threading.Event]) -> bool:
    """Check whether the caller fired the cancellation event."""
    return cancel is not None and cancel.is_set()


def raise_if_cancelled(cancel: Optional[threading.Event], operation: str) -> None:
    """Abort before issuing a remote call once cancellation fired."""
    if is_cancelled(cancel):
        raise OperationCancelledError(operation)


def sleep(delay: float, cancel: Optional[threading.Event] = None) -> bool:
    """
    Sleep for ``delay`` seconds.

    Returns:
        True if the cancellation event fired during the sleep
    """
    if cancel is None:
        time.sleep(delay)
        return False
    return cancel.wait(delay)


def poll_until(
    check: Callable[[], Optional[str]],
    is_done: Callable[[Optional[str]], bool],
    description: str,
    delay: float,
    max_attempts: int,
    cancel: Optional[threading.Event] = None,
) -> Optional[str]:
    """
    Poll a remote state until it is terminal.

    Args:
        check: Fetches the current state. Raises to abort the wait.
        is_done: Decides whether a state ends the wait successfully.
        description: Human readable description used in errors
        delay: Seconds between polls
        max_attempts: Number of polls before giving up
        cancel: Optional cancellation event

    Returns:
        The terminal state
    """
    state = None
    for attempt in range(1, max_attempts + 1):
        raise_if_cancelled(cancel, f"Waiting for {description}")

        state = check()
        if is_done(state):
            return state

        if attempt < max_attempts and sleep(delay, cancel):
            raise OperationCancelledError(f"Waiting for {description}")

    raise WaitTimeoutError(description, max_attempts, state)
