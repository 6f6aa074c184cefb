"""
Stack progress reporting.
"""

import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Set

from ..types import StackEvent

if TYPE_CHECKING:
    from .stack_manager import StackManager


class StackProgress:
    """Forward stack events that were not reported before.

    Instances are passed as ``on_status`` to StackManager.wait_stack_complete,
    so they are invoked once per poll with the described stack. Event fetches
    honour the ``cancel`` event of the operation being tracked.
    """

    def __init__(
        self,
        manager: "StackManager",
        callback: Callable[[StackEvent], None],
        cancel: Optional[threading.Event] = None,
    ):
        self.manager = manager
        self.callback = callback
        self.cancel = cancel
        self.seen: Set[str] = set()

    def prime(self, stack_id: str) -> None:
        """Mark the events of earlier operations as already reported."""
        for event in self.manager.describe_stack_events(stack_id, cancel=self.cancel):
            self.seen.add(event.event_id)

    def __call__(self, stack: Dict[str, Any]) -> None:
        for event in self.manager.describe_stack_events(
            stack["StackId"], cancel=self.cancel
        ):
            if event.event_id in self.seen:
                continue
            self.seen.add(event.event_id)
            self.callback(event)
