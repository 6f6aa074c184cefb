"""
CloudWatch log tailing.

Tailing never ends on its own: it polls the project's log group forever and
stops only when the cancellation event fires or a fetch fails.

Known limitation: the watermark is the ingestion time of the last delivered
event, so an event ingested later than its neighbours but carrying an older
timestamp can be skipped.
"""

import logging
import threading
from typing import Dict, Iterator, Optional, Tuple

from ..polling import is_cancelled, sleep
from ..types import LogEvent, LogSink

logger = logging.getLogger(__name__)


def split_stream_name(stream_name: str) -> Tuple[str, str]:
    """Split ``<prefix>/<service>/<container>`` into service and container."""
    parts = stream_name.split("/")
    service = parts[1] if len(parts) > 1 else stream_name
    container = parts[2] if len(parts) > 2 else ""
    return service, container


def deliver(consumer: LogSink, event: LogEvent) -> None:
    """Hand a log event to a LogConsumer or a plain callable."""
    if hasattr(consumer, "log"):
        consumer.log(event.service, event.container, event.message)
    else:
        consumer(event.service, event.container, event.message)


class LogTail:
    """A log tail running in a background thread."""

    def __init__(self, thread: threading.Thread, cancel: threading.Event):
        self.thread = thread
        self.cancel = cancel
        self.error: Optional[BaseException] = None

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop tailing and re-raise the error that ended the tail, if any."""
        self.cancel.set()
        self.thread.join(timeout)
        if self.error is not None:
            raise self.error


class LogsMixin:
    """CloudWatch Logs calls. Expects ``self.logs`` and ``self.config``."""

    def iter_log_events(
        self,
        name: str,
        start_time: int = 0,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[LogEvent]:
        """
        Yield log events of a project forever.

        Args:
            name: Project name; the log group is derived from the config prefix
            start_time: Watermark (milliseconds) to start from
            cancel: Stops the generator at the next poll boundary
        """
        log_group = self.config.get_log_group(name)
        watermark = start_time
        # event id -> timestamp of events delivered at or after the watermark
        delivered: Dict[str, int] = {}

        while not is_cancelled(cancel):
            since = watermark
            token = None
            while True:
                params = {"logGroupName": log_group, "startTime": since}
                if token:
                    params["nextToken"] = token
                response = self.logs.filter_log_events(**params)

                for event in response.get("events", []):
                    event_id = event["eventId"]
                    timestamp = event.get("timestamp", since)
                    if timestamp < since or event_id in delivered:
                        continue

                    service, container = split_stream_name(event["logStreamName"])
                    yield LogEvent(
                        service=service,
                        container=container,
                        message=event["message"],
                        timestamp=timestamp,
                        ingestion_time=event["ingestionTime"],
                        event_id=event_id,
                    )

                    delivered[event_id] = timestamp
                    if event["ingestionTime"] > watermark:
                        watermark = event["ingestionTime"]

                token = response.get("nextToken")
                if not token:
                    break

            delivered = {i: ts for i, ts in delivered.items() if ts >= watermark}

            if sleep(self.config.log_poll_interval, cancel):
                return

    def get_logs(
        self,
        name: str,
        consumer: LogSink,
        start_time: int = 0,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """Tail a project's logs into ``consumer`` until cancelled."""
        logger.debug(f"Tail logs of {self.config.get_log_group(name)}")
        for event in self.iter_log_events(name, start_time=start_time, cancel=cancel):
            deliver(consumer, event)

    def start_log_tail(self, name: str, consumer: LogSink, start_time: int = 0) -> LogTail:
        """Run get_logs in a daemon thread."""
        cancel = threading.Event()

        def run() -> None:
            try:
                self.get_logs(name, consumer, start_time=start_time, cancel=cancel)
            except Exception as e:
                logger.error(f"Log tail of {name} stopped: {e}")
                tail.error = e

        thread = threading.Thread(target=run, name=f"log-tail-{name}", daemon=True)
        tail = LogTail(thread, cancel)
        thread.start()
        return tail
