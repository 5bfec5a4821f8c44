from __future__ import annotations

import csv
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from .types import InboundMessage

LOGGER = logging.getLogger(__name__)

CSV_COLUMNS = [
    "created_at",
    "group_id",
    "id",
    "sender_id",
    "sender_type",
    "name",
    "text",
    "attachments",
]


@runtime_checkable
class MessageLogger(Protocol):
    """Observes inbound messages before they are dispatched.

    Called synchronously on the request thread, so implementations must not
    block indefinitely.
    """

    def log_message(self, message: InboundMessage) -> None: ...


class NullMessageLogger:
    def log_message(self, message: InboundMessage) -> None:
        return None


class LoggingMessageLogger:
    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or LOGGER
        self.level = level

    def log_message(self, message: InboundMessage) -> None:
        self.logger.log(
            self.level,
            "Message %s group=%s sender=%s (%s) text_len=%s attachments=%s",
            message.id,
            message.group_id,
            message.sender_id,
            message.sender_type,
            len(message.text),
            len(message.attachments),
        )


class CSVMessageLogger:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def log_message(self, message: InboundMessage) -> None:
        created = datetime.fromtimestamp(message.created_at, tz=timezone.utc).isoformat()
        row = [
            created,
            message.group_id,
            message.id,
            message.sender_id,
            message.sender_type,
            message.name,
            message.text,
            ";".join(str(item.get("type", "")) for item in message.attachments),
        ]
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            write_header = not self.path.exists() or self.path.stat().st_size == 0
            with open(self.path, "a", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                if write_header:
                    writer.writerow(CSV_COLUMNS)
                writer.writerow(row)
