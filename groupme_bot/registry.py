from __future__ import annotations

import re
import threading
from typing import Callable, Iterator, Optional

from .types import InboundMessage

Responder = Callable[[InboundMessage], str]
Trigger = tuple[str, Responder]


class TriggerRegistry:
    """Pattern -> responder map, ordered by first registration.

    Writers swap in a fresh tuple under a lock; readers take the current
    tuple without locking, so hooks can be added while requests are served.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: tuple[Trigger, ...] = ()

    def register(self, pattern: str, responder: Responder) -> None:
        with self._lock:
            entries = list(self._entries)
            for index, (existing, _) in enumerate(entries):
                if existing == pattern:
                    entries[index] = (pattern, responder)
                    break
            else:
                entries.append((pattern, responder))
            self._entries = tuple(entries)

    def remove(self, pattern: str) -> bool:
        with self._lock:
            entries = tuple(item for item in self._entries if item[0] != pattern)
            removed = len(entries) != len(self._entries)
            self._entries = entries
        return removed

    def get(self, pattern: str) -> Optional[Responder]:
        for existing, responder in self._entries:
            if existing == pattern:
                return responder
        return None

    def entries(self) -> tuple[Trigger, ...]:
        return self._entries

    def invalid_patterns(self) -> dict[str, str]:
        invalid: dict[str, str] = {}
        for pattern, _ in self._entries:
            try:
                re.compile(pattern)
            except re.error as exc:
                invalid[pattern] = str(exc)
        return invalid

    def __contains__(self, pattern: object) -> bool:
        return any(existing == pattern for existing, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Trigger]:
        return iter(self._entries)
