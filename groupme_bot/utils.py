from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Optional

SENSITIVE_KEYS = frozenset({"bot_id", "token", "access_token", "secret", "authorization"})
REDACTED = "***"


def redact_payload(payload: Any) -> Any:
    """Return a copy of a decoded JSON value with sensitive keys masked at any depth."""
    if isinstance(payload, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else redact_payload(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_payload(item) for item in payload]
    return payload


def load_body(raw: bytes | str) -> Any:
    """Best-effort decode of a request body for dumping; undecodable text stays text."""
    text = raw.decode("utf-8", errors="ignore") if isinstance(raw, bytes) else raw
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def write_redacted_payload(payload: Any, request_id: str, base_dir: Optional[str]) -> Optional[str]:
    if not request_id or not base_dir:
        return None
    day = datetime.now(timezone.utc).strftime("%Y%m%d")
    dir_path = os.path.join(base_dir, day)
    os.makedirs(dir_path, exist_ok=True)
    file_path = os.path.join(dir_path, f"{request_id}.json")
    with open(file_path, "w", encoding="utf-8") as handle:
        json.dump(redact_payload(payload), handle, ensure_ascii=False, indent=2)
    return file_path
