"""Shared pytest fixtures for groupme_bot tests."""

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from groupme_bot.api import GroupMeAPI
from groupme_bot.config import BotConfig, build_config
from groupme_bot.types import InboundMessage


class RecordingLogger:
    """MessageLogger that keeps every observed message."""

    def __init__(self) -> None:
        self.messages: list[InboundMessage] = []

    def log_message(self, message: InboundMessage) -> None:
        self.messages.append(message)


class FakeBotPost:
    """Stand-in for the GroupMe bot-post endpoint, wired through httpx.MockTransport."""

    def __init__(self, status_code: int = 202) -> None:
        self.status_code = status_code
        # Decoded JSON bodies of every request received
        self.payloads: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.payloads.append(json.loads(request.content))
        return httpx.Response(self.status_code)

    def api(self) -> GroupMeAPI:
        return GroupMeAPI(client=httpx.Client(transport=httpx.MockTransport(self)))


@pytest.fixture
def bot_post() -> FakeBotPost:
    return FakeBotPost()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def config() -> BotConfig:
    return build_config({"bot_id": "bot-123", "group_id": "g1"})


def make_payload(**overrides: Any) -> dict[str, Any]:
    """Build a GroupMe callback body with sensible defaults."""
    payload: dict[str, Any] = {
        "id": "m1",
        "avatar_url": "https://i.groupme.com/avatar",
        "name": "Alice",
        "sender_id": "u1",
        "sender_type": "user",
        "system": False,
        "text": "hi there",
        "source_guid": "guid-1",
        "created_at": 1700000000,
        "user_id": "u1",
        "group_id": "g1",
        "favorited_by": [],
        "attachments": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Write a YAML config file for testing."""
    path = tmp_path / "bot_cfg.yaml"
    path.write_text(
        'bot_id: "bot-123"\n'
        'group_id: "g1"\n'
        'host: "127.0.0.1"\n'
        "port: 9000\n"
        "trackbotmessages: true\n"
        "match_policy: last\n"
        "hooks:\n"
        '  "^!ping": "pong"\n'
    )
    return path
