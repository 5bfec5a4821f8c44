"""Tests for the bot's inbound handling and error supervision."""

import json
from dataclasses import replace

import pytest

from groupme_bot.bot import GroupMeBot, static_responder
from groupme_bot.config import BotConfig, build_config
from groupme_bot.errors import TriggerPatternError
from groupme_bot.types import InboundMessage
from tests.conftest import FakeBotPost, RecordingLogger, make_payload


def _bot(config: BotConfig, logger: RecordingLogger, bot_post: FakeBotPost) -> GroupMeBot:
    bot = GroupMeBot(config, message_logger=logger, api=bot_post.api())
    bot.add_hook("^hi", lambda message: "hello")
    bot.add_hook("bye$", lambda message: "goodbye")
    return bot


def test_user_message_is_logged_and_dispatched(
    config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost
) -> None:
    bot = _bot(config, recording_logger, bot_post)
    result = bot.handle_body(json.dumps(make_payload()).encode())

    assert len(recording_logger.messages) == 1
    assert recording_logger.messages[0].text == "hi there"
    assert result is not None and result.sent
    assert bot_post.payloads == [{"bot_id": "bot-123", "text": "hello", "attachments": []}]


def test_bot_message_ignored_by_default(
    config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost
) -> None:
    bot = _bot(config, recording_logger, bot_post)
    result = bot.handle_body(json.dumps(make_payload(sender_type="bot")).encode())

    assert result is None
    assert recording_logger.messages == []
    assert bot_post.payloads == []


def test_bot_message_handled_when_tracking(
    config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost
) -> None:
    bot = _bot(replace(config, trackbotmessages=True), recording_logger, bot_post)
    result = bot.handle_body(json.dumps(make_payload(sender_type="bot")).encode())

    assert len(recording_logger.messages) == 1
    assert result is not None and result.sent
    assert len(bot_post.payloads) == 1


def test_undecodable_body_is_not_dispatched(
    config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost
) -> None:
    bot = _bot(config, recording_logger, bot_post)
    assert bot.handle_body(b"{not json") is None
    assert recording_logger.messages == []
    assert bot_post.payloads == []


def test_logger_failure_does_not_stop_dispatch(config: BotConfig, bot_post: FakeBotPost) -> None:
    class BrokenLogger:
        def log_message(self, message: InboundMessage) -> None:
            raise OSError("disk full")

    bot = GroupMeBot(config, message_logger=BrokenLogger(), api=bot_post.api())
    bot.add_hook("^hi", lambda message: "hello")
    bot.handle_body(json.dumps(make_payload()).encode())
    assert len(bot_post.payloads) == 1


def test_hook_decorator(config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost) -> None:
    bot = GroupMeBot(config, message_logger=recording_logger, api=bot_post.api())

    @bot.hook(r"^!roll")
    def roll(message: InboundMessage) -> str:
        return f"{message.name} rolled a 4"

    bot.handle_message(InboundMessage(name="Alice", text="!roll"))
    assert bot_post.payloads[0]["text"] == "Alice rolled a 4"


def test_static_hooks_from_config(recording_logger: RecordingLogger, bot_post: FakeBotPost) -> None:
    config = build_config({"bot_id": "bot-123", "hooks": {"^hey": "hey {name}, you said {text}"}})
    bot = GroupMeBot(config, message_logger=recording_logger, api=bot_post.api())
    bot.handle_message(InboundMessage(name="Bo", text="hey {x}"))
    assert bot_post.payloads[0]["text"] == "hey Bo, you said hey {x}"


def test_static_responder() -> None:
    assert static_responder("plain")(InboundMessage()) == "plain"


def test_send_failure_continues_by_default(config: BotConfig, recording_logger: RecordingLogger) -> None:
    fatal: list[Exception] = []
    bot = GroupMeBot(
        config,
        message_logger=recording_logger,
        api=FakeBotPost(status_code=500).api(),
        on_fatal=fatal.append,
    )
    bot.add_hook("^hi", lambda message: "hello")

    result = bot.handle_message(InboundMessage(text="hi"))
    assert result.send_error is not None
    assert fatal == []
    assert bot.fatal_error is None


def test_send_failure_fatal_when_configured(config: BotConfig, recording_logger: RecordingLogger) -> None:
    fatal: list[Exception] = []
    bot = GroupMeBot(
        replace(config, exit_on_error=True),
        message_logger=recording_logger,
        api=FakeBotPost(status_code=500).api(),
        on_fatal=fatal.append,
    )
    bot.add_hook("^hi", lambda message: "hello")

    result = bot.handle_message(InboundMessage(text="hi"))
    assert fatal == [result.send_error]
    assert bot.fatal_error is result.send_error


def test_strict_pattern_error_is_fatal(
    config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost
) -> None:
    fatal: list[Exception] = []
    bot = GroupMeBot(
        replace(config, strict_patterns=True),
        message_logger=recording_logger,
        api=bot_post.api(),
        on_fatal=fatal.append,
    )
    bot.add_hook("(unclosed", lambda message: "x")

    with pytest.raises(TriggerPatternError):
        bot.handle_message(InboundMessage(text="hi"))
    assert len(fatal) == 1


def test_check_patterns(config: BotConfig, recording_logger: RecordingLogger, bot_post: FakeBotPost) -> None:
    bot = GroupMeBot(config, message_logger=recording_logger, api=bot_post.api())
    bot.add_hook("[bad", lambda message: "x")
    bot.add_hook("good", lambda message: "y")
    assert list(bot.check_patterns()) == ["[bad"]
