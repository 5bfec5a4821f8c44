from .api import GroupMeAPI
from .bot import GroupMeBot, static_responder
from .config import BotConfig, build_config, load_config
from .dispatcher import MATCH_FIRST, MATCH_LAST, DispatchResult, Dispatcher
from .errors import ConfigError, GroupMeBotError, InboundDecodeError, SendError, TriggerPatternError
from .message_log import CSVMessageLogger, LoggingMessageLogger, MessageLogger, NullMessageLogger
from .parse import decode_inbound, parse_inbound
from .registry import Responder, TriggerRegistry
from .server import GroupMeCallbackServer
from .types import SENDER_BOT, SENDER_SYSTEM, SENDER_USER, Attachment, InboundMessage, OutboundMessage

__all__ = [
    "Attachment",
    "BotConfig",
    "CSVMessageLogger",
    "ConfigError",
    "DispatchResult",
    "Dispatcher",
    "GroupMeAPI",
    "GroupMeBot",
    "GroupMeBotError",
    "GroupMeCallbackServer",
    "InboundDecodeError",
    "InboundMessage",
    "LoggingMessageLogger",
    "MATCH_FIRST",
    "MATCH_LAST",
    "MessageLogger",
    "NullMessageLogger",
    "OutboundMessage",
    "Responder",
    "SENDER_BOT",
    "SENDER_SYSTEM",
    "SENDER_USER",
    "SendError",
    "TriggerPatternError",
    "TriggerRegistry",
    "build_config",
    "decode_inbound",
    "load_config",
    "parse_inbound",
    "static_responder",
]
