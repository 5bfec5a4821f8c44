from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .bot import GroupMeBot
from .config import load_config, validate_log_level
from .errors import ConfigError
from .server import GroupMeCallbackServer

LOGGER = logging.getLogger("groupme_bot.cli")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="groupme-bot",
        description="Run a GroupMe bot that replies to messages matching regex triggers.",
    )
    parser.add_argument("config", help="Path to bot configuration (.json, .yaml or .yml)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        log_level = validate_log_level(args.log_level) if args.log_level else config.log_level
    except ConfigError as exc:
        setup_logging("INFO")
        LOGGER.critical("%s", exc)
        return 1

    setup_logging(log_level)
    bot = GroupMeBot(config)
    try:
        invalid = bot.check_patterns()
        if invalid and config.strict_patterns:
            LOGGER.critical("Refusing to start with %s invalid trigger pattern(s)", len(invalid))
            return 1

        server = GroupMeCallbackServer(bot, log_level=log_level)
        server.serve()
    finally:
        bot.close()

    if bot.fatal_error is not None:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
