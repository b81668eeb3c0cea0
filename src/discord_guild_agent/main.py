#!/usr/bin/env python3
"""Main entry point for the Discord Guild Agent.

Loads settings, configures logging, checks that the voice toolchain is
available and runs the bot until it is interrupted.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from discord_guild_agent.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_guild_agent.config.settings import Settings

_DEFAULT_LOGGING_CONFIG = Path(__file__).resolve().parents[2] / "logging_config.json"
_FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _logging_config_path() -> Path:
    override = os.environ.get("LOGGING_CONFIG")
    return Path(override) if override else _DEFAULT_LOGGING_CONFIG


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging from the JSON dictConfig, or a plain console format."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    config_path = _logging_config_path()

    try:
        with open(config_path) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(level=resolved_level, format=_FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger(__name__).warning(
            "Could not load %s, falling back to basic config", config_path
        )

    logging.getLogger().setLevel(resolved_level)


def _preflight(settings: Settings, logger: logging.Logger) -> None:
    if shutil.which("ffmpeg") is None:
        logger.warning(LogTemplates.FFMPEG_NOT_FOUND)

    logger.info(
        LogTemplates.BOT_CONFIG_SUMMARY,
        settings.discord.command_prefix,
        settings.audit.log_channel_name,
        settings.audit.enabled,
        settings.playback.idle_disconnect_seconds,
    )


def main() -> int:
    from discord_guild_agent.config.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logging.getLogger(__name__).error(ErrorMessages.INVALID_SETTINGS, e)
        return EXIT_CONFIG_ERROR

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    if not settings.has_token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return EXIT_ERROR

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    _preflight(settings, logger)

    from discord_guild_agent.config.container import create_container
    from discord_guild_agent.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(settings.discord.token.get_secret_value().strip())
        logger.info(LogTemplates.BOT_STOPPED)
        return EXIT_OK
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return EXIT_OK
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return EXIT_ERROR


def cli() -> None:
    """Console script entry point (``discord-guild-agent``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
