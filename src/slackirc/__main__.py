"""Relay entrypoint. Loads config, wires the relay, runs both adapters."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from slackirc import __version__
from slackirc.adapters import IRCAdapter, SlackAdapter
from slackirc.config import Config, cfg, load_config_with_env
from slackirc.core.errors import ConfigurationError
from slackirc.gateway import ChannelMapping, Relay

# Third-party libraries to intercept and route through loguru
_INTERCEPTED_LIBRARIES = ["pydle", "slack_sdk", "slack_sdk.socket_mode"]


def _intercept_logging(level: str) -> None:
    """Route third-party library logs to loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                log_level: str | int = logger.level(record.levelname).name
            except ValueError:
                log_level = record.levelno
            msg = record.getMessage().replace("{", "{{").replace("}", "}}")
            logger.patch(
                lambda r: r.update(
                    name=record.name,
                    function=record.funcName,
                    line=record.lineno,
                ),
            ).opt(exception=record.exc_info).log(log_level, msg)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for lib in _INTERCEPTED_LIBRARIES:
        lib_logger = logging.getLogger(lib)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False
        lib_logger.setLevel(level)


def _safe_message_filter(record: Any) -> bool:
    """Escape braces/angles in log messages to prevent format/tag errors."""
    if isinstance(record.get("message"), str):
        msg = record["message"]
        msg = msg.replace("{", "{{").replace("}", "}}").replace("<", "\\<")
        record["message"] = msg
    return True


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise INFO."""
    level = "INFO"
    if verbose:
        level = "DEBUG"
    else:
        env_level = (os.environ.get("LOG_LEVEL") or "").upper()
        if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = env_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"),
        filter=_safe_message_filter,
    )
    _intercept_logging(level)


def reload_config(config_path: Path) -> Config:
    """Load config from path into the global cfg; raises ConfigurationError when invalid."""
    data = load_config_with_env(config_path)
    cfg.reload(data)
    return cfg


def build(config: Config) -> tuple[IRCAdapter, SlackAdapter, Relay]:
    """Create both adapters and the relay, wired and ready to start."""
    mapping = ChannelMapping(config.channel_mapping)
    options = config.irc_options
    irc = IRCAdapter(
        config.server,
        config.nickname,
        mapping.irc_channels(),
        port=config.irc_port,
        tls=config.irc_tls,
        tls_verify=config.irc_tls_verify,
        username=options.get("username"),
        realname=options.get("realname"),
        password=options.get("password"),
        flood_delay=float(options.get("flood_delay", 0.5)),
    )
    slack = SlackAdapter(
        config.token,
        config.app_token,
        watch_user=config.slack_user,
        presence_poll_seconds=config.slack_presence_poll_seconds,
    )
    relay = Relay.from_config(irc, slack, config, mapping)
    relay.attach_listeners()
    return irc, slack, relay


def main() -> None:
    """Main entrypoint."""
    parser = argparse.ArgumentParser(description="slackirc: relay between an IRC network and Slack")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.config.exists():
        logger.error("Config file not found: {}", args.config)
        sys.exit(1)

    try:
        config = reload_config(args.config)
        irc, slack, relay = build(config)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: {}", exc)
        sys.exit(2)
    logger.info("Config loaded from {}", args.config)
    logger.info("Relay ready with {} channel mappings", len(relay.channel_mapping))

    try:
        asyncio.run(_run(irc, slack))
    except KeyboardInterrupt:
        logger.info("Interrupted")


async def _run(irc: IRCAdapter, slack: SlackAdapter) -> None:
    """Async run loop. Start adapters and wait."""
    logger.debug("Connecting to IRC and Slack")
    await slack.start()
    await irc.start()
    try:
        while True:
            await asyncio.sleep(60)
    except asyncio.CancelledError:
        logger.info("Relay shutting down")
        for adapter in (irc, slack):
            logger.info("Stopping {} adapter", adapter.name)
            await adapter.stop()


if __name__ == "__main__":
    main()
