"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from pathlib import Path
from typing import Sequence

from .chat_adapters.i_chat_adapter import IChatAdapter
from .chat_adapters.slack_adapter import SlackAdapter
from .core import CommandDefinition, CommandDescription, Config, ConfigError, load_config
from .core.commands import Commander
from .core.config import resolve_config_dir
from .core.models import InboundMessage, ParameterResult
from .middleware import Authorizer, RateLimiter
from .storage import SqliteRoleStore

LOGGER = logging.getLogger(__name__)


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="guild-commander",
        description="Guild Commander - prefix command bot for Slack workspaces",
    )
    parser.add_argument(
        "--config-dir",
        help="Directory containing .env and commander.yaml (default: ~/.guild-commander)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("check-config", help="Validate configuration and exit")

    args = parser.parse_args(argv)

    if args.command == "check-config":
        try:
            config = load_config(args.config_dir)
        except ConfigError as exc:
            print(f"Configuration error: {exc}")
            return 1
        print(
            f"Prefix: {config.prefix}\n"
            f"Bot type: {config.options.bot_type.value}\n"
            f"Role database: {config.database_path}"
        )
        return 0

    try:
        asyncio.run(_run_async(args.config_dir))
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130
    return 0


async def ping(
    message: InboundMessage,
    definition: CommandDefinition,
    parameters: ParameterResult,
    client: IChatAdapter,
    commander: Commander,
) -> bool:
    await client.send_message(message.channel_id, "pong!", thread_ts=message.thread_ts)
    return True


def build_commander(config: Config, client: IChatAdapter, role_store: SqliteRoleStore) -> Commander:
    """Wire the built-in middleware and commands for a configured bot."""

    authorizer = Authorizer(role_store, superuser=config.superuser, options=config.auth)
    commander = Commander(config.prefix, client, config.options, authorizer=authorizer)
    if config.rate_limit:
        commander.use(RateLimiter(config.rate_limit.messages, config.rate_limit.window_seconds))
    commander.define_command(authorizer.role_command()).define_command(
        CommandDefinition(
            names=("p", "ping"),
            action=ping,
            description=CommandDescription(message="Replies with pong.", example="{{prefix}}ping"),
        )
    )
    return commander.generate_help()


async def _run_async(config_dir: str | Path | None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    resolved_dir = resolve_config_dir(config_dir)
    LOGGER.info("Using config directory: %s", resolved_dir)

    config: Config = load_config(resolved_dir)

    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    logging.getLogger().setLevel(log_level)

    role_store = SqliteRoleStore(config.database_path)
    await role_store.connect()

    slack_adapter = SlackAdapter(bot_token=config.slack_bot_token, app_token=config.slack_app_token)
    commander = build_commander(config, slack_adapter, role_store).listen()
    LOGGER.info(
        "Registered %s command(s) with prefix %s",
        len(commander.registry),
        config.prefix,
    )

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _request_shutdown() -> None:
        LOGGER.info("Shutdown requested")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except NotImplementedError:
            # Windows event loops before 3.11 do not support signal handlers.
            pass

    slack_task = asyncio.create_task(slack_adapter.start())
    LOGGER.info("Guild Commander started")

    await stop_event.wait()
    await slack_adapter.stop()
    await slack_task
    await role_store.close()
    LOGGER.info("Shutdown complete")


if __name__ == "__main__":
    raise SystemExit(cli())
