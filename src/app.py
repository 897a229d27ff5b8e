"""Application entry point for the forumrelay command bot."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.message_catalog import MessageCatalog, render_result
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_commands import TelegramCommandHandler
from client import bot_token, build_client
from core.commands import CommandProcessor
from core.config import EngineConfig
from core.reconciler import RuleReconciler
from core.status import StatusFormatter

NAME = "FORUMRELAY"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", ["API_HASH", "BOT_API"]):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/forumrelay.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _build_processor(storage: SQLiteStorage, catalog: MessageCatalog) -> CommandProcessor:
    config = EngineConfig(tagging_enabled=settings.TAGGING_ENABLED, tag_prefix=settings.TAG_PREFIX)
    # The SQLite adapter serves both rules and directory lookups.
    reconciler = RuleReconciler(storage=storage, directory=storage)
    status = StatusFormatter(storage=storage, directory=storage, catalog=catalog, config=config)
    return CommandProcessor(
        reconciler=reconciler,
        status_formatter=status,
        directory=storage,
        config=config,
    )


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting forumrelay")

    storage = _open_storage()
    catalog = MessageCatalog(settings.MESSAGES, trigger=settings.COMMAND_TRIGGER)
    processor = _build_processor(storage, catalog)
    command_handler = TelegramCommandHandler(
        processor=processor,
        channels=storage,
        catalog=catalog,
        trigger=settings.COMMAND_TRIGGER,
    )

    client = build_client()

    # Single handler keeps Telethon integration minimal and defers all parsing
    # to the core processor for consistency and testability.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await command_handler.handle(event)
        except Exception:
            logger.exception("Error while processing command")

    # Sign in with the bot token, then serve commands until disconnected.
    client.start(bot_token=bot_token())
    logger.info("Client connected. Listening for %s commands...", settings.COMMAND_TRIGGER)
    client.run_until_disconnected()


def _init_db() -> None:
    _configure_logging()
    _open_storage()
    print(f"Database ready at {settings.DB_PATH}")


def _import_directory(path: str) -> None:
    _configure_logging()
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    counts = _open_storage().import_directory(payload)
    summary = ", ".join(f"{name}={count}" for name, count in counts.items())
    logging.getLogger(__name__).info("Directory import complete: %s", summary)
    print(f"Imported {summary}")


def _exec(channel_id: int, tokens: list[str]) -> int:
    _configure_logging()
    storage = _open_storage()
    channel = storage.channel_by_id(channel_id)
    if channel is None:
        print(f"Unknown channel id: {channel_id}", file=sys.stderr)
        return 1
    catalog = MessageCatalog(settings.MESSAGES, trigger=settings.COMMAND_TRIGGER)
    result = _build_processor(storage, catalog).process_command(channel, tokens)
    print(render_result(result, catalog))
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="forumrelay")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the Telegram command bot")
    subparsers.add_parser("init-db", help="Create the SQLite tables")
    import_parser = subparsers.add_parser(
        "import-directory",
        help="Load categories, tags, groups and channels from a JSON export",
    )
    import_parser.add_argument("path")
    exec_parser = subparsers.add_parser("exec", help="Run one rule command against a channel")
    exec_parser.add_argument("--channel", type=int, required=True, help="Channel id")
    exec_parser.add_argument("tokens", nargs=argparse.REMAINDER, help="Command tokens, e.g. watch general")

    args = parser.parse_args(argv)
    if args.command == "init-db":
        _init_db()
        return
    if args.command == "import-directory":
        _import_directory(args.path)
        return
    if args.command == "exec":
        raise SystemExit(_exec(args.channel, args.tokens))
    _run()


if __name__ == "__main__":
    main()
