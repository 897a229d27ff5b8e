"""Telegram client factory for forumrelay.

The bot signs in with a Bot API token (BOT_API) on top of the API_ID/API_HASH
application credentials; app.py drives start/run_until_disconnected.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient


def build_client() -> TelegramClient:
    """Create a Telethon client from environment variables.

    We read API_ID/API_HASH via python-dotenv to keep secrets out of the repo.
    The session name defaults to "forumrelay" to create a local .session file.
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "forumrelay")

    # Fail fast on missing credentials to avoid an ambiguous login prompt.
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(session_name, int(api_id), api_hash)


def bot_token() -> str:
    """Return the bot token used to sign in, failing fast when absent."""

    load_dotenv()
    token = os.getenv("BOT_API")
    if not token:
        raise RuntimeError("Missing BOT_API in environment")
    return token
