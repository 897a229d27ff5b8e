"""Telegram command adapter.

This keeps Telethon-specific details out of the core command processor: it
finds the channel bound to the chat, runs the command, and replies with the
rendered text.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from telethon.tl.custom import Message

from adapters.message_catalog import MessageCatalog, render_result
from core.commands import CommandProcessor
from core.models import Channel

LOGGER = logging.getLogger(__name__)


class ChannelLookup(Protocol):
    def channel_by_chat_key(self, chat_key: str) -> Optional[Channel]:
        ...


def chat_key_from_message(message: Message) -> str:
    """Normalize a chat key using a single rule enforced across the app."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)

    if isinstance(username, str) and username:
        return f"@{username.lower()}"

    # Fallback: always stable and universal
    return f"chat_id:{message.chat_id}"


def split_command(text: str, trigger: str) -> Optional[list[str]]:
    """Return the tokens after the trigger, or None if text is not a command.

    ``/forum watch general`` and ``/forum@relaybot watch general`` both yield
    ``["watch", "general"]``.
    """

    parts = text.split()
    if not parts:
        return None
    head = parts[0].split("@", 1)[0].lower()
    if head != trigger.lower():
        return None
    return parts[1:]


class TelegramCommandHandler:
    """Telethon event handler for rule commands."""

    def __init__(
        self,
        processor: CommandProcessor,
        channels: ChannelLookup,
        catalog: MessageCatalog,
        trigger: str,
    ) -> None:
        self._processor = processor
        self._channels = channels
        self._catalog = catalog
        self._trigger = trigger

    async def handle(self, event) -> Optional[str]:
        """Process one incoming message; returns the reply sent, if any."""

        tokens = split_command(event.raw_text or "", self._trigger)
        if tokens is None:
            return None

        chat_key = chat_key_from_message(event.message)
        channel = self._channels.channel_by_chat_key(chat_key)
        if channel is None:
            LOGGER.info("Ignoring command from unbound chat %s", chat_key)
            return None

        result = self._processor.process_command(channel, tokens)
        LOGGER.info("Command in %s -> %s", chat_key, result.code.value)
        reply = render_result(result, self._catalog)
        await event.reply(reply, parse_mode="md")
        return reply
