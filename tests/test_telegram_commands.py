from __future__ import annotations

import asyncio
from typing import Optional

from adapters.message_catalog import MessageCatalog
from adapters.telegram_commands import TelegramCommandHandler, chat_key_from_message, split_command
from core.models import Channel


class DummyChat:
    def __init__(self, username: "str | None" = None) -> None:
        self.username = username


class DummyMessage:
    def __init__(self, *, chat_id: int, chat: "DummyChat | None" = None) -> None:
        self.chat_id = chat_id
        self.chat = chat


class DummyEvent:
    def __init__(self, text: str, message: DummyMessage) -> None:
        self.raw_text = text
        self.message = message
        self.replies: list[str] = []

    async def reply(self, text: str, parse_mode: Optional[str] = None) -> None:
        self.replies.append(text)


class DummyChannels:
    def __init__(self, channels: dict[str, Channel]) -> None:
        self._channels = channels

    def channel_by_chat_key(self, chat_key: str) -> Optional[Channel]:
        return self._channels.get(chat_key)


def _handler(make_processor, channel: Channel) -> TelegramCommandHandler:
    return TelegramCommandHandler(
        processor=make_processor(),
        channels=DummyChannels({"@team": channel}),
        catalog=MessageCatalog(trigger="/forum"),
        trigger="/forum",
    )


def test_split_command() -> None:
    assert split_command("/forum watch general", "/forum") == ["watch", "general"]
    assert split_command("/forum@relaybot  status", "/forum") == ["status"]
    assert split_command("/forum", "/forum") == []
    assert split_command("hello /forum status", "/forum") is None
    assert split_command("", "/forum") is None


def test_chat_key_prefers_username() -> None:
    assert chat_key_from_message(DummyMessage(chat_id=-100123, chat=DummyChat("Team"))) == "@team"
    assert chat_key_from_message(DummyMessage(chat_id=-100123, chat=DummyChat(None))) == "chat_id:-100123"


def test_command_creates_rule_and_replies(storage, make_processor, channel) -> None:
    event = DummyEvent("/forum watch general", DummyMessage(chat_id=1, chat=DummyChat("team")))

    reply = asyncio.run(_handler(make_processor, channel).handle(event))

    assert reply == "Rule created successfully"
    assert event.replies == [reply]
    assert len(storage.for_channel(channel.id)) == 1


def test_bare_trigger_gets_parse_error(make_processor, channel) -> None:
    event = DummyEvent("/forum", DummyMessage(chat_id=1, chat=DummyChat("team")))

    reply = asyncio.run(_handler(make_processor, channel).handle(event))

    assert reply.startswith("Sorry, I didn't understand that.")


def test_non_commands_and_unbound_chats_are_ignored(storage, make_processor, channel) -> None:
    handler = _handler(make_processor, channel)

    chatter = DummyEvent("just chatting", DummyMessage(chat_id=1, chat=DummyChat("team")))
    unbound = DummyEvent("/forum watch general", DummyMessage(chat_id=42, chat=DummyChat(None)))

    assert asyncio.run(handler.handle(chatter)) is None
    assert asyncio.run(handler.handle(unbound)) is None
    assert chatter.replies == []
    assert unbound.replies == []
    assert storage.writes == 0
