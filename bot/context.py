"""Event-context objects handed to user callbacks.

A :class:`Message` or :class:`InlineMessage` wraps a decoded update together
with a back-reference to the :class:`~bot.robot.Robot` that received it, so a
handler can answer without knowing anything about the transport::

    @robot.on_message(commands=["ping"])
    async def ping(bot, message):
        await message.reply("pong")
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from sdk.models import (
    AuxData,
    ContactMessage,
    File,
    ForwardedFrom,
    InlineQueryUpdate,
    LiveLocation,
    Location,
    MessageUpdate,
    Poll,
    Sticker,
)

if TYPE_CHECKING:
    from bot.robot import Robot


@dataclasses.dataclass(slots=True)
class Message:
    """A new message (organic or button-produced) in a chat."""

    bot: "Robot" = dataclasses.field(repr=False, compare=False)
    chat_id: str
    message_id: str
    sender_id: str
    text: str | None = None
    time: str | None = None
    is_edited: bool = False
    sender_type: str | None = None
    reply_to_message_id: str | None = None
    aux_data: AuxData | None = None
    file: File | None = None
    forwarded_from: ForwardedFrom | None = None
    sticker: Sticker | None = None
    contact_message: ContactMessage | None = None
    poll: Poll | None = None
    location: Location | None = None
    live_location: LiveLocation | None = None
    # Command arguments; filled in when a command handler matches.
    args: list[str] = dataclasses.field(default_factory=list)
    raw_data: dict[str, Any] = dataclasses.field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_update(cls, bot: "Robot", update: MessageUpdate) -> "Message":
        payload = update.message
        return cls(
            bot=bot,
            chat_id=update.chat_id,
            message_id=payload.message_id or "",
            sender_id=payload.sender_id or "",
            text=payload.text,
            time=payload.time,
            is_edited=payload.is_edited,
            sender_type=payload.sender_type,
            reply_to_message_id=payload.reply_to_message_id,
            aux_data=payload.aux_data,
            file=payload.file,
            forwarded_from=payload.forwarded_from,
            sticker=payload.sticker,
            contact_message=payload.contact_message,
            poll=payload.poll,
            location=payload.location,
            live_location=payload.live_location,
            raw_data=update.raw.get("new_message", {}),
        )

    def with_args(self, args: list[str]) -> "Message":
        """Return a copy of this message carrying *args*."""
        return dataclasses.replace(self, args=list(args))

    @property
    def button_id(self) -> str | None:
        return self.aux_data.button_id if self.aux_data else None

    @property
    def session(self) -> dict[str, Any]:
        """The per-chat state bag shared by every update from this chat."""
        return self.bot.get_session(self.chat_id)

    # ── Replies ──────────────────────────────────────────────────────────

    async def reply(self, text: str) -> dict[str, Any]:
        return await self.bot.send_message(self.chat_id, text, reply_to_message_id=self.message_id)

    async def reply_keypad(self, text: str, keypad: dict[str, Any]) -> dict[str, Any]:
        """Reply and replace the chat keypad with *keypad*."""
        return await self.bot.send_message(
            self.chat_id,
            text,
            chat_keypad=keypad,
            reply_to_message_id=self.message_id,
            chat_keypad_type="New",
        )

    async def reply_inline(self, text: str, inline_keypad: dict[str, Any]) -> dict[str, Any]:
        return await self.bot.send_message(
            self.chat_id,
            text,
            inline_keypad=inline_keypad,
            reply_to_message_id=self.message_id,
        )

    async def edit(self, new_text: str) -> dict[str, Any]:
        return await self.bot.edit_message_text(self.chat_id, self.message_id, new_text)

    async def delete(self) -> dict[str, Any]:
        return await self.bot.delete_message(self.chat_id, self.message_id)


@dataclasses.dataclass(slots=True)
class InlineMessage:
    """An inline-keypad interaction delivered as a ``ReceiveQuery`` update."""

    bot: "Robot" = dataclasses.field(repr=False, compare=False)
    chat_id: str
    message_id: str
    sender_id: str
    text: str | None = None
    aux_data: AuxData | None = None
    raw_data: dict[str, Any] = dataclasses.field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_update(cls, bot: "Robot", update: InlineQueryUpdate) -> "InlineMessage":
        payload = update.inline_message
        return cls(
            bot=bot,
            chat_id=payload.chat_id or "",
            message_id=payload.message_id or "",
            sender_id=payload.sender_id or "",
            text=payload.text,
            aux_data=payload.aux_data,
            raw_data=update.raw.get("inline_message", {}),
        )

    @property
    def button_id(self) -> str | None:
        return self.aux_data.button_id if self.aux_data else None

    async def reply(self, text: str) -> dict[str, Any]:
        return await self.bot.send_message(self.chat_id, text, reply_to_message_id=self.message_id)

    async def delete(self) -> dict[str, Any]:
        return await self.bot.delete_message(self.chat_id, self.message_id)
