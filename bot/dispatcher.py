"""Update dispatcher — routes one decoded update to the registered handlers.

Routing, in order:

1. ``ReceiveQuery`` → the inline-query handler, if one is set.  Nothing else.
2. ``NewMessage`` produced by a button (aux data with a ``button_id``) → only
   the first registered callback handler is considered.  It runs if its
   button rule matches; either way dispatch stops there.  With no callback
   handlers registered the message falls through to step 3.
3. Any other ``NewMessage`` → every message handler, in registration order,
   each deciding through its own rules whether to act.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from core.logger import RubikaLogger
from sdk.models import InlineQueryUpdate, MessageUpdate, Update
from bot.context import InlineMessage, Message
from bot.registry import HandlerFunc, HandlerRegistry
from bot.rules import apply_rules

if TYPE_CHECKING:
    from bot.robot import Robot

logger = RubikaLogger.get_logger()


async def invoke(callback: HandlerFunc, bot: Any, context: Any) -> None:
    """Call *callback* and await its result when it returns an awaitable."""
    result = callback(bot, context)
    if inspect.isawaitable(result):
        await result


class Dispatcher:
    """Selects and runs the handler chain for a decoded update."""

    def __init__(self, registry: HandlerRegistry, bot: "Robot") -> None:
        self._registry = registry
        self._bot = bot

    async def dispatch(self, update: Update) -> None:
        if isinstance(update, InlineQueryUpdate):
            await self._dispatch_inline_query(update)
            return

        if not isinstance(update, MessageUpdate):
            logger.debug("Dispatcher received unsupported update", extra={"update_type": type(update).__name__})
            return

        message = Message.from_update(self._bot, update)

        if update.is_callback and await self._dispatch_callback(message):
            return

        await self._dispatch_message(message)

    # ── routes ───────────────────────────────────────────────────────────

    async def _dispatch_inline_query(self, update: InlineQueryUpdate) -> None:
        handler = self._registry.inline_query_handler
        if handler is None:
            logger.debug("No inline query handler registered")
            return
        await invoke(handler, self._bot, InlineMessage.from_update(self._bot, update))

    async def _dispatch_callback(self, message: Message) -> bool:
        """Offer *message* to the first callback handler.

        Returns ``False`` only when no callback handler is registered.
        """
        handlers = self._registry.callback_handlers()
        if not handlers:
            return False

        entry = handlers[0]
        matched = apply_rules(entry.rules, message)
        if matched is None:
            logger.debug(
                "First callback handler declined button",
                extra={"chat_id": message.chat_id, "button_id": message.button_id},
            )
            return True

        logger.debug("Dispatching button press", extra={"chat_id": message.chat_id, "button_id": message.button_id})
        await invoke(entry.callback, self._bot, matched)
        return True

    async def _dispatch_message(self, message: Message) -> None:
        for entry in self._registry.message_handlers():
            matched = apply_rules(entry.rules, message.with_args([]))
            if matched is None:
                continue
            await invoke(entry.callback, self._bot, matched)
