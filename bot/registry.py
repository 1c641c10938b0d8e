"""Handler registry — ordered message/callback handler lists and the inline slot.

Design:
- ``MessageHandlerEntry`` / ``CallbackHandlerEntry`` are frozen records of a
  user callback plus the :mod:`bot.rules` it must satisfy.
- Lists are append-only.  Readers get an immutable tuple snapshot taken under
  a lock, so a registration made while updates are being dispatched never
  disturbs an iteration already in progress.
- The inline-query slot holds at most one callback; the last registration
  wins.
"""

from __future__ import annotations

import dataclasses
import threading
from typing import Any, Awaitable, Callable, Iterable

from core.logger import RubikaLogger
from bot.rules import ButtonRule, MatchRule, PredicateRule, command_rule

logger = RubikaLogger.get_logger()

# ── Callback shapes ──────────────────────────────────────────────────────────

# ``callback(bot, message)``; may be a plain function or a coroutine function.
HandlerFunc = Callable[[Any, Any], "Awaitable[None] | None"]
FilterFunc = Callable[[Any], bool]


# ── Registry entries ─────────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True, slots=True)
class MessageHandlerEntry:
    callback: HandlerFunc
    rules: tuple[MatchRule, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class CallbackHandlerEntry:
    callback: HandlerFunc
    rules: tuple[MatchRule, ...] = (ButtonRule(),)


# ── Registry ─────────────────────────────────────────────────────────────────

class HandlerRegistry:
    """Holds every handler a :class:`~bot.robot.Robot` dispatches to.

    Usage::

        registry = HandlerRegistry()
        registry.add_message_handler(on_echo, commands=["echo"])

        for entry in registry.message_handlers():
            ...
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._message_handlers: list[MessageHandlerEntry] = []
        self._callback_handlers: list[CallbackHandlerEntry] = []
        self._inline_query_handler: HandlerFunc | None = None

    # ── registration ─────────────────────────────────────────────────────

    def add_message_handler(
        self,
        callback: HandlerFunc,
        *,
        commands: str | Iterable[str] | None = None,
        filters: FilterFunc | None = None,
    ) -> MessageHandlerEntry:
        """Append a message handler.

        If *commands* is given the text must be one of those commands; if
        *filters* is given it must return true.  Commands are checked first.
        """
        rules: list[MatchRule] = []
        if commands is not None:
            rules.append(command_rule(commands))
        if filters is not None:
            rules.append(PredicateRule(filters))
        entry = MessageHandlerEntry(callback=callback, rules=tuple(rules))
        with self._lock:
            self._message_handlers.append(entry)
        logger.debug(
            "Message handler registered",
            extra={"handler": getattr(callback, "__name__", repr(callback)), "rules": len(rules)},
        )
        return entry

    def add_callback_handler(self, callback: HandlerFunc, *, button_id: str | None = None) -> CallbackHandlerEntry:
        """Append a button-press handler, optionally bound to one *button_id*."""
        entry = CallbackHandlerEntry(callback=callback, rules=(ButtonRule(button_id),))
        with self._lock:
            self._callback_handlers.append(entry)
        logger.debug(
            "Callback handler registered",
            extra={"handler": getattr(callback, "__name__", repr(callback)), "button_id": button_id},
        )
        return entry

    def set_inline_query_handler(self, callback: HandlerFunc) -> None:
        """Install the inline-query handler, replacing any previous one."""
        with self._lock:
            replaced = self._inline_query_handler is not None
            self._inline_query_handler = callback
        logger.debug(
            "Inline query handler set",
            extra={"handler": getattr(callback, "__name__", repr(callback)), "replaced": replaced},
        )

    # ── lookup helpers ───────────────────────────────────────────────────

    def message_handlers(self) -> tuple[MessageHandlerEntry, ...]:
        """Return a snapshot of the message handlers in registration order."""
        with self._lock:
            return tuple(self._message_handlers)

    def callback_handlers(self) -> tuple[CallbackHandlerEntry, ...]:
        """Return a snapshot of the callback handlers in registration order."""
        with self._lock:
            return tuple(self._callback_handlers)

    @property
    def inline_query_handler(self) -> HandlerFunc | None:
        with self._lock:
            return self._inline_query_handler

    def __len__(self) -> int:
        with self._lock:
            return (
                len(self._message_handlers)
                + len(self._callback_handlers)
                + (self._inline_query_handler is not None)
            )
