"""Robot — handler registration, session state, and the long-polling loop.

The loop runs in two phases:

* **priming**: one ``getUpdates`` call without a cursor.  Its updates are
  thrown away; only its ``next_offset_id`` is kept, so a restarted bot does
  not answer a backlog of old messages.
* **steady state**: fetch the page after the cursor, spawn one independent
  :func:`asyncio.create_task` per update, advance the cursor to the page's
  ``next_offset_id``, sleep briefly, repeat.

Dispatch is fire-and-forget: the loop never awaits handler tasks and a failing
handler cannot stop it.  A failing fetch, on the other hand, propagates out of
:meth:`Robot.run`.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Iterable

from pydantic import ValidationError

import config
from core.logger import RubikaLogger, mask_token
from sdk.client import RubikaClient
from sdk.exceptions import APIRequestError, InvalidJSONError
from sdk.models import UpdatesPage
from bot.decoder import decode_update
from bot.dispatcher import Dispatcher
from bot.registry import FilterFunc, HandlerFunc, HandlerRegistry

logger = RubikaLogger.get_logger()


class Robot:
    """A Rubika bot bound to one token.

    Usage::

        robot = Robot(token)

        @robot.on_message(commands=["echo"])
        async def echo(bot, message):
            if message.args:
                await message.reply(message.args[0])

        robot.start()  # blocks until a fetch fails
    """

    def __init__(
        self,
        token: str,
        *,
        client: RubikaClient | None = None,
        timeout: int = config.REQUEST_TIMEOUT,
        poll_limit: int = config.POLL_LIMIT,
        poll_interval: float = config.POLL_INTERVAL,
        stale_after: float = config.STALE_AFTER_SECONDS,
        max_concurrency: int | None = None,
    ) -> None:
        """Create a robot.

        Args:
            token: Bot token.
            client: Transport to use; a :class:`RubikaClient` is built from
                *token* and *timeout* when omitted.
            poll_limit: Page-size hint for every ``getUpdates`` call.
            poll_interval: Seconds to sleep between two polls.
            stale_after: Messages older than this many seconds are dropped.
            max_concurrency: Upper bound on simultaneously running dispatches.
                ``None`` leaves it unbounded.
        """
        self.token = token
        self.client = client or RubikaClient(token, base_url=config.API_URL, timeout=timeout)
        self.poll_limit = poll_limit
        self.poll_interval = poll_interval
        self.stale_after = stale_after

        self.registry = HandlerRegistry()
        self.dispatcher = Dispatcher(self.registry, self)

        self._offset_id: str | None = None
        self._sessions: dict[str, dict[str, Any]] = {}
        self._sessions_lock = threading.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None

        logger.info("Robot initialised", extra={"token": mask_token(token), "poll_limit": poll_limit})

    def __repr__(self) -> str:
        return (
            f"Robot(token={mask_token(self.token)!r}, "
            f"message_handlers={len(self.registry.message_handlers())}, "
            f"callback_handlers={len(self.registry.callback_handlers())}, "
            f"has_inline_query_handler={self.registry.inline_query_handler is not None})"
        )

    # ── registration decorators ──────────────────────────────────────────

    def on_message(
        self,
        filters: FilterFunc | None = None,
        commands: str | Iterable[str] | None = None,
    ) -> Callable[[HandlerFunc], HandlerFunc]:
        """Decorator registering a message handler.

        Example::

            @robot.on_message(commands=["start"])
            async def start(bot, message): ...

            @robot.on_message(filters=lambda m: m.file is not None)
            def got_file(bot, message): ...
        """
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.registry.add_message_handler(func, commands=commands, filters=filters)
            return func
        return decorator

    def on_callback(self, button_id: str | None = None) -> Callable[[HandlerFunc], HandlerFunc]:
        """Decorator registering a button-press handler."""
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.registry.add_callback_handler(func, button_id=button_id)
            return func
        return decorator

    def on_inline_query(self) -> Callable[[HandlerFunc], HandlerFunc]:
        """Decorator installing the (single) inline-query handler."""
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.registry.set_inline_query_handler(func)
            return func
        return decorator

    # ── sessions ─────────────────────────────────────────────────────────

    def get_session(self, chat_id: str) -> dict[str, Any]:
        """Return the state bag for *chat_id*, creating it on first use.

        The same dict is returned for every call with the same chat, for the
        lifetime of the process.  Entries are never evicted.
        """
        with self._sessions_lock:
            session = self._sessions.get(chat_id)
            if session is None:
                session = self._sessions[chat_id] = {}
            return session

    # ── polling ──────────────────────────────────────────────────────────

    @property
    def offset_id(self) -> str | None:
        """The current update cursor (read-only outside the poll loop)."""
        return self._offset_id

    async def _fetch_page(self, offset_id: str | None) -> UpdatesPage:
        response = await asyncio.to_thread(self.client.get_updates, offset_id, self.poll_limit)
        try:
            return UpdatesPage.model_validate(response.get("data") or {})
        except ValidationError as exc:
            raise InvalidJSONError("getUpdates") from exc

    async def prime(self) -> None:
        """Establish the starting cursor, discarding any pending updates."""
        page = await self._fetch_page(None)
        if page.updates and page.next_offset_id is not None:
            self._offset_id = page.next_offset_id
            logger.info(
                "Offset initialised",
                extra={"offset_id": self._offset_id, "skipped_updates": len(page.updates)},
            )
        else:
            logger.info("No pending updates; starting without an offset")

    async def poll_once(self) -> int:
        """Fetch one page, schedule its updates, and advance the cursor.

        Returns the number of updates scheduled for dispatch.
        """
        page = await self._fetch_page(self._offset_id)

        for raw in page.updates:
            self._spawn(raw)

        if page.next_offset_id is not None:
            self._offset_id = page.next_offset_id

        if page.updates:
            logger.debug("Scheduled updates", extra={"count": len(page.updates), "offset_id": self._offset_id})
        return len(page.updates)

    async def run(self) -> None:
        """Prime the cursor and poll forever.

        Raises:
            APIRequestError: When a ``getUpdates`` call fails.
        """
        logger.info("Robot is running. Polling for updates...")
        try:
            await self.prime()
            while True:
                await self.poll_once()
                await asyncio.sleep(self.poll_interval)
        except APIRequestError as exc:
            logger.error("Polling stopped", extra={"method": "getUpdates", "error": str(exc)})
            raise

    def start(self) -> None:
        """Blocking entry point: run the poll loop on a fresh event loop."""
        asyncio.run(self.run())

    # ── dispatch tasks ───────────────────────────────────────────────────

    async def process_update(self, raw: Any) -> None:
        """Decode one raw update and dispatch it."""
        update = decode_update(raw, stale_after=self.stale_after)
        if update is None:
            return
        if self._semaphore is None:
            await self.dispatcher.dispatch(update)
            return
        async with self._semaphore:
            await self.dispatcher.dispatch(update)

    def _spawn(self, raw: Any) -> asyncio.Task:
        if self._max_concurrency is not None and self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        task = asyncio.create_task(self.process_update(raw))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Handler raised an exception",
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"error": str(exc)},
            )

    async def join_pending(self) -> None:
        """Wait until every dispatch task scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── outbound helpers ─────────────────────────────────────────────────

    async def send_message(
        self,
        chat_id: str,
        text: str,
        *,
        chat_keypad: dict[str, Any] | None = None,
        inline_keypad: dict[str, Any] | None = None,
        disable_notification: bool = False,
        reply_to_message_id: str | None = None,
        chat_keypad_type: str | None = None,
    ) -> dict[str, Any]:
        return await asyncio.to_thread(
            self.client.send_message,
            chat_id,
            text,
            chat_keypad,
            inline_keypad,
            disable_notification,
            reply_to_message_id,
            chat_keypad_type,
        )

    async def edit_message_text(self, chat_id: str, message_id: str, text: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.edit_message_text, chat_id, message_id, text)

    async def delete_message(self, chat_id: str, message_id: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.delete_message, chat_id, message_id)

    async def get_chat(self, chat_id: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.get_chat, chat_id)

    async def get_me(self) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.get_me)

    async def set_commands(self, bot_commands: list[dict[str, str]]) -> dict[str, Any]:
        """Publish the command menu shown to users."""
        return await asyncio.to_thread(self.client.set_commands, bot_commands)

    async def edit_chat_keypad(self, chat_id: str, chat_keypad: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.edit_chat_keypad, chat_id, chat_keypad)

    async def remove_keypad(self, chat_id: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.remove_keypad, chat_id)

    async def get_name(self, chat_id: str) -> str:
        """Return the chat's display name, or ``"Unknown"``."""
        try:
            chat = (await self.get_chat(chat_id)).get("data", {}).get("chat") or {}
        except APIRequestError as exc:
            logger.warning("getChat failed", extra={"chat_id": chat_id, "error": str(exc)})
            return "Unknown"
        name = " ".join(part for part in (chat.get("first_name"), chat.get("last_name")) if part)
        return name or "Unknown"

    async def get_username(self, chat_id: str) -> str:
        """Return the chat's username, or ``"None"``."""
        try:
            chat = (await self.get_chat(chat_id)).get("data", {}).get("chat") or {}
        except APIRequestError as exc:
            logger.warning("getChat failed", extra={"chat_id": chat_id, "error": str(exc)})
            return "None"
        return chat.get("username") or "None"
