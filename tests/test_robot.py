"""Tests for the polling loop, sessions, and reply helpers of Robot."""

import asyncio
import sys
import os
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.robot import Robot
from sdk.client import RubikaClient
from sdk.exceptions import APIRequestError, InvalidJSONError, TransportError

TOKEN = "TESTTOKEN1234567890"


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def client() -> MagicMock:
    fake = MagicMock(spec=RubikaClient)
    fake.send_message.return_value = {"status": "OK", "data": {"message_id": "reply-1"}}
    return fake


@pytest.fixture()
def robot(client) -> Robot:
    return Robot(TOKEN, client=client, poll_interval=0)


def _page(updates: list, next_offset_id: str | None = None) -> dict:
    data: dict = {"updates": updates}
    if next_offset_id is not None:
        data["next_offset_id"] = next_offset_id
    return {"status": "OK", "data": data}


def _new_message(text: str, chat_id: str = "chat-1", age: float = 0.0, **extra) -> dict:
    message = {"message_id": "m1", "sender_id": "u1", "text": text, "time": str(time.time() - age)}
    message.update(extra)
    return {"type": "NewMessage", "chat_id": chat_id, "new_message": message}


# ── Priming ──────────────────────────────────────────────────────────────────


class TestPriming:
    """Validate the startup fetch that establishes the cursor."""

    @pytest.mark.asyncio
    async def test_prime_sets_cursor_without_dispatch(self, robot, client) -> None:
        handler = AsyncMock()
        robot.on_message()(handler)
        client.get_updates.return_value = _page([_new_message("u1"), _new_message("u2")], "X")

        await robot.prime()
        await robot.join_pending()

        assert robot.offset_id == "X"
        handler.assert_not_awaited()
        client.get_updates.assert_called_once_with(None, 100)

    @pytest.mark.asyncio
    async def test_prime_with_empty_backlog_keeps_none(self, robot, client) -> None:
        client.get_updates.return_value = _page([], "X")

        await robot.prime()

        assert robot.offset_id is None

    @pytest.mark.asyncio
    async def test_prime_failure_propagates(self, robot, client) -> None:
        client.get_updates.side_effect = TransportError("getUpdates", ConnectionError("offline"))

        with pytest.raises(TransportError):
            await robot.prime()
        assert robot.offset_id is None


# ── Steady state ─────────────────────────────────────────────────────────────


class TestPollOnce:
    """Validate one steady-state iteration."""

    @pytest.mark.asyncio
    async def test_empty_batch_still_advances_cursor(self, robot, client) -> None:
        client.get_updates.return_value = _page([], "Y")

        scheduled = await robot.poll_once()

        assert scheduled == 0
        assert robot.offset_id == "Y"

    @pytest.mark.asyncio
    async def test_missing_next_offset_keeps_cursor(self, robot, client) -> None:
        client.get_updates.return_value = _page([], "A")
        await robot.poll_once()
        client.get_updates.return_value = _page([])
        await robot.poll_once()

        assert robot.offset_id == "A"

    @pytest.mark.asyncio
    async def test_fetch_uses_current_cursor(self, robot, client) -> None:
        client.get_updates.return_value = _page([], "A")
        await robot.poll_once()
        client.get_updates.return_value = _page([], "B")
        await robot.poll_once()

        assert client.get_updates.call_args_list[1][0] == ("A", 100)
        assert robot.offset_id == "B"

    @pytest.mark.asyncio
    async def test_updates_dispatched(self, robot, client) -> None:
        seen: list = []
        robot.on_message()(lambda bot, message: seen.append(message.text))
        client.get_updates.return_value = _page([_new_message("one"), _new_message("two")], "N")

        scheduled = await robot.poll_once()
        await robot.join_pending()

        assert scheduled == 2
        assert sorted(seen) == ["one", "two"]

    @pytest.mark.asyncio
    async def test_cursor_advances_before_dispatch_finishes(self, robot, client) -> None:
        release = asyncio.Event()
        finished = []

        @robot.on_message()
        async def slow(bot, message) -> None:
            await release.wait()
            finished.append(message.text)

        client.get_updates.return_value = _page([_new_message("slow")], "N1")
        await robot.poll_once()

        assert robot.offset_id == "N1"
        assert finished == []

        release.set()
        await robot.join_pending()
        assert finished == ["slow"]

    @pytest.mark.asyncio
    async def test_stale_and_unknown_updates_skipped(self, robot, client) -> None:
        handler = AsyncMock()
        robot.on_message()(handler)
        client.get_updates.return_value = _page(
            [_new_message("old", age=60.0), {"type": "StartedBot", "chat_id": "c"}],
            "N",
        )

        assert await robot.poll_once() == 2
        await robot.join_pending()

        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_failure_is_contained(self, robot, client) -> None:
        @robot.on_message()
        async def boom(bot, message) -> None:
            raise RuntimeError("handler failed")

        client.get_updates.return_value = _page([_new_message("x")], "N")
        await robot.poll_once()
        await robot.join_pending()

        client.get_updates.return_value = _page([], "M")
        await robot.poll_once()
        assert robot.offset_id == "M"

    @pytest.mark.asyncio
    async def test_malformed_data_raises(self, robot, client) -> None:
        client.get_updates.return_value = {"status": "OK", "data": {"updates": "nope"}}

        with pytest.raises(InvalidJSONError):
            await robot.poll_once()

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_dispatch(self, client) -> None:
        robot = Robot(TOKEN, client=client, poll_interval=0, max_concurrency=1)
        running = 0
        peak = 0

        @robot.on_message()
        async def handler(bot, message) -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        client.get_updates.return_value = _page([_new_message(str(i)) for i in range(3)], "N")
        await robot.poll_once()
        await robot.join_pending()

        assert peak == 1


# ── run ──────────────────────────────────────────────────────────────────────


class TestRun:
    """Validate the blocking loop terminates only on fetch failure."""

    @pytest.mark.asyncio
    async def test_run_stops_on_fetch_error(self, robot, client) -> None:
        client.get_updates.side_effect = [
            _page([_new_message("backlog")], "P"),
            _page([], "Q"),
            APIRequestError("HTTP 502 from getUpdates", status_code=502),
        ]

        with pytest.raises(APIRequestError) as exc_info:
            await robot.run()

        assert exc_info.value.status_code == 502
        assert client.get_updates.call_count == 3
        assert client.get_updates.call_args_list[1][0] == ("P", 100)
        assert robot.offset_id == "Q"

    @pytest.mark.asyncio
    async def test_run_survives_failing_handler(self, robot, client) -> None:
        @robot.on_message()
        def boom(bot, message) -> None:
            raise ValueError("bad handler")

        client.get_updates.side_effect = [
            _page([], None),
            _page([_new_message("x")], "A"),
            _page([], "B"),
            TransportError("getUpdates", ConnectionError("offline")),
        ]

        with pytest.raises(TransportError):
            await robot.run()
        assert client.get_updates.call_count == 4


# ── End to end ───────────────────────────────────────────────────────────────


class TestEcho:
    """A /echo command replies with its first argument."""

    @pytest.mark.asyncio
    async def test_echo_round_trip(self, robot, client) -> None:
        @robot.on_message(commands=["/echo"])
        async def echo(bot, message) -> None:
            await message.reply(message.args[0])

        client.get_updates.return_value = _page([_new_message("/echo hi", chat_id="chat-42")], "N")
        await robot.poll_once()
        await robot.join_pending()

        client.send_message.assert_called_once()
        args = client.send_message.call_args[0]
        assert args[0] == "chat-42"
        assert args[1] == "hi"
        assert args[5] == "m1"  # reply_to_message_id

    @pytest.mark.asyncio
    async def test_button_press_round_trip(self, robot, client) -> None:
        @robot.on_callback(button_id="count")
        async def count(bot, message) -> None:
            message.session["n"] = message.session.get("n", 0) + 1
            await message.reply(str(message.session["n"]))

        press = _new_message("Count", aux_data={"button_id": "count"})
        client.get_updates.return_value = _page([press], "N")
        await robot.poll_once()
        await robot.join_pending()
        await robot.poll_once()
        await robot.join_pending()

        texts = [c[0][1] for c in client.send_message.call_args_list]
        assert texts == ["1", "2"]
        assert robot.get_session("chat-1") == {"n": 2}


# ── Sessions ─────────────────────────────────────────────────────────────────


class TestSessions:
    """Validate the per-chat state bag."""

    def test_created_lazily_and_shared(self, robot) -> None:
        session = robot.get_session("chat-1")
        assert session == {}
        session["step"] = 2
        assert robot.get_session("chat-1") is session
        assert robot.get_session("chat-1")["step"] == 2

    def test_chats_isolated(self, robot) -> None:
        robot.get_session("a")["k"] = 1
        assert robot.get_session("b") == {}


# ── Outbound helpers ─────────────────────────────────────────────────────────


class TestOutboundHelpers:
    """Validate async wrappers and chat-info helpers."""

    @pytest.mark.asyncio
    async def test_get_name(self, robot, client) -> None:
        client.get_chat.return_value = {"data": {"chat": {"first_name": "Sara", "last_name": "K"}}}
        assert await robot.get_name("c") == "Sara K"

    @pytest.mark.asyncio
    async def test_get_name_first_only(self, robot, client) -> None:
        client.get_chat.return_value = {"data": {"chat": {"first_name": "Sara"}}}
        assert await robot.get_name("c") == "Sara"

    @pytest.mark.asyncio
    async def test_get_name_failure(self, robot, client) -> None:
        client.get_chat.side_effect = APIRequestError("down")
        assert await robot.get_name("c") == "Unknown"

    @pytest.mark.asyncio
    async def test_get_username(self, robot, client) -> None:
        client.get_chat.return_value = {"data": {"chat": {"username": "sara"}}}
        assert await robot.get_username("c") == "sara"
        client.get_chat.return_value = {"data": {}}
        assert await robot.get_username("c") == "None"

    @pytest.mark.asyncio
    async def test_edit_and_delete(self, robot, client) -> None:
        await robot.edit_message_text("c", "m", "new")
        await robot.delete_message("c", "m")
        client.edit_message_text.assert_called_once_with("c", "m", "new")
        client.delete_message.assert_called_once_with("c", "m")

    @pytest.mark.asyncio
    async def test_bot_and_keypad_wrappers(self, robot, client) -> None:
        client.get_me.return_value = {"status": "OK", "data": {"bot": {"username": "demo_bot"}}}
        keypad = {"rows": []}
        commands = [{"command": "echo", "description": "Echo text"}]

        me = await robot.get_me()
        await robot.set_commands(commands)
        await robot.edit_chat_keypad("c", keypad)
        await robot.remove_keypad("c")

        assert me["data"]["bot"]["username"] == "demo_bot"
        client.set_commands.assert_called_once_with(commands)
        client.edit_chat_keypad.assert_called_once_with("c", keypad)
        client.remove_keypad.assert_called_once_with("c")

    @pytest.mark.asyncio
    async def test_reply_keypad_replaces_chat_keypad(self, robot, client) -> None:
        @robot.on_message(commands=["keys"])
        async def keys(bot, message) -> None:
            await message.reply_keypad("Pick one", {"rows": []})

        client.get_updates.return_value = _page([_new_message("/keys")], "N")
        await robot.poll_once()
        await robot.join_pending()

        chat_id, text, chat_keypad, inline_keypad, _, reply_to, keypad_type = client.send_message.call_args[0]
        assert (chat_id, text, reply_to) == ("chat-1", "Pick one", "m1")
        assert chat_keypad == {"rows": []}
        assert inline_keypad is None
        assert keypad_type == "New"

    def test_repr_masks_token(self, robot) -> None:
        text = repr(robot)
        assert "TESTTOKE***" in text
        assert TOKEN not in text
        assert "message_handlers=0" in text
