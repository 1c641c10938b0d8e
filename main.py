"""Example bot: ``/echo <text>``, a button menu, and a per-chat counter.

Run with ``BOT_TOKEN`` set (directly or in ``.env``)::

    python main.py
"""

from config import BOT_TOKEN
from core.logger import RubikaLogger
from sdk.exceptions import APIRequestError
from bot import InlineBuilder, Message, Robot

logger = RubikaLogger.get_logger()


def build_robot(token: str) -> Robot:
    """Create a :class:`Robot` with the demo handlers registered."""
    robot = Robot(token)

    @robot.on_message(commands=["echo"])
    async def echo(bot: Robot, message: Message) -> None:
        if not message.args:
            await message.reply("Usage: /echo <text>")
            return
        await message.reply(message.args[0])

    @robot.on_message(commands=["menu"])
    async def menu(bot: Robot, message: Message) -> None:
        keypad = (
            InlineBuilder()
            .row(InlineBuilder.button_simple("count", "Count"))
            .row(InlineBuilder.button_simple("reset", "Reset"))
            .build()
        )
        await message.reply_inline("Pick one:", keypad)

    @robot.on_callback()
    async def on_button(bot: Robot, message: Message) -> None:
        session = message.session
        if message.button_id == "reset":
            session["count"] = 0
        else:
            session["count"] = session.get("count", 0) + 1
        await message.reply(f"Count: {session['count']}")

    return robot


def main() -> None:
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    robot = build_robot(BOT_TOKEN)
    try:
        robot.start()
    except APIRequestError as exc:
        logger.critical("Robot stopped", extra={"error": str(exc)})
        raise SystemExit(1) from exc
    finally:
        RubikaLogger().cleanup()


if __name__ == "__main__":
    main()
