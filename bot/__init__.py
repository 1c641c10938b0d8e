"""Bot engine — update decoding, handler registry, dispatch, and polling.

This package may import from ``sdk/``, ``core/`` and ``config`` only.
"""

from bot.context import InlineMessage, Message
from bot.decoder import decode_update
from bot.dispatcher import Dispatcher
from bot.jobs import Job
from bot.keypad import ChatKeypadBuilder, InlineBuilder
from bot.registry import HandlerRegistry
from bot.robot import Robot

__all__ = [
    # Entry point
    "Robot",
    # Engine pieces
    "decode_update",
    "Dispatcher",
    "HandlerRegistry",
    # Handler contexts
    "Message",
    "InlineMessage",
    # Helpers
    "InlineBuilder",
    "ChatKeypadBuilder",
    "Job",
]
