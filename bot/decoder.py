"""Update decoder — turns a raw ``getUpdates`` entry into a typed update.

Only two update kinds are dispatched: ``NewMessage`` and ``ReceiveQuery``.
Everything else, including malformed payloads and messages that arrived too
late to be answered, decodes to ``None``.
"""

import time
from typing import Any, Mapping

from pydantic import ValidationError

from core.logger import RubikaLogger
from sdk.models import InlinePayload, InlineQueryUpdate, MessageUpdate, NewMessage, Update

logger = RubikaLogger.get_logger()

NEW_MESSAGE = "NewMessage"
RECEIVE_QUERY = "ReceiveQuery"
DEFAULT_STALE_AFTER = 20.0


def _message_age(sent_at: Any, now: float) -> float | None:
    """Return how many seconds ago *sent_at* was, or ``None`` if unparsable."""
    if sent_at is None:
        return None
    try:
        return now - float(sent_at)
    except (TypeError, ValueError):
        return None


def decode_update(
    raw: Any,
    *,
    now: float | None = None,
    stale_after: float = DEFAULT_STALE_AFTER,
) -> Update | None:
    """Classify and validate one raw update.

    Args:
        raw: One element of ``data.updates``.
        now: Current epoch seconds; defaults to :func:`time.time`.
        stale_after: Maximum accepted age of a ``NewMessage``, in seconds.
            A message exactly that old is still accepted.

    Returns:
        A :class:`MessageUpdate`, an :class:`InlineQueryUpdate`, or ``None``.
    """
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-object update", extra={"update_type": type(raw).__name__})
        return None

    update_type = raw.get("type")

    if update_type == RECEIVE_QUERY:
        inline_message = raw.get("inline_message")
        if not isinstance(inline_message, Mapping):
            logger.debug("ReceiveQuery without inline_message", extra={"update_type": update_type})
            return None
        try:
            return InlineQueryUpdate(
                inline_message=InlinePayload.model_validate(inline_message),
                raw=dict(raw),
            )
        except ValidationError as exc:
            logger.debug("Malformed ReceiveQuery update", extra={"error": str(exc)})
            return None

    if update_type == NEW_MESSAGE:
        new_message = raw.get("new_message")
        if not isinstance(new_message, Mapping):
            logger.debug("NewMessage without new_message", extra={"update_type": update_type})
            return None

        age = _message_age(new_message.get("time"), time.time() if now is None else now)
        if age is not None and age > stale_after:
            logger.debug(
                "Dropping stale message",
                extra={"chat_id": raw.get("chat_id"), "age_seconds": round(age, 3)},
            )
            return None

        try:
            return MessageUpdate(
                chat_id=raw.get("chat_id") or "",
                message=NewMessage.model_validate(new_message),
                raw=dict(raw),
            )
        except ValidationError as exc:
            logger.debug("Malformed NewMessage update", extra={"chat_id": raw.get("chat_id"), "error": str(exc)})
            return None

    logger.debug("Ignoring unsupported update type", extra={"update_type": update_type})
    return None
