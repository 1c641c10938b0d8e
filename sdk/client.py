"""RubikaClient -- service layer wrapping the Rubika Bot API v3 endpoints.

Every endpoint is a JSON ``POST`` to ``<API_URL>/<token>/<method>``.
HTTP calls use the ``requests`` library; callers running inside an event loop
offload them with :func:`asyncio.to_thread` (see :class:`bot.robot.Robot`).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from core.logger import RubikaLogger, mask_token
from sdk.exceptions import APIRequestError, InvalidJSONError, TransportError

logger = RubikaLogger.get_logger()

DEFAULT_API_URL = "https://botapi.rubika.ir/v3"


class RubikaClient:
    """Client-side service layer for the Rubika Bot API.

    Each public method corresponds to one API method and returns the decoded
    JSON body.  Failures raise :class:`APIRequestError` or one of its
    subclasses; nothing is retried here.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, token: str, base_url: str = DEFAULT_API_URL, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """Create a new client bound to *token*.

        Args:
            token: Bot token issued by BotFather.
            base_url: API root, without the token (e.g. ``https://botapi.rubika.ir/v3``).
            timeout: Per-request timeout in seconds.
        """
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"RubikaClient(token={mask_token(self._token)!r}, base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _post(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send a POST request and return the parsed JSON body.

        Raises:
            TransportError: On transport-level failures.
            InvalidJSONError: If the body is not a JSON object.
            APIRequestError: If the response status code is not 2xx.
        """
        url = f"{self._base_url}/{self._token}/{method}"
        try:
            response = requests.post(url, json=payload or {}, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(method, exc) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            raise APIRequestError(
                f"HTTP {response.status_code} from {method}",
                status_code=response.status_code,
                response_body=body if isinstance(body, dict) else None,
            )
        if not isinstance(body, dict):
            raise InvalidJSONError(method, status_code=response.status_code)

        if method != "getUpdates":
            logger.debug("API response", extra={"method": method, "status": body.get("status")})
        return body

    # ------------------------------------------------------------------
    #  Updates
    # ------------------------------------------------------------------

    def get_updates(self, offset_id: Optional[str] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        """Fetch whatever updates are pending after *offset_id*.

        The ``data`` object of the response carries ``updates`` and the
        ``next_offset_id`` cursor for the following call.
        """
        payload: Dict[str, Any] = {}
        if offset_id is not None:
            payload["offset_id"] = offset_id
        if limit is not None:
            payload["limit"] = limit
        return self._post("getUpdates", payload)

    # ------------------------------------------------------------------
    #  Bot / chat info
    # ------------------------------------------------------------------

    def get_me(self) -> Dict[str, Any]:
        return self._post("getMe")

    def get_chat(self, chat_id: str) -> Dict[str, Any]:
        return self._post("getChat", {"chat_id": chat_id})

    # ------------------------------------------------------------------
    #  Messages
    # ------------------------------------------------------------------

    def send_message(
        self,
        chat_id: str,
        text: str,
        chat_keypad: Optional[Dict[str, Any]] = None,
        inline_keypad: Optional[Dict[str, Any]] = None,
        disable_notification: bool = False,
        reply_to_message_id: Optional[str] = None,
        chat_keypad_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Send a text message, optionally with a chat or inline keypad."""
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_notification": disable_notification,
        }
        if chat_keypad is not None:
            payload["chat_keypad"] = chat_keypad
        if inline_keypad is not None:
            payload["inline_keypad"] = inline_keypad
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id
        if chat_keypad_type is not None:
            payload["chat_keypad_type"] = chat_keypad_type
        return self._post("sendMessage", payload)

    def edit_message_text(self, chat_id: str, message_id: str, text: str) -> Dict[str, Any]:
        return self._post("editMessageText", {"chat_id": chat_id, "message_id": message_id, "text": text})

    def delete_message(self, chat_id: str, message_id: str) -> Dict[str, Any]:
        return self._post("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    # ------------------------------------------------------------------
    #  Keypads
    # ------------------------------------------------------------------

    def edit_chat_keypad(self, chat_id: str, chat_keypad: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("editChatKeypad", {
            "chat_id": chat_id,
            "chat_keypad_type": "New",
            "chat_keypad": chat_keypad,
        })

    def remove_keypad(self, chat_id: str) -> Dict[str, Any]:
        return self._post("editChatKeypad", {"chat_id": chat_id, "chat_keypad_type": "Removed"})

    def set_commands(self, bot_commands: List[Dict[str, str]]) -> Dict[str, Any]:
        """Publish the command menu, e.g. ``[{"command": "echo", "description": "Echo"}]``."""
        return self._post("setCommands", {"bot_commands": bot_commands})
