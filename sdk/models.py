"""Pydantic data models for the Rubika Bot API v3 payloads.

Inbound models describe what ``getUpdates`` delivers; outbound models describe
the keypad structures accepted by ``sendMessage`` and ``editChatKeypad``.
Identifier fields are strings on the wire, but numeric values are accepted
and coerced.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


_WIRE_CONFIG = {"populate_by_name": True, "coerce_numbers_to_str": True}


# ── Inbound message parts ────────────────────────────────────────────────────


class File(BaseModel):
    """A file attached to a message."""

    file_id: Optional[str] = None
    file_name: Optional[str] = None
    size: Optional[str] = None

    model_config = _WIRE_CONFIG


class Sticker(BaseModel):
    sticker_id: Optional[str] = None
    emoji_character: Optional[str] = None
    file: Optional[File] = None

    model_config = _WIRE_CONFIG


class PollStatus(BaseModel):
    state: Optional[str] = None
    selection_index: Optional[int] = None
    percent_vote_options: List[int] = Field(default_factory=list)
    total_vote: Optional[int] = None
    show_total_votes: Optional[bool] = None

    model_config = _WIRE_CONFIG


class Poll(BaseModel):
    question: Optional[str] = None
    options: List[str] = Field(default_factory=list)
    poll_status: Optional[PollStatus] = None

    model_config = _WIRE_CONFIG


class Location(BaseModel):
    latitude: Optional[str] = None
    longitude: Optional[str] = None

    model_config = _WIRE_CONFIG


class LiveLocation(BaseModel):
    start_time: Optional[str] = None
    live_period: Optional[int] = None
    current_location: Optional[Location] = None
    user_id: Optional[str] = None
    status: Optional[str] = None
    last_update_time: Optional[str] = None

    model_config = _WIRE_CONFIG


class ContactMessage(BaseModel):
    phone_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = _WIRE_CONFIG


class ForwardedFrom(BaseModel):
    type_from: Optional[str] = None
    message_id: Optional[str] = None
    from_chat_id: Optional[str] = None
    from_sender_id: Optional[str] = None

    model_config = _WIRE_CONFIG


class AuxData(BaseModel):
    """Metadata attached to a message produced by a button press or start link."""

    start_id: Optional[str] = None
    button_id: Optional[str] = None

    model_config = _WIRE_CONFIG


class NewMessage(BaseModel):
    """The ``new_message`` payload of a ``NewMessage`` update."""

    message_id: Optional[str] = None
    text: Optional[str] = None
    time: Optional[str] = None
    is_edited: bool = False
    sender_type: Optional[str] = None
    sender_id: Optional[str] = None
    reply_to_message_id: Optional[str] = None
    aux_data: Optional[AuxData] = None
    file: Optional[File] = None
    forwarded_from: Optional[ForwardedFrom] = None
    sticker: Optional[Sticker] = None
    contact_message: Optional[ContactMessage] = None
    poll: Optional[Poll] = None
    location: Optional[Location] = None
    live_location: Optional[LiveLocation] = None

    model_config = _WIRE_CONFIG


class InlinePayload(BaseModel):
    """The ``inline_message`` payload of a ``ReceiveQuery`` update."""

    sender_id: Optional[str] = None
    text: Optional[str] = None
    message_id: Optional[str] = None
    chat_id: Optional[str] = None
    file: Optional[File] = None
    location: Optional[Location] = None
    aux_data: Optional[AuxData] = None

    model_config = _WIRE_CONFIG


# ── Decoded updates ──────────────────────────────────────────────────────────


class MessageUpdate(BaseModel):
    """A decoded ``NewMessage`` update."""

    kind: Literal["NewMessage"] = "NewMessage"
    chat_id: str = ""
    message: NewMessage
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = _WIRE_CONFIG

    @property
    def is_callback(self) -> bool:
        """True when the message was produced by a button press."""
        aux = self.message.aux_data
        return aux is not None and aux.button_id is not None


class InlineQueryUpdate(BaseModel):
    """A decoded ``ReceiveQuery`` update."""

    kind: Literal["ReceiveQuery"] = "ReceiveQuery"
    inline_message: InlinePayload
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = _WIRE_CONFIG


Update = Union[MessageUpdate, InlineQueryUpdate]


class UpdatesPage(BaseModel):
    """The ``data`` object of a ``getUpdates`` response."""

    updates: List[Dict[str, Any]] = Field(default_factory=list)
    next_offset_id: Optional[str] = None

    model_config = _WIRE_CONFIG


# ── Outbound keypads ─────────────────────────────────────────────────────────


class ButtonSelectionItem(BaseModel):
    text: Optional[str] = None
    image_url: Optional[str] = None
    type: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonSelection(BaseModel):
    selection_id: Optional[str] = None
    search_type: Optional[str] = None
    get_type: Optional[str] = None
    items: List[ButtonSelectionItem] = Field(default_factory=list)
    is_multi_selection: Optional[bool] = None
    columns_count: Optional[str] = None
    title: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonCalendar(BaseModel):
    default_value: Optional[str] = None
    type: Optional[str] = None
    min_year: Optional[str] = None
    max_year: Optional[str] = None
    title: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonNumberPicker(BaseModel):
    min_value: Optional[str] = None
    max_value: Optional[str] = None
    default_value: Optional[str] = None
    title: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonStringPicker(BaseModel):
    items: List[str] = Field(default_factory=list)
    default_value: Optional[str] = None
    title: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonLocation(BaseModel):
    default_pointer_location: Optional[Location] = None
    default_map_location: Optional[Location] = None
    type: Optional[str] = None
    title: Optional[str] = None
    location_image_url: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonTextbox(BaseModel):
    type_line: Optional[str] = None
    type_keypad: Optional[str] = None
    place_holder: Optional[str] = None
    title: Optional[str] = None
    default_value: Optional[str] = None

    model_config = _WIRE_CONFIG


class ButtonLink(BaseModel):
    type: str = "url"
    link_url: Optional[str] = None

    model_config = _WIRE_CONFIG


class Button(BaseModel):
    """One keypad button; exactly one of the ``button_*`` parts is usually set."""

    id: str
    type: str = "Simple"
    button_text: Optional[str] = None
    button_selection: Optional[ButtonSelection] = None
    button_calendar: Optional[ButtonCalendar] = None
    button_number_picker: Optional[ButtonNumberPicker] = None
    button_string_picker: Optional[ButtonStringPicker] = None
    button_location: Optional[ButtonLocation] = None
    button_textbox: Optional[ButtonTextbox] = None
    button_link: Optional[ButtonLink] = None

    model_config = _WIRE_CONFIG


class KeypadRow(BaseModel):
    buttons: List[Button] = Field(default_factory=list)

    model_config = _WIRE_CONFIG


class Keypad(BaseModel):
    rows: List[KeypadRow] = Field(default_factory=list)
    resize_keyboard: Optional[bool] = None
    on_time_keyboard: Optional[bool] = None

    model_config = _WIRE_CONFIG
