"""Keypad builders producing the JSON accepted by ``sendMessage``.

Both builders are fluent::

    keypad = (
        InlineBuilder()
        .row(InlineBuilder.button_simple("yes", "Yes"), InlineBuilder.button_simple("no", "No"))
        .build()
    )
    await message.reply_inline("Continue?", keypad)
"""

from __future__ import annotations

from typing import Any

from sdk.models import (
    Button,
    ButtonCalendar,
    ButtonLink,
    ButtonLocation,
    ButtonNumberPicker,
    ButtonSelection,
    ButtonStringPicker,
    ButtonTextbox,
    Keypad,
    KeypadRow,
    Location,
)

# Button types that only need an id and a title.
_TITLE_ONLY_TYPES: tuple[str, ...] = (
    "CameraImage",
    "CameraVideo",
    "GalleryImage",
    "GalleryVideo",
    "File",
    "Audio",
    "RecordAudio",
    "MyPhoneNumber",
    "MyLocation",
    "AskMyPhoneNumber",
    "AskLocation",
    "Barcode",
    "Payment",
)


class InlineBuilder:
    """Build an ``inline_keypad`` row by row."""

    def __init__(self) -> None:
        self._rows: list[KeypadRow] = []

    def row(self, *buttons: Button) -> "InlineBuilder":
        if not buttons:
            raise ValueError("At least one button must be provided to row")
        self._rows.append(KeypadRow(buttons=list(buttons)))
        return self

    def build(self) -> dict[str, Any]:
        return Keypad(rows=self._rows).model_dump(exclude_none=True)

    # ── button factories ─────────────────────────────────────────────────

    @staticmethod
    def button_simple(id: str, text: str) -> Button:
        return Button(id=id, type="Simple", button_text=text)

    @staticmethod
    def button_selection(id: str, text: str, selection: ButtonSelection) -> Button:
        return Button(id=id, type="Selection", button_text=text, button_selection=selection)

    @staticmethod
    def button_calendar(
        id: str,
        title: str,
        type: str,
        default_value: str | None = None,
        min_year: str | None = None,
        max_year: str | None = None,
    ) -> Button:
        calendar = ButtonCalendar(
            title=title,
            type=type,
            default_value=default_value,
            min_year=min_year,
            max_year=max_year,
        )
        return Button(id=id, type="Calendar", button_text=title, button_calendar=calendar)

    @staticmethod
    def button_number_picker(
        id: str,
        title: str,
        min_value: str,
        max_value: str,
        default_value: str | None = None,
    ) -> Button:
        picker = ButtonNumberPicker(
            title=title,
            min_value=min_value,
            max_value=max_value,
            default_value=default_value,
        )
        return Button(id=id, type="NumberPicker", button_text=title, button_number_picker=picker)

    @staticmethod
    def button_string_picker(
        id: str,
        title: str,
        items: list[str],
        default_value: str | None = None,
    ) -> Button:
        picker = ButtonStringPicker(title=title, items=items, default_value=default_value)
        return Button(id=id, type="StringPicker", button_text=title, button_string_picker=picker)

    @staticmethod
    def button_location(
        id: str,
        title: str,
        type: str,
        default_pointer_location: Location | None = None,
        default_map_location: Location | None = None,
        location_image_url: str | None = None,
    ) -> Button:
        location = ButtonLocation(
            title=title,
            type=type,
            default_pointer_location=default_pointer_location,
            default_map_location=default_map_location,
            location_image_url=location_image_url,
        )
        return Button(id=id, type="Location", button_text=title, button_location=location)

    @staticmethod
    def button_textbox(
        id: str,
        title: str,
        type_line: str = "SingleLine",
        type_keypad: str = "String",
        place_holder: str | None = None,
        default_value: str | None = None,
    ) -> Button:
        textbox = ButtonTextbox(
            title=title,
            type_line=type_line,
            type_keypad=type_keypad,
            place_holder=place_holder,
            default_value=default_value,
        )
        return Button(id=id, type="Textbox", button_text=title, button_textbox=textbox)

    @staticmethod
    def button_link(id: str, title: str, url: str) -> Button:
        return Button(id=id, type="Link", button_text=title, button_link=ButtonLink(link_url=url))

    @staticmethod
    def button_of_type(type: str, id: str, title: str) -> Button:
        """Build one of the title-only buttons (``CameraImage``, ``File`` …)."""
        if type not in _TITLE_ONLY_TYPES:
            raise ValueError(f"Unsupported button type {type!r}; expected one of {_TITLE_ONLY_TYPES}")
        return Button(id=id, type=type, button_text=title)


class ChatKeypadBuilder:
    """Build a persistent ``chat_keypad`` shown under the input field."""

    def __init__(self) -> None:
        self._rows: list[KeypadRow] = []

    def row(self, *buttons: Button) -> "ChatKeypadBuilder":
        self._rows.append(KeypadRow(buttons=list(buttons)))
        return self

    @staticmethod
    def button(id: str, text: str, type: str = "Simple") -> Button:
        return Button(id=id, type=type, button_text=text)

    def build(self, resize_keyboard: bool = True, on_time_keyboard: bool = False) -> dict[str, Any]:
        keypad = Keypad(rows=self._rows, resize_keyboard=resize_keyboard, on_time_keyboard=on_time_keyboard)
        return keypad.model_dump(exclude_none=True)
