"""Match rules attached to handler registrations.

A registration carries an ordered tuple of rules instead of a wrapped
closure, so routing can be inspected and tested without invoking user code.
:func:`apply_rules` evaluates them left to right against a message.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable

from bot.context import Message

COMMAND_MARKER = "/"


@dataclasses.dataclass(frozen=True, slots=True)
class CommandRule:
    """Text must be ``/<command> [args…]`` with ``command`` in *commands*."""

    commands: frozenset[str]
    marker: str = COMMAND_MARKER

    def match(self, message: Message) -> Message | None:
        text = message.text
        if not text or not text.startswith(self.marker):
            return None
        parts = text.split()
        if not parts:
            return None
        if parts[0][len(self.marker):] not in self.commands:
            return None
        return message.with_args(parts[1:])


@dataclasses.dataclass(frozen=True, slots=True)
class PredicateRule:
    """An arbitrary user predicate over the message."""

    predicate: Callable[[Message], bool]

    def match(self, message: Message) -> Message | None:
        return message if self.predicate(message) else None


@dataclasses.dataclass(frozen=True, slots=True)
class ButtonRule:
    """The message must come from a button, optionally a specific one."""

    button_id: str | None = None

    def match(self, message: Message) -> Message | None:
        if message.aux_data is None:
            return None
        if self.button_id is not None and message.aux_data.button_id != self.button_id:
            return None
        return message


MatchRule = CommandRule | PredicateRule | ButtonRule


def command_rule(commands: str | Iterable[str]) -> CommandRule:
    """Build a :class:`CommandRule`; a bare string means a single command."""
    if isinstance(commands, str):
        commands = [commands]
    return CommandRule(frozenset(cmd.lstrip(COMMAND_MARKER) for cmd in commands))


def apply_rules(rules: Iterable[MatchRule], message: Message) -> Message | None:
    """Run *rules* in order; return the (possibly updated) message or ``None``.

    A :class:`CommandRule` hands the next rule a copy carrying the command
    arguments, so predicates placed after it can inspect ``message.args``.
    """
    current: Message | None = message
    for rule in rules:
        current = rule.match(current)
        if current is None:
            return None
    return current
