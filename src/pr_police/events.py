from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from .messages import COMMANDS, WORKAROUND_PHRASE


# Slack direct message channel ids start with D
DIRECT_MESSAGE_PREFIX = "D"


class EventKind(Enum):
    SCHEDULED_TICK = "scheduled_tick"  # Timer driven, never produced by classify_event
    DIRECT_MESSAGE = "direct_message"
    COMMAND_PHRASE = "command_phrase"
    WORKAROUND_PHRASE = "workaround_phrase"
    IGNORE = "ignore"

    @property
    def is_interactive(self) -> bool:
        return self in (EventKind.DIRECT_MESSAGE, EventKind.COMMAND_PHRASE, EventKind.WORKAROUND_PHRASE)


def is_bot_message(event: Mapping[str, Any]) -> bool:
    return event.get("subtype") == "bot_message" or bool(event.get("bot_id"))


def is_new_user_message(event: Mapping[str, Any]) -> bool:
    """A plain message typed by a person; edits, deletions and joins carry a subtype."""
    return event.get("subtype") is None and not is_bot_message(event)


def is_direct_message(event: Mapping[str, Any]) -> bool:
    return str(event.get("channel") or "").startswith(DIRECT_MESSAGE_PREFIX)


def classify_event(
    event: Mapping[str, Any],
    commands: Iterable[str] = COMMANDS,
    workaround_phrase: Optional[str] = None,
) -> EventKind:
    """Decide whether an inbound Slack event should produce a report."""
    if event.get("type") != "message":
        return EventKind.IGNORE

    text = event.get("text")
    if text is not None:
        if text in set(commands):
            return EventKind.COMMAND_PHRASE
        if text == (workaround_phrase or WORKAROUND_PHRASE):
            return EventKind.WORKAROUND_PHRASE

    if is_direct_message(event) and is_new_user_message(event):
        return EventKind.DIRECT_MESSAGE

    return EventKind.IGNORE
