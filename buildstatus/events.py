"""Structured event log decoding.

Build tools can emit their activity as one JSON object per line, optionally
prefixed with ``@nix ``::

    @nix {"action":"start","id":7,"type":105,"text":"building hello"}
    @nix {"action":"result","id":7,"type":101,"fields":["checking..."]}
    @nix {"action":"msg","level":3,"msg":"warning: dirty tree"}
    @nix {"action":"stop","id":7}

``replay_events`` feeds such a stream into any ``Logger``, so a recorded
build can be watched through the status line again.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from buildstatus.errors import EventDecodeError
from buildstatus.logger import Logger
from buildstatus.models import ActivityType, Field, Verbosity

logger = logging.getLogger(__name__)

EVENT_PREFIX = "@nix "

ACTIONS = frozenset({"msg", "start", "stop", "result"})


@dataclass
class Event:
    """One decoded line of the event log."""

    action: str
    activity_id: int = 0
    type: int = 0
    level: int = Verbosity.INFO
    text: str = ""
    fields: list[Field] = field(default_factory=list)

    def apply(self, target: Logger) -> None:
        """Replay this event on ``target``."""
        if self.action == "msg":
            target.log(self.level, self.text)
        elif self.action == "start":
            target.start_activity(
                self.activity_id, ActivityType.from_code(self.type), self.text
            )
        elif self.action == "stop":
            target.stop_activity(self.activity_id)
        else:
            target.result(self.activity_id, self.type, self.fields)


def _require_int(data: dict[str, Any], key: str, line_number: int | None) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise EventDecodeError(f"'{key}' must be an integer", line_number)
    return value


def _decode_fields(raw: Any, line_number: int | None) -> list[Field]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise EventDecodeError("'fields' must be a list", line_number)
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, str | int):
            raise EventDecodeError(
                f"field {value!r} is neither a string nor an integer", line_number
            )
    return list(raw)


def decode_event(line: str, line_number: int | None = None) -> Event | None:
    """Decode one line; blank lines decode to None.

    Raises:
        EventDecodeError: If the line is not a well-formed event.
    """
    text = line.strip()
    if not text:
        return None
    if text.startswith(EVENT_PREFIX):
        text = text[len(EVENT_PREFIX) :]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EventDecodeError(f"invalid JSON: {exc.msg}", line_number) from exc
    if not isinstance(data, dict):
        raise EventDecodeError("event must be a JSON object", line_number)

    action = data.get("action")
    if action not in ACTIONS:
        raise EventDecodeError(f"unknown action {action!r}", line_number)

    if action == "msg":
        level = data.get("level", Verbosity.INFO)
        if isinstance(level, bool) or not isinstance(level, int):
            raise EventDecodeError("'level' must be an integer", line_number)
        msg = data.get("msg", "")
        if not isinstance(msg, str):
            raise EventDecodeError("'msg' must be a string", line_number)
        return Event(action=action, level=level, text=msg)

    activity_id = _require_int(data, "id", line_number)
    if action == "stop":
        return Event(action=action, activity_id=activity_id)

    event_type = _require_int(data, "type", line_number)
    if action == "start":
        label = data.get("text", "")
        if not isinstance(label, str):
            raise EventDecodeError("'text' must be a string", line_number)
        return Event(
            action=action, activity_id=activity_id, type=event_type, text=label
        )

    return Event(
        action=action,
        activity_id=activity_id,
        type=event_type,
        fields=_decode_fields(data.get("fields"), line_number),
    )


def iter_events(lines: Iterable[str], skip_invalid: bool = False):
    """Yield decoded events, optionally skipping malformed lines."""
    for line_number, line in enumerate(lines, start=1):
        try:
            event = decode_event(line, line_number)
        except EventDecodeError as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping event: %s", exc)
            continue
        if event is not None:
            yield event


def replay_events(
    lines: Iterable[str], target: Logger, skip_invalid: bool = False
) -> int:
    """Feed an event log into ``target``.

    Returns:
        Number of events applied.
    """
    count = 0
    for event in iter_events(lines, skip_invalid=skip_invalid):
        event.apply(target)
        count += 1
    return count
