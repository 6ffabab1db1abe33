"""Parser for bounded numeric commands such as volume and seek deltas.

The grammar is tiny:

    "+N"  increase the current value by N
    "-N"  decrease the current value by N
    "N"   set the value to N
    ""    no command, just display the current value

The resolved target is always clamped to ``[minimum, maximum]``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class CommandMode(str, Enum):
    """How the command relates to the current value."""

    DISPLAY = "DISPLAY"
    ABSOLUTE = "ABSOLUTE"
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"


@dataclass(frozen=True)
class BoundedCommand:
    """Result of parsing a bounded numeric command.

    ``target`` equals ``current`` for display-only commands and is only
    meaningful when ``valid`` is True.
    """

    mode: CommandMode
    target: int
    current: int
    valid: bool


def parse_int(text: str) -> int | None:
    """Parse a non-negative integer magnitude, or None."""
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_seconds(text: str) -> int | None:
    """Parse seconds given either as an integer or as ``m:ss``."""
    text = text.strip()
    if ":" not in text:
        return parse_int(text)

    minutes, _, seconds = text.partition(":")
    parsed_minutes = parse_int(minutes)
    parsed_seconds = parse_int(seconds)
    if parsed_minutes is None or parsed_seconds is None:
        return None
    return parsed_minutes * 60 + parsed_seconds


VOLUME_MIN = 0
VOLUME_MAX = 100


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def parse(
    text: str | None,
    current: int,
    minimum: int,
    maximum: int,
    parser: Callable[[str], int | None] = parse_int,
) -> BoundedCommand:
    """Resolve a text delta against ``current`` into a clamped target.

    Args:
        text: User input, e.g. "+10", "-5", "45"
        current: Current value the delta applies to
        minimum: Lowest allowed target (inclusive)
        maximum: Highest allowed target (inclusive)
        parser: Parses the unsigned remainder; returns None when unparseable

    Returns:
        BoundedCommand. Out-of-range targets are pulled to the nearest bound;
        unparseable input yields a display-only, invalid command.
    """
    display = BoundedCommand(mode=CommandMode.DISPLAY, target=current, current=current, valid=False)

    if text is None or not text.strip():
        return display

    text = text.strip()
    mode = CommandMode.ABSOLUTE
    remainder = text
    if text[0] == "+":
        mode = CommandMode.INCREASE
        remainder = text[1:]
    elif text[0] == "-":
        mode = CommandMode.DECREASE
        remainder = text[1:]

    value = parser(remainder)
    if value is None:
        return display

    if mode is CommandMode.INCREASE:
        raw_target = current + value
    elif mode is CommandMode.DECREASE:
        raw_target = current - value
    else:
        raw_target = value

    return BoundedCommand(
        mode=mode,
        target=clamp(raw_target, minimum, maximum),
        current=current,
        valid=True,
    )


def parse_volume(text: str | None, current: int) -> BoundedCommand:
    """Volume command in percent, bounded to 0..100."""
    return parse(text, current, VOLUME_MIN, VOLUME_MAX)


def parse_seek(text: str | None, position: int, duration: int) -> BoundedCommand:
    """Seek command in seconds, bounded to the track duration."""
    return parse(text, position, 0, max(duration, 0), parser=parse_seconds)
