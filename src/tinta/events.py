"""Event and EventType definitions for the span scanner.

The scanner produces a stream of Event objects that the run builder consumes.
Each Event has a type, a value, and the offset in the markup where it starts.

Thread Safety:
Event is frozen (immutable) and safe to share across threads.
EventType is an enum (inherently immutable).

"""

from dataclasses import dataclass
from enum import Enum, auto


class EventType(Enum):
    """Event types produced by the scanner."""

    TEXT = auto()  # Literal text between tags (still entity-encoded)
    OPEN_SPAN = auto()  # <span class="...">
    CLOSE_SPAN = auto()  # </span>


@dataclass(frozen=True, slots=True)
class Event:
    """An event produced by the scanner.

    Attributes:
        type: The event type (from EventType enum)
        value: Text content for TEXT, raw class attribute for OPEN_SPAN,
            empty for CLOSE_SPAN
        offset: Absolute position of the event in the markup

    """

    type: EventType
    value: str
    offset: int = 0

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Event({self.type.name}, {val!r}, @{self.offset})"
