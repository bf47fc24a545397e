"""Journal entry model and its wire representation."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from .errors import DecodingError


class Mood(Enum):
    """Mood attached to a journal entry, stored by raw value."""

    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"


def mood_value(mood: "Mood | str") -> str:
    """Return the raw stored value for a mood."""
    if isinstance(mood, Mood):
        return mood.value
    return str(mood)


# Numeric timestamps count seconds from this date, not from the Unix epoch
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse a wire timestamp.

    Accepts ISO 8601 strings (including a trailing ``Z``) and numeric
    seconds since the 2001-01-01 UTC reference date.

    Raises:
        DecodingError: If the value is neither.
    """
    if isinstance(value, bool):
        raise DecodingError(f"Invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        try:
            return REFERENCE_DATE + timedelta(seconds=value)
        except (OverflowError, ValueError) as e:
            raise DecodingError(f"Invalid numeric timestamp {value!r}: {e}") from e

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise DecodingError(f"Invalid ISO 8601 timestamp {value!r}") from e

    raise DecodingError(f"Invalid timestamp: {value!r}")


@dataclass
class EntryRepresentation:
    """Wire form of an entry as stored by the remote JSON store."""

    title: str
    body_text: str
    timestamp: datetime
    mood: str = Mood.NEUTRAL.value
    identifier: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "title": self.title,
            "bodyText": self.body_text,
            "timestamp": self.timestamp.isoformat(),
            "identifier": self.identifier,
            "mood": self.mood,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "EntryRepresentation":
        """Create from a decoded JSON object.

        Raises:
            DecodingError: If the payload does not match the entry schema.
        """
        if not isinstance(data, dict):
            raise DecodingError(
                f"Expected entry object, got {type(data).__name__}"
            )

        for key in ("title", "bodyText", "timestamp", "mood"):
            if key not in data:
                raise DecodingError(f"Entry is missing field '{key}'")

        for key in ("title", "bodyText", "mood"):
            if not isinstance(data[key], str):
                raise DecodingError(f"Entry field '{key}' must be a string")

        identifier = data.get("identifier")
        if identifier is not None and not isinstance(identifier, str):
            raise DecodingError("Entry field 'identifier' must be a string")

        return cls(
            title=data["title"],
            body_text=data["bodyText"],
            timestamp=parse_timestamp(data["timestamp"]),
            mood=data["mood"],
            identifier=identifier,
        )


@dataclass
class Entry:
    """A journal entry held in the local store.

    ``pk`` is the local row identity; ``identifier`` is the sync identity
    shared with the remote store and stays ``None`` until one is assigned.
    """

    title: str
    body_text: str
    timestamp: datetime = field(default_factory=datetime.now)
    mood: str = Mood.NEUTRAL.value
    identifier: str | None = None
    pk: int | None = None

    @property
    def is_synchronizable(self) -> bool:
        return bool(self.identifier)

    def to_representation(self) -> EntryRepresentation:
        return EntryRepresentation(
            title=self.title,
            body_text=self.body_text,
            timestamp=self.timestamp,
            mood=self.mood,
            identifier=self.identifier,
        )

    @classmethod
    def from_representation(cls, rep: EntryRepresentation) -> "Entry":
        """Materialize a new, unsaved entry from its wire form."""
        return cls(
            title=rep.title,
            body_text=rep.body_text,
            timestamp=rep.timestamp,
            mood=rep.mood,
            identifier=rep.identifier,
        )

    def apply_representation(self, rep: EntryRepresentation) -> None:
        """Overwrite every synced field from the representation."""
        self.title = rep.title
        self.body_text = rep.body_text
        self.timestamp = rep.timestamp
        self.identifier = rep.identifier
        self.mood = rep.mood
