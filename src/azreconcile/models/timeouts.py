"""Per-operation timeouts for long-running create, update and delete calls."""

import re

from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMEOUT = 30 * 60.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)([hms])")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0}


def parse_duration(value: str | int | float) -> float:
    """Parse a duration into seconds.

    Accepts a number of seconds or a string made of hour/minute/second parts.

    Examples:
        >>> parse_duration("1h30m")
        5400.0
        >>> parse_duration(90)
        90.0
    """
    if isinstance(value, bool):
        raise ValueError("duration must be a number of seconds or a string like '30m'")
    if isinstance(value, int | float):
        seconds = float(value)
    else:
        text = value.strip().lower()
        if not text or _DURATION_PART.sub("", text):
            raise ValueError(f"invalid duration {value!r} (expected e.g. '30m', '1h30m', '90s')")
        seconds = sum(
            float(amount) * _UNIT_SECONDS[unit] for amount, unit in _DURATION_PART.findall(text)
        )

    if seconds <= 0:
        raise ValueError("duration must be positive")
    return seconds


class Timeouts(BaseModel):
    """How long to wait for each long-running operation, in seconds."""

    create: float = Field(default=DEFAULT_TIMEOUT)
    update: float = Field(default=DEFAULT_TIMEOUT)
    delete: float = Field(default=DEFAULT_TIMEOUT)

    @field_validator("create", "update", "delete", mode="before")
    @classmethod
    def validate_duration(cls, v: str | int | float) -> float:
        """Accept numbers of seconds or duration strings."""
        return parse_duration(v)

    def for_create_update(self, is_new: bool) -> float:
        """Timeout for a create-or-update call."""
        return self.create if is_new else self.update
