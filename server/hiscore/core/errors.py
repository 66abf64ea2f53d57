"""Domain errors raised by the scoreboard core."""

from __future__ import annotations


class UserNotFound(LookupError):
    """No record is stored for the requested user name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"user {name!r} not found")
        self.name = name


class InvalidPayload(ValueError):
    """A score submission failed validation and was not stored."""
