"""Domain entity representing a notification recipient."""

from dataclasses import dataclass


@dataclass
class User:
    """Core attributes of a user able to receive notifications."""

    id: str
    email: str
    name: str | None = None
    super_role: str | None = None


__all__ = ["User"]
