"""
User ledger data structures.

This module defines the persisted user record and its bounded message history,
plus the outcome returned when a chat message is evaluated for points.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

# Largest integer a JSON/JavaScript number can hold exactly. Totals above this are rejected.
MAX_SAFE_POINTS = 2**53 - 1

# Upper bound for a single award.
MAX_POINTS_PER_AWARD = 1_000_000

# Number of recent messages kept per user for duplicate detection.
MESSAGE_HISTORY_LIMIT = 5


def now_ms() -> int:
    """Return the current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(slots=True)
class MessageHistoryEntry:
    """A single remembered message."""

    content: str
    timestamp: int
    channel_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "timestamp": self.timestamp, "channelId": self.channel_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MessageHistoryEntry:
        """Build an entry from its stored form.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        try:
            content = data["content"]
            timestamp = data["timestamp"]
            channel_id = data["channelId"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed message history entry: {data!r}") from exc

        if not isinstance(content, str) or not isinstance(channel_id, str):
            raise ValueError(f"Malformed message history entry: {data!r}")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"Malformed message history entry: {data!r}")

        return cls(content=content, timestamp=int(timestamp), channel_id=channel_id)


@dataclass(slots=True)
class User:
    """
    Persisted per-user record.

    Attributes:
        user_id: Opaque platform user id (primary key).
        name: Display name at the time the record was created or last verified.
        pronouns: Free-text pronouns, possibly empty.
        points: Point total, always between 0 and ``MAX_SAFE_POINTS``.
        last_updated: Millisecond timestamp of the last mutation.
        last_messages: Recent messages, most recent first, at most
            ``MESSAGE_HISTORY_LIMIT`` entries.
    """

    user_id: str
    name: str
    pronouns: str = ""
    points: int = 0
    last_updated: int = field(default_factory=now_ms)
    last_messages: list[MessageHistoryEntry] = field(default_factory=list)

    def with_message(self, entry: MessageHistoryEntry) -> list[MessageHistoryEntry]:
        """Return the history with ``entry`` prepended and trimmed to the cap."""
        return [entry, *self.last_messages][:MESSAGE_HISTORY_LIMIT]

    def history_json(self) -> str:
        return json.dumps([entry.to_dict() for entry in self.last_messages])

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> User:
        """Build a user from a ``users`` table row.

        Raises:
            ValueError: If the row does not describe a valid user.
        """
        user_id = row["user_id"]
        name = row["name"]
        pronouns = row["pronouns"] if row["pronouns"] is not None else ""
        points = row["points"] if row["points"] is not None else 0
        last_updated = row["last_updated"] if row["last_updated"] is not None else now_ms()

        if not isinstance(user_id, str) or not user_id:
            raise ValueError(f"Invalid user id: {user_id!r}")
        if not isinstance(name, str):
            raise ValueError(f"Invalid name for user {user_id}: {name!r}")
        if not isinstance(points, int) or points < 0 or points > MAX_SAFE_POINTS:
            raise ValueError(f"Invalid points for user {user_id}: {points!r}")

        raw_history = row["last_messages"] or "[]"
        try:
            history_data = json.loads(raw_history)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid message history for user {user_id}") from exc
        if not isinstance(history_data, list):
            raise ValueError(f"Invalid message history for user {user_id}")

        history = [MessageHistoryEntry.from_dict(item) for item in history_data][:MESSAGE_HISTORY_LIMIT]

        return cls(
            user_id=user_id,
            name=name,
            pronouns=str(pronouns),
            points=points,
            last_updated=int(last_updated),
            last_messages=history,
        )


@dataclass(frozen=True, slots=True)
class MessageOutcome:
    """Result of evaluating a chat message for points."""

    points_awarded: int
    reason: str
