"""
User ledger: per-user point totals and recent-message history.

All point mutations run inside ``ConnectionManager.transaction()``, which
serialises writers, so concurrent awards for the same user are never lost.
Read helpers never raise; storage failures are logged and reported as
"absent" or as an empty result.
"""

from __future__ import annotations

import math

from peechi.database.db_connection import ConnectionManager
from peechi.datatypes.user_datatypes import (
    MAX_POINTS_PER_AWARD,
    MAX_SAFE_POINTS,
    MessageHistoryEntry,
    MessageOutcome,
    User,
    now_ms,
)
from peechi.exceptions import PersistenceError
from peechi.points.scoring import is_duplicate, score_message
from peechi.util.logger import get_logger

logger = get_logger("user_ledger")

LEADERBOARD_MIN = 1
LEADERBOARD_MAX = 25
LEADERBOARD_DEFAULT = 10

_USER_COLUMNS = "user_id, name, pronouns, points, last_updated, last_messages"


def clamp_leaderboard_limit(limit: int | None) -> int:
    """Clamp a requested leaderboard size into ``[LEADERBOARD_MIN, LEADERBOARD_MAX]``."""
    if limit is None:
        return LEADERBOARD_DEFAULT
    return max(LEADERBOARD_MIN, min(LEADERBOARD_MAX, int(limit)))


class UserLedger:
    """
    Repository and service for user point records.

    Args:
        connection: Open connection manager for the backing database.
    """

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> User | None:
        """Return the user record, or None if absent or unreadable."""
        try:
            async with self._connection.read() as conn:
                cursor = await conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (str(user_id),)
                )
                row = await cursor.fetchone()
        except Exception as exc:
            logger.error("[USER LEDGER] Error fetching user %s: %s", user_id, exc)
            return None

        if row is None:
            return None

        try:
            return User.from_row(row)
        except (ValueError, KeyError) as exc:
            logger.error("[USER LEDGER] Stored record for user %s is malformed: %s", user_id, exc)
            return None

    async def get_user_points(self, user_id: str) -> int:
        user = await self.get_user(user_id)
        return user.points if user else 0

    async def get_leaderboard(self, limit: int | None = LEADERBOARD_DEFAULT) -> list[User]:
        """
        Return the top users by points, highest first.

        Args:
            limit: Requested number of users; clamped into [1, 25].

        Returns:
            list[User]: Up to ``limit`` users. Malformed rows are skipped.
        """
        sanitized_limit = clamp_leaderboard_limit(limit)

        try:
            async with self._connection.read() as conn:
                cursor = await conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users ORDER BY points DESC, user_id ASC LIMIT ?",
                    (sanitized_limit,),
                )
                rows = await cursor.fetchall()
        except Exception as exc:
            logger.error("[USER LEDGER] Error fetching leaderboard: %s", exc)
            return []

        users: list[User] = []
        for row in rows:
            try:
                users.append(User.from_row(row))
            except (ValueError, KeyError) as exc:
                logger.warning("[USER LEDGER] Invalid user data for %s: %s", row["user_id"], exc)
        return users

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_user(self, user_id: str, name: str, pronouns: str = "") -> User:
        """
        Create a user with zero points and an empty history.

        If another coroutine created the same user first, the stored record is
        returned unchanged.

        Raises:
            PersistenceError: If the record could not be written.
        """
        user = User(user_id=str(user_id), name=name, pronouns=pronouns)

        try:
            async with self._connection.transaction() as conn:
                insert = await conn.execute(
                    f"INSERT OR IGNORE INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    (user.user_id, user.name, user.pronouns, user.points, user.last_updated, user.history_json()),
                )
                cursor = await conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (user.user_id,)
                )
                row = await cursor.fetchone()
                created = insert.rowcount == 1
        except Exception as exc:
            logger.error("[USER LEDGER] Error creating user %s: %s", user_id, exc)
            raise PersistenceError(f"Could not create user {user_id}") from exc

        if row is None:
            raise PersistenceError(f"User {user_id} missing after insert")

        stored = User.from_row(row)
        if created:
            logger.info("[USER LEDGER] Created new user: %s (%s)", name, user_id)
        return stored

    async def upsert_profile(self, user_id: str, name: str, pronouns: str = "") -> None:
        """
        Create the user or update their name and pronouns, keeping points.

        Raises:
            PersistenceError: If the record could not be written.
        """
        try:
            async with self._connection.transaction() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, 0, ?, '[]')
                    ON CONFLICT(user_id) DO UPDATE SET
                        name = excluded.name,
                        pronouns = excluded.pronouns,
                        last_updated = excluded.last_updated
                    """,
                    (str(user_id), name, pronouns, now_ms()),
                )
        except Exception as exc:
            logger.error("[USER LEDGER] Error updating profile for %s: %s", user_id, exc)
            raise PersistenceError(f"Could not update profile for {user_id}") from exc

        logger.info("[USER LEDGER] Profile saved for %s (%s)", name, user_id)

    async def award_points(
        self,
        user_id: str,
        delta: int | float,
        message: MessageHistoryEntry | None = None,
    ) -> bool:
        """
        Atomically add ``delta`` points to an existing user.

        Args:
            user_id: User to credit.
            delta: Finite, non-negative amount not above ``MAX_POINTS_PER_AWARD``.
            message: Message to push onto the user's history, if any.

        Returns:
            bool: True if the award was written. False if the input was
            rejected, the user does not exist, the total would exceed
            ``MAX_SAFE_POINTS``, or the store failed.
        """
        if isinstance(delta, bool) or not isinstance(delta, (int, float)):
            logger.warning("[USER LEDGER] Rejected non-numeric award for %s: %r", user_id, delta)
            return False
        if (isinstance(delta, float) and not math.isfinite(delta)) or delta < 0 or delta > MAX_POINTS_PER_AWARD:
            logger.warning("[USER LEDGER] Rejected out-of-range award for %s: %r", user_id, delta)
            return False
        if delta != int(delta):
            logger.warning("[USER LEDGER] Rejected fractional award for %s: %r", user_id, delta)
            return False
        delta = int(delta)

        try:
            async with self._connection.transaction() as conn:
                cursor = await conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (str(user_id),)
                )
                row = await cursor.fetchone()

                if row is None:
                    logger.warning("[USER LEDGER] Attempted to update points for non-existent user: %s", user_id)
                    return False

                user = User.from_row(row)

                if user.points + delta > MAX_SAFE_POINTS:
                    logger.warning(
                        "[USER LEDGER] Award of %d would overflow points for %s (current %d)",
                        delta, user_id, user.points,
                    )
                    return False

                user.points += delta
                if message is not None:
                    user.last_messages = user.with_message(message)
                user.last_updated = now_ms()

                await conn.execute(
                    "UPDATE users SET points = ?, last_messages = ?, last_updated = ? WHERE user_id = ?",
                    (user.points, user.history_json(), user.last_updated, user.user_id),
                )
        except Exception as exc:
            logger.error("[USER LEDGER] Error updating points for user %s: %s", user_id, exc)
            return False

        logger.info("[USER LEDGER] Updated user %s: +%d points", user_id, delta)
        return True

    # ------------------------------------------------------------------
    # Message pipeline
    # ------------------------------------------------------------------

    async def process_message(
        self,
        user_id: str,
        user_name: str,
        content: str,
        channel_id: str,
    ) -> MessageOutcome:
        """
        Evaluate a chat message and award points for it.

        Fetches or creates the user, rejects near-duplicates of their recent
        messages, scores the text and credits the result. Never raises.
        """
        try:
            user = await self.get_user(user_id)
            if user is None:
                user = await self.create_user(user_id, user_name)

            if is_duplicate(content, user.last_messages):
                return MessageOutcome(0, "Message too similar to recent messages")

            points = score_message(content)
            if points == 0:
                return MessageOutcome(0, "Message too short or invalid")

            entry = MessageHistoryEntry(content=content, timestamp=now_ms(), channel_id=str(channel_id))
            if await self.award_points(user_id, points, entry):
                return MessageOutcome(points, f"Awarded {points} points for unique message")

            return MessageOutcome(0, "Failed to update user points")
        except Exception as exc:
            logger.error("[USER LEDGER] Error processing message for user %s: %s", user_id, exc)
            return MessageOutcome(0, "Error processing message")
