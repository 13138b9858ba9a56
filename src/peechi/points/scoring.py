"""
Message scoring heuristics.

Rewards chat activity while resisting copy-paste and low-effort spam. All
functions here are pure; thresholds are empirical knobs.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from peechi.datatypes.user_datatypes import MessageHistoryEntry

MAX_RAW_LENGTH = 10_000
MIN_NORMALIZED_LENGTH = 3
SPAM_CHECK_MIN_LENGTH = 10
MIN_DISTINCT_CHARACTERS = 3
MIN_WORD_COUNT = 2
SIMILARITY_THRESHOLD = 0.7

# (exclusive upper bound on normalized length, points)
SCORE_TIERS: tuple[tuple[int, int], ...] = ((10, 1), (50, 2), (200, 3))
MAX_SCORE = 4

_WHITESPACE_RE = re.compile(r"\s+")
_MARKUP_RE = re.compile(r"[*_~`]")
_EMOJI_TOKEN_RE = re.compile(r":\w+:")
_URL_RE = re.compile(r"https?://\S+")
_MENTION_RE = re.compile(r"<[@#&!]+[0-9]+>")


def normalize_message(content: str | None) -> str:
    """Normalize message text for scoring and comparison.

    Lowercases, collapses whitespace, strips emphasis markup, ``:emoji:``
    tokens, URLs and mention tokens, then trims.

    Example:
        >>> normalize_message("**Hello**   World <@123>")
        'hello world'
    """
    if not content or not isinstance(content, str):
        return ""

    text = content.lower()
    text = _WHITESPACE_RE.sub(" ", text)
    text = _MARKUP_RE.sub("", text)
    text = _EMOJI_TOKEN_RE.sub("", text)
    text = _URL_RE.sub("", text)
    text = _MENTION_RE.sub("", text)
    return text.strip()


def score_message(text: str | None) -> int:
    """Return the points (0-4) a message earns.

    Args:
        text: Raw message content.

    Returns:
        0 for empty, oversized, too short or spam-like messages, otherwise a
        tier based on normalized length.
    """
    if not text or not isinstance(text, str) or not text.strip():
        return 0

    if len(text) > MAX_RAW_LENGTH:
        return 0

    normalized = normalize_message(text)
    length = len(normalized)

    if length < MIN_NORMALIZED_LENGTH:
        return 0

    if length > SPAM_CHECK_MIN_LENGTH:
        # "aaaaaaaaaaaa"
        distinct = len(set(_WHITESPACE_RE.sub("", normalized)))
        if distinct < MIN_DISTINCT_CHARACTERS:
            return 0

        # one long token, e.g. "abcdefghijkl"
        words = [word for word in normalized.split() if word]
        if len(words) < MIN_WORD_COUNT:
            return 0

    for upper_bound, points in SCORE_TIERS:
        if length < upper_bound:
            return points
    return MAX_SCORE


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def similarity_ratio(first: str, second: str) -> float:
    """Sørensen–Dice coefficient over character bigrams.

    Whitespace is ignored. Identical strings score 1.0; strings shorter than
    two characters share no bigrams and score 0.0. Symmetric in its
    arguments.
    """
    a = _WHITESPACE_RE.sub("", first)
    b = _WHITESPACE_RE.sub("", second)

    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    first_bigrams = _bigrams(a)
    second_bigrams = _bigrams(b)
    overlap = sum((first_bigrams & second_bigrams).values())
    return (2.0 * overlap) / ((len(a) - 1) + (len(b) - 1))


def is_duplicate(candidate: str | None, history: Iterable[MessageHistoryEntry | str]) -> bool:
    """Return True if ``candidate`` repeats one of the user's recent messages.

    Args:
        candidate: Raw text of the new message.
        history: Recent messages, most recent first. Plain strings are accepted
            as well as history entries.

    Returns:
        True when the candidate is too degenerate to score or is at least
        ``SIMILARITY_THRESHOLD`` similar to any history entry.
    """
    if not candidate:
        return False

    entries = list(history)
    if not entries:
        return False

    normalized = normalize_message(candidate)
    if len(normalized) < MIN_NORMALIZED_LENGTH:
        return True

    for entry in entries:
        content = entry.content if isinstance(entry, MessageHistoryEntry) else entry
        previous = normalize_message(content)
        if len(previous) < MIN_NORMALIZED_LENGTH:
            continue
        if similarity_ratio(normalized, previous) >= SIMILARITY_THRESHOLD:
            return True

    return False
