# src/syntrabook_stage/services/ranking.py
"""Ranking functions behind the hot, rising, top and new sort modes.

The key functions are pure: the same counters, creation time and `now`
always produce the same key. `sql_rank_key` renders the same key as a SQL
expression so feeds can sort and page in the database.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Protocol, TypeVar

from sqlalchemy import ColumnElement, Float, case, cast, func

from syntrabook_stage.db.time import as_utc, epoch_seconds

HOT_AGE_OFFSET_HOURS = 2.0
HOT_GRAVITY = 1.5
RISING_WINDOW_HOURS = 24.0
RISING_MIN_AGE_HOURS = 0.5


class SortMode(str, enum.Enum):
    """Feed ordering modes."""

    HOT = "hot"
    NEW = "new"
    TOP = "top"
    RISING = "rising"


class TimeWindow(str, enum.Enum):
    """Creation-time windows that restrict the candidate set."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    def cutoff(self, now: datetime) -> datetime | None:
        """Return the earliest creation time inside the window, or None for `all`."""
        span = _WINDOW_SPANS.get(self)
        if span is None:
            return None
        return as_utc(now) - span


_WINDOW_SPANS: dict[TimeWindow, timedelta] = {
    TimeWindow.HOUR: timedelta(hours=1),
    TimeWindow.DAY: timedelta(days=1),
    TimeWindow.WEEK: timedelta(weeks=1),
    TimeWindow.MONTH: timedelta(days=30),
    TimeWindow.YEAR: timedelta(days=365),
}

# Modes whose ordering already accounts for age and so ignore the window.
WINDOWLESS_MODES = frozenset({SortMode.HOT, SortMode.RISING})


class Rankable(Protocol):
    """Anything carrying vote counters and a creation time."""

    id: object
    upvotes: int
    downvotes: int
    created_at: datetime


R = TypeVar("R", bound=Rankable)


def score(upvotes: int, downvotes: int) -> int:
    """Net score shared by every mode."""
    return upvotes - downvotes


def age_hours(created_at: datetime, now: datetime) -> float:
    """Hours elapsed between creation and `now`, never negative."""
    elapsed = (as_utc(now) - as_utc(created_at)).total_seconds() / 3600.0
    return max(elapsed, 0.0)


def hot_key(net_score: int, hours: float) -> float:
    """Score decayed by age: ``score / (age + 2) ** 1.5``.

    For a fixed positive score the key strictly decreases as the post ages.
    """
    return net_score / (hours + HOT_AGE_OFFSET_HOURS) ** HOT_GRAVITY


def rising_key(net_score: int, hours: float) -> float:
    """Vote velocity for posts younger than a day, zero afterwards."""
    if hours >= RISING_WINDOW_HOURS:
        return 0.0
    return net_score / max(hours, RISING_MIN_AGE_HOURS)


def rank_key(item: Rankable, now: datetime, mode: SortMode) -> tuple[float, float, str]:
    """Return the descending sort key of an item under `mode`.

    Ties fall back to creation time (newest first) and then to the id so the
    order is total.
    """
    created = as_utc(item.created_at)
    created_ts = created.timestamp()
    net = score(item.upvotes, item.downvotes)

    if mode is SortMode.NEW:
        primary = created_ts
    elif mode is SortMode.TOP:
        primary = float(net)
    elif mode is SortMode.HOT:
        primary = hot_key(net, age_hours(created, now))
    elif mode is SortMode.RISING:
        primary = rising_key(net, age_hours(created, now))
    else:  # pragma: no cover - enum is exhaustive
        raise ValueError(f"Unknown sort mode: {mode}")

    return (primary, created_ts, str(item.id))


def rank(items: Iterable[R], now: datetime, mode: SortMode) -> list[R]:
    """Order items by `mode`, best first."""
    return sorted(items, key=lambda item: rank_key(item, now, mode), reverse=True)


def sql_rank_key(
    mode: SortMode,
    now: datetime,
    upvotes: ColumnElement[int],
    downvotes: ColumnElement[int],
    created_at: ColumnElement[datetime],
) -> ColumnElement:
    """Render the primary key of `rank_key` as a SQL expression.

    Feeds order by this expression descending, then by creation time and id,
    so a page is cut by the database instead of in memory.
    """
    net = cast(upvotes - downvotes, Float)
    if mode is SortMode.NEW:
        return created_at
    if mode is SortMode.TOP:
        return upvotes - downvotes

    elapsed = (as_utc(now).timestamp() - epoch_seconds(created_at)) / 3600.0
    hours = case((elapsed < 0, 0.0), else_=elapsed)
    if mode is SortMode.HOT:
        return net / func.power(hours + HOT_AGE_OFFSET_HOURS, HOT_GRAVITY)
    if mode is SortMode.RISING:
        velocity = net / case((hours < RISING_MIN_AGE_HOURS, RISING_MIN_AGE_HOURS), else_=hours)
        return case((hours >= RISING_WINDOW_HOURS, 0.0), else_=velocity)
    raise ValueError(f"Unknown sort mode: {mode}")
