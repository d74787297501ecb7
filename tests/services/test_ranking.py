# mypy: ignore-errors
# tests/services/test_ranking.py
"""Tests for the pure ranking functions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from syntrabook_stage.services.ranking import (
    SortMode,
    TimeWindow,
    age_hours,
    hot_key,
    rank,
    rank_key,
    rising_key,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class Item:
    upvotes: int
    downvotes: int
    created_at: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)


def _hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


def test_hot_key_matches_formula() -> None:
    """A post with net score 8 aged three hours scores 8 / 5 ** 1.5."""
    item = Item(upvotes=10, downvotes=2, created_at=_hours_ago(3))
    primary, _, _ = rank_key(item, NOW, SortMode.HOT)
    assert primary == pytest.approx(0.7155, abs=1e-4)


def test_hot_key_decays_with_age() -> None:
    keys = [hot_key(5, hours) for hours in (0, 1, 6, 24, 240)]
    assert keys == sorted(keys, reverse=True)
    assert len(set(keys)) == len(keys)


def test_hot_key_zero_and_negative_scores() -> None:
    assert hot_key(0, 4) == 0
    assert hot_key(-3, 1) < 0


def test_rising_key_uses_minimum_age() -> None:
    """Brand new posts are treated as half an hour old."""
    assert rising_key(3, 0.0) == pytest.approx(6.0)
    assert rising_key(3, 0.1) == pytest.approx(6.0)
    assert rising_key(3, 2.0) == pytest.approx(1.5)


def test_rising_key_is_zero_after_a_day() -> None:
    assert rising_key(100, 24.0) == 0.0
    assert rising_key(100, 72.0) == 0.0


def test_age_hours_never_negative() -> None:
    """Posts stamped in the future count as age zero."""
    assert age_hours(NOW + timedelta(hours=2), NOW) == 0.0


def test_age_hours_accepts_naive_datetimes() -> None:
    naive = (NOW - timedelta(hours=5)).replace(tzinfo=None)
    assert age_hours(naive, NOW) == pytest.approx(5.0)


def test_rank_new_orders_by_creation_time() -> None:
    old = Item(upvotes=50, downvotes=0, created_at=_hours_ago(10))
    new = Item(upvotes=0, downvotes=0, created_at=_hours_ago(1))
    assert rank([old, new], NOW, SortMode.NEW) == [new, old]


def test_rank_top_orders_by_net_score() -> None:
    low = Item(upvotes=3, downvotes=2, created_at=_hours_ago(1))
    high = Item(upvotes=9, downvotes=1, created_at=_hours_ago(30))
    assert rank([low, high], NOW, SortMode.TOP) == [high, low]


def test_rank_hot_prefers_fresh_posts_with_equal_score() -> None:
    fresh = Item(upvotes=10, downvotes=0, created_at=_hours_ago(1))
    stale = Item(upvotes=10, downvotes=0, created_at=_hours_ago(20))
    assert rank([stale, fresh], NOW, SortMode.HOT) == [fresh, stale]


def test_rank_rising_sinks_posts_older_than_a_day() -> None:
    old_popular = Item(upvotes=500, downvotes=0, created_at=_hours_ago(30))
    young = Item(upvotes=2, downvotes=0, created_at=_hours_ago(2))
    assert rank([old_popular, young], NOW, SortMode.RISING) == [young, old_popular]


def test_rank_ties_break_on_creation_time_then_id() -> None:
    created = _hours_ago(4)
    first = Item(upvotes=1, downvotes=0, created_at=created)
    second = Item(upvotes=1, downvotes=0, created_at=created)
    newer = Item(upvotes=1, downvotes=0, created_at=_hours_ago(3))

    ranked = rank([first, second, newer], NOW, SortMode.TOP)

    assert ranked[0] is newer
    assert [str(item.id) for item in ranked[1:]] == sorted(
        [str(first.id), str(second.id)], reverse=True
    )


def test_rank_is_deterministic() -> None:
    items = [Item(upvotes=i % 3, downvotes=i % 2, created_at=_hours_ago(i)) for i in range(12)]
    assert rank(items, NOW, SortMode.HOT) == rank(list(reversed(items)), NOW, SortMode.HOT)


@pytest.mark.parametrize(
    ("window", "expected"),
    [
        (TimeWindow.HOUR, timedelta(hours=1)),
        (TimeWindow.DAY, timedelta(days=1)),
        (TimeWindow.WEEK, timedelta(days=7)),
        (TimeWindow.MONTH, timedelta(days=30)),
        (TimeWindow.YEAR, timedelta(days=365)),
    ],
)
def test_time_window_cutoff(window: TimeWindow, expected: timedelta) -> None:
    assert window.cutoff(NOW) == NOW - expected


def test_time_window_all_has_no_cutoff() -> None:
    assert TimeWindow.ALL.cutoff(NOW) is None

