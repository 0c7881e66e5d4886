"""
Listening analytics aggregation.

Pure functions over play/like rows already fetched for a single request.
Nothing here touches the database or keeps state between calls.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

UNKNOWN = "Unknown"

# Longest accepted window; keeps now - days inside the datetime range
MAX_WINDOW_DAYS = 36500


@dataclass(frozen=True)
class ArtistRef:
    id: int
    stage_name: str


@dataclass(frozen=True)
class TrackRecord:
    id: int
    title: str
    genre: Optional[str]
    artist: ArtistRef


@dataclass(frozen=True)
class PlayRecord:
    id: int
    track: TrackRecord
    user_id: int
    started_at: datetime
    country: Optional[str] = None


@dataclass(frozen=True)
class LikeRecord:
    id: int
    user_id: int
    track: TrackRecord


@dataclass(frozen=True)
class AggregationWindow:
    """Either all time (days is None) or the last N days before now."""

    days: Optional[int] = None

    @classmethod
    def parse(cls, value: str) -> "AggregationWindow":
        if value == "all":
            return ALL_TIME
        match = re.fullmatch(r"(\d+)d", value)
        if not match:
            raise ValueError(f"Invalid window '{value}', expected 'all' or '<days>d'")
        days = int(match.group(1))
        if not 1 <= days <= MAX_WINDOW_DAYS:
            raise ValueError(f"Invalid window '{value}', days must be between 1 and {MAX_WINDOW_DAYS}")
        return cls(days=days)

    def since(self, now: datetime) -> Optional[datetime]:
        if self.days is None:
            return None
        return now - timedelta(days=self.days)

    def contains(self, timestamp: datetime, now: datetime) -> bool:
        start = self.since(now)
        return start is None or timestamp >= start


ALL_TIME = AggregationWindow()
LAST_7_DAYS = AggregationWindow(days=7)
LAST_30_DAYS = AggregationWindow(days=30)


def count_unique(events: Iterable[T], key: Callable[[T], Hashable]) -> int:
    return len({key(event) for event in events})


def day_key(timestamp: datetime, tz: tzinfo = timezone.utc) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(tz).date().isoformat()


def histogram_by_day(
    events: Iterable[T],
    date_of: Callable[[T], datetime],
    tz: tzinfo = timezone.utc,
) -> Dict[str, int]:
    """
    Count events per calendar day.

    Days without events are left out; callers that need a continuous series
    fill the gaps themselves. Keys come back in ascending date order.
    """
    counts: Dict[str, int] = {}
    for event in events:
        day = day_key(date_of(event), tz)
        counts[day] = counts.get(day, 0) + 1
    return dict(sorted(counts.items()))


def histogram_by_category(
    events: Iterable[T],
    category_of: Callable[[T], Optional[str]],
    fallback: str = UNKNOWN,
) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for event in events:
        category = category_of(event) or fallback
        counts[category] = counts.get(category, 0) + 1
    return counts


def tally(items: Iterable[T], key: Callable[[T], Hashable]) -> Dict[Hashable, int]:
    counts: Dict[Hashable, int] = {}
    for item in items:
        k = key(item)
        counts[k] = counts.get(k, 0) + 1
    return counts


def top_n(items: Iterable[T], score: Callable[[T], float], n: int) -> List[T]:
    """Highest scores first. Equal scores keep their input order."""
    if n <= 0:
        return []
    return sorted(items, key=score, reverse=True)[:n]


def count_genres(tracks: Iterable[TrackRecord]) -> Dict[str, int]:
    # Untagged tracks are dropped, not bucketed under UNKNOWN
    counts: Dict[str, int] = {}
    for track in tracks:
        if track.genre:
            counts[track.genre] = counts.get(track.genre, 0) + 1
    return counts


def top_genres_for_user(likes: Sequence[LikeRecord], user_id: int, n: int = 3) -> List[str]:
    counts = count_genres(like.track for like in likes if like.user_id == user_id)
    ranked = top_n(counts.items(), lambda item: item[1], n)
    return [genre for genre, _ in ranked]
