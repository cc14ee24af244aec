"""
Event Timeline Builder
======================
Turn coarse citation counts into a per-citation event timeline:
- Citations are spread evenly inside their interval (never at its start)
- Timestamps are in days since publication
- Each event carries its 1-based cumulative rank
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from wsb_impact.config import DAYS_PER_INTERVAL


@dataclass(frozen=True)
class CitationEvent:
    """One citation: when it happened and its rank among all citations."""

    timestamp: float
    index: int


class Timeline:
    """Immutable ordered sequence of citation events.

    The numpy views of the timestamps (and their logs) are computed once and
    marked read-only, so the statistics evaluator can reuse them on every
    Newton-Raphson iteration without copying.
    """

    __slots__ = ("_events", "_timestamps", "_log_timestamps")

    def __init__(self, events: Iterable[CitationEvent] = ()) -> None:
        events = tuple(events)
        previous = 0.0
        for position, event in enumerate(events, start=1):
            if event.timestamp <= 0:
                raise ValueError(f"Citation {position} has a non-positive timestamp")
            if event.timestamp < previous:
                raise ValueError(f"Citation {position} is earlier than citation {position - 1}")
            if event.index != position:
                raise ValueError(
                    f"Citation {position} has cumulative index {event.index}"
                )
            previous = event.timestamp

        timestamps = np.array([e.timestamp for e in events], dtype=float)
        log_timestamps = np.log(timestamps)
        timestamps.flags.writeable = False
        log_timestamps.flags.writeable = False

        self._events = events
        self._timestamps = timestamps
        self._log_timestamps = log_timestamps

    @classmethod
    def from_timestamps(cls, timestamps: Iterable[float]) -> "Timeline":
        """Build a timeline from already fine-grained timestamps in days."""
        return cls(
            CitationEvent(timestamp=float(t), index=i)
            for i, t in enumerate(timestamps, start=1)
        )

    @property
    def events(self) -> Tuple[CitationEvent, ...]:
        return self._events

    @property
    def timestamps(self) -> np.ndarray:
        return self._timestamps

    @property
    def log_timestamps(self) -> np.ndarray:
        return self._log_timestamps

    @property
    def n(self) -> int:
        """Total number of citations."""
        return len(self._events)

    @property
    def last_timestamp(self) -> float:
        """Time of the latest citation, the reference time ``t``."""
        if not self._events:
            raise ValueError("Empty timeline has no last timestamp")
        return self._events[-1].timestamp

    @property
    def is_empty(self) -> bool:
        return not self._events

    @property
    def is_degenerate(self) -> bool:
        """True when there are too few events for the fit to mean much."""
        return self.n < 2

    def interval_counts(self, days_per_interval: int = DAYS_PER_INTERVAL) -> List[int]:
        """Count events per coarse interval.

        The last citation of interval ``i`` sits exactly on
        ``days_per_interval * (i + 1)``, so the interval is ``ceil(t / d) - 1``.
        """
        counts: List[int] = []
        for event in self._events:
            interval = math.ceil(round(event.timestamp / days_per_interval, 9)) - 1
            while len(counts) <= interval:
                counts.append(0)
            counts[interval] += 1
        return counts

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    def __getitem__(self, item):
        return self._events[item]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Timeline):
            return NotImplemented
        return self._events == other._events

    def __hash__(self) -> int:
        return hash(self._events)

    def __repr__(self) -> str:
        if not self._events:
            return "Timeline([])"
        return f"Timeline(n={self.n}, t={self.last_timestamp:.1f})"


def build_timeline(
    series: Sequence[Tuple[int, int]],
    limit: int = 0,
    days_per_interval: int = DAYS_PER_INTERVAL,
) -> Timeline:
    """Build a citation timeline from coarse (interval, count) pairs.

    Args:
        series: Ordered ``(interval_index, citation_count)`` pairs; the first
            interval is normally 0 (the publication year).
        limit: Only read the first ``limit`` intervals. 0 reads them all.
        days_per_interval: Length of one interval in days.

    Returns:
        Timeline whose length is the total citation count of the window read.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")

    rows = list(series)
    if limit > 0:
        rows = rows[:limit]

    events: List[CitationEvent] = []
    previous_interval = None
    for interval, count in rows:
        if interval < 0:
            raise ValueError(f"Interval index {interval} is negative")
        if previous_interval is not None and interval <= previous_interval:
            raise ValueError(
                f"Interval index {interval} does not follow {previous_interval}"
            )
        if count < 0 or int(count) != count:
            raise ValueError(
                f"Interval {interval} has an invalid citation count: {count}"
            )
        previous_interval = interval

        k = int(count)
        for j in range(1, k + 1):
            events.append(
                CitationEvent(
                    timestamp=days_per_interval * (interval + j / k),
                    index=len(events) + 1,
                )
            )

    return Timeline(events)


def timeline_from_counts(counts: Sequence[int], limit: int = 0) -> Timeline:
    """Build a timeline from per-interval counts, position being the interval."""
    return build_timeline(list(enumerate(counts)), limit=limit)
