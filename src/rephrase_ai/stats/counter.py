"""Thread-safe usage counters, one per task kind."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from rephrase_ai.tasks.models import TaskKind


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    """A point-in-time copy of the counters."""

    humanize_count: int = 0
    detect_count: int = 0
    plagiarize_count: int = 0
    research_count: int = 0

    def to_message(self) -> dict[str, Any]:
        """Payload pushed to live listeners."""

        return {
            "type": "stats",
            "humanize_count": self.humanize_count,
            "detect_count": self.detect_count,
            "plagiarize_count": self.plagiarize_count,
            "research_count": self.research_count,
        }


@dataclass
class UsageCounter:
    """Process-lifetime invocation counts.

    Shared by request workers (increment) and the broadcast hub (snapshot);
    both hold the lock only for O(1) work.
    """

    _counts: dict[TaskKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in TaskKind}, init=False
    )

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def increment(self, kind: TaskKind | str) -> None:
        """Count one invocation; unknown kinds are ignored."""

        try:
            key = TaskKind(kind)
        except ValueError:
            return
        with self._lock:
            self._counts[key] += 1

    def snapshot(self) -> UsageSnapshot:
        with self._lock:
            counts = dict(self._counts)
        return UsageSnapshot(
            humanize_count=counts[TaskKind.HUMANIZE],
            detect_count=counts[TaskKind.DETECT],
            plagiarize_count=counts[TaskKind.PLAGIARIZE],
            research_count=counts[TaskKind.RESEARCH],
        )
