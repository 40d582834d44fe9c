from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Literal
from uuid import UUID, uuid4


DrillType = Literal["tenpai_drill", "discard_drill"]


@dataclass
class StoredDrill:
    id: UUID
    type: DrillType
    created_at: datetime
    expires_at: datetime
    data: dict

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass
class LeaderboardEntry:
    mode: str
    score: int
    time_seconds: int
    difficulty: str = "unknown"
    config: dict = field(default_factory=dict)
    id: UUID = field(default_factory=uuid4)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class LeaderboardStats:
    total_games: int
    average_score: float
    best_score: int
    average_time: float


class DrillRepository:
    """Issued drills kept until answered or expired.

    A drill is single use: ``pop`` hands it out once and forgets it, so the
    revealed answer can never be submitted against the same id again.
    """

    def __init__(self, ttl_hours: int = 24) -> None:
        self._ttl = timedelta(hours=ttl_hours)
        self._drills: dict[UUID, StoredDrill] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            self._drop_expired()
            return len(self._drills)

    def _drop_expired(self) -> None:
        now = datetime.now(timezone.utc)
        for drill_id in [d.id for d in self._drills.values() if d.is_expired(now)]:
            del self._drills[drill_id]

    def create(self, drill_type: DrillType, data: dict) -> StoredDrill:
        issued_at = datetime.now(timezone.utc)
        drill = StoredDrill(
            id=uuid4(),
            type=drill_type,
            created_at=issued_at,
            expires_at=issued_at + self._ttl,
            data=data,
        )
        with self._lock:
            self._drop_expired()
            self._drills[drill.id] = drill
        return drill

    def get(self, drill_id: UUID) -> StoredDrill | None:
        with self._lock:
            self._drop_expired()
            return self._drills.get(drill_id)

    def pop(self, drill_id: UUID) -> StoredDrill | None:
        with self._lock:
            self._drop_expired()
            return self._drills.pop(drill_id, None)


class Leaderboard:
    """Best results per training mode: highest score first, faster time breaking ties."""

    def __init__(self, limit: int = 100) -> None:
        self._limit = limit
        self._entries: list[LeaderboardEntry] = []
        self._lock = Lock()

    def add(
        self,
        mode: str,
        score: int,
        time_seconds: int,
        difficulty: str = "unknown",
        config: dict | None = None,
    ) -> LeaderboardEntry:
        entry = LeaderboardEntry(
            mode=mode,
            score=score,
            time_seconds=time_seconds,
            difficulty=difficulty,
            config=config or {},
        )
        with self._lock:
            self._entries.append(entry)
            self._entries.sort(key=lambda e: (-e.score, e.time_seconds))
            del self._entries[self._limit :]
        return entry

    def entries(self, mode: str | None = None, limit: int | None = None) -> list[LeaderboardEntry]:
        with self._lock:
            items = [e for e in self._entries if mode is None or e.mode == mode]
        return items[:limit] if limit else items

    def best(self, mode: str) -> LeaderboardEntry | None:
        items = self.entries(mode, limit=1)
        return items[0] if items else None

    def stats(self, mode: str | None = None) -> LeaderboardStats:
        items = self.entries(mode)
        if not items:
            return LeaderboardStats(total_games=0, average_score=0.0, best_score=0, average_time=0.0)
        return LeaderboardStats(
            total_games=len(items),
            average_score=sum(e.score for e in items) / len(items),
            best_score=max(e.score for e in items),
            average_time=sum(e.time_seconds for e in items) / len(items),
        )

    def clear(self, mode: str | None = None) -> None:
        with self._lock:
            self._entries = [e for e in self._entries if mode is not None and e.mode != mode]
