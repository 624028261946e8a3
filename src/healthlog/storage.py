"""In-memory log history with validation on append."""

from __future__ import annotations

import logging
import os
import uuid
from collections import OrderedDict
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional

from .models import LogEntry, PendingLogEntry
from .results import Result, Success
from .validator import LogEntryValidator

logger = logging.getLogger("healthlog")


def timestamp_slug(dt: datetime | None = None) -> str:
    now = dt or datetime.now()
    return now.strftime("%Y-%m-%d")


def new_entry_id() -> str:
    return uuid.uuid4().hex[:12]


def ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


class LogStore:
    """
    Append-only log history (apart from explicit deletes), newest first.

    The store is the single writer: add_entry runs the duplicate check and
    the append together, so callers must not share one store across threads.
    """

    def __init__(
        self,
        entries: Optional[Iterable[LogEntry]] = None,
        validator: Optional[LogEntryValidator] = None,
        now: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = new_entry_id,
    ) -> None:
        self.validator = validator or LogEntryValidator()
        self._now = now
        self._id_factory = id_factory
        self._entries: List[LogEntry] = self._sorted(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    @staticmethod
    def _sorted(entries: Iterable[LogEntry]) -> List[LogEntry]:
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def is_backdated(self, timestamp: datetime) -> bool:
        return timestamp.date() != self._now().date()

    def add_entry(self, candidate: PendingLogEntry) -> Result:
        verdict = self.validator.validate(candidate, self._entries)
        if not verdict.ok:
            return verdict
        entry = LogEntry.from_pending(
            self._id_factory(), candidate, self.is_backdated(candidate.timestamp)
        )
        # Swap only after the sort succeeds so a failure leaves history intact.
        self._entries = self._sorted(self._entries + [entry])
        logger.info(
            "Logged %s %s (%s)%s",
            entry.category,
            entry.value,
            entry.entry_id,
            " backdated" if entry.is_backdated else "",
        )
        return Success(entry)

    def add_many(self, candidates: Iterable[PendingLogEntry]) -> List[Result]:
        return [self.add_entry(candidate) for candidate in candidates]

    def get(self, entry_id: str) -> Optional[LogEntry]:
        for entry in self._entries:
            if entry.entry_id == entry_id:
                return entry
        return None

    def delete_entry(self, entry_id: str) -> LogEntry:
        entry = self.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)
        self._entries.remove(entry)
        logger.info("Deleted entry %s", entry_id)
        return entry

    def entries_within(self, days: int) -> List[LogEntry]:
        now = self._now()
        return [e for e in self._entries if (now - e.timestamp).days <= days]


def group_by_day(entries: Iterable[LogEntry]) -> "OrderedDict[date, List[LogEntry]]":
    groups: Dict[date, List[LogEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.timestamp.date(), []).append(entry)
    ordered: "OrderedDict[date, List[LogEntry]]" = OrderedDict()
    for day in sorted(groups, reverse=True):
        ordered[day] = sorted(groups[day], key=lambda e: e.timestamp, reverse=True)
    return ordered


def summarize(entries: Iterable[LogEntry]) -> Dict[str, int]:
    items = list(entries)
    return {
        "total": len(items),
        "vitals": sum(1 for e in items if e.is_vital),
        "backdated": sum(1 for e in items if e.is_backdated),
    }
