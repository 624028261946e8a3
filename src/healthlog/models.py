"""Data models for health log capture."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class FieldKind(str, Enum):
    VITAL = "vital"
    NON_VITAL = "non-vital"


@dataclass(frozen=True)
class ExtractedValue:
    value: str
    unit: Optional[str] = None


@dataclass
class StepRecord:
    field_index: int
    category: str
    raw_utterance: Optional[str] = None
    value: Optional[str] = None
    unit: Optional[str] = None
    skipped: bool = False
    included: bool = False

    @property
    def has_value(self) -> bool:
        return bool(self.value)


def local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@dataclass(frozen=True)
class PendingLogEntry:
    type: str
    category: str
    value: str
    timestamp: datetime
    unit: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not (self.value or "").strip():
            raise ValueError(f"{self.category} entry needs a non-empty value.")
        object.__setattr__(self, "timestamp", local_naive(self.timestamp))

    @property
    def is_vital(self) -> bool:
        return self.type == FieldKind.VITAL.value


@dataclass(frozen=True)
class LogEntry:
    entry_id: str
    type: str
    category: str
    value: str
    timestamp: datetime
    unit: Optional[str] = None
    notes: Optional[str] = None
    is_backdated: bool = False

    @property
    def is_vital(self) -> bool:
        return self.type == FieldKind.VITAL.value

    @classmethod
    def from_pending(
        cls, entry_id: str, pending: PendingLogEntry, is_backdated: bool
    ) -> "LogEntry":
        return cls(
            entry_id=entry_id,
            type=pending.type,
            category=pending.category,
            value=pending.value,
            timestamp=pending.timestamp,
            unit=pending.unit,
            notes=pending.notes,
            is_backdated=is_backdated,
        )
