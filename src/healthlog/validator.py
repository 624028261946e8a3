"""Duplicate and range checks for log entries before they are stored."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Union

from .config import ValidationConfig
from .models import LogEntry, PendingLogEntry
from .results import ErrorKind, Failure, Result, Success

logger = logging.getLogger("healthlog")

HistoryEntry = Union[LogEntry, PendingLogEntry]

_BP_VALUE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def parse_leading_int(value: str) -> Optional[int]:
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def parse_leading_float(value: str) -> Optional[float]:
    match = _LEADING_FLOAT.match(value or "")
    return float(match.group(1)) if match else None


def parse_blood_pressure(value: str) -> Optional[tuple]:
    match = _BP_VALUE.match(value or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


class LogEntryValidator:
    """
    Gatekeeper for the log history.

    Both checks are pure functions of their inputs. The duplicate window and
    range bounds come from ValidationConfig and are policy values, not
    clinical thresholds.
    """

    def __init__(self, config: Optional[ValidationConfig] = None) -> None:
        self.config = config or ValidationConfig()

    def check_duplicate(
        self, candidate: PendingLogEntry, history: Iterable[HistoryEntry]
    ) -> bool:
        window = self.config.duplicate_window_seconds
        for existing in history:
            if existing.category != candidate.category:
                continue
            if existing.timestamp.date() != candidate.timestamp.date():
                continue
            delta = abs((existing.timestamp - candidate.timestamp).total_seconds())
            if delta <= window:
                return True
        return False

    def check_range(self, candidate: PendingLogEntry) -> bool:
        cfg = self.config
        category = candidate.category
        if category == "Blood Pressure":
            reading = parse_blood_pressure(candidate.value)
            if reading is None:
                return False
            systolic, diastolic = reading
            return (
                cfg.systolic_min <= systolic <= cfg.systolic_max
                and cfg.diastolic_min <= diastolic <= cfg.diastolic_max
            )
        if category == "Glucose":
            glucose = parse_leading_int(candidate.value)
            return glucose is not None and cfg.glucose_min <= glucose <= cfg.glucose_max
        if category == "Weight":
            weight = parse_leading_float(candidate.value)
            return weight is not None and cfg.weight_min <= weight <= cfg.weight_max
        if category == "Heart Rate":
            rate = parse_leading_int(candidate.value)
            return rate is not None and cfg.heart_rate_min <= rate <= cfg.heart_rate_max
        return True

    def validate(
        self, candidate: PendingLogEntry, history: Iterable[HistoryEntry]
    ) -> Result:
        if self.check_duplicate(candidate, history):
            logger.info(
                "Rejected duplicate %s at %s",
                candidate.category,
                candidate.timestamp.isoformat(),
            )
            return Failure(
                ErrorKind.DUPLICATE_ENTRY,
                f"{candidate.category} already logged within "
                f"{self.config.duplicate_window_seconds}s of this time",
            )
        if not self.check_range(candidate):
            logger.info(
                "Rejected out-of-range %s value %r", candidate.category, candidate.value
            )
            return Failure(
                ErrorKind.OUT_OF_RANGE,
                f"{candidate.category} value {candidate.value!r} is outside the allowed range",
            )
        return Success(candidate)
