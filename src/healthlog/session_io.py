"""Log history persistence."""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from datetime import datetime
from typing import List

from .models import LogEntry, local_naive
from .storage import ensure_parent_dir


def entry_to_dict(entry: LogEntry) -> dict:
    payload = asdict(entry)
    payload["timestamp"] = entry.timestamp.isoformat()
    return payload


def entry_from_dict(data: dict) -> LogEntry:
    return LogEntry(
        entry_id=str(data["entry_id"]),
        type=data["type"],
        category=data["category"],
        value=data["value"],
        timestamp=local_naive(datetime.fromisoformat(data["timestamp"])),
        unit=data.get("unit"),
        notes=data.get("notes"),
        is_backdated=bool(data.get("is_backdated", False)),
    )


def save_log(path: str, entries: List[LogEntry]) -> None:
    ensure_parent_dir(path)
    payload = {"schema": 1, "entries": [entry_to_dict(e) for e in entries]}
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def load_log(path: str) -> List[LogEntry]:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return [entry_from_dict(item) for item in payload.get("entries", [])]
