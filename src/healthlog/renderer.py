"""Markdown history rendering."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from .models import LogEntry
from .storage import group_by_day, summarize
from .validator import parse_blood_pressure, parse_leading_int


def _yaml_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f"\"{escaped}\""


def _clean_text(value: str) -> str:
    return " ".join(value.split())


def vital_status(category: str, value: str) -> str:
    if category == "Blood Pressure":
        reading = parse_blood_pressure(value)
        if reading:
            systolic, diastolic = reading
            if systolic < 120 and diastolic < 80:
                return "normal"
            if systolic < 140 and diastolic < 90:
                return "elevated"
            return "high"
    elif category == "Glucose":
        glucose = parse_leading_int(value)
        if glucose is not None:
            if 70 <= glucose <= 99:
                return "normal"
            if glucose <= 125:
                return "elevated"
            return "high"
    elif category == "Heart Rate":
        rate = parse_leading_int(value)
        if rate is not None:
            return "normal" if 60 <= rate <= 100 else "outside range"
    return "recorded"


def day_label(day: date, today: date) -> str:
    delta = (today - day).days
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Yesterday"
    if 0 < delta < 7:
        return day.strftime("%A")
    return day.strftime("%b %d")


def _entry_line(entry: LogEntry) -> str:
    value = _clean_text(entry.value)
    if entry.unit:
        value = f"{value} {entry.unit}"
    line = f"- {entry.timestamp.strftime('%H:%M')} {entry.category}: {value}"
    if entry.is_vital:
        line += f" [{vital_status(entry.category, entry.value)}]"
    if entry.is_backdated:
        line += " (backdated)"
    if entry.notes:
        line += f" - {_clean_text(entry.notes)}"
    line += f" `{entry.entry_id}`"
    return line


def render_history(
    entries: List[LogEntry],
    generated_on: date,
    period_days: Optional[int] = None,
    title: str = "Health Log",
) -> str:
    stats = summarize(entries)
    lines: List[str] = []
    lines.append("---")
    lines.append("schema: 1")
    lines.append(f"title: {_yaml_quote(title)}")
    lines.append(f"generated: {_yaml_quote(generated_on.isoformat())}")
    if period_days is not None:
        lines.append(f"period_days: {period_days}")
    lines.append(f"total_entries: {stats['total']}")
    lines.append(f"vital_entries: {stats['vitals']}")
    lines.append(f"backdated_entries: {stats['backdated']}")
    lines.append("---")
    lines.append("")
    lines.append(f"# {_clean_text(title)}")
    lines.append("")
    if not entries:
        lines.append("No entries found.")
        lines.append("")
        return "\n".join(lines)

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- Total entries: {stats['total']}")
    lines.append(f"- Vitals: {stats['vitals']}")
    lines.append(f"- Backdated: {stats['backdated']}")
    lines.append("")
    for day, day_entries in group_by_day(entries).items():
        label = day_label(day, generated_on)
        lines.append(f"## {label} ({day.isoformat()})")
        lines.append("")
        lines.extend(_entry_line(entry) for entry in day_entries)
        lines.append("")
    return "\n".join(lines)
