"""Field definitions and utterance-to-value extraction rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .models import ExtractedValue, FieldKind

Extractor = Callable[[str, Optional[str]], Optional[ExtractedValue]]

_BP_PATTERN = re.compile(r"(\d+)\s*(?:over|by|/)\s*(\d+)", re.IGNORECASE)
_INT_PATTERN = re.compile(r"(\d+)")
_WEIGHT_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:pounds|lbs|kilograms|kg)", re.IGNORECASE
)
_KG_MARKERS = ("kg", "kilogram")
_PRONOUN_PREFIX = re.compile(
    r"^(?:I['’]m|I am|I['’]ve|I have|My|I)\b\s*", re.IGNORECASE
)


def extract_blood_pressure(
    utterance: str, default_unit: Optional[str] = None
) -> Optional[ExtractedValue]:
    match = _BP_PATTERN.search(utterance)
    if not match:
        return None
    return ExtractedValue(f"{match.group(1)}/{match.group(2)}", default_unit)


def extract_first_integer(
    utterance: str, default_unit: Optional[str] = None
) -> Optional[ExtractedValue]:
    match = _INT_PATTERN.search(utterance)
    if not match:
        return None
    return ExtractedValue(match.group(1), default_unit)


def extract_weight(
    utterance: str, default_unit: Optional[str] = None
) -> Optional[ExtractedValue]:
    match = _WEIGHT_PATTERN.search(utterance)
    if not match:
        return None
    lowered = utterance.lower()
    unit = "kg" if any(marker in lowered for marker in _KG_MARKERS) else "lbs"
    return ExtractedValue(match.group(1), unit)


def extract_phrase(
    utterance: str, default_unit: Optional[str] = None
) -> Optional[ExtractedValue]:
    text = _PRONOUN_PREFIX.sub("", utterance.strip(), count=1).strip()
    if not text:
        return None
    return ExtractedValue(text, default_unit)


@dataclass(frozen=True)
class FieldSpec:
    category: str
    kind: FieldKind
    extractor: Extractor
    unit: Optional[str] = None
    examples: Tuple[str, ...] = ()

    def extract(self, utterance: str) -> Optional[ExtractedValue]:
        if not utterance or not utterance.strip():
            return None
        return self.extractor(utterance, self.unit)


# Per-category strategies. Callers may override one category via
# build_fields(overrides={...}) without touching the others.
EXTRACTORS: Dict[str, Extractor] = {
    "Blood Pressure": extract_blood_pressure,
    "Glucose": extract_first_integer,
    "Weight": extract_weight,
    "Heart Rate": extract_first_integer,
    "Symptoms": extract_phrase,
    "Activity": extract_phrase,
    "Diet": extract_phrase,
    "Medication": extract_phrase,
}

_VITAL_LAYOUT = (
    (
        "Blood Pressure",
        "mmHg",
        ("My blood pressure is 130 over 85", "BP reading 120 by 80"),
    ),
    ("Glucose", "mg/dL", ("Glucose level is 95", "Blood sugar 110 before breakfast")),
    ("Weight", "lbs", ("I weigh 155 pounds", "My weight is 70 kilograms")),
    ("Heart Rate", "bpm", ("Heart rate is 72", "Pulse 85 beats per minute")),
)

_NON_VITAL_LAYOUT = (
    (
        "Symptoms",
        None,
        ("I'm feeling a bit dizzy", "Experiencing mild headache", "Feeling great today"),
    ),
    (
        "Activity",
        None,
        ("Walked for 30 minutes", "Did yoga for 45 minutes", "Went swimming"),
    ),
    (
        "Diet",
        None,
        ("Had oatmeal for breakfast", "Ate a salad for lunch", "Drinking more water"),
    ),
    (
        "Medication",
        None,
        (
            "Took my morning medication",
            "Metformin with breakfast",
            "Skipped evening dose",
        ),
    ),
)


def build_fields(
    kind: FieldKind, overrides: Optional[Dict[str, Extractor]] = None
) -> Tuple[FieldSpec, ...]:
    layout = _VITAL_LAYOUT if kind == FieldKind.VITAL else _NON_VITAL_LAYOUT
    strategies = dict(EXTRACTORS)
    if overrides:
        strategies.update(overrides)
    return tuple(
        FieldSpec(
            category=category,
            kind=kind,
            extractor=strategies[category],
            unit=unit,
            examples=examples,
        )
        for category, unit, examples in layout
    )


VITAL_FIELDS: Tuple[FieldSpec, ...] = build_fields(FieldKind.VITAL)
NON_VITAL_FIELDS: Tuple[FieldSpec, ...] = build_fields(FieldKind.NON_VITAL)


def fields_for(kind: FieldKind) -> Tuple[FieldSpec, ...]:
    if kind == FieldKind.VITAL:
        return VITAL_FIELDS
    if kind == FieldKind.NON_VITAL:
        return NON_VITAL_FIELDS
    raise ValueError(f"Unknown field kind: {kind!r}")


def find_field(category: str) -> Optional[FieldSpec]:
    name = (category or "").strip().lower()
    for spec in VITAL_FIELDS + NON_VITAL_FIELDS:
        if spec.category.lower() == name:
            return spec
    return None
