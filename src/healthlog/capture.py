"""
Guided multi-step capture session.

Walks a user through a fixed, ordered sequence of fields (vitals or
non-vitals), captures or skips each one, then lets the user pick which values
to commit.

Phases:
    CHOOSING_CATEGORY -> COLLECTING -> REVIEWING -> CLOSED

    go_back() only ever returns to the immediately prior position:
    COLLECTING at index 0 -> CHOOSING_CATEGORY, REVIEWING -> COLLECTING at the
    last field.

Every operation is phase-gated. A call in the wrong phase returns
Failure(INVALID_STATE) and leaves the session untouched, so the review summary
can only ever reflect steps that were actually walked.

A session is single use. Once committed it is CLOSED and rejects everything;
the caller builds a new session for the next logging attempt.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .extraction import FieldSpec, fields_for
from .models import FieldKind, PendingLogEntry, StepRecord
from .results import ErrorKind, Failure, Result, Success

logger = logging.getLogger("healthlog")

DEFAULT_SESSION_NOTES = "Voice input - Multi-step logging"


class SessionPhase(str, Enum):
    CHOOSING_CATEGORY = "choosing_category"
    COLLECTING = "collecting"
    REVIEWING = "reviewing"
    CLOSED = "closed"


def _invalid(operation: str, phase: SessionPhase) -> Failure:
    return Failure(
        ErrorKind.INVALID_STATE, f"{operation}() not allowed in phase {phase.value}"
    )


class GuidedCaptureSession:
    """
    One run of the guided capture workflow.

    Args:
        selected_date: Timestamp stamped on every committed entry. Chosen by
            the caller before the session starts; may be in the past.
        notes: Notes attached to every committed entry.
    """

    def __init__(
        self,
        selected_date: datetime,
        notes: Optional[str] = DEFAULT_SESSION_NOTES,
    ) -> None:
        self._selected_date = selected_date
        self._notes = notes
        self.phase = SessionPhase.CHOOSING_CATEGORY
        self.active_sequence: Optional[FieldKind] = None
        self.current_step_index = 0
        self.steps: List[StepRecord] = []
        self._fields: Tuple[FieldSpec, ...] = ()

    @property
    def selected_date(self) -> datetime:
        return self._selected_date

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @property
    def fields(self) -> Tuple[FieldSpec, ...]:
        return self._fields

    @property
    def total_steps(self) -> int:
        return len(self._fields)

    @property
    def current_field(self) -> Optional[FieldSpec]:
        if self.phase != SessionPhase.COLLECTING:
            return None
        return self._fields[self.current_step_index]

    @property
    def current_step(self) -> Optional[StepRecord]:
        if self.phase != SessionPhase.COLLECTING:
            return None
        return self.steps[self.current_step_index]

    @property
    def progress(self) -> float:
        """Percent of fields passed so far (0 on the first field)."""
        if not self._fields:
            return 0.0
        if self.phase in (SessionPhase.REVIEWING, SessionPhase.CLOSED):
            return 100.0
        return self.current_step_index / len(self._fields) * 100

    @property
    def included_count(self) -> int:
        return sum(1 for step in self.steps if step.included)

    def review_items(self) -> List[StepRecord]:
        return [step for step in self.steps if step.has_value or step.skipped]

    # Transitions

    def choose_category(self, kind: FieldKind) -> Result:
        if self.phase != SessionPhase.CHOOSING_CATEGORY:
            return _invalid("choose_category", self.phase)
        kind = FieldKind(kind)
        self._fields = fields_for(kind)
        self.active_sequence = kind
        self.steps = [
            StepRecord(field_index=index, category=spec.category)
            for index, spec in enumerate(self._fields)
        ]
        self.current_step_index = 0
        self.phase = SessionPhase.COLLECTING
        logger.debug("Capture session started: %s (%d fields)", kind.value, len(self.steps))
        return Success()

    def submit_utterance(self, text: str) -> Result:
        if self.phase != SessionPhase.COLLECTING:
            return _invalid("submit_utterance", self.phase)
        spec = self._fields[self.current_step_index]
        extracted = spec.extract(text or "")
        if extracted is None:
            logger.debug("No %s value found in %r", spec.category, text)
            return Failure(
                ErrorKind.EXTRACTION_FAILED,
                f"could not extract {spec.category} from utterance",
            )
        step = self.steps[self.current_step_index]
        step.raw_utterance = text
        step.value = extracted.value
        step.unit = extracted.unit
        step.skipped = False
        step.included = True
        return Success(extracted)

    def skip(self) -> Result:
        if self.phase != SessionPhase.COLLECTING:
            return _invalid("skip", self.phase)
        step = self.steps[self.current_step_index]
        step.skipped = True
        step.included = False
        step.value = None
        step.unit = None
        step.raw_utterance = None
        return self.advance()

    def advance(self) -> Result:
        if self.phase != SessionPhase.COLLECTING:
            return _invalid("advance", self.phase)
        step = self.steps[self.current_step_index]
        if not (step.has_value or step.skipped):
            return Failure(
                ErrorKind.INVALID_STATE,
                f"{step.category} has neither a value nor a skip",
            )
        if self.current_step_index == len(self.steps) - 1:
            self.phase = SessionPhase.REVIEWING
        else:
            self.current_step_index += 1
        return Success()

    def go_back(self) -> Result:
        if self.phase == SessionPhase.COLLECTING:
            if self.current_step_index > 0:
                self.current_step_index -= 1
                return Success()
            self.phase = SessionPhase.CHOOSING_CATEGORY
            self.active_sequence = None
            self.steps = []
            self._fields = ()
            return Success()
        if self.phase == SessionPhase.REVIEWING:
            self.phase = SessionPhase.COLLECTING
            self.current_step_index = len(self.steps) - 1
            return Success()
        return _invalid("go_back", self.phase)

    def toggle_include(self, field_index: int, include: bool) -> Result:
        if self.phase != SessionPhase.REVIEWING:
            return _invalid("toggle_include", self.phase)
        if not 0 <= field_index < len(self.steps):
            return Failure(ErrorKind.INVALID_STATE, f"no step at index {field_index}")
        step = self.steps[field_index]
        if not step.has_value:
            return Failure(
                ErrorKind.INVALID_STATE, f"{step.category} has no value to include"
            )
        step.included = bool(include)
        return Success()

    def commit(self) -> Result:
        if self.phase != SessionPhase.REVIEWING:
            return _invalid("commit", self.phase)
        chosen = [step for step in self.steps if step.included and step.has_value]
        if not chosen:
            return Failure(ErrorKind.NOTHING_TO_COMMIT, "no steps are included")
        entries = tuple(
            PendingLogEntry(
                type=self.active_sequence.value,
                category=step.category,
                value=step.value,
                unit=step.unit,
                timestamp=self._selected_date,
                notes=self._notes,
            )
            for step in chosen
        )
        self.phase = SessionPhase.CLOSED
        logger.info(
            "Capture session committed %d of %d fields", len(entries), len(self.steps)
        )
        return Success(entries)

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "active_sequence": self.active_sequence.value if self.active_sequence else None,
            "current_step_index": self.current_step_index,
            "selected_date": self._selected_date.isoformat(),
            "notes": self._notes,
            "steps": [
                {
                    "field_index": step.field_index,
                    "category": step.category,
                    "raw_utterance": step.raw_utterance,
                    "value": step.value,
                    "unit": step.unit,
                    "skipped": step.skipped,
                    "included": step.included,
                }
                for step in self.steps
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuidedCaptureSession":
        session = cls(
            selected_date=datetime.fromisoformat(data["selected_date"]),
            notes=data.get("notes"),
        )
        session.phase = SessionPhase(data.get("phase", SessionPhase.CHOOSING_CATEGORY.value))
        sequence = data.get("active_sequence")
        if sequence:
            session.active_sequence = FieldKind(sequence)
            session._fields = fields_for(session.active_sequence)
        session.current_step_index = int(data.get("current_step_index", 0))
        session.steps = [StepRecord(**step) for step in data.get("steps", [])]
        if len(session.steps) != len(session._fields):
            raise ValueError("Session snapshot steps do not match its field sequence.")
        if session.phase == SessionPhase.CHOOSING_CATEGORY and session.steps:
            raise ValueError("Session snapshot has steps before a category was chosen.")
        if session.phase != SessionPhase.CHOOSING_CATEGORY and not session.steps:
            raise ValueError(f"Session snapshot in phase {session.phase.value} has no steps.")
        if session.steps and not 0 <= session.current_step_index < len(session.steps):
            raise ValueError(
                f"Session snapshot step index {session.current_step_index} is out of range."
            )
        return session
