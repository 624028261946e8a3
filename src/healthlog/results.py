"""
Result values returned by the capture session, validator and log store.

Recoverable conditions are returned, not raised, so a caller working through a
batch (for example the entries from one session commit) can keep going after a
single rejection. A Failure never leaves the producer in a changed state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ErrorKind(str, Enum):
    INVALID_STATE = "invalid_state"
    EXTRACTION_FAILED = "extraction_failed"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    DUPLICATE_ENTRY = "duplicate_entry"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class Success:
    """
    Operation applied.

    Attributes:
        value: Operation payload (extracted value, committed entries, stored
            entry), or None when the operation only changes state.
    """
    value: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Operation rejected without side effects.

    Attributes:
        kind: Machine-readable reason, see ErrorKind.
        reason: Developer-facing explanation. Not meant for end users.
    """
    kind: ErrorKind
    reason: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success, Failure]
