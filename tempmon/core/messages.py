# tempmon/core/messages.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tempmon.model.reading import Reading


@dataclass(frozen=True, slots=True)
class NewData:
    """A decoded reading (raw from the scanner, or accepted by the debounce stage)."""
    reading: Reading


@dataclass(frozen=True, slots=True)
class StatusUpdate:
    """Human-readable scan phase text; replaces any previous status."""
    text: str


@dataclass(frozen=True, slots=True)
class PersistenceResult:
    """Outcome of the daily-log write for the reading that follows it."""
    ok: bool


Message = Union[NewData, StatusUpdate, PersistenceResult]
