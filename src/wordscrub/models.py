"""Data models: FileScanResult, RunAggregate, RunControlState, Diagnostic."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class RunControlState(enum.Enum):
    RUNNING = "running"
    PAUSED = "paused"
    CANCELLED = "cancelled"


@dataclass
class FileScanResult:
    path: str
    size: int
    word_counts: dict[str, int] = field(default_factory=dict)  # supplied casing -> count
    total_replacements: int = 0
    scanned_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class RunAggregate:
    """Point-in-time copy of a run's counters. Never mutated after creation."""

    files_matched: int = 0
    total_bytes: int = 0
    total_replacements: int = 0
    word_totals: tuple[tuple[str, int], ...] = ()  # first-registration order

    def word_totals_dict(self) -> dict[str, int]:
        return dict(self.word_totals)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filesMatched": self.files_matched,
            "totalBytes": self.total_bytes,
            "totalReplacements": self.total_replacements,
            "wordTotals": self.word_totals_dict(),
        }


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    path: str | None = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"
