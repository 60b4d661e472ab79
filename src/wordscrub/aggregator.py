"""Run-scoped, thread-safe store of matched-file results and counters."""

from __future__ import annotations

import threading

from wordscrub.models import FileScanResult, RunAggregate


class ResultAggregator:
    """In-memory result store. One instance per run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: list[FileScanResult] = []
        self._total_bytes = 0
        self._total_replacements = 0
        self._word_totals: dict[str, int] = {}  # insertion order = first registration

    def record(self, result: FileScanResult) -> None:
        with self._lock:
            self._results.append(result)
            self._total_bytes += result.size
            self._total_replacements += result.total_replacements
            for word, count in result.word_counts.items():
                self._word_totals[word] = self._word_totals.get(word, 0) + count

    def results(self) -> list[FileScanResult]:
        """Results in completion order."""
        with self._lock:
            return list(self._results)

    def snapshot(self) -> RunAggregate:
        with self._lock:
            return RunAggregate(
                files_matched=len(self._results),
                total_bytes=self._total_bytes,
                total_replacements=self._total_replacements,
                word_totals=tuple(self._word_totals.items()),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
