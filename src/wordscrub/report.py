"""Plain-text summary report of a run's matched files."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Iterable

from wordscrub.models import FileScanResult

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
TOP_WORDS = 10
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
RULE_WIDTH = 80


def format_size(num_bytes: int) -> str:
    """Binary units, at most two decimals: 0 -> '0 B', 1536 -> '1.5 KB'."""
    value = float(num_bytes)
    order = 0
    while value >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        value /= 1024
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[order]}"


def tally_words(results: Iterable[FileScanResult]) -> dict[str, int]:
    """Cumulative counts, keyed in first-registration order."""
    totals: dict[str, int] = {}
    for result in results:
        for word, count in result.word_counts.items():
            totals[word] = totals.get(word, 0) + count
    return totals


def top_words(totals: dict[str, int], limit: int = TOP_WORDS) -> list[tuple[str, int]]:
    """Highest counts first. sorted() is stable, so ties keep first-registration order."""
    return sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def report_path(output_dir: str, when: datetime | None = None) -> str:
    when = when or datetime.now()
    return os.path.join(output_dir, f"Report_{when:%Y%m%d_%H%M%S}.txt")


class ReportGenerator:
    """Renders results into the summary document.

    Output is deterministic for identical inputs apart from the generation
    timestamp, which callers may pin via generated_at.
    """

    def render(self, results: list[FileScanResult], generated_at: datetime | None = None) -> str:
        generated_at = generated_at or datetime.now()
        lines: list[str] = []

        lines.append("=" * RULE_WIDTH)
        lines.append("FORBIDDEN WORDS SCAN REPORT")
        lines.append("=" * RULE_WIDTH)
        lines.append(f"Generated: {generated_at.strftime(TIME_FORMAT)}")
        lines.append(f"Files found: {len(results)}")
        lines.append("")

        lines.append("SUMMARY:")
        lines.append(f"  Total size of files: {format_size(sum(r.size for r in results))}")
        lines.append(f"  Total replacements: {sum(r.total_replacements for r in results)}")
        lines.append("")

        lines.append(f"TOP {TOP_WORDS} FORBIDDEN WORDS:")
        for i, (word, count) in enumerate(top_words(tally_words(results)), 1):
            lines.append(f"  {i}. {word}: {count} time(s)")
        lines.append("")

        lines.append("FILE DETAILS:")
        lines.append("-" * RULE_WIDTH)
        for i, result in enumerate(results, 1):
            lines.append(f"File #{i}:")
            lines.append(f"  Path: {result.path}")
            lines.append(f"  Size: {format_size(result.size)}")
            lines.append(f"  Scanned: {result.scanned_at.strftime(TIME_FORMAT)}")
            lines.append(f"  Total replacements: {result.total_replacements}")
            lines.append("  Words found:")
            for word, count in top_words(result.word_counts, limit=len(result.word_counts)):
                lines.append(f"    - {word}: {count} time(s)")
            lines.append("")

        lines.append("=" * RULE_WIDTH)
        lines.append("END OF REPORT")
        return "\n".join(lines) + "\n"

    def generate(
        self,
        results: list[FileScanResult],
        output_path: str,
        generated_at: datetime | None = None,
    ) -> str:
        """Write the report as UTF-8 text and return its path."""
        text = self.render(results, generated_at)
        parent = os.path.dirname(output_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        return output_path
