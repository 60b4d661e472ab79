"""Per-file inspection: count forbidden words, redact, write artifacts."""

from __future__ import annotations

import logging
import os
import re
import shutil
from datetime import datetime
from typing import Callable

from wordscrub.config import MASK_TOKEN, ScanRequest, decode_text
from wordscrub.errors import E_ACCESS_DENIED, E_IO_ERROR, E_WRITE_FAILED
from wordscrub.models import Diagnostic, FileScanResult
from wordscrub.win_paths import sanitize_file_name, to_extended_path

logger = logging.getLogger(__name__)

ORIGINAL_PREFIX = "original_"
MODIFIED_PREFIX = "modified_"


def word_pattern(word: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive rule: a match is never part of a larger token."""
    return re.compile(r"\b" + re.escape(word) + r"\b", re.IGNORECASE)


def redact(content: str, words: tuple[str, ...]) -> tuple[str, dict[str, int]]:
    """Return the redacted text and the per-word counts of matched words.

    Counts come from the original content; replacement runs word by word on
    the progressively redacted copy.
    """
    counts: dict[str, int] = {}
    redacted = content
    for word in words:
        if not word.strip():
            continue
        pattern = word_pattern(word)
        n = len(pattern.findall(content))
        if n == 0:
            continue
        counts[word] = n
        redacted = pattern.sub(MASK_TOKEN, redacted)
    return redacted, counts


def artifact_paths(source_path: str, output_dir: str) -> tuple[str, str]:
    """Return (original_copy_path, modified_copy_path) for a source file."""
    safe = sanitize_file_name(os.path.basename(source_path))
    return (
        os.path.join(output_dir, ORIGINAL_PREFIX + safe),
        os.path.join(output_dir, MODIFIED_PREFIX + safe),
    )


class ContentScanner:
    """Stateless scanner. Problems are reported through on_diagnostic, never raised."""

    def __init__(self, on_diagnostic: Callable[[Diagnostic], None] | None = None) -> None:
        self._on_diagnostic = on_diagnostic

    def _report(self, code: str, message: str, path: str) -> None:
        diag = Diagnostic(code=code, message=message, path=path)
        logger.warning("%s", diag)
        if self._on_diagnostic is not None:
            self._on_diagnostic(diag)

    def scan(self, path: str, request: ScanRequest) -> FileScanResult | None:
        # 1. Size at scan time
        try:
            size = os.stat(to_extended_path(path)).st_size
        except FileNotFoundError:
            return None
        except PermissionError as e:
            self._report(E_ACCESS_DENIED, f"Access denied while reading {path}: {e}", path)
            return None
        except OSError as e:
            self._report(E_IO_ERROR, f"Cannot stat {path}: {e}", path)
            return None

        # 2. Read and decode
        try:
            with open(to_extended_path(path), "rb") as f:
                data = f.read()
        except FileNotFoundError:
            return None
        except PermissionError as e:
            self._report(E_ACCESS_DENIED, f"Access denied while reading {path}: {e}", path)
            return None
        except OSError as e:
            self._report(E_IO_ERROR, f"Error reading {path}: {e}", path)
            return None

        decoded = decode_text(data)
        if decoded is None:
            logger.debug("Skipping undecodable file %s", path)
            return None
        content, encoding = decoded

        # 3-5. Count and redact
        redacted, counts = redact(content, request.words)
        if not counts:
            return None

        # 6. Artifacts
        original_path, modified_path = artifact_paths(path, request.output_dir)
        try:
            os.makedirs(request.output_dir, exist_ok=True)
            shutil.copyfile(to_extended_path(path), to_extended_path(original_path))
            with open(to_extended_path(modified_path), "wb") as f:
                f.write(redacted.encode(encoding))
        except OSError as e:
            self._report(E_WRITE_FAILED, f"Cannot write artifacts for {path}: {e}", path)
            return None

        # 7. Result
        return FileScanResult(
            path=path,
            size=size,
            word_counts=counts,
            total_replacements=sum(counts.values()),
            scanned_at=datetime.now(),
        )
