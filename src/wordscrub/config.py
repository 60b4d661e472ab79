"""Configuration: run request, extension presets, env defaults, words file."""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass
from typing import Iterable

from wordscrub.errors import (
    ConfigError,
    E_CONFIG_CONCURRENCY,
    E_CONFIG_NO_EXTENSIONS,
    E_CONFIG_NO_OUTPUT,
    E_CONFIG_NO_WORDS,
    E_CONFIG_ROOT,
    E_CONFIG_TIMEOUT,
    E_CONFIG_WORDS_FILE,
)

MASK_TOKEN = "*******"
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_DRAIN_TIMEOUT = 30.0  # seconds
DEFAULT_EXTENSIONS: tuple[str, ...] = (".txt",)
FALLBACK_ENCODING = "cp1251"

# Fixed extension groups offered to front ends. "all" is a hand-picked list,
# not a content-sniffing decision.
EXTENSION_PRESETS: dict[str, tuple[str, ...]] = {
    "txt": (".txt",),
    "doc": (".doc", ".docx"),
    "pdf": (".pdf",),
    "html": (".html", ".htm"),
    "all": (
        ".txt", ".doc", ".docx", ".pdf", ".html", ".htm",
        ".rtf", ".odt", ".xml", ".json", ".csv", ".log",
        ".md", ".ini", ".cfg", ".conf", ".properties",
    ),
}


@dataclass(frozen=True)
class ScanRequest:
    words: tuple[str, ...]
    output_dir: str
    extensions: frozenset[str]
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    roots: tuple[str, ...] = ()  # empty: every ready fixed/removable drive
    drain_timeout: float = DEFAULT_DRAIN_TIMEOUT


def normalize_extension(ext: str) -> str:
    """'TXT' -> '.txt', ' .Log ' -> '.log'."""
    ext = ext.strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else "." + ext


def normalize_extensions(raw: str | Iterable[str]) -> frozenset[str]:
    """Normalize a comma-separated string or an iterable of extensions."""
    items = raw.split(",") if isinstance(raw, str) else raw
    return frozenset(e for e in (normalize_extension(i) for i in items) if e)


def expand_presets(names: Iterable[str]) -> frozenset[str]:
    exts: set[str] = set()
    for name in names:
        key = name.strip().lower()
        if key not in EXTENSION_PRESETS:
            raise ConfigError(
                E_CONFIG_NO_EXTENSIONS,
                f"Unknown extension preset: {name}",
                {"known": sorted(EXTENSION_PRESETS)},
            )
        exts.update(EXTENSION_PRESETS[key])
    return frozenset(exts)


def normalize_words(words: Iterable[str]) -> tuple[str, ...]:
    """Strip, drop blanks and deduplicate case-insensitively.

    Matching ignores case, so "Secret" and "secret" are one word; the first
    supplied casing is the one that shows up in results. Keys use lower(),
    the same equivalence re.IGNORECASE applies, so "straße" and "STRASSE"
    stay two words.
    """
    seen: set[str] = set()
    out: list[str] = []
    for word in words:
        word = word.strip()
        if not word:
            continue
        key = word.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(word)
    return tuple(out)


def decode_text(data: bytes) -> tuple[str, str] | None:
    """Decode as UTF-8, then once as Windows-1251. Return (text, encoding) or None.

    A UTF-8 BOM selects utf-8-sig so the BOM survives the round trip into
    the redacted copy.
    """
    primary = "utf-8-sig" if data.startswith(codecs.BOM_UTF8) else "utf-8"
    for encoding in (primary, FALLBACK_ENCODING):
        try:
            return data.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    return None


def load_words_file(path: str) -> tuple[str, ...]:
    """Read one word per line, decoded the same way scanned files are.

    Fail closed if the file is missing, unreadable or undecodable.
    """
    if not os.path.isfile(path):
        raise ConfigError(
            E_CONFIG_WORDS_FILE,
            f"Forbidden words file not found: {path}",
            {"path": path},
        )
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigError(
            E_CONFIG_WORDS_FILE,
            f"Cannot read forbidden words file: {path}",
            {"path": path, "exception": str(e)},
        ) from e
    decoded = decode_text(data)
    if decoded is None:
        raise ConfigError(
            E_CONFIG_WORDS_FILE,
            f"Forbidden words file is neither UTF-8 nor Windows-1251: {path}",
            {"path": path},
        )
    return normalize_words(decoded[0].splitlines())


def load_env_defaults() -> dict[str, float | int]:
    """Return concurrency and drain timeout, honoring WORDSCRUB_* overrides.

    WORDSCRUB_MAX_CONCURRENCY=8
    WORDSCRUB_DRAIN_TIMEOUT=10.5

    Fail closed on values that do not parse.
    """
    defaults: dict[str, float | int] = {
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "drain_timeout": DEFAULT_DRAIN_TIMEOUT,
    }

    raw = os.environ.get("WORDSCRUB_MAX_CONCURRENCY", "").strip()
    if raw:
        try:
            defaults["max_concurrency"] = int(raw)
        except ValueError as e:
            raise ConfigError(
                E_CONFIG_CONCURRENCY,
                f"WORDSCRUB_MAX_CONCURRENCY must be an integer, got {raw!r}.",
            ) from e

    raw = os.environ.get("WORDSCRUB_DRAIN_TIMEOUT", "").strip()
    if raw:
        try:
            defaults["drain_timeout"] = float(raw)
        except ValueError as e:
            raise ConfigError(
                E_CONFIG_TIMEOUT,
                f"WORDSCRUB_DRAIN_TIMEOUT must be a number of seconds, got {raw!r}.",
            ) from e

    return defaults


def build_request(
    words: Iterable[str],
    output_dir: str,
    extensions: str | Iterable[str] = DEFAULT_EXTENSIONS,
    max_concurrency: int | None = None,
    roots: Iterable[str] = (),
    drain_timeout: float | None = None,
) -> ScanRequest:
    """Validate inputs and build an immutable ScanRequest.

    Raises ConfigError before anything touches the filesystem beyond
    checking that roots exist.
    """
    env = load_env_defaults()
    if max_concurrency is None:
        max_concurrency = int(env["max_concurrency"])
    if drain_timeout is None:
        drain_timeout = float(env["drain_timeout"])

    normalized_words = normalize_words(words)
    if not normalized_words:
        raise ConfigError(E_CONFIG_NO_WORDS, "The forbidden word list is empty.")

    if not output_dir or not output_dir.strip():
        raise ConfigError(E_CONFIG_NO_OUTPUT, "An output directory is required.")

    exts = normalize_extensions(extensions)
    if not exts:
        raise ConfigError(E_CONFIG_NO_EXTENSIONS, "Select at least one file extension.")

    if max_concurrency < 1:
        raise ConfigError(
            E_CONFIG_CONCURRENCY,
            "Maximum concurrency must be a positive integer.",
            {"maxConcurrency": max_concurrency},
        )

    if drain_timeout <= 0:
        raise ConfigError(
            E_CONFIG_TIMEOUT,
            "Drain timeout must be positive.",
            {"drainTimeout": drain_timeout},
        )

    abs_roots: list[str] = []
    for root in roots:
        abs_root = os.path.abspath(root)
        if not os.path.isdir(abs_root):
            raise ConfigError(
                E_CONFIG_ROOT,
                f"Scan root does not exist or is not a directory: {abs_root}",
                {"root": abs_root},
            )
        abs_roots.append(abs_root)

    return ScanRequest(
        words=normalized_words,
        output_dir=os.path.abspath(output_dir.strip()),
        extensions=exts,
        max_concurrency=max_concurrency,
        roots=tuple(abs_roots),
        drain_timeout=drain_timeout,
    )
