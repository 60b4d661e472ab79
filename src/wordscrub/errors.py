"""Error taxonomy: coded exceptions plus structured error/success envelopes."""

from __future__ import annotations

from typing import Any

# Configuration errors: fatal, raised before any scanning begins.
E_CONFIG_NO_WORDS = "E_CONFIG_NO_WORDS"
E_CONFIG_NO_OUTPUT = "E_CONFIG_NO_OUTPUT"
E_CONFIG_NO_EXTENSIONS = "E_CONFIG_NO_EXTENSIONS"
E_CONFIG_WORDS_FILE = "E_CONFIG_WORDS_FILE"
E_CONFIG_CONCURRENCY = "E_CONFIG_CONCURRENCY"
E_CONFIG_ROOT = "E_CONFIG_ROOT"
E_CONFIG_TIMEOUT = "E_CONFIG_TIMEOUT"

# Per-file diagnostics: recovered locally, never terminate a run.
E_ACCESS_DENIED = "E_ACCESS_DENIED"
E_IO_ERROR = "E_IO_ERROR"
E_WRITE_FAILED = "E_WRITE_FAILED"
E_SCAN_FAILED = "E_SCAN_FAILED"


def err(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured error envelope."""
    return {
        "ok": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


def ok(result: dict[str, Any]) -> dict[str, Any]:
    """Build a structured success envelope."""
    return {"ok": True, "result": result}


class ScanError(Exception):
    """An error with a stable code, a human-readable message and details."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return err(self.code, self.message, self.details)


class ConfigError(ScanError):
    """Invalid run configuration. Fatal for the run that requested it."""
