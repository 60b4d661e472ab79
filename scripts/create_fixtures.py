"""Create a sample tree for manual runs.

Usage: python scripts/create_fixtures.py <root_dir>

Creates, under <root_dir>:
  - words.txt                 forbidden word list (secret, password)
  - docs/memo.txt             UTF-8 text with matches
  - docs/legacy.txt           Windows-1251 text with a match
  - docs/clean.txt            no matches (no artifacts expected)
  - docs/notes.LOG            match, only picked up with --extensions log
  - docs/.private/hidden.txt  match inside a hidden directory (skipped)

Then: wordscrub --words <root_dir>/words.txt --output <root_dir>/out --root <root_dir>/docs
"""

from __future__ import annotations

import ctypes
import os
import sys


def _write(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    print(f"  created: {path}")


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python create_fixtures.py <root_dir>", file=sys.stderr)
        sys.exit(1)

    root = os.path.abspath(sys.argv[1])
    if not os.path.isdir(root):
        print(f"Root does not exist: {root}", file=sys.stderr)
        sys.exit(1)

    _write(os.path.join(root, "words.txt"), b"secret\npassword\n")
    _write(
        os.path.join(root, "docs", "memo.txt"),
        "The secret is out. Password: hunter2. Secretary unaffected.\n".encode("utf-8"),
    )
    _write(os.path.join(root, "docs", "legacy.txt"), "секрет: secret\n".encode("cp1251"))
    _write(os.path.join(root, "docs", "clean.txt"), b"nothing to redact here\n")
    _write(os.path.join(root, "docs", "notes.LOG"), b"password rotation notes\n")

    private = os.path.join(root, "docs", ".private")
    _write(os.path.join(private, "hidden.txt"), b"secret in a hidden folder\n")
    if os.name == "nt":
        ctypes.windll.kernel32.SetFileAttributesW(private, 0x2)  # FILE_ATTRIBUTE_HIDDEN

    count = sum(len(files) for _, _, files in os.walk(root))
    print(f"  root contains {count} files")


if __name__ == "__main__":
    main()
