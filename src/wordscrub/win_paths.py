"""Path utilities: extended paths, root confinement, directory attributes, drive roots."""

from __future__ import annotations

import ctypes
import os
import string

if os.name == "nt":
    import ctypes.wintypes as wintypes


# Characters Windows refuses in a file name, applied on every platform so
# artifact names are the same wherever a run happens.
INVALID_FILE_NAME_CHARS: frozenset[str] = frozenset('<>:"/\\|?*') | frozenset(
    chr(i) for i in range(32)
)


def to_extended_path(path: str) -> str:
    """Convert an absolute path to \\\\?\\ extended form on Windows.

    Local:  C:\\foo  -> \\\\?\\C:\\foo
    UNC:    \\\\server\\share\\foo -> \\\\?\\UNC\\server\\share\\foo
    Already extended, or not on Windows: returned unchanged.
    """
    if os.name != "nt" or path.startswith("\\\\?\\"):
        return path
    if not os.path.isabs(path):
        path = os.path.join(os.getcwd(), path)
    path = path.replace("/", "\\")
    if path.startswith("\\\\"):
        return "\\\\?\\UNC\\" + path[2:]
    return "\\\\?\\" + path


def is_under_root(target_abs: str, root_abs: str) -> bool:
    """Check if target is inside root using case-insensitive normalized comparison."""
    t = os.path.normcase(os.path.normpath(target_abs))
    r = os.path.normcase(os.path.normpath(root_abs))
    if not r.endswith(os.sep):
        r += os.sep
    return t.startswith(r) or t == r.rstrip(os.sep)


def sanitize_file_name(name: str) -> str:
    """Replace every character that is invalid in a file name with '_'."""
    return "".join("_" if c in INVALID_FILE_NAME_CHARS else c for c in name)


# --- Win32 bindings (GetFileAttributesW, GetLogicalDrives, GetDriveTypeW) ---

FILE_ATTRIBUTE_HIDDEN = 0x0002
FILE_ATTRIBUTE_SYSTEM = 0x0004
FILE_ATTRIBUTE_REPARSE_POINT = 0x0400
_INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF

DRIVE_REMOVABLE = 2
DRIVE_FIXED = 3

if os.name == "nt":
    _kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    _GetFileAttributesW = _kernel32.GetFileAttributesW
    _GetFileAttributesW.argtypes = [wintypes.LPCWSTR]
    _GetFileAttributesW.restype = wintypes.DWORD  # MUST be unsigned, signed returns -1 instead of 0xFFFFFFFF

    _GetLogicalDrives = _kernel32.GetLogicalDrives
    _GetLogicalDrives.argtypes = []
    _GetLogicalDrives.restype = wintypes.DWORD

    _GetDriveTypeW = _kernel32.GetDriveTypeW
    _GetDriveTypeW.argtypes = [wintypes.LPCWSTR]
    _GetDriveTypeW.restype = wintypes.UINT


def get_attributes(path: str) -> int | None:
    """Return the Win32 attribute bits for path, or None if they cannot be read.

    Off Windows the bits are synthesized: a dot-prefixed name counts as
    hidden, a symlink as a reparse point, and nothing is ever system.
    """
    if os.name == "nt":
        attrs = _GetFileAttributesW(to_extended_path(path))
        if attrs == _INVALID_FILE_ATTRIBUTES:
            return None
        return int(attrs)

    try:
        is_link = os.path.islink(path)
    except OSError:
        return None
    attrs = 0
    if os.path.basename(os.path.normpath(path)).startswith("."):
        attrs |= FILE_ATTRIBUTE_HIDDEN
    if is_link:
        attrs |= FILE_ATTRIBUTE_REPARSE_POINT
    return attrs


def is_hidden_or_system(path: str) -> bool:
    attrs = get_attributes(path)
    if attrs is None:
        return False
    return bool(attrs & (FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM))


def is_reparse_point(path: str) -> bool:
    """Check if path is a reparse point (symlink/junction/mount)."""
    attrs = get_attributes(path)
    if attrs is None:
        return False
    return bool(attrs & FILE_ATTRIBUTE_REPARSE_POINT)


def list_drive_roots() -> list[str]:
    """Return the roots of every ready fixed or removable drive.

    A drive is ready when its root directory can be listed (an empty card
    reader slot reports DRIVE_REMOVABLE but is not a directory).
    Off Windows the filesystem has a single root.
    """
    if os.name != "nt":
        return ["/"]

    mask = _GetLogicalDrives()
    roots: list[str] = []
    for i, letter in enumerate(string.ascii_uppercase):
        if not mask & (1 << i):
            continue
        root = f"{letter}:\\"
        if _GetDriveTypeW(root) not in (DRIVE_FIXED, DRIVE_REMOVABLE):
            continue
        if os.path.isdir(root):
            roots.append(root)
    return roots
