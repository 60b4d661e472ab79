"""Lazy discovery of candidate files under a root, with skip rules."""

from __future__ import annotations

import logging
import os
from typing import Callable, Iterable, Iterator

from wordscrub.win_paths import is_hidden_or_system, is_reparse_point, is_under_root

logger = logging.getLogger(__name__)


class PathEnumerator:
    """Yield absolute paths of files whose extension is in the filter set.

    Hidden and system directories are skipped with their whole subtree, as are
    reparse points (deny_all: junctions and symlinks are never followed) and
    anything under an excluded directory. Access-denied and other OS errors
    on a subtree are swallowed so one bad entry never aborts traversal.
    """

    def __init__(
        self,
        extensions: Iterable[str],
        exclude: Iterable[str] = (),
        is_cancelled: Callable[[], bool] | None = None,
    ) -> None:
        self.extensions = frozenset(e.lower() for e in extensions)
        self.exclude = tuple(os.path.abspath(p) for p in exclude)
        self._is_cancelled = is_cancelled or (lambda: False)

    def iter_paths(self, root: str) -> Iterator[str]:
        """Walk one root. Every call starts a fresh traversal."""
        root_abs = os.path.abspath(root)
        # Drive roots report Hidden|System on Windows, so the root itself is
        # always entered and only its descendants are attribute-checked.
        yield from self._walk(root_abs, check_attributes=False)

    def matches(self, name: str) -> bool:
        return os.path.splitext(name)[1].lower() in self.extensions

    def _is_excluded(self, path: str) -> bool:
        return any(is_under_root(path, ex) for ex in self.exclude)

    def _walk(self, current: str, check_attributes: bool = True) -> Iterator[str]:
        if self._is_cancelled():
            return
        if self._is_excluded(current):
            logger.debug("Skipping excluded directory %s", current)
            return
        if check_attributes:
            if is_hidden_or_system(current):
                logger.debug("Skipping hidden/system directory %s", current)
                return
            if is_reparse_point(current):
                logger.debug("Skipping reparse point %s", current)
                return

        subdirs: list[str] = []
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if self._is_cancelled():
                        return
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            subdirs.append(entry.path)
                        elif entry.is_file(follow_symlinks=False) and self.matches(entry.name):
                            yield entry.path
                    except OSError:
                        continue
        except PermissionError:
            logger.debug("Access denied: %s", current)
            return
        except OSError as e:
            logger.debug("Cannot enumerate %s: %s", current, e)
            return

        for sub in subdirs:
            if self._is_cancelled():
                return
            yield from self._walk(sub)
