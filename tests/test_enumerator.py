"""Tests for candidate-file discovery and skip rules."""

from __future__ import annotations

import os

import pytest

from wordscrub.enumerator import PathEnumerator


def _touch(path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x")
    return str(path)


def test_extension_filter_case_insensitive(tmp_path):
    a = _touch(tmp_path / "a.TXT")
    b = _touch(tmp_path / "sub" / "b.log")
    _touch(tmp_path / "c.bin")

    found = set(PathEnumerator({".txt", ".log"}).iter_paths(str(tmp_path)))
    assert found == {a, b}


def test_restartable(tmp_path):
    _touch(tmp_path / "a.txt")
    enum = PathEnumerator({".txt"})
    assert list(enum.iter_paths(str(tmp_path))) == list(enum.iter_paths(str(tmp_path)))


@pytest.mark.skipif(os.name == "nt", reason="POSIX hidden-directory convention")
def test_hidden_directory_subtree_skipped(tmp_path):
    keep = _touch(tmp_path / "visible" / "keep.txt")
    _touch(tmp_path / ".hidden" / "skip.txt")
    _touch(tmp_path / ".hidden" / "nested" / "skip2.txt")

    assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path))) == [keep]


@pytest.mark.skipif(os.name != "nt", reason="Windows-only")
def test_hidden_attribute_subtree_skipped(tmp_path):
    import ctypes

    keep = _touch(tmp_path / "visible" / "keep.txt")
    _touch(tmp_path / "secretdir" / "skip.txt")
    ctypes.windll.kernel32.SetFileAttributesW(str(tmp_path / "secretdir"), 0x2)

    assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path))) == [keep]


@pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
def test_symlinked_directory_not_followed(tmp_path):
    target = tmp_path / "target"
    keep = _touch(target / "keep.txt")
    os.symlink(str(target), str(tmp_path / "link"))

    assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path))) == [keep]


@pytest.mark.skipif(
    os.name == "nt" or os.geteuid() == 0,
    reason="needs POSIX permissions enforced (not root)",
)
def test_unreadable_subtree_skipped(tmp_path):
    keep = _touch(tmp_path / "ok" / "keep.txt")
    locked = tmp_path / "locked"
    _touch(locked / "skip.txt")
    locked.chmod(0)
    try:
        assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path))) == [keep]
    finally:
        locked.chmod(0o755)


def test_excluded_directory_skipped(tmp_path):
    keep = _touch(tmp_path / "keep.txt")
    _touch(tmp_path / "out" / "original_keep.txt")

    enum = PathEnumerator({".txt"}, exclude=[str(tmp_path / "out")])
    assert list(enum.iter_paths(str(tmp_path))) == [keep]


def test_missing_root_yields_nothing(tmp_path):
    assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path / "nope"))) == []


def test_cancellation_stops_enumeration(tmp_path):
    for i in range(5):
        _touch(tmp_path / f"d{i}" / "f.txt")

    cancelled = False
    enum = PathEnumerator({".txt"}, is_cancelled=lambda: cancelled)
    it = enum.iter_paths(str(tmp_path))
    first = next(it)
    cancelled = True
    assert list(it) == []
    assert first.endswith("f.txt")


def test_files_before_subdirectories(tmp_path):
    top = _touch(tmp_path / "top.txt")
    _touch(tmp_path / "sub" / "deep.txt")
    assert list(PathEnumerator({".txt"}).iter_paths(str(tmp_path)))[0] == top
