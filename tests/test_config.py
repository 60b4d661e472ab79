"""Tests for request validation, extension handling and env defaults."""

from __future__ import annotations

import os

import pytest

from wordscrub.config import (
    DEFAULT_MAX_CONCURRENCY,
    EXTENSION_PRESETS,
    build_request,
    expand_presets,
    load_env_defaults,
    load_words_file,
    normalize_extensions,
    normalize_words,
)
from wordscrub.errors import (
    ConfigError,
    E_CONFIG_CONCURRENCY,
    E_CONFIG_NO_OUTPUT,
    E_CONFIG_NO_WORDS,
    E_CONFIG_ROOT,
    E_CONFIG_WORDS_FILE,
)


def test_extensions_get_leading_dot_and_lowercase():
    assert normalize_extensions("txt, .LOG ,,Md") == frozenset({".txt", ".log", ".md"})
    assert normalize_extensions([".Html", "htm"]) == frozenset({".html", ".htm"})


def test_presets():
    assert expand_presets(["doc", "HTML"]) == frozenset({".doc", ".docx", ".html", ".htm"})
    assert ".properties" in EXTENSION_PRESETS["all"]
    with pytest.raises(ConfigError):
        expand_presets(["spreadsheets"])


def test_words_deduplicated_case_insensitively():
    assert normalize_words(["  Secret ", "", "secret", "other", "OTHER", "x"]) == ("Secret", "other", "x")


def test_empty_word_list_is_fatal(tmp_path):
    with pytest.raises(ConfigError) as exc:
        build_request(["", "  "], str(tmp_path))
    assert exc.value.code == E_CONFIG_NO_WORDS
    assert exc.value.to_dict()["ok"] is False


def test_missing_output_is_fatal():
    with pytest.raises(ConfigError) as exc:
        build_request(["w"], "  ")
    assert exc.value.code == E_CONFIG_NO_OUTPUT


def test_bad_concurrency_is_fatal(tmp_path):
    with pytest.raises(ConfigError) as exc:
        build_request(["w"], str(tmp_path), max_concurrency=0)
    assert exc.value.code == E_CONFIG_CONCURRENCY


def test_missing_root_is_fatal(tmp_path):
    with pytest.raises(ConfigError) as exc:
        build_request(["w"], str(tmp_path), roots=[str(tmp_path / "nope")])
    assert exc.value.code == E_CONFIG_ROOT


def test_request_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("WORDSCRUB_MAX_CONCURRENCY", raising=False)
    monkeypatch.delenv("WORDSCRUB_DRAIN_TIMEOUT", raising=False)
    req = build_request(["w"], str(tmp_path / "out"))
    assert req.extensions == frozenset({".txt"})
    assert req.max_concurrency == DEFAULT_MAX_CONCURRENCY
    assert req.roots == ()
    assert os.path.isabs(req.output_dir)


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("WORDSCRUB_MAX_CONCURRENCY", "9")
    monkeypatch.setenv("WORDSCRUB_DRAIN_TIMEOUT", "2.5")
    assert load_env_defaults() == {"max_concurrency": 9, "drain_timeout": 2.5}
    req = build_request(["w"], str(tmp_path))
    assert req.max_concurrency == 9
    assert req.drain_timeout == 2.5


def test_env_garbage_fails_closed(monkeypatch):
    monkeypatch.setenv("WORDSCRUB_MAX_CONCURRENCY", "many")
    with pytest.raises(ConfigError):
        load_env_defaults()


def test_words_file(tmp_path):
    p = tmp_path / "words.txt"
    p.write_bytes(b"\xef\xbb\xbfalpha\r\n\r\n  beta  \nAlpha\n")
    assert load_words_file(str(p)) == ("alpha", "beta")


def test_words_file_missing(tmp_path):
    with pytest.raises(ConfigError) as exc:
        load_words_file(str(tmp_path / "missing.txt"))
    assert exc.value.code == E_CONFIG_WORDS_FILE


def test_dedupe_keeps_words_the_matcher_treats_as_distinct():
    assert normalize_words(["straße", "STRASSE", "Straße"]) == ("straße", "STRASSE")


def test_words_file_cp1251_fallback(tmp_path):
    p = tmp_path / "words.txt"
    p.write_bytes("секрет\r\nпароль\n".encode("cp1251"))
    assert load_words_file(str(p)) == ("секрет", "пароль")


def test_words_file_undecodable(tmp_path):
    p = tmp_path / "words.txt"
    p.write_bytes(b"\xff\x98\n")
    with pytest.raises(ConfigError) as exc:
        load_words_file(str(p))
    assert exc.value.code == E_CONFIG_WORDS_FILE
