"""Tests for content fingerprinting — determinism, metadata independence."""

from __future__ import annotations

import os
from pathlib import Path

from asmforge.core.hasher import fingerprint_file, sha256_hex, short_digest

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestFingerprint:
    def test_known_digest(self, tmp_dir: Path):
        path = tmp_dir / "empty.dll"
        path.write_bytes(b"")
        assert fingerprint_file(path) == EMPTY_SHA256

    def test_matches_sha256_of_bytes(self, tmp_dir: Path):
        data = bytes(range(256)) * 10_000
        path = tmp_dir / "big.dll"
        path.write_bytes(data)
        assert fingerprint_file(path) == sha256_hex(data)

    def test_identical_bytes_different_paths(self, tmp_dir: Path):
        a = tmp_dir / "a" / "Assembly-CSharp.dll"
        b = tmp_dir / "b" / "Other.dll"
        a.parent.mkdir()
        b.parent.mkdir()
        a.write_bytes(b"same content")
        b.write_bytes(b"same content")
        assert fingerprint_file(a) == fingerprint_file(b)

    def test_modification_time_ignored(self, tmp_dir: Path):
        path = tmp_dir / "Assembly-CSharp.dll"
        path.write_bytes(b"payload")
        before = fingerprint_file(path)
        os.utime(path, (1_000_000, 1_000_000))
        assert fingerprint_file(path) == before

    def test_different_bytes_differ(self, tmp_dir: Path):
        a = tmp_dir / "a.dll"
        b = tmp_dir / "b.dll"
        a.write_bytes(b"one")
        b.write_bytes(b"two")
        assert fingerprint_file(a) != fingerprint_file(b)

    def test_missing_file_returns_none(self, tmp_dir: Path):
        assert fingerprint_file(tmp_dir / "nope.dll") is None

    def test_directory_returns_none(self, tmp_dir: Path):
        assert fingerprint_file(tmp_dir) is None

    def test_short_digest(self):
        assert short_digest(EMPTY_SHA256) == "e3b0c44298fc"
        assert short_digest(EMPTY_SHA256, 7) == "e3b0c44"
