"""内容指纹测试"""

from __future__ import annotations

import builtins
import os
from pathlib import Path

import pytest
from helpers import make_file

from cargocache.core.exceptions import FingerprintError
from cargocache.core.fingerprint import cached_hash, hash_files, match_files
from cargocache.core.state import RunState

EMPTY_DIGEST = "2jmj7l5rSw0yVb/vlWAY"
PATTERNS = ["**/Cargo.toml", "**/Cargo.lock"]


def _workspace(root: Path) -> Path:
    make_file(root / "Cargo.toml", "[workspace]\n")
    make_file(root / "Cargo.lock", "version = 3\n")
    make_file(root / "crates" / "a" / "Cargo.toml", "[package]\nname = \"a\"\n")
    make_file(root / "crates" / "b" / "Cargo.toml", "[package]\nname = \"b\"\n")
    return root


class TestHashFiles:
    def test_fixed_length(self, tmp_path: Path) -> None:
        digest = hash_files(PATTERNS, _workspace(tmp_path))
        assert len(digest) == 20

    def test_deterministic(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        assert hash_files(PATTERNS, root) == hash_files(PATTERNS, root)

    def test_independent_of_creation_order(self, tmp_path: Path) -> None:
        """文件创建顺序不同（目录遍历顺序不同）不影响结果"""
        a = tmp_path / "a"
        b = tmp_path / "b"
        make_file(a / "x" / "Cargo.toml", "x")
        make_file(a / "y" / "Cargo.toml", "y")
        make_file(b / "y" / "Cargo.toml", "y")
        make_file(b / "x" / "Cargo.toml", "x")
        assert hash_files(PATTERNS, a) == hash_files(PATTERNS, b)

    def test_independent_of_pattern_order(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        assert hash_files(PATTERNS, root) == hash_files(list(reversed(PATTERNS)), root)

    def test_byte_change_changes_digest(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        before = hash_files(PATTERNS, root)
        (root / "crates" / "b" / "Cargo.toml").write_text("[package]\nname = \"c\"\n")
        assert hash_files(PATTERNS, root) != before

    def test_added_file_changes_digest(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        before = hash_files(PATTERNS, root)
        make_file(root / "crates" / "c" / "Cargo.toml", "x")
        assert hash_files(PATTERNS, root) != before

    def test_unmatched_files_ignored(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        before = hash_files(PATTERNS, root)
        make_file(root / "README.md", "docs")
        assert hash_files(PATTERNS, root) == before

    def test_empty_match(self, tmp_path: Path) -> None:
        assert hash_files(PATTERNS, tmp_path) == EMPTY_DIGEST
        assert hash_files([], tmp_path) == EMPTY_DIGEST

    def test_symlinked_dir_not_followed(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path / "ws")
        before = hash_files(PATTERNS, root)
        outside = make_file(tmp_path / "outside" / "Cargo.toml", "outside")
        os.symlink(outside.parent, root / "linked")
        assert hash_files(PATTERNS, root) == before

    def test_unreadable_file_is_fatal(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        root = _workspace(tmp_path)
        locked = str(root / "Cargo.lock")
        real_open = builtins.open

        def deny(file, *args, **kwargs):
            if str(file) == locked:
                raise PermissionError(13, "Permission denied", file)
            return real_open(file, *args, **kwargs)

        monkeypatch.setattr(builtins, "open", deny)
        with pytest.raises(FingerprintError, match="无法读取"):
            hash_files(PATTERNS, root)


class TestMatchFiles:
    def test_sorted_and_deduplicated(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        files = match_files(["**/Cargo.toml", "**/*.toml"], root)
        assert files == sorted(files)
        assert len(files) == len(set(files)) == 3

    def test_directories_excluded(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").mkdir()
        assert match_files(PATTERNS, tmp_path) == []


class TestCachedHash:
    def test_reuses_stored_value(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path / "ws")
        state = RunState(tmp_path / "state.json")
        first = cached_hash(state, "deps_hash", PATTERNS, root)

        (root / "Cargo.lock").write_text("changed")
        assert cached_hash(state, "deps_hash", PATTERNS, root) == first
        # 新的状态对象从文件读取
        assert cached_hash(RunState(tmp_path / "state.json"), "deps_hash", PATTERNS, root) == first
