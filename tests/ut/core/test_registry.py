"""注册表裁剪测试"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from helpers import make_dir, make_file, names

from cargocache.core.models import CachePaths, PackageDefinition
from cargocache.core.prune.registry import find_registry_name, prune_registry

REGISTRY = "index.crates.io-6f17d22bba15001f"
FOO = PackageDefinition(name="foo", version="1.0.0", path="/x/foo-1.0.0")


@pytest.fixture()
def paths(tmp_path: Path) -> CachePaths:
    return CachePaths(cargo_home=tmp_path)


class TestFindRegistryName:
    def test_single(self, paths: CachePaths) -> None:
        make_file(paths.index / REGISTRY / ".last-updated")
        assert find_registry_name(paths.index) == REGISTRY

    def test_none(self, paths: CachePaths) -> None:
        assert find_registry_name(paths.index) is None

    def test_multiple_sorted_with_warning(
        self, paths: CachePaths, caplog: pytest.LogCaptureFixture,
    ) -> None:
        make_file(paths.index / "zz-mirror" / ".last-updated")
        make_file(paths.index / "aa-mirror" / ".last-updated")
        with caplog.at_level(logging.WARNING):
            assert find_registry_name(paths.index) == "aa-mirror"
        assert "多个注册表" in caplog.text


class TestPruneRegistry:
    def test_scenario_archives(self, paths: CachePaths) -> None:
        """只保留当前包的 .crate，索引缓存始终删除"""
        archives = paths.cache / REGISTRY
        make_file(archives / "foo-1.0.0.crate")
        make_file(archives / "bar-2.0.0.crate")
        make_file(paths.index / REGISTRY / ".cache" / "fo" / "o" / "foo")
        make_file(paths.index / REGISTRY / ".last-updated")

        prune_registry(paths, REGISTRY, [FOO])
        assert names(archives) == {"foo-1.0.0.crate"}
        assert not (paths.index / REGISTRY / ".cache").exists()
        assert (paths.index / REGISTRY / ".last-updated").exists()

    def test_index_cache_removed_without_packages(self, paths: CachePaths) -> None:
        make_dir(paths.index / REGISTRY / ".cache" / "3" / "s")
        prune_registry(paths, REGISTRY, [])
        assert not (paths.index / REGISTRY / ".cache").exists()

    def test_other_version_removed(self, paths: CachePaths) -> None:
        archives = paths.cache / REGISTRY
        make_file(archives / "foo-0.9.0.crate")
        make_file(archives / "foo-1.0.0.crate")
        stats = prune_registry(paths, REGISTRY, [FOO])
        assert names(archives) == {"foo-1.0.0.crate"}
        assert stats.kept == 1 and stats.removed == 1

    def test_subdirectories_untouched(self, paths: CachePaths) -> None:
        archives = paths.cache / REGISTRY
        make_dir(archives / "tmp")
        prune_registry(paths, REGISTRY, [FOO])
        assert names(archives) == {"tmp"}

    def test_missing_dirs(self, paths: CachePaths) -> None:
        stats = prune_registry(paths, REGISTRY, [FOO])
        assert stats.kept == stats.removed == stats.failed == 0
