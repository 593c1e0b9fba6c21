"""构建产物裁剪: 按当前依赖集合收缩 target 目录

产物文件名形如 `<crate 名>-<不透明哈希>[.扩展名]`，只能根据命名约定推断归属:
  1. 无条件删除易变子树: .rustc_info.json、debug/examples、debug/incremental
  2. 删除 debug/ 下的所有顶层普通文件（最终链接产物，每次都会重新生成）
  3. debug/build 与 debug/.fingerprint: 去掉最后一个 `-` 段得到包名，
     不在当前包集合中的删除
  4. debug/deps: 包名与 lib target 名、`-` 转 `_` 形式、以及 `lib` 前缀形式
     组成允许集合，前缀不在集合中的删除
  5. 保留期: 即使前缀匹配，修改时间超过保留期的条目也删除

前缀推断是启发式的: 包名本身以 `-<类似哈希>` 结尾时可能被误判为其他包，
误删只会导致重新编译。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from cargocache.core.models import (
    DEFAULT_RETENTION_DAYS,
    PackageDefinition,
    PruneStats,
    RemovalResult,
)
from cargocache.core.prune.entries import discard, iter_entries, remove_path

logger = logging.getLogger(__name__)

PROFILE = "debug"
VOLATILE_FILES = (".rustc_info.json",)
VOLATILE_DIRS = ("examples", "incremental")
OWNED_DIRS = ("build", ".fingerprint")
DEPS_DIR = "deps"


def derive_prefix(name: str) -> str:
    """去掉最后一个 `-` 之后的部分；没有 `-` 时返回原名"""
    idx = name.rfind("-")
    return name[:idx] if idx != -1 else name


def package_names(packages: Iterable[PackageDefinition]) -> set[str]:
    return {p.name for p in packages}


def deps_allow_set(packages: Iterable[PackageDefinition]) -> set[str]:
    """deps 目录的允许前缀集合

    每个包名与 lib target 名，原样及 `-` 转 `_`，各自裸名与 `lib` 前缀。
    """
    allowed: set[str] = set()
    for p in packages:
        for n in (p.name, *p.targets):
            for form in (n, n.replace("-", "_")):
                allowed.add(form)
                allowed.add(f"lib{form}")
    return allowed


def remove_except(
    directory: str | Path,
    keep_prefixes: set[str],
    retention_days: int = DEFAULT_RETENTION_DAYS,
    now: float | None = None,
) -> PruneStats:
    """删除前缀不在 keep_prefixes 中、或超过保留期的条目"""
    stats = PruneStats()
    for entry in iter_entries(directory):
        if derive_prefix(entry.name) in keep_prefixes and not entry.older_than(retention_days, now):
            stats.kept += 1
            continue
        discard(entry, stats)
    return stats


def remove_volatile(target_dir: str | Path) -> PruneStats:
    """删除易变、复用价值低的子树"""
    root = Path(target_dir)
    profile = root / PROFILE
    stats = PruneStats()
    for path in [root / f for f in VOLATILE_FILES] + [profile / d for d in VOLATILE_DIRS]:
        result = remove_path(path)
        if result is not RemovalResult.MISSING:
            stats.record(result)
    return stats


def remove_top_files(target_dir: str | Path) -> PruneStats:
    """删除 profile 目录下的顶层普通文件"""
    stats = PruneStats()
    for entry in iter_entries(Path(target_dir) / PROFILE):
        if entry.is_file:
            discard(entry, stats)
    return stats


def prune_target(
    target_dir: str | Path,
    packages: list[PackageDefinition],
    retention_days: int = DEFAULT_RETENTION_DAYS,
    now: float | None = None,
) -> PruneStats:
    """按当前依赖集合裁剪单个 target 目录"""
    profile = Path(target_dir) / PROFILE
    stats = remove_volatile(target_dir)
    if not profile.is_dir():
        logger.info("无 %s 目录，跳过裁剪: %s", PROFILE, target_dir)
        return stats

    stats = stats.merge(remove_top_files(target_dir))

    names = package_names(packages)
    for sub in OWNED_DIRS:
        stats = stats.merge(remove_except(profile / sub, names, retention_days, now))

    stats = stats.merge(
        remove_except(profile / DEPS_DIR, deps_allow_set(packages), retention_days, now),
    )
    logger.info(
        "target 裁剪完成: %s (保留 %d, 删除 %d, 失败 %d)",
        target_dir, stats.kept, stats.removed, stats.failed,
    )
    return stats


def prune_targets(
    target_dirs: Iterable[str | Path],
    packages: list[PackageDefinition],
    retention_days: int = DEFAULT_RETENTION_DAYS,
    now: float | None = None,
) -> PruneStats:
    """依次裁剪所有 target 目录"""
    stats = PruneStats()
    for target in target_dirs:
        stats = stats.merge(prune_target(target, packages, retention_days, now))
    return stats
