"""注册表裁剪

- index/<registry>/.cache: 派生索引缓存，体积大、可完全重建，无条件删除
- cache/<registry>/<name>-<version>.crate: 不在当前包集合中的归档删除

只处理一个镜像: 存在多个时按路径排序后取第一个，并记录警告。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from cargocache.core.models import (
    CachePaths,
    PackageDefinition,
    PruneStats,
    RemovalResult,
)
from cargocache.core.prune.entries import discard, iter_entries, remove_path

logger = logging.getLogger(__name__)

MARKER = ".last-updated"
INDEX_CACHE_DIR = ".cache"


def find_registry_name(index_root: str | Path) -> str | None:
    """返回当前使用的注册表镜像目录名，尚未拉取过索引时返回 None"""
    markers = sorted(str(p) for p in Path(index_root).glob(f"**/{MARKER}"))
    if not markers:
        logger.info("未找到注册表索引: %s", index_root)
        return None
    if len(markers) > 1:
        logger.warning('发现多个注册表: "%s"', '", "'.join(markers))
    return Path(markers[0]).parent.name


def prune_registry(
    paths: CachePaths,
    registry_name: str,
    packages: Iterable[PackageDefinition],
) -> PruneStats:
    """删除索引缓存以及不再使用的 .crate 归档"""
    stats = PruneStats()
    result = remove_path(paths.index / registry_name / INDEX_CACHE_DIR)
    if result is not RemovalResult.MISSING:
        stats.record(result)

    keep = {p.crate_file for p in packages}
    for entry in iter_entries(paths.cache / registry_name):
        if not entry.is_file:
            continue
        if entry.name in keep:
            stats.kept += 1
            continue
        discard(entry, stats)

    logger.info(
        "注册表裁剪完成: %s (保留 %d, 删除 %d, 失败 %d)",
        registry_name, stats.kept, stats.removed, stats.failed,
    )
    return stats
