"""git 依赖裁剪

git 依赖在两棵并行的树中成对存在:
  git/db/<repo>                  裸仓库
  git/checkouts/<repo>/<ref>     按 ref 检出的工作树

同一 (repo, ref) 的两半必须一起保留，缺任何一半下次使用都会触发完整重新克隆。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from cargocache.core.models import CachePaths, PackageDefinition, PruneStats
from cargocache.core.prune.entries import discard, iter_entries

logger = logging.getLogger(__name__)


def referenced_checkouts(
    checkouts_root: str | Path,
    packages: Iterable[PackageDefinition],
) -> dict[str, set[str]]:
    """收集当前包引用的 {repo: {ref, ...}}"""
    root = Path(checkouts_root)
    repos: dict[str, set[str]] = {}
    for p in packages:
        path = Path(p.path)
        if root not in path.parents:
            continue
        parts = path.relative_to(root).parts
        if len(parts) < 2:
            continue
        repo, ref = parts[0], parts[1]
        repos.setdefault(repo, set()).add(ref)
    return repos


def prune_git(paths: CachePaths, packages: Iterable[PackageDefinition]) -> PruneStats:
    """删除未被引用的裸仓库与检出目录"""
    db_root = paths.git_db
    co_root = paths.git_checkouts
    repos = referenced_checkouts(co_root, packages)
    stats = PruneStats()

    for entry in iter_entries(db_root):
        if entry.name in repos:
            stats.kept += 1
            continue
        discard(entry, stats)

    for entry in iter_entries(co_root):
        refs = repos.get(entry.name)
        if refs is None:
            discard(entry, stats)
            continue
        if not entry.is_dir:
            continue
        for ref in iter_entries(entry.path):
            if ref.name in refs:
                stats.kept += 1
                continue
            discard(ref, stats)

    logger.info(
        "git 裁剪完成: %d 个仓库在用 (保留 %d, 删除 %d, 失败 %d)",
        len(repos), stats.kept, stats.removed, stats.failed,
    )
    return stats
