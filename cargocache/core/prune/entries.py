"""目录条目遍历与尽力删除

- iter_entries: 惰性遍历单层目录，scandir 句柄在任何退出路径上都会释放
- remove_entry / remove_path: 删除失败以 RemovalResult 返回，从不抛出
- discard: 裁剪时统一使用的"尽力删除"策略，失败只记 DEBUG 日志
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from cargocache.core.models import SECONDS_PER_DAY, PruneStats, RemovalResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """单层目录中的一个条目（不跟随符号链接）"""

    name: str
    path: Path
    is_dir: bool
    is_file: bool
    mtime: float

    def older_than(self, days: int, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current - self.mtime > days * SECONDS_PER_DAY


def iter_entries(directory: str | Path) -> Iterator[DirectoryEntry]:
    """遍历目录的直接子项；目录不存在时不产出任何条目"""
    try:
        handle = os.scandir(directory)
    except FileNotFoundError:
        logger.debug("目录不存在，跳过: %s", directory)
        return
    with handle:
        for entry in handle:
            try:
                st = entry.stat(follow_symlinks=False)
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except FileNotFoundError:
                continue
            yield DirectoryEntry(
                name=entry.name,
                path=Path(entry.path),
                is_dir=is_dir,
                is_file=is_file,
                mtime=st.st_mtime,
            )


def _classify(exc: OSError) -> RemovalResult:
    if isinstance(exc, FileNotFoundError):
        return RemovalResult.MISSING
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        return RemovalResult.DENIED
    return RemovalResult.FAILED


def remove_entry(path: str | Path, is_dir: bool) -> RemovalResult:
    """删除单个文件或目录树，返回结果类型"""
    try:
        if is_dir:
            shutil.rmtree(path)
        else:
            os.unlink(path)
    except OSError as e:
        result = _classify(e)
        logger.debug("删除失败 [%s] %s: %s", result.value, path, e)
        return result
    return RemovalResult.REMOVED


def remove_path(path: str | Path) -> RemovalResult:
    """删除可能不存在的路径（文件、目录或符号链接）"""
    p = Path(path)
    if not p.is_symlink() and not p.exists():
        return RemovalResult.MISSING
    return remove_entry(p, is_dir=p.is_dir() and not p.is_symlink())


def discard(entry: DirectoryEntry, stats: PruneStats) -> None:
    """尽力删除: 结果计入统计，失败不影响兄弟条目"""
    logger.debug("删除 %s", entry.path)
    stats.record(remove_entry(entry.path, entry.is_dir))
