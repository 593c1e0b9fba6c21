"""内容指纹

对 glob 选中的文件集合计算确定性哈希:
  1. 展开所有 pattern（支持 **，不进入符号链接目录，跳过符号链接文件）
  2. 去重后按路径字典序排序，与目录遍历顺序无关
  3. 依次流式读取每个文件，全部字节写入同一个 SHA-1
  4. base64 编码后截取前 20 个字符

指纹只用于缓存键，截断带来的碰撞风险可以接受。
"""

from __future__ import annotations

import base64
import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from cargocache.core.exceptions import FingerprintError
from cargocache.core.models import ContentHash

if TYPE_CHECKING:
    from cargocache.core.state import RunState

logger = logging.getLogger(__name__)

HASH_LENGTH = 20
CHUNK_SIZE = 8192


def _expand(pattern: str, root: Path) -> Iterable[Path]:
    p = Path(pattern)
    if p.is_absolute():
        # pathlib.glob 只接受相对 pattern
        return Path(p.anchor).glob(str(p.relative_to(p.anchor)))
    return root.glob(pattern)


def match_files(patterns: Iterable[str], root: str | Path = ".") -> list[str]:
    """展开 glob pattern，返回排序后的普通文件路径"""
    base = Path(root)
    found: set[str] = set()
    for pattern in patterns:
        for path in _expand(pattern, base):
            if path.is_symlink() or not path.is_file():
                continue
            found.add(str(path))
    return sorted(found)


def hash_files(patterns: Iterable[str], root: str | Path = ".") -> ContentHash:
    """计算匹配文件集合的内容指纹

    零匹配时返回空输入的固定摘要。

    Raises:
        FingerprintError: 任一匹配文件不可读（整个缓存流程随之放弃）
    """
    files = match_files(patterns, root)
    hasher = hashlib.sha1()  # noqa: S324
    for name in files:
        try:
            with open(name, "rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    hasher.update(chunk)
        except OSError as e:
            raise FingerprintError(f"无法读取 {name}: {e}") from e
    digest = base64.b64encode(hasher.digest()).decode("ascii")[:HASH_LENGTH]
    logger.debug("指纹 %s (%d 个文件)", digest, len(files))
    return digest


def cached_hash(
    state: RunState, name: str,
    patterns: Iterable[str], root: str | Path = ".",
) -> ContentHash:
    """读取运行状态中已保存的指纹，不存在时计算并写回

    restore 与 save 两个步骤之间构建会修改源码，复用同一指纹保证两端键一致。
    """
    value = state.get(name)
    if value:
        return str(value)
    value = hash_files(patterns, root)
    state.set(name, value)
    return value
