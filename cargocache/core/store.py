"""缓存存储抽象

CacheStore 协议对应外部的内容寻址存储:
  - restore(paths, key, restore_keys) -> 命中的键 | None
  - save(paths, key)，失败抛 StoreError

LocalArchiveStore 是本地目录实现: 每个键一个 tar.gz，成员按路径序号分组
（0/..., 1/...），恢复时精确匹配主键，否则按恢复键前缀匹配最新的归档。
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote, unquote

from cargocache.core.exceptions import StoreError

if TYPE_CHECKING:
    from cargocache.core.config import Config

logger = logging.getLogger(__name__)

SUFFIX = ".tar.gz"


class CacheStore(Protocol):
    """缓存存储协议"""

    def restore(self, paths: list[str], key: str, restore_keys: list[str]) -> str | None:
        ...

    def save(self, paths: list[str], key: str) -> None:
        ...


class LocalArchiveStore:
    """本地目录归档存储"""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _archive(self, key: str) -> Path:
        return self.base_dir / f"{quote(key, safe='')}{SUFFIX}"

    def _find(self, key: str, restore_keys: list[str]) -> Path | None:
        exact = self._archive(key)
        if exact.is_file():
            return exact
        if not self.base_dir.is_dir():
            return None
        archives = [p for p in self.base_dir.iterdir() if p.name.endswith(SUFFIX)]
        for prefix in restore_keys:
            quoted = quote(prefix, safe="")
            matches = [p for p in archives if p.name.startswith(quoted)]
            if matches:
                return max(matches, key=lambda p: p.stat().st_mtime)
        return None

    def restore(self, paths: list[str], key: str, restore_keys: list[str]) -> str | None:
        archive = self._find(key, restore_keys)
        if archive is None:
            return None
        matched = unquote(archive.name[: -len(SUFFIX)])
        logger.info("解包缓存: %s", archive)

        self.base_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=str(self.base_dir), prefix=".restore-"))
        try:
            with tarfile.open(archive) as tf:
                tf.extractall(path=str(staging), filter="data")  # noqa: S202
            for i, dest in enumerate(paths):
                src = staging / str(i)
                if src.is_dir():
                    shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
        except (OSError, tarfile.TarError) as e:
            raise StoreError(f"恢复缓存失败: {archive} - {e}") from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        return matched

    def save(self, paths: list[str], key: str) -> None:
        archive = self._archive(key)
        if archive.exists():
            raise StoreError(f"缓存键已存在: {key}")
        self.base_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(dir=str(self.base_dir), suffix=".tmp")
        tmp_path = Path(tmp)
        try:
            with open(fd, "wb") as f, tarfile.open(fileobj=f, mode="w:gz") as tf:
                for i, src in enumerate(paths):
                    if not Path(src).exists():
                        logger.debug("路径不存在，跳过: %s", src)
                        continue
                    tf.add(src, arcname=str(i))
            tmp_path.replace(archive)
        except (OSError, tarfile.TarError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StoreError(f"保存缓存失败: {key} - {e}") from e
        logger.info("已保存缓存: %s", archive)


def create_store(config: Config) -> CacheStore:
    """根据配置创建存储后端"""
    return LocalArchiveStore(config.store_dir)
