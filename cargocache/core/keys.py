"""缓存键组合

键结构（按顺序拼接，`-` 分隔）:
  <prefix> [-<用户 key>] [-<job>] -<release>-<host>-<commit12> -<hashA> [-<hashB>]

恢复键由精确到宽泛排列；次级键是同一组指纹的另一种排列，
保存时一并写入以扩大后续恢复命中面。
"""

from __future__ import annotations

import logging

from cargocache.core.config import Config
from cargocache.core.models import CacheKeys, ContentHash, ToolchainInfo

logger = logging.getLogger(__name__)


def base_key(config: Config, toolchain: ToolchainInfo) -> str:
    """不含指纹的基础键；可选区分符缺失时直接跳过"""
    parts = [config.key_prefix]
    if config.key:
        parts.append(config.key)
    if config.job:
        parts.append(config.job)
    parts.append(toolchain.key)
    return "-".join(parts)


def cache_paths(config: Config) -> list[str]:
    """需要缓存的根目录，顺序固定"""
    paths = config.paths
    roots = [str(paths.index), str(paths.cache), str(paths.git)]
    roots.extend(str(p) for p in config.target_paths)
    if config.wrapper.enabled:
        roots.append(config.wrapper.cache_dir)
    return roots


def compose_keys(
    config: Config,
    toolchain: ToolchainInfo,
    deps_hash: ContentHash,
    lib_hash: ContentHash | None = None,
) -> CacheKeys:
    """组合主键、恢复键链和次级键

    lib_hash 为 None 时为仅 lockfile 指纹的变体。
    """
    key = base_key(config, toolchain)
    if lib_hash is None:
        primary = f"{key}-{deps_hash}"
        restore_keys = [key]
        secondary_keys: list[str] = []
    else:
        primary = f"{key}-{deps_hash}-{lib_hash}"
        restore_keys = [f"{key}-{deps_hash}", f"{key}-{lib_hash}", key]
        secondary_keys = [f"{key}-{lib_hash}-{deps_hash}"]

    return CacheKeys(
        paths=cache_paths(config),
        key=primary,
        restore_keys=restore_keys,
        secondary_keys=secondary_keys,
        target_dirs=[str(p) for p in config.target_paths],
    )
