"""编译器包装器（sccache）配置

包装器的安装与启动不在本工具范围内；这里只负责:
  - 生成显式传给子进程的环境变量（不写入当前进程 os.environ）
  - 将 "latest" 解析为 crates.io 上最新发布的版本号
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from cargocache.core.config import WrapperConfig
from cargocache.core.exceptions import DependencyError
from cargocache.utils.net import get_json

logger = logging.getLogger(__name__)

WRAPPER_CRATE = "sccache"
CRATES_API = "https://crates.io/api/v1/crates"


def wrapper_env(config: WrapperConfig) -> dict[str, str]:
    """子进程所需的构建环境变量"""
    env = {"CARGO_INCREMENTAL": "0"}
    if not config.enabled:
        return env
    env.update({
        "SCCACHE_DIR": config.cache_dir,
        "SCCACHE_CACHE_SIZE": config.cache_size,
        "SCCACHE_IDLE_TIMEOUT": "0",
        "RUSTC_WRAPPER": WRAPPER_CRATE,
    })
    return env


def latest_version(crate: str, fetch: Callable[[str], Any] = get_json) -> str:
    """查询 crates.io 上的最新版本

    Raises:
        DependencyError: 请求失败或响应缺少 crate.newest_version
    """
    body = fetch(f"{CRATES_API}/{crate}")
    try:
        version = body["crate"]["newest_version"]
    except (KeyError, TypeError) as e:
        raise DependencyError(f"无法获取 {crate} 的最新版本") from e
    if not version:
        raise DependencyError(f"无法获取 {crate} 的最新版本")
    return str(version)


def resolve_version(
    config: WrapperConfig,
    crate: str = WRAPPER_CRATE,
    fetch: Callable[[str], Any] = get_json,
) -> str:
    """解析包装器版本，去掉开头的 v"""
    version = latest_version(crate, fetch) if config.version == "latest" else config.version
    resolved = version.removeprefix("v")
    logger.info("%s 版本: %s", crate, resolved)
    return resolved
