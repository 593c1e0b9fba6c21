"""cargocache 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
缓存相关命令永远以 0 退出，缓存失败只输出警告。
"""

from __future__ import annotations

import os

import click

from cargocache import __version__
from cargocache.core.config import get_config, init_config
from cargocache.core.exceptions import ConfigError
from cargocache.services.cache_service import CacheService
from cargocache.utils.logger import setup_logging

_service: CacheService | None = None


def _svc() -> CacheService:
    """获取当前命令使用的缓存服务"""
    global _service  # noqa: PLW0603
    if _service is None:
        _service = CacheService(get_config())
    return _service


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=".cargocache.yml", help="配置文件路径")
@click.option("--key", default=None, help="自定义缓存键区分符")
@click.option("--job", envvar="GITHUB_JOB", default=None, help="CI job 名（默认读取 GITHUB_JOB）")
def main(config_path: str, key: str | None, job: str | None) -> None:
    """cargocache - Cargo 构建 CI 缓存"""
    global _service  # noqa: PLW0603
    setup_logging(
        level=os.getenv("CARGOCACHE_LOG_LEVEL", "INFO"),
        json_output=os.getenv("CARGOCACHE_LOG_JSON", "") == "1",
        actions=os.getenv("GITHUB_ACTIONS", "") == "true",
    )
    try:
        cfg = init_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if key is not None:
        cfg.key = key
    if job is not None:
        cfg.job = job
    _service = None


# 注册各领域子命令
from cargocache.cli.cmd_cache import register as _reg_cache  # noqa: E402
from cargocache.cli.cmd_tools import register as _reg_tools  # noqa: E402

_reg_cache(main)
_reg_tools(main)
