"""集中配置管理

.cargocache.yml 描述缓存键组成、需要裁剪的目录和包装器设置；
CLI 选项（--key、--job）在加载后覆盖对应字段。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from cargocache.core.exceptions import ConfigError
from cargocache.core.models import DEFAULT_RETENTION_DAYS, CachePaths
from cargocache.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_DEPS_PATTERNS = ["**/Cargo.toml", "**/Cargo.lock"]
DEFAULT_SOURCE_PATTERNS = ["**/*.rs"]


def _default_cargo_home() -> str:
    return os.environ.get("CARGO_HOME") or str(Path.home() / ".cargo")


@dataclass
class WrapperConfig:
    """编译器包装器（sccache）配置，显式传递给需要它的子进程"""

    enabled: bool = False
    cache_dir: str = field(default_factory=lambda: str(Path.home() / ".sccache"))
    cache_size: str = "300M"
    version: str = "latest"

    def __post_init__(self) -> None:
        # YAML 中未加引号的 0.7 / 300 会被解析为数字
        self.cache_size = str(self.cache_size)
        self.version = str(self.version)


@dataclass
class Config:
    """全局配置"""

    # 缓存键
    key: str = ""                      # 用户自定义区分符
    job: str = ""                      # CI job 名
    key_prefix: str = "v0-rust"
    hash_sources: bool = True          # False 时仅用 lockfile 指纹

    # 目录
    cargo_home: str = field(default_factory=_default_cargo_home)
    workspace: str = "."
    target_dirs: list[str] = field(default_factory=lambda: ["target"])
    state_file: str = ".cargocache/state.json"
    store_dir: str = ".cargocache/store"

    # 指纹
    deps_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_DEPS_PATTERNS))
    source_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_PATTERNS))

    # 裁剪
    retention_days: int = DEFAULT_RETENTION_DAYS

    wrapper: WrapperConfig = field(default_factory=WrapperConfig)

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @property
    def paths(self) -> CachePaths:
        return CachePaths(cargo_home=Path(self.cargo_home).expanduser())

    @property
    def target_paths(self) -> list[Path]:
        """相对 workspace 解析的构建输出目录"""
        return [Path(self.workspace) / t for t in self.target_dirs]

    @classmethod
    def from_file(cls, path: str = ".cargocache.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        wrapper = matched.pop("wrapper", None) or {}
        if not isinstance(wrapper, dict):
            raise ConfigError(f"wrapper 配置必须是字典: {path}")
        for name in ("target_dirs", "deps_patterns", "source_patterns"):
            if isinstance(matched.get(name), str):
                matched[name] = [matched[name]]
        try:
            cfg = cls(**matched, wrapper=WrapperConfig(**wrapper))
        except TypeError as e:
            raise ConfigError(f"配置项无效: {path} - {e}") from e
        cfg.extra = extra
        return cfg


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = ".cargocache.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
