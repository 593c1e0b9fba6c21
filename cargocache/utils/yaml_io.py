"""配置读取与状态文件写入

- load_yaml: 读取 .cargocache.yml，格式或 IO 问题统一转换为 ConfigError
- atomic_write: 运行状态写入临时文件后 rename，CI 步骤被中断时不留下半截文件
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

import yaml

from cargocache.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置文件上限 (1MB)
MAX_YAML_SIZE = 1024 * 1024


def atomic_write(path: str | Path, content: str) -> None:
    """原子写入文本文件，父目录不存在时自动创建"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=target.parent,
        prefix=f".{target.name}.", suffix=".tmp", delete=False,
    ) as f:
        f.write(content)
        tmp = Path(f.name)
    try:
        tmp.replace(target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射

    文件不存在或为空时返回空字典。

    Raises:
        ConfigError: 文件过大、无法读取、格式错误或顶层不是映射
    """
    p = Path(path)
    if not p.is_file():
        logger.debug("配置文件不存在，使用默认值: %s", p)
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ConfigError(f"配置文件过大: {p} ({size} 字节)")

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML 格式错误: {p} - {e}") from e
    except OSError as e:
        raise ConfigError(f"无法读取配置文件: {p} - {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件顶层必须是映射: {p} (实际: {type(data).__name__})")
    return data
