"""运行状态: restore 与 save 两个步骤之间的交接

保存内容:
  - deps_hash / lib_hash: restore 时计算的指纹，save 时复用
  - restored_key: 实际恢复命中的键，与主键相同时 save 直接跳过
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from cargocache.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

DEPS_HASH = "deps_hash"
LIB_HASH = "lib_hash"
RESTORED_KEY = "restored_key"


class RunState:
    """基于 JSON 文件的键值状态"""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._data is None:
            try:
                self._data = json.loads(self.path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                self._data = {}
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("运行状态文件损坏，忽略: %s - %s", self.path, e)
                self._data = {}
        return self._data

    def get(self, name: str) -> str | None:
        return self._load().get(name)

    def set(self, name: str, value: str) -> None:
        data = self._load()
        data[name] = value
        atomic_write(self.path, json.dumps(data, indent=2, ensure_ascii=False))

    def clear(self) -> None:
        self._data = {}
        self.path.unlink(missing_ok=True)
