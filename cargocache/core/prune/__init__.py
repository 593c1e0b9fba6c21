"""缓存裁剪模块

拆分说明:
- entries.py: 目录遍历与尽力删除
- artifacts.py: target 构建产物裁剪
- registry.py: 注册表索引与 .crate 归档裁剪
- git.py: git 裸仓库与检出目录成对裁剪
"""

from cargocache.core.prune.artifacts import prune_target, prune_targets
from cargocache.core.prune.git import prune_git
from cargocache.core.prune.registry import find_registry_name, prune_registry

__all__ = [
    "prune_target",
    "prune_targets",
    "prune_git",
    "find_registry_name",
    "prune_registry",
]
