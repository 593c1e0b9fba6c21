"""核心数据模型

所有核心数据类集中定义，避免 inventory ↔ keys ↔ prune 之间的循环依赖。
其他模块统一从此处导入 PackageDefinition / ToolchainInfo / CacheKeys 等实体。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# 内容指纹: 20 个可打印字符（base64 截断）
ContentHash = str

SECONDS_PER_DAY = 86400
DEFAULT_RETENTION_DAYS = 7


# =========================================================================
# 依赖与工具链
# =========================================================================


@dataclass(frozen=True)
class PackageDefinition:
    """工作区外部依赖包（cargo metadata 解析结果，每次运行重新生成）"""

    name: str
    version: str
    path: str                              # Cargo.toml 所在目录
    targets: tuple[str, ...] = ()          # lib 类型的 target 名

    @property
    def crate_file(self) -> str:
        """注册表缓存中的归档文件名"""
        return f"{self.name}-{self.version}.crate"


@dataclass(frozen=True)
class ToolchainInfo:
    """rustc -vV 输出的工具链身份"""

    release: str
    host: str
    commit_hash: str

    @property
    def key(self) -> str:
        """缓存键中的工具链片段: release-host-commit前12位"""
        return f"{self.release}-{self.host}-{self.commit_hash[:12]}"


# =========================================================================
# 缓存键与路径
# =========================================================================


@dataclass(frozen=True)
class CachePaths:
    """约定的缓存根目录（命名与嵌套规则见各 pruner）"""

    cargo_home: Path

    @property
    def index(self) -> Path:
        return self.cargo_home / "registry" / "index"

    @property
    def cache(self) -> Path:
        return self.cargo_home / "registry" / "cache"

    @property
    def git(self) -> Path:
        return self.cargo_home / "git"

    @property
    def git_db(self) -> Path:
        return self.git / "db"

    @property
    def git_checkouts(self) -> Path:
        return self.git / "checkouts"


@dataclass
class CacheKeys:
    """一次运行内固定的缓存键组合"""

    paths: list[str]
    key: str
    restore_keys: list[str] = field(default_factory=list)   # 由精确到宽泛
    secondary_keys: list[str] = field(default_factory=list)
    target_dirs: list[str] = field(default_factory=list)


# =========================================================================
# 裁剪结果
# =========================================================================


class RemovalResult(Enum):
    """单个条目删除结果: 由调用方记录日志，从不向上抛出"""

    REMOVED = "removed"
    MISSING = "missing"
    DENIED = "denied"
    FAILED = "failed"


@dataclass
class PruneStats:
    """一次裁剪的统计"""

    kept: int = 0
    removed: int = 0
    failed: int = 0

    def record(self, result: RemovalResult) -> None:
        if result in (RemovalResult.REMOVED, RemovalResult.MISSING):
            self.removed += 1
        else:
            self.failed += 1

    def merge(self, other: PruneStats) -> PruneStats:
        return PruneStats(
            kept=self.kept + other.kept,
            removed=self.removed + other.removed,
            failed=self.failed + other.failed,
        )

    def to_dict(self) -> dict[str, int]:
        return {"kept": self.kept, "removed": self.removed, "failed": self.failed}
