"""缓存服务: restore / save / prune 编排

缓存只是优化手段，本服务是错误边界:
  - 运行级错误（工具链、cargo metadata、指纹）: 记录警告，放弃本次缓存
  - 单次裁剪失败: 记录警告，继续执行后续裁剪
  - 次级键保存失败: 记录日志，不影响主键保存
任何入口都不会把异常抛给调用方，外层构建始终照常进行。

流程:
  restore: 计算键 → 存储恢复 → 记录命中键 → 非精确命中时预先裁剪 target
  save:    命中键 == 主键则跳过 → registry → git → target 依次裁剪 → 保存主键 → 保存次级键
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from cargocache.core.config import Config, get_config
from cargocache.core.fingerprint import cached_hash, hash_files
from cargocache.core.inventory import get_packages
from cargocache.core.keys import compose_keys
from cargocache.core.models import CacheKeys, PackageDefinition, PruneStats
from cargocache.core.prune import (
    find_registry_name,
    prune_git,
    prune_registry,
    prune_targets,
)
from cargocache.core.state import DEPS_HASH, LIB_HASH, RESTORED_KEY, RunState
from cargocache.core.store import CacheStore, create_store
from cargocache.core.toolchain import probe_toolchain
from cargocache.core.wrapper import wrapper_env
from cargocache.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


def _indent(lines: list[str]) -> str:
    return "\n    " + "\n    ".join(lines)


class CacheService:
    """一次 CI job 内的缓存生命周期"""

    def __init__(
        self,
        config: Config | None = None,
        store: CacheStore | None = None,
        executor: CommandExecutor | None = None,
        state: RunState | None = None,
    ) -> None:
        self.config = config or get_config()
        self.store = store or create_store(self.config)
        self.executor = executor or get_executor()
        self.state = state or RunState(self.config.state_file)
        self._keys: CacheKeys | None = None

    @property
    def env(self) -> dict[str, str]:
        return wrapper_env(self.config.wrapper)

    # ---- 键 ----

    def _hash(self, name: str, patterns: list[str], persist: bool) -> str:
        if persist:
            return cached_hash(self.state, name, patterns, self.config.workspace)
        return hash_files(patterns, self.config.workspace)

    def cache_keys(self, persist: bool = True) -> CacheKeys:
        """计算本次运行的缓存键

        persist 为 True 时指纹写入运行状态，save 复用 restore 时的值；
        为 False 时总是重新计算且不读写运行状态（只用于展示）。
        """
        if persist and self._keys is not None:
            return self._keys
        cfg = self.config
        deps_hash = self._hash(DEPS_HASH, cfg.deps_patterns, persist)
        lib_hash = None
        if cfg.hash_sources:
            lib_hash = self._hash(LIB_HASH, cfg.source_patterns, persist)
        toolchain = probe_toolchain(self.executor, self.env)
        keys = compose_keys(cfg, toolchain, deps_hash, lib_hash)
        if persist:
            self._keys = keys
        return keys

    def packages(self) -> list[PackageDefinition]:
        return get_packages(self.config.workspace, self.executor, self.env)

    # ---- 裁剪 ----

    def _run_pass(
        self, name: str, func: Callable[[], PruneStats],
        results: dict[str, PruneStats],
    ) -> None:
        """单次裁剪失败只记录警告，不影响其他裁剪"""
        try:
            results[name] = func()
        except Exception as e:  # noqa: BLE001
            logger.warning("%s 裁剪失败: %s", name, e)

    def prune_all(self, packages: list[PackageDefinition]) -> dict[str, PruneStats]:
        """依次执行 registry → git → target 裁剪"""
        cfg = self.config
        paths = cfg.paths
        results: dict[str, PruneStats] = {}

        def registry_pass() -> PruneStats:
            registry = find_registry_name(paths.index)
            if registry is None:
                return PruneStats()
            return prune_registry(paths, registry, packages)

        self._run_pass("registry", registry_pass, results)
        self._run_pass("git", lambda: prune_git(paths, packages), results)
        self._run_pass(
            "target",
            lambda: prune_targets(cfg.target_paths, packages, cfg.retention_days),
            results,
        )
        return results

    def prune(self) -> dict[str, PruneStats]:
        """只裁剪不保存"""
        try:
            return self.prune_all(self.packages())
        except Exception as e:  # noqa: BLE001
            logger.warning("裁剪失败: %s", e)
            return {}

    # ---- restore / save ----

    def restore(self) -> str | None:
        """恢复缓存，返回命中的键；未命中或出错返回 None"""
        try:
            # 每个 job 从 restore 开始，上一次运行留下的指纹与命中键一律作废
            self.reset()
            keys = self.cache_keys()
            logger.info("恢复路径:%s", _indent(keys.paths))
            logger.info("使用键:%s", _indent([keys.key, *keys.restore_keys]))
            matched = self.store.restore(keys.paths, keys.key, keys.restore_keys)
            if not matched:
                logger.info("未找到缓存")
                return None

            logger.info('已从缓存键 "%s" 恢复', matched)
            self.state.set(RESTORED_KEY, matched)
        except Exception as e:  # noqa: BLE001
            logger.warning("缓存恢复失败，不使用缓存继续构建: %s", e)
            return None

        if matched != keys.key:
            # 非精确命中，预先清理 target 中过期的产物；失败不影响恢复结果
            self._run_pass(
                "target",
                lambda: prune_targets(
                    keys.target_dirs, self.packages(), self.config.retention_days,
                ),
                {},
            )
        return matched

    def save(self) -> bool:
        """裁剪并保存缓存，返回主键是否保存成功"""
        try:
            keys = self.cache_keys()
            if self.state.get(RESTORED_KEY) == keys.key:
                logger.info("缓存已是最新")
                return True

            self.prune_all(self.packages())

            logger.info("保存路径:%s", _indent(keys.paths))
            logger.info('使用键 "%s"', keys.key)
            self.store.save(keys.paths, keys.key)
        except Exception as e:  # noqa: BLE001
            logger.warning("缓存保存失败: %s", e)
            return False

        for k in keys.secondary_keys:
            logger.info('保存次级键 "%s"', k)
            try:
                self.store.save(keys.paths, k)
            except Exception as e:  # noqa: BLE001
                logger.info("次级键保存失败: %s - %s", k, e)
        return True

    def reset(self) -> None:
        """清除运行状态: 已保存的指纹与命中键作废，下次计算键时重新生成指纹"""
        self.state.clear()
        self._keys = None
        logger.info("运行状态已清除: %s", Path(self.config.state_file))
