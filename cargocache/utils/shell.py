"""子进程执行工具: 统一 rustc / cargo 调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
环境变量通过 env 参数显式传入单次调用，不修改当前进程的 os.environ。
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Protocol

from cargocache.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议: 抽象子进程调用

    测试时可注入假实现返回预置输出，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        merged = {**os.environ, **env} if env else None
        try:
            r = subprocess.run(
                cmd, capture_output=True, text=True,
                cwd=cwd, env=merged, check=False,
            )
        except OSError as e:
            raise ExecutionError(f"无法启动 {cmd[0]}: {e}") from e
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


def get_cmd_output(
    cmd: list[str], *,
    cwd: str = ".",
    env: dict[str, str] | None = None,
    executor: CommandExecutor | None = None,
) -> str:
    """执行命令并返回 stdout，失败抛 ExecutionError

    Args:
        cmd: 命令及参数
        cwd: 工作目录
        env: 额外环境变量，仅作用于本次调用
        executor: 命令执行器，默认为全局执行器
    """
    runner = executor or get_executor()
    logger.debug("执行: %s (cwd=%s)", " ".join(cmd), cwd)
    r = runner.execute(cmd, cwd=cwd, env=env)
    if not r.success:
        raise ExecutionError(
            f"{cmd[0]} 失败 (rc={r.returncode}): {r.stderr[:500]}"
        )
    return r.stdout
