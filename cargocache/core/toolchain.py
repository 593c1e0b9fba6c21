"""工具链身份探测: 解析 rustc -vV"""

from __future__ import annotations

import logging

from cargocache.core.exceptions import ToolchainError
from cargocache.core.models import ToolchainInfo
from cargocache.utils.shell import CommandExecutor, get_cmd_output

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("release", "host", "commit-hash")


def parse_version_output(stdout: str) -> dict[str, str]:
    """把 `key: value` 行解析为字典，忽略空行和没有冒号的行"""
    fields: dict[str, str] = {}
    for line in stdout.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key, value = key.strip(), value.strip()
        if key:
            fields[key] = value
    return fields


def probe_toolchain(
    executor: CommandExecutor | None = None,
    env: dict[str, str] | None = None,
) -> ToolchainInfo:
    """执行 rustc -vV 获取工具链身份

    Raises:
        ExecutionError: rustc 无法执行
        ToolchainError: 输出缺少 release / host / commit-hash
    """
    stdout = get_cmd_output(["rustc", "-vV"], env=env, executor=executor)
    fields = parse_version_output(stdout)
    missing = [f for f in REQUIRED_FIELDS if not fields.get(f)]
    if missing:
        raise ToolchainError(f"rustc -vV 缺少字段: {', '.join(missing)}")
    info = ToolchainInfo(
        release=fields["release"],
        host=fields["host"],
        commit_hash=fields["commit-hash"],
    )
    logger.debug("工具链: %s", info.key)
    return info
