"""依赖清单: 通过 cargo metadata 获取已解析的外部依赖

只保留 manifest 不在当前工作区内的包（外部/vendor 依赖），
target 只保留第一个 kind 为 "lib" 的项。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from cargocache.core.exceptions import MetadataError
from cargocache.core.models import PackageDefinition
from cargocache.utils.shell import CommandExecutor, get_cmd_output

logger = logging.getLogger(__name__)

METADATA_CMD = ["cargo", "metadata", "--all-features", "--format-version", "1"]


def _is_under(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def parse_metadata(raw: str, cwd: str | Path) -> list[PackageDefinition]:
    """解析 cargo metadata JSON

    Raises:
        MetadataError: JSON 无效或缺少必需字段
    """
    try:
        meta = json.loads(raw)
        entries = meta["packages"]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise MetadataError(f"cargo metadata 输出无效: {e}") from e

    roots = {Path(cwd).absolute(), Path(cwd).resolve()}
    packages: list[PackageDefinition] = []
    for p in entries:
        try:
            manifest = Path(p["manifest_path"])
            if any(_is_under(manifest, r) for r in roots):
                continue
            targets = tuple(
                t["name"] for t in p.get("targets", [])
                if t.get("kind") and t["kind"][0] == "lib"
            )
            packages.append(PackageDefinition(
                name=p["name"],
                version=p["version"],
                path=str(manifest.parent),
                targets=targets,
            ))
        except (KeyError, TypeError) as e:
            raise MetadataError(f"cargo metadata 包条目无效: {e}") from e
    return packages


def get_packages(
    cwd: str | Path = ".",
    executor: CommandExecutor | None = None,
    env: dict[str, str] | None = None,
) -> list[PackageDefinition]:
    """查询当前工作区的外部依赖

    Raises:
        ExecutionError: cargo 执行失败
        MetadataError: 输出无法解析
    """
    raw = get_cmd_output(METADATA_CMD, cwd=str(cwd), env=env, executor=executor)
    packages = parse_metadata(raw, cwd)
    logger.info("外部依赖: %d 个包", len(packages))
    return packages
