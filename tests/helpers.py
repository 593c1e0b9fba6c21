"""测试辅助: 假命令执行器 + 伪造目录树"""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

from cargocache.utils.shell import CommandResult

RUSTC_VV = """rustc 1.78.0 (9b00956e5 2024-04-29)
binary: rustc
commit-hash: 9b00956e56009bab2aa15d7bff10916599e3d6d6
commit-date: 2024-04-29
host: x86_64-unknown-linux-gnu
release: 1.78.0
LLVM version: 18.1.2
"""


class FakeExecutor:
    """按命令名返回预置输出，记录每次调用"""

    def __init__(self, outputs: dict[str, CommandResult] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[tuple[list[str], str, dict[str, str] | None]] = []

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append((cmd, cwd, env))
        return self.outputs.get(cmd[0], CommandResult(127, "", f"{cmd[0]}: not found"))


def metadata_json(packages: list[dict], workspace: Path) -> str:
    """生成 cargo metadata 输出（外加一个工作区内的包）"""
    entries = [{
        "name": "app",
        "version": "0.1.0",
        "manifest_path": str(workspace / "Cargo.toml"),
        "targets": [{"kind": ["bin"], "name": "app"}],
    }]
    entries.extend(packages)
    return json.dumps({"packages": entries, "version": 1})


def age(path: Path, days: float) -> None:
    """把修改时间回拨 days 天"""
    t = time.time() - days * 86400
    os.utime(path, (t, t))


def make_file(path: Path, content: str = "", age_days: float = 0) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if age_days:
        age(path, age_days)
    return path


def make_dir(path: Path, age_days: float = 0) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    if age_days:
        age(path, age_days)
    return path


def names(directory: Path) -> set[str]:
    """目录下的直接子项名"""
    if not directory.exists():
        return set()
    return {p.name for p in directory.iterdir()}
