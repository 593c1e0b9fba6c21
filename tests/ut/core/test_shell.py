"""子进程执行测试"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from helpers import FakeExecutor

from cargocache.core.exceptions import ExecutionError
from cargocache.utils.shell import CommandResult, LocalExecutor, get_cmd_output


class TestLocalExecutor:
    def test_success(self, tmp_path: Path) -> None:
        r = LocalExecutor().execute(["echo", "hello"], cwd=str(tmp_path))
        assert r.success
        assert "hello" in r.stdout

    def test_env_merged_for_single_call(self, tmp_path: Path) -> None:
        r = LocalExecutor().execute(["env"], cwd=str(tmp_path), env={"MY_TEST_VAR": "42"})
        assert "MY_TEST_VAR=42" in r.stdout
        assert "PATH=" in r.stdout
        assert "MY_TEST_VAR" not in os.environ

    def test_missing_binary(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutionError, match="无法启动"):
            LocalExecutor().execute(["definitely-not-a-real-binary-xyz"], cwd=str(tmp_path))


class TestGetCmdOutput:
    def test_stdout(self) -> None:
        executor = FakeExecutor({"rustc": CommandResult(0, "out", "")})
        assert get_cmd_output(["rustc", "-vV"], executor=executor) == "out"

    def test_failure(self) -> None:
        executor = FakeExecutor({"cargo": CommandResult(101, "", "boom")})
        with pytest.raises(ExecutionError, match="cargo 失败 \\(rc=101\\): boom"):
            get_cmd_output(["cargo", "metadata"], executor=executor)
