"""共享 fixture"""

from __future__ import annotations

import pytest
from helpers import RUSTC_VV, FakeExecutor

from cargocache.core.models import PackageDefinition
from cargocache.utils.shell import CommandResult


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor({"rustc": CommandResult(0, RUSTC_VV, "")})


@pytest.fixture()
def foo_package() -> PackageDefinition:
    return PackageDefinition(
        name="foo", version="1.0.0",
        path="/home/ci/.cargo/registry/src/index-abc/foo-1.0.0",
        targets=("foo",),
    )
