"""CLI: 指纹与包装器辅助命令"""

from __future__ import annotations

import click

from cargocache.core.exceptions import CargoCacheError


def register(group: click.Group) -> None:
    group.add_command(hash_cmd)
    group.add_command(wrapper_version)


@click.command(name="hash")
@click.argument("patterns", nargs=-1, required=True)
@click.option("--root", default=".", help="pattern 相对的根目录")
def hash_cmd(patterns: tuple[str, ...], root: str) -> None:
    """计算匹配文件集合的内容指纹"""
    from cargocache.core.fingerprint import hash_files
    try:
        click.echo(hash_files(patterns, root))
    except CargoCacheError as e:
        raise click.ClickException(str(e)) from e


@click.command(name="wrapper-version")
def wrapper_version() -> None:
    """解析编译器包装器版本（latest 时查询 crates.io）"""
    from cargocache.core.config import get_config
    from cargocache.core.wrapper import resolve_version
    try:
        click.echo(resolve_version(get_config().wrapper))
    except CargoCacheError as e:
        raise click.ClickException(str(e)) from e
