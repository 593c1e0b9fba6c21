"""CLI: 缓存恢复 / 保存 / 裁剪命令"""

from __future__ import annotations

import click

from cargocache.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(show_key)
    group.add_command(restore)
    group.add_command(save)
    group.add_command(prune)
    group.add_command(reset)


@click.command(name="key")
def show_key() -> None:
    """显示主键、恢复键与次级键"""
    try:
        keys = _svc().cache_keys(persist=False)
    except Exception as e:  # noqa: BLE001
        click.echo(f"[warning] 无法计算缓存键: {e}", err=True)
        return
    click.echo(f"key: {keys.key}")
    for k in keys.restore_keys:
        click.echo(f"restore: {k}")
    for k in keys.secondary_keys:
        click.echo(f"secondary: {k}")


@click.command()
def restore() -> None:
    """恢复缓存（非精确命中时预先裁剪 target）"""
    matched = _svc().restore()
    click.echo(f"restored: {matched}" if matched else "restored: -")


@click.command()
def save() -> None:
    """裁剪并保存缓存"""
    ok = _svc().save()
    click.echo("saved" if ok else "not saved")


@click.command()
def prune() -> None:
    """只执行 registry / git / target 裁剪，不保存"""
    results = _svc().prune()
    for name, stats in results.items():
        counts = " ".join(f"{k}={v}" for k, v in stats.to_dict().items())
        click.echo(f"  {name:10s} {counts}")


@click.command()
def reset() -> None:
    """清除运行状态（已保存的指纹与命中键）"""
    _svc().reset()
    click.echo("state cleared")
