"""CLI — 安装与查询命令"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from clibpm.core.config import get_config
from clibpm.core.exceptions import InstallError, ParseError, ResolutionError
from clibpm.core.package import (
    InstallReport,
    PackageInstaller,
    PackageResolver,
    load_local_package,
)
from clibpm.core.package.models import FAILED


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(info)


def _print_report(report: InstallReport) -> None:
    s = report.summary()
    click.echo(
        f"安装完成: {s['installed']} 成功, {s['skipped']} 跳过, {s['failed']} 失败"
    )
    for r in report.failed:
        click.echo(f"  [FAIL] {r.slug}: {r.message}")


@click.command()
@click.argument("slugs", nargs=-1)
@click.option("--out", "-o", default=None, help="依赖安装目录（默认读配置 deps_dir）")
@click.option("--dev", is_flag=True, help="同时安装 development 依赖")
@click.option("--workers", "-w", default=None, type=int, help="每批并发线程数（0 表示不限）")
@click.option("--verbose", "-v", is_flag=True, help="输出详细过程")
def install(
    slugs: tuple[str, ...], out: str | None, dev: bool,
    workers: int | None, verbose: bool,
) -> None:
    """安装指定的包；不指定时安装 ./package.json 中声明的依赖"""
    cfg = get_config()
    if workers is not None:
        cfg.max_workers = max(0, workers)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    dest = Path(out or cfg.deps_dir)
    installer = PackageInstaller(cfg)
    report = InstallReport()

    if not slugs:
        try:
            pkg = load_local_package("package.json", verbose=verbose, config=cfg)
        except (FileNotFoundError, ParseError) as e:
            raise click.ClickException(str(e)) from e
        report.merge(installer.install_dependencies(pkg, dest, verbose))
        if dev:
            report.merge(installer.install_development(pkg, dest, verbose))
    else:
        for slug in slugs:
            try:
                pkg = installer.resolver.resolve(slug, verbose)
                report.merge(installer.install(pkg, dest, verbose))
                if dev:
                    report.merge(installer.install_development(pkg, dest, verbose))
            except (ResolutionError, InstallError) as e:
                report.add(slug, FAILED, str(e))

    _print_report(report)
    if not report.ok:
        sys.exit(1)


@click.command()
@click.argument("slug")
def info(slug: str) -> None:
    """解析包并显示元信息（不安装）"""
    resolver = PackageResolver(get_config())
    try:
        pkg = resolver.resolve(slug)
    except ResolutionError as e:
        raise click.ClickException(f"[{e.step}] {e}") from e

    click.echo(f"{pkg.repo}@{pkg.version}")
    for label, value in (
        ("name", pkg.name),
        ("description", pkg.description),
        ("license", pkg.license),
        ("install", pkg.install),
        ("makefile", pkg.makefile),
        ("endpoint", pkg.api_endpoint),
    ):
        if value:
            click.echo(f"  {label:12s} {value}")
    if pkg.src:
        click.echo(f"  {'src':12s} {', '.join(pkg.src)}")
    for title, deps in (("dependencies", pkg.dependencies), ("development", pkg.development)):
        if deps:
            click.echo(f"  {title}:")
            for dep in deps:
                click.echo(f"    {dep.slug}")
