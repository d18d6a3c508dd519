"""依赖图安装器

install():
  创建 <dest>/<name> → 计算内容地址 → 版本冲突守卫 → 写 package.json
  → 拉取 makefile → 并发拉取全部源文件 → 生成构建片段 → install_dependencies()

install_dependencies() 每一层分两阶段:
  1. 解析: 每个依赖一个工作线程并发执行远程解析，全部提交后统一等待
  2. 安装: 按依赖声明顺序逐个 install()，install() 内部再递归下一层

并发只存在于同一层的解析阶段和同一个包的源文件拉取阶段，
install() 之间永远串行，因此 deps.mk 的追加不会并发。
单个依赖/源文件失败不取消兄弟任务，全部结果汇总到 InstallReport。
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from clibpm.core.config import Config
from clibpm.core.exceptions import ClibError, FetchError, InstallError, ResolutionError
from clibpm.core.package.buildfile import register_fragment, write_fragment
from clibpm.core.package.fetcher import FileFetcher
from clibpm.core.package.guard import should_install
from clibpm.core.package.models import (
    FAILED,
    INSTALLED,
    SKIPPED,
    Dependency,
    InstallReport,
    Package,
)
from clibpm.core.package.resolver import PackageResolver
from clibpm.core.package.slug import content_url
from clibpm.utils.http import HttpClient, get_http_client
from clibpm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


class PackageInstaller:
    """递归依赖安装器"""

    def __init__(
        self,
        config: Config,
        http: HttpClient | None = None,
        resolver: PackageResolver | None = None,
        fetcher: FileFetcher | None = None,
    ) -> None:
        self.config = config
        http = http or get_http_client()
        self.resolver = resolver or PackageResolver(config, http)
        self.fetcher = fetcher or FileFetcher(
            http, ref=config.file_ref, pin_version=config.pin_file_version,
        )

    def _workers(self, count: int) -> int:
        # max_workers=0 时每个条目一个线程，不设固定上限
        return self.config.max_workers or max(1, count)

    # ------------------------------------------------------------------
    # 单个包安装
    # ------------------------------------------------------------------

    def install(
        self, pkg: Package, dest_dir: str | Path, verbose: bool = False,
    ) -> InstallReport:
        """安装单个包及其依赖

        Raises:
            InstallError: 目录创建、描述文件写入、makefile 拉取等致命错误
        """
        report = InstallReport()
        if not pkg.name:
            raise InstallError("包缺少 name，无法安装", package=pkg.slug)

        dest = Path(dest_dir)
        pkg_dir = dest / pkg.name
        logger.debug("mkdir -p %s", pkg_dir)
        try:
            pkg_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"创建目录失败: {pkg_dir} - {e}", package=pkg.slug, cause=e) from e

        if pkg.url is None:
            if not (pkg.author and pkg.repo_name and pkg.version):
                raise InstallError(
                    f"无法计算内容地址 (author={pkg.author}, repo={pkg.repo_name}, "
                    f"version={pkg.version})",
                    package=pkg.slug,
                )
            pkg.url = content_url(
                pkg.author, pkg.repo_name, pkg.version, self.config.content_url,
            )

        package_json = pkg_dir / "package.json"
        try:
            proceed = should_install(
                pkg.version, package_json,
                label=pkg.repo or pkg.name, verbose=verbose, config=self.config,
            )
        except OSError as e:
            raise InstallError(f"读取 {package_json} 失败: {e}", package=pkg.slug, cause=e) from e
        if not proceed:
            report.add(pkg.slug, SKIPPED, "已安装相同或更高版本")
            return report

        logger.debug("写入: %s", package_json)
        try:
            atomic_write(package_json, pkg.descriptor)
        except OSError as e:
            raise InstallError(f"写入 {package_json} 失败: {e}", package=pkg.slug, cause=e) from e

        if pkg.makefile:
            logger.debug("拉取 makefile: %s/%s", pkg.repo, pkg.makefile)
            try:
                self.fetcher.fetch(pkg, pkg_dir, pkg.makefile, verbose)
            except FetchError as e:
                raise InstallError(
                    f"拉取 makefile 失败: {pkg.makefile} - {e}", package=pkg.slug, cause=e,
                ) from e

        if pkg.src:
            report.merge(self.fetch_sources(pkg, pkg_dir, verbose))
            try:
                write_fragment(pkg_dir, pkg.name, pkg.src)
                register_fragment(self.config.aggregate_path(dest), pkg.name)
            except OSError as e:
                raise InstallError(f"生成构建片段失败: {e}", package=pkg.slug, cause=e) from e

        logger.info("已安装: %s -> %s", pkg.slug, pkg_dir)
        report.add(pkg.slug, INSTALLED)
        report.merge(self.install_dependencies(pkg, dest, verbose))
        return report

    def fetch_sources(
        self, pkg: Package, pkg_dir: Path, verbose: bool = False,
    ) -> InstallReport:
        """每个源文件一个工作线程，全部完成后返回，失败逐条记录"""
        report = InstallReport()
        with ThreadPoolExecutor(max_workers=self._workers(len(pkg.src))) as executor:
            futures = [
                executor.submit(self.fetcher.fetch, pkg, pkg_dir, f, verbose)
                for f in pkg.src
            ]
            for src, future in zip(pkg.src, futures):
                try:
                    future.result()
                except ClibError as e:
                    logger.error("源文件拉取失败: %s:%s - %s", pkg.repo, src, e)
                    report.add(f"{pkg.slug}:{src}", FAILED, str(e))
        return report

    # ------------------------------------------------------------------
    # 依赖安装（两阶段）
    # ------------------------------------------------------------------

    def install_dependencies(
        self, pkg: Package, dest_dir: str | Path, verbose: bool = False,
    ) -> InstallReport:
        """安装 dependencies 段（不含 development）"""
        if not pkg.dependencies:
            return InstallReport()
        return self.install_packages(pkg.dependencies, dest_dir, verbose)

    def install_development(
        self, pkg: Package, dest_dir: str | Path, verbose: bool = False,
    ) -> InstallReport:
        """显式安装 development 段"""
        if not pkg.development:
            return InstallReport()
        return self.install_packages(pkg.development, dest_dir, verbose)

    def install_packages(
        self, deps: list[Dependency], dest_dir: str | Path, verbose: bool = False,
    ) -> InstallReport:
        report = InstallReport()
        slugs = [dep.slug for dep in deps]

        # ---- 阶段 1: 并发解析，全部提交后统一等待 ----
        resolved: list[Package | None] = []
        with ThreadPoolExecutor(max_workers=self._workers(len(slugs))) as executor:
            futures = []
            for slug in slugs:
                logger.info("解析依赖: %s", slug)
                futures.append(executor.submit(self.resolver.resolve, slug, verbose))
            for slug, future in zip(slugs, futures):
                try:
                    resolved.append(future.result())
                except ResolutionError as e:
                    logger.error("依赖解析失败: %s - %s", slug, e)
                    report.add(slug, FAILED, str(e))
                    resolved.append(None)

        # ---- 阶段 2: 串行安装（深度优先递归）----
        for slug, dep_pkg in zip(slugs, resolved):
            if dep_pkg is None:
                continue
            try:
                report.merge(self.install(dep_pkg, dest_dir, verbose))
            except InstallError as e:
                logger.error("依赖安装失败: %s - %s", slug, e)
                report.add(slug, FAILED, str(e))

        if not report.ok:
            logger.warning(
                "安装汇总: %d 成功, %d 跳过, %d 失败",
                len(report.succeeded), len(report.skipped), len(report.failed),
            )
        return report
