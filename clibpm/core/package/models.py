"""包管理数据模型

数据类:
- Dependency: 依赖图中的一条边
- Package: 一个已解析的包版本
- InstallResult / InstallReport: 安装结果汇总
"""

from __future__ import annotations

from dataclasses import dataclass, field

from clibpm.core.config import Config
from clibpm.core.package.slug import (
    format_slug,
    normalize_version,
    parse_name,
    parse_owner,
)


@dataclass
class Dependency:
    """单条依赖 (author/name@version)，version 永远不是 "*" """

    author: str
    name: str
    version: str

    @classmethod
    def from_entry(cls, repo: str, version: str, config: Config | None = None) -> Dependency:
        """从 dependencies 段的 "owner/name": "version" 条目构建"""
        cfg = config or Config()
        return cls(
            author=parse_owner(repo, cfg.default_owner),
            name=parse_name(repo),
            version=normalize_version(version, cfg.default_version),
        )

    @property
    def slug(self) -> str:
        return format_slug(self.author, self.name, self.version)


@dataclass
class Package:
    """一个已解析的包版本"""

    name: str | None = None
    repo: str | None = None
    version: str | None = None
    license: str | None = None
    description: str | None = None
    install: str | None = None
    makefile: str | None = None
    author: str | None = None
    repo_name: str | None = None       # 仓库名可能与包名不同 (thing.c -> thing)
    descriptor: str = ""               # package.json 原文，安装时原样落盘
    src: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    development: list[Dependency] = field(default_factory=list)
    api_endpoint: str | None = None    # 解析该包时发现的 API 根地址
    url: str | None = None             # 原始内容根地址，安装时惰性计算

    @property
    def slug(self) -> str:
        return format_slug(self.author or "", self.name or "", self.version or "")


# =========================================================================
# 安装结果
# =========================================================================

INSTALLED = "installed"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class InstallResult:
    """单个条目（包或源文件）的安装结果"""

    slug: str
    status: str  # "installed", "skipped", "failed"
    message: str = ""


@dataclass
class InstallReport:
    """安装汇总 — 每个依赖、每个源文件都会尝试，失败逐条记录"""

    results: list[InstallResult] = field(default_factory=list)

    def add(self, slug: str, status: str, message: str = "") -> InstallResult:
        result = InstallResult(slug=slug, status=status, message=message)
        self.results.append(result)
        return result

    def merge(self, other: InstallReport) -> InstallReport:
        self.results.extend(other.results)
        return self

    @property
    def succeeded(self) -> list[InstallResult]:
        return [r for r in self.results if r.status == INSTALLED]

    @property
    def skipped(self) -> list[InstallResult]:
        return [r for r in self.results if r.status == SKIPPED]

    @property
    def failed(self) -> list[InstallResult]:
        return [r for r in self.results if r.status == FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "installed": len(self.succeeded),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }
