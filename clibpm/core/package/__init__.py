"""包管理核心

- slug.py: slug / URL 解析
- models.py: Package / Dependency / InstallReport
- builder.py: package.json → Package
- discovery.py: API 端点发现
- resolver.py: slug 远程解析
- fetcher.py: 源文件拉取
- guard.py: 版本冲突守卫
- buildfile.py: 构建片段与 deps.mk
- installer.py: 递归依赖安装
"""

from clibpm.core.package.builder import build_package, load_local_package
from clibpm.core.package.discovery import EndpointDiscovery
from clibpm.core.package.fetcher import FileFetcher
from clibpm.core.package.installer import PackageInstaller
from clibpm.core.package.models import (
    Dependency,
    InstallReport,
    InstallResult,
    Package,
)
from clibpm.core.package.resolver import PackageResolver

__all__ = [
    "Dependency",
    "EndpointDiscovery",
    "FileFetcher",
    "InstallReport",
    "InstallResult",
    "Package",
    "PackageInstaller",
    "PackageResolver",
    "build_package",
    "load_local_package",
]
