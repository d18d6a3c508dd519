"""源文件拉取

按 contents API 解析单个源文件的 download_url 并下载到包目录。

路径规则:
  - "foo/bar.c"      → <dest>/bar.c          目录部分被丢弃
  - "@vendor/lib.c"  → <dest>/vendor/lib.c   "@" 前缀保留完整子路径

文件请求固定使用 file_ref（默认 master），与包解析出的版本无关；
pin_version=True 时改用包版本。
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path

from clibpm.core.config import DEFAULT_REPO_VERSION
from clibpm.core.exceptions import FetchError, NetworkError
from clibpm.core.package.models import Package
from clibpm.core.package.resolver import extract_download_url
from clibpm.utils.http import HttpClient, get_http_client

logger = logging.getLogger(__name__)

LITERAL_PREFIX = "@"


def strip_literal(relative_path: str) -> str:
    """去掉路径字面量前缀 "@" """
    if relative_path.startswith(LITERAL_PREFIX):
        return relative_path[len(LITERAL_PREFIX):]
    return relative_path


def local_name(relative_path: str) -> str:
    """源文件在包目录中的相对落盘路径"""
    if relative_path.startswith(LITERAL_PREFIX):
        return strip_literal(relative_path)
    return posixpath.basename(relative_path)


def destination(dest_dir: str | Path, relative_path: str) -> Path:
    """计算落盘路径，拒绝逃出 dest_dir 的路径"""
    base = Path(dest_dir)
    dest = base / local_name(relative_path)
    if not dest.resolve().is_relative_to(base.resolve()):
        raise FetchError(f"源文件路径越界: {relative_path}", path=relative_path)
    return dest


class FileFetcher:
    """包源文件拉取器"""

    def __init__(
        self,
        http: HttpClient | None = None,
        ref: str = DEFAULT_REPO_VERSION,
        pin_version: bool = False,
    ) -> None:
        self.http = http or get_http_client()
        self.ref = ref
        self.pin_version = pin_version

    def contents_url(self, pkg: Package, relative_path: str) -> str:
        ref = pkg.version if self.pin_version and pkg.version else self.ref
        return (
            f"{pkg.api_endpoint}repos/{pkg.author}/{pkg.name}"
            f"/contents/{strip_literal(relative_path)}?ref={ref}"
        )

    def fetch(
        self, pkg: Package, dest_dir: str | Path, relative_path: str,
        verbose: bool = False,
    ) -> Path:
        """拉取单个源文件，返回落盘路径

        Raises:
            FetchError: 元信息请求失败、缺少 download_url、目录创建失败或下载失败
        """
        url = self.contents_url(pkg, relative_path)
        logger.debug("拉取文件: %s/%s (%s)", pkg.repo, relative_path, url)

        res = self.http.get(url)
        if not res.ok:
            raise FetchError(
                f"无法获取 {pkg.repo}:{relative_path} 元信息 (status={res.status})",
                path=relative_path,
            )
        download_url = extract_download_url(res.body)
        if download_url is None:
            raise FetchError(
                f"{pkg.repo}:{relative_path} 元信息缺少 download_url",
                path=relative_path,
            )

        dest = destination(dest_dir, relative_path)
        sub_dir = dest.parent
        try:
            sub_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FetchError(f"创建目录失败: {sub_dir} - {e}", path=relative_path, cause=e) from e

        if verbose:
            logger.info("拉取: %s -> %s", download_url, dest)
        try:
            self.http.download(download_url, dest)
        except NetworkError as e:
            raise FetchError(
                f"无法下载 {pkg.repo}:{relative_path} - {e}", path=relative_path, cause=e,
            ) from e

        if verbose:
            logger.info("已保存: %s", dest)
        return dest
