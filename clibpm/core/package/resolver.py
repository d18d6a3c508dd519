"""远程包解析器

slug → Package 的完整流程，每一步都是硬失败点:
  1. 解析 slug (owner, name, version)，缺省值生效
  2. 端点发现，找不到可用 API 根地址则失败
  3. GET <endpoint>repos/<owner>/<name>/contents/package.json?<version>，取 download_url
  4. GET download_url 得到描述文本
  5. 构建 Package 并记录所用端点
  6. 版本协调：slug 显式指定（非默认分支）时覆盖描述文件中的版本
  7. 作者协调：描述文件声明的作者优先
  8. 规范仓库串与描述文件 repo 不一致时，直接按描述文件 repo 计算内容地址

任一步失败抛 ResolutionError（携带 step 与原因），不返回半成品。
"""

from __future__ import annotations

import json
import logging

from clibpm.core.config import Config
from clibpm.core.exceptions import ParseError, ResolutionError
from clibpm.core.package.builder import build_package
from clibpm.core.package.discovery import EndpointDiscovery
from clibpm.core.package.models import Package
from clibpm.core.package.slug import content_url_from_repo, format_repo, parse_slug
from clibpm.utils.http import HttpClient, get_http_client

logger = logging.getLogger(__name__)


def extract_download_url(body: bytes) -> str | None:
    """从 contents API 响应中取 download_url"""
    try:
        obj = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(obj, dict):
        return None
    url = obj.get("download_url")
    return url if isinstance(url, str) and url else None


class PackageResolver:
    """slug 远程解析器"""

    def __init__(
        self,
        config: Config,
        http: HttpClient | None = None,
        discovery: EndpointDiscovery | None = None,
    ) -> None:
        self.config = config
        self.http = http or get_http_client()
        self.discovery = discovery or EndpointDiscovery(
            self.http, cache=config.cache_endpoints,
        )

    def resolve(self, slug: str, verbose: bool = False) -> Package:
        """解析 slug 为完整的 Package

        Raises:
            ResolutionError: 任一步骤失败
        """
        cfg = self.config
        logger.debug("解析包: %s", slug)

        # ---- 1. 拆分 slug ----
        try:
            owner, name, version = parse_slug(
                slug, cfg.default_owner, cfg.default_version,
            )
        except ParseError as e:
            raise ResolutionError(f"slug 无效: {slug!r}", step="parse", cause=e) from e

        # ---- 2. 端点发现 ----
        endpoint = self.discovery.discover(owner, name, cfg.api_endpoints)
        if endpoint is None:
            raise ResolutionError(
                f"找不到可用的 API 端点: {owner}/{name}", step="discover",
            )
        logger.info("解析 %s/%s@%s (endpoint=%s)", owner, name, version, endpoint)

        # ---- 3. 查询 package.json 元信息 ----
        meta_url = f"{endpoint}repos/{owner}/{name}/contents/package.json?{version}"
        res = self.http.get(meta_url)
        if not res.ok:
            raise ResolutionError(
                f"无法获取 {owner}/{name}:package.json (status={res.status}) {res.error}",
                step="metadata",
            )
        download_url = extract_download_url(res.body)
        if download_url is None:
            raise ResolutionError(
                f"{owner}/{name}:package.json 元信息缺少 download_url", step="metadata",
            )

        # ---- 4. 下载描述文本 ----
        res = self.http.get(download_url)
        if not res.ok:
            raise ResolutionError(
                f"无法下载 {owner}/{name}:package.json (status={res.status}) {res.error}",
                step="download",
            )

        # ---- 5. 构建 Package ----
        try:
            pkg = build_package(res.text, verbose=verbose, config=cfg)
        except (ParseError, UnicodeDecodeError) as e:
            raise ResolutionError(
                f"{owner}/{name}:package.json 无效: {e}", step="build", cause=e,
            ) from e
        pkg.api_endpoint = endpoint
        if not pkg.name:
            pkg.name = name

        # ---- 6. 版本协调：显式指定的版本优先 ----
        if pkg.version:
            if version != cfg.default_version:
                logger.debug("强制版本号: %s (描述文件: %s)", version, pkg.version)
                pkg.version = version
        else:
            pkg.version = version

        # ---- 7. 作者协调：描述文件优先 ----
        if not pkg.author:
            pkg.author = owner
        elif pkg.author != owner:
            logger.debug("沿用描述文件作者: %s (slug: %s)", pkg.author, owner)

        # ---- 8. 仓库名与包名不一致时直接计算内容地址 ----
        repo = format_repo(pkg.author, pkg.name)
        if pkg.repo:
            if pkg.repo != repo:
                pkg.url = content_url_from_repo(pkg.repo, pkg.version, cfg.content_url)
        else:
            pkg.repo = repo
            pkg.repo_name = pkg.name

        return pkg
