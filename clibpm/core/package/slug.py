"""slug / URL 解析

纯字符串逻辑，不做任何 IO:
  - [owner/]name[@version] 拆分为 (owner, name, version)
  - 拼装 slug、仓库字符串和原始内容下载地址

版本通配符 "*" 在此统一归一化为默认分支，调用方拿到的版本永远不是 "*"。
"""

from __future__ import annotations

from clibpm.core.config import (
    DEFAULT_REPO_OWNER,
    DEFAULT_REPO_VERSION,
    GITHUB_CONTENT_URL,
)
from clibpm.core.exceptions import ParseError
from clibpm.utils.net import has_url_scheme

WILDCARD_VERSION = "*"


def normalize_version(version: str | None, default_version: str = DEFAULT_REPO_VERSION) -> str:
    """空版本或通配符 "*" 归一化为默认分支"""
    if not version or version == WILDCARD_VERSION:
        return default_version
    return version


def _split(slug: str) -> tuple[str, str, str]:
    if not slug:
        raise ParseError("slug 为空")
    head, _, version = slug.partition("@")
    owner, sep, name = head.partition("/")
    if not sep:
        owner, name = "", head
    return owner, name, version


def parse_owner(slug: str, default_owner: str = DEFAULT_REPO_OWNER) -> str:
    """解析 slug 中的 owner，缺省时返回 default_owner"""
    owner, _, _ = _split(slug)
    return owner or default_owner


def parse_name(slug: str) -> str:
    """解析 slug 中的包名"""
    _, name, _ = _split(slug)
    if not name:
        raise ParseError(f"slug 缺少包名: {slug!r}")
    return name


def parse_version(slug: str, default_version: str = DEFAULT_REPO_VERSION) -> str:
    """解析 slug 中的版本，缺省或 "*" 时返回 default_version"""
    _, _, version = _split(slug)
    return normalize_version(version, default_version)


def parse_slug(
    slug: str,
    default_owner: str = DEFAULT_REPO_OWNER,
    default_version: str = DEFAULT_REPO_VERSION,
) -> tuple[str, str, str]:
    """一次性解析 (owner, name, version)"""
    return (
        parse_owner(slug, default_owner),
        parse_name(slug),
        parse_version(slug, default_version),
    )


def format_slug(owner: str, name: str, version: str) -> str:
    return f"{owner}/{name}@{version}"


def format_repo(owner: str, name: str) -> str:
    return f"{owner}/{name}"


def content_url(
    owner: str, name: str, version: str, base: str = GITHUB_CONTENT_URL,
) -> str:
    """原始内容根地址: <base><owner>/<name>/<version>

    version 本身已是完整 URL 时原样返回。
    """
    if has_url_scheme(version):
        return version
    return f"{base}{owner}/{name}/{version}"


def content_url_from_repo(
    repo: str, version: str, base: str = GITHUB_CONTENT_URL,
) -> str:
    """同 content_url，但以 "owner/name" 仓库字符串为键"""
    return f"{base}{repo}/{version}"
