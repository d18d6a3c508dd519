"""package.json 描述文件 → Package

职责:
- 解析描述文本，提取标量字段 / src 列表 / 两个依赖段
- 从本地磁盘读取描述文件构建 Package（不访问网络）

标量字段缺失或类型不符时记为 None，不视为错误；src 中出现非字符串条目、
依赖段中任一条目无效时整体失败（依赖段按段全有或全无）。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from clibpm.core.config import Config
from clibpm.core.exceptions import ParseError
from clibpm.core.package.models import Dependency, Package
from clibpm.core.package.slug import normalize_version, parse_name, parse_owner
from clibpm.utils.yaml_io import read_text

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = (
    "name", "repo", "version", "license", "description", "install", "makefile",
)


def _get_string(obj: dict[str, Any], key: str) -> str | None:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def _parse_src(files: list[Any]) -> list[str]:
    src: list[str] = []
    for i, item in enumerate(files):
        if not isinstance(item, str):
            raise ParseError(f"src[{i}] 不是字符串: {item!r}")
        logger.debug("源文件: %s", item)
        src.append(item)
    return src


def _parse_deps(section: str, obj: dict[str, Any], config: Config) -> list[Dependency]:
    """解析 dependencies / development 段，任一条目无效则整段失败"""
    deps: list[Dependency] = []
    for repo, version in obj.items():
        if not isinstance(version, str):
            raise ParseError(f"{section} 中 {repo!r} 的版本不是字符串: {version!r}")
        dep = Dependency.from_entry(repo, version, config)
        logger.debug("依赖: %s", dep.slug)
        deps.append(dep)
    return deps


def build_package(
    descriptor: str, verbose: bool = False, config: Config | None = None,
) -> Package:
    """从描述文本构建 Package

    Raises:
        ParseError: 文本不是合法 JSON、顶层不是对象、src 或依赖段条目无效
    """
    cfg = config or Config()
    try:
        root = json.loads(descriptor)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"无法解析 package.json: {e}") from e
    if not isinstance(root, dict):
        raise ParseError("无效的 package.json: 顶层不是对象")

    fields = {key: _get_string(root, key) for key in _SCALAR_FIELDS}
    pkg = Package(descriptor=descriptor, **fields)
    if pkg.version:
        pkg.version = normalize_version(pkg.version, cfg.default_version)
    logger.debug("构建包: %s", pkg.repo)

    if pkg.repo:
        pkg.author = parse_owner(pkg.repo, cfg.default_owner)
        pkg.repo_name = parse_name(pkg.repo)
    elif verbose:
        logger.warning("package.json 缺少 repo 字段: %s", pkg.name)

    src = root.get("src")
    if isinstance(src, list):
        pkg.src = _parse_src(src)

    deps = root.get("dependencies")
    if isinstance(deps, dict):
        pkg.dependencies = _parse_deps("dependencies", deps, cfg)

    devs = root.get("development")
    if isinstance(devs, dict):
        pkg.development = _parse_deps("development", devs, cfg)

    return pkg


def load_local_package(
    path: str | Path, verbose: bool = False, config: Config | None = None,
) -> Package:
    """读取本地 package.json 构建 Package

    Raises:
        FileNotFoundError: 描述文件不存在
        ParseError: 内容无效
    """
    text = read_text(path)
    if text is None:
        raise FileNotFoundError(f"package.json 不存在: {path}")
    return build_package(text, verbose=verbose, config=config)
