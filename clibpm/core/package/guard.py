"""版本冲突守卫

写入新描述文件前读取目标目录下已安装的 package.json:
  - 不存在 → 安装
  - 新版本 <= 已安装版本 → 跳过（视为成功，是唯一的去重/防降级机制）
  - 否则 → 覆盖安装

无法解析为语义版本的字符串（如分支名 master）按 0 比较。
"""

from __future__ import annotations

import logging
from pathlib import Path

from packaging.version import InvalidVersion, Version

from clibpm.core.config import Config
from clibpm.core.exceptions import ParseError
from clibpm.core.package.builder import load_local_package

logger = logging.getLogger(__name__)

_ZERO = Version("0")


def parse_semver(text: str | None) -> Version:
    if not text:
        return _ZERO
    try:
        return Version(text)
    except InvalidVersion:
        return _ZERO


def compare_versions(a: str | None, b: str | None) -> int:
    """比较两个版本字符串，返回 -1 / 0 / 1"""
    va, vb = parse_semver(a), parse_semver(b)
    if va < vb:
        return -1
    if va > vb:
        return 1
    return 0


def installed_version(descriptor_path: Path, config: Config | None = None) -> str | None:
    """读取已安装描述文件的版本；不存在返回 None，无效时告警后视为未安装"""
    try:
        local = load_local_package(descriptor_path, config=config)
    except FileNotFoundError:
        return None
    except (ParseError, UnicodeDecodeError) as e:
        logger.warning("已安装的描述文件无效，将覆盖: %s - %s", descriptor_path, e)
        return None
    return local.version or ""


def should_install(
    new_version: str | None,
    descriptor_path: Path,
    *,
    label: str = "",
    verbose: bool = False,
    config: Config | None = None,
) -> bool:
    """判断是否需要（重新）安装"""
    current = installed_version(descriptor_path, config)
    if current is None:
        return True
    if compare_versions(new_version, current) <= 0:
        if verbose:
            logger.info(
                "跳过: 新版本 v%s 不高于已安装版本 v%s (%s)", new_version, current, label,
            )
        return False
    return True
