"""集中配置管理

替代各模块散落的 DEFAULT_* 常量，提供统一的配置入口。
支持从 YAML 文件加载（config.json 也是合法 YAML）+ 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clibpm.core.exceptions import ConfigError
from clibpm.utils.yaml_io import load_yaml, parse_yaml_text

logger = logging.getLogger(__name__)

DEFAULT_REPO_OWNER = "clibs"
DEFAULT_REPO_VERSION = "master"
GITHUB_CONTENT_URL = "https://raw.githubusercontent.com/"


@dataclass
class Config:
    """包管理全局配置"""

    # 远程仓库 API 候选地址，按顺序探测；为空时禁用端点发现
    api_endpoints: list[str] = field(default_factory=list)

    # slug 默认值
    default_owner: str = DEFAULT_REPO_OWNER
    default_version: str = DEFAULT_REPO_VERSION
    content_url: str = GITHUB_CONTENT_URL

    # 安装目录
    deps_dir: str = "deps"
    aggregate_file: str = "deps.mk"

    # 执行
    max_workers: int = 0          # 0 表示每个条目一个工作线程
    http_timeout: int = 0         # 秒，0 表示不设超时
    file_ref: str = DEFAULT_REPO_VERSION
    pin_file_version: bool = False
    cache_endpoints: bool = False

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.api_endpoints, list) or not all(
            isinstance(u, str) for u in self.api_endpoints
        ):
            raise ConfigError(
                f"api_endpoints 必须是字符串列表: {self.api_endpoints!r}"
            )
        if self.max_workers < 0:
            raise ConfigError(f"max_workers 不能为负数: {self.max_workers}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    @classmethod
    def from_text(cls, text: str | None) -> Config:
        """从配置文本（YAML 或 JSON）加载，空文本返回默认"""
        if not text:
            return cls()
        try:
            data = parse_yaml_text(text, source="<config>")
        except yaml.YAMLError as e:
            raise ConfigError(f"配置内容无法解析: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """从配置文件加载，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        if not data:
            return cls()
        return cls.from_dict(data)

    def aggregate_path(self, dest_dir: str | Path) -> Path:
        """deps.mk 路径：相对路径时放在依赖目录的上一级"""
        p = Path(self.aggregate_file)
        if p.is_absolute():
            return p
        return Path(dest_dir).parent / p

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str | Path) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s (%d 个 API 端点)", path, len(_current.api_endpoints))
    return _current


def reset_config() -> None:
    """清除全局配置（测试用）"""
    global _current  # noqa: PLW0603
    _current = None
