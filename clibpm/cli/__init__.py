"""clibpm 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from clibpm import __version__
from clibpm.core.config import init_config
from clibpm.core.exceptions import ConfigError
from clibpm.utils.logger import setup_logging

DEFAULT_CONFIG = ".clibpm.yml"


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path",
    default=lambda: os.getenv("CLIBPM_CONFIG", DEFAULT_CONFIG),
    help="配置文件路径（YAML 或 JSON）",
)
def main(config_path: str) -> None:
    """clibpm - C 包管理工具"""
    setup_logging(
        level=os.getenv("CLIBPM_LOG_LEVEL", "INFO"),
        json_output=os.getenv("CLIBPM_LOG_JSON", "") == "1",
    )
    try:
        init_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


# 注册各领域子命令
from clibpm.cli.cmd_install import register as _reg_install  # noqa: E402

_reg_install(main)
