"""构建片段生成

每个包安装后生成 <dest>/<name>/<name>.mk，列出全部源文件:

    deps__a_SOURCES += deps/<name>/<file> deps/<name>/<file> ...

并在汇总 deps.mk 中登记一行 include（先删除已有的同名行再追加），
直接在进程内读写文件，不调用 shell。
"""

from __future__ import annotations

import logging
from pathlib import Path

from clibpm.core.package.fetcher import local_name
from clibpm.utils.yaml_io import atomic_write, read_text

logger = logging.getLogger(__name__)

SOURCES_VAR = "deps__a_SOURCES"


def fragment_content(name: str, sources: list[str]) -> str:
    line = f"{SOURCES_VAR} += "
    for src in sources:
        line += f"deps/{name}/{local_name(src)} "
    return line + "\n"


def include_line(name: str) -> str:
    return f"include $(top_srcdir)/deps/{name}/{name}.mk"


def write_fragment(pkg_dir: Path, name: str, sources: list[str]) -> Path:
    """写入 <pkg_dir>/<name>.mk"""
    path = pkg_dir / f"{name}.mk"
    atomic_write(path, fragment_content(name, sources))
    logger.debug("已生成构建片段: %s", path)
    return path


def register_fragment(aggregate: Path, name: str) -> None:
    """在 deps.mk 中登记包的构建片段，重复登记只保留一行"""
    entry = include_line(name)
    existing = read_text(aggregate) or ""
    lines = [line for line in existing.splitlines() if line != entry]
    lines.append(entry)
    atomic_write(aggregate, "\n".join(lines) + "\n")
    logger.debug("已登记 %s -> %s", name, aggregate)
