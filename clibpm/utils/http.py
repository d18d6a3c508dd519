"""HTTP 工具 — 统一远程调用

通过 HttpClient 协议抽象 GET / 下载，方便测试替换。
默认实现基于 urllib.request，同步阻塞，不做重试。
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from clibpm import __version__
from clibpm.core.exceptions import NetworkError, ValidationError
from clibpm.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


# =========================================================================
# 响应结果
# =========================================================================

@dataclass
class HttpResponse:
    """GET 响应（与 urllib 解耦）"""

    ok: bool
    status: int = 0
    body: bytes = b""
    error: str = ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


# =========================================================================
# 客户端协议
# =========================================================================

class HttpClient(Protocol):
    """HTTP 客户端协议

    get() 对网络错误和非 2xx 状态都返回 ok=False，不抛异常；
    download() 失败时抛 NetworkError，且不留下不完整的文件。
    """

    def get(self, url: str) -> HttpResponse:
        ...

    def download(self, url: str, dest: Path) -> None:
        ...


# =========================================================================
# 默认实现: urllib
# =========================================================================

class UrllibHttpClient:
    """基于 urllib.request 的默认 HTTP 客户端"""

    def __init__(self, timeout: float | None = None) -> None:
        # None 表示无限等待，与原有阻塞行为一致
        self.timeout = timeout or None
        self.headers = {"User-Agent": f"clibpm/{__version__}"}

    def _open(self, url: str):  # noqa: ANN202
        validate_url_scheme(url, context="http get")
        req = urllib.request.Request(url, headers=self.headers)
        return urllib.request.urlopen(req, timeout=self.timeout)  # nosec B310

    def get(self, url: str) -> HttpResponse:
        logger.debug("GET %s", url)
        try:
            with self._open(url) as resp:
                status = resp.status
                body = resp.read()
        except urllib.error.HTTPError as e:
            return HttpResponse(ok=False, status=e.code, error=str(e))
        except (urllib.error.URLError, OSError, ValidationError) as e:
            return HttpResponse(ok=False, error=str(e))
        return HttpResponse(ok=200 <= status < 300, status=status, body=body)

    def download(self, url: str, dest: Path) -> None:
        logger.debug("下载 %s -> %s", url, dest)
        try:
            with self._open(url) as resp, open(dest, "wb") as f:
                for chunk in iter(lambda: resp.read(_CHUNK_SIZE), b""):
                    f.write(chunk)
        except urllib.error.HTTPError as e:
            dest.unlink(missing_ok=True)
            raise NetworkError(f"下载失败: {url} - {e}", url=url, status=e.code) from e
        except (urllib.error.URLError, OSError, ValidationError) as e:
            dest.unlink(missing_ok=True)
            raise NetworkError(f"下载失败: {url} - {e}", url=url) from e


# =========================================================================
# 全局默认客户端（可替换）
# =========================================================================

_default_client: HttpClient = UrllibHttpClient()


def get_http_client() -> HttpClient:
    """获取全局默认 HTTP 客户端"""
    return _default_client


def set_http_client(client: HttpClient) -> None:
    """替换全局默认 HTTP 客户端（用于测试或自定义传输）"""
    global _default_client  # noqa: PLW0603
    _default_client = client
