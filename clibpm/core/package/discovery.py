"""API 端点发现

按配置顺序逐个探测候选 API 根地址，返回第一个能应答
<base>repos/<owner>/<name> 的地址。任何非成功响应（含网络错误）都继续下一个。
"""

from __future__ import annotations

import logging
import threading

from clibpm.utils.http import HttpClient, get_http_client

logger = logging.getLogger(__name__)


class EndpointDiscovery:
    """候选端点探测器

    cache=True 时按 (owner, name) 缓存进程内的探测结果；
    默认每次解析都重新探测。
    """

    def __init__(self, http: HttpClient | None = None, cache: bool = False) -> None:
        self.http = http or get_http_client()
        self.cache = cache
        self._found: dict[tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def discover(self, owner: str, name: str, candidates: list[str]) -> str | None:
        """返回第一个探测成功的根地址，全部失败或无候选时返回 None"""
        key = (owner, name)
        if self.cache:
            with self._lock:
                if key in self._found:
                    return self._found[key]

        for base in candidates:
            probe = f"{base}repos/{owner}/{name}"
            logger.debug("探测 API 根地址: %s", probe)
            res = self.http.get(probe)
            if res.ok:
                if self.cache:
                    with self._lock:
                        self._found[key] = base
                return base
            logger.debug("  探测失败 (status=%s): %s", res.status, base)
        return None
