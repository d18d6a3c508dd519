"""测试共享 fixture — 内存版 HTTP 客户端 + 配置

FakeHttpClient 按 URL 返回预置内容，记录全部请求，无需真实网络:

  http.add_package("acme", "foo", {...}, version="1.0.0", files={"foo.c": b"..."})

会同时登记:
  <API>repos/acme/foo                                   端点探测
  <API>repos/acme/foo/contents/package.json?1.0.0       元信息 (download_url)
  <RAW>acme/foo/1.0.0/package.json                      描述文件原文
  <API>repos/acme/foo/contents/foo.c?ref=master         源文件元信息
  <RAW>acme/foo/master/foo.c                            源文件内容
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from clibpm.core.config import Config
from clibpm.core.exceptions import NetworkError
from clibpm.utils.http import HttpResponse

API = "https://api.example.com/"
RAW = "https://raw.example.com/"


class FakeHttpClient:
    """内存 HTTP 客户端，未登记的 URL 一律 404"""

    def __init__(self) -> None:
        self.routes: dict[str, bytes] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def add(self, url: str, body: bytes | str | dict) -> None:
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = body

    def add_file(
        self, owner: str, name: str, path: str, content: bytes,
        ref: str = "master", endpoint: str = API,
    ) -> None:
        remote = path[1:] if path.startswith("@") else path
        download_url = f"{RAW}{owner}/{name}/{ref}/{remote}"
        self.add(
            f"{endpoint}repos/{owner}/{name}/contents/{remote}?ref={ref}",
            {"download_url": download_url},
        )
        self.add(download_url, content)

    def add_package(
        self, owner: str, name: str, descriptor: dict | str,
        version: str = "master", files: dict[str, bytes] | None = None,
        endpoint: str = API,
    ) -> str:
        """登记一个可解析的包，返回描述文件的 download_url"""
        self.add(f"{endpoint}repos/{owner}/{name}", {"full_name": f"{owner}/{name}"})
        download_url = f"{RAW}{owner}/{name}/{version}/package.json"
        self.add(
            f"{endpoint}repos/{owner}/{name}/contents/package.json?{version}",
            {"download_url": download_url},
        )
        self.add(download_url, descriptor)
        for path, content in (files or {}).items():
            self.add_file(owner, name, path, content, endpoint=endpoint)
        return download_url

    def get(self, url: str) -> HttpResponse:
        with self._lock:
            self.calls.append(url)
        if url in self.routes:
            return HttpResponse(ok=True, status=200, body=self.routes[url])
        return HttpResponse(ok=False, status=404, error="Not Found")

    def download(self, url: str, dest: Path) -> None:
        with self._lock:
            self.calls.append(url)
        if url not in self.routes:
            raise NetworkError(f"下载失败: {url} - 404", url=url, status=404)
        Path(dest).write_bytes(self.routes[url])


@pytest.fixture()
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture()
def config() -> Config:
    return Config(api_endpoints=[API])
