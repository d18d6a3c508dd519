"""slug 远程解析测试"""

from __future__ import annotations

import pytest
from conftest import API, RAW, FakeHttpClient

from clibpm.core.config import Config
from clibpm.core.exceptions import ResolutionError
from clibpm.core.package.resolver import PackageResolver, extract_download_url

FOO = {"name": "foo", "repo": "acme/foo", "version": "1.0.0", "src": ["foo.c"]}


class TestResolve:
    def test_explicit_version_overrides_descriptor(
        self, http: FakeHttpClient, config: Config,
    ) -> None:
        http.add_package("acme", "foo", FOO, version="2.0.0")
        pkg = PackageResolver(config, http).resolve("acme/foo@2.0.0")
        assert pkg.version == "2.0.0"
        assert pkg.author == "acme"
        assert pkg.name == "foo"
        assert pkg.src == ["foo.c"]
        assert pkg.api_endpoint == API
        # 仓库串与规范串一致时内容地址留待安装时计算
        assert pkg.url is None

    def test_default_branch_keeps_descriptor_version(
        self, http: FakeHttpClient, config: Config,
    ) -> None:
        http.add_package("acme", "foo", FOO)
        pkg = PackageResolver(config, http).resolve("acme/foo")
        assert pkg.version == "1.0.0"

    def test_descriptor_without_version_uses_requested(
        self, http: FakeHttpClient, config: Config,
    ) -> None:
        http.add_package("acme", "foo", {"name": "foo", "repo": "acme/foo"})
        pkg = PackageResolver(config, http).resolve("acme/foo")
        assert pkg.version == "master"

    def test_wildcard_descriptor_version(self, http: FakeHttpClient, config: Config) -> None:
        http.add_package("acme", "foo", {"name": "foo", "repo": "acme/foo", "version": "*"})
        pkg = PackageResolver(config, http).resolve("acme/foo")
        assert pkg.version == "master"

    def test_descriptor_author_wins(self, http: FakeHttpClient, config: Config) -> None:
        http.add_package("fork", "foo", {"name": "foo", "repo": "upstream/foo"})
        pkg = PackageResolver(config, http).resolve("fork/foo")
        assert pkg.author == "upstream"
        assert pkg.repo == "upstream/foo"
        assert pkg.url is None

    def test_missing_repo_adopts_canonical(self, http: FakeHttpClient, config: Config) -> None:
        http.add_package("acme", "foo", {"name": "foo", "version": "1.0.0"})
        pkg = PackageResolver(config, http).resolve("acme/foo")
        assert pkg.author == "acme"
        assert pkg.repo == "acme/foo"
        assert pkg.repo_name == "foo"

    def test_repo_name_differs_from_package_name(
        self, http: FakeHttpClient, config: Config,
    ) -> None:
        http.add_package(
            "acme", "thing", {"name": "thing", "repo": "acme/thing.c", "version": "1.0.0"},
        )
        pkg = PackageResolver(config, http).resolve("acme/thing")
        assert pkg.url == "https://raw.githubusercontent.com/acme/thing.c/1.0.0"

    def test_metadata_query_uses_requested_version(
        self, http: FakeHttpClient, config: Config,
    ) -> None:
        http.add_package("acme", "foo", FOO, version="2.0.0")
        PackageResolver(config, http).resolve("acme/foo@2.0.0")
        assert f"{API}repos/acme/foo/contents/package.json?2.0.0" in http.calls
        assert f"{RAW}acme/foo/2.0.0/package.json" in http.calls


class TestEndpointOrder:
    def test_second_candidate_used_throughout(self, http: FakeHttpClient) -> None:
        a, b = "https://a.example.com/", "https://b.example.com/"
        http.add_package("acme", "foo", FOO, endpoint=b)
        pkg = PackageResolver(Config(api_endpoints=[a, b]), http).resolve("acme/foo")
        assert pkg.api_endpoint == b
        assert f"{b}repos/acme/foo/contents/package.json?master" in http.calls
        assert not any(c.startswith(f"{a}repos/acme/foo/contents") for c in http.calls)

    def test_discovery_failure_before_content_fetch(self, http: FakeHttpClient) -> None:
        resolver = PackageResolver(Config(api_endpoints=["https://a.example.com/"]), http)
        with pytest.raises(ResolutionError) as exc_info:
            resolver.resolve("acme/foo")
        assert exc_info.value.step == "discover"
        assert not any("contents" in c for c in http.calls)

    def test_no_endpoints_configured(self, http: FakeHttpClient) -> None:
        with pytest.raises(ResolutionError, match="API 端点"):
            PackageResolver(Config(), http).resolve("acme/foo")
        assert http.calls == []


class TestFailures:
    def test_invalid_slug(self, http: FakeHttpClient, config: Config) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            PackageResolver(config, http).resolve("acme/@1.0.0")
        assert exc_info.value.step == "parse"

    def test_metadata_not_found(self, http: FakeHttpClient, config: Config) -> None:
        http.add(f"{API}repos/acme/foo", {})
        with pytest.raises(ResolutionError) as exc_info:
            PackageResolver(config, http).resolve("acme/foo")
        assert exc_info.value.step == "metadata"

    def test_metadata_without_download_url(self, http: FakeHttpClient, config: Config) -> None:
        http.add(f"{API}repos/acme/foo", {})
        http.add(f"{API}repos/acme/foo/contents/package.json?master", {"name": "package.json"})
        with pytest.raises(ResolutionError, match="download_url"):
            PackageResolver(config, http).resolve("acme/foo")

    def test_descriptor_download_fails(self, http: FakeHttpClient, config: Config) -> None:
        url = http.add_package("acme", "foo", FOO)
        del http.routes[url]
        with pytest.raises(ResolutionError) as exc_info:
            PackageResolver(config, http).resolve("acme/foo")
        assert exc_info.value.step == "download"

    def test_invalid_descriptor(self, http: FakeHttpClient, config: Config) -> None:
        http.add_package("acme", "foo", "{broken")
        with pytest.raises(ResolutionError) as exc_info:
            PackageResolver(config, http).resolve("acme/foo")
        assert exc_info.value.step == "build"
        assert exc_info.value.cause is not None


class TestExtractDownloadUrl:
    @pytest.mark.parametrize("body,expected", [
        (b'{"download_url": "https://x/y"}', "https://x/y"),
        (b'{"download_url": null}', None),
        (b"[]", None),
        (b"not json", None),
    ])
    def test_extract(self, body: bytes, expected: str | None) -> None:
        assert extract_download_url(body) == expected
