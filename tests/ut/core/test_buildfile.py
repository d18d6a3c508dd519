"""构建片段与 deps.mk 测试"""

from __future__ import annotations

from pathlib import Path

from clibpm.core.package.buildfile import (
    fragment_content,
    include_line,
    register_fragment,
    write_fragment,
)


class TestFragment:
    def test_content(self) -> None:
        text = fragment_content("foo", ["src/foo.c", "foo.h", "@vendor/lib.c"])
        assert text == (
            "deps__a_SOURCES += deps/foo/foo.c deps/foo/foo.h deps/foo/vendor/lib.c \n"
        )

    def test_write(self, tmp_path: Path) -> None:
        path = write_fragment(tmp_path, "foo", ["foo.c"])
        assert path == tmp_path / "foo.mk"
        assert path.read_text() == "deps__a_SOURCES += deps/foo/foo.c \n"


class TestRegister:
    def test_creates_aggregate(self, tmp_path: Path) -> None:
        agg = tmp_path / "deps.mk"
        register_fragment(agg, "foo")
        assert agg.read_text() == "include $(top_srcdir)/deps/foo/foo.mk\n"

    def test_reregister_deduplicated(self, tmp_path: Path) -> None:
        agg = tmp_path / "deps.mk"
        register_fragment(agg, "foo")
        register_fragment(agg, "bar")
        register_fragment(agg, "foo")
        assert agg.read_text().splitlines() == [include_line("bar"), include_line("foo")]

    def test_unrelated_lines_kept(self, tmp_path: Path) -> None:
        agg = tmp_path / "deps.mk"
        agg.write_text("# generated\ninclude $(top_srcdir)/deps/foobar/foobar.mk\n")
        register_fragment(agg, "foo")
        assert agg.read_text().splitlines() == [
            "# generated",
            "include $(top_srcdir)/deps/foobar/foobar.mk",
            "include $(top_srcdir)/deps/foo/foo.mk",
        ]
