"""Tests for add_joined / cat_joined."""

import pytest

from chararray import AlignedCharArray, CharArray

SEPARATOR = "|*|*|*|"


@pytest.fixture(params=[CharArray, AlignedCharArray], ids=["plain", "aligned"])
def builder_cls(request: pytest.FixtureRequest) -> type[CharArray]:
    return request.param


class TestAddJoined:
    """Separator placement and trailing-separator stripping."""

    def test_strip_single_byte_separator(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined("|", True, "x|", "y", "z")
        assert sb.get_string().value == b"x|y|z"

    def test_no_strip_doubles_separator(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined("|", False, "x|", "y", "z")
        assert sb.get_string().value == b"x||y|z"

    def test_strip_multibyte_separator(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined(
            SEPARATOR, True, "dictionaries" + SEPARATOR, "foo", "bar"
        )
        assert sb.get_string().value == b"dictionaries|*|*|*|foo|*|*|*|bar"

    def test_strip_applies_to_every_non_final_part(
        self, builder_cls: type[CharArray]
    ) -> None:
        sb = builder_cls().add_joined("/", True, "usr/", "local/", "lib/")
        assert sb.get_string().value == b"usr/local/lib/"

    def test_part_equal_to_multibyte_separator_kept(
        self, builder_cls: type[CharArray]
    ) -> None:
        sb = builder_cls().add_joined("::", True, "::", "b")
        assert sb.get_string().value == b"::::b"

    def test_part_equal_to_single_byte_separator_stripped(
        self, builder_cls: type[CharArray]
    ) -> None:
        sb = builder_cls().add_joined("/", True, "/", "b")
        assert sb.get_string().value == b"/b"

    def test_empty_part(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined(",", True, "", "b")
        assert sb.get_string().value == b",b"

    def test_single_part(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined(",", True, "only,")
        assert sb.get_string().value == b"only,"

    def test_zero_parts_is_noop(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined(",", True)
        assert sb.length == 0

    def test_empty_separator(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined("", True, "a", "b")
        assert sb.get_string().value == b"ab"

    def test_bytes_parts(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().add_joined(b"\t", False, b"a", "b")
        assert sb.get_string().value == b"a\tb"

    def test_add_keeps_existing_terminator(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().cat("p").add_joined(",", False, "a", "b")
        assert sb.data.raw[: sb.length] == b"p\x00a,b\x00"


class TestCatJoined:
    """cat_joined strips the terminator first."""

    def test_concatenates(self, builder_cls: type[CharArray]) -> None:
        sb = builder_cls().cat("/root/").cat_joined("/", True, "a/", "b")
        assert sb.get_string().value == b"/root/a/b"
        assert sb.length == len(b"/root/a/b") + 1

    def test_zero_parts_leaves_terminator_stripped(
        self, builder_cls: type[CharArray]
    ) -> None:
        sb = builder_cls().cat("a").cat_joined(",", True)
        assert sb.length == 1
        assert sb.get_string().value == b"a"
