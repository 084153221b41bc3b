"""Tests for figway.http.headers — immutable case-insensitive headers."""

from figway.http.headers import Headers

RAW = (
    (b"Host", b"example.com"),
    (b"Set-Cookie", b"a=1"),
    (b"X-Trace", b"abc"),
    (b"set-cookie", b"b=2"),
)


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = Headers(RAW)
        assert headers["host"] == "example.com"
        assert headers["HOST"] == "example.com"
        assert "x-trace" in headers

    def test_get_list_keeps_duplicates(self) -> None:
        assert Headers(RAW).get_list("set-cookie") == ["a=1", "b=2"]

    def test_len_counts_unique_names(self) -> None:
        assert len(Headers(RAW)) == 3

    def test_without(self) -> None:
        headers = Headers(RAW).without(["set-cookie", "X-TRACE"])
        assert headers.raw == ((b"Host", b"example.com"),)

    def test_without_leaves_original(self) -> None:
        original = Headers(RAW)
        original.without(["host"])
        assert "host" in original

    def test_replace_keeps_position(self) -> None:
        headers = Headers(RAW).replace("Set-Cookie", "c=3")
        assert headers.pairs() == [
            ("Host", "example.com"),
            ("set-cookie", "c=3"),
            ("X-Trace", "abc"),
        ]

    def test_replace_appends_missing(self) -> None:
        headers = Headers(RAW).replace("X-New", "1")
        assert headers.pairs()[-1] == ("x-new", "1")

    def test_from_pairs(self) -> None:
        headers = Headers.from_pairs([("Accept", "*/*"), ("accept", "text/html")])
        assert headers.get_list("accept") == ["*/*", "text/html"]
