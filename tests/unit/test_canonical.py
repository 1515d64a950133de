"""Tests for canonical parameter/body serialisation."""

from __future__ import annotations

from reqsign.signing.canonical import canonicalise


class TestCanonicalise:
    def test_sorted_keys(self) -> None:
        assert canonicalise({"z": "1", "a": "2"}) == "a=2z=1"

    def test_insertion_order_irrelevant(self) -> None:
        assert canonicalise({"a": "1", "b": "2"}) == canonicalise({"b": "2", "a": "1"})

    def test_body_appended_verbatim(self) -> None:
        assert canonicalise({"data": "a"}, '{"a":1}') == 'data=a{"a":1}'

    def test_empty_params_and_body(self) -> None:
        assert canonicalise({}, "") == ""

    def test_body_only(self) -> None:
        assert canonicalise({}, "aaaaaaa") == "aaaaaaa"

    def test_no_url_encoding(self) -> None:
        assert canonicalise({"q": "a b&c=d"}) == "q=a b&c=d"

    def test_code_point_ordering(self) -> None:
        # Uppercase sorts before lowercase
        assert canonicalise({"b": "1", "B": "2", "a": "3"}) == "B=2a=3b=1"

    def test_empty_value(self) -> None:
        assert canonicalise({"flag": "", "a": "x"}) == "a=xflag="

    def test_deterministic(self) -> None:
        params = {"action": "generate", "size": "large", "n": "2"}
        assert canonicalise(params, "body") == canonicalise(dict(params), "body")
