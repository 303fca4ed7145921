"""
tests/test_product_utils.py

Pytest unit tests for the URL builder and the text cleanup helpers.

Coverage
--------
- Search URL shape and query encoding
- Page number validation
- Query string stripping
- Digit, price and leading-token cleanups (including None input)
"""

from __future__ import annotations

from urllib.parse import parse_qs, quote_plus, urlparse

import pytest

from product_utils import (
    build_search_url,
    digits_only,
    leading_token,
    marketplace_root,
    price_characters,
    strip_query_string,
)


# ---------------------------------------------------------------------------
# build_search_url
# ---------------------------------------------------------------------------


class TestBuildSearchUrl:
    def test_simple_keyword(self) -> None:
        assert build_search_url("shoes", "com", 1) == "https://www.amazon.com/s?k=shoes&page=1"

    @pytest.mark.parametrize(
        "keyword, marketplace, page",
        [
            ("running shoes", "com", 2),
            ("café & crème", "co.uk", 3),
            ("a+b=c?", "de", 10),
        ],
    )
    def test_shape_and_encoding(self, keyword: str, marketplace: str, page: int) -> None:
        url = build_search_url(keyword, marketplace, page)

        assert url.startswith(f"https://www.amazon.{marketplace}/s?")
        assert f"k={quote_plus(keyword)}" in url
        assert f"page={page}" in url

        query = parse_qs(urlparse(url).query)
        assert query["k"] == [keyword]
        assert query["page"] == [str(page)]

    def test_marketplace_is_not_validated(self) -> None:
        url = build_search_url("shoes", "not a domain", 1)
        assert url.startswith("https://www.amazon.not a domain/s?")

    def test_is_deterministic(self) -> None:
        assert build_search_url("lamp", "fr", 4) == build_search_url("lamp", "fr", 4)

    @pytest.mark.parametrize("page", [0, -1])
    def test_rejects_pages_below_one(self, page: int) -> None:
        with pytest.raises(ValueError):
            build_search_url("shoes", "com", page)


def test_marketplace_root() -> None:
    assert marketplace_root("co.jp") == "https://www.amazon.co.jp"


# ---------------------------------------------------------------------------
# Cleanup helpers
# ---------------------------------------------------------------------------


class TestStripQueryString:
    def test_removes_everything_after_first_question_mark(self) -> None:
        assert strip_query_string("https://a.com/dp/X?ref=1?x=2") == "https://a.com/dp/X"

    def test_url_without_query_is_unchanged(self) -> None:
        assert strip_query_string("https://a.com/dp/X") == "https://a.com/dp/X"

    def test_none(self) -> None:
        assert strip_query_string(None) is None


class TestDigitsOnly:
    def test_strips_non_digits(self) -> None:
        assert digits_only("1,234 ratings") == "1234"

    def test_no_digits_is_none(self) -> None:
        assert digits_only("Sponsored") is None

    def test_none(self) -> None:
        assert digits_only(None) is None


class TestPriceCharacters:
    def test_keeps_digits_and_separators(self) -> None:
        assert price_characters("$1,299.99") == "1,299.99"

    def test_currency_symbol_only_is_none(self) -> None:
        assert price_characters("€") is None

    def test_none(self) -> None:
        assert price_characters(None) is None


class TestLeadingToken:
    def test_first_token(self) -> None:
        assert leading_token("4.5 out of 5 stars") == "4.5"

    def test_leading_whitespace_is_ignored(self) -> None:
        assert leading_token("  3.9 out of 5") == "3.9"

    def test_blank_is_none(self) -> None:
        assert leading_token("   ") is None

    def test_none(self) -> None:
        assert leading_token(None) is None
