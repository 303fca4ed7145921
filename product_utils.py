"""
product_utils.py - Amazon URL building and text cleanup utilities

Author      : Breno Farias da Silva
Created     : 2026-10-18
Description :
    Small utility module that provides a single source-of-truth for building
    Amazon search URLs and for the string cleanups applied to every scraped
    field. The main exports are:

    - `build_search_url`, which builds the search-results URL for a keyword,
    marketplace domain suffix and page number, form-encoding the query values.
    - `strip_query_string`, which removes everything from the first "?".
    - `digits_only`, `price_characters` and `leading_token`, which reduce raw
    element text to the normalized value stored in the dataset.

Usage:
    from product_utils import build_search_url, digits_only
    url = build_search_url("running shoes", "com", 2)

Returns:
    Plain strings (or None when the input is None or nothing is left).

Dependencies:
    - Python standard library: `re`, `urllib.parse`

Notes:
    - The marketplace is not validated; an invalid one produces an unreachable
      URL that fails later when the page is loaded.
"""


import re  # Used for regex-based cleanup of scraped text
from typing import Optional  # Type hinting support for better code clarity
from urllib.parse import urlencode  # Form-encode the search query parameters


# Execution Constants:
SEARCH_URL_TEMPLATE = "https://www.amazon.{marketplace}/s"  # Base URL of the search results page
MARKETPLACE_ROOT_TEMPLATE = "https://www.amazon.{marketplace}"  # Root URL used to resolve relative links


# Functions Definitions:


def build_search_url(keyword: str, marketplace: str, page: int) -> str:
    """
    Builds the Amazon search-results URL for a keyword and page number.

    :param keyword: Search term, form-encoded in the "k" query parameter
    :param marketplace: Domain suffix such as "com" or "co.uk"
    :param page: Page number, starting at 1
    :return: The search URL string
    """

    if page < 1:  # Amazon result pages start at 1
        raise ValueError(f"Page number must be >= 1, got {page}")

    base = SEARCH_URL_TEMPLATE.format(marketplace=marketplace)  # Build the base URL for the marketplace
    query = urlencode({"k": keyword, "page": str(page)})  # Encode both parameters, keeping "k" first

    return f"{base}?{query}"  # Return the full search URL


def marketplace_root(marketplace: str) -> str:
    """
    Returns the root URL of a marketplace, used to resolve relative links.

    :param marketplace: Domain suffix such as "com" or "co.uk"
    :return: Root URL without trailing slash
    """

    return MARKETPLACE_ROOT_TEMPLATE.format(marketplace=marketplace)


def strip_query_string(url: Optional[str]) -> Optional[str]:
    """
    Removes everything from the first "?" of a URL.

    :param url: URL string or None
    :return: URL without query string, or None
    """

    if url is None:  # Nothing to strip
        return None

    return url.split("?", 1)[0]  # Keep only the part before the first "?"


def digits_only(text: Optional[str]) -> Optional[str]:
    """
    Keeps only the digits of a text.

    :param text: Raw element text or None
    :return: String of digits, or None if the input is None or holds no digits
    """

    if text is None:  # Missing element
        return None

    digits = re.sub(r"[^0-9]", "", text)  # Drop every non-digit character

    return digits or None  # Empty result means the element held no count


def price_characters(text: Optional[str]) -> Optional[str]:
    """
    Keeps only the digits and the "." and "," separators of a price text.

    :param text: Raw price text such as "$1,299.99" or None
    :return: Cleaned price string such as "1,299.99", or None
    """

    if text is None:  # Missing element
        return None

    cleaned = re.sub(r"[^0-9.,]", "", text)  # Drop currency symbols, spaces and labels

    return cleaned or None  # Empty result means there was no price in the text


def leading_token(text: Optional[str]) -> Optional[str]:
    """
    Returns the first whitespace-delimited token of a text.
    Used for rating texts like "4.5 out of 5 stars".

    :param text: Raw element text or None
    :return: First token, or None if the text is None or blank
    """

    if text is None:  # Missing element
        return None

    parts = text.split()  # Split on any run of whitespace

    return parts[0] if parts else None  # Blank text has no token
