"""
================================================================================
Amazon Record Extractor
================================================================================
Author      : Breno Farias da Silva
Created     : 2026-10-18
Description :
    This script provides an Amazon class for extracting normalized records
    from rendered Amazon search-result pages and product-detail pages. It
    works on parsed HTML only, so the same code runs against live pages
    rendered by the browser and against saved HTML fixtures.

    Key features include:
        - Search-result card extraction (ASIN, title, URL, price, rating, reviews)
        - Product-detail extraction with prioritized selector fallbacks
        - ASIN detection from the URL path with a meta tag fallback
        - Canonical URL detection with a request URL fallback
        - Flat dictionary records ready for the dataset

Usage:
    1. Import the Amazon class in your main script.
    2. Create an instance for a marketplace:
        extractor = Amazon(marketplace="com")
    3. Parse the HTML and call the extraction method for the page type:
        soup = BeautifulSoup(html, "html.parser")
        records = extractor.extract_search_results(soup, keyword="shoes", page_number=1)
        record = extractor.extract_product_detail(soup, page_url=url)

Outputs:
    - List of search result record dictionaries
    - Single product detail record dictionary

TODOs:
    - Extract the old price and the discount percentage on product pages

Dependencies:
    - Python >= 3.8
    - beautifulsoup4

Assumptions & Notes:
    - Website structure may change over time
    - The review count selector on search pages is broad and may match an
      unrelated text node; the value is best effort
    - Extraction never logs and never performs I/O
"""

import datetime  # Handle date and time operations
import re  # Perform regular expression operations
from bs4 import BeautifulSoup, Tag  # Parse and navigate HTML documents
from product_utils import digits_only, leading_token, marketplace_root, price_characters, strip_query_string  # Centralized text cleanup helpers
from typing import Optional, Dict, Any, List, Union  # Type hinting support for better code clarity
from urllib.parse import urljoin, urlparse  # Parse and manipulate URLs


# Execution Constants:
DEFAULT_MARKETPLACE = "com"  # Marketplace used when none is provided

# HTML Selectors Dictionary:
HTML_SELECTORS = {
    "search_card": "div.s-result-item[data-asin]",  # Result card carrying the ASIN attribute
    "search_title": "h2 a span",  # Text-bearing span inside the heading link
    "search_link": "h2 a",  # Heading link of the result card
    "search_price_whole": ".a-price .a-price-whole",  # Integer part of the displayed price
    "search_price_fraction": ".a-price .a-price-fraction",  # Cents part of the displayed price
    "search_rating": ".a-icon-alt",  # Hidden star rating text (e.g., "4.5 out of 5 stars")
    "search_reviews": ".a-size-base",  # Size-styled count node, broad selector
    "product_title": [  # List of CSS selectors for product title in priority order
        "#productTitle",  # Amazon product title span with specific id
        "#title",  # Alternative title container
    ],
    "product_price": [  # List of CSS selectors for product price in priority order
        "#priceblock_ourprice",  # Legacy "our price" block
        "#priceblock_dealprice",  # Legacy deal price block
        "#price_inside_buybox",  # Buy box price
        ".a-price .a-offscreen",  # Offscreen price span used by the current layout
    ],
    "product_rating": [  # List of CSS selectors for product rating in priority order
        "[data-hook=rating-out-of-text]",  # Structured rating hook
        ".a-icon-alt",  # Generic star icon text as fallback
    ],
    "product_reviews": "#acrCustomerReviewText",  # Customer review count text
    "product_availability": [  # List of CSS selectors for availability in priority order
        "#availability",  # Availability block
        "#availability_feature_div",  # Availability feature container fallback
    ],
    "canonical_link": "link[rel=canonical]",  # Canonical URL link in the head
    "asin_meta": "meta[name=asin]",  # Meta tag holding the ASIN on some layouts
}  # Dictionary containing all HTML selectors used for extracting records

ASIN_PATH_PATTERN = re.compile(r"/(?:dp|gp|product)/(?:product/)?([A-Z0-9]{10})", re.IGNORECASE)  # Product identifier inside the URL path


# Classes Definitions:


class Amazon:
    """
    A record extractor for Amazon search-result and product-detail pages.

    This class holds no state besides the marketplace, so one instance can be
    shared by every worker thread.
    """


    def __init__(self, marketplace: str = DEFAULT_MARKETPLACE) -> None:
        """
        Initializes the extractor for a marketplace.

        :param marketplace: Domain suffix such as "com" or "co.uk"
        :return: None
        """

        self.marketplace: str = marketplace  # Marketplace stamped on every record
        self.base_url: str = marketplace_root(marketplace)  # Root URL for resolving relative links


    def select_text(self, node: Union[BeautifulSoup, Tag], selector: str) -> Optional[str]:
        """
        Returns the stripped text of the first element matching a selector.

        :param node: Parsed document or element to search in
        :param selector: CSS selector
        :return: Stripped text, or None if no element matches
        """

        element = node.select_one(selector)  # Find the first matching element
        if element is None:  # Missing element yields a null field
            return None

        return element_text(element)  # Return the element text with words kept apart


    def select_first_text(self, node: Union[BeautifulSoup, Tag], selectors: List[str]) -> Optional[str]:
        """
        Returns the stripped text of the first selector that matches a non-empty element.

        :param node: Parsed document or element to search in
        :param selectors: CSS selectors in priority order
        :return: Stripped text, or None if no selector matches
        """

        for selector in selectors:  # Iterate through prioritized selectors
            text = self.select_text(node, selector)  # Try the current selector
            if text:  # Stop at the first non-empty text
                return text

        return None  # No selector matched


    def extract_card_price(self, card: Tag) -> Optional[str]:
        """
        Extracts the price of a search result card from its whole and fraction parts.

        :param card: Result card element
        :return: Price string such as "19.99", or None without a whole part
        """

        whole = card.select_one(HTML_SELECTORS["search_price_whole"])  # Integer part of the price
        if whole is None:  # No whole part means no price
            return None

        price = price_characters(whole.get_text()) or ""  # Keep digits and separators only
        price = price.rstrip(".,")  # Drop the decimal separator rendered inside the whole part

        fraction = card.select_one(HTML_SELECTORS["search_price_fraction"])  # Cents part of the price
        if fraction is not None:  # Append the cents only when both parts exist
            price += "." + (digits_only(fraction.get_text()) or "")

        return price or None  # Empty price text yields a null field


    def extract_card(self, card: Tag) -> Dict[str, Optional[str]]:
        """
        Extracts the raw fields of one search result card.

        :param card: Result card element
        :return: Dictionary with asin, title, url, price, rating and review_count
        """

        asin = card.get("data-asin") or None  # Empty attribute counts as missing
        title = self.select_text(card, HTML_SELECTORS["search_title"]) or None  # Empty title counts as missing

        url = None  # Initialize URL variable
        link = card.select_one(HTML_SELECTORS["search_link"])  # Heading link of the card
        if link is not None and link.get("href"):  # Only links with an href carry a URL
            url = strip_query_string(urljoin(self.base_url + "/", str(link.get("href"))))  # Resolve and drop tracking parameters

        return {
            "asin": str(asin) if asin else None,  # Store the ASIN
            "title": title,  # Store the title
            "url": url,  # Store the product URL
            "price": self.extract_card_price(card),  # Store the price
            "rating": leading_token(self.select_text(card, HTML_SELECTORS["search_rating"])),  # Store the rating
            "review_count": digits_only(self.select_text(card, HTML_SELECTORS["search_reviews"])),  # Store the review count
        }  # End of dictionary construction


    def extract_search_results(self, soup: BeautifulSoup, keyword: str, page_number: int, scraped_at: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Extracts every search result record from a search results page.
        Cards without both an ASIN and a title are discarded.

        :param soup: Parsed search results page
        :param keyword: Search keyword the page was requested for
        :param page_number: Search results page number
        :param scraped_at: ISO timestamp to stamp on the records (defaults to now)
        :return: List of search result record dictionaries
        """

        scraped_at = scraped_at or utc_timestamp()  # One timestamp for the whole page
        records: List[Dict[str, Any]] = []  # Initialize empty list for records

        for card in soup.select(HTML_SELECTORS["search_card"]):  # Iterate through every result card
            fields = self.extract_card(card)  # Extract the raw card fields
            if not fields["asin"] and not fields["title"]:  # Discard cards that identify nothing
                continue

            records.append({
                "type": "search_result",  # Record discriminator
                "keyword": keyword,  # Store the search keyword
                "page_number": page_number,  # Store the page number
                "marketplace": self.marketplace,  # Store the marketplace
                "scraped_at": scraped_at,  # Store the extraction time
                **fields,  # Merge the extracted card fields
            })

        return records  # Return the surviving records


    def extract_asin(self, soup: BeautifulSoup, page_url: str) -> Optional[str]:
        """
        Extracts the ASIN from the URL path, falling back to the asin meta tag.

        :param soup: Parsed product page
        :param page_url: URL of the product page
        :return: ASIN string or None
        """

        match = ASIN_PATH_PATTERN.search(urlparse(page_url).path)  # Look for the identifier in the path
        if match:  # The path carries the ASIN
            return match.group(1)

        meta = soup.select_one(HTML_SELECTORS["asin_meta"])  # Fall back to the meta tag
        if meta is not None and meta.get("content"):  # Only a non-empty content counts
            return str(meta.get("content"))

        return None  # No ASIN available


    def extract_canonical_url(self, soup: BeautifulSoup, page_url: str) -> str:
        """
        Extracts the canonical URL of the page, falling back to the page URL.

        :param soup: Parsed product page
        :param page_url: URL of the product page
        :return: Canonical URL string
        """

        link = soup.select_one(HTML_SELECTORS["canonical_link"])  # Canonical link in the head
        if link is not None and link.get("href"):  # Only a non-empty href counts
            return urljoin(page_url, str(link.get("href")))  # Resolve relative canonical links

        return page_url  # Fall back to the page URL


    def extract_product_detail(self, soup: BeautifulSoup, page_url: str, scraped_at: Optional[str] = None) -> Dict[str, Any]:
        """
        Extracts the product detail record from a product page.
        The record is always returned, even when every field is missing.

        :param soup: Parsed product page
        :param page_url: URL the page was requested with
        :param scraped_at: ISO timestamp to stamp on the record (defaults to now)
        :return: Product detail record dictionary
        """

        return {
            "type": "product_page",  # Record discriminator
            "asin": self.extract_asin(soup, page_url),  # Store the ASIN
            "title": self.select_first_text(soup, HTML_SELECTORS["product_title"]),  # Store the title
            "price": price_characters(self.first_present_text(soup, HTML_SELECTORS["product_price"])),  # Store the price
            "rating": leading_token(self.first_present_text(soup, HTML_SELECTORS["product_rating"])),  # Store the rating
            "review_count": digits_only(self.select_text(soup, HTML_SELECTORS["product_reviews"])),  # Store the review count
            "availability": self.select_first_text(soup, HTML_SELECTORS["product_availability"]),  # Store the availability
            "canonical_url": self.extract_canonical_url(soup, page_url),  # Store the canonical URL
            "url": page_url,  # Store the request URL
            "marketplace": self.marketplace,  # Store the marketplace
            "scraped_at": scraped_at or utc_timestamp(),  # Store the extraction time
        }  # End of dictionary construction


    def first_present_text(self, soup: BeautifulSoup, selectors: List[str]) -> Optional[str]:
        """
        Returns the text of the first selector that matches any element, even an empty one.
        Price and rating lookups stop at the first element found, even an empty one.

        :param soup: Parsed document to search in
        :param selectors: CSS selectors in priority order
        :return: Element text, or None if no selector matches
        """

        for selector in selectors:  # Iterate through prioritized selectors
            element = soup.select_one(selector)  # Try the current selector
            if element is not None:  # Stop at the first element found
                return element_text(element)

        return None  # No selector matched


# Functions Definitions:


def utc_timestamp() -> str:
    """
    Returns the current UTC time as an ISO 8601 string.

    :return: Timestamp string
    """

    return datetime.datetime.now(datetime.timezone.utc).isoformat()  # Timezone-aware timestamp


def element_text(element: Tag) -> str:
    """
    Returns the text of an element with nested fragments separated by single spaces.
    "Widget <b>Deluxe</b> Edition" gives "Widget Deluxe Edition", not "WidgetDeluxeEdition".

    :param element: Element to read
    :return: Whitespace-collapsed text (empty string for empty elements)
    """

    return " ".join(element.get_text(" ", strip=True).split())  # Join fragments with a space, then collapse runs of whitespace
