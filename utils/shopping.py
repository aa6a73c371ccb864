"""Google Shopping listing fetcher and a best-effort listing parser."""
import logging
import random
import re
from html.parser import HTMLParser
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urlparse

import httpx

from services.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.google.com/search"
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/61.0.3163.100 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_11_2) AppleWebKit/601.3.9 (KHTML, like Gecko) Version/9.0.2 Safari/601.3.9",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:15.0) Gecko/20100101 Firefox/15.0.1",
]
MAX_LISTINGS = 20

PRICE = re.compile(r"[₹$]\s*([\d,]+(?:\.\d{2})?)")
NOISE = ("Shop by price", "View offer")


class _ListingParser(HTMLParser):
    """Collects the text lines and links of every ``div[data-docid]`` product card."""

    def __init__(self):
        super().__init__()
        self.cards: List[Dict[str, List[str]]] = []
        self._depth = 0

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if self._depth:
            if tag == "div":
                self._depth += 1
            elif tag == "a" and attrs.get("href"):
                self.cards[-1]["links"].append(attrs["href"])
        elif tag == "div" and attrs.get("data-docid"):
            self._depth = 1
            self.cards.append({"lines": [], "links": []})

    def handle_endtag(self, tag):
        if self._depth and tag == "div":
            self._depth -= 1

    def handle_data(self, data):
        if self._depth and data.strip():
            self.cards[-1]["lines"].append(data.strip())


def _title(lines: List[str]) -> str:
    for line in lines:
        if 10 < len(line) < 150 and not PRICE.match(line) and not any(n in line for n in NOISE):
            return line
    return ""


def _link(links: List[str]) -> str:
    external = [href for href in links if not href.startswith("/") and "google.com" not in href]
    link = (external or links or [""])[0]
    if link.startswith("/"):
        link = f"https://www.google.com{link}"
    if "/url?" in link or "/aclk?" in link:
        params = parse_qs(urlparse(link).query)
        for key in ("url", "adurl", "q"):
            if params.get(key):
                return params[key][0]
    return link


def parse_listing(html: str, stores: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Turns a shopping results page into ``{title, price, raw_price, store, link}``
    products. ``stores`` are the merchant names recognised in a card's text;
    cards without a title or price are skipped.
    """
    parser = _ListingParser()
    parser.feed(html or "")
    store_names = list(stores)

    products = []
    for card in parser.cards[:MAX_LISTINGS]:
        text = " ".join(card["lines"])
        title = _title(card["lines"])
        price = PRICE.search(text)
        if not title or not price:
            continue
        store = next((s for s in store_names if s.lower() in text.lower()), "Unknown")
        products.append({
            "title": title,
            "price": float(price.group(1).replace(",", "")),
            "raw_price": price.group(0),
            "store": store,
            "link": _link(card["links"]),
        })
    logger.info(f"Parsed {len(products)} products from {len(parser.cards)} listing cards")
    return products


class ShoppingClient:
    def __init__(self, timeout: float = 30.0, url: str = SEARCH_URL):
        self.timeout = timeout
        self.url = url

    async def fetch_listing(self, query: str, country: str) -> str:
        headers = {
            "User-Agent": random.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        params = {"tbm": "shop", "q": query, "gl": country, "hl": "en"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(self.url, params=params, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Shopping search failed for '{query}': {e}")
            raise CollaboratorFailure(f"Shopping search failed: {e}")
        return response.text

    async def products(self, query: str, country: str, stores: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        return parse_listing(await self.fetch_listing(query, country), stores or [])
