import pytest
from pydantic import ValidationError

from models.shopping import ShoppingQuery
from services import shopping_service
from services.errors import NotFound
from services.shopping_service import is_allowed_store, select_offers
from utils.shopping import parse_listing

from conftest import FakeShopping


def product(title, price, store):
    return {"title": title, "price": price, "raw_price": f"₹{price}", "store": store, "link": "https://shop.example/p"}


LISTING = [
    product("Apple iPhone 15 128GB Blue", 69900, "Flipkart"),
    product("Apple iPhone 15 128GB Black", 71999, "Croma"),
    product("apple iphone 15 128gb blue", 65000, "Amazon"),
    product("Apple iPhone 15 Refurbished", 42000, "Snapdeal"),
    product("Apple iPhone 15 (Green)", 0, "Amazon"),
    product("iPhone", 100, "Amazon"),
    product("Apple iPhone 15 Plus 256GB", 89900, "Reliance Digital"),
    product("Apple iPhone 15 128GB Pink", 68500, "Vijay Sales"),
    product("Apple iPhone 15 Case Clear", 999, "Amazon"),
    product("Apple iPhone 15 Screen Guard", 299, "Flipkart"),
]


def test_allowed_store_matching():
    assert is_allowed_store("Flipkart")
    assert is_allowed_store("amazon.in by Amazon")
    assert is_allowed_store("Apollo Pharmacy")
    assert not is_allowed_store("Snapdeal")
    assert not is_allowed_store("")
    assert not is_allowed_store(None)


def test_relevant_offers_keep_listing_order():
    offers = select_offers(LISTING)

    assert [o["title"] for o in offers] == [
        "Apple iPhone 15 128GB Blue",
        "Apple iPhone 15 128GB Black",
        "Apple iPhone 15 Plus 256GB",
        "Apple iPhone 15 128GB Pink",
        "Apple iPhone 15 Case Clear",
    ]


def test_cheapest_offers_sorted_by_price():
    offers = select_offers(LISTING, cheapest=True)

    assert [o["price"] for o in offers] == [299, 999, 68500, 69900, 71999]


def test_long_titles_are_truncated():
    offers = select_offers([product("X" * 150, 10, "Myntra")])
    assert len(offers[0]["title"]) == 100


def test_query_validation():
    assert ShoppingQuery(query="  running shoes ").query == "running shoes"
    assert ShoppingQuery(query="shoes").country is None
    for bad in ({"query": "   "}, {"query": ""}, {"query": "shoes", "country": "IND"},
                {"query": "shoes", "country": "IN"}):
        with pytest.raises(ValidationError):
            ShoppingQuery(**bad)


@pytest.mark.asyncio
async def test_find_offers_defaults_country():
    client = FakeShopping(LISTING)

    result = await shopping_service.find_offers(client, ShoppingQuery(query="iphone 15"), cheapest=True)

    assert client.calls == [("iphone 15", "in")]
    assert result["country"] == "in"
    assert result["count"] == 5
    assert result["top_offers"][0]["price"] == 299


@pytest.mark.asyncio
async def test_find_offers_without_allowed_results_is_not_found():
    client = FakeShopping([product("Apple iPhone 15 Refurbished", 42000, "Snapdeal")])

    with pytest.raises(NotFound):
        await shopping_service.find_offers(client, ShoppingQuery(query="iphone", country="us"))


def test_parse_listing_reads_product_cards():
    html = """
    <html><body>
      <div data-docid="1">
        <h3>Samsung Galaxy S24 Ultra 256GB</h3>
        <span>₹1,29,999.00</span><span>Croma</span>
        <a href="/url?url=https://www.croma.com/s24&amp;sa=U">View offer</a>
      </div>
      <div data-docid="2"><h3>Short</h3><span>₹10</span></div>
      <div data-docid="3">
        <div><h3>Samsung Galaxy S24 128GB Onyx</h3></div>
        <span>from Amazon</span><span>$ 799</span>
        <a href="https://www.amazon.in/dp/B0">link</a>
      </div>
      <div><h3>Not a product card at all</h3><span>₹5</span></div>
    </body></html>
    """

    products = parse_listing(html, shopping_service.STORE_NAMES)

    assert [(p["title"], p["price"], p["store"]) for p in products] == [
        ("Samsung Galaxy S24 Ultra 256GB", 129999.0, "Croma"),
        ("Samsung Galaxy S24 128GB Onyx", 799.0, "Amazon"),
    ]
    assert products[0]["link"] == "https://www.croma.com/s24"
    assert products[1]["link"] == "https://www.amazon.in/dp/B0"
