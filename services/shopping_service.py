"""Price comparison over shopping search results, restricted to known stores."""
import logging
from typing import Any, Dict, Iterable, List

from models.shopping import ShoppingQuery
from services.errors import NotFound

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY = "in"
OFFER_LIMIT = 5
MIN_TITLE_LENGTH = 10
MAX_TITLE_LENGTH = 100

# Stores by the spending category they sell into
ALLOWED_STORES: Dict[str, List[str]] = {
    "FOD-GRO": ["BigBasket", "Blinkit", "Grofers", "Amazon Pantry", "Flipkart Grocery", "JioMart",
                "Nature's Basket", "Spencer's", "DMart Ready"],
    "SHO-ELE": ["Amazon", "Flipkart", "Croma", "Reliance Digital", "Vijay Sales", "Tata CLiQ",
                "Tata CLiQ Digital", "Samsung", "Mi", "ShopMi", "Sony Centre"],
    "SHO-CLO": ["Myntra", "Ajio", "Tata CLiQ Fashion", "H&M", "Zara", "Puma", "Nike", "Koovs",
                "Lifestyle", "Shoppers Stop"],
    "SHO-HOM": ["Pepperfry", "Urban Ladder", "IKEA", "HomeTown", "Wooden Street", "Amazon Home", "Flipkart Home"],
    "HFC": ["1mg", "Netmeds", "PharmEasy", "Apollo Pharmacy", "Cure.fit", "Cult.fit", "Decathlon"],
    "EDU-SUB": ["Amazon Books", "Flipkart Books", "Crossword"],
    "ENT": ["BookMyShow", "MakeMyTrip", "Yatra", "OYO", "Booking.com", "Airbnb"],
}
STORE_NAMES = [store for stores in ALLOWED_STORES.values() for store in stores]
ALL_ALLOWED_STORES = [store.lower() for store in STORE_NAMES]


def is_allowed_store(store: str) -> bool:
    """A store is allowed when its name contains, or is contained in, an allowed name."""
    name = (store or "").strip().lower()
    if not name:
        return False
    return any(name in allowed or allowed in name for allowed in ALL_ALLOWED_STORES)


def select_offers(products: Iterable[Dict[str, Any]], cheapest: bool = False,
                  limit: int = OFFER_LIMIT) -> List[Dict[str, Any]]:
    """
    Keeps products from allowed stores with a real title and a positive price,
    once per title (case-insensitive). Listing order is relevance order;
    ``cheapest`` re-sorts by price.
    """
    seen = set()
    offers = []
    for product in products:
        title = (product.get("title") or "").strip()
        price = product.get("price") or 0
        if len(title) <= MIN_TITLE_LENGTH or price <= 0 or title.lower() in seen:
            continue
        if not is_allowed_store(product.get("store")):
            logger.debug(f"Filtered out store: {product.get('store')}")
            continue
        seen.add(title.lower())
        offers.append({**product, "title": title[:MAX_TITLE_LENGTH]})
    if cheapest:
        offers.sort(key=lambda offer: offer["price"])
    return offers[:limit]


def list_stores() -> Dict[str, Any]:
    return {
        "stores_by_category": ALLOWED_STORES,
        "all_stores": ALL_ALLOWED_STORES,
        "message": "Only results from these stores will be returned.",
    }


async def find_offers(client, payload: ShoppingQuery, cheapest: bool = False) -> Dict[str, Any]:
    country = payload.country or DEFAULT_COUNTRY
    products = await client.products(payload.query, country, STORE_NAMES)
    offers = select_offers(products, cheapest=cheapest)
    if not offers:
        raise NotFound("No offers found for this product")
    logger.info(f"Found {len(offers)} offers for '{payload.query}' ({country}), cheapest={cheapest}")
    key = "top_offers" if cheapest else "results"
    return {"query": payload.query, "country": country, key: offers, "count": len(offers)}
