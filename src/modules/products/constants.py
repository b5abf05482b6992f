"""Catalog constants."""

SORT_NEW = "new"
SORT_PRICE_ASC = "priceAsc"

SORT_ORDERINGS: dict[str, tuple[str, ...]] = {
    SORT_NEW: ("-created_at", "-id"),
    SORT_PRICE_ASC: ("price", "id"),
}

HOME_PICK_UP_LIMIT = 3
HOME_NEW_ARRIVAL_LIMIT = 4
HOME_HOT_ITEMS_LIMIT = 4

DEFAULT_DESCRIPTION = "No product description available."
