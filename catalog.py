"""Product catalog queries."""
import re
from typing import Any, Dict, Optional, get_args

from pymongo import ASCENDING, DESCENDING

from database import parse_object_id, serialize_doc
from errors import InvalidInputError, NotFoundError
from schemas import Category

SORTABLE_FIELDS = ("createdAt", "price", "rating", "name")
DEFAULT_SORT = "-createdAt"


def parse_sort(sort: Optional[str]):
    sort = sort or DEFAULT_SORT
    direction = DESCENDING if sort.startswith("-") else ASCENDING
    field = sort.lstrip("-+")
    if field not in SORTABLE_FIELDS:
        raise InvalidInputError(f"Cannot sort by {field}")
    return [(field, direction), ("_id", direction)]


def list_products(
    db,
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: Optional[str] = None,
    limit: int = 100,
) -> Dict[str, Any]:
    filt: Dict[str, Any] = {}
    if category:
        if category not in get_args(Category):
            raise InvalidInputError(f"{category} is not a valid category")
        filt["category"] = category
    if search:
        filt["name"] = {"$regex": re.escape(search), "$options": "i"}
    if featured is not None:
        filt["featured"] = featured
    price_filter = {}
    if min_price is not None:
        price_filter["$gte"] = float(min_price)
    if max_price is not None:
        price_filter["$lte"] = float(max_price)
    if price_filter:
        filt["price"] = price_filter

    cursor = db["product"].find(filt).sort(parse_sort(sort)).limit(limit)
    return {"products": [serialize_doc(p) for p in cursor]}


def get_product(db, product_id: str) -> Dict[str, Any]:
    pid = parse_object_id(product_id)
    product = db["product"].find_one({"_id": pid}) if pid else None
    if not product:
        raise NotFoundError("Product", product_id)
    return serialize_doc(product)
