"""Cart service: one cart per user, totals always recomputed from the catalog."""
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from database import parse_object_id, serialize_doc, utcnow
from errors import InsufficientStockError, NotFoundError

PRODUCT_SUMMARY_FIELDS = {"name": 1, "price": 1, "image": 1, "discount": 1, "stock": 1}


def effective_price(price: float, discount: Optional[float] = None) -> float:
    """Catalog price reduced by the percent discount, if any. Only totals are rounded."""
    if discount:
        return price * (1 - discount / 100)
    return price


def calculate_cart_total(db, items: List[Dict[str, Any]]) -> float:
    """Sum of effective price x quantity; products no longer in the catalog count as zero."""
    product_ids = [item["product"] for item in items]
    if not product_ids:
        return 0.0
    products = {p["_id"]: p for p in db["product"].find({"_id": {"$in": product_ids}})}
    total = 0.0
    for item in items:
        product = products.get(item["product"])
        if not product:
            continue
        total += effective_price(product["price"], product.get("discount")) * item["quantity"]
    return round(total, 2)


def empty_cart(user: str) -> Dict[str, Any]:
    return {"user": user, "items": [], "totalAmount": 0}


def expand_cart(db, cart: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a cart with each line's product replaced by its current summary."""
    product_ids = [item["product"] for item in cart.get("items", [])]
    products = {}
    if product_ids:
        cursor = db["product"].find({"_id": {"$in": product_ids}}, PRODUCT_SUMMARY_FIELDS)
        products = {p["_id"]: serialize_doc(p) for p in cursor}
    out = serialize_doc(cart)
    out["items"] = [
        {
            "productId": str(item["product"]),
            "quantity": item["quantity"],
            "product": products.get(item["product"]),
        }
        for item in cart.get("items", [])
    ]
    return out


def get_cart(db, user: str) -> Dict[str, Any]:
    cart = db["cart"].find_one({"user": user})
    if not cart:
        return empty_cart(user)
    return expand_cart(db, cart)


def _save_items(db, user: str, items: List[Dict[str, Any]], upsert: bool = False) -> Dict[str, Any]:
    now = utcnow()
    cart = db["cart"].find_one_and_update(
        {"user": user},
        {
            "$set": {
                "items": items,
                "totalAmount": calculate_cart_total(db, items),
                "lastUpdated": now,
                "updatedAt": now,
            },
            "$setOnInsert": {"createdAt": now},
        },
        upsert=upsert,
        return_document=ReturnDocument.AFTER,
    )
    if cart is None:
        raise NotFoundError("Cart", user)
    return expand_cart(db, cart)


def upsert_item(db, user: str, product_id: str, quantity: int) -> Dict[str, Any]:
    """Set the quantity of one product in the user's cart, creating the cart if needed."""
    pid = parse_object_id(product_id)
    product = db["product"].find_one({"_id": pid}) if pid else None
    if not product:
        raise NotFoundError("Product", product_id)
    # checked once, nothing is reserved until checkout
    if product.get("stock", 0) < quantity:
        raise InsufficientStockError()

    cart = db["cart"].find_one({"user": user})
    items = list(cart.get("items", [])) if cart else []
    for item in items:
        if item["product"] == pid:
            item["quantity"] = quantity
            break
    else:
        items.append({"product": pid, "quantity": quantity})

    return _save_items(db, user, items, upsert=True)


def remove_item(db, user: str, product_id: str) -> Dict[str, Any]:
    cart = db["cart"].find_one({"user": user})
    if not cart:
        raise NotFoundError("Cart", user)
    pid = parse_object_id(product_id)
    items = [item for item in cart.get("items", []) if item["product"] != pid]
    return _save_items(db, user, items)


def clear_cart(db, user: str) -> Dict[str, Any]:
    cart = db["cart"].find_one({"user": user})
    if not cart:
        raise NotFoundError("Cart", user)
    return _save_items(db, user, [])
