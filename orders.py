"""Checkout and order management."""
import logging
import math
from datetime import timedelta
from typing import Any, Dict, List, Optional, get_args

from bson import ObjectId
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument

from cart import effective_price
from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import (
    EmptyCartError,
    InsufficientStockError,
    InvalidInputError,
    InvalidTransitionError,
    NoValidUpdatesError,
    NotFoundError,
    describe_validation_errors,
)
from schemas import Order, OrderItem, OrderStatus, OrderUpdate, PaymentMethod, ShippingAddress

logger = logging.getLogger(__name__)

ESTIMATED_DELIVERY = timedelta(days=7)
ALLOWED_UPDATES = ("status", "paymentStatus", "trackingNumber")
MAX_PAGE_SIZE = 100

STATUS_TRANSITIONS: Dict[str, frozenset] = {
    "pending": frozenset({"processing", "cancelled"}),
    "processing": frozenset({"shipped", "cancelled"}),
    "shipped": frozenset({"delivered"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}


def can_transition(current: str, requested: str) -> bool:
    return current == requested or requested in STATUS_TRANSITIONS.get(current, frozenset())


def _sources_for(requested: str) -> List[str]:
    """Statuses from which `requested` may be written, itself included."""
    return sorted(s for s in STATUS_TRANSITIONS if can_transition(s, requested))


def _expand_orders(db, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    product_ids = {item["product"] for order in orders for item in order.get("items", [])}
    products = {}
    if product_ids:
        cursor = db["product"].find({"_id": {"$in": list(product_ids)}}, {"name": 1, "image": 1})
        products = {p["_id"]: serialize_doc(p) for p in cursor}
    expanded = []
    for order in orders:
        out = serialize_doc(order)
        out["items"] = [
            {
                "productId": str(item["product"]),
                "quantity": item["quantity"],
                "price": item["price"],
                "product": products.get(item["product"]),
            }
            for item in order.get("items", [])
        ]
        expanded.append(out)
    return expanded


def _restore_stock(db, taken) -> None:
    for product_id, quantity in reversed(taken):
        db["product"].update_one({"_id": product_id}, {"$inc": {"stock": quantity}})
    if taken:
        logger.warning("Checkout aborted, restored stock for %d product(s)", len(taken))


def _take_stock(db, item: Dict[str, Any]) -> Dict[str, Any]:
    """Atomically decrement stock if enough is left; returns the updated product."""
    quantity = item["quantity"]
    product = db["product"].find_one_and_update(
        {"_id": item["product"], "stock": {"$gte": quantity}},
        {"$inc": {"stock": -quantity}},
        return_document=ReturnDocument.AFTER,
    )
    if product is not None:
        return product
    current = db["product"].find_one({"_id": item["product"]}, {"name": 1})
    if current is None:
        raise NotFoundError("Product", str(item["product"]))
    raise InsufficientStockError(current.get("name"))


def place_order(db, user: str, shipping_address, payment_method: str) -> Dict[str, Any]:
    """
    Turn the user's cart into a pending order.

    Stock for every line is taken with a conditional decrement. If any line
    fails, every decrement already applied is put back before the error
    propagates, so a failed checkout leaves the catalog untouched. The cart is
    emptied only once the order has been stored.
    """
    if not user or not shipping_address or not payment_method:
        raise InvalidInputError("User, shipping address, and payment method are required")
    if payment_method not in get_args(PaymentMethod):
        raise InvalidInputError(f"Invalid payment method: {payment_method}")
    try:
        address = ShippingAddress.model_validate(shipping_address)
    except ValidationError as e:
        raise InvalidInputError(describe_validation_errors(e.errors())) from e

    cart = db["cart"].find_one({"user": user})
    if not cart or not cart.get("items"):
        raise EmptyCartError()

    taken = []
    lines = []
    total = 0.0
    try:
        for item in cart["items"]:
            product = _take_stock(db, item)
            taken.append((product["_id"], item["quantity"]))
            price = effective_price(product["price"], product.get("discount"))
            total += price * item["quantity"]
            lines.append(OrderItem(product=str(product["_id"]), quantity=item["quantity"], price=price))

        now = utcnow()
        order = Order(
            user=user,
            items=lines,
            total_amount=round(total, 2),
            shipping_address=address,
            payment_method=payment_method,
            estimated_delivery=now + ESTIMATED_DELIVERY,
        )
        doc = order.model_dump(by_alias=True)
        for line in doc["items"]:
            line["product"] = ObjectId(line["product"])
        doc["createdAt"] = now
        order_id = create_document("order", doc, db=db)
    except Exception:
        _restore_stock(db, taken)
        raise

    db["cart"].update_one(
        {"_id": cart["_id"]},
        {"$set": {"items": [], "totalAmount": 0, "lastUpdated": now, "updatedAt": now}},
    )
    logger.info("Order %s placed for user %s (%d items, total %.2f)", order_id, user, len(lines), order.total_amount)
    return get_order(db, order_id)


def get_order(db, order_id: str) -> Dict[str, Any]:
    oid = parse_object_id(order_id)
    order = db["order"].find_one({"_id": oid}) if oid else None
    if not order:
        raise NotFoundError("Order", order_id)
    return _expand_orders(db, [order])[0]


def list_orders(db, user: str, status: Optional[str] = None, order_id: Optional[str] = None,
                page: int = 1, limit: int = 10) -> Dict[str, Any]:
    if not user:
        raise InvalidInputError("User ID is required")
    if page < 1:
        raise InvalidInputError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidInputError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if status and status not in get_args(OrderStatus):
        raise InvalidInputError(f"Invalid status: {status}")

    query: Dict[str, Any] = {"user": user}
    if status:
        query["status"] = status
    if order_id:
        # an id that can't be an ObjectId simply matches nothing
        query["_id"] = parse_object_id(order_id)

    cursor = (
        db["order"].find(query)
        .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        .skip((page - 1) * limit)
        .limit(limit)
    )
    orders = _expand_orders(db, list(cursor))
    total = db["order"].count_documents(query)
    return {
        "orders": orders,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


def update_order(db, order_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Apply an allow-listed update; status changes must follow STATUS_TRANSITIONS."""
    changes = {k: v for k, v in (updates or {}).items() if k in ALLOWED_UPDATES}
    if not changes:
        raise NoValidUpdatesError()
    for field in ("status", "paymentStatus"):
        if field in changes and changes[field] is None:
            raise InvalidInputError(f"{field} cannot be null")
    try:
        OrderUpdate.model_validate(changes)
    except ValidationError as e:
        raise InvalidInputError(describe_validation_errors(e.errors())) from e

    oid = parse_object_id(order_id)
    if oid is None:
        raise NotFoundError("Order", order_id)

    query: Dict[str, Any] = {"_id": oid}
    requested = changes.get("status")
    if requested is not None:
        query["status"] = {"$in": _sources_for(requested)}

    order = db["order"].find_one_and_update(
        query,
        {"$set": {**changes, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if order is None:
        current = db["order"].find_one({"_id": oid}, {"status": 1})
        if current is None:
            raise NotFoundError("Order", order_id)
        raise InvalidTransitionError(current["status"], requested)
    if requested is not None:
        logger.info("Order %s status set to %s", order_id, requested)
    return _expand_orders(db, [order])[0]
