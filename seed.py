"""
Demo fixture data

Seeding wipes the target collections before inserting, so it is only
reachable through the operator-guarded endpoints.
"""
import logging
import random
from datetime import timedelta
from typing import Dict, List, Optional

from database import utcnow
from schemas import Analytics, Product, User

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {
        "name": "Wireless Noise-Cancelling Headphones",
        "description": "Premium wireless headphones with active noise cancellation and 30-hour battery life.",
        "price": 299.99,
        "category": "electronics",
        "image": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800&q=80",
        "stock": 50,
        "rating": 4.5,
        "reviewCount": 128,
        "featured": True,
        "discount": 10,
        "tags": ["audio", "wireless", "headphones"],
    },
    {
        "name": 'Smart LED TV 55"',
        "description": "4K Ultra HD Smart TV with HDR and built-in streaming apps.",
        "price": 799.99,
        "category": "electronics",
        "image": "https://images.unsplash.com/photo-1593784991095-a205069470b6?w=800&q=80",
        "stock": 25,
        "rating": 4.8,
        "reviewCount": 89,
        "featured": True,
        "tags": ["tv", "smart", "4k"],
    },
    {
        "name": "Modern Leather Sofa",
        "description": "Contemporary leather sofa with premium cushioning and durable frame.",
        "price": 1299.99,
        "category": "furniture",
        "image": "https://images.unsplash.com/photo-1555041469-a586c61ea9bc?w=800&q=80",
        "stock": 15,
        "rating": 4.6,
        "reviewCount": 45,
        "featured": True,
        "discount": 15,
        "tags": ["furniture", "living room", "leather"],
    },
    {
        "name": "Ergonomic Office Chair",
        "description": "Adjustable office chair with lumbar support and breathable mesh back.",
        "price": 249.99,
        "category": "furniture",
        "image": "https://images.unsplash.com/photo-1505843490538-5133c6c7d0e1?w=800&q=80",
        "stock": 30,
        "rating": 4.4,
        "reviewCount": 67,
        "tags": ["office", "ergonomic", "chair"],
    },
    {
        "name": "Men's Casual Denim Jacket",
        "description": "Classic denim jacket with modern fit and premium quality.",
        "price": 89.99,
        "category": "clothing",
        "image": "https://images.unsplash.com/photo-1576995853123-5a10305d93c0?w=800&q=80",
        "stock": 40,
        "rating": 4.3,
        "reviewCount": 92,
        "tags": ["men", "jacket", "denim"],
    },
    {
        "name": "Women's Running Shoes",
        "description": "Lightweight running shoes with responsive cushioning and breathable mesh.",
        "price": 129.99,
        "category": "clothing",
        "image": "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=800&q=80",
        "stock": 35,
        "rating": 4.7,
        "reviewCount": 156,
        "featured": True,
        "discount": 20,
        "tags": ["women", "shoes", "running"],
    },
    {
        "name": "Bestselling Fiction Novel",
        "description": "Award-winning fiction novel that has captured readers worldwide.",
        "price": 19.99,
        "category": "books",
        "image": "https://images.unsplash.com/photo-1544947950-fa07a98d237f?w=800&q=80",
        "stock": 100,
        "rating": 4.9,
        "reviewCount": 234,
        "featured": True,
        "tags": ["fiction", "novel", "bestseller"],
    },
    {
        "name": "Programming Guide 2024",
        "description": "Comprehensive guide to modern programming languages and frameworks.",
        "price": 39.99,
        "category": "books",
        "image": "https://images.unsplash.com/photo-1517694712202-14dd9538aa97?w=800&q=80",
        "stock": 45,
        "rating": 4.6,
        "reviewCount": 78,
        "discount": 5,
        "tags": ["programming", "education", "technology"],
    },
]

# (name, email, plan, status, joined days ago, last login days ago)
DEMO_USERS = [
    ("John Smith", "john@example.com", "enterprise", "active", 7, 0),
    ("Sarah Johnson", "sarah@example.com", "pro", "active", 5, 0),
    ("Michael Brown", "michael@example.com", "basic", "active", 3, 0),
    ("Emily Davis", "emily@example.com", "pro", "inactive", 10, 2),
    ("David Wilson", "david@example.com", "enterprise", "suspended", 15, 5),
]

ANALYTICS_DAYS = 30


def _stamped(doc: Dict, now) -> Dict:
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def seed_products(db) -> int:
    """Replace the whole catalog with DEMO_PRODUCTS."""
    now = utcnow()
    docs = [_stamped(Product(**p).model_dump(by_alias=True), now) for p in DEMO_PRODUCTS]
    logger.warning("Seeding catalog: deleting all products")
    db["product"].delete_many({})
    result = db["product"].insert_many(docs)
    return len(result.inserted_ids)


def generate_analytics(rng: Optional[random.Random] = None) -> List[Dict]:
    """One randomised but plausible rollup row per day for the last ANALYTICS_DAYS days plus today."""
    rng = rng or random.Random()
    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    rows = []
    for days_ago in range(ANALYTICS_DAYS, -1, -1):
        row = Analytics(
            date=today - timedelta(days=days_ago),
            active_users=rng.randint(20, 69),
            new_users=rng.randint(1, 10),
            revenue=rng.randint(1000, 5999),
            subscriptions={
                "basic": rng.randint(10, 39),
                "pro": rng.randint(5, 24),
                "enterprise": rng.randint(2, 11),
            },
            metrics={
                "pageViews": rng.randint(500, 1499),
                "uniqueVisitors": rng.randint(200, 499),
                "averageSessionDuration": rng.randint(10, 29),
            },
        )
        rows.append(row.model_dump(by_alias=True))
    return rows


def seed_saas(db, rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Replace SaaS users and analytics with demo data."""
    now = utcnow()
    users = []
    for name, email, plan, status, joined, last_login in DEMO_USERS:
        user = User(
            name=name,
            email=email,
            plan=plan,
            status=status,
            joined_at=now - timedelta(days=joined),
            last_login=now - timedelta(days=last_login),
        )
        users.append(_stamped(user.model_dump(by_alias=True), now))
    analytics = [_stamped(row, now) for row in generate_analytics(rng)]

    logger.warning("Seeding SaaS data: deleting all users and analytics")
    db["user"].delete_many({})
    db["analytics"].delete_many({})
    db["user"].insert_many(users)
    db["analytics"].insert_many(analytics)
    return {"usersCreated": len(users), "analyticsCreated": len(analytics)}
