"""SaaS dashboard: users and daily analytics rollups."""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from database import create_document, serialize_doc, utcnow
from errors import DuplicateEmailError, InvalidInputError
from schemas import AnalyticsUpdate, User

PERIODS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "7d"
RECENT_USERS_LIMIT = 10


# ---------- Users ----------

def list_users(db) -> List[Dict[str, Any]]:
    cursor = db["user"].find({}).sort("joinedAt", DESCENDING).limit(RECENT_USERS_LIMIT)
    return [serialize_doc(u) for u in cursor]


def create_user(db, user: User) -> Dict[str, Any]:
    doc = user.model_dump(by_alias=True)
    doc["email"] = doc["email"].strip().lower()
    now = utcnow()
    doc["joinedAt"] = doc.get("joinedAt") or now
    doc["lastLogin"] = doc.get("lastLogin") or now
    if db["user"].find_one({"email": doc["email"]}):
        raise DuplicateEmailError(doc["email"])
    try:
        user_id = create_document("user", doc, db=db)
    except DuplicateKeyError as e:
        # lost a race with a concurrent signup
        raise DuplicateEmailError(doc["email"]) from e
    return serialize_doc(db["user"].find_one({"_id": ObjectId(user_id)}))


# ---------- Analytics ----------

def period_start(period: Optional[str], now: Optional[datetime] = None) -> datetime:
    days = PERIODS.get(period or DEFAULT_PERIOD, PERIODS[DEFAULT_PERIOD])
    return (now or utcnow()) - timedelta(days=days)


def summarize(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    rows = list(rows)
    subs = [r.get("subscriptions") or {} for r in rows]
    return {
        "totalRevenue": sum(r.get("revenue", 0) for r in rows),
        "totalUsers": sum(r.get("newUsers", 0) for r in rows),
        "averageActiveUsers": sum(r.get("activeUsers", 0) for r in rows) / len(rows) if rows else 0,
        "subscriptionBreakdown": {
            plan: sum(s.get(plan, 0) for s in subs) for plan in ("basic", "pro", "enterprise")
        },
    }


def _rows_for(db, period: Optional[str]) -> List[Dict[str, Any]]:
    cursor = db["analytics"].find({"date": {"$gte": period_start(period)}}).sort("date", ASCENDING)
    return list(cursor)


def get_analytics(db, period: Optional[str] = None) -> Dict[str, Any]:
    rows = _rows_for(db, period)
    return {"analytics": [serialize_doc(r) for r in rows], "summary": summarize(rows)}


def get_summary(db, period: Optional[str] = None) -> Dict[str, Any]:
    return summarize(_rows_for(db, period))


def record_today(db, update: AnalyticsUpdate) -> Dict[str, Any]:
    """Create or update the rollup row for the current UTC day."""
    fields = update.model_dump(by_alias=True, exclude_none=True)
    if not fields:
        raise InvalidInputError("No analytics fields provided")
    now = utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    row = db["analytics"].find_one_and_update(
        {"date": today},
        {"$set": {**fields, "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return serialize_doc(row)
