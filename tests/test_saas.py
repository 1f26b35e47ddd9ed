"""Tests for the SaaS dashboard users and analytics."""

import pytest

import saas
from errors import DuplicateEmailError, InvalidInputError
from schemas import AnalyticsUpdate, User

from .conftest import days_ago


def add_row(db, days, revenue, new_users=1, active_users=10, basic=1, pro=2, enterprise=3):
    db["analytics"].insert_one(
        {
            "date": days_ago(days),
            "activeUsers": active_users,
            "newUsers": new_users,
            "revenue": revenue,
            "subscriptions": {"basic": basic, "pro": pro, "enterprise": enterprise},
            "metrics": {"pageViews": 0, "uniqueVisitors": 0, "averageSessionDuration": 0},
        }
    )


class TestSummary:
    def test_empty(self):
        assert saas.summarize([]) == {
            "totalRevenue": 0,
            "totalUsers": 0,
            "averageActiveUsers": 0,
            "subscriptionBreakdown": {"basic": 0, "pro": 0, "enterprise": 0},
        }

    def test_period_filter(self, db):
        add_row(db, 1, 100, new_users=2, active_users=10)
        add_row(db, 3, 200, new_users=3, active_users=30)
        add_row(db, 20, 1000, new_users=5, active_users=50)

        week = saas.get_summary(db, "7d")
        assert week["totalRevenue"] == 300
        assert week["totalUsers"] == 5
        assert week["averageActiveUsers"] == 20
        assert week["subscriptionBreakdown"] == {"basic": 2, "pro": 4, "enterprise": 6}

        month = saas.get_summary(db, "30d")
        assert month["totalRevenue"] == 1300

    def test_unknown_period_falls_back_to_week(self, db):
        add_row(db, 20, 1000)
        assert saas.get_summary(db, "1y")["totalRevenue"] == 0

    def test_period_names_are_defined_once(self):
        import schemas

        assert set(saas.PERIODS) == {"7d", "30d", "90d"}
        assert saas.DEFAULT_PERIOD in saas.PERIODS
        assert not hasattr(schemas, "Period")

    def test_analytics_sorted_by_date(self, db):
        add_row(db, 2, 20)
        add_row(db, 5, 50)
        result = saas.get_analytics(db, "7d")
        assert [r["revenue"] for r in result["analytics"]] == [50, 20]
        assert result["summary"]["totalRevenue"] == 70


class TestRecordToday:
    def test_upserts_single_row(self, db):
        saas.record_today(db, AnalyticsUpdate(revenue=10))
        row = saas.record_today(db, AnalyticsUpdate(active_users=4))
        assert db["analytics"].count_documents({}) == 1
        assert row["revenue"] == 10
        assert row["activeUsers"] == 4

    def test_requires_fields(self, db):
        with pytest.raises(InvalidInputError):
            saas.record_today(db, AnalyticsUpdate())


class TestUsers:
    def test_create_normalizes_email(self, db):
        user = saas.create_user(db, User(name="Ann", email="Ann@Example.com"))
        assert user["email"] == "ann@example.com"
        assert user["plan"] == "basic"
        assert user["status"] == "active"
        assert user["joinedAt"]

    def test_duplicate_email(self, db):
        saas.create_user(db, User(name="Ann", email="ann@example.com"))
        with pytest.raises(DuplicateEmailError):
            saas.create_user(db, User(name="Other", email="ANN@example.com"))

    def test_list_recent_limit(self, db):
        for i in range(12):
            db["user"].insert_one({"name": f"u{i}", "email": f"u{i}@example.com", "joinedAt": days_ago(i)})
        users = saas.list_users(db)
        assert len(users) == 10
        assert users[0]["name"] == "u0"


class TestSaasApi:
    def test_users(self, client):
        response = client.post("/saas/users", json={"name": "Ann", "email": "ann@example.com", "plan": "pro"})
        assert response.status_code == 201
        assert client.post("/saas/users", json={"name": "Ann", "email": "ann@example.com"}).status_code == 400
        assert client.post("/saas/users", json={"name": "Bob", "email": "not-an-email"}).status_code == 400
        assert [u["email"] for u in client.get("/saas/users").json()] == ["ann@example.com"]

    def test_analytics_and_summary(self, client, db):
        add_row(db, 1, 100)
        response = client.get("/saas/analytics", params={"period": "30d"})
        assert response.status_code == 200
        assert len(response.json()["analytics"]) == 1
        response = client.get("/saas/summary")
        assert response.json()["totalRevenue"] == 100

    def test_record_analytics(self, client):
        response = client.post("/saas/analytics", json={"revenue": 42, "subscriptions": {"pro": 3}})
        assert response.status_code == 201
        assert response.json()["subscriptions"] == {"basic": 0, "pro": 3, "enterprise": 0}
