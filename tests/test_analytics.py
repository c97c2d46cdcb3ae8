from datetime import datetime, timedelta

from analytics import build_report, months_back, week_start
from tests.conftest import make_product

NOW = datetime(2026, 10, 19, 12, 0)


def add_order(db, amount, created_at):
    db["order"].insert_one(
        {
            "userId": "u1",
            "orderNumber": f"RM{int(created_at.timestamp() * 1000)}",
            "items": [],
            "totalAmount": amount,
            "status": "pending",
            "createdAt": created_at,
        }
    )


def iso_label(moment):
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def test_window_helpers():
    assert months_back(datetime(2026, 2, 10), 5) == datetime(2025, 9, 1)
    assert week_start(datetime(2026, 10, 21, 18, 30)) == datetime(2026, 10, 19)


def test_report_on_empty_store(client, admin_headers):
    res = client.get("/api/admin/analytics", headers=admin_headers)
    assert res.status_code == 200
    report = res.json()
    assert report["totalProducts"] == 0
    assert report["totalOrders"] == 0
    assert report["totalRevenue"] == 0
    assert report["salesData"] == []
    assert report["categoryData"] == []
    assert report["recentActivity"] == []
    assert report["recentOrders"] == []


def test_report_aggregates(db):
    make_product(category="Silk", stockQuantity=5)
    make_product(category="Silk", stockQuantity=20)
    make_product(category="Cotton", stockQuantity=0, inStock=False)
    make_product(category="Cotton", stockQuantity=0, inStock=True)
    make_product(category="Chiffon", stockQuantity=40)
    db["user"].insert_many([{"name": "A", "email": "a@example.com"}, {"name": "B", "email": "b@example.com"}])

    yesterday = NOW - timedelta(days=1)
    three_weeks_ago = NOW - timedelta(days=20)
    add_order(db, 2000, NOW)
    add_order(db, 1000, yesterday)
    add_order(db, 500, three_weeks_ago)
    add_order(db, 700, NOW - timedelta(days=40))
    add_order(db, 300, datetime(2026, 3, 15))

    report = build_report(db, now=NOW)

    assert report["totalProducts"] == 5
    assert report["totalUsers"] == 2
    assert report["totalOrders"] == 5
    assert report["totalRevenue"] == 4500
    assert report["lowStockProducts"] == 1
    assert report["outOfStockProducts"] == 2

    assert report["salesData"] == [
        {"month": "Sep 2026", "revenue": 1200, "orders": 2},
        {"month": "Oct 2026", "revenue": 3000, "orders": 2},
    ]
    assert report["categoryData"] == [
        {"name": "Cotton", "value": 2},
        {"name": "Silk", "value": 2},
        {"name": "Chiffon", "value": 1},
    ]
    assert report["recentActivity"] == [
        {"week": iso_label(three_weeks_ago), "sales": 500},
        {"week": iso_label(yesterday), "sales": 1000},
        {"week": iso_label(NOW), "sales": 2000},
    ]
    assert len(report["recentOrders"]) == 5
    assert report["recentOrders"][0]["totalAmount"] == 2000
