"""
Read-only dashboard aggregation for the admin back-office.

Everything is recomputed per request. Windows are anchored on `now`:
the monthly series covers the current calendar month and the five before it,
the weekly series covers the current ISO week and the three before it.
"""
import calendar
from datetime import datetime, timedelta
from typing import Optional

import config
from database import serialize_doc, utcnow

SALES_MONTHS = 6
ACTIVITY_WEEKS = 4
RECENT_ORDERS = 5


def months_back(now: datetime, months: int) -> datetime:
    year, month = now.year, now.month - months
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1)


def week_start(now: datetime) -> datetime:
    monday = now - timedelta(days=now.weekday())
    return datetime(monday.year, monday.month, monday.day)


def stock_counts(db, threshold: int = config.LOW_STOCK_THRESHOLD) -> dict:
    low = db["product"].count_documents({"inStock": True, "stockQuantity": {"$gt": 0, "$lt": threshold}})
    out = db["product"].count_documents({"$or": [{"inStock": False}, {"stockQuantity": 0}]})
    return {"lowStockProducts": low, "outOfStockProducts": out}


def total_revenue(db) -> float:
    rows = list(db["order"].aggregate([{"$group": {"_id": None, "total": {"$sum": "$totalAmount"}}}]))
    return rows[0]["total"] if rows else 0


def monthly_sales(db, now: datetime) -> list:
    pipeline = [
        {"$match": {"createdAt": {"$gte": months_back(now, SALES_MONTHS - 1)}}},
        {
            "$group": {
                "_id": {"year": {"$year": "$createdAt"}, "month": {"$month": "$createdAt"}},
                "revenue": {"$sum": "$totalAmount"},
                "orders": {"$sum": 1},
            }
        },
    ]
    rows = sorted(db["order"].aggregate(pipeline), key=lambda r: (r["_id"]["year"], r["_id"]["month"]))
    return [
        {
            "month": f"{calendar.month_abbr[r['_id']['month']]} {r['_id']['year']}",
            "revenue": r["revenue"],
            "orders": r["orders"],
        }
        for r in rows
    ]


def category_distribution(db) -> list:
    rows = db["product"].aggregate([{"$group": {"_id": "$category", "value": {"$sum": 1}}}])
    data = [{"name": r["_id"], "value": r["value"]} for r in rows if r["_id"]]
    return sorted(data, key=lambda d: (-d["value"], d["name"]))


def weekly_activity(db, now: datetime) -> list:
    start = week_start(now) - timedelta(weeks=ACTIVITY_WEEKS - 1)
    buckets = {}
    for order in db["order"].find({"createdAt": {"$gte": start}}, {"createdAt": 1, "totalAmount": 1}):
        iso = order["createdAt"].isocalendar()
        key = (iso[0], iso[1])
        buckets[key] = buckets.get(key, 0) + order.get("totalAmount", 0)
    return [{"week": f"{year}-W{week:02d}", "sales": buckets[(year, week)]} for year, week in sorted(buckets)]


def build_report(db, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    recent = db["order"].find({}).sort("createdAt", -1).limit(RECENT_ORDERS)
    report = {
        "totalProducts": db["product"].count_documents({}),
        "totalUsers": db["user"].count_documents({}),
        "totalOrders": db["order"].count_documents({}),
        "totalRevenue": total_revenue(db),
        "recentOrders": [serialize_doc(o) for o in recent],
        "salesData": monthly_sales(db, now),
        "categoryData": category_distribution(db),
        "recentActivity": weekly_activity(db, now),
    }
    report.update(stock_counts(db))
    return report
