"""
Creator analytics

All figures are computed in memory from one bulk read of the creator's
courses and one of the enrollments on those courses.
"""

import calendar
import math
from datetime import datetime
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.courses.models import EnrollmentStatus
from app.users.user_permissions import CurrentUser

RECENT_ACTIVITY_LIMIT = 5
MONTHS_OF_REVENUE = 6

# ==================== AGGREGATION HELPERS ====================

def completion_rate(enrollments: List[dict]) -> int:
    """Whole-number percentage of completed enrollments, halves rounded up"""
    if not enrollments:
        return 0
    completed = sum(1 for e in enrollments if e.get("status") == EnrollmentStatus.COMPLETED.value)
    return int(math.floor(completed / len(enrollments) * 100 + 0.5))


def unique_students(enrollments: List[dict], status: Optional[str] = None) -> int:
    return len({
        e["user_id"] for e in enrollments
        if status is None or e.get("status") == status
    })


def total_revenue(enrollments: List[dict], prices: Dict[str, float]) -> float:
    """Each enrollment earns its course's list price"""
    return sum(prices.get(e["course_id"], 0) for e in enrollments)


def monthly_revenue(
    enrollments: List[dict],
    prices: Dict[str, float],
    now: Optional[datetime] = None
) -> List[dict]:
    """
    Revenue for the last six calendar months, oldest first

    Buckets are keyed on the enrollment's created_at month and year; the
    current month is the last bucket.
    """
    now = now or datetime.utcnow()

    buckets = []
    year, month = now.year, now.month
    for _ in range(MONTHS_OF_REVENUE):
        buckets.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    buckets.reverse()

    revenue = {key: 0 for key in buckets}
    for e in enrollments:
        created = e.get("created_at")
        if not created:
            continue
        key = (created.year, created.month)
        if key in revenue:
            revenue[key] += prices.get(e["course_id"], 0)

    return [
        {"month": calendar.month_abbr[m], "year": y, "revenue": revenue[(y, m)]}
        for y, m in buckets
    ]


def course_performance(courses: List[dict], enrollments: List[dict]) -> List[dict]:
    by_course: Dict[str, List[dict]] = {c["course_id"]: [] for c in courses}
    for e in enrollments:
        by_course.setdefault(e["course_id"], []).append(e)

    performance = []
    for course in courses:
        course_enrollments = by_course[course["course_id"]]
        performance.append({
            "course_id": course["course_id"],
            "title": course.get("title"),
            "total_enrollments": len(course_enrollments),
            "completion_rate": completion_rate(course_enrollments),
            "revenue": len(course_enrollments) * course.get("price", 0)
        })
    return performance

# ==================== QUERIES ====================

async def _load_creator_data(db: AsyncIOMotorDatabase, creator: CurrentUser):
    courses = await db.courses.find(
        {"creator_id": creator.user_id},
        {"_id": 0},
        sort=[("updated_at", -1)]
    ).to_list(length=None)

    course_ids = [c["course_id"] for c in courses]
    enrollments = await db.enrollments.find(
        {"course_id": {"$in": course_ids}},
        {"_id": 0}
    ).to_list(length=None) if course_ids else []

    return courses, enrollments


async def get_dashboard(db: AsyncIOMotorDatabase, creator: CurrentUser) -> dict:
    courses, enrollments = await _load_creator_data(db, creator)
    prices = {c["course_id"]: c.get("price", 0) for c in courses}

    performance = course_performance(courses[:RECENT_ACTIVITY_LIMIT], enrollments)
    recent_activity = [
        {
            "course_id": p["course_id"],
            "title": p["title"],
            "enrolled_students": p["total_enrollments"],
            "revenue": p["revenue"]
        }
        for p in performance
    ]

    return {
        "total_students": unique_students(enrollments),
        "total_courses": len(courses),
        "total_revenue": total_revenue(enrollments, prices),
        "completion_rate": completion_rate(enrollments),
        "recent_activity": recent_activity
    }


async def get_detailed(db: AsyncIOMotorDatabase, creator: CurrentUser, now: Optional[datetime] = None) -> dict:
    courses, enrollments = await _load_creator_data(db, creator)
    prices = {c["course_id"]: c.get("price", 0) for c in courses}

    return {
        "course_performance": course_performance(courses, enrollments),
        "monthly_revenue": monthly_revenue(enrollments, prices, now),
        "student_engagement": {
            "total_students": unique_students(enrollments),
            "active_students": unique_students(enrollments, EnrollmentStatus.ACTIVE.value),
            "completion_rate": completion_rate(enrollments)
        }
    }
