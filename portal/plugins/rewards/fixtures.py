"""
Starter catalogue of activities and rewards for demos and fresh databases.
"""
from datetime import date, timedelta
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.plugins.rewards.models import PointsActivity, Reward

REWARDS: List[Dict[str, Any]] = [
    {"name": "Free Coffee Voucher", "description": "5 free coffees at campus café", "points_cost": 50, "icon": "☕"},
    {"name": "Priority Course Registration", "description": "Register for courses 24 hours early", "points_cost": 100, "icon": "📚"},
    {"name": "Extended Library Access", "description": "1 month of 24/7 library access", "points_cost": 75, "icon": "📖"},
    {"name": "Campus Merch", "description": "Exclusive Aivancity hoodie", "points_cost": 150, "icon": "👕"},
]


def activities(today: date) -> List[Dict[str, Any]]:
    return [
        {"name": "Study Group Session", "description": "Participate in a peer-led study group",
         "category": "study_group", "points": 10, "date": today + timedelta(days=2)},
        {"name": "Research Paper Presentation", "description": "Present your research at the symposium",
         "category": "academic", "points": 50, "date": today + timedelta(days=7)},
        {"name": "Volunteer at Career Fair", "description": "Help organize and run the career fair",
         "category": "volunteer", "points": 30, "date": today + timedelta(days=21)},
    ]


def seed_catalog(session: Session, today: date = None) -> bool:
    """Insert the starter activities and rewards into empty tables. Returns True if anything was added."""
    added = False
    if not session.execute(select(func.count()).select_from(PointsActivity)).scalar():
        for row in activities(today or date.today()):
            session.add(PointsActivity(status="upcoming", **row))
        added = True
    if not session.execute(select(func.count()).select_from(Reward)).scalar():
        for row in REWARDS:
            session.add(Reward(available=True, **row))
        added = True
    return added
