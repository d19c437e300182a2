"""
Starter campus events for demos and fresh databases, dated relative to today.
"""
from datetime import date, timedelta
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.plugins.events.models import Event


def events(today: date) -> List[Dict[str, Any]]:
    return [
        {"name": "AI Research Symposium",
         "description": "Annual symposium featuring cutting-edge AI research from students and faculty.",
         "event_type": "academic", "date": today + timedelta(days=7), "start_time": "09:00", "end_time": "17:00",
         "location": "Main Auditorium", "max_attendees": 200, "ai_points": 50},
        {"name": "Hackathon 2024",
         "description": "48-hour coding competition with prizes and networking opportunities.",
         "event_type": "competition", "date": today + timedelta(days=14), "start_time": "18:00", "end_time": "18:00",
         "location": "Innovation Lab", "max_attendees": 100, "ai_points": 100},
        {"name": "Career Fair",
         "description": "Meet with top tech companies and explore internship opportunities.",
         "event_type": "career", "date": today + timedelta(days=21), "start_time": "10:00", "end_time": "16:00",
         "location": "Sports Hall", "max_attendees": 500, "ai_points": 30},
        {"name": "Wellness Workshop: Stress Management",
         "description": "Learn techniques to manage academic stress and maintain mental health.",
         "event_type": "wellness", "date": today + timedelta(days=3), "start_time": "14:00", "end_time": "16:00",
         "location": "Wellness Center", "max_attendees": 30, "ai_points": 20},
        {"name": "International Food Festival",
         "description": "Celebrate diversity with food from around the world.",
         "event_type": "social", "date": today + timedelta(days=10), "start_time": "12:00", "end_time": "15:00",
         "location": "Campus Courtyard", "max_attendees": 300, "ai_points": 15},
    ]


def seed_events(session: Session, today: date = None) -> bool:
    """Insert the starter events into an empty table. Returns True if anything was added."""
    if session.execute(select(func.count()).select_from(Event)).scalar():
        return False
    for row in events(today or date.today()):
        session.add(Event(**row))
    return True
