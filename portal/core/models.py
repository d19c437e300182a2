"""
Core DB models: portal users and their AI-points balance.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, select
from sqlalchemy.orm import Session

from portal.core.db import Base


def _utc_now() -> datetime:
    """UTC now as naive datetime for DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Portal user, created or refreshed from the SSO profile on sign-in."""
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("ai_points >= 0", name="ck_users_ai_points_non_negative"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    role = Column(String(32), nullable=False, default="student")
    ai_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=_utc_now, onupdate=_utc_now, nullable=False)


def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_student_id(session: Session, student_id: str) -> Optional[User]:
    return session.execute(select(User).where(User.student_id == student_id)).scalars().first()
