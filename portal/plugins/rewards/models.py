"""
SQLAlchemy models for AI points: activities students register for, the
reward catalogue, and redemptions.
"""
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from portal.core.db import Base
from portal.core.models import _utc_now


class PointsActivity(Base):
    __tablename__ = "ai_points_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(64), nullable=False)
    points = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(32), nullable=False, default="upcoming")  # upcoming | completed


class ActivityRegistration(Base):
    """A user's sign-up for an activity; points_earned stays 0 until the activity completes."""
    __tablename__ = "user_ai_points"
    __table_args__ = (UniqueConstraint("user_id", "activity_id", name="uq_user_activity"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("ai_points_activities.id", ondelete="CASCADE"), nullable=False)
    points_earned = Column(Integer, nullable=False, default=0)
    earned_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)


class Reward(Base):
    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    points_cost = Column(Integer, nullable=False)
    icon = Column(String(16), nullable=True)
    available = Column(Boolean, nullable=False, default=True)


class RewardRedemption(Base):
    __tablename__ = "reward_redemptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reward_id = Column(Integer, ForeignKey("rewards.id"), nullable=False)
    points_spent = Column(Integer, nullable=False)
    redeemed_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)
