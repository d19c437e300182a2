from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ActivityView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    category: str
    points: int
    date: date
    status: str


class RegistrationView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    activity_id: int
    points_earned: int
    earned_at: datetime


class UserPoints(BaseModel):
    total_points: int
    registrations: List[RegistrationView]


class RewardView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    points_cost: int
    icon: Optional[str] = None
    available: bool


class RedemptionView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    reward_id: int
    points_spent: int
    redeemed_at: datetime
