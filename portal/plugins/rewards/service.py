"""
AI points: activity registration, completion credits, reward redemption.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from portal.core.db import Database
from portal.core.errors import NotFound, ValidationFailed
from portal.core.models import User, get_user
from portal.plugins.rewards.models import ActivityRegistration, PointsActivity, Reward, RewardRedemption
from portal.plugins.rewards.schemas import ActivityView, RedemptionView, RegistrationView, RewardView, UserPoints


class RewardsService:

    def __init__(self, db: Database, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or logging.getLogger(__name__)

    async def list_activities(self) -> List[ActivityView]:
        with self.db.session_scope() as session:
            rows = session.execute(
                select(PointsActivity).order_by(PointsActivity.date.desc(), PointsActivity.id.desc())
            ).scalars().all()
            return [ActivityView.model_validate(a) for a in rows]

    async def get_user_points(self, user_id: int) -> UserPoints:
        with self.db.session_scope() as session:
            user = get_user(session, user_id)
            if user is None:
                raise NotFound("User not found")
            rows = session.execute(
                select(ActivityRegistration)
                .where(ActivityRegistration.user_id == user_id)
                .order_by(ActivityRegistration.earned_at.desc(), ActivityRegistration.id.desc())
            ).scalars().all()
            return UserPoints(
                total_points=user.ai_points,
                registrations=[RegistrationView.model_validate(r) for r in rows],
            )

    async def register_for_activity(self, user_id: int, activity_id: int) -> RegistrationView:
        with self.db.session_scope() as session:
            if get_user(session, user_id) is None:
                raise NotFound("User not found")
            activity = session.get(PointsActivity, activity_id)
            if activity is None:
                raise NotFound("Activity not found")
            if activity.status == "completed":
                raise ValidationFailed("Cannot register for completed activity")
            existing = session.execute(
                select(ActivityRegistration).where(
                    ActivityRegistration.user_id == user_id,
                    ActivityRegistration.activity_id == activity_id,
                )
            ).scalars().first()
            if existing is not None:
                raise ValidationFailed("Already registered for this activity")

            registration = ActivityRegistration(user_id=user_id, activity_id=activity_id, points_earned=0)
            session.add(registration)
            session.flush()
            self.logger.info(f"User {user_id} registered for activity {activity_id}")
            return RegistrationView.model_validate(registration)

    async def complete_activity(self, activity_id: int) -> int:
        """
        Mark the activity completed and credit its points to every registered
        user. Returns the number of users credited.
        """
        with self.db.session_scope() as session:
            activity = session.get(PointsActivity, activity_id)
            if activity is None:
                raise NotFound("Activity not found")
            if activity.status == "completed":
                raise ValidationFailed("Activity already completed")
            activity.status = "completed"
            registrations = session.execute(
                select(ActivityRegistration).where(ActivityRegistration.activity_id == activity_id)
            ).scalars().all()
            for registration in registrations:
                registration.points_earned = activity.points
                session.execute(
                    update(User)
                    .where(User.id == registration.user_id)
                    .values(ai_points=User.ai_points + activity.points)
                )
        self.logger.info(f"Activity {activity_id} completed, credited {len(registrations)} users")
        return len(registrations)

    async def list_rewards(self) -> List[RewardView]:
        with self.db.session_scope() as session:
            rows = session.execute(
                select(Reward).where(Reward.available.is_(True)).order_by(Reward.points_cost, Reward.id)
            ).scalars().all()
            return [RewardView.model_validate(r) for r in rows]

    def _deduct_points(self, session: Session, user_id: int, points: int) -> None:
        # Conditional update so a concurrent spend cannot push the balance below zero
        result = session.execute(
            update(User)
            .where(User.id == user_id, User.ai_points >= points)
            .values(ai_points=User.ai_points - points)
        )
        if result.rowcount != 1:
            raise ValidationFailed("Insufficient AI Points")

    async def redeem_reward(self, user_id: int, reward_id: int) -> RedemptionView:
        """Record the redemption and deduct the points in one transaction."""
        with self.db.session_scope() as session:
            user = get_user(session, user_id)
            if user is None:
                raise NotFound("User not found")
            reward = session.get(Reward, reward_id)
            if reward is None:
                raise NotFound("Reward not found")
            if not reward.available:
                raise ValidationFailed("Reward is not available")
            if user.ai_points < reward.points_cost:
                raise ValidationFailed("Insufficient AI Points")

            redemption = RewardRedemption(user_id=user_id, reward_id=reward_id, points_spent=reward.points_cost)
            session.add(redemption)
            session.flush()
            self._deduct_points(session, user_id, reward.points_cost)
            view = RedemptionView.model_validate(redemption)

        self.logger.info(f"User {user_id} redeemed reward {reward_id} for {view.points_spent} points")
        return view
