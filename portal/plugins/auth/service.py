"""
Sign-in and user profile operations on top of TokenService.
"""
import logging
from typing import Optional

from portal.core.cache_helper import CacheHelper
from portal.core.db import Database
from portal.core.errors import NotFound, ValidationFailed
from portal.core.models import User, get_user, get_user_by_student_id
from portal.plugins.auth.schemas import SignInResult, SsoProfile, UserView
from portal.plugins.auth.tokens import TokenIdentity, TokenService


class AuthService:

    def __init__(
        self,
        db: Database,
        tokens: TokenService,
        cache: Optional[CacheHelper] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.tokens = tokens
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)

    async def sign_in(self, profile: SsoProfile) -> SignInResult:
        """Create or refresh the user from the SSO profile and issue a token pair."""
        with self.db.session_scope() as session:
            user = get_user_by_student_id(session, profile.student_id)
            if user is None:
                user = User(
                    student_id=profile.student_id,
                    email=profile.email,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    role="student",
                )
                session.add(user)
                session.flush()
                self.logger.info(f"New user created via SSO: {user.student_id}")
            else:
                user.email = profile.email
                user.first_name = profile.first_name
                user.last_name = profile.last_name
                session.flush()
                self.logger.info(f"User updated via SSO: {user.student_id}")
            view = UserView.model_validate(user)

        tokens = await self.tokens.issue(
            TokenIdentity(id=view.id, student_id=view.student_id, email=view.email, role=view.role)
        )
        return SignInResult(user=view, tokens=tokens)

    async def sign_out(self, user_id: int) -> None:
        await self.tokens.revoke(user_id)

    async def get_user_profile(self, user_id: int) -> UserView:
        with self.db.session_scope() as session:
            user = get_user(session, user_id)
            if user is None:
                raise NotFound("User not found")
            return UserView.model_validate(user)

    async def update_user_profile(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserView:
        """Change editable profile fields and drop any cached data keyed on the user."""
        if email is not None and "@" not in email:
            raise ValidationFailed("Invalid email address")
        with self.db.session_scope() as session:
            user = get_user(session, user_id)
            if user is None:
                raise NotFound("User not found")
            if first_name is not None:
                user.first_name = first_name
            if last_name is not None:
                user.last_name = last_name
            if email is not None:
                user.email = email
            session.flush()
            view = UserView.model_validate(user)

        if self.cache is not None:
            self.cache.delete_by_prefix(f"user:{user_id}:")
        self.logger.info(f"User profile updated: {view.student_id}")
        return view
