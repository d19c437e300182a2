from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from portal.plugins.auth.tokens import AuthTokenPair


class SsoProfile(BaseModel):
    """Identity asserted by the university SSO provider."""
    student_id: str
    email: str
    first_name: str
    last_name: str


class UserView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    ai_points: int
    created_at: Optional[datetime] = None


class SignInResult(BaseModel):
    user: UserView
    tokens: AuthTokenPair
