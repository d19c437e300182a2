"""
Read views of chat rows handed back to callers.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChatMessageView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    role: str
    content: str
    created_at: datetime


class ChatSessionView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    bot_type: str
    started_at: datetime


class CreatedSession(BaseModel):
    session: ChatSessionView
    welcome_message: ChatMessageView


class SessionPreview(BaseModel):
    """Session plus its most recent message, for session lists."""
    session: ChatSessionView
    last_message: Optional[ChatMessageView] = None
