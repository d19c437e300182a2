"""
SQLAlchemy models for AI chat: sessions owned by a user, messages owned by a session.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from portal.core.db import Base
from portal.core.models import _utc_now


class ChatSession(Base):
    __tablename__ = "ai_chat_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bot_type = Column(String(32), nullable=False)
    started_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False, index=True)

    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="[ChatMessage.created_at, ChatMessage.id]",
    )


class ChatMessage(Base):
    """One transcript line. role is 'user' or 'assistant'."""
    __tablename__ = "ai_chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("ai_chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False, index=True)

    session = relationship("ChatSession", back_populates="messages")
