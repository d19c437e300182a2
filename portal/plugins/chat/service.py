"""
Chat session manager: sessions per user and persona, persisted transcripts,
replies delegated to a ChatResponder.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import aliased

from portal.core.db import Database
from portal.core.errors import NotFound, ValidationFailed
from portal.core.models import get_user
from portal.plugins.chat import personas
from portal.plugins.chat.models import ChatMessage, ChatSession
from portal.plugins.chat.responders import ChatResponder
from portal.plugins.chat.schemas import ChatMessageView, ChatSessionView, CreatedSession, SessionPreview

CONTEXT_MESSAGES = 10


class ChatService:

    def __init__(self, db: Database, responder: ChatResponder, logger: Optional[logging.Logger] = None):
        self.db = db
        self.responder = responder
        self.logger = logger or logging.getLogger(__name__)

    def _add_message(self, session, session_id: int, role: str, content: str) -> ChatMessage:
        message = ChatMessage(session_id=session_id, role=role, content=content)
        session.add(message)
        session.flush()
        return message

    async def create_session(self, user_id: int, bot_type: str) -> CreatedSession:
        """Start a session; its first message is the persona's welcome text."""
        if not personas.is_valid_bot_type(bot_type):
            raise ValidationFailed(f"Invalid bot type: {bot_type}")

        with self.db.session_scope() as session:
            if get_user(session, user_id) is None:
                raise NotFound(f"User {user_id} not found")
            chat_session = ChatSession(user_id=user_id, bot_type=bot_type)
            session.add(chat_session)
            session.flush()
            welcome = self._add_message(session, chat_session.id, "assistant", personas.welcome_message(bot_type))
            result = CreatedSession(
                session=ChatSessionView.model_validate(chat_session),
                welcome_message=ChatMessageView.model_validate(welcome),
            )

        self.logger.info(f"Created {bot_type} chat session {result.session.id} for user {user_id}")
        return result

    async def chat(self, session_id: int, user_message: str) -> ChatMessageView:
        """
        Append the user's message, generate a reply and append it. The user
        message is committed before generation starts.
        """
        if not user_message or not user_message.strip():
            raise ValidationFailed("Message must not be empty")

        with self.db.session_scope() as session:
            chat_session = session.get(ChatSession, session_id)
            if chat_session is None:
                raise NotFound(f"Chat session {session_id} not found")
            bot_type = chat_session.bot_type
            recent = session.execute(
                select(ChatMessage)
                .where(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(CONTEXT_MESSAGES)
            ).scalars().all()
            history: List[Dict[str, str]] = [{"role": m.role, "content": m.content} for m in reversed(recent)]
            self._add_message(session, session_id, "user", user_message)

        reply = await self.responder.generate(bot_type, history, user_message)

        with self.db.session_scope() as session:
            message = self._add_message(session, session_id, "assistant", reply)
            return ChatMessageView.model_validate(message)

    async def get_chat_history(self, session_id: int) -> List[ChatMessageView]:
        with self.db.session_scope() as session:
            if session.get(ChatSession, session_id) is None:
                raise NotFound(f"Chat session {session_id} not found")
            rows = session.execute(
                select(ChatMessage)
                .where(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at, ChatMessage.id)
            ).scalars().all()
            return [ChatMessageView.model_validate(m) for m in rows]

    async def get_user_sessions(self, user_id: int) -> List[SessionPreview]:
        """User's sessions newest first, each with its latest message, in one query."""
        ranked = (
            select(
                ChatMessage.id,
                ChatMessage.session_id,
                func.row_number().over(
                    partition_by=ChatMessage.session_id,
                    order_by=(ChatMessage.created_at.desc(), ChatMessage.id.desc()),
                ).label("recency"),
            )
            .join(ChatSession, ChatSession.id == ChatMessage.session_id)
            .where(ChatSession.user_id == user_id)
            .subquery()
        )
        last_message = aliased(ChatMessage)
        with self.db.session_scope() as session:
            rows = session.execute(
                select(ChatSession, last_message)
                .outerjoin(ranked, and_(ranked.c.session_id == ChatSession.id, ranked.c.recency == 1))
                .outerjoin(last_message, last_message.id == ranked.c.id)
                .where(ChatSession.user_id == user_id)
                .order_by(ChatSession.started_at.desc(), ChatSession.id.desc())
            ).all()
            return [
                SessionPreview(
                    session=ChatSessionView.model_validate(chat_session),
                    last_message=ChatMessageView.model_validate(last) if last else None,
                )
                for chat_session, last in rows
            ]
