from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import sessionmaker

from notsoai.core.session import TenantRef
from notsoai.db.session import session_scope
from notsoai.models import ChatSession, ChatSessionAnalysis, Client, Conversation, Message, User
from notsoai.services.mappers import (
    map_analysis,
    map_client,
    map_conversation,
    map_message,
    map_user,
    normalize_chat_session,
)
from notsoai.services.session_filters import filter_dev_sessions
from notsoai.utils.dates import DateRange


def _row_to_dict(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _tenant_keys(tenant: TenantRef) -> List[str]:
    return sorted({key.lower() for key in (tenant.client_id, tenant.client_slug) if key})


class _Repository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory


# =====================================================
# CLIENTS
# =====================================================

class ClientRepository(_Repository):

    def get_by_id_or_slug(self, identifier: str) -> Optional[Dict[str, Any]]:
        if not identifier:
            return None
        with session_scope(self._session_factory) as db:
            client = db.query(Client).filter(
                or_(Client.id == identifier, Client.slug == identifier)
            ).first()
            return map_client(_row_to_dict(client)) if client else None


# =====================================================
# USERS
# =====================================================

class UserRepository(_Repository):

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Raw row including password_hash. Never return this from an endpoint."""
        with session_scope(self._session_factory) as db:
            user = db.query(User).filter(
                func.lower(User.email) == email.strip().lower()
            ).first()
            return _row_to_dict(user) if user else None

    def list_by_client(self, client_id: str) -> List[Dict[str, Any]]:
        with session_scope(self._session_factory) as db:
            users = db.query(User).filter(User.client_id == client_id).order_by(User.email).all()
            return [map_user(_row_to_dict(u)) for u in users]


# =====================================================
# CONVERSATIONS
# =====================================================

class ConversationRepository(_Repository):

    def list_by_client(
        self,
        client_id: str,
        assistant_id: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        with session_scope(self._session_factory) as db:
            query = db.query(Conversation).filter(Conversation.client_id == client_id)
            if assistant_id:
                query = query.filter(Conversation.assistant_id == assistant_id)
            if date_range:
                query = query.filter(
                    Conversation.started_at >= date_range.start,
                    Conversation.started_at <= date_range.end,
                )
            rows = query.order_by(Conversation.started_at.desc()).all()
            return [map_conversation(_row_to_dict(c)) for c in rows]

    def get(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        with session_scope(self._session_factory) as db:
            conversation = db.query(Conversation).filter(
                Conversation.id == conversation_id
            ).first()
            if conversation is None:
                return None

            messages = db.query(Message).filter(
                Message.conversation_id == conversation_id
            ).order_by(Message.timestamp).all()

            return {
                **map_conversation(_row_to_dict(conversation)),
                "messageList": [map_message(_row_to_dict(m)) for m in messages],
            }


# =====================================================
# CHAT SESSIONS
# =====================================================

class ChatSessionRepository(_Repository):

    def list_with_analysis(
        self,
        tenant: TenantRef,
        mascot_slug: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        """
        Normalised sessions of one tenant with their analysis attached,
        newest first, dev and empty sessions removed.
        """
        with session_scope(self._session_factory) as db:
            query = db.query(ChatSession, ChatSessionAnalysis).outerjoin(
                ChatSessionAnalysis,
                ChatSessionAnalysis.session_id == ChatSession.id,
            ).filter(func.lower(ChatSession.client_slug).in_(_tenant_keys(tenant)))

            if mascot_slug:
                query = query.filter(ChatSession.mascot_slug == mascot_slug)
            if date_range:
                query = query.filter(
                    ChatSession.session_started_at >= date_range.start,
                    ChatSession.session_started_at <= date_range.end,
                )

            rows = query.order_by(ChatSession.session_started_at.desc()).all()

            raw_sessions = []
            for chat_session, analysis in rows:
                raw = _row_to_dict(chat_session)
                raw["analysis"] = _row_to_dict(analysis) if analysis else None
                raw_sessions.append(raw)

        sessions = []
        for raw in filter_dev_sessions(raw_sessions):
            normalized = normalize_chat_session(raw)
            normalized["analysis"] = map_analysis(raw["analysis"])
            sessions.append(normalized)
        return sessions


class SqlDataAccess:
    kind = "sql"

    def __init__(self, session_factory: sessionmaker):
        self.engine = session_factory.kw.get("bind")
        self.clients = ClientRepository(session_factory)
        self.users = UserRepository(session_factory)
        self.conversations = ConversationRepository(session_factory)
        self.chat_sessions = ChatSessionRepository(session_factory)
