"""
In-memory demo data with the same repository interface as SqlDataAccess.

Used when USE_MOCK_DATA is set or no database is configured outside
production. Rows mirror the database columns so they go through the same
mappers and filters as real data.
"""

import copy
from typing import Any, Dict, List, Optional

from notsoai.core.security import hash_password
from notsoai.core.session import TenantRef
from notsoai.services.mappers import (
    map_analysis,
    map_client,
    map_conversation,
    map_message,
    map_user,
    normalize_chat_session,
)
from notsoai.services.session_filters import filter_dev_sessions
from notsoai.utils.dates import DateRange, parse_timestamp

DEMO_PASSWORD = "demo1234"

MOCK_CLIENTS = [
    {
        "id": "c_123",
        "slug": "acme-inc",
        "name": "Acme Inc",
        "email": "hello@acme-demo.com",
        "default_workspace_id": "ws_acme",
        "is_demo": True,
        "status": "active",
        "created_at": "2025-01-01T09:00:00Z",
    },
    {
        "id": "c_456",
        "slug": "globex",
        "name": "Globex",
        "email": "support@globex-demo.com",
        "default_workspace_id": None,
        "is_demo": True,
        "status": "active",
        "created_at": "2025-02-01T09:00:00Z",
    },
]

MOCK_USERS = [
    {"id": "u_1", "client_id": "c_123", "email": "owner@acme-demo.com", "name": "Olivia Owner", "role": "owner"},
    {"id": "u_2", "client_id": "c_123", "email": "manager@acme-demo.com", "name": "Max Manager", "role": "manager"},
    {"id": "u_3", "client_id": "c_123", "email": "agent@acme-demo.com", "name": "Ada Agent", "role": "agent"},
    {"id": "u_4", "client_id": "c_123", "email": "viewer@acme-demo.com", "name": "Vic Viewer", "role": "viewer"},
    {"id": "u_5", "client_id": "c_456", "email": "owner@globex-demo.com", "name": "Gus Globex", "role": "owner"},
]

MOCK_CONVERSATIONS = [
    {
        "id": "conv_1",
        "client_id": "c_123",
        "assistant_id": "acme-helper",
        "user_id": "visitor_1",
        "user_name": "Visitor 1",
        "status": "resolved",
        "channel": "widget",
        "intent": "billing",
        "preview": "Where is my invoice?",
        "messages": 2,
        "started_at": "2025-03-01T10:00:00Z",
        "ended_at": "2025-03-01T10:05:00Z",
    },
    {
        "id": "conv_2",
        "client_id": "c_123",
        "assistant_id": "acme-helper",
        "user_id": "visitor_2",
        "user_name": "Visitor 2",
        "status": "escalated",
        "channel": "widget",
        "intent": "complaint",
        "preview": "My order arrived broken",
        "messages": 3,
        "started_at": "2025-03-02T14:00:00Z",
        "ended_at": None,
    },
    {
        "id": "conv_3",
        "client_id": "c_456",
        "assistant_id": "globex-bot",
        "user_id": "visitor_3",
        "user_name": "Visitor 3",
        "status": "active",
        "channel": "widget",
        "intent": "sales",
        "preview": "Do you ship to Canada?",
        "messages": 1,
        "started_at": "2025-03-03T08:30:00Z",
        "ended_at": None,
    },
]

MOCK_MESSAGES = [
    {"id": "msg_1", "conversation_id": "conv_1", "sender": "user", "sender_name": "Visitor 1",
     "content": "Where is my invoice?", "timestamp": "2025-03-01T10:00:00Z"},
    {"id": "msg_2", "conversation_id": "conv_1", "sender": "assistant", "sender_name": "Acme Helper",
     "content": "You can download it from the billing page.", "timestamp": "2025-03-01T10:00:05Z"},
    {"id": "msg_3", "conversation_id": "conv_2", "sender": "user", "sender_name": "Visitor 2",
     "content": "My order arrived broken", "timestamp": "2025-03-02T14:00:00Z"},
    {"id": "msg_4", "conversation_id": "conv_2", "sender": "assistant", "sender_name": "Acme Helper",
     "content": "Sorry to hear that, let me get a colleague.", "timestamp": "2025-03-02T14:00:04Z"},
    {"id": "msg_5", "conversation_id": "conv_2", "sender": "agent", "sender_name": "Ada Agent",
     "content": "Hi, I will arrange a replacement.", "timestamp": "2025-03-02T14:03:00Z"},
    {"id": "msg_6", "conversation_id": "conv_3", "sender": "user", "sender_name": "Visitor 3",
     "content": "Do you ship to Canada?", "timestamp": "2025-03-03T08:30:00Z"},
]

MOCK_CHAT_SESSIONS = [
    {
        "id": "cs_1",
        "mascot_slug": "acme-helper",
        "client_slug": "acme-inc",
        "domain": "shop.acme.example",
        "ip_address": "203.0.113.42",
        "country": "NL",
        "city": "Amsterdam",
        "device_type": "desktop",
        "browser": "Chrome 120.0",
        "os": "macOS 14.2",
        "referrer_url": "https://www.google.com/search?q=acme",
        "page_url": "https://shop.acme.example/pricing",
        "widget_version": "2.1.0",
        "session_started_at": "2025-03-01T10:00:00Z",
        "session_ended_at": "2025-03-01T10:04:30Z",
        "total_messages": 4,
        "total_user_messages": 2,
        "total_bot_messages": 2,
        "total_tokens": 820,
        "total_prompt_tokens": 600,
        "total_completion_tokens": 220,
        "total_cost_eur": 0.012,
        "average_response_time_ms": 900,
        "is_active": False,
        "is_dev": False,
        "full_transcript": [
            {"author": "user", "message": "Hi, what does the pro plan cost?", "timestamp": "2025-03-01T10:00:00Z"},
            {"author": "bot", "message": "The pro plan is 49 euro per month.", "timestamp": "2025-03-01T10:00:02Z"},
            {"author": "user", "message": "Thanks!", "timestamp": "2025-03-01T10:04:00Z"},
            {"author": "bot", "message": "You're welcome.", "timestamp": "2025-03-01T10:04:01Z"},
        ],
        "analysis": {
            "session_id": "cs_1",
            "mascot_slug": "acme-helper",
            "language": "en",
            "sentiment": "positive",
            "escalated": False,
            "category": "pricing",
            "questions": ["What does the pro plan cost?"],
            "unanswered_questions": [],
            "summary": "Visitor asked about pricing.",
            "session_outcome": "answered",
            "resolution_status": "resolved",
            "engagement_level": "medium",
            "conversation_type": "goal_driven",
            "created_at": "2025-03-01T10:10:00Z",
            "raw_response": {"model": "analysis-v1", "tokens": 210},
        },
    },
    {
        "id": "cs_2",
        "mascot_slug": "acme-helper",
        "client_slug": "acme-inc",
        "domain": "shop.acme.example",
        "ip_address": "198.51.100.7",
        "country": "DE",
        "device_type": "mobile",
        "browser": "Safari 17.1",
        "os": "iOS 17.1",
        "page_url": "https://shop.acme.example/orders",
        "session_started_at": "2025-03-02T14:00:00Z",
        "session_ended_at": "2025-03-02T14:06:00Z",
        "total_messages": 2,
        "total_user_messages": 1,
        "total_bot_messages": 1,
        "total_tokens": 300,
        "total_prompt_tokens": 200,
        "total_completion_tokens": 100,
        "total_cost_eur": 0.004,
        "average_response_time_ms": 1300,
        "is_active": False,
        "is_dev": False,
        "full_transcript": [
            {"author": "user", "message": "Can I return a broken item?", "timestamp": "2025-03-02T14:00:00Z"},
            {"author": "bot", "message": "Let me connect you with support.", "timestamp": "2025-03-02T14:00:03Z"},
        ],
        "analysis": {
            "session_id": "cs_2",
            "mascot_slug": "acme-helper",
            "language": "de",
            "sentiment": "negative",
            "escalated": True,
            "category": "returns",
            "questions": ["Can I return a broken item?"],
            "unanswered_questions": ["Can I return a broken item?"],
            "summary": "Visitor wants to return a broken item.",
            "session_outcome": "escalated",
            "resolution_status": "unresolved",
            "engagement_level": "low",
            "conversation_type": "goal_driven",
            "created_at": "2025-03-02T14:10:00Z",
            "raw_response": {"model": "analysis-v1", "tokens": 180},
        },
    },
    {
        # local development traffic, filtered out
        "id": "cs_3",
        "mascot_slug": "acme-helper",
        "client_slug": "acme-inc",
        "domain": "localhost:3000",
        "ip_address": "::1",
        "is_dev": True,
        "session_started_at": "2025-03-02T15:00:00Z",
        "total_messages": 2,
        "full_transcript": [],
        "analysis": None,
    },
    {
        "id": "cs_4",
        "mascot_slug": "globex-bot",
        "client_slug": "globex",
        "domain": "globex.example",
        "ip_address": "192.0.2.10",
        "country": "CA",
        "device_type": "desktop",
        "browser": "Firefox 121.0",
        "os": "Windows 11",
        "session_started_at": "2025-03-03T08:30:00Z",
        "session_ended_at": "2025-03-03T08:31:00Z",
        "total_messages": 2,
        "total_user_messages": 1,
        "total_bot_messages": 1,
        "total_tokens": 150,
        "total_cost_eur": 0.002,
        "is_active": True,
        "is_dev": False,
        "full_transcript": [
            {"author": "user", "message": "Do you ship to Canada?", "timestamp": "2025-03-03T08:30:00Z"},
            {"author": "bot", "message": "Yes, we do.", "timestamp": "2025-03-03T08:30:02Z"},
        ],
        "analysis": None,
    },
]


def _matches_tenant(row: Dict[str, Any], tenant: TenantRef) -> bool:
    keys = {key.lower() for key in (tenant.client_id, tenant.client_slug) if key}
    return (row.get("client_slug") or "").lower() in keys


def _in_range(value, date_range: Optional[DateRange]) -> bool:
    return date_range is None or date_range.contains(parse_timestamp(value))


def _newest_first(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda row: row.get(key) or "", reverse=True)


class MockClientRepository:
    def __init__(self, rows):
        self._rows = rows

    def get_by_id_or_slug(self, identifier: str) -> Optional[Dict[str, Any]]:
        for row in self._rows:
            if identifier and identifier in (row["id"], row["slug"]):
                return map_client(row)
        return None


class MockUserRepository:
    def __init__(self, rows):
        self._rows = rows

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        email = email.strip().lower()
        for row in self._rows:
            if row["email"].lower() == email:
                if "password_hash" not in row:
                    # bcrypt is slow, hash on first use only
                    row["password_hash"] = hash_password(row.pop("password", DEMO_PASSWORD))
                return dict(row)
        return None

    def list_by_client(self, client_id: str) -> List[Dict[str, Any]]:
        rows = [row for row in self._rows if row["client_id"] == client_id]
        return [map_user(row) for row in sorted(rows, key=lambda r: r["email"])]


class MockConversationRepository:
    def __init__(self, conversations, messages):
        self._conversations = conversations
        self._messages = messages

    def list_by_client(
        self,
        client_id: str,
        assistant_id: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        rows = [
            row for row in self._conversations
            if row["client_id"] == client_id
            and (not assistant_id or row.get("assistant_id") == assistant_id)
            and _in_range(row.get("started_at"), date_range)
        ]
        return [map_conversation(row) for row in _newest_first(rows, "started_at")]

    def get(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        for row in self._conversations:
            if row["id"] == conversation_id:
                messages = sorted(
                    (m for m in self._messages if m["conversation_id"] == conversation_id),
                    key=lambda m: m.get("timestamp") or "",
                )
                return {
                    **map_conversation(row),
                    "messageList": [map_message(m) for m in messages],
                }
        return None


class MockChatSessionRepository:
    def __init__(self, rows):
        self._rows = rows

    def list_with_analysis(
        self,
        tenant: TenantRef,
        mascot_slug: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        rows = [
            row for row in self._rows
            if _matches_tenant(row, tenant)
            and (not mascot_slug or row.get("mascot_slug") == mascot_slug)
            and _in_range(row.get("session_started_at"), date_range)
        ]

        sessions = []
        for raw in filter_dev_sessions(_newest_first(rows, "session_started_at")):
            normalized = normalize_chat_session(raw)
            normalized["analysis"] = map_analysis(raw.get("analysis"))
            sessions.append(normalized)
        return sessions


class MockDataAccess:
    kind = "mock"

    def __init__(self, data: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        # private copies; user rows get their password hash filled in lazily
        data = copy.deepcopy(data) if data is not None else {}

        self.clients = MockClientRepository(data.get("clients", copy.deepcopy(MOCK_CLIENTS)))
        self.users = MockUserRepository(data.get("users", copy.deepcopy(MOCK_USERS)))
        self.conversations = MockConversationRepository(
            data.get("conversations", copy.deepcopy(MOCK_CONVERSATIONS)),
            data.get("messages", copy.deepcopy(MOCK_MESSAGES)),
        )
        self.chat_sessions = MockChatSessionRepository(
            data.get("chat_sessions", copy.deepcopy(MOCK_CHAT_SESSIONS))
        )
