from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float,
    ForeignKey, Integer, String, Text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from notsoai.db.base import Base


# =====================================================
# CHAT SESSIONS (raw widget rows)
# =====================================================

class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(String, primary_key=True)
    mascot_slug = Column(String, index=True)
    client_slug = Column(String, index=True)
    domain = Column(String)

    ip_address = Column(String)
    user_agent = Column(Text)
    country = Column(String)
    city = Column(String)
    device_type = Column(String)
    browser = Column(String)  # "<name> <version>"
    os = Column(String)
    referrer_url = Column(Text)
    page_url = Column(Text)
    widget_version = Column(String)

    session_started_at = Column(DateTime(timezone=True))
    session_ended_at = Column(DateTime(timezone=True))
    first_message_at = Column(DateTime(timezone=True))
    last_message_at = Column(DateTime(timezone=True))

    total_messages = Column(Integer)
    total_user_messages = Column(Integer)
    total_bot_messages = Column(Integer)
    total_tokens = Column(Integer, default=0)
    total_prompt_tokens = Column(Integer, default=0)
    total_completion_tokens = Column(Integer, default=0)
    total_cost_eur = Column(Float, default=0)
    total_cost_usd = Column(Float)
    average_response_time_ms = Column(Float)
    easter_eggs_triggered = Column(Integer, default=0)

    is_active = Column(Boolean, default=False)
    is_dev = Column(Boolean, default=False)
    full_transcript = Column(JSON)  # [{author, message, timestamp, easter}]

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    analysis = relationship(
        "ChatSessionAnalysis",
        back_populates="session",
        uselist=False,
        cascade="all, delete-orphan"
    )


# =====================================================
# CHAT SESSION ANALYSES
# =====================================================

class ChatSessionAnalysis(Base):
    __tablename__ = "chat_session_analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        String,
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    mascot_slug = Column(String, index=True)

    language = Column(String)
    sentiment = Column(String)  # positive, neutral, negative
    escalated = Column(Boolean, default=False)
    category = Column(String)
    questions = Column(JSON)
    unanswered_questions = Column(JSON)
    summary = Column(Text)
    session_outcome = Column(String)
    resolution_status = Column(String)  # resolved, partial, unresolved
    engagement_level = Column(String)  # low, medium, high
    conversation_type = Column(String)  # casual, goal_driven

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    raw_response = Column(JSON)

    session = relationship("ChatSession", back_populates="analysis")
