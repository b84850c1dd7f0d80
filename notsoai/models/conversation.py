from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from notsoai.db.base import Base


# =====================================================
# CONVERSATIONS
# =====================================================

class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    assistant_id = Column(String, index=True)
    user_id = Column(String)
    user_name = Column(String)
    status = Column(String, default="active")  # active, resolved, escalated
    channel = Column(String)
    intent = Column(String)
    preview = Column(Text)
    messages = Column(Integer, default=0)
    started_at = Column(DateTime(timezone=True))
    ended_at = Column(DateTime(timezone=True))

    message_rows = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.timestamp"
    )


# =====================================================
# MESSAGES
# =====================================================

class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True)
    conversation_id = Column(
        String,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False
    )
    sender = Column(String, nullable=False)  # user, assistant, agent
    sender_name = Column(String)
    content = Column(Text)
    timestamp = Column(DateTime(timezone=True))

    conversation = relationship("Conversation", back_populates="message_rows")
