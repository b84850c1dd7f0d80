from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from notsoai.db.base import Base


# =====================================================
# CLIENTS (TENANTS)
# =====================================================

class Client(Base):
    __tablename__ = "clients"

    id = Column(String, primary_key=True)
    slug = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String)
    default_workspace_id = Column(String)
    is_demo = Column(Boolean, default=False)
    status = Column(String, default="active")  # active, suspended
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship(
        "User",
        back_populates="client",
        cascade="all, delete-orphan"
    )


# =====================================================
# USERS
# =====================================================

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    client_id = Column(
        String,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False
    )
    email = Column(String, unique=True, nullable=False)
    name = Column(String)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="viewer")  # team role: owner, admin, manager, member, agent, viewer
    status = Column(String, default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="users")
