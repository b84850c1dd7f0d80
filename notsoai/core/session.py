from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @classmethod
    def from_team_role(cls, value: Optional[str]) -> "Role":
        """
        Team roles stored on users -> session role.
        Unknown values get the least privileged role.
        """
        return TEAM_ROLE_MAP.get((value or "").lower(), cls.VIEWER)


TEAM_ROLE_MAP = {
    "owner": Role.OWNER,
    "admin": Role.ADMIN,
    "manager": Role.ADMIN,
    "member": Role.MEMBER,
    "agent": Role.MEMBER,
    "viewer": Role.VIEWER,
}


@dataclass(frozen=True)
class TenantRef:
    """A tenant is addressed by its id or its slug; both mean the same tenant."""

    client_id: str
    client_slug: str = ""

    @property
    def canonical(self) -> str:
        return self.client_slug or self.client_id

    def matches(self, identifier: Optional[str]) -> bool:
        if not identifier:
            return False
        if identifier == self.client_id:
            return True
        return bool(self.client_slug) and identifier == self.client_slug

    def is_canonical(self, identifier: Optional[str]) -> bool:
        return identifier == self.canonical


class Session(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field(alias="clientId", min_length=1)
    client_slug: str = Field(default="", alias="clientSlug")
    user_id: str = Field(alias="userId", min_length=1)
    role: Role
    default_workspace_id: Optional[str] = Field(default=None, alias="defaultWorkspaceId")

    @property
    def tenant(self) -> TenantRef:
        return TenantRef(client_id=self.client_id, client_slug=self.client_slug)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_payload(cls, payload) -> "Session":
        return cls.model_validate(payload)


@dataclass(frozen=True)
class SessionResult:
    is_valid: bool
    session: Optional[Session] = None
    reason: Optional[str] = None  # "missing" | "invalid"
