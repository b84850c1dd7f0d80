from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from notsoai.core import errors
from notsoai.core.security import SessionCodec
from notsoai.dependencies.auth import get_data_access, get_session_codec
from notsoai.services.access import enforce_client_access
from notsoai.services.redaction import (
    mask_text,
    redact_conversations,
    redact_messages,
    should_redact_role,
)
from notsoai.utils.dates import parse_date_range

router = APIRouter(prefix="/api/conversations", tags=["Conversations"])

CONVERSATION_STATUSES = ("active", "resolved", "escalated")


@router.get("")
def list_conversations(
    request: Request,
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    bot_id: Optional[str] = Query(default=None, alias="botId"),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    status: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    if not client_id:
        return errors.missing_param("clientId parameter is required")

    access = enforce_client_access(request, client_id, codec, data.clients)
    if not access.allowed:
        return access.response

    conversations = data.conversations.list_by_client(
        access.session.client_id,
        assistant_id=bot_id,
        date_range=parse_date_range(date_from, date_to),
    )

    # unknown status values are ignored
    if status in CONVERSATION_STATUSES:
        conversations = [c for c in conversations if c["status"] == status]

    conversations = conversations[offset:offset + limit]

    if should_redact_role(access.session.role):
        conversations = redact_conversations(conversations)

    return {"data": conversations}


@router.get("/{conversation_id}")
def get_conversation(
    conversation_id: str,
    request: Request,
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    if not client_id:
        return errors.missing_param("clientId parameter is required")

    access = enforce_client_access(request, client_id, codec, data.clients)
    if not access.allowed:
        return access.response

    conversation = data.conversations.get(conversation_id)

    # another tenant's conversation looks exactly like a missing one
    if conversation is None or conversation.get("clientId") != access.session.client_id:
        return errors.not_found(
            "CONVERSATION_NOT_FOUND",
            f'Conversation "{conversation_id}" not found',
        )

    if should_redact_role(access.session.role):
        conversation = {
            **conversation,
            "preview": mask_text(conversation.get("preview")),
            "messageList": redact_messages(conversation.get("messageList") or []),
        }

    return {"data": conversation}
