from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from notsoai.core import errors
from notsoai.core.security import SessionCodec
from notsoai.core.session import TenantRef
from notsoai.dependencies.auth import get_data_access, get_session_codec
from notsoai.schemas.analytics import ConversationsQuery
from notsoai.services.access import enforce_client_access
from notsoai.services.analytics import build_report
from notsoai.services.redaction import redact_chat_sessions, redact_report, should_redact_role
from notsoai.utils.dates import parse_date_range

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def _belongs_to(tenant: TenantRef, session: dict) -> bool:
    keys = {key.lower() for key in (tenant.client_id, tenant.client_slug) if key}
    return (session.get("client_slug") or "").lower() in keys


# =====================================================
# CHAT SESSIONS
# =====================================================

@router.get("/chat-sessions")
def list_chat_sessions(
    request: Request,
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    bot_id: Optional[str] = Query(default=None, alias="botId"),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    if not client_id:
        return errors.missing_param("clientId parameter is required")

    access = enforce_client_access(request, client_id, codec, data.clients)
    if not access.allowed:
        return access.response

    sessions = data.chat_sessions.list_with_analysis(
        access.session.tenant,
        mascot_slug=bot_id,
        date_range=parse_date_range(date_from, date_to),
    )

    if should_redact_role(access.session.role):
        sessions = redact_chat_sessions(sessions)

    return {"data": sessions}


@router.post("/conversations")
def list_conversations(
    request: Request,
    body: ConversationsQuery,
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    if not body.client_id:
        return errors.missing_param("clientId is required")

    access = enforce_client_access(request, body.client_id, codec, data.clients)
    if not access.allowed:
        return access.response

    tenant = access.session.tenant
    sessions = data.chat_sessions.list_with_analysis(
        tenant,
        date_range=parse_date_range(body.date_from, body.date_to),
    )

    assistant_ids = body.assistant_ids or []
    if assistant_ids and "all" not in assistant_ids:
        wanted = set(assistant_ids)
        sessions = [s for s in sessions if s.get("mascot_slug") in wanted]

    # scoped again in case storage returned foreign rows
    sessions = [s for s in sessions if _belongs_to(tenant, s)]

    if should_redact_role(access.session.role):
        sessions = redact_chat_sessions(sessions)

    return {"data": sessions}


# =====================================================
# OVERVIEW
# =====================================================

@router.get("/overview")
def overview(
    request: Request,
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    bot_id: Optional[str] = Query(default=None, alias="botId"),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    if not client_id:
        return errors.missing_param("clientId parameter is required")

    access = enforce_client_access(request, client_id, codec, data.clients)
    if not access.allowed:
        return access.response

    sessions = data.chat_sessions.list_with_analysis(
        access.session.tenant,
        mascot_slug=bot_id,
        date_range=parse_date_range(date_from, date_to),
    )

    report = build_report(sessions)
    if should_redact_role(access.session.role):
        report = redact_report(report)

    return {"data": report}
