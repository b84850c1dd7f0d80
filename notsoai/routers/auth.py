from fastapi import APIRouter, Depends, Request, Response

from notsoai.core.auth_context import (
    clear_session_cookie,
    resolve_from_request,
    set_session_cookie,
)
from notsoai.core.config import Settings
from notsoai.core.errors import ApiError, ConfigurationError
from notsoai.core.logger import audit, logger
from notsoai.core.security import SessionCodec, verify_password
from notsoai.core.session import Role, Session
from notsoai.dependencies.auth import get_app_settings, get_data_access, get_session_codec
from notsoai.schemas.auth import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# =====================================================
# LOGIN
# =====================================================

@router.post("/login")
def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    user = data.users.get_by_email(body.email)
    if not user or not verify_password(body.password, user.get("password_hash") or ""):
        audit("login_failed", email=body.email)
        raise ApiError(401, "INVALID_CREDENTIALS", "Invalid email or password")

    client = data.clients.get_by_id_or_slug(user["client_id"])
    if client is None:
        audit("login_failed", email=body.email, reason="client_not_found")
        raise ApiError(403, "CLIENT_NOT_FOUND", "Authenticated user is not linked to a client")

    session = Session(
        client_id=client["id"],
        client_slug=client["slug"],
        user_id=user["id"],
        role=Role.from_team_role(user.get("role")),
        default_workspace_id=client.get("defaultWorkspaceId"),
    )

    try:
        set_session_cookie(response, session, codec, settings)
    except ConfigurationError:
        logger.error("Cannot issue session cookie: SESSION_SECRET is not configured")
        raise ApiError(500, "INTERNAL_ERROR", "An unexpected error occurred")

    audit("login_success", user_id=session.user_id, client_id=session.client_id, role=session.role.value)

    return {
        "data": {
            "session": session.to_payload(),
            "client": client,
            "redirectUrl": f"/app/{session.tenant.canonical}/home",
        }
    }


# =====================================================
# LOGOUT
# =====================================================

@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    clear_session_cookie(response, settings)
    return {"data": {"success": True}}


# =====================================================
# CURRENT SESSION
# =====================================================

@router.get("/session")
def current_session(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    result = resolve_from_request(request, codec)
    if not result.is_valid:
        return {"data": {"session": None, "client": None}}

    session = result.session
    client = data.clients.get_by_id_or_slug(session.client_id)
    if client is None:
        # tenant is gone, drop the stale cookie
        clear_session_cookie(response, settings)
        return {"data": {"session": None, "client": None}}

    return {"data": {"session": session.to_payload(), "client": client}}
