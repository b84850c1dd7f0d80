from fastapi import Depends, Request

from notsoai.core.auth_context import resolve_from_request
from notsoai.core.config import Settings
from notsoai.core.errors import ApiError
from notsoai.core.logger import audit
from notsoai.core.security import SessionCodec
from notsoai.core.session import Role, Session
from notsoai.services.access import has_minimum_role


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_codec(request: Request) -> SessionCodec:
    return request.app.state.session_codec


def get_data_access(request: Request):
    return request.app.state.data_access


def get_current_session(
    request: Request,
    codec: SessionCodec = Depends(get_session_codec),
) -> Session:
    result = resolve_from_request(request, codec)
    if not result.is_valid:
        raise ApiError(401, "UNAUTHORIZED", "Authentication required")
    return result.session


def require_role(minimum: Role):
    """Dependency factory: the session role must be at least `minimum`."""

    def checker(
        request: Request,
        session: Session = Depends(get_current_session),
    ) -> Session:
        if not has_minimum_role(session.role, minimum):
            audit(
                "role_check_denied",
                user_id=session.user_id,
                client_id=session.client_id,
                role=session.role.value,
                required=minimum.value,
                path=request.url.path,
            )
            raise ApiError(403, "FORBIDDEN", "Insufficient permissions")
        return session

    return checker
