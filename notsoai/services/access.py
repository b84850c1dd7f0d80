from dataclasses import dataclass
from typing import Optional, Union

from fastapi.responses import JSONResponse
from starlette.requests import HTTPConnection

from notsoai.core import errors
from notsoai.core.auth_context import resolve_from_request
from notsoai.core.logger import audit, logger
from notsoai.core.security import SessionCodec
from notsoai.core.session import Role, Session

ROLE_LEVELS = {
    Role.VIEWER: 1,
    Role.MEMBER: 2,
    Role.ADMIN: 3,
    Role.OWNER: 4,
}


def has_minimum_role(role: Union[Role, str], minimum: Role) -> bool:
    try:
        level = ROLE_LEVELS[Role(role)]
    except ValueError:
        return False
    return level >= ROLE_LEVELS[minimum]


@dataclass(frozen=True)
class AccessResult:
    session: Optional[Session] = None
    response: Optional[JSONResponse] = None

    @property
    def allowed(self) -> bool:
        return self.session is not None and self.response is None


def enforce_client_access(
    request: HTTPConnection,
    requested_tenant_id: str,
    codec: SessionCodec,
    clients,
) -> AccessResult:
    """
    Gate for every tenant scoped handler.

    401 without a valid session (or when the session's tenant no longer
    exists), 403 when the session belongs to another tenant, 500 on
    anything unexpected. `clients` is the client repository of the active
    data access layer.
    """
    try:
        result = resolve_from_request(request, codec)
        if not result.is_valid:
            return AccessResult(response=errors.unauthorized())

        session = result.session

        if not session.tenant.matches(requested_tenant_id):
            audit(
                "client_access_denied",
                user_id=session.user_id,
                session_client_id=session.client_id,
                requested_client_id=requested_tenant_id,
                path=request.url.path,
            )
            return AccessResult(response=errors.forbidden())

        if clients.get_by_id_or_slug(session.client_id) is None:
            logger.warning(
                "Session references a missing client | client_id=%s",
                session.client_id,
            )
            return AccessResult(response=errors.unauthorized())

        return AccessResult(session=session)

    except Exception:
        logger.exception("Client access check failed | path=%s", request.url.path)
        return AccessResult(response=errors.internal())
