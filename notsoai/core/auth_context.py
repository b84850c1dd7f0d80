from starlette.requests import HTTPConnection
from starlette.responses import Response

from notsoai.core.config import Settings
from notsoai.core.logger import logger
from notsoai.core.security import SessionCodec
from notsoai.core.session import Session, SessionResult

SESSION_COOKIE_NAME = "notsoai-session"


def resolve_from_request(request: HTTPConnection, codec: SessionCodec) -> SessionResult:
    # cookie only; a bad cookie is the same as no cookie for callers
    try:
        token = request.cookies.get(SESSION_COOKIE_NAME)

        if not token:
            return SessionResult(is_valid=False, reason="missing")

        session = codec.decode(token)
        if session is None:
            return SessionResult(is_valid=False, reason="invalid")

        return SessionResult(is_valid=True, session=session)

    except Exception:
        logger.debug("Session cookie could not be resolved", exc_info=True)
        return SessionResult(is_valid=False, reason="invalid")


def set_session_cookie(
    response: Response,
    session: Session,
    codec: SessionCodec,
    settings: Settings,
) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=codec.encode(session),
        max_age=settings.SESSION_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
