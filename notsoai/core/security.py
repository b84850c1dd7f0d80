import base64
import binascii
import hashlib
import hmac
import json
import secrets
from typing import Optional

from passlib.context import CryptContext
from pydantic import ValidationError

from notsoai.core.config import Settings
from notsoai.core.errors import ConfigurationError
from notsoai.core.logger import logger
from notsoai.core.session import Session

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)


def _normalize_password(password: str) -> str:
    """
    bcrypt only reads the first 72 bytes.
    Truncate on a UTF-8 safe boundary.
    """
    return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return pwd_context.hash(_normalize_password(password))


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(_normalize_password(password), hashed)
    except ValueError:
        # unknown or malformed hash
        return False


# =====================================================
# SESSION COOKIE CODEC
# =====================================================

def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


class SessionCodec:
    """
    Signed token: <base64url(json)>.<base64url(hmac_sha256(json))>

    Without a secret, tokens are plain JSON, but only outside production
    and only when allow_unsigned is set.
    """

    def __init__(
        self,
        secret: Optional[str],
        production: bool = False,
        allow_unsigned: bool = False,
    ):
        self._secret = secret.encode("utf-8") if secret else None
        self.production = production
        self.allow_unsigned = allow_unsigned

    @property
    def signed(self) -> bool:
        return self._secret is not None

    @property
    def _unsigned_allowed(self) -> bool:
        return self.allow_unsigned and not self.production

    def _sign(self, payload: bytes) -> str:
        digest = hmac.new(self._secret, payload, hashlib.sha256).digest()
        return _b64url_encode(digest)

    def encode(self, session: Session) -> str:
        payload = json.dumps(
            session.to_payload(), separators=(",", ":"), ensure_ascii=False
        )

        if self._secret is None:
            if not self._unsigned_allowed:
                raise ConfigurationError("SESSION_SECRET is required")
            return payload

        raw = payload.encode("utf-8")
        return f"{_b64url_encode(raw)}.{self._sign(raw)}"

    def decode(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None

        if self._secret is None:
            if not self._unsigned_allowed:
                return None
            return self._parse(token)

        parts = token.split(".")
        if len(parts) != 2:
            return None
        encoded_payload, signature = parts

        try:
            raw = _b64url_decode(encoded_payload)
        except (binascii.Error, ValueError):
            return None

        expected = self._sign(raw)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
            return None

        try:
            return self._parse(raw.decode("utf-8"))
        except UnicodeDecodeError:
            return None

    @staticmethod
    def _parse(payload: str) -> Optional[Session]:
        try:
            return Session.from_payload(json.loads(payload))
        except (ValueError, ValidationError):
            return None


def build_session_codec(settings: Settings) -> SessionCodec:
    secret = settings.SESSION_SECRET

    if not secret and not settings.is_production:
        if settings.SESSION_ALLOW_UNSIGNED:
            logger.warning(
                "SESSION_ALLOW_UNSIGNED is set: session cookies are plain JSON "
                "and can be forged. Development use only."
            )
        else:
            logger.warning(
                "SESSION_SECRET is not set: using a temporary secret, "
                "sessions will not survive a restart."
            )
            secret = secrets.token_urlsafe(48)

    return SessionCodec(
        secret,
        production=settings.is_production,
        allow_unsigned=settings.SESSION_ALLOW_UNSIGNED,
    )
