"""
auth/tokens.py -- JWT issue/verify and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, email and expiry (1 hour by default). There is no revocation
       list; expiry is the only way a token stops working.
       verify_access_token() is a plain synchronous function that returns an
       Identity or raises, so it works from sync and async handlers alike:
         no token             -> Unauthenticated (401)
         bad/expired/garbled  -> InvalidToken    (403)

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in authenticate_user() so response time
       does not reveal whether an email is registered.

  SECRET_KEY: sourced from core.config.get_settings(), which validates it at
       startup.

Layer rule: no imports from api/ or drives/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity
from core.config import get_settings
from core.errors import InvalidToken, Unauthenticated, Unauthorized

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("lifelink.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes; the API caps password length
    well below anything that matters in practice.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or an over-long password on newer bcrypt.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("lifelink_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(identity: Identity, expires_delta: timedelta | None = None) -> str:
    """Encode a signed JWT for identity.

    Args:
        identity:      The user the token speaks for.
        expires_delta: Lifetime of the token. Defaults to
                       Settings.token_expire_seconds (one hour).
    """
    if expires_delta is None:
        expires_delta = timedelta(seconds=_settings.token_expire_seconds)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": identity.email,
        "user_id": identity.id,
        "email": identity.email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_access_token(token: str | None) -> Identity:
    """Verify a JWT and return the Identity it carries.

    Raises:
        Unauthenticated: token is None or empty.
        InvalidToken:    signature mismatch, expired, or required claims missing.
    """
    if not token:
        raise Unauthenticated()
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken() from exc
    user_id = payload.get("user_id")
    email = payload.get("email")
    if not isinstance(user_id, int) or not isinstance(email, str):
        raise InvalidToken()
    return Identity(id=user_id, email=email)


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an "Authorization: Bearer <token>" header value.

    Any other scheme, or a missing header, yields None.
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


# ---------------------------------------------------------------------------
# Credential verification (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> Identity:
    """Verify an email/password pair and return the matching Identity.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Raises Unauthorized in both failure cases with the same message.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        logger.info("Login failed: unknown email")
        raise Unauthorized()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: bad password for user_id=%d", user.id)
        raise Unauthorized()
    return user.identity()
