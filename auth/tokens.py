"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the user id as the subject plus issue and expiry times. Verification
       raises TokenExpired or TokenInvalid; the auth gate turns both into 401.
       There is no server-side revocation -- a token stays valid until exp.

  Passwords: bcrypt used directly (no passlib wrapper). The salt is generated
       per call and embedded in the digest, so no separate salt column exists.
       Cost factor comes from Settings.bcrypt_rounds (default 10).

  SECRET_KEY: sourced from core.config.get_settings(). The Settings class
       refuses to start in production mode without one.

Layer rule: no imports from api/ or activity/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.errors import TokenExpired, TokenInvalid
from core.config import get_settings

logger = logging.getLogger("eliteapp.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only accepts 72 bytes of input; request models reject longer
    passwords before they get here.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed or empty digest is a failed match, never an exception.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT binding user_id, valid for token_expire_seconds.

    Args:
        user_id:   Numeric user ID stored in the DB. Encoded as the string
                   subject claim (RFC 7519 requires a string sub).
        issued_at: Issue time; defaults to now. Only tests pass this.
    """
    issued = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + timedelta(seconds=_settings.token_expire_seconds),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_access_token(token: str) -> int:
    """Check signature and expiry and return the user id the token was issued for.

    Raises:
        TokenExpired: the token is correctly signed but past its exp claim.
        TokenInvalid: anything else -- bad signature, garbage input, or a
                      subject that is not a user id.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise TokenInvalid() from exc

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenInvalid("Invalid token subject.") from exc
