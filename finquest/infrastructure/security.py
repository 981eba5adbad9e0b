"""Password hashing (bcrypt) and access tokens (PyJWT)"""

import logging
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt as pyjwt
from finquest.config import settings
from finquest.domain.exceptions import AuthenticationError

TOKEN_ISSUER = "finquest-api"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def issue_token(user_id: str, mobile: str, now: datetime | None = None) -> str:
    """Encode an HS256 access token for a user"""
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "mobile": mobile,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
        "iss": TOKEN_ISSUER,
    }
    return pyjwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> str:
    """
    Validate an access token and return its user id.

    Raises:
        AuthenticationError: Expired, tampered or malformed token
    """
    try:
        payload = pyjwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=TOKEN_ISSUER,
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError as e:
        logging.warning("Access token expired")
        raise AuthenticationError("Token expired") from e
    except pyjwt.InvalidTokenError as e:
        logging.warning(f"Access token rejected: {e}")
        raise AuthenticationError("Invalid token") from e
    return payload["sub"]
