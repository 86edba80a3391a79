import os
import hmac
import hashlib
import base64
import logging
from typing import Optional

import jwt
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 100_000


class SessionClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    sub: str
    iat: int
    exp: int


class TokenCodec:
    """Signs and checks session tokens with a process-wide secret."""

    def __init__(self, secret: bytes, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, subject, now: int, ttl: int) -> str:
        payload = {
            "sub": str(subject),
            "iat": int(now),
            "exp": int(now) + int(ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str, now: int) -> Optional[SessionClaims]:
        """Return the claims of a valid, unexpired token, otherwise None.

        Callers only ever see None; the reason is logged so that an expired
        session can be told apart from a forged or malformed one.
        """
        try:
            data = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
            claims = SessionClaims(sub=str(data["sub"]), iat=int(data["iat"]), exp=int(data["exp"]))
        except jwt.InvalidTokenError as e:
            logger.warning("rejected session token: bad signature or malformed (%s)", type(e).__name__)
            return None
        except (TypeError, ValueError) as e:
            logger.warning("rejected session token: unreadable claims (%s)", type(e).__name__)
            return None
        if claims.exp <= int(now):
            logger.info("rejected session token: expired (sub=%s exp=%s)", claims.sub, claims.exp)
            return None
        return claims


def hash_password(password: str, salt: Optional[str] = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    if not salt:
        salt = base64.b64encode(os.urandom(16)).decode("utf-8")
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    digest = base64.b64encode(dk).decode("utf-8")
    return f"{PBKDF2_ALGORITHM}${iterations}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, _ = password_hash.split("$", 3)
        if algorithm != PBKDF2_ALGORITHM:
            return False
        expected = hash_password(password, salt, int(iterations))
    except (AttributeError, ValueError):
        return False
    return hmac.compare_digest(expected, password_hash)


# verified against when the email is unknown, so both login failures cost the same
DUMMY_PASSWORD_HASH = hash_password("not-a-real-password", salt="ZHVtbXktc2FsdA==")
