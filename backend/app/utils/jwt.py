from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import JWTError

from ..config import TOKEN_TTL_DAYS

ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for bearer token verification failures."""


class MalformedTokenError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


class SignatureMismatchError(TokenError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed, time-limited identity tokens.

    Tokens carry only the user id (`sub`) and an expiry (`exp`). There is no
    revocation list; callers re-check that the user still exists.
    """

    def __init__(self, secret_key: str, ttl: timedelta = timedelta(days=TOKEN_TTL_DAYS)):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self.ttl = ttl

    def issue(self, user_id: int, now: datetime | None = None) -> str:
        issued_at = now or _utcnow()
        claims = {
            "sub": str(user_id),
            "exp": (issued_at + self.ttl).timestamp(),
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str, now: datetime | None = None) -> int:
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty")

        # Structural check first so a garbage string isn't reported as tampered.
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(str(e)) from e

        # Expiry is checked below against `now` so the boundary is exact.
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise SignatureMismatchError(str(e)) from e

        exp = claims.get("exp")
        sub = claims.get("sub")
        if not isinstance(exp, (int, float)) or sub is None:
            raise MalformedTokenError("Token is missing required claims")
        try:
            user_id = int(sub)
        except (TypeError, ValueError) as e:
            raise MalformedTokenError("Token subject is not a user id") from e

        current = now or _utcnow()
        if current.timestamp() >= exp:
            raise ExpiredTokenError("Token has expired")

        return user_id
