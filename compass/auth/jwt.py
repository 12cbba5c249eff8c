from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from compass.config import get_settings
from compass.db.session import get_session
from compass.models.domain import User

settings = get_settings()
security = HTTPBearer()

REQUIRED_CLAIMS = ["sub", "username", "exp", "iat", "iss", "aud"]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@dataclass(frozen=True)
class JWTPayload:
    """Claims carried by a Decision Compass access token."""

    user_id: UUID
    username: str
    exp: datetime
    iss: str
    aud: str

    @classmethod
    def from_token(cls, token: str) -> "JWTPayload":
        """Decode and validate ``token``; any failure is a 401."""
        try:
            claims = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                issuer=settings.jwt_issuer,
                audience=settings.jwt_audience,
                options={"require": REQUIRED_CLAIMS},
            )
            user_id = UUID(claims["sub"])
        except jwt.ExpiredSignatureError:
            raise _unauthorized("Not authorized, token expired")
        except (jwt.InvalidTokenError, ValueError) as e:
            raise _unauthorized(f"Not authorized, token failed: {e}")

        return cls(
            user_id=user_id,
            username=claims["username"],
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            iss=claims["iss"],
            aud=claims["aud"],
        )

    @classmethod
    def create_token(cls, user_id: UUID, username: str) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=settings.jwt_access_token_expire_minutes),
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
        }
        return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the bearer token to its user. Deleted users get a 401."""
    payload = JWTPayload.from_token(credentials.credentials)
    user = db.get(User, payload.user_id)
    if user is None:
        raise _unauthorized("Not authorized, user not found")
    return user
