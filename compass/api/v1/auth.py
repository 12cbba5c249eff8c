"""Authentication endpoints: register and login."""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compass.auth.jwt import JWTPayload
from compass.auth.password import hash_password, normalize_username, validate_credentials, verify_password
from compass.config import get_settings
from compass.core.errors import AppError, internal_error
from compass.db.session import get_session
from compass.models.domain import User
from compass.schemas.base import LoginRequest, RegisterRequest, TokenResponse, UserRead

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["authentication"])

# Rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=JWTPayload.create_token(user_id=user.id, username=user.username),
        token_type="bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(
    request: Request,
    register_data: RegisterRequest,
    db: Session = Depends(get_session),
) -> TokenResponse:
    """Register a new user and return an access token."""
    is_valid, error_message = validate_credentials(register_data.username, register_data.password)
    if not is_valid:
        raise AppError(error_message or "Invalid user data", status_code=status.HTTP_400_BAD_REQUEST)

    username = normalize_username(register_data.username)
    if db.scalar(select(User).where(User.username == username)):
        raise AppError("Username already exists", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        user = User(username=username, password_hash=hash_password(register_data.password))
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise AppError("Username already exists", status_code=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        db.rollback()
        raise internal_error(e) from e

    return build_token_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_session),
) -> TokenResponse:
    """Authenticate a user and return a JWT."""
    user = db.scalar(select(User).where(User.username == normalize_username(login_data.username)))
    if not user or not verify_password(login_data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return build_token_response(user)
