"""Auth API: register and login.

Tokens are JWT bearer tokens whose subject is the user id. Both routes are
public and rate limited per client address.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.v1.dependencies import get_user_repo, get_user_repo_for_write
from app.core.config import get_settings
from app.core.limiter import limit_auth
from app.domain.enums import UserRole
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.infrastructure.security.jwt import create_access_token
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.user import UserResponse

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
@limit_auth
async def register(
    request: Request,
    body: RegisterRequest,
    user_repo: UserRepository = Depends(get_user_repo_for_write),
):
    """Register a new user with the user role. 409 if the username is taken."""
    user = await user_repo.create_user(
        username=body.username,
        name=body.name,
        password=body.password,
        email=str(body.email) if body.email else None,
        role=UserRole.USER,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    user_repo: UserRepository = Depends(get_user_repo),
):
    """Authenticate with username and password; return a JWT."""
    user = await user_repo.authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    settings = get_settings()
    token = create_access_token(
        user.id,
        extra_claims={"username": user.username, "role": user.role.value},
    )
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )
