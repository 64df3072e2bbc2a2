"""Auth API schemas."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Request body for login."""

    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Request body for public registration. New accounts get the user role."""

    username: str = Field(..., min_length=1, max_length=150)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
