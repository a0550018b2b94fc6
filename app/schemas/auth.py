"""Authentication schemas."""
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Registration request body."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    name: str | None = Field(None, max_length=255)


class RegisterResponse(BaseModel):
    id: str
    message: str = "User created successfully"


class VerifyEmailRequest(BaseModel):
    """Activation code submission."""
    user_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=16)


class VerifyEmailResponse(BaseModel):
    message: str = "Account activated successfully"
    data: str


class ResendCodeRequest(BaseModel):
    email: EmailStr


class ResendCodeResponse(BaseModel):
    message: str = "Activation code sent"
    id: str


class LoginRequest(BaseModel):
    """Login request body."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: str
    email: str
    name: str | None = None


class LoginResponse(BaseModel):
    """Response containing the bearer token after login."""
    access_token: str
    user: UserSummary
