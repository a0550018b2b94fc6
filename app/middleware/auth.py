"""JWT issuing and bearer authentication for FastAPI."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import jwt, JWTError
from pydantic import BaseModel

from app.config import JWT_SECRET, JWT_ALGORITHM, JWT_ACCESS_TOKEN_EXPIRES
from app.exceptions import AuthError


class CurrentUser(BaseModel):
    """User information extracted from JWT."""
    user_id: str
    email: Optional[str] = None


def create_access_token(user_id: str, email: str, expires_in: int = JWT_ACCESS_TOKEN_EXPIRES) -> str:
    """
    Mint a signed bearer token for a user.

    Args:
        user_id: Subject of the token
        email: Stored under the `username` claim
        expires_in: Lifetime in seconds

    Returns:
        Encoded HS256 JWT
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "username": email,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    """
    Validate a bearer token and return the user it identifies.

    Raises:
        AuthError: If token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired", code="TOKEN_EXPIRED")
    except JWTError as e:
        raise AuthError(f"Invalid token: {str(e)}", code="INVALID_TOKEN")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token: missing user ID", code="INVALID_TOKEN")

    return CurrentUser(user_id=user_id, email=payload.get("username"))


async def get_current_user(request: Request) -> CurrentUser:
    """
    Validate JWT token from Authorization header and extract user information.

    Args:
        request: FastAPI request object to extract Authorization header

    Returns:
        CurrentUser with user_id and email from token

    Raises:
        AuthError: If the header is missing or the token is invalid or expired
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthError("Missing or invalid Authorization header")

    token = auth_header[7:]  # Remove "Bearer " prefix
    return decode_access_token(token)
