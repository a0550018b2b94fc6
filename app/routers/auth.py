"""Authentication router: registration, email activation and login."""
import logging

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.db.config import get_session
from app.middleware.auth import create_access_token
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResendCodeRequest,
    ResendCodeResponse,
    UserSummary,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from app.services.mail_service import MailService, get_mail_service
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])  # No prefix since main.py adds /auth prefix


def get_user_service(
    session: Session = Depends(get_session),
    mailer: MailService = Depends(get_mail_service),
) -> UserService:
    """Dependency for getting UserService instance."""
    return UserService(session, mailer)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, service: UserService = Depends(get_user_service)):
    """Create an inactive account and send its activation code."""
    user = service.register(request.email, request.password, request.name)
    return RegisterResponse(id=user.id)


@router.post("/verify-email", response_model=VerifyEmailResponse)
async def verify_email(request: VerifyEmailRequest, service: UserService = Depends(get_user_service)):
    """Activate an account with the emailed code."""
    user = service.activate(request.user_id, request.code)
    return VerifyEmailResponse(data=user.id)


@router.post("/resend-code", response_model=ResendCodeResponse)
async def resend_code(request: ResendCodeRequest, service: UserService = Depends(get_user_service)):
    """Issue a fresh activation code for an account that is not active yet."""
    user = service.resend_activation_code(request.email)
    return ResendCodeResponse(id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, service: UserService = Depends(get_user_service)):
    """Exchange email and password for a bearer token."""
    user = service.login(request.email, request.password)
    token = create_access_token(user.id, user.email)
    logger.info(f"User {user.id} logged in")
    return LoginResponse(
        access_token=token,
        user=UserSummary(id=user.id, email=user.email, name=user.name),
    )
