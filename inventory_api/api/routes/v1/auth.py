"""
Authentication endpoints: login, logout and the current user.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.dependencies import AuthContext, authenticate_user, get_auth_context, get_current_user
from inventory_api.api.responses import UNAUTHORIZED, VALIDATION_FAILED, Tags
from inventory_api.core.exceptions import ValidationFailedError
from inventory_api.core.security import create_access_token
from inventory_api.db.models import RevokedToken, User
from inventory_api.db.session import get_db
from inventory_api.schemas.auth import LoginRequest, LoginResponse, MessageResponse, UserEnvelope, UserResponse

router = APIRouter(tags=[Tags.AUTH])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login and get access token.",
    responses=VALIDATION_FAILED,
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Exchange email and password for a bearer token."""
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        logger.warning(f"Failed login for {credentials.email}")
        raise ValidationFailedError(
            {"email": ["The provided credentials are incorrect."]},
            message="The provided credentials are incorrect.",
        )

    token = create_access_token(subject=user.id)
    logger.info(f"User {user.id} logged in")

    return LoginResponse(user=UserResponse.model_validate(user), token=token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the current access token.",
    responses=UNAUTHORIZED,
)
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, str]:
    """Revoke the token used for this request."""
    db.add(RevokedToken(jti=auth.jti, user_id=auth.user.id))
    await db.commit()

    logger.info(f"User {auth.user.id} logged out")
    return {"message": "Logout successful"}


@router.get(
    "/user",
    response_model=UserEnvelope,
    summary="Get authenticated user information",
    responses=UNAUTHORIZED,
)
async def get_me(current_user: User = Depends(get_current_user)) -> Any:
    """Get current authenticated user information."""
    return {"user": UserResponse.model_validate(current_user)}
