"""
FastAPI API dependencies.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.exceptions import AuthenticationError
from inventory_api.core.security import decode_access_token, verify_password
from inventory_api.db.models import RevokedToken, User
from inventory_api.db.session import get_db

bearer_scheme = HTTPBearer(auto_error=False, description="Token returned by POST /login")


@dataclass
class AuthContext:
    """The authenticated user together with the claims of the token that was presented."""

    user: User
    claims: Dict[str, Any]

    @property
    def jti(self) -> Optional[str]:
        return self.claims.get("jti")


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Get user by email."""
    query = select(User).where(User.email == email)
    result = await db.execute(query)
    return result.scalars().first()


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the active user for these credentials, or ``None``."""
    user = await get_user_by_email(db, email=email)
    if not user or not user.is_active:
        return None

    if not verify_password(password, str(user.hashed_password)):
        return None

    return user


async def is_token_revoked(db: AsyncSession, jti: Optional[str]) -> bool:
    if not jti:
        return True
    result = await db.execute(select(RevokedToken.jti).where(RevokedToken.jti == jti))
    return result.scalar_one_or_none() is not None


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Resolve the bearer token of the request into an ``AuthContext``."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    claims = decode_access_token(credentials.credentials)
    if claims is None or claims.get("sub") is None:
        raise AuthenticationError()

    if await is_token_revoked(db, claims.get("jti")):
        raise AuthenticationError()

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError() from None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError()

    return AuthContext(user=user, claims=claims)


async def get_current_user(auth: AuthContext = Depends(get_auth_context)) -> User:
    """Get current user from token."""
    return auth.user
