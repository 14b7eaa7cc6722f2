"""Bearer token verification and auth context resolution."""

from uuid import UUID

from fastapi import status
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.constants import ANONYMOUS_JWT_ROLE, JWT_ALGORITHM
from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import MessageCode
from src.cache import cached
from src.core.context import AuthContext
from src.database.models import Profile
from src.utils.settings.auth import AuthSettings
from src.utils.settings.workflow import WorkflowSettings
from src.utils.logger import get_logger

logger = get_logger(__name__)


def decode_access_token(token: str) -> dict:
    """Verify a hosted-auth access token and return its claims."""
    auth_settings = AuthSettings()
    try:
        payload = jwt.decode(
            token,
            auth_settings.SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=auth_settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {e}")
        raise PharmaStockException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Invalid or expired authentication token"},
        )

    if payload.get("role") == ANONYMOUS_JWT_ROLE:
        raise PharmaStockException(
            MessageCode.INSUFFICIENT_PERMISSIONS,
            status.HTTP_403_FORBIDDEN,
            {"description": "Anonymous access not permitted"},
        )

    if not payload.get("sub"):
        raise PharmaStockException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Token has no subject"},
        )

    return payload


async def load_auth_context(db: AsyncSession, user_id: UUID) -> AuthContext:
    """Resolve the caller's profile into an AuthContext."""
    stmt = select(Profile).where(Profile.user_id == user_id)
    result = await db.execute(stmt)
    profile = result.scalar_one_or_none()

    if not profile:
        raise PharmaStockException(
            MessageCode.PROFILE_NOT_FOUND,
            status.HTTP_403_FORBIDDEN,
            {"description": "Authenticated user has no staff profile"},
        )

    return AuthContext.from_profile(profile)


@cached(WorkflowSettings().AUTH_CONTEXT_CACHE_TTL_SECONDS)
async def handle_jwt_auth(db: AsyncSession, token: str) -> AuthContext:
    """Verify the token and resolve the caller's AuthContext.

    Cached per token and tagged by user/organization; role changes evict it.
    """
    payload = decode_access_token(token)
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise PharmaStockException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Token subject is not a user id"},
        )

    return await load_auth_context(db, user_id)
