import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.api.core.constants import SKIP_AUTH_PATHS
from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import MessageCode
from src.database.connection import get_async_db
from src.services.auth.handlers import handle_jwt_auth
from src.utils.path_helpers import path_matches

logger = structlog.get_logger(__name__)


def extract_bearer_token(authorization: str) -> str:
    """Return the token of an 'Authorization: Bearer <token>' header value."""
    auth_parts = authorization.split(" ")
    if len(auth_parts) != 2 or auth_parts[0].lower() != "bearer" or not auth_parts[1]:
        raise PharmaStockException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Authorization header must be 'Bearer <token>'"},
        )
    return auth_parts[1]


def _error_response(exc: PharmaStockException) -> JSONResponse:
    # Exceptions raised in http middleware bypass the app's exception handlers
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response_dict(),
        headers=exc.headers,
    )


async def auth_middleware(request: Request, call_next):
    """Resolve the caller's AuthContext once per request.

    The context is stored on request.state.auth and passed into services from
    there; handlers never re-query the caller's role.
    """
    request.state.auth = None

    if request.method == "OPTIONS" or path_matches(request.url.path, SKIP_AUTH_PATHS):
        return await call_next(request)

    authorization = request.headers.get("Authorization", "")

    try:
        if not authorization:
            raise PharmaStockException(
                MessageCode.AUTH_REQUIRED,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Provide an 'Authorization: Bearer <token>' header"},
            )

        token = extract_bearer_token(authorization)
        async with get_async_db(request.app.state.session_factory) as db:
            auth_context = await handle_jwt_auth(db, token)

    except PharmaStockException as e:
        logger.info(
            "Authentication rejected",
            path=request.url.path,
            message_code=e.message_code,
            status_code=e.status_code,
        )
        return _error_response(e)

    request.state.auth = auth_context
    structlog.contextvars.bind_contextvars(user_id=str(auth_context.user_id))

    logger.debug(
        "Request authenticated",
        user_id=str(auth_context.user_id),
        organization_id=str(auth_context.organization_id),
        role=auth_context.role.value,
    )
    return await call_next(request)
