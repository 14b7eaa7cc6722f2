from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.core.constants import API_VERSION_HEADER
from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import MessageCode
from src.utils.logger import get_logger
from src.utils.settings.app import AppSettings

logger = get_logger(__name__)

# Never overridden, CORSMiddleware owns them
CORS_HEADERS = {
    "Access-Control-Allow-Origin",
    "Access-Control-Allow-Methods",
    "Access-Control-Allow-Headers",
    "Access-Control-Allow-Credentials",
    "Access-Control-Expose-Headers",
    "Access-Control-Max-Age",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, is_production: bool = False):
        super().__init__(app)
        self.is_production = is_production
        self.app_settings = AppSettings()

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
            "X-Permitted-Cross-Domain-Policies": "none",
            API_VERSION_HEADER: self.app_settings.API_VERSION,
        }

        if self.is_production:
            headers["Content-Security-Policy"] = self._get_csp()

        if self.is_production and request.url.scheme == "https":
            headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        for key, value in headers.items():
            if key not in response.headers and key not in CORS_HEADERS:
                response.headers[key] = value

        return response

    def _get_csp(self) -> str:
        """JSON API only: nothing but same-origin connections."""
        csp = {
            "default-src": ["'none'"],
            "connect-src": ["'self'"],
            "frame-ancestors": ["'none'"],
            "base-uri": ["'none'"],
            "form-action": ["'none'"],
        }
        return "; ".join(
            f"{directive} {' '.join(sources)}" for directive, sources in csp.items()
        )


class PayloadSizeMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than MAX_REQUEST_SIZE."""

    def __init__(self, app, max_request_size: int | None = None):
        super().__init__(app)
        self.max_request_size = max_request_size or AppSettings().MAX_REQUEST_SIZE

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("Content-Length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_request_size:
                logger.warning(
                    "Request too large",
                    content_length=int(content_length),
                    max_request_size=self.max_request_size,
                )
                exc = PharmaStockException(
                    MessageCode.PAYLOAD_TOO_LARGE,
                    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    details={
                        "description": f"Request size ({content_length} bytes) exceeds maximum allowed ({self.max_request_size} bytes)"
                    },
                )
                return JSONResponse(
                    status_code=exc.status_code, content=exc.to_response_dict()
                )

        return await call_next(request)
