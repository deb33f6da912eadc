"""
CORS Middleware for browser clients.

The public show submission form and the admin review dashboard run in a
browser; the mobile app does not need CORS. Only origins listed in
CORS_ALLOWED_ORIGINS receive Access-Control-* headers, and preflights from
any other origin are answered 403.

Usage:
    from showfinder.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allowed_origins=settings.CORS_ALLOWED_ORIGINS,
    )
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_METHODS = ["GET", "POST", "PUT", "PATCH", "OPTIONS"]
DEFAULT_HEADERS = [
    "Accept",
    "Authorization",
    "Content-Type",
    "X-Request-ID",
    "X-Requested-With",
]


class CORSMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_credentials: bool = True,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins or [])
        self.allow_credentials = allow_credentials
        self.allow_methods = allow_methods or DEFAULT_METHODS
        self.allow_headers = allow_headers or DEFAULT_HEADERS
        self.max_age = max_age

        logger.info(
            "CORS middleware initialized",
            allowed_origins=sorted(self.allowed_origins),
            allow_credentials=self.allow_credentials,
        )

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        is_allowed_origin = bool(origin) and origin in self.allowed_origins

        if request.method == "OPTIONS" and request.headers.get("access-control-request-method"):
            if is_allowed_origin:
                return self._preflight_response(origin)
            logger.warning("CORS preflight rejected - origin not allowed", origin=origin)
            return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if is_allowed_origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            if self.allow_credentials:
                response.headers["Access-Control-Allow-Credentials"] = "true"
        elif origin:
            logger.warning("CORS request from disallowed origin", origin=origin, path=request.url.path)

        return response

    def _preflight_response(self, origin: str) -> Response:
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
            "Vary": "Origin",
        }
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"

        logger.debug("CORS preflight request handled", origin=origin)
        return Response(status_code=204, headers=headers)
