"""
RequestContext Middleware - per-request tracing context.

Sets on request.state:
- request_id: client-supplied X-Request-ID or a fresh UUID
- ip_address: client IP (X-Forwarded-For only from trusted proxies)
- user_agent: client user agent string

The request id is also bound into structlog's context variables so every
log line emitted while handling the request carries it, and it is echoed
back in the X-Request-ID response header.
"""

import re
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from showfinder.config import settings
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request.state Namespace Convention:
    - request_id, ip_address, user_agent: set here
    - Do not add other attributes without updating this documentation
    """

    async def dispatch(self, request: Request, call_next):
        request_id = self._incoming_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id

        ip_address = self._extract_client_ip(request)
        request.state.ip_address = ip_address

        user_agent = request.headers.get("user-agent")
        request.state.user_agent = user_agent

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _incoming_request_id(request: Request) -> str | None:
        """Reuse a well-formed X-Request-ID from scrapers or the web form."""
        candidate = request.headers.get("x-request-id")
        if candidate and _REQUEST_ID_RE.match(candidate):
            return candidate
        return None

    def _extract_client_ip(self, request: Request) -> str | None:
        """
        Client IP with proxy spoofing protection.

        X-Forwarded-For is only read when TRUST_X_FORWARDED_FOR is on and
        the direct peer is one of TRUSTED_PROXY_IPS.
        """
        if not settings.TRUST_X_FORWARDED_FOR:
            return request.client.host if request.client else None

        if request.client and request.client.host in settings.TRUSTED_PROXY_IPS:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                # "client, proxy1, proxy2" - first entry is the original client
                ip_address = forwarded_for.split(",")[0].strip()
                logger.debug(
                    "Using X-Forwarded-For from trusted proxy",
                    proxy_ip=request.client.host,
                    client_ip=ip_address,
                )
                return ip_address

        return request.client.host if request.client else None
