"""
Middleware components for request processing.

- Request context (request ID, IP address, user agent)
- CORS for the browser-based submission form and admin dashboard
"""

from showfinder.middleware.cors import CORSMiddleware
from showfinder.middleware.request_context import RequestContextMiddleware

__all__ = [
    "CORSMiddleware",
    "RequestContextMiddleware",
]
