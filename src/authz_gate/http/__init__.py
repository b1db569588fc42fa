"""
HTTP

Route-level enforcement for FastAPI / Starlette applications.
"""

from .interceptor import (
    AuthorizationInterceptor,
    AuthorizationMiddleware,
    Decision,
    access_operations,
    route_tags,
)

__all__ = [
    "AuthorizationInterceptor",
    "AuthorizationMiddleware",
    "Decision",
    "access_operations",
    "route_tags",
]
