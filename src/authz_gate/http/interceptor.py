"""
Request Authorization Interceptor

Runs after authentication on every request:

1. Legacy mode                        -> continue
2. /app/<appId>/...                   -> require app:<appId>
3. /api/<feature>/... with access:<op> route tags
                                      -> require api:<feature>/<op> for each tag
4. anything else                      -> continue

A denied request gets the same 404 the framework returns for an unknown
route, so a caller cannot tell "forbidden" from "does not exist".
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from ..core.errors import InvalidActionSegment
from ..core.service import AuthorizationService
from ..identity.principal import IdentityContext

logger = logging.getLogger(__name__)

ACCESS_TAG_PREFIX = "access:"

GetIdentity = Callable[[Request], Awaitable[IdentityContext]]


class Decision(str, Enum):
    CONTINUE = "continue"
    DENIED = "denied"


def access_operations(tags: Sequence[str]) -> List[str]:
    """Operations named by ``access:<operation>`` tags"""
    return [tag.split(":", 1)[1] for tag in tags if tag.startswith(ACCESS_TAG_PREFIX)]


class AuthorizationInterceptor:
    """Framework-neutral request decision"""

    def __init__(self, authorization: AuthorizationService):
        self.authorization = authorization

    async def on_post_auth(
        self,
        path: str,
        tags: Sequence[str],
        identity: IdentityContext,
    ) -> Decision:
        if not self.authorization.mode.use_rbac():
            return Decision.CONTINUE

        actions = self.authorization.actions
        check_privileges = self.authorization.check_privileges_dynamically_with_request(identity)

        try:
            if path.startswith("/app/"):
                app_id = path.split("/")[2]
                result = await check_privileges(actions.app.get(app_id))
                if not result.has_all_requested:
                    logger.info(f"Denied app '{app_id}' for {result.username or 'anonymous'}")
                    return Decision.DENIED
                return Decision.CONTINUE

            if path.startswith("/api/"):
                operations = access_operations(tags)
                if operations:
                    feature = path.split("/")[2]
                    result = await check_privileges(
                        [actions.api.get(feature, operation) for operation in operations]
                    )
                    if not result.has_all_requested:
                        logger.info(
                            f"Denied {path} for {result.username or 'anonymous'}: "
                            f"missing {sorted(result.missing)}"
                        )
                        return Decision.DENIED
        except InvalidActionSegment as e:
            # Path segments that cannot name an action cannot be granted either
            logger.debug(f"Unusable path segment in {path}: {e}")
            return Decision.DENIED

        return Decision.CONTINUE


def route_tags(request: Request) -> List[str]:
    """Tags of the route the request will be dispatched to"""
    app = request.scope.get("app")
    router = getattr(app, "router", None)
    if router is None:
        return []

    partial = None
    for route in router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return list(getattr(route, "tags", None) or [])
        if match == Match.PARTIAL and partial is None:
            partial = route
    if partial is not None:
        return list(getattr(partial, "tags", None) or [])
    return []


async def not_found(request: Request) -> Response:
    """The framework's own response for an unknown route"""
    return await http_exception_handler(request, StarletteHTTPException(status_code=404))


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """ASGI middleware applying AuthorizationInterceptor to every request"""

    def __init__(
        self,
        app,
        authorization: AuthorizationService,
        get_identity: Optional[GetIdentity] = None,
    ):
        super().__init__(app)
        self.authorization = authorization
        self.interceptor = AuthorizationInterceptor(authorization)
        self.get_identity = get_identity or self._identity_from_headers

    async def _identity_from_headers(self, request: Request) -> IdentityContext:
        space_id = None
        spaces = self.authorization.spaces
        if spaces.is_present:
            space_id = spaces.handle.get_space_id(request.url.path)
        return IdentityContext.from_headers(request.headers, space_id=space_id)

    def _route_path(self, request: Request) -> str:
        spaces = self.authorization.spaces
        if spaces.is_present:
            return spaces.handle.strip_space_prefix(request.url.path)
        return request.url.path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        identity = await self.get_identity(request)
        request.state.identity = identity

        # Routes are mounted once; /s/<space>/... dispatches to the same handlers
        path = self._route_path(request)
        request.scope["path"] = path

        decision = await self.interceptor.on_post_auth(path, route_tags(request), identity)
        if decision is Decision.DENIED:
            return await not_found(request)

        return await call_next(request)
