"""
Security Gateway Server

FastAPI application with the authorization layer installed:
- AuthorizationMiddleware on every request (app and tagged API routes)
- Secure saved objects client per request
- UI capability filtering for app pages

Route structure:
- GET    /app/{app_id}                       - App page vars (UI capabilities)
- GET    /api/status                         - Liveness, no access tags
- GET    /api/security/privileges            - Registered privilege map
- POST   /api/saved_objects/_bulk_create     - Bulk create
- POST   /api/saved_objects/_bulk_get        - Bulk get
- GET    /api/saved_objects/_find            - Find
- POST   /api/saved_objects/{type}           - Create
- GET    /api/saved_objects/{type}/{id}      - Get
- PUT    /api/saved_objects/{type}/{id}      - Update
- DELETE /api/saved_objects/{type}/{id}      - Delete
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
import uvicorn

from config import SecurityConfig

from .audit import SecurityAuditLogger, create_sink
from .core.errors import SavedObjectsError
from .core.license import LicenseFeed, LicenseInfo
from .core.optional import SpacesService, create_optional_capability
from .core.service import AuthorizationService, create_authorization_service
from .http.interceptor import AuthorizationMiddleware
from .identity.backend import HttpIdentityBackend, IdentityBackend, InMemoryIdentityBackend
from .identity.principal import IdentityContext, Role
from .storage.client import BaseSavedObjectsClient, SavedObjectsClient, SavedObjectsRepository
from .storage.models import BulkCreateObject, BulkGetObject, FindOptions
from .storage.secure_client import create_scoped_saved_objects_client
from .storage.types import SavedObjectTypeRegistry
from .ui.capabilities import UICapabilitiesDisabler, replace_injected_vars

logger = logging.getLogger(__name__)


def create_identity_backend(config: SecurityConfig) -> IdentityBackend:
    """Build the identity backend named in the configuration"""
    backend_config = config.identity_backend
    if backend_config.type == "memory":
        return InMemoryIdentityBackend({
            username: [Role.from_dict(role) for role in roles]
            for username, roles in backend_config.users.items()
        })
    if backend_config.type == "http":
        return HttpIdentityBackend(
            backend_config.url,
            timeout=backend_config.timeout,
            service_headers=backend_config.service_headers,
        )
    raise ValueError(f"Unknown identity backend type: {backend_config.type}")


class SecurityGatewayServer:
    """Owns the FastAPI app and the authorization collaborators it uses"""

    def __init__(
        self,
        config: SecurityConfig,
        backend: Optional[IdentityBackend] = None,
        license_feed: Optional[LicenseFeed] = None,
        ui_capabilities: Optional[Dict[str, Dict[str, bool]]] = None,
    ):
        self.config = config
        self.backend = backend or create_identity_backend(config)
        self.license_feed = license_feed or LicenseFeed()
        self.ui_capabilities = ui_capabilities or config.metadata.get("ui_capabilities", {})

        self.saved_object_types = SavedObjectTypeRegistry(config.saved_object_types)
        self.repository = SavedObjectsRepository()
        self.base_client = SavedObjectsClient(self.repository, self.saved_object_types)

        spaces = create_optional_capability(
            "spaces",
            config.spaces.enabled,
            SpacesService(config.spaces.default_space_id),
        )
        self.authorization: AuthorizationService = create_authorization_service(
            self.backend,
            self.saved_object_types,
            license_feed=self.license_feed,
            spaces=spaces,
            application=config.authorization.application,
        )

        sink_options = {"path": config.audit.path, "endpoint": config.audit.endpoint}
        self.audit_logger = SecurityAuditLogger(
            enabled=config.audit.enabled,
            sink=create_sink(config.audit.sink, **{k: v for k, v in sink_options.items() if v}),
        )

        self.app = FastAPI(
            title="authz-gate",
            description="Privilege-based access control gateway",
            lifespan=self._lifespan,
        )
        self.app.add_middleware(AuthorizationMiddleware, authorization=self.authorization)
        self.app.add_exception_handler(SavedObjectsError, self._saved_objects_error_handler)

        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        # The privilege registrar pushes definitions when this publish allows RBAC
        if self.license_feed.current is None:
            # Until a real license feed publishes, the configured flag decides
            self.license_feed.publish_license(LicenseInfo(security_enabled=self.config.enabled))
        else:
            self.license_feed.publish(self.license_feed.current)
        try:
            yield
        finally:
            try:
                await self.audit_logger.close()
            finally:
                await self.backend.close()

    @staticmethod
    async def _saved_objects_error_handler(request: Request, exc: SavedObjectsError) -> JSONResponse:
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    def saved_objects_client(self, request: Request) -> BaseSavedObjectsClient:
        """Per-request client, secured or pass-through depending on the mode"""
        identity = getattr(request.state, "identity", None) or IdentityContext.anonymous()
        return create_scoped_saved_objects_client(
            base_client=self.base_client,
            mode=self.authorization.mode,
            identity=identity,
            actions=self.authorization.actions,
            check_privileges_dynamically_with_request=self.authorization.check_privileges_dynamically_with_request,
            audit_logger=self.audit_logger,
            saved_object_types=self.saved_object_types,
        )

    def _setup_routes(self):
        """Setup all routes on the server"""
        authorization = self.authorization
        saved_objects_client = self.saved_objects_client

        # =====================================================================
        # APP PAGES
        # =====================================================================

        @self.app.get("/app/{app_id}")
        async def app_page(app_id: str, request: Request):
            identity = getattr(request.state, "identity", None) or IdentityContext.anonymous()
            disabler = UICapabilitiesDisabler(
                authorization.actions,
                authorization.check_privileges_dynamically_with_request(identity),
            )
            injected = await replace_injected_vars(
                {"app_id": app_id, "ui_capabilities": self.ui_capabilities},
                authorization.mode,
                disabler,
                anonymous_route=identity.is_anonymous,
            )
            return injected

        # =====================================================================
        # API
        # =====================================================================

        @self.app.get("/api/status")
        async def status():
            return {
                "status": "ok",
                "mode": authorization.mode.current.value,
            }

        @self.app.get("/api/security/privileges", tags=["access:manage"])
        async def privileges():
            return authorization.privileges

        # =====================================================================
        # SAVED OBJECTS
        # =====================================================================

        @self.app.post("/api/saved_objects/_bulk_create")
        async def bulk_create(
            objects: List[BulkCreateObject],
            overwrite: bool = False,
            client: BaseSavedObjectsClient = Depends(saved_objects_client),
        ):
            return await client.bulk_create(objects, overwrite=overwrite)

        @self.app.post("/api/saved_objects/_bulk_get")
        async def bulk_get(
            objects: List[BulkGetObject],
            client: BaseSavedObjectsClient = Depends(saved_objects_client),
        ):
            return await client.bulk_get(objects)

        @self.app.get("/api/saved_objects/_find")
        async def find(
            type: Optional[List[str]] = Query(default=None),
            search: Optional[str] = None,
            page: int = 1,
            per_page: int = 20,
            client: BaseSavedObjectsClient = Depends(saved_objects_client),
        ):
            options = FindOptions(type=type, search=search, page=page, per_page=per_page)
            return await client.find(options)

        @self.app.post("/api/saved_objects/{type}")
        async def create(
            type: str,
            body: Dict[str, Any],
            id: Optional[str] = None,
            overwrite: bool = False,
            client: BaseSavedObjectsClient = Depends(saved_objects_client),
        ):
            return await client.create(type, body.get("attributes", {}), id=id, overwrite=overwrite)

        @self.app.get("/api/saved_objects/{type}/{id}")
        async def get(type: str, id: str, client: BaseSavedObjectsClient = Depends(saved_objects_client)):
            return await client.get(type, id)

        @self.app.put("/api/saved_objects/{type}/{id}")
        async def update(
            type: str,
            id: str,
            body: Dict[str, Any],
            client: BaseSavedObjectsClient = Depends(saved_objects_client),
        ):
            return await client.update(type, id, body.get("attributes", {}))

        @self.app.delete("/api/saved_objects/{type}/{id}")
        async def delete(type: str, id: str, client: BaseSavedObjectsClient = Depends(saved_objects_client)):
            await client.delete(type, id)
            return {}

    def run(self):
        """Serve with uvicorn (blocking)"""
        logger.info(f"Starting security gateway on {self.config.server.host}:{self.config.server.port}")
        uvicorn.run(self.app, host=self.config.server.host, port=self.config.server.port)


def create_app(config: Optional[SecurityConfig] = None, **kwargs) -> FastAPI:
    """Build the FastAPI application"""
    return SecurityGatewayServer(config or SecurityConfig(), **kwargs).app
