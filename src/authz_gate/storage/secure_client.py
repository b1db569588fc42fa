"""
Secure Saved Objects Client

Checks ``saved_object:<type>/<operation>`` for every type a call touches
before the call reaches the underlying client. A denied call is audited and
raises SavedObjectsForbiddenError without touching storage; a granted call
is audited (when enabled) and delegated unchanged.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..audit.logger import SecurityAuditLogger
from ..core.actions import Actions
from ..core.checker import CheckPrivileges
from ..core.errors import SavedObjectsForbiddenError
from ..core.mode import AuthorizationMode
from ..identity.principal import IdentityContext
from .client import BaseSavedObjectsClient, PassThroughSavedObjectsClient
from .models import FindOptions
from .types import BULK_CREATE, BULK_GET, CREATE, DELETE, FIND, GET, UPDATE, SavedObjectTypeRegistry

logger = logging.getLogger(__name__)


class SecureSavedObjectsClientWrapper(BaseSavedObjectsClient):
    """Saved objects client that enforces privileges per object type"""

    def __init__(
        self,
        base_client: BaseSavedObjectsClient,
        actions: Actions,
        check_privileges: CheckPrivileges,
        audit_logger: SecurityAuditLogger,
        saved_object_types: SavedObjectTypeRegistry,
        identity: Optional[IdentityContext] = None,
    ):
        self.base_client = base_client
        self.actions = actions
        self.check_privileges = check_privileges
        self.audit_logger = audit_logger
        self.saved_object_types = saved_object_types
        self.identity = identity

    async def create(self, type, attributes, id=None, overwrite=False, references=None):
        await self._ensure_authorized([type], CREATE, {"type": type, "attributes": attributes, "id": id})
        return await self.base_client.create(type, attributes, id=id, overwrite=overwrite, references=references)

    async def bulk_create(self, objects, overwrite=False):
        types = [obj.type for obj in objects]
        await self._ensure_authorized(types, BULK_CREATE, {"objects": [obj.model_dump() for obj in objects]})
        return await self.base_client.bulk_create(objects, overwrite=overwrite)

    async def delete(self, type, id):
        await self._ensure_authorized([type], DELETE, {"type": type, "id": id})
        return await self.base_client.delete(type, id)

    async def find(self, options=None):
        options = options or FindOptions()
        # No explicit types means every type the base client would search
        types = options.types or [
            t for t in self.saved_object_types if self.saved_object_types.permits(t, FIND)
        ]
        await self._ensure_authorized(types, FIND, {"options": options.model_dump()})
        return await self.base_client.find(options)

    async def bulk_get(self, objects):
        types = [obj.type for obj in objects]
        await self._ensure_authorized(types, BULK_GET, {"objects": [obj.model_dump() for obj in objects]})
        return await self.base_client.bulk_get(objects)

    async def get(self, type, id):
        await self._ensure_authorized([type], GET, {"type": type, "id": id})
        return await self.base_client.get(type, id)

    async def update(self, type, id, attributes, references=None):
        await self._ensure_authorized([type], UPDATE, {"type": type, "id": id, "attributes": attributes})
        return await self.base_client.update(type, id, attributes, references=references)

    async def _ensure_authorized(self, types: Iterable[str], operation: str, args: Dict[str, Any]) -> None:
        unique_types = sorted(set(types))
        actions = [self.actions.saved_object.get(t, operation) for t in unique_types]
        result = await self.check_privileges(actions)
        username = result.username or (self.identity.username if self.identity else None)

        if result.has_all_requested:
            await self.audit_logger.saved_objects_authorization_success(
                username, operation, unique_types, actions, args
            )
            return

        missing = sorted(result.missing)
        await self.audit_logger.saved_objects_authorization_failure(
            username, operation, unique_types, actions, missing, args
        )
        logger.info(f"Denied {operation} on {unique_types} for {username}: missing {missing}")
        raise SavedObjectsForbiddenError(operation, unique_types, missing)


def create_scoped_saved_objects_client(
    base_client: BaseSavedObjectsClient,
    mode: AuthorizationMode,
    identity: IdentityContext,
    actions: Actions,
    check_privileges_dynamically_with_request,
    audit_logger: SecurityAuditLogger,
    saved_object_types: SavedObjectTypeRegistry,
) -> BaseSavedObjectsClient:
    """
    Build the client for one request.

    The mode is read once here; the returned client keeps that choice for
    its whole lifetime.
    """
    if not mode.use_rbac():
        return PassThroughSavedObjectsClient(base_client)

    return SecureSavedObjectsClientWrapper(
        base_client=base_client,
        actions=actions,
        check_privileges=check_privileges_dynamically_with_request(identity),
        audit_logger=audit_logger,
        saved_object_types=saved_object_types,
        identity=identity,
    )
