"""
Privilege Definitions

Application privileges offered to role authors, and their registration with
the identity backend whenever the license allows RBAC.

- all:  every action in every namespace
- read: every app and UI capability, plus read operations on each
        saved object type
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from .actions import ActionNamespace, Actions
from .errors import IdentityBackendUnavailable
from .license import LicenseCheckResults, LicenseFeed
from ..storage.types import READ_OPERATIONS

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION = "authz-gate"


def build_privilege_map(actions: Actions, saved_object_types: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Map privilege name -> granted action patterns"""
    read_actions = [
        actions.saved_object.get(type_name, operation)
        for type_name in sorted(saved_object_types)
        for operation in sorted(READ_OPERATIONS & set(saved_object_types[type_name]))
    ]

    return {
        "all": [actions.all_of(namespace) for namespace in ActionNamespace],
        "read": [
            actions.app.all,
            actions.ui.all,
            *read_actions,
        ],
    }


def serialize_privileges(application: str, privilege_map: Mapping[str, List[str]]) -> Dict[str, Any]:
    """Backend payload for registering application privileges"""
    return {
        application: {
            name: {
                "application": application,
                "name": name,
                "actions": [str(a) for a in granted],
                "metadata": {},
            }
            for name, granted in privilege_map.items()
        }
    }


async def register_privileges_with_backend(
    backend,
    privilege_map: Mapping[str, List[str]],
    application: str = DEFAULT_APPLICATION,
) -> bool:
    """
    Push privilege definitions to the identity backend.

    Returns:
        True if the backend accepted them, False otherwise (logged)
    """
    payload = serialize_privileges(application, privilege_map)
    try:
        await backend.put_privileges(payload)
    except (IdentityBackendUnavailable, NotImplementedError) as e:
        logger.error(f"Failed to register privileges for {application}: {e}")
        return False

    logger.info(f"Registered privileges {sorted(privilege_map)} for {application}")
    return True


class PrivilegeRegistrar:
    """Registers privileges each time the license starts or keeps allowing RBAC"""

    def __init__(
        self,
        backend,
        privilege_map: Mapping[str, List[str]],
        application: str = DEFAULT_APPLICATION,
    ):
        self.backend = backend
        self.privilege_map = privilege_map
        self.application = application
        self._tasks: Set[asyncio.Task] = set()

    def on_license_change(self, results: LicenseCheckResults) -> Optional[asyncio.Task]:
        if not results.allow_rbac:
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; privilege registration deferred to startup")
            return None

        task = loop.create_task(
            register_privileges_with_backend(self.backend, self.privilege_map, self.application)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def watch(self, feed: LicenseFeed) -> None:
        feed.subscribe(self.on_license_change)
