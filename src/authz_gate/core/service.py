"""
Authorization Service

Assembles the pieces callers use:

    authorization.mode.use_rbac()
    authorization.check_privileges_dynamically_with_request(identity)(actions)
    authorization.actions.app.get("discover")
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from ..identity.backend import IdentityBackend
from ..identity.principal import IdentityContext
from ..identity.source import CallWithIdentity, PrivilegeSource
from .actions import Actions
from .checker import CheckPrivileges, PrivilegeChecker, check_privileges_dynamically_with_request_factory
from .license import LicenseFeed
from .mode import AuthorizationMode, create_authorization_mode
from .optional import Absent, OptionalCapability, SpacesService
from .privileges import DEFAULT_APPLICATION, PrivilegeRegistrar, build_privilege_map

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationService:
    actions: Actions
    mode: AuthorizationMode
    checker: PrivilegeChecker
    check_privileges_dynamically_with_request: Callable[[IdentityContext], CheckPrivileges]
    privileges: Dict[str, List[str]]
    spaces: OptionalCapability[SpacesService]
    application: str = DEFAULT_APPLICATION


def create_authorization_service(
    backend: Union[IdentityBackend, CallWithIdentity],
    saved_object_types,
    license_feed: Optional[LicenseFeed] = None,
    spaces: OptionalCapability[SpacesService] = Absent("spaces"),
    application: str = DEFAULT_APPLICATION,
) -> AuthorizationService:
    """
    Build the authorization service.

    When a license feed is given, the mode follows it and privileges are
    re-registered with the backend whenever RBAC becomes allowed.
    """
    actions = Actions()
    checker = PrivilegeChecker(PrivilegeSource(backend))
    mode = create_authorization_mode(license_feed)
    privileges = build_privilege_map(actions, saved_object_types)

    if license_feed is not None and isinstance(backend, IdentityBackend):
        PrivilegeRegistrar(backend, privileges, application).watch(license_feed)

    logger.info(f"Authorization service ready (spaces {'present' if spaces.is_present else 'absent'})")
    return AuthorizationService(
        actions=actions,
        mode=mode,
        checker=checker,
        check_privileges_dynamically_with_request=check_privileges_dynamically_with_request_factory(checker, spaces),
        privileges=privileges,
        spaces=spaces,
        application=application,
    )
