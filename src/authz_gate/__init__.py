"""
authz-gate

Privilege-based access control for HTTP routes and saved objects:
- Action registry (app, api, saved_object, ui namespaces)
- Privilege checker backed by a live identity backend
- Legacy / RBAC mode driven by license changes
- Request interceptor, secure saved objects client, UI capability disabler
"""

__version__ = "0.1.0"

from .core.actions import Action, ActionNamespace, Actions, parse_action
from .core.checker import PrivilegeChecker, PrivilegeCheckResult
from .core.errors import (
    AuthorizationError,
    InvalidActionSegment,
    IdentityBackendUnavailable,
    SavedObjectsForbiddenError,
)
from .core.mode import AuthorizationMode, Mode
from .core.service import AuthorizationService, create_authorization_service
from .identity.principal import IdentityContext, Role, RoleSet, ApplicationGrant

__all__ = [
    "Action",
    "ActionNamespace",
    "Actions",
    "parse_action",
    "PrivilegeChecker",
    "PrivilegeCheckResult",
    "AuthorizationError",
    "InvalidActionSegment",
    "IdentityBackendUnavailable",
    "SavedObjectsForbiddenError",
    "AuthorizationMode",
    "Mode",
    "AuthorizationService",
    "create_authorization_service",
    "IdentityContext",
    "Role",
    "RoleSet",
    "ApplicationGrant",
]
