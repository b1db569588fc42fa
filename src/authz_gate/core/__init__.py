"""
Authorization Core

Actions, errors, license handling, and the enforcement mode. The checker and
service modules build on the identity package and are imported from their
own modules.
"""

from .actions import Action, ActionNamespace, Actions, parse_action, pattern_matches
from .errors import (
    AuthorizationError,
    InvalidActionSegment,
    IdentityBackendUnavailable,
    SavedObjectsError,
    SavedObjectsForbiddenError,
    SavedObjectNotFoundError,
)
from .license import LicenseInfo, LicenseCheckResults, LicenseFeed, check_license
from .mode import Mode, AuthorizationMode
from .optional import Present, Absent, SpacesService, create_optional_capability

__all__ = [
    "Action",
    "ActionNamespace",
    "Actions",
    "parse_action",
    "pattern_matches",
    "AuthorizationError",
    "InvalidActionSegment",
    "IdentityBackendUnavailable",
    "SavedObjectsError",
    "SavedObjectsForbiddenError",
    "SavedObjectNotFoundError",
    "LicenseInfo",
    "LicenseCheckResults",
    "LicenseFeed",
    "check_license",
    "Mode",
    "AuthorizationMode",
    "Present",
    "Absent",
    "SpacesService",
    "create_optional_capability",
]
