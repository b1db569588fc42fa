"""
Authorization Errors

Error taxonomy for the access-control engine:
- InvalidActionSegment: programmer error while building an action
- IdentityBackendUnavailable: privileges could not be resolved
- SavedObjectsForbiddenError: storage-object operation denied
"""

from typing import Any, Dict, Iterable, Optional


class AuthorizationError(Exception):
    """Base class for authorization errors"""


class InvalidActionSegment(AuthorizationError, ValueError):
    """An action segment is empty or contains a reserved delimiter"""

    def __init__(self, namespace: str, segment: Any, reason: str):
        self.namespace = namespace
        self.segment = segment
        self.reason = reason
        super().__init__(f"Invalid segment {segment!r} for '{namespace}' action: {reason}")


class IdentityBackendUnavailable(AuthorizationError):
    """The identity backend failed to return the caller's privileges"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SavedObjectsError(AuthorizationError):
    """Base class for errors surfaced by saved objects clients"""

    status_code = 500
    error = "Internal Server Error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": self.error,
            "message": str(self),
        }


class SavedObjectsForbiddenError(SavedObjectsError):
    """
    A saved objects operation was denied.

    Carries the operation and the object types the caller could not act on.
    """

    status_code = 403
    error = "Forbidden"

    def __init__(self, operation: str, types: Iterable[str], missing: Iterable[str] = ()):
        self.operation = operation
        self.types = sorted(set(types))
        self.missing = sorted(set(missing))
        super().__init__(f"Unable to {operation} {','.join(self.types)}")


class SavedObjectNotFoundError(SavedObjectsError):
    """The requested saved object does not exist"""

    status_code = 404
    error = "Not Found"

    def __init__(self, type: str, id: str):
        self.type = type
        self.id = id
        super().__init__(f"Saved object [{type}/{id}] not found")


class SavedObjectConflictError(SavedObjectsError):
    """A saved object with the same type and id already exists"""

    status_code = 409
    error = "Conflict"

    def __init__(self, type: str, id: str):
        self.type = type
        self.id = id
        super().__init__(f"Saved object [{type}/{id}] conflict")


class UnknownSavedObjectTypeError(SavedObjectsError):
    """The type is not registered with the saved objects service"""

    status_code = 400
    error = "Bad Request"

    def __init__(self, type: str, operation: Optional[str] = None):
        self.type = type
        self.operation = operation
        if operation is None:
            super().__init__(f"Unsupported saved object type: '{type}'")
        else:
            super().__init__(f"Saved object type '{type}' does not support '{operation}'")
