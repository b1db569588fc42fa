"""
Saved Objects

Storage-object clients and the privilege-enforcing wrapper around them.
"""

from .types import SavedObjectTypeRegistry
from .models import (
    SavedObject,
    SavedObjectReference,
    BulkCreateObject,
    BulkGetObject,
    BulkResponse,
    FindOptions,
    FindResponse,
)
from .client import (
    BaseSavedObjectsClient,
    SavedObjectsClient,
    SavedObjectsRepository,
    PassThroughSavedObjectsClient,
)
from .secure_client import SecureSavedObjectsClientWrapper, create_scoped_saved_objects_client

__all__ = [
    "SavedObjectTypeRegistry",
    "SavedObject",
    "SavedObjectReference",
    "BulkCreateObject",
    "BulkGetObject",
    "BulkResponse",
    "FindOptions",
    "FindResponse",
    "BaseSavedObjectsClient",
    "SavedObjectsClient",
    "SavedObjectsRepository",
    "PassThroughSavedObjectsClient",
    "SecureSavedObjectsClientWrapper",
    "create_scoped_saved_objects_client",
]
