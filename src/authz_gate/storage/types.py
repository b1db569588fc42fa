"""
Saved Object Types

The fixed set of storage-object types and the operations each permits.
Supplied at startup; the security layer reads it and never mutates it.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional

from ..core.errors import UnknownSavedObjectTypeError

CREATE = "create"
BULK_CREATE = "bulk_create"
GET = "get"
BULK_GET = "bulk_get"
FIND = "find"
UPDATE = "update"
DELETE = "delete"

ALL_OPERATIONS: FrozenSet[str] = frozenset({CREATE, BULK_CREATE, GET, BULK_GET, FIND, UPDATE, DELETE})
READ_OPERATIONS: FrozenSet[str] = frozenset({GET, BULK_GET, FIND})


class SavedObjectTypeRegistry(Mapping[str, FrozenSet[str]]):
    """Read-only mapping of type -> permitted operations"""

    def __init__(self, types: Optional[Mapping[str, Optional[Iterable[str]]]] = None):
        registered: Dict[str, FrozenSet[str]] = {}
        for type_name, operations in (types or {}).items():
            ops = frozenset(operations) if operations is not None else ALL_OPERATIONS
            unknown = ops - ALL_OPERATIONS
            if unknown:
                raise ValueError(f"Unknown operation(s) for type '{type_name}': {sorted(unknown)}")
            registered[type_name] = ops
        self._types = MappingProxyType(registered)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "SavedObjectTypeRegistry":
        """Register each type with every operation"""
        return cls({name: None for name in names})

    def __getitem__(self, type_name: str) -> FrozenSet[str]:
        return self._types[type_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def permits(self, type_name: str, operation: str) -> bool:
        return operation in self._types.get(type_name, frozenset())

    def require(self, type_name: str, operation: Optional[str] = None) -> FrozenSet[str]:
        if type_name not in self._types:
            raise UnknownSavedObjectTypeError(type_name)
        if operation is not None and operation not in self._types[type_name]:
            raise UnknownSavedObjectTypeError(type_name, operation)
        return self._types[type_name]
