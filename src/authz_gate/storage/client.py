"""
Saved Objects Client

- BaseSavedObjectsClient: the interface every client (plain, pass-through,
  secured) implements
- SavedObjectsRepository: in-memory store keyed by (type, id)
- SavedObjectsClient: validates types against the registry and talks to
  the repository
- PassThroughSavedObjectsClient: delegates every call unchanged
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.errors import SavedObjectConflictError, SavedObjectNotFoundError, SavedObjectsError
from .models import (
    BulkCreateObject,
    BulkGetObject,
    BulkResponse,
    FindOptions,
    FindResponse,
    SavedObject,
    SavedObjectErrorItem,
    SavedObjectReference,
)
from .types import BULK_CREATE, BULK_GET, CREATE, DELETE, FIND, GET, UPDATE, SavedObjectTypeRegistry


class BaseSavedObjectsClient(ABC):
    """Operations offered by every saved objects client"""

    @abstractmethod
    async def create(
        self,
        type: str,
        attributes: Dict[str, Any],
        id: Optional[str] = None,
        overwrite: bool = False,
        references: Optional[List[SavedObjectReference]] = None,
    ) -> SavedObject:
        pass

    @abstractmethod
    async def bulk_create(self, objects: List[BulkCreateObject], overwrite: bool = False) -> BulkResponse:
        pass

    @abstractmethod
    async def delete(self, type: str, id: str) -> None:
        pass

    @abstractmethod
    async def find(self, options: Optional[FindOptions] = None) -> FindResponse:
        pass

    @abstractmethod
    async def bulk_get(self, objects: List[BulkGetObject]) -> BulkResponse:
        pass

    @abstractmethod
    async def get(self, type: str, id: str) -> SavedObject:
        pass

    @abstractmethod
    async def update(
        self,
        type: str,
        id: str,
        attributes: Dict[str, Any],
        references: Optional[List[SavedObjectReference]] = None,
    ) -> SavedObject:
        pass


class SavedObjectsRepository:
    """In-memory saved objects store"""

    def __init__(self):
        self._store: Dict[Tuple[str, str], SavedObject] = {}
        self._lock = asyncio.Lock()

    async def get(self, type: str, id: str) -> Optional[SavedObject]:
        return self._store.get((type, id))

    async def put(self, obj: SavedObject, overwrite: bool = False) -> SavedObject:
        async with self._lock:
            key = (obj.type, obj.id)
            existing = self._store.get(key)
            if existing and not overwrite:
                raise SavedObjectConflictError(obj.type, obj.id)
            if existing:
                obj = obj.model_copy(update={"version": existing.version + 1})
            self._store[key] = obj
            return obj

    async def update(self, type: str, id: str, **updates) -> Optional[SavedObject]:
        async with self._lock:
            existing = self._store.get((type, id))
            if existing is None:
                return None
            updated = existing.model_copy(update={
                **updates,
                "version": existing.version + 1,
                "updated_at": datetime.now(timezone.utc),
            })
            self._store[(type, id)] = updated
            return updated

    async def delete(self, type: str, id: str) -> bool:
        async with self._lock:
            return self._store.pop((type, id), None) is not None

    async def list(self, types: List[str]) -> List[SavedObject]:
        return [obj for (obj_type, _), obj in sorted(self._store.items()) if obj_type in types]


class SavedObjectsClient(BaseSavedObjectsClient):
    """Saved objects client over a repository"""

    def __init__(self, repository: SavedObjectsRepository, types: SavedObjectTypeRegistry):
        self.repository = repository
        self.types = types

    async def create(self, type, attributes, id=None, overwrite=False, references=None):
        self.types.require(type, CREATE)
        obj = SavedObject(
            type=type,
            attributes=dict(attributes),
            references=references or [],
            **({"id": id} if id else {}),
        )
        return await self.repository.put(obj, overwrite=overwrite)

    async def bulk_create(self, objects, overwrite=False):
        for item in objects:
            self.types.require(item.type, BULK_CREATE)

        results: List[Any] = []
        for item in objects:
            obj = SavedObject(
                type=item.type,
                attributes=dict(item.attributes),
                references=item.references,
                **({"id": item.id} if item.id else {}),
            )
            try:
                results.append(await self.repository.put(obj, overwrite=overwrite))
            except SavedObjectsError as e:
                results.append(SavedObjectErrorItem(id=obj.id, type=obj.type, error=e.to_dict()))
        return BulkResponse(saved_objects=results)

    async def delete(self, type, id):
        self.types.require(type, DELETE)
        if not await self.repository.delete(type, id):
            raise SavedObjectNotFoundError(type, id)

    async def find(self, options=None):
        options = options or FindOptions()
        types = options.types or [t for t in self.types if FIND in self.types[t]]
        for type_name in types:
            self.types.require(type_name, FIND)

        matches = await self.repository.list(types)
        if options.search:
            needle = options.search.lower()
            matches = [obj for obj in matches if _matches_search(obj, needle, options.search_fields)]

        start = (options.page - 1) * options.per_page
        return FindResponse(
            page=options.page,
            per_page=options.per_page,
            total=len(matches),
            saved_objects=matches[start:start + options.per_page],
        )

    async def bulk_get(self, objects):
        for item in objects:
            self.types.require(item.type, BULK_GET)

        results: List[Any] = []
        for item in objects:
            obj = await self.repository.get(item.type, item.id)
            if obj is None:
                error = SavedObjectNotFoundError(item.type, item.id)
                results.append(SavedObjectErrorItem(id=item.id, type=item.type, error=error.to_dict()))
            elif item.fields:
                results.append(obj.model_copy(update={
                    "attributes": {k: v for k, v in obj.attributes.items() if k in item.fields}
                }))
            else:
                results.append(obj)
        return BulkResponse(saved_objects=results)

    async def get(self, type, id):
        self.types.require(type, GET)
        obj = await self.repository.get(type, id)
        if obj is None:
            raise SavedObjectNotFoundError(type, id)
        return obj

    async def update(self, type, id, attributes, references=None):
        self.types.require(type, UPDATE)
        existing = await self.repository.get(type, id)
        if existing is None:
            raise SavedObjectNotFoundError(type, id)

        updates: Dict[str, Any] = {"attributes": {**existing.attributes, **attributes}}
        if references is not None:
            updates["references"] = references
        updated = await self.repository.update(type, id, **updates)
        if updated is None:
            raise SavedObjectNotFoundError(type, id)
        return updated


def _matches_search(obj: SavedObject, needle: str, fields: Optional[List[str]]) -> bool:
    values = obj.attributes.values() if not fields else [obj.attributes.get(f) for f in fields]
    return any(isinstance(v, str) and needle in v.lower() for v in values)


class PassThroughSavedObjectsClient(BaseSavedObjectsClient):
    """Legacy-mode client: no checks, no audit, plain delegation"""

    def __init__(self, base_client: BaseSavedObjectsClient):
        self.base_client = base_client

    async def create(self, type, attributes, id=None, overwrite=False, references=None):
        return await self.base_client.create(type, attributes, id=id, overwrite=overwrite, references=references)

    async def bulk_create(self, objects, overwrite=False):
        return await self.base_client.bulk_create(objects, overwrite=overwrite)

    async def delete(self, type, id):
        return await self.base_client.delete(type, id)

    async def find(self, options=None):
        return await self.base_client.find(options)

    async def bulk_get(self, objects):
        return await self.base_client.bulk_get(objects)

    async def get(self, type, id):
        return await self.base_client.get(type, id)

    async def update(self, type, id, attributes, references=None):
        return await self.base_client.update(type, id, attributes, references=references)
