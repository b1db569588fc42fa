"""
Saved Object Models

Pydantic models exchanged with saved objects clients.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field


class SavedObjectReference(BaseModel):
    name: str
    type: str
    id: str


class SavedObject(BaseModel):
    """A stored object of a registered type"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    references: List[SavedObjectReference] = Field(default_factory=list)
    version: int = 1
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BulkCreateObject(BaseModel):
    type: str
    id: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    references: List[SavedObjectReference] = Field(default_factory=list)


class BulkGetObject(BaseModel):
    type: str
    id: str
    fields: Optional[List[str]] = None


class SavedObjectErrorItem(BaseModel):
    """Per-object failure inside a bulk response"""
    id: Optional[str] = None
    type: str
    error: dict[str, Any]


class BulkResponse(BaseModel):
    """Result of a bulk call; failed entries are SavedObjectErrorItem"""
    saved_objects: List[Union[SavedObject, SavedObjectErrorItem]] = Field(default_factory=list)


class FindOptions(BaseModel):
    type: Optional[Union[str, List[str]]] = None
    search: Optional[str] = None
    search_fields: Optional[List[str]] = None
    page: int = 1
    per_page: int = 20

    @property
    def types(self) -> List[str]:
        if self.type is None:
            return []
        if isinstance(self.type, str):
            return [self.type]
        return list(self.type)


class FindResponse(BaseModel):
    page: int
    per_page: int
    total: int
    saved_objects: List[SavedObject] = Field(default_factory=list)
