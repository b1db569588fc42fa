"""
Optional Companion Capabilities

A companion feature (e.g. spaces) is resolved once at startup into either
Present(handle) or Absent, and consulted by name afterwards.
"""

import logging
import re
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Present(Generic[T]):
    name: str
    handle: T

    @property
    def is_present(self) -> bool:
        return True


@dataclass(frozen=True)
class Absent:
    name: str

    @property
    def is_present(self) -> bool:
        return False


OptionalCapability = Union[Present[T], Absent]


def create_optional_capability(name: str, enabled: bool, handle: Optional[T]) -> "OptionalCapability[T]":
    """Resolve a companion capability from its enabled flag and handle"""
    if enabled and handle is not None:
        logger.info(f"Optional capability '{name}' is present")
        return Present(name, handle)
    if enabled:
        logger.warning(f"Optional capability '{name}' is enabled but not available")
    return Absent(name)


DEFAULT_SPACE_ID = "default"
SPACE_URL_PATTERN = re.compile(r"^/s/([a-z0-9_\-]+)(/.*)?$")


class SpacesService:
    """Derives the current space from a request path"""

    def __init__(self, default_space_id: str = DEFAULT_SPACE_ID):
        self.default_space_id = default_space_id

    def get_space_id(self, path: str) -> str:
        match = SPACE_URL_PATTERN.match(path or "")
        if match:
            return match.group(1)
        return self.default_space_id

    def strip_space_prefix(self, path: str) -> str:
        """Remove a ``/s/<spaceId>`` prefix, leaving the route path"""
        match = SPACE_URL_PATTERN.match(path or "")
        if match:
            return match.group(2) or "/"
        return path

    @staticmethod
    def resource_for(space_id: str) -> str:
        return f"space:{space_id}"
