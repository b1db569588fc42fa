"""
Identity Context and Role Model

- IdentityContext: the caller's identity as attached to a request
- ApplicationGrant / Role / RoleSet: privileges resolved live from the
  identity backend

An IdentityContext carries no privilege data. Its credential headers are
forwarded unchanged to the identity backend so the backend authorizes the
lookup as the caller, never as an internal user.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..core.actions import WILDCARD, pattern_matches

# Headers forwarded to the identity backend
FORWARDED_HEADERS = ("authorization", "cookie", "x-forwarded-user")


@dataclass(frozen=True)
class IdentityContext:
    """
    Opaque identity handle for one request.

    username is informational (audit correlation); the backend is
    the authority on who the caller is.
    """
    username: Optional[str] = None
    headers: Tuple[Tuple[str, str], ...] = ()
    space_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_anonymous(self) -> bool:
        return self.username is None and not self.headers

    def header_dict(self) -> Dict[str, str]:
        return dict(self.headers)

    @classmethod
    def from_headers(
        cls,
        headers,
        username: Optional[str] = None,
        space_id: Optional[str] = None,
    ) -> "IdentityContext":
        """Build a context from request headers, keeping only credentials"""
        forwarded = tuple(
            (name.lower(), value)
            for name, value in headers.items()
            if name.lower() in FORWARDED_HEADERS
        )
        if username is None:
            username = dict(forwarded).get("x-forwarded-user")
        return cls(username=username, headers=forwarded, space_id=space_id)

    @classmethod
    def anonymous(cls) -> "IdentityContext":
        return cls()


@dataclass(frozen=True)
class ApplicationGrant:
    """
    Action patterns granted by a role.

    resources limits where the grant applies (``*`` or ``space:<id>``);
    an empty list means everywhere.
    """
    privileges: Tuple[str, ...]
    resources: Tuple[str, ...] = ()

    def applies_to(self, resource: Optional[str]) -> bool:
        if not self.resources:
            return True
        for pattern in self.resources:
            if pattern == WILDCARD:
                return True
            if resource is None:
                continue
            if pattern == resource or (pattern.endswith(WILDCARD) and resource.startswith(pattern[:-1])):
                return True
        return False

    def grants(self, action: str, resource: Optional[str] = None) -> bool:
        if not self.applies_to(resource):
            return False
        return any(pattern_matches(pattern, action) for pattern in self.privileges)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationGrant":
        return cls(
            privileges=tuple(data.get("privileges", [])),
            resources=tuple(data.get("resources", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"privileges": list(self.privileges), "resources": list(self.resources)}


@dataclass(frozen=True)
class Role:
    """A named role and its application grants"""
    name: str
    applications: Tuple[ApplicationGrant, ...] = ()

    def grants(self, action: str, resource: Optional[str] = None) -> bool:
        return any(app.grants(action, resource) for app in self.applications)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        return cls(
            name=data["name"],
            applications=tuple(ApplicationGrant.from_dict(a) for a in data.get("applications", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "applications": [a.to_dict() for a in self.applications]}


@dataclass(frozen=True)
class RoleSet:
    """Roles held by a principal, as reported by the identity backend"""
    username: Optional[str]
    roles: Tuple[Role, ...] = ()

    def __iter__(self) -> Iterator[Role]:
        return iter(self.roles)

    def __len__(self) -> int:
        return len(self.roles)

    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoleSet":
        """
        Parse a backend payload.

        Raises:
            KeyError, TypeError: if the payload is malformed
        """
        roles = data["roles"]
        if not isinstance(roles, list):
            raise TypeError(f"'roles' must be a list, got {type(roles).__name__}")
        return cls(
            username=data.get("username"),
            roles=tuple(Role.from_dict(role) for role in roles),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"username": self.username, "roles": [r.to_dict() for r in self.roles]}
