"""
Identity

Caller identity, roles, and the backends that resolve them.
"""

from .principal import IdentityContext, ApplicationGrant, Role, RoleSet
from .backend import IdentityBackend, HttpIdentityBackend, InMemoryIdentityBackend
from .source import PrivilegeSource

__all__ = [
    "IdentityContext",
    "ApplicationGrant",
    "Role",
    "RoleSet",
    "IdentityBackend",
    "HttpIdentityBackend",
    "InMemoryIdentityBackend",
    "PrivilegeSource",
]
