"""
Identity Backends

Backends answer "which roles does this caller hold?". Every query is made
with the caller's own credentials.

- HttpIdentityBackend: remote identity service over HTTP (httpx)
- InMemoryIdentityBackend: static username -> roles map (development/tests)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..core.errors import IdentityBackendUnavailable
from .principal import IdentityContext, Role, RoleSet

logger = logging.getLogger(__name__)


class IdentityBackend(ABC):
    """Interface to the external identity store"""

    @abstractmethod
    async def query_privileges(self, identity: IdentityContext) -> RoleSet:
        """
        Resolve the roles held by the caller.

        Raises:
            IdentityBackendUnavailable: if the backend cannot answer
        """

    async def put_privileges(self, definitions: Dict[str, Any]) -> None:
        """Register application privilege definitions with the backend"""
        raise NotImplementedError(f"{type(self).__name__} does not accept privilege definitions")

    async def close(self) -> None:
        """Release backend resources"""


class HttpIdentityBackend(IdentityBackend):
    """
    Identity backend reached over HTTP.

    Endpoints:
    - GET  {base_url}/_security/user/_privileges  (caller credentials)
    - PUT  {base_url}/_security/privilege         (service credentials)
    """

    PRIVILEGES_PATH = "/_security/user/_privileges"
    REGISTER_PATH = "/_security/privilege"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        service_headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Identity service root URL
            timeout: Request timeout in seconds
            service_headers: Credentials used only for privilege registration
            client: Pre-built client (tests inject a MockTransport here)
        """
        self.base_url = base_url.rstrip("/")
        self.service_headers = service_headers or {}
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def query_privileges(self, identity: IdentityContext) -> RoleSet:
        try:
            response = await self.client.get(
                self.PRIVILEGES_PATH,
                headers=identity.header_dict(),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise IdentityBackendUnavailable(
                f"Identity backend returned {e.response.status_code} for {identity.username or 'anonymous'}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise IdentityBackendUnavailable(f"Identity backend request failed: {e}") from e

        try:
            return RoleSet.from_dict(payload)
        except (KeyError, TypeError, AttributeError) as e:
            raise IdentityBackendUnavailable(f"Malformed privileges payload: {e}") from e

    async def put_privileges(self, definitions: Dict[str, Any]) -> None:
        try:
            response = await self.client.put(
                self.REGISTER_PATH,
                json=definitions,
                headers=self.service_headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IdentityBackendUnavailable(
                f"Privilege registration rejected with {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise IdentityBackendUnavailable(f"Privilege registration failed: {e}") from e

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryIdentityBackend(IdentityBackend):
    """
    Static identity backend.

    Callers are identified by IdentityContext.username; unknown or
    anonymous callers are rejected the way a real backend answers 401.
    """

    def __init__(self, roles: Optional[Dict[str, List[Role]]] = None):
        self._roles: Dict[str, List[Role]] = {k: list(v) for k, v in (roles or {}).items()}
        self.registered_privileges: Optional[Dict[str, Any]] = None
        self.calls = 0

    def grant(self, username: str, role: Role) -> None:
        self._roles.setdefault(username, []).append(role)

    async def query_privileges(self, identity: IdentityContext) -> RoleSet:
        self.calls += 1
        if identity.username is None or identity.username not in self._roles:
            raise IdentityBackendUnavailable(
                f"Unknown user: {identity.username or 'anonymous'}",
                status_code=401,
            )
        return RoleSet(username=identity.username, roles=tuple(self._roles[identity.username]))

    async def put_privileges(self, definitions: Dict[str, Any]) -> None:
        self.registered_privileges = definitions
        logger.debug(f"Stored {len(definitions)} privilege application(s) in memory")
