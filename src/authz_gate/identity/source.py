"""
Privilege Source Adapter

Fetches the caller's RoleSet through an injected call-with-identity function.
Failures of any kind surface as IdentityBackendUnavailable; the privilege
checker owns the fail-safe policy.
"""

import logging
from typing import Awaitable, Callable, Union

from ..core.errors import IdentityBackendUnavailable
from .backend import IdentityBackend
from .principal import IdentityContext, RoleSet

logger = logging.getLogger(__name__)

CallWithIdentity = Callable[[IdentityContext], Awaitable[RoleSet]]


class PrivilegeSource:
    """Adapter between the privilege checker and the identity backend"""

    def __init__(self, call_with_identity: Union[CallWithIdentity, IdentityBackend]):
        if isinstance(call_with_identity, IdentityBackend):
            call_with_identity = call_with_identity.query_privileges
        self._call_with_identity = call_with_identity

    async def fetch_privileges(self, identity: IdentityContext) -> RoleSet:
        """
        Resolve the roles granted to the caller, querying as the caller.

        Raises:
            IdentityBackendUnavailable: backend error or unexpected response
        """
        try:
            role_set = await self._call_with_identity(identity)
        except IdentityBackendUnavailable:
            raise
        except Exception as e:
            raise IdentityBackendUnavailable(f"{type(e).__name__}: {e}") from e

        if not isinstance(role_set, RoleSet):
            raise IdentityBackendUnavailable(
                f"Identity backend returned {type(role_set).__name__}, expected RoleSet"
            )

        logger.debug(f"Resolved roles for {role_set.username}: {role_set.role_names()}")
        return role_set
