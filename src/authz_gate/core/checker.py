"""
Privilege Checker

Answers "does this caller hold every one of these actions?" against live
data from the identity backend. One backend call per check, no caching
across checks. When the backend cannot answer, the result is deny-all.

The checker knows nothing about legacy vs RBAC mode; callers decide whether
to consult it.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from ..identity.principal import IdentityContext, RoleSet
from ..identity.source import PrivilegeSource
from .actions import Action, to_action
from .errors import IdentityBackendUnavailable
from .optional import Absent, OptionalCapability, SpacesService

logger = logging.getLogger(__name__)

ActionsArg = Union[str, Iterable[str]]


@dataclass(frozen=True)
class PrivilegeCheckRequest:
    """A caller and the actions it needs, in the order they were asked for"""
    identity: IdentityContext
    actions: Tuple[Action, ...]
    resource: Optional[str] = None


@dataclass(frozen=True)
class PrivilegeCheckResult:
    """
    Outcome of a privilege check.

    has_all_requested is True exactly when missing is empty; construction
    fails otherwise.
    """
    has_all_requested: bool
    missing: FrozenSet[Action]
    username: Optional[str] = None
    privileges: Dict[Action, bool] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if self.has_all_requested != (not self.missing):
            raise ValueError(
                f"Inconsistent check result: has_all_requested={self.has_all_requested}, "
                f"missing={sorted(self.missing)}"
            )

    @classmethod
    def from_privileges(cls, username: Optional[str], privileges: Dict[Action, bool]) -> "PrivilegeCheckResult":
        missing = frozenset(action for action, granted in privileges.items() if not granted)
        return cls(
            has_all_requested=not missing,
            missing=missing,
            username=username,
            privileges=dict(privileges),
        )

    @classmethod
    def deny_all(cls, username: Optional[str], actions: Iterable[Action]) -> "PrivilegeCheckResult":
        return cls.from_privileges(username, {action: False for action in actions})


def normalize_actions(actions: ActionsArg) -> Tuple[Action, ...]:
    """Accept one action or many; drop duplicates, keep first-seen order"""
    if isinstance(actions, str):
        actions = [actions]
    seen: Dict[Action, None] = {}
    for action in actions:
        seen.setdefault(to_action(action), None)
    return tuple(seen)


def evaluate(role_set: RoleSet, actions: Iterable[Action], resource: Optional[str] = None) -> Dict[Action, bool]:
    """Union the grants of every role over the requested actions"""
    return {
        action: any(role.grants(action, resource) for role in role_set)
        for action in actions
    }


class PrivilegeChecker:
    """Resolves a caller's effective privileges for a set of actions"""

    def __init__(self, source: PrivilegeSource):
        self.source = source

    async def check(
        self,
        identity: IdentityContext,
        actions: ActionsArg,
        resource: Optional[str] = None,
    ) -> PrivilegeCheckResult:
        request = PrivilegeCheckRequest(identity, normalize_actions(actions), resource)
        if not request.actions:
            return PrivilegeCheckResult.from_privileges(identity.username, {})

        try:
            role_set = await self.source.fetch_privileges(identity)
        except IdentityBackendUnavailable as e:
            logger.warning(
                f"Denying {list(request.actions)} for {identity.username or 'anonymous'}: "
                f"identity backend unavailable ({e})"
            )
            return PrivilegeCheckResult.deny_all(identity.username, request.actions)

        result = PrivilegeCheckResult.from_privileges(
            role_set.username or identity.username,
            evaluate(role_set, request.actions, resource),
        )
        if result.has_all_requested:
            logger.debug(f"Privilege check passed for {result.username}: {list(request.actions)}")
        else:
            logger.debug(f"Privilege check failed for {result.username}: missing {sorted(result.missing)}")
        return result


CheckPrivileges = Callable[[ActionsArg], Awaitable[PrivilegeCheckResult]]


def check_privileges_dynamically_with_request_factory(
    checker: PrivilegeChecker,
    spaces: OptionalCapability[SpacesService] = Absent("spaces"),
) -> Callable[[IdentityContext], CheckPrivileges]:
    """
    Build ``check_privileges_dynamically_with_request``.

    With spaces present, checks are scoped to the caller's current space;
    otherwise they are global.
    """

    def check_privileges_dynamically_with_request(identity: IdentityContext) -> CheckPrivileges:
        resource = None
        if spaces.is_present:
            space_id = identity.space_id or spaces.handle.default_space_id
            resource = spaces.handle.resource_for(space_id)

        async def check_privileges(actions: ActionsArg) -> PrivilegeCheckResult:
            return await checker.check(identity, actions, resource)

        return check_privileges

    return check_privileges_dynamically_with_request
