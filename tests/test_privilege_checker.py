"""
Test Privilege Checker

Verifies privilege resolution, wildcard grants, fail-safe denial, result
invariants, and space scoping.
"""

import pytest
from unittest.mock import AsyncMock

from authz_gate.core.checker import (
    PrivilegeChecker,
    PrivilegeCheckResult,
    check_privileges_dynamically_with_request_factory,
)
from authz_gate.core.errors import IdentityBackendUnavailable
from authz_gate.core.optional import Absent, Present, SpacesService
from authz_gate.identity.principal import IdentityContext, RoleSet
from authz_gate.identity.source import PrivilegeSource

from conftest import make_role


class TestPrivilegeCheckResult:
    """Tests for the result invariant"""

    def test_consistent_result(self):
        result = PrivilegeCheckResult(has_all_requested=True, missing=frozenset())
        assert result.has_all_requested

    def test_inconsistent_result_rejected(self):
        """has_all_requested must equal 'missing is empty'"""
        with pytest.raises(ValueError):
            PrivilegeCheckResult(has_all_requested=True, missing=frozenset({"app:x"}))
        with pytest.raises(ValueError):
            PrivilegeCheckResult(has_all_requested=False, missing=frozenset())

    def test_from_privileges(self, actions):
        granted = actions.app.get("a")
        denied = actions.app.get("b")
        result = PrivilegeCheckResult.from_privileges("alice", {granted: True, denied: False})
        assert not result.has_all_requested
        assert result.missing == {denied}
        assert result.username == "alice"


class TestPrivilegeChecker:
    """Tests for PrivilegeChecker.check"""

    @pytest.mark.asyncio
    async def test_wildcard_grant(self, backend, identity, actions):
        """A role granting api:foo/* satisfies api:foo/read"""
        checker = PrivilegeChecker(PrivilegeSource(backend))

        result = await checker.check(identity("foo_reader"), actions.api.get("foo", "read"))

        assert result.has_all_requested
        assert result.missing == frozenset()
        assert result.username == "foo_reader"

    @pytest.mark.asyncio
    async def test_wildcard_does_not_cross_features(self, backend, identity, actions):
        """api:foo/* does not satisfy api:bar/read"""
        checker = PrivilegeChecker(PrivilegeSource(backend))

        result = await checker.check(identity("foo_reader"), [actions.api.get("bar", "read")])

        assert not result.has_all_requested
        assert result.missing == {actions.api.get("bar", "read")}

    @pytest.mark.asyncio
    async def test_partial_grant(self, backend, identity, actions):
        """Only the ungranted actions are missing"""
        checker = PrivilegeChecker(PrivilegeSource(backend))
        read_foo = actions.api.get("foo", "read")
        read_bar = actions.api.get("bar", "read")

        result = await checker.check(identity("foo_reader"), [read_foo, read_bar])

        assert result.missing == {read_bar}
        assert result.privileges == {read_foo: True, read_bar: False}

    @pytest.mark.asyncio
    async def test_union_across_roles(self, identity, actions):
        """Grants from different roles combine"""
        call = AsyncMock(return_value=RoleSet("alice", (
            make_role("a", "app:discover"),
            make_role("b", "app:dashboards"),
        )))
        checker = PrivilegeChecker(PrivilegeSource(call))

        result = await checker.check(identity("alice"), [actions.app.get("discover"), actions.app.get("dashboards")])

        assert result.has_all_requested

    @pytest.mark.asyncio
    async def test_backend_failure_denies_everything(self, identity, actions):
        """If the backend errors, every requested action is missing"""
        call = AsyncMock(side_effect=IdentityBackendUnavailable("down"))
        checker = PrivilegeChecker(PrivilegeSource(call))
        requested = [actions.app.get("discover"), actions.api.get("foo", "read")]

        result = await checker.check(identity("superuser"), requested)

        assert not result.has_all_requested
        assert result.missing == set(requested)

    @pytest.mark.asyncio
    async def test_unexpected_backend_error_denies(self, identity, actions):
        """Any exception from the backend call is treated as unavailability"""
        call = AsyncMock(side_effect=ConnectionResetError("reset"))
        checker = PrivilegeChecker(PrivilegeSource(call))

        result = await checker.check(identity("superuser"), actions.app.get("discover"))

        assert result.missing == {actions.app.get("discover")}

    @pytest.mark.asyncio
    async def test_fail_safe_ignores_prior_grants(self, backend, identity, actions):
        """A successful check does not leak into a later failed one"""
        source = PrivilegeSource(backend)
        checker = PrivilegeChecker(source)
        action = actions.app.get("discover")

        assert (await checker.check(identity("superuser"), action)).has_all_requested

        source._call_with_identity = AsyncMock(side_effect=IdentityBackendUnavailable("down"))
        result = await checker.check(identity("superuser"), action)

        assert not result.has_all_requested

    @pytest.mark.asyncio
    async def test_one_backend_call_per_check(self, backend, identity, actions):
        """No caching: each check queries the backend exactly once"""
        checker = PrivilegeChecker(PrivilegeSource(backend))

        await checker.check(identity("superuser"), [actions.app.get("a"), actions.app.get("b")])
        await checker.check(identity("superuser"), [actions.app.get("a")])

        assert backend.calls == 2

    @pytest.mark.asyncio
    async def test_queries_with_caller_identity(self, actions):
        """The backend receives the caller's own identity context"""
        call = AsyncMock(return_value=RoleSet("bob", ()))
        checker = PrivilegeChecker(PrivilegeSource(call))
        caller = IdentityContext(username="bob", headers=(("authorization", "Basic Ym9i"),))

        await checker.check(caller, actions.app.get("discover"))

        call.assert_awaited_once_with(caller)

    @pytest.mark.asyncio
    async def test_duplicate_actions_collapsed(self, backend, identity, actions):
        checker = PrivilegeChecker(PrivilegeSource(backend))
        action = actions.app.get("discover")

        result = await checker.check(identity("superuser"), [action, action])

        assert list(result.privileges) == [action]

    @pytest.mark.asyncio
    async def test_anonymous_denied(self, backend, actions):
        """Callers unknown to the backend are denied"""
        checker = PrivilegeChecker(PrivilegeSource(backend))

        result = await checker.check(IdentityContext.anonymous(), actions.app.get("discover"))

        assert not result.has_all_requested


class TestDynamicChecks:
    """Tests for check_privileges_dynamically_with_request"""

    @pytest.mark.asyncio
    async def test_without_spaces_checks_globally(self, identity, actions):
        call = AsyncMock(return_value=RoleSet("alice", (
            make_role("space-only", "app:discover", resources=("space:marketing",)),
        )))
        checker = PrivilegeChecker(PrivilegeSource(call))
        factory = check_privileges_dynamically_with_request_factory(checker, Absent("spaces"))

        result = await factory(identity("alice", space_id="marketing"))(actions.app.get("discover"))

        assert not result.has_all_requested

    @pytest.mark.asyncio
    async def test_with_spaces_checks_current_space(self, identity, actions):
        """Grants scoped to a space apply only in that space"""
        call = AsyncMock(return_value=RoleSet("alice", (
            make_role("space-only", "app:discover", resources=("space:marketing",)),
        )))
        checker = PrivilegeChecker(PrivilegeSource(call))
        factory = check_privileges_dynamically_with_request_factory(
            checker, Present("spaces", SpacesService())
        )

        in_space = await factory(identity("alice", space_id="marketing"))(actions.app.get("discover"))
        in_default = await factory(identity("alice"))(actions.app.get("discover"))

        assert in_space.has_all_requested
        assert not in_default.has_all_requested

    @pytest.mark.asyncio
    async def test_global_grant_applies_in_every_space(self, identity, actions):
        call = AsyncMock(return_value=RoleSet("alice", (
            make_role("everywhere", "app:*", resources=("*",)),
        )))
        checker = PrivilegeChecker(PrivilegeSource(call))
        factory = check_privileges_dynamically_with_request_factory(
            checker, Present("spaces", SpacesService())
        )

        result = await factory(identity("alice", space_id="sales"))(actions.app.get("discover"))

        assert result.has_all_requested


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
