"""
Test Privilege Definitions

Verifies the privilege map and its registration with the identity backend
when the license allows RBAC.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from authz_gate.core.actions import Actions
from authz_gate.core.errors import IdentityBackendUnavailable
from authz_gate.core.license import LicenseFeed, LicenseInfo
from authz_gate.core.privileges import (
    PrivilegeRegistrar,
    build_privilege_map,
    register_privileges_with_backend,
    serialize_privileges,
)
from authz_gate.core.service import create_authorization_service
from authz_gate.identity.backend import InMemoryIdentityBackend
from authz_gate.storage.types import SavedObjectTypeRegistry


class TestPrivilegeMap:
    """Tests for build_privilege_map"""

    def setup_method(self):
        self.actions = Actions()
        self.types = SavedObjectTypeRegistry({
            "dashboard": None,
            "config": ["get", "update"],
        })

    def test_all_covers_every_namespace(self):
        privileges = build_privilege_map(self.actions, self.types)
        assert privileges["all"] == ["app:*", "api:*", "saved_object:*", "ui:*"]

    def test_read_only_lists_permitted_read_operations(self):
        privileges = build_privilege_map(self.actions, self.types)
        read = privileges["read"]

        assert "app:*" in read
        assert "saved_object:dashboard/find" in read
        assert "saved_object:config/get" in read
        assert "saved_object:config/find" not in read
        assert not any(action.endswith("/update") for action in read)

    def test_serialize(self):
        payload = serialize_privileges("authz-gate", {"read": [self.actions.app.all]})
        assert payload == {
            "authz-gate": {
                "read": {
                    "application": "authz-gate",
                    "name": "read",
                    "actions": ["app:*"],
                    "metadata": {},
                }
            }
        }


class TestRegistration:
    """Tests for registering privileges with the backend"""

    @pytest.mark.asyncio
    async def test_register_success(self):
        backend = InMemoryIdentityBackend()
        ok = await register_privileges_with_backend(backend, {"all": ["app:*"]}, "my-app")
        assert ok
        assert backend.registered_privileges["my-app"]["all"]["actions"] == ["app:*"]

    @pytest.mark.asyncio
    async def test_register_failure_is_logged(self, caplog):
        backend = AsyncMock()
        backend.put_privileges.side_effect = IdentityBackendUnavailable("rejected", status_code=403)

        ok = await register_privileges_with_backend(backend, {"all": ["app:*"]})

        assert not ok
        assert "rejected" in caplog.text

    @pytest.mark.asyncio
    async def test_registrar_registers_on_rbac_license(self):
        backend = InMemoryIdentityBackend()
        feed = LicenseFeed()
        PrivilegeRegistrar(backend, {"all": ["app:*"]}).watch(feed)

        feed.publish_license(LicenseInfo())
        await asyncio.sleep(0)

        assert backend.registered_privileges is not None

    @pytest.mark.asyncio
    async def test_registrar_ignores_non_rbac_license(self):
        backend = InMemoryIdentityBackend()
        registrar = PrivilegeRegistrar(backend, {"all": ["app:*"]})
        feed = LicenseFeed()
        registrar.watch(feed)

        feed.publish_license(LicenseInfo(security_enabled=False))
        await asyncio.sleep(0)

        assert backend.registered_privileges is None

    def test_registrar_without_loop_defers(self):
        registrar = PrivilegeRegistrar(InMemoryIdentityBackend(), {"all": ["app:*"]})
        feed = LicenseFeed()
        registrar.watch(feed)
        assert feed.publish_license(LicenseInfo()).allow_rbac


class TestAuthorizationService:
    """Tests for create_authorization_service"""

    @pytest.mark.asyncio
    async def test_service_follows_license(self):
        backend = InMemoryIdentityBackend()
        feed = LicenseFeed()
        service = create_authorization_service(backend, SavedObjectTypeRegistry.from_names(["dashboard"]), feed)

        assert not service.mode.use_rbac()
        feed.publish_license(LicenseInfo())
        await asyncio.sleep(0)

        assert service.mode.use_rbac()
        assert "authz-gate" in backend.registered_privileges
        assert not service.spaces.is_present


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
