"""
Shared fixtures for authorization tests.
"""

import pytest

from authz_gate.core.actions import Actions
from authz_gate.identity.backend import InMemoryIdentityBackend
from authz_gate.identity.principal import ApplicationGrant, IdentityContext, Role


def make_role(name, *privileges, resources=()):
    """Role with a single application grant"""
    return Role(name=name, applications=(ApplicationGrant(tuple(privileges), tuple(resources)),))


@pytest.fixture
def actions():
    return Actions()


@pytest.fixture
def backend():
    """Identity backend with a few known users"""
    return InMemoryIdentityBackend({
        "superuser": [make_role("superuser", "app:*", "api:*", "saved_object:*", "ui:*")],
        "foo_reader": [make_role("foo_reader", "api:foo/*")],
        "dashboard_editor": [
            make_role("dashboards", "app:dashboards", "saved_object:A/update", "saved_object:A/get"),
        ],
    })


@pytest.fixture
def identity():
    def build(username, space_id=None):
        return IdentityContext(
            username=username,
            headers=(("authorization", f"Bearer {username}-token"),),
            space_id=space_id,
        )
    return build
