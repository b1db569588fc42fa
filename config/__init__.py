"""
Security Gateway Configuration Module

Provides centralized configuration management for the authorization layer.
"""

from .schema import (
    SecurityConfig,
    AuthorizationConfig,
    AuditConfig,
    IdentityBackendConfig,
    SpacesConfig,
    ServerConfig,
)
from .loader import load_config, load_config_from_file, create_default_config

__all__ = [
    "SecurityConfig",
    "AuthorizationConfig",
    "AuditConfig",
    "IdentityBackendConfig",
    "SpacesConfig",
    "ServerConfig",
    "load_config",
    "load_config_from_file",
    "create_default_config",
]
