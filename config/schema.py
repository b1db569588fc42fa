"""
Security Gateway Configuration Schema

Defines the configuration structure for the authorization layer.
All configuration can be specified via security.yaml or environment variables.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LegacyFallbackConfig:
    """Deprecated: accepted for compatibility, never consulted"""
    enabled: Optional[bool] = None


@dataclass
class AuthorizationConfig:
    """Configuration for privilege enforcement"""
    application: str = "authz-gate"
    legacy_fallback: LegacyFallbackConfig = field(default_factory=LegacyFallbackConfig)


@dataclass
class AuditConfig:
    """Configuration for the authorization audit trail"""
    enabled: bool = False
    sink: str = "log"  # "log", "file", "http" or "memory"
    path: str = "./data/audit.jsonl"
    endpoint: Optional[str] = None


@dataclass
class IdentityBackendConfig:
    """Configuration for the identity backend"""
    type: str = "http"  # "http" or "memory"
    url: str = "http://localhost:9200"
    timeout: float = 10.0
    # Credentials used only to register privilege definitions
    service_headers: Dict[str, str] = field(default_factory=dict)
    # Static users for the "memory" backend: {username: [role, ...]}
    users: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


@dataclass
class SpacesConfig:
    """Configuration for the optional spaces companion"""
    enabled: bool = False
    default_space_id: str = "default"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server"""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class SecurityConfig:
    """
    Central configuration for the authorization layer.

    This configuration can be loaded from:
    - security.yaml (primary)
    - Environment variables (interpolated into the YAML)
    - Programmatic defaults

    Example security.yaml:
    ```yaml
    security:
      enabled: true

    authorization:
      application: "authz-gate"

    audit:
      enabled: true
      sink: file
      path: ./data/audit.jsonl

    identity_backend:
      type: http
      url: "${IDENTITY_URL:-http://localhost:9200}"

    spaces:
      enabled: false

    saved_object_types:
      dashboard: [create, bulk_create, get, bulk_get, find, update, delete]
      config: [get, update]
    ```
    """
    enabled: bool = True

    authorization: AuthorizationConfig = field(default_factory=AuthorizationConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    identity_backend: IdentityBackendConfig = field(default_factory=IdentityBackendConfig)
    spaces: SpacesConfig = field(default_factory=SpacesConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # type -> permitted operations (None = all operations)
    saved_object_types: Dict[str, Optional[List[str]]] = field(default_factory=dict)

    # Additional metadata
    metadata: Dict[str, Any] = field(default_factory=dict)

    def deprecation_warnings(self) -> List[str]:
        """Messages for settings that are still read but no longer honored"""
        warnings = []
        if self.authorization.legacy_fallback.enabled is not None:
            warnings.append(
                "Config key 'authorization.legacy_fallback.enabled' is deprecated and has no effect"
            )
        return warnings

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityConfig":
        """Create SecurityConfig from dictionary (e.g., parsed YAML)"""
        security_data = data.get("security", {})

        authz_data = data.get("authorization", {})
        fallback_data = authz_data.get("legacy_fallback", {})
        authorization = AuthorizationConfig(
            application=authz_data.get("application", "authz-gate"),
            legacy_fallback=LegacyFallbackConfig(enabled=fallback_data.get("enabled")),
        )

        audit_data = data.get("audit", {})
        audit = AuditConfig(
            enabled=audit_data.get("enabled", False),
            sink=audit_data.get("sink", "log"),
            path=audit_data.get("path", "./data/audit.jsonl"),
            endpoint=audit_data.get("endpoint"),
        )

        backend_data = data.get("identity_backend", {})
        identity_backend = IdentityBackendConfig(
            type=backend_data.get("type", "http"),
            url=backend_data.get("url", "http://localhost:9200"),
            timeout=float(backend_data.get("timeout", 10.0)),
            service_headers=backend_data.get("service_headers", {}),
            users=backend_data.get("users", {}),
        )

        spaces_data = data.get("spaces", {})
        spaces = SpacesConfig(
            enabled=spaces_data.get("enabled", False),
            default_space_id=spaces_data.get("default_space_id", "default"),
        )

        server_data = data.get("server", {})
        server = ServerConfig(
            host=server_data.get("host", "0.0.0.0"),
            port=int(server_data.get("port", 8000)),
        )

        return cls(
            enabled=security_data.get("enabled", True),
            authorization=authorization,
            audit=audit,
            identity_backend=identity_backend,
            spaces=spaces,
            server=server,
            saved_object_types=data.get("saved_object_types", {}) or {},
            metadata=data.get("metadata", {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (for serialization)"""
        return {
            "security": {"enabled": self.enabled},
            "authorization": {
                "application": self.authorization.application,
                "legacy_fallback": {"enabled": self.authorization.legacy_fallback.enabled},
            },
            "audit": {
                "enabled": self.audit.enabled,
                "sink": self.audit.sink,
                "path": self.audit.path,
                "endpoint": self.audit.endpoint,
            },
            "identity_backend": {
                "type": self.identity_backend.type,
                "url": self.identity_backend.url,
                "timeout": self.identity_backend.timeout,
                "service_headers": self.identity_backend.service_headers,
                "users": self.identity_backend.users,
            },
            "spaces": {
                "enabled": self.spaces.enabled,
                "default_space_id": self.spaces.default_space_id,
            },
            "server": {"host": self.server.host, "port": self.server.port},
            "saved_object_types": self.saved_object_types,
            "metadata": self.metadata,
        }
