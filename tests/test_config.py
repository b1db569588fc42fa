"""
Test Configuration Loading

Verifies YAML loading, environment interpolation, defaults, and the
deprecated legacy fallback setting.
"""

import logging

import pytest

from config import SecurityConfig, create_default_config, load_config, load_config_from_file
from config.loader import interpolate_env_vars


class TestInterpolation:
    """Tests for ${VAR} interpolation"""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("IDENTITY_URL", "http://es:9200")
        assert interpolate_env_vars({"url": "${IDENTITY_URL}"}) == {"url": "http://es:9200"}

    def test_default(self, monkeypatch):
        monkeypatch.delenv("IDENTITY_URL", raising=False)
        assert interpolate_env_vars(["${IDENTITY_URL:-http://localhost:9200}"]) == ["http://localhost:9200"]

    def test_missing_required(self, monkeypatch):
        monkeypatch.delenv("IDENTITY_SERVICE_AUTH", raising=False)
        with pytest.raises(KeyError):
            interpolate_env_vars("${IDENTITY_SERVICE_AUTH}")


class TestSecurityConfig:
    """Tests for SecurityConfig"""

    def test_defaults(self):
        config = SecurityConfig()
        assert config.enabled
        assert not config.audit.enabled
        assert config.identity_backend.type == "http"
        assert not config.spaces.enabled
        assert config.deprecation_warnings() == []

    def test_from_dict(self):
        config = SecurityConfig.from_dict({
            "security": {"enabled": False},
            "audit": {"enabled": True, "sink": "file", "path": "/tmp/audit.jsonl"},
            "identity_backend": {"type": "memory", "users": {"alice": [{"name": "r"}]}},
            "spaces": {"enabled": True},
            "saved_object_types": {"dashboard": None, "config": ["get"]},
        })
        assert not config.enabled
        assert config.audit.sink == "file"
        assert config.identity_backend.users["alice"] == [{"name": "r"}]
        assert config.spaces.enabled
        assert config.saved_object_types == {"dashboard": None, "config": ["get"]}

    def test_round_trip(self):
        config = SecurityConfig.from_dict({"server": {"port": 9000}})
        assert SecurityConfig.from_dict(config.to_dict()) == config

    def test_legacy_fallback_is_deprecated(self):
        config = SecurityConfig.from_dict({"authorization": {"legacy_fallback": {"enabled": True}}})
        assert len(config.deprecation_warnings()) == 1


class TestLoader:
    """Tests for load_config and create_default_config"""

    def test_load_from_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GATEWAY_PORT", "9100")
        path = tmp_path / "security.yaml"
        path.write_text("server:\n  port: ${GATEWAY_PORT}\nsaved_object_types:\n  dashboard: [get]\n")

        config = load_config_from_file(path)

        assert config.server.port == 9100
        assert config.saved_object_types == {"dashboard": ["get"]}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_from_file(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "security.yaml"
        path.write_text("")
        assert load_config_from_file(path) == SecurityConfig()

    def test_search_working_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "security.yaml").write_text("spaces:\n  enabled: true\n")

        assert load_config(working_dir=tmp_path).spaces.enabled

    def test_defaults_when_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == SecurityConfig()

    def test_deprecation_warning_logged(self, tmp_path, caplog):
        path = tmp_path / "security.yaml"
        path.write_text("authorization:\n  legacy_fallback:\n    enabled: false\n")

        with caplog.at_level(logging.WARNING):
            load_config_from_file(path)

        assert "legacy_fallback" in caplog.text

    def test_default_config_loads(self, tmp_path, monkeypatch):
        monkeypatch.delenv("IDENTITY_URL", raising=False)
        path = create_default_config(tmp_path / "security.yaml")

        config = load_config_from_file(path)

        assert config.identity_backend.url == "http://localhost:9200"
        assert "dashboard" in config.saved_object_types


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
