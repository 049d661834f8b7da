"""
Unit tests for configuration management.

Tests YAML loading, Settings validation, and sensitive data redaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from cas_service.config import (
    REDACTION_MARKER,
    ConfigurationError,
    Settings,
    clear_settings_cache,
    get_safe_config,
    get_settings,
    is_sensitive_key,
    load_yaml_config,
    redact_sensitive_values,
)

if TYPE_CHECKING:
    from pathlib import Path

TEST_KEY_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"

VALID_CONFIG = {
    "service": {"name": "cas-service", "version": "0.1.0"},
    "storage": {
        "root": "./data/node",
        "path_transform": "cas",
        "sanitizer": "lenient",
        "content_type": "application/octet-stream",
    },
    "network": {"listen_address": ":3000"},
    "encryption": {"key": None},
    "server": {"host": "0.0.0.0", "port": 8010},
    "logging": {"level": "INFO", "format": "json"},
}

VALID_CONFIG_YAML = """
service:
  name: cas-service
  version: 0.1.0

storage:
  root: "./data/node"
  path_transform: cas
  sanitizer: lenient
  content_type: "application/octet-stream"

network:
  listen_address: ":3000"

encryption:
  key: null

server:
  host: "0.0.0.0"
  port: 8010

logging:
  level: "INFO"
  format: "json"
"""


def _with(section: str, **values: object) -> dict[str, object]:
    return {**VALID_CONFIG, section: {**VALID_CONFIG[section], **values}}


@pytest.mark.unit
class TestLoadYamlConfig:
    """Tests for YAML configuration loading."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        """Valid YAML file loads successfully."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(VALID_CONFIG_YAML)

        result = load_yaml_config(config_file)

        assert result["service"]["name"] == "cas-service"
        assert result["network"]["listen_address"] == ":3000"
        assert result["encryption"]["key"] is None

    def test_missing_file_raises_error(self, tmp_path: Path) -> None:
        """Missing config file raises ConfigurationError."""
        missing_file = tmp_path / "does_not_exist.yaml"

        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml_config(missing_file)

        assert "not found" in str(exc_info.value)

    def test_empty_file_raises_error(self, tmp_path: Path) -> None:
        """Empty config file raises ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml_config(config_file)

        assert "empty" in str(exc_info.value)

    def test_invalid_yaml_raises_error(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigurationError):
            load_yaml_config(config_file)

    def test_non_dict_yaml_raises_error(self, tmp_path: Path) -> None:
        """YAML that is not a mapping raises ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- item1\n- item2")

        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml_config(config_file)

        assert "mapping" in str(exc_info.value)


@pytest.mark.unit
class TestSettings:
    """Tests for Settings validation."""

    def test_valid_config_creates_settings(self) -> None:
        """Valid configuration creates Settings instance."""
        settings = Settings(**VALID_CONFIG)

        assert settings.service.name == "cas-service"
        assert settings.storage.root == "./data/node"
        assert settings.storage.path_transform == "cas"
        assert settings.storage.sanitizer == "lenient"
        assert settings.server.port == 8010

    def test_missing_required_field_raises_error(self) -> None:
        """Missing required field raises ValidationError."""
        config = {**VALID_CONFIG, "service": {"name": "cas-service"}}

        with pytest.raises(ValidationError) as exc_info:
            Settings(**config)

        assert "version" in str(exc_info.value)

    def test_extra_field_raises_error(self) -> None:
        """Extra field raises ValidationError (extra='forbid')."""
        with pytest.raises(ValidationError) as exc_info:
            Settings(**_with("storage", unknown="value"))

        assert "extra" in str(exc_info.value).lower()

    def test_missing_section_raises_error(self) -> None:
        """Missing entire section raises ValidationError."""
        config = {k: v for k, v in VALID_CONFIG.items() if k != "network"}

        with pytest.raises(ValidationError) as exc_info:
            Settings(**config)

        assert "network" in str(exc_info.value)

    def test_encryption_key_must_be_explicit(self) -> None:
        """Omitting the key is an error; null must be written out."""
        with pytest.raises(ValidationError):
            Settings(**{**VALID_CONFIG, "encryption": {}})

    def test_invalid_port_type_raises_error(self) -> None:
        """Invalid port value raises ValidationError."""
        with pytest.raises(ValidationError):
            Settings(**_with("server", port="not_a_number"))

    @pytest.mark.parametrize("transform", ["identity", "cas"])
    def test_known_path_transforms(self, transform: str) -> None:
        """Both registered transforms are accepted."""
        settings = Settings(**_with("storage", path_transform=transform))

        assert settings.storage.path_transform == transform

    def test_unknown_path_transform_raises_error(self) -> None:
        """Unregistered transform names are rejected."""
        with pytest.raises(ValidationError):
            Settings(**_with("storage", path_transform="md5"))

    def test_unknown_sanitizer_raises_error(self) -> None:
        """Unregistered sanitizer names are rejected."""
        with pytest.raises(ValidationError):
            Settings(**_with("storage", sanitizer="paranoid"))

    def test_empty_root_raises_error(self) -> None:
        """The storage root cannot be empty."""
        with pytest.raises(ValidationError):
            Settings(**_with("storage", root=""))


@pytest.mark.unit
class TestEncryptionConfig:
    """Tests for the encryption key setting."""

    def test_null_key_disables_encryption(self) -> None:
        """A null key decodes to None."""
        settings = Settings(**VALID_CONFIG)

        assert settings.encryption.key_bytes is None

    @pytest.mark.parametrize("hex_length", [32, 48, 64])
    def test_valid_key_lengths(self, hex_length: int) -> None:
        """AES-128/192/256 hex keys decode to raw bytes."""
        settings = Settings(**_with("encryption", key=TEST_KEY_HEX[:hex_length]))

        assert settings.encryption.key_bytes is not None
        assert len(settings.encryption.key_bytes) == hex_length // 2

    @pytest.mark.parametrize("key", ["abcd", "zz" * 16, TEST_KEY_HEX + "00"])
    def test_invalid_key_raises_error(self, key: str) -> None:
        """Keys that are not 16/24/32 bytes of hex are rejected."""
        with pytest.raises(ValidationError):
            Settings(**_with("encryption", key=key))


@pytest.mark.unit
class TestGetSettings:
    """Tests for get_settings function."""

    def test_loads_valid_config(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Should load valid configuration."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(VALID_CONFIG_YAML)
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        clear_settings_cache()
        settings = get_settings()

        assert settings.service.name == "cas-service"
        assert settings.storage.root == "./data/node"
        assert settings.network.listen_address == ":3000"

    def test_cached(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Repeated calls return the same instance."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(VALID_CONFIG_YAML)
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        assert get_settings() is get_settings()

    def test_validation_failure_raises_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Schema violations surface as ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            VALID_CONFIG_YAML.replace("path_transform: cas", "path_transform: md5")
        )
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()

        assert "validation failed" in str(exc_info.value)


@pytest.mark.unit
class TestSensitiveKeyDetection:
    """Tests for sensitive key detection."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("api_key", True),
            ("key", True),
            ("password", True),
            ("secret", True),
            ("token", True),
            ("normal_field", False),
            ("host", False),
            ("port", False),
            ("listen_address", False),
        ],
    )
    def test_is_sensitive_key(self, key: str, expected: bool) -> None:
        """Correctly identifies sensitive keys."""
        assert is_sensitive_key(key) == expected


@pytest.mark.unit
class TestSensitiveDataRedaction:
    """Tests for sensitive value redaction."""

    def test_redact_sensitive_values_flat(self) -> None:
        """Redacts sensitive values in flat dict."""
        data = {
            "host": "localhost",
            "api_key": "secret123",
            "port": 8000,
        }

        result = redact_sensitive_values(data, REDACTION_MARKER)

        assert result["host"] == "localhost"
        assert result["api_key"] == REDACTION_MARKER
        assert result["port"] == 8000

    def test_redact_sensitive_values_nested(self) -> None:
        """Redacts sensitive values inside nested sections."""
        data = {"encryption": {"key": "00ff"}, "server": {"host": "localhost"}}

        result = redact_sensitive_values(data, REDACTION_MARKER)

        assert result["encryption"]["key"] == REDACTION_MARKER
        assert result["server"]["host"] == "localhost"

    def test_safe_config_hides_encryption_key(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """The configured key never appears in the safe config."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(VALID_CONFIG_YAML.replace("key: null", f'key: "{TEST_KEY_HEX}"'))
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        safe = get_safe_config()

        assert safe["encryption"]["key"] == REDACTION_MARKER
        assert TEST_KEY_HEX not in str(safe)
        assert safe["storage"]["root"] == "./data/node"
