"""Tests for loading the certgen configuration."""

import pytest

from certgen.dependencies import apply_environment_overrides, get_config
from certgen.exceptions import ConfigError
from certgen.models.config import CertgenConfig


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Run without a settings file in the working directory or environment."""
    monkeypatch.delenv("CERTGEN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.unit
class TestGetConfig:
    """Test settings file and environment handling."""

    def test_defaults(self, clean_environment):
        config = get_config(environ={})
        assert config.first_serial == "01"
        assert config.files.key == "key.pem"
        assert config.files.ca_config == "ca.cnf"
        assert config.paths.store == "."
        assert config.command_timeout is None
        assert config.dsa_max_attempts == 100

    def test_yaml_file(self, clean_environment):
        settings = clean_environment / "settings.yaml"
        settings.write_text("paths:\n  store: /tmp/certs\nfiles:\n  cert: server.crt\nfirst_serial: 0a\n")

        config = get_config(settings, environ={})

        assert config.paths.store == "/tmp/certs"
        assert config.files.cert == "server.crt"
        assert config.first_serial == "0A"

    def test_default_file_in_working_directory(self, clean_environment):
        (clean_environment / "certgen.yaml").write_text("crl_days: 7\n")
        assert get_config(environ={}).crl_days == 7

    def test_config_env_variable(self, clean_environment, monkeypatch):
        settings = clean_environment / "other.yaml"
        settings.write_text("dsa_max_attempts: 5\n")
        monkeypatch.setenv("CERTGEN_CONFIG", str(settings))

        assert get_config(environ={}).dsa_max_attempts == 5

    def test_missing_file(self, clean_environment):
        with pytest.raises(ConfigError):
            get_config(clean_environment / "missing.yaml", environ={})

    def test_environment_overrides_file(self, clean_environment):
        settings = clean_environment / "settings.yaml"
        settings.write_text("files:\n  key: from-file.pem\n")

        config = get_config(settings, environ={"x509PKEY": "from-env.pem", "x509FIRSTSERIAL": "10"})

        assert config.files.key == "from-env.pem"
        assert config.first_serial == "10"

    def test_format_override_strips_plus(self):
        data = apply_environment_overrides({}, {"x509FORMAT": "+%Y%m%d%H%M%SZ"})
        assert data["date_format"] == "%Y%m%d%H%M%SZ"

    def test_invalid_serial(self, clean_environment):
        with pytest.raises(ConfigError):
            get_config(environ={"x509FIRSTSERIAL": "xyz"})

    def test_unknown_setting(self, clean_environment):
        settings = clean_environment / "settings.yaml"
        settings.write_text("no_such_setting: 1\n")
        with pytest.raises(ConfigError):
            get_config(settings, environ={})

    def test_not_a_mapping(self, clean_environment):
        settings = clean_environment / "settings.yaml"
        settings.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            get_config(settings, environ={})


@pytest.mark.unit
def test_first_serial_uppercased():
    assert CertgenConfig(first_serial="ff").first_serial == "FF"


@pytest.mark.unit
@pytest.mark.parametrize("value, expected", [("1", "01"), ("a", "0A"), ("123", "0123"), ("0a", "0A"), ("1A2B", "1A2B")])
def test_first_serial_whole_bytes(value, expected):
    assert CertgenConfig(first_serial=value).first_serial == expected
