"""Tests for the CertGen entry points."""

import logging

import pytest

from certgen import CertGen, CertgenError
from certgen.exceptions import ConfigError, OptionParseError, PreconditionError
from certgen.models.certificate import AliasState
from certgen.models.key import KeyGenRequest
from certgen.toolkit import parse_options


@pytest.mark.unit
class TestParseOptions:
    """Test conversion of keyword options to requests."""

    def test_valid_options(self):
        request = parse_options("key_gen", KeyGenRequest, alias="ca", type="ecdsa")
        assert request.alias == "ca"

    def test_unknown_option(self):
        with pytest.raises(OptionParseError) as exc_info:
            parse_options("key_gen", KeyGenRequest, alias="ca", colour="blue")
        assert str(exc_info.value).startswith("key_gen: colour")

    def test_wrong_type(self):
        with pytest.raises(OptionParseError) as exc_info:
            parse_options("key_gen", KeyGenRequest, alias="ca", conservative="maybe")
        assert "conservative" in str(exc_info.value)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_options("key_gen", KeyGenRequest, alias="")


@pytest.mark.unit
class TestCertGen:
    """Test alias level operations."""

    def test_failures_are_logged(self, recording_certgen, caplog):
        with caplog.at_level(logging.ERROR, logger="certgen"):
            with pytest.raises(PreconditionError):
                recording_certgen.self_sign("missing")

        assert "self_sign: private key 'missing' has not yet been generated" in caplog.text

    def test_alias_state(self, recording_certgen, fake_key):
        assert recording_certgen.alias_state("ca") == AliasState.NO_KEY

        fake_key("ca")
        assert recording_certgen.alias_state("ca") == AliasState.KEY_PRESENT

        recording_certgen.self_sign("ca")
        assert recording_certgen.alias_state("ca") == AliasState.FINAL

    def test_describe_unreadable_certificate(self, recording_certgen, fake_key):
        fake_key("ca")
        recording_certgen.self_sign("ca")

        with pytest.raises(PreconditionError) as exc_info:
            recording_certgen.describe_cert("ca")
        assert str(exc_info.value).startswith("describe_cert:")

    def test_key_copy(self, recording_certgen, fake_key, store):
        fake_key("ca")

        path = recording_certgen.key_copy("ca", "copy")

        assert path == store.key_path("copy")
        assert path.read_text() == store.key_path("ca").read_text()
        assert recording_certgen.alias_state("copy") == AliasState.KEY_PRESENT

        with pytest.raises(ConfigError):
            recording_certgen.key_copy("ca", "copy")

    def test_rm_alias(self, recording_certgen, fake_key, store):
        fake_key("ca")
        recording_certgen.self_sign("ca")

        recording_certgen.rm_alias("ca")

        assert not store.path("ca").exists()
        with pytest.raises(PreconditionError):
            recording_certgen.rm_alias("ca")

    @pytest.mark.parametrize("alias", ["../outside", "/absolute", "a/../../b"])
    def test_alias_outside_store(self, recording_certgen, alias):
        with pytest.raises(ConfigError):
            recording_certgen.key_gen(alias)

    def test_config_from_file(self, tmp_path, recording_openssl):
        settings = tmp_path / "certgen.yaml"
        settings.write_text(f"paths:\n  store: {tmp_path / 'store'}\nfirst_serial: '10'\n")

        certgen = CertGen(config_path=settings, openssl_service=recording_openssl)

        assert certgen.config.first_serial == "10"
        assert certgen.store.store_dir == tmp_path / "store"


@pytest.mark.integration
@pytest.mark.requires_openssl
class TestWorkflow:
    """Test a complete CA workflow with openssl."""

    def test_ca_server_client(self, certgen, store):
        certgen.key_gen("ca", type="ECDSA", size="secp384r1")
        certgen.self_sign("ca", common_name="Test Root", dn=["O = certgen"])
        certgen.key_gen("server", type="RSA", size=2048)
        certgen.cert_sign("server", ca_alias="ca", subject_alt_name=["DNS.1 = localhost", "IP.1 = 127.0.0.1"])
        certgen.key_copy("server", "server2")
        certgen.cert_sign("server2", ca_alias="ca", common_name="second")

        root = certgen.describe_cert("ca")
        server = certgen.describe_cert("server")
        second = certgen.describe_cert("server2")

        assert root["subject"] == "CN=Test Root,O=certgen"
        assert server["issuer"] == root["subject"]
        assert server["sans"] == ["DNS:localhost", "IP:127.0.0.1"]
        assert second["subject"] == "CN=second"
        assert [server["serial_number"], second["serial_number"]] == ["02", "03"]
        assert certgen.key("server").read_bytes() == certgen.key("server2").read_bytes()

    def test_backend_error_carries_stderr(self, certgen, fake_key):
        fake_key("broken")

        with pytest.raises(CertgenError) as exc_info:
            certgen.self_sign("broken")

        assert exc_info.value.stderr
        assert exc_info.value.command[1] == "req"
