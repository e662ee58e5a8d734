"""Tests for Parser service."""

import ipaddress
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from certgen.exceptions import PreconditionError
from certgen.services.parser_service import CertificateParser


def build_cert(key, extensions, version_1=False):
    """Build a certificate with cryptography, without openssl."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(10)
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
    )
    for extension, critical in extensions:
        builder = builder.add_extension(extension, critical=critical)
    algorithm = None if isinstance(key, ed25519.Ed25519PrivateKey) else hashes.SHA256()
    return builder.sign(key, algorithm)


@pytest.mark.unit
class TestCertificateParser:
    """Test certificate parser functionality."""

    def test_parse_fields(self):
        """Test parsing a certificate with the usual extensions."""
        key = ec.generate_private_key(ec.SECP256R1())
        ski = x509.SubjectKeyIdentifier.from_public_key(key.public_key())
        cert = build_cert(
            key,
            [
                (x509.BasicConstraints(ca=False, path_length=None), True),
                (
                    x509.KeyUsage(
                        digital_signature=True,
                        content_commitment=False,
                        key_encipherment=True,
                        data_encipherment=False,
                        key_agreement=True,
                        key_cert_sign=False,
                        crl_sign=False,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    True,
                ),
                (x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH, x509.ObjectIdentifier("1.2.3.4")]), False),
                (ski, False),
                (x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski), False),
                (
                    x509.SubjectAlternativeName(
                        [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
                    ),
                    False,
                ),
            ],
        )

        cert_info = CertificateParser.parse(cert)

        assert cert_info["version"] == 3
        assert cert_info["subject"] == "CN=localhost"
        assert cert_info["issuer"] == "CN=localhost"
        assert cert_info["serial_number"] == "0A"
        assert cert_info["public_key_algorithm"] == "ECDSA"
        assert cert_info["is_ca"] is False
        assert cert_info["path_length"] is None
        assert cert_info["basic_constraints_critical"] is True
        assert cert_info["key_usage"] == ["digitalSignature", "keyEncipherment", "keyAgreement"]
        assert cert_info["key_usage_critical"] is True
        assert cert_info["extended_key_usage"] == ["serverAuth", "1.2.3.4"]
        assert cert_info["subject_key_identifier"] == ski.digest.hex()
        assert cert_info["authority_key_identifier"] == cert_info["subject_key_identifier"]
        assert cert_info["sans"] == ["DNS:localhost", "IP:127.0.0.1"]
        assert len(cert_info["extensions"]) == 6
        assert cert_info["not_before"] < cert_info["not_after"]
        assert len(cert_info["fingerprint_sha256"].split(":")) == 32

    def test_parse_without_extensions(self):
        cert_info = CertificateParser.parse(build_cert(ed25519.Ed25519PrivateKey.generate(), []))

        assert cert_info["public_key_algorithm"] == "ED25519"
        assert cert_info["is_ca"] is None
        assert cert_info["key_usage"] == []
        assert cert_info["key_usage_critical"] is None
        assert cert_info["extended_key_usage"] == []
        assert cert_info["subject_key_identifier"] is None
        assert cert_info["authority_key_identifier"] is None
        assert cert_info["sans"] == []
        assert cert_info["extensions"] == []

    def test_parse_certificate_file(self, tmp_path):
        key = ec.generate_private_key(ec.SECP384R1())
        cert = build_cert(key, [(x509.BasicConstraints(ca=True, path_length=1), True)])
        cert_path = tmp_path / "cert.pem"
        cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))

        cert_info = CertificateParser.parse_certificate(cert_path)

        assert cert_info["is_ca"] is True
        assert cert_info["path_length"] == 1

    def test_parse_nonexistent_certificate_fails(self):
        """Test parsing nonexistent certificate fails."""
        nonexistent_path = Path("/nonexistent/cert.pem")

        with pytest.raises(PreconditionError):
            CertificateParser.parse_certificate(nonexistent_path)

    def test_parse_invalid_certificate_fails(self, tmp_path):
        cert_path = tmp_path / "cert.pem"
        cert_path.write_text("-----BEGIN CERTIFICATE-----\nbm90IGEgY2VydA==\n-----END CERTIFICATE-----\n")

        with pytest.raises(PreconditionError) as exc_info:
            CertificateParser.parse_certificate(cert_path)
        assert "does not hold a PEM certificate" in str(exc_info.value)


@pytest.mark.integration
@pytest.mark.requires_openssl
class TestDescribeCert:
    """Test reading back certificates made by certgen."""

    def test_describe_ca(self, certgen, created_ca):
        cert_info = certgen.describe_cert(created_ca)

        assert cert_info["subject"] == "O=Example CA"
        assert cert_info["serial_number"] == "01"
        assert cert_info["public_key_algorithm"] == "RSA"
        assert cert_info["key_usage"] == ["keyCertSign", "cRLSign"]
        assert cert_info["authority_key_identifier"] == cert_info["subject_key_identifier"]

    def test_describe_server(self, certgen, created_ca, created_server):
        ca_info = certgen.describe_cert(created_ca)
        cert_info = certgen.describe_cert(created_server)

        assert cert_info["issuer"] == ca_info["subject"]
        assert cert_info["authority_key_identifier"] == ca_info["subject_key_identifier"]
        assert cert_info["extended_key_usage"] == ["serverAuth"]
        assert cert_info["sans"] == ["DNS:localhost"]

    def test_describe_missing_alias(self, certgen):
        with pytest.raises(PreconditionError):
            certgen.describe_cert("missing")
