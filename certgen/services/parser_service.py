"""Certificate parsing service."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa

from certgen.exceptions import PreconditionError

logger = logging.getLogger("certgen")


class CertificateParser:
    """Reads back the fields certgen puts into certificates."""

    @staticmethod
    def parse_certificate(cert_path: Path) -> Dict[str, Any]:
        """
        Parse a PEM certificate file.

        Args:
            cert_path: Path to certificate file

        Returns:
            Dictionary with parsed certificate data

        Raises:
            PreconditionError: If certificate file is missing or not a certificate
        """
        if not cert_path.exists():
            raise PreconditionError(f"describe_cert: certificate not found: {cert_path}")

        with open(cert_path, "rb") as f:
            cert_pem = f.read()

        try:
            cert = x509.load_pem_x509_certificate(cert_pem)
        except ValueError as e:
            logger.error(f"Error parsing certificate {cert_path}: {e}")
            raise PreconditionError(f"describe_cert: {cert_path} does not hold a PEM certificate: {e}")

        return CertificateParser.parse(cert)

    @staticmethod
    def parse(cert: x509.Certificate) -> Dict[str, Any]:
        """
        Extract the fields of a loaded certificate.

        Args:
            cert: Certificate object

        Returns:
            Dictionary with parsed certificate data
        """
        basic_constraints = CertificateParser._extension(cert, x509.BasicConstraints)
        key_usage = CertificateParser._extension(cert, x509.KeyUsage)
        ski = CertificateParser._extension(cert, x509.SubjectKeyIdentifier)
        aki = CertificateParser._extension(cert, x509.AuthorityKeyIdentifier)

        return {
            "version": cert.version.value + 1,
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "serial_number": format(cert.serial_number, "02X"),
            "not_before": cert.not_valid_before_utc,
            "not_after": cert.not_valid_after_utc,
            "public_key_algorithm": CertificateParser._key_algorithm(cert.public_key()),
            "fingerprint_sha256": cert.fingerprint(hashes.SHA256()).hex(":").upper(),
            "is_ca": basic_constraints.value.ca if basic_constraints else None,
            "path_length": basic_constraints.value.path_length if basic_constraints else None,
            "basic_constraints_critical": basic_constraints.critical if basic_constraints else None,
            "key_usage": CertificateParser._key_usage(key_usage.value) if key_usage else [],
            "key_usage_critical": key_usage.critical if key_usage else None,
            "extended_key_usage": CertificateParser._extended_key_usage(cert),
            "subject_key_identifier": ski.value.digest.hex() if ski else None,
            "authority_key_identifier": aki.value.key_identifier.hex() if aki and aki.value.key_identifier else None,
            "sans": CertificateParser._sans(cert),
            "extensions": [ext.oid.dotted_string for ext in cert.extensions],
        }

    @staticmethod
    def _extension(cert: x509.Certificate, extension_class) -> Optional[x509.Extension]:
        try:
            return cert.extensions.get_extension_for_class(extension_class)
        except x509.ExtensionNotFound:
            return None

    @staticmethod
    def _key_algorithm(public_key) -> str:
        if isinstance(public_key, rsa.RSAPublicKey):
            return "RSA"
        if isinstance(public_key, dsa.DSAPublicKey):
            return "DSA"
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            return "ECDSA"
        if isinstance(public_key, ed25519.Ed25519PublicKey):
            return "ED25519"
        if isinstance(public_key, ed448.Ed448PublicKey):
            return "ED448"
        return "Unknown"

    @staticmethod
    def _key_usage(ku: x509.KeyUsage) -> List[str]:
        """
        Key Usage flags under their openssl names.

        Args:
            ku: Key Usage extension value

        Returns:
            List of Key Usage strings (e.g., ["digitalSignature", "keyEncipherment"])
        """
        usage_list = []
        if ku.digital_signature:
            usage_list.append("digitalSignature")
        if ku.content_commitment:  # Also known as nonRepudiation
            usage_list.append("nonRepudiation")
        if ku.key_encipherment:
            usage_list.append("keyEncipherment")
        if ku.data_encipherment:
            usage_list.append("dataEncipherment")
        if ku.key_agreement:
            usage_list.append("keyAgreement")
            # encipher_only and decipher_only are only defined with key_agreement
            if ku.encipher_only:
                usage_list.append("encipherOnly")
            if ku.decipher_only:
                usage_list.append("decipherOnly")
        if ku.key_cert_sign:
            usage_list.append("keyCertSign")
        if ku.crl_sign:
            usage_list.append("cRLSign")
        return usage_list

    @staticmethod
    def _extended_key_usage(cert: x509.Certificate) -> List[str]:
        eku_oid_map = {
            x509.ExtendedKeyUsageOID.SERVER_AUTH: "serverAuth",
            x509.ExtendedKeyUsageOID.CLIENT_AUTH: "clientAuth",
            x509.ExtendedKeyUsageOID.CODE_SIGNING: "codeSigning",
            x509.ExtendedKeyUsageOID.EMAIL_PROTECTION: "emailProtection",
            x509.ExtendedKeyUsageOID.TIME_STAMPING: "timeStamping",
            x509.ExtendedKeyUsageOID.OCSP_SIGNING: "OCSPSigning",
        }

        eku = CertificateParser._extension(cert, x509.ExtendedKeyUsage)
        if eku is None:
            return []
        # unknown OIDs as dotted string
        return [eku_oid_map.get(oid, oid.dotted_string) for oid in eku.value]

    @staticmethod
    def _sans(cert: x509.Certificate) -> List[str]:
        san = CertificateParser._extension(cert, x509.SubjectAlternativeName)
        if san is None:
            return []

        names = []
        for name in san.value:
            if isinstance(name, x509.DNSName):
                names.append(f"DNS:{name.value}")
            elif isinstance(name, x509.IPAddress):
                names.append(f"IP:{name.value}")
            elif isinstance(name, x509.RFC822Name):
                names.append(f"email:{name.value}")
            elif isinstance(name, x509.UniformResourceIdentifier):
                names.append(f"URI:{name.value}")
            else:
                names.append(str(name.value))
        return names
