"""
Security utilities: signing material loading and pass signatures.

Wallet readers only install a pass whose manifest is signed by the pass type
certificate issued to the team. Two concerns are handled here:

1. CREDENTIAL LOADING
   - The certificate, private key and optional WWDR intermediate arrive as
     base64-encoded PEM documents through the environment (see gera.config)
   - The private key may be encrypted; PASS_PASSPHRASE unlocks it

2. MANIFEST SIGNING (PKCS#7)
   - manifest.json (written by wallet-py3k) maps every file in the archive
     to its SHA-1 digest
   - The signature is a detached, DER-encoded PKCS#7 structure over the
     manifest bytes, carrying the signer certificate and, when configured,
     the WWDR intermediate so readers can build the trust chain

Enterprise note:
  In production the private key would live in a secrets manager or HSM.
  PassSigner only needs the loaded key objects, so that swap stays local
  to from_settings().
"""

import base64

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7

from gera.config import Settings


def decode_pem(encoded: str) -> bytes:
    """Decode a base64 environment value back into its PEM bytes."""
    return base64.b64decode(encoded)


class PassSigner:
    """Signs pass manifests with the pass type certificate."""

    def __init__(
        self,
        certificate: x509.Certificate,
        private_key,
        wwdr_certificate: x509.Certificate | None = None,
    ):
        self.certificate = certificate
        self.private_key = private_key
        self.wwdr_certificate = wwdr_certificate

    @classmethod
    def from_pem(
        cls,
        certificate_pem: bytes,
        private_key_pem: bytes,
        passphrase: str = "",
        wwdr_pem: bytes | None = None,
    ) -> "PassSigner":
        """
        Load signing credentials from PEM documents.

        Raises:
            ValueError: If a document cannot be parsed or the passphrase is wrong.
        """
        certificate = x509.load_pem_x509_certificate(certificate_pem)
        private_key = serialization.load_pem_private_key(
            private_key_pem,
            password=passphrase.encode("utf-8") if passphrase else None,
        )
        wwdr_certificate = x509.load_pem_x509_certificate(wwdr_pem) if wwdr_pem else None
        return cls(certificate, private_key, wwdr_certificate)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PassSigner":
        """Load credentials from the base64 values in the application settings."""
        return cls.from_pem(
            decode_pem(settings.PASS_CERTIFICATE),
            decode_pem(settings.PASS_PRIVATE_KEY),
            settings.PASS_PASSPHRASE,
            decode_pem(settings.WWDR_CERTIFICATE) if settings.WWDR_CERTIFICATE else None,
        )

    def sign(self, manifest: bytes) -> bytes:
        """
        Produce the detached DER PKCS#7 signature for a manifest.

        Args:
            manifest: The exact manifest.json bytes stored in the archive.

        Returns:
            Signature bytes for the archive's "signature" member.
        """
        builder = (
            pkcs7.PKCS7SignatureBuilder()
            .set_data(manifest)
            .add_signer(self.certificate, self.private_key, hashes.SHA256())
        )
        if self.wwdr_certificate is not None:
            builder = builder.add_certificate(self.wwdr_certificate)
        return builder.sign(
            serialization.Encoding.DER,
            [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
        )
