"""Certificate loading and transport encodings."""
from __future__ import annotations

import base64
import binascii
import logging
import re
import ssl
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_PEM_BLOCK = re.compile(
    r"-----BEGIN CERTIFICATE-----\s*(?P<body>[A-Za-z0-9+/=\s]+?)\s*-----END CERTIFICATE-----"
)


class CertificateEncodingError(ValueError):
    """Raised when a certificate cannot be decoded or encoded."""


@dataclass(frozen=True)
class Certificate:
    """An X.509 certificate held in its binary (DER) form."""

    der: bytes
    source: Path | None = None

    def encoded(self) -> bytes:
        """Return the DER bytes, refusing an empty certificate."""
        if not self.der:
            raise CertificateEncodingError("Certificate has no encoded form")
        return self.der

    def to_pem(self) -> str:
        return ssl.DER_cert_to_PEM_cert(self.encoded())

    def to_base64(self) -> str:
        """Base64 of the DER form, as consumed by the auto-config script."""
        return base64.b64encode(self.encoded()).decode("ascii")


def load_certificate(path: Path) -> Certificate:
    """Load a PEM or DER certificate file.

    Raises:
        CertificateEncodingError: If the file holds no usable certificate.
        OSError: If the file cannot be read.
    """
    data = path.read_bytes()
    text = data.decode("ascii", errors="ignore")
    match = _PEM_BLOCK.search(text)
    if match:
        try:
            der = base64.b64decode("".join(match.group("body").split()), validate=True)
        except binascii.Error as exc:
            raise CertificateEncodingError(f"Malformed PEM certificate in {path}: {exc}") from exc
    elif "-----BEGIN" in text:
        raise CertificateEncodingError(f"No certificate block found in {path}")
    else:
        der = data
    if not der:
        raise CertificateEncodingError(f"Empty certificate file {path}")
    logger.debug("Loaded certificate from %s (%d bytes DER)", path, len(der))
    return Certificate(der=der, source=path)
