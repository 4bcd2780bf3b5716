# cws_client/certificates/formats/pem.py
# PEM envelope encoding for keys and certificates

import base64
import binascii
import logging
import re
from enum import Enum
from typing import Iterable, List, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ...exceptions import BundleError

logger = logging.getLogger(__name__)

PEM_LINE_LENGTH = 64

_PEM_BLOCK_RE = re.compile(
    r"-----BEGIN (?P<label>[A-Z0-9 ]+)-----\s*(?P<body>.*?)\s*-----END (?P=label)-----",
    re.DOTALL,
)


class PemLabel(str, Enum):
    """PEM armor labels for the artifacts in a cert bundle"""
    RSA_PRIVATE_KEY = "RSA PRIVATE KEY"
    ENCRYPTED_PRIVATE_KEY = "ENCRYPTED PRIVATE KEY"
    PRIVATE_KEY = "PRIVATE KEY"
    CERTIFICATE = "CERTIFICATE"


def encode_pem(label: PemLabel, der_bytes: bytes) -> str:
    """
    Wrap a DER payload in a PEM envelope

    Args:
        label: PEM label of the payload kind
        der_bytes: Binary DER payload

    Returns:
        PEM text with 64 character base64 lines and a trailing newline
    """
    label = PemLabel(label)
    encoded = base64.b64encode(der_bytes).decode("ascii")
    lines = [encoded[i:i + PEM_LINE_LENGTH] for i in range(0, len(encoded), PEM_LINE_LENGTH)]

    pem = f"-----BEGIN {label.value}-----\n"
    pem += "".join(line + "\n" for line in lines)
    pem += f"-----END {label.value}-----\n"

    logger.debug(f"PEM encoded {label.value} ({len(der_bytes)} bytes DER)")
    return pem


def decode_pem(pem_text: str) -> List[Tuple[str, bytes]]:
    """Read every PEM block of the given text as (label, der) pairs, in order"""
    blocks = []
    for match in _PEM_BLOCK_RE.finditer(pem_text):
        body = "".join(match.group("body").split())
        try:
            der = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise BundleError(f"Invalid base64 in PEM block {match.group('label')}") from e
        blocks.append((match.group("label"), der))
    return blocks


def write_certificate(cert: x509.Certificate) -> str:
    """PEM encode a single X.509 certificate"""
    return encode_pem(PemLabel.CERTIFICATE, cert.public_bytes(serialization.Encoding.DER))


def write_certificates(certs: Iterable[x509.Certificate]) -> str:
    """PEM encode certificates as sequential blocks, order preserved"""
    return "".join(write_certificate(cert) for cert in certs)
