# cws_client/certificates/extractors/private_key.py
# Private key metadata helpers used for key selection and logging

import hashlib
import logging
from typing import Any, Dict

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa

logger = logging.getLogger(__name__)


def key_algorithm(private_key) -> str:
    """Key algorithm name as used in TLS key type queries ("RSA", "EC", ...)"""
    if isinstance(private_key, rsa.RSAPrivateKey):
        return "RSA"
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return "EC"
    if isinstance(private_key, dsa.DSAPrivateKey):
        return "DSA"
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return "Ed25519"
    if isinstance(private_key, ed448.Ed448PrivateKey):
        return "Ed448"
    return type(private_key).__name__.replace("PrivateKey", "")


def extract_private_key_metadata(private_key) -> Dict[str, Any]:
    """Extract non-secret private key metadata for logging"""
    public_bytes = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )

    metadata = {
        'algorithm': key_algorithm(private_key),
        'key_size': getattr(private_key, 'key_size', None),
        'public_key_fingerprint': hashlib.sha256(public_bytes).hexdigest().upper()
    }

    if isinstance(private_key, rsa.RSAPrivateKey):
        metadata['rsa_exponent'] = str(private_key.public_key().public_numbers().e)
    elif isinstance(private_key, ec.EllipticCurvePrivateKey):
        metadata['ec_curve'] = private_key.curve.name

    logger.debug(f"Private key metadata: {metadata}")
    return metadata
