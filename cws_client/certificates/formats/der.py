# cws_client/certificates/formats/der.py
# DER level private key re-encoding (PKCS#8 <-> PKCS#1, encrypted PKCS#8)

import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import PrivateFormat

from ...exceptions import BundleError

logger = logging.getLogger(__name__)

PrivateKeyInput = Union[bytes, rsa.RSAPrivateKey]


def _load_der_key(der_bytes: bytes):
    try:
        return serialization.load_der_private_key(der_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise BundleError(f"Can't parse DER private key: {e}") from e


def encode_pkcs1(pkcs8_der: bytes) -> bytes:
    """
    Re-encode an unencrypted PKCS#8 PrivateKeyInfo as a PKCS#1 RSAPrivateKey

    PKCS#1 is the bare RSA structure that openssl writes as "RSA PRIVATE KEY";
    PKCS#8 wraps the same structure with an algorithm identifier. Input that
    is already PKCS#1 comes back unchanged.

    Raises:
        BundleError: If the input is not an RSA private key structure
    """
    private_key = _load_der_key(pkcs8_der)
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise BundleError(
            f"Expected an RSA private key, got {type(private_key).__name__}"
        )

    pkcs1_der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    )
    logger.debug(f"Converted PKCS#8 ({len(pkcs8_der)} bytes) to PKCS#1 ({len(pkcs1_der)} bytes)")
    return pkcs1_der


def encode_pkcs8(private_key: rsa.RSAPrivateKey) -> bytes:
    """Unencrypted PKCS#8 DER encoding of a private key"""
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def encrypt_private_key(private_key: PrivateKeyInput, password: str) -> bytes:
    """
    Encrypt a private key into a DER EncryptedPrivateKeyInfo structure

    Uses PBES2 (PBKDF2 + AES-256-CBC), which openssl and other common tooling
    decrypt without extra flags.

    Args:
        private_key: Key object, or its unencrypted PKCS#8/PKCS#1 DER bytes
        password: Encryption password

    Returns:
        Encrypted PKCS#8 DER bytes
    """
    if isinstance(private_key, (bytes, bytearray)):
        private_key = _load_der_key(bytes(private_key))

    if not password:
        raise BundleError("Password is required to encrypt the private key")

    try:
        encrypted = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(password.encode("utf-8"))
        )
    except (ValueError, TypeError) as e:
        raise BundleError(f"Private key encryption failed: {e}") from e

    logger.debug(f"Encrypted private key to PKCS#8 ({len(encrypted)} bytes)")
    return encrypted
