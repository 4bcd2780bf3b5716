# cws_client/certificates/formats/pkcs12.py
"""
Cert bundle materialization

Turns the base64 PKCS#12 archive returned by the certificate service into a
CertBundle: PEM private key (PKCS#1, or encrypted PKCS#8 when a key password
is given), PEM leaf certificate and PEM CA chain.
"""

import base64
import binascii
import logging
from typing import Optional, Union

from cryptography.hazmat.primitives.asymmetric import rsa

from ...config import settings
from ...exceptions import BundleError, CallerInputError
from ...models.bundle import CertBundle
from ..extractors.private_key import extract_private_key_metadata
from ..keystore import Keystore
from .der import encode_pkcs1, encode_pkcs8, encrypt_private_key
from .pem import PemLabel, encode_pem, write_certificate, write_certificates

logger = logging.getLogger(__name__)


def check_key_password(key_password: Optional[str]) -> None:
    """Private key passwords follow the openssl floor of 4 characters"""
    if key_password is not None and len(key_password) < settings.MIN_KEY_PASSWORD_LENGTH:
        raise CallerInputError(
            f"Private key password should be at-least {settings.MIN_KEY_PASSWORD_LENGTH} characters."
        )


def decode_archive(archive_data: Union[str, bytes]) -> bytes:
    """Strictly decode the base64 archive text from the wire"""
    if not archive_data:
        raise BundleError("Certificate data is missing from the download response.")
    try:
        return base64.b64decode(archive_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BundleError(f"Certificate data is not valid base64: {e}") from e


def materialize(archive_data: Union[str, bytes],
                archive_password: str,
                key_password: Optional[str] = None) -> CertBundle:
    """
    Create a cert bundle from a downloaded PKCS#12 archive

    Args:
        archive_data: Base64 encoded PKCS#12 archive
        archive_password: Password protecting the archive
        key_password: Optional password to encrypt the private key with.
            None leaves the key unencrypted.

    Returns:
        CertBundle with PEM key, certificate and CA chain

    Raises:
        CallerInputError: If key_password is shorter than 4 characters
        BundleError: If the archive can't be decoded or converted
    """
    check_key_password(key_password)
    logger.info("=== CERT BUNDLE MATERIALIZATION ===")
    logger.debug(f"Key encryption requested: {'YES' if key_password is not None else 'NO'}")

    try:
        p12_bytes = decode_archive(archive_data)
        try:
            keystore = Keystore.from_pkcs12(p12_bytes, archive_password)
        except ValueError as e:
            raise BundleError(str(e)) from e

        aliases = keystore.aliases()
        if not aliases:
            raise BundleError("Certificate archive has no entries.")

        # Get the first alias
        alias = aliases[0]
        private_key = keystore.get_key(alias)
        chain = keystore.get_certificate_chain(alias)
        if private_key is None or not chain:
            raise BundleError(f"Archive entry '{alias}' has no private key.")
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise BundleError(f"Unsupported private key type: {type(private_key).__name__}")

        metadata = extract_private_key_metadata(private_key)
        logger.debug(f"Archive key: RSA {metadata['key_size']} bits, "
                     f"fingerprint {metadata['public_key_fingerprint'][:16]}")

        # Chain is ordered with the leaf certificate first
        cert, ca_certs = chain[0], chain[1:]
        logger.debug(f"Archive alias '{alias}': leaf + {len(ca_certs)} CA certificates")

        if key_password is not None:
            pem_key = encode_pem(
                PemLabel.ENCRYPTED_PRIVATE_KEY,
                encrypt_private_key(private_key, key_password)
            )
        else:
            # PKCS#1 is the openssl default for unencrypted RSA keys
            pem_key = encode_pem(PemLabel.RSA_PRIVATE_KEY, encode_pkcs1(encode_pkcs8(private_key)))

        bundle = CertBundle(
            key=pem_key,
            key_password=key_password,
            cert=write_certificate(cert),
            cacerts=write_certificates(ca_certs),
        )
    except BundleError:
        raise
    except Exception as e:
        logger.error(f"Cert bundle creation failed: {e}")
        raise BundleError("Cert bundle creation failed.") from e

    logger.info(f"Cert bundle created for '{cert.subject.rfc4514_string()}'")
    return bundle
