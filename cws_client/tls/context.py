# cws_client/tls/context.py
"""
TLS identity bootstrap

Loads the client's PKCS#12 keystore and builds the ssl.SSLContext used for
mutual TLS with the certificate service. The same keystore is the trust
source: the client trusts exactly the certificates it authenticates with.
The presented client identity is chosen once, when the SSLContext is built;
ssl has no per-handshake key selection callback.
"""

import importlib.resources
import logging
import os
import ssl
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..certificates.formats.pem import write_certificates
from ..certificates.keystore import Keystore
from ..config import settings
from ..exceptions import ConfigurationError
from .key_manager import AliasKeyManager, KeystoreKeyManager, X509KeyManager

logger = logging.getLogger(__name__)

CLIENT_KEY_TYPES = ("RSA", "EC")

TLS_VERSIONS = {
    "TLSv1.2": ssl.TLSVersion.TLSv1_2,
    "TLSv1.3": ssl.TLSVersion.TLSv1_3,
}


@dataclass(frozen=True)
class TlsIdentityContext:
    """Trust and key material for mutual TLS, immutable once built"""
    ssl_context: ssl.SSLContext
    key_manager: X509KeyManager
    trust_certificates: Tuple[x509.Certificate, ...]
    client_alias: str
    key_alias: Optional[str] = None


def _read_resource(locator: str) -> bytes:
    """Read "<package>/<path>" from an installed python package"""
    package, _, resource = locator.partition("/")
    if not package or not resource:
        raise FileNotFoundError(f"Invalid resource locator: {locator}")
    try:
        return importlib.resources.files(package).joinpath(resource).read_bytes()
    except ModuleNotFoundError as e:
        raise FileNotFoundError(f"No such package: {package}") from e


def read_keystore_bytes(keystore_locator: str) -> bytes:
    """
    Read keystore bytes from a file path or a "resource:" locator

    Raises:
        ConfigurationError: If the keystore can't be found or read
    """
    try:
        if keystore_locator.startswith(settings.RESOURCE_PREFIX):
            return _read_resource(keystore_locator[len(settings.RESOURCE_PREFIX):])
        with open(keystore_locator, "rb") as ins:
            return ins.read()
    except (FileNotFoundError, IsADirectoryError) as e:
        raise ConfigurationError(f"Can't find the keystore: {keystore_locator}") from e
    except OSError as e:
        raise ConfigurationError(f"Can't load the keystore: {keystore_locator}") from e


def load_keystore(keystore_locator: str, keystore_password: str) -> Keystore:
    """Load the PKCS#12 keystore behind keystore_locator"""
    logger.info(f"Loading the keystore: {keystore_locator}")
    data = read_keystore_bytes(keystore_locator)
    try:
        return Keystore.from_pkcs12(data, keystore_password)
    except ValueError as e:
        raise ConfigurationError(f"Can't load the keystore: {keystore_locator}") from e


def init_key_manager(keystore: Keystore, key_alias: Optional[str] = None) -> X509KeyManager:
    """Key manager over the keystore, narrowed to key_alias if given"""
    key_manager: X509KeyManager = KeystoreKeyManager(keystore)
    if key_alias is not None:
        if not keystore.is_key_entry(key_alias):
            raise ConfigurationError(
                f"Keystore has no private key entry for alias '{key_alias}'. "
                f"Available aliases: {keystore.aliases()}"
            )
        logger.info(f"Using Alias KeyManager for {key_alias}")
        key_manager = AliasKeyManager(key_manager, key_alias)
    return key_manager


@contextmanager
def _staged_pem_files(chain_pem: str, key_pem: bytes) -> Iterator[Tuple[str, str]]:
    """Write chain and key to private temp files, removed on exit"""
    paths: List[str] = []
    try:
        for suffix, content in ((".crt", chain_pem.encode("ascii")), (".key", key_pem)):
            fd, path = tempfile.mkstemp(prefix="cws_", suffix=suffix)
            paths.append(path)
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        yield paths[0], paths[1]
    finally:
        for path in paths:
            try:
                os.unlink(path)
            except OSError as e:
                logger.warning(f"Failed to remove temp file {path}: {e}")


def create_ssl_context(key_manager: X509KeyManager,
                       trust_certificates: List[x509.Certificate],
                       protocol: str = settings.TLS_PROTOCOL) -> Tuple[ssl.SSLContext, str]:
    """
    Build a client SSLContext pinned to a single TLS version

    Returns:
        Tuple of (ssl_context, alias presented for client authentication)
    """
    if protocol not in TLS_VERSIONS:
        raise ConfigurationError(f"Unsupported TLS protocol: {protocol}")

    alias = key_manager.choose_client_alias(CLIENT_KEY_TYPES)
    if alias is None:
        raise ConfigurationError("Keystore has no private key entry for client authentication")

    private_key = key_manager.get_private_key(alias)
    chain = key_manager.get_certificate_chain(alias)
    if private_key is None or not chain:
        raise ConfigurationError(f"No private key or certificate chain for alias '{alias}'")

    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.minimum_version = TLS_VERSIONS[protocol]
    ctx.maximum_version = TLS_VERSIONS[protocol]
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED

    try:
        ctx.load_verify_locations(cadata=write_certificates(trust_certificates))

        key_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )
        with _staged_pem_files(write_certificates(chain), key_pem) as (certfile, keyfile):
            ctx.load_cert_chain(certfile=certfile, keyfile=keyfile)
    except (ssl.SSLError, ValueError) as e:
        raise ConfigurationError(f"Can't initialize TLS context for alias '{alias}': {e}") from e

    logger.info(f"TLS context ready ({protocol}), client alias '{alias}', "
                f"{len(trust_certificates)} trusted certificate(s)")
    return ctx, alias


def bootstrap(keystore_locator: str,
              keystore_password: str,
              key_alias: Optional[str] = None) -> TlsIdentityContext:
    """
    Build the TLS identity used to authenticate to the certificate service

    Args:
        keystore_locator: PKCS#12 file path, or "resource:<package>/<path>"
        keystore_password: Keystore password
        key_alias: Key entry to present; the first private key entry if None

    Raises:
        ConfigurationError: If the keystore can't be found, decrypted or used
    """
    keystore = load_keystore(keystore_locator, keystore_password)
    key_manager = init_key_manager(keystore, key_alias)
    trust_certificates = keystore.certificates()
    ssl_context, client_alias = create_ssl_context(key_manager, trust_certificates)

    return TlsIdentityContext(
        ssl_context=ssl_context,
        key_manager=key_manager,
        trust_certificates=tuple(trust_certificates),
        client_alias=client_alias,
        key_alias=key_alias,
    )
