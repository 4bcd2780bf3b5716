# cws_client/certificates/keystore.py
"""
In-memory keystore

Holds private key entries (key + certificate chain) and trusted certificate
entries under string aliases. Keystores are loaded from password protected
PKCS#12 data or assembled in memory. Key entries always enumerate before
trusted certificate entries, each group in insertion order.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import pkcs12

logger = logging.getLogger(__name__)

# Alias used for a PKCS#12 key entry that carries no friendly name
DEFAULT_KEY_ALIAS = "1"


@dataclass(frozen=True)
class KeyEntry:
    """Private key and its chain, leaf certificate first"""
    alias: str
    private_key: object
    certificate_chain: Tuple[x509.Certificate, ...]

    @property
    def certificate(self) -> x509.Certificate:
        return self.certificate_chain[0]


@dataclass(frozen=True)
class TrustedCertificateEntry:
    """Certificate without a private key"""
    alias: str
    certificate: x509.Certificate


def _issuer_chain(leaf: x509.Certificate, candidates: Sequence[x509.Certificate]) -> List[x509.Certificate]:
    """
    Follow issuer -> subject links from the leaf through the candidates

    Stops at a self-signed certificate or when no candidate issued the last
    certificate. Candidates that are not linked stay out of the chain.
    """
    chain = [leaf]
    remaining = list(candidates)
    current = leaf
    while current.issuer != current.subject:
        issuer = next((c for c in remaining if c.subject == current.issuer), None)
        if issuer is None:
            break
        remaining.remove(issuer)
        chain.append(issuer)
        current = issuer
    return chain


def _friendly_name(name: Optional[bytes]) -> Optional[str]:
    if not name:
        return None
    return name.decode("utf-8", errors="replace")


class Keystore:
    """Ordered alias -> entry store"""

    def __init__(self):
        self._key_entries: Dict[str, KeyEntry] = {}
        self._certificate_entries: Dict[str, TrustedCertificateEntry] = {}

    def __len__(self) -> int:
        return len(self._key_entries) + len(self._certificate_entries)

    def __contains__(self, alias: str) -> bool:
        return alias in self._key_entries or alias in self._certificate_entries

    def aliases(self) -> List[str]:
        return list(self._key_entries) + list(self._certificate_entries)

    def key_aliases(self) -> List[str]:
        return list(self._key_entries)

    def set_key_entry(self, alias: str, private_key, certificate_chain: Sequence[x509.Certificate]):
        if not certificate_chain:
            raise ValueError(f"Key entry '{alias}' needs at least one certificate")
        self._certificate_entries.pop(alias, None)
        self._key_entries[alias] = KeyEntry(alias, private_key, tuple(certificate_chain))

    def set_certificate_entry(self, alias: str, certificate: x509.Certificate):
        if alias in self._key_entries:
            raise ValueError(f"Alias '{alias}' already holds a private key entry")
        self._certificate_entries[alias] = TrustedCertificateEntry(alias, certificate)

    def is_key_entry(self, alias: str) -> bool:
        return alias in self._key_entries

    def get_key_entry(self, alias: str) -> Optional[KeyEntry]:
        return self._key_entries.get(alias)

    def get_key(self, alias: str):
        entry = self._key_entries.get(alias)
        return entry.private_key if entry else None

    def get_certificate_chain(self, alias: str) -> Optional[List[x509.Certificate]]:
        entry = self._key_entries.get(alias)
        return list(entry.certificate_chain) if entry else None

    def get_certificate(self, alias: str) -> Optional[x509.Certificate]:
        if alias in self._key_entries:
            return self._key_entries[alias].certificate
        entry = self._certificate_entries.get(alias)
        return entry.certificate if entry else None

    def certificates(self) -> List[x509.Certificate]:
        """Every distinct certificate in the store, key chains first"""
        seen = []
        for entry in self._key_entries.values():
            for cert in entry.certificate_chain:
                if cert not in seen:
                    seen.append(cert)
        for entry in self._certificate_entries.values():
            if entry.certificate not in seen:
                seen.append(entry.certificate)
        return seen

    @classmethod
    def from_pkcs12(cls, data: bytes, password: Optional[str]) -> "Keystore":
        """
        Load a password protected PKCS#12 container

        The key entry chain is the key's certificate followed by its issuers,
        linked by name. Every other certificate of the container is exposed as
        a trusted certificate entry.

        Raises:
            ValueError: If the data is not PKCS#12 or the password is wrong
        """
        logger.debug(f"Loading PKCS#12 keystore ({len(data)} bytes)")
        try:
            p12 = pkcs12.load_pkcs12(data, password.encode("utf-8") if password is not None else None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise ValueError(f"Can't decode PKCS#12 data: {e}") from e

        keystore = cls()
        additional = list(p12.additional_certs)

        if p12.key is not None and p12.cert is not None:
            alias = _friendly_name(p12.cert.friendly_name) or DEFAULT_KEY_ALIAS
            chain = _issuer_chain(p12.cert.certificate, [c.certificate for c in additional])
            keystore.set_key_entry(alias, p12.key, chain)
        elif p12.cert is not None:
            alias = _friendly_name(p12.cert.friendly_name) or "cert-0"
            keystore.set_certificate_entry(alias, p12.cert.certificate)
        elif p12.key is not None:
            logger.warning("PKCS#12 private key has no certificate, skipping it")

        for index, additional_cert in enumerate(additional, start=1):
            alias = _friendly_name(additional_cert.friendly_name) or f"ca-{index}"
            if alias in keystore:
                alias = f"{alias}-{index}"
            keystore.set_certificate_entry(alias, additional_cert.certificate)

        logger.info(f"Loaded PKCS#12 keystore with aliases: {keystore.aliases()}")
        return keystore
