# cws_client/tls/key_manager.py
"""
X.509 key managers

A key manager answers the identity questions of a TLS handshake: which
aliases can be used for a key type, which alias to present, and the private
key and certificate chain behind an alias.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from cryptography import x509

from ..certificates.extractors.private_key import key_algorithm
from ..certificates.keystore import Keystore

logger = logging.getLogger(__name__)


class X509KeyManager(ABC):
    """Key manager capability set"""

    @abstractmethod
    def get_client_aliases(self, key_type: str,
                           issuers: Optional[Sequence[x509.Name]] = None) -> Optional[List[str]]:
        """Aliases usable for client authentication, None if there are none"""

    @abstractmethod
    def choose_client_alias(self, key_types: Sequence[str],
                            issuers: Optional[Sequence[x509.Name]] = None) -> Optional[str]:
        """Alias to present for client authentication"""

    @abstractmethod
    def get_server_aliases(self, key_type: str,
                           issuers: Optional[Sequence[x509.Name]] = None) -> Optional[List[str]]:
        """Aliases usable for server authentication"""

    @abstractmethod
    def choose_server_alias(self, key_type: str,
                            issuers: Optional[Sequence[x509.Name]] = None) -> Optional[str]:
        """Alias to present for server authentication"""

    @abstractmethod
    def get_certificate_chain(self, alias: str) -> Optional[List[x509.Certificate]]:
        """Certificate chain of alias, leaf first"""

    @abstractmethod
    def get_private_key(self, alias: str):
        """Private key of alias"""


class KeystoreKeyManager(X509KeyManager):
    """Key manager over every private key entry of a keystore"""

    def __init__(self, keystore: Keystore):
        self._keystore = keystore

    def _aliases(self, key_type: str, issuers: Optional[Sequence[x509.Name]]) -> Optional[List[str]]:
        aliases = []
        for alias in self._keystore.key_aliases():
            entry = self._keystore.get_key_entry(alias)
            if key_algorithm(entry.private_key) != key_type:
                continue
            if issuers:
                chain_issuers = {cert.issuer for cert in entry.certificate_chain}
                if not chain_issuers.intersection(issuers):
                    continue
            aliases.append(alias)
        return aliases or None

    def get_client_aliases(self, key_type, issuers=None):
        return self._aliases(key_type, issuers)

    def choose_client_alias(self, key_types, issuers=None):
        for key_type in key_types:
            aliases = self._aliases(key_type, issuers)
            if aliases:
                return aliases[0]
        return None

    def get_server_aliases(self, key_type, issuers=None):
        return self._aliases(key_type, issuers)

    def choose_server_alias(self, key_type, issuers=None):
        aliases = self._aliases(key_type, issuers)
        return aliases[0] if aliases else None

    def get_certificate_chain(self, alias):
        return self._keystore.get_certificate_chain(alias)

    def get_private_key(self, alias):
        return self._keystore.get_key(alias)


class AliasKeyManager(X509KeyManager):
    """
    Key manager that always presents one configured alias.

    Client alias queries only ever see the configured alias, and key/chain
    lookups resolve to it whatever alias the handshake asks for. Server side
    queries go to the wrapped key manager unchanged.
    """

    def __init__(self, delegate: X509KeyManager, alias: str):
        self._delegate = delegate
        self.alias = alias

    def get_client_aliases(self, key_type, issuers=None):
        return [self.alias]

    def choose_client_alias(self, key_types, issuers=None):
        return self.alias

    def get_server_aliases(self, key_type, issuers=None):
        return self._delegate.get_server_aliases(key_type, issuers)

    def choose_server_alias(self, key_type, issuers=None):
        return self._delegate.choose_server_alias(key_type, issuers)

    def get_certificate_chain(self, alias):
        return self._delegate.get_certificate_chain(self.alias)

    def get_private_key(self, alias):
        return self._delegate.get_private_key(self.alias)
