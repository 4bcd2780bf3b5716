# cws_client/tls/__init__.py
# Mutual TLS identity: keystore loading, key managers and SSL context

from .context import TlsIdentityContext, bootstrap
from .key_manager import AliasKeyManager, KeystoreKeyManager, X509KeyManager

__all__ = [
    'TlsIdentityContext',
    'bootstrap',
    'AliasKeyManager',
    'KeystoreKeyManager',
    'X509KeyManager'
]
