# cws_client/__init__.py
"""
Certificate Web Service client

Mutual TLS client for the certificate management service, with PKCS#12 to
PEM cert bundle conversion.
"""

from .client import CwsClient
from .config import ClientConfig, settings
from .exceptions import (
    BundleError,
    CallerInputError,
    ConfigurationError,
    CwsError,
    RemoteOperationError,
    TransportError,
)
from .models import CertBundle, CertFormat, RevokeReason

__version__ = settings.APP_VERSION

__all__ = [
    'CwsClient',
    'ClientConfig',
    'CertBundle',
    'CertFormat',
    'RevokeReason',
    'CwsError',
    'ConfigurationError',
    'CallerInputError',
    'RemoteOperationError',
    'TransportError',
    'BundleError',
]
