# cws_client/exceptions.py
# Error taxonomy shared by every client component

class CwsError(Exception):
    """Base exception for Certificate Web Service client operations"""
    pass


class ConfigurationError(CwsError):
    """Raised when the client keystore or TLS identity can't be set up"""
    pass


class CallerInputError(CwsError, ValueError):
    """Raised for invalid caller supplied parameters, before any I/O"""
    pass


class RemoteOperationError(CwsError):
    """Raised when the certificate service reports a terminal failure"""
    pass


class TransportError(CwsError, IOError):
    """Raised when talking to the certificate service fails at the network level"""
    pass


class BundleError(CwsError):
    """Raised when the downloaded archive can't be turned into a cert bundle"""
    pass


class PasswordGenerationError(CwsError):
    """Raised when password generation fails"""
    pass
