# cws_client/client.py
"""
Certificate Web Service client

Creates, renews, revokes, downloads and inspects X.509 certificates managed
by the certificate management system. Authentication to the service is
certificate based mutual TLS, set up once when the client is created.
"""

import logging
from datetime import datetime
from typing import List, Optional, Type, TypeVar

from pydantic import ValidationError

from .certificates.formats.pkcs12 import check_key_password, materialize
from .config import ClientConfig, settings
from .exceptions import CallerInputError, RemoteOperationError
from .models.bundle import CertBundle
from .models.requests import (
    CertFormat,
    CreateReq,
    CwsRequest,
    DownloadReq,
    ExpiringReq,
    RenewReq,
    RevokeReason,
    RevokeReq,
)
from .models.responses import (
    CreateRes,
    CwsResponse,
    DownloadRes,
    ExistsRes,
    ExpirationRes,
    ExpiringRes,
    RevokeRes,
    SelfDescribingResponse,
    SerialNumberRes,
    ViewRes,
)
from .services.password_generator import password_generator
from .services.poll_retry import poll
from .services.transport import NULL_RESPONSE_MESSAGE, CwsTransport
from .tls.context import TlsIdentityContext, bootstrap

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SelfDescribingResponse)
Q = TypeVar("Q", bound=CwsRequest)


def unwrap_raw(res: Optional[T]) -> T:
    """Return the response as is, only a missing body is an error"""
    if res is None:
        raise RemoteOperationError(NULL_RESPONSE_MESSAGE)
    return res


def unwrap(res: Optional[T]) -> T:
    """Return a successful response, raise the service error otherwise"""
    res = unwrap_raw(res)
    if not res.success:
        raise RemoteOperationError(
            res.error_details or f"Certificate Web service error (code: {res.error_code})"
        )
    return res


def build_request(request_type: Type[Q], **fields) -> Q:
    """Create a request model, surfacing precondition failures as CallerInputError"""
    try:
        return request_type(**fields)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise CallerInputError(messages) from e


class CwsClient:
    """Certificate Web Service client"""

    def __init__(self, config: ClientConfig, transport: Optional[CwsTransport] = None):
        """
        Initialize the mutual TLS client.

        Raises:
            ConfigurationError: If the keystore or TLS context can't be set up
        """
        self.config = config
        logger.info(f"Initializing {self!r}")

        self.tls: Optional[TlsIdentityContext] = None
        if transport is None:
            self.tls = bootstrap(config.keystore, config.keystore_password, config.key_alias)
            transport = CwsTransport(
                config.end_point,
                self.tls.ssl_context,
                timeout=config.timeout,
                debug=config.debug,
            )
        self.transport = transport

    def __repr__(self) -> str:
        return (f"CwsClient(end_point={self.config.end_point!r}, app_id={self.config.app_id!r}, "
                f"team_dl={self.config.team_dl!r}, keystore={self.config.keystore!r}, "
                f"key_alias={self.config.key_alias!r})")

    def close(self):
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def normalize_team_dl(self, team_dl_name: str) -> str:
        """Resolve a team DL relative to the configured base team DL"""
        if team_dl_name.startswith(self.config.team_dl):
            return team_dl_name
        return f"{self.config.team_dl}\\{team_dl_name}"

    def _request(self, request_type: Type[Q], common_name: str, team_dl_name: str, **fields) -> Q:
        return build_request(
            request_type,
            app_id=self.config.app_id,
            team_dl=self.normalize_team_dl(team_dl_name),
            common_name=common_name,
            **fields
        )

    # ===== REQUEST LEVEL OPERATIONS =====

    def create(self, req: CreateReq) -> CreateRes:
        """
        Request a certificate; the service creates the key pair and CSR.

        Fails if the certificate already exists or the policy DN doesn't.
        """
        return unwrap(self.transport.post("create", req, CreateRes))

    def renew(self, req: RenewReq) -> CwsResponse:
        """Mark a certificate for immediate renewal"""
        return unwrap(self.transport.post("renew", req, CwsResponse))

    def obsolete(self, req: CwsRequest) -> CwsResponse:
        return unwrap(self.transport.post("obsolete", req, CwsResponse))

    def revoke(self, req: RevokeReq) -> RevokeRes:
        return unwrap(self.transport.post("revoke", req, RevokeRes))

    def download(self, req: DownloadReq) -> DownloadRes:
        """
        Download certificate data in the requested format.

        Certificate generation is asynchronous, so this keeps retrying while
        the service reports the certificate as processing (about 2 minutes).
        """
        return poll(
            lambda: unwrap_raw(self.transport.post("download", req, DownloadRes)),
            max_attempts=settings.DOWNLOAD_MAX_ATTEMPTS,
            interval=settings.DOWNLOAD_RETRY_INTERVAL,
        )

    def view(self, req: CwsRequest) -> ViewRes:
        return unwrap(self.transport.post("view", req, ViewRes))

    def exists(self, req: CwsRequest) -> ExistsRes:
        return unwrap(self.transport.post("exists", req, ExistsRes))

    def expiring(self, req: ExpiringReq) -> ExpiringRes:
        return unwrap(self.transport.post("expiring", req, ExpiringRes))

    def expiration_date(self, req: CwsRequest) -> ExpirationRes:
        return unwrap(self.transport.post("expirationdate", req, ExpirationRes))

    def serial_number(self, req: CwsRequest) -> SerialNumberRes:
        return unwrap(self.transport.post("serialnumber", req, SerialNumberRes))

    # ===== CONVENIENCE OPERATIONS =====

    def create_cert(self, common_name: str, subject_alt_names: List[str], team_dl_name: str) -> str:
        """
        Create a certificate for common_name and SANs under the team DL.

        Returns:
            Certificate DN of the generated certificate
        """
        req = self._request(
            CreateReq, common_name, team_dl_name,
            subject_alt_name=subject_alt_names,
            domain=self.config.domain,
        )
        return self.create(req).certificate_dn

    def create_policy_dn(self, team_dl_name: str) -> bool:
        """Create the policy DN for the team DL if it doesn't exist yet"""
        req = self._request(CreateReq, "", team_dl_name, domain="", create_policy="1")
        return self.create(req).success

    def renew_cert(self, common_name: str, team_dl_name: str) -> bool:
        return self.renew(self._request(RenewReq, common_name, team_dl_name)).success

    def obsolete_cert(self, common_name: str, team_dl_name: str) -> bool:
        return self.obsolete(self._request(CwsRequest, common_name, team_dl_name)).success

    def revoke_cert(self,
                    common_name: str,
                    team_dl_name: str,
                    reason: RevokeReason = RevokeReason.NONE,
                    disable: bool = False) -> RevokeRes:
        """Revoke the certificate, and disable it too if asked"""
        req = self._request(RevokeReq, common_name, team_dl_name, reason=reason, disable=disable)
        return self.revoke(req)

    def download_cert(self,
                      common_name: str,
                      team_dl_name: str,
                      password: str,
                      cert_format: CertFormat = CertFormat.PKCS12) -> str:
        """
        Download certificate data as base64 text.

        Args:
            password: Protects the private key. Needs uppercase, lowercase,
                number and special characters; see PasswordGenerator.
        """
        req = self._request(
            DownloadReq, common_name, team_dl_name,
            format=cert_format,
            password=password,
        )
        return self.download(req).certificate_data

    def download_cert_bundle(self,
                             common_name: str,
                             team_dl_name: str,
                             key_password: Optional[str] = None) -> CertBundle:
        """
        Download the PEM encoded private key, certificate and CA chain.

        Args:
            key_password: Encrypts the private key if given (at least 4
                characters). The key is not encrypted when None.

        Raises:
            CallerInputError: If key_password is too short, before any request
            RemoteOperationError: If the service reports a failure
            BundleError: If the downloaded archive can't be converted
        """
        check_key_password(key_password)

        # One-time password protecting the archive in transit
        keystore_pass = password_generator.generate(settings.KEYSTORE_PASSWORD_LENGTH)
        req = self._request(
            DownloadReq, common_name, team_dl_name,
            format=CertFormat.PKCS12,
            password=keystore_pass,
        )
        res = self.download(req)
        return materialize(res.certificate_data, keystore_pass, key_password)

    def get_cert_expiration_date(self, common_name: str, team_dl_name: str) -> Optional[datetime]:
        return self.expiration_date(self._request(CwsRequest, common_name, team_dl_name)).expiration_date

    def get_cert_serial_number(self, common_name: str, team_dl_name: str) -> Optional[str]:
        return self.serial_number(self._request(CwsRequest, common_name, team_dl_name)).cert_serial_number

    def cert_expiring(self, common_name: str, team_dl_name: str, days: int) -> bool:
        """True if the certificate expires within the given number of days"""
        req = self._request(ExpiringReq, common_name, team_dl_name, expiration_window=str(days))
        return self.expiring(req).certificate_expiring

    def cert_exists(self, common_name: str, team_dl_name: str) -> bool:
        return self.exists(self._request(CwsRequest, common_name, team_dl_name)).certificate_exists

    def view_cert(self, common_name: str, team_dl_name: str) -> ViewRes:
        return self.view(self._request(CwsRequest, common_name, team_dl_name))
