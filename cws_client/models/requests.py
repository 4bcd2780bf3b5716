# cws_client/models/requests.py
# Request models sent to the certificate web service

import string
from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import CallerInputError

MAX_CN_LENGTH = 64
MAX_PASSWORD_LENGTH = 100


def check_cn(common_name: str) -> str:
    """Common names are limited to 64 characters (X.509 upper bound)"""
    if len(common_name) > MAX_CN_LENGTH:
        raise CallerInputError(
            f"Common name '{common_name}' is longer than {MAX_CN_LENGTH} characters."
        )
    return common_name


def check_password(password: str) -> str:
    """
    Download password complexity check.

    Needs at least one uppercase, lowercase, digit and special character and
    may be at most 100 characters long.
    """
    if not password or len(password) > MAX_PASSWORD_LENGTH:
        raise CallerInputError(
            f"Password should be between 1 and {MAX_PASSWORD_LENGTH} characters."
        )
    checks = [
        any(c in string.ascii_uppercase for c in password),
        any(c in string.ascii_lowercase for c in password),
        any(c in string.digits for c in password),
        any(not c.isalnum() for c in password),
    ]
    if not all(checks):
        raise CallerInputError(
            "Password should contain uppercase, lowercase, number and special characters."
        )
    return password


class CertFormat(str, Enum):
    """Formats the certificate service can return certificate data in"""
    PKCS12 = "PKCS12"
    PEM = "PEM"
    DER = "DER"
    PKCS7 = "PKCS7"
    JKS = "JKS"


class RevokeReason(IntEnum):
    """Revocation reason codes understood by the certificate service"""
    NONE = 0
    USER_KEY_COMPROMISED = 1
    CA_KEY_COMPROMISED = 2
    USER_CHANGED_AFFILIATION = 3
    CERT_SUPERSEDED = 4
    ORIGINAL_USE_NO_LONGER_VALID = 5


class CwsRequest(BaseModel):
    """Fields common to every certificate request"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Application id requesting the certificate operation
    app_id: str = Field(alias="appId")
    # Team DL that owns the certificate
    team_dl: str = Field(alias="teamDL")
    common_name: str = Field(alias="commonName")

    @field_validator("common_name")
    @classmethod
    def _check_cn(cls, value: str) -> str:
        return check_cn(value)

    def to_wire(self) -> dict:
        """JSON payload with service field names, unset fields dropped"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CreateReq(CwsRequest):
    """Certificate create request, the service creates the key pair and CSR"""
    subject_alt_name: Optional[List[str]] = Field(default=None, alias="subjectAltName")
    # Required for internet facing (external) certificates
    domain: Optional[str] = None
    # "1" creates the policy DN for the team DL
    create_policy: Optional[str] = Field(default=None, alias="createPolicy")


class RenewReq(CwsRequest):
    """Marks a certificate for immediate renewal"""
    pass


class DownloadReq(CwsRequest):
    """Certificate download request"""
    format: CertFormat = Field(default=CertFormat.PKCS12)
    # Protects the private key in the returned certificate data
    password: str = Field(repr=False)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return check_password(value)


class ExpiringReq(CwsRequest):
    """Checks whether a certificate expires within the window (days)"""
    expiration_window: str = Field(alias="expirationWindow")


class RevokeReq(CwsRequest):
    """Certificate revoke request"""
    reason: RevokeReason = RevokeReason.NONE
    # Also disable the certificate on the service side
    disable: bool = False
