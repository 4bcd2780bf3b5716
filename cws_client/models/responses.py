# cws_client/models/responses.py
# Response models returned by the certificate web service

from datetime import datetime
from typing import List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field


class SelfDescribingResponse(Protocol):
    """Any response carrying its own success flag and error description"""
    success: bool
    error_code: Optional[int]
    error_details: Optional[str]


class CwsResponse(BaseModel):
    """
    Generic service response.

    The service doesn't use HTTP status codes for errors, every response
    carries success/errorCode/errorDetails instead. Error codes in [200, 300)
    mean the request was accepted but is still being processed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    error_code: Optional[int] = Field(default=None, alias="errorCode")
    error_details: Optional[str] = Field(default=None, alias="errorDetails")

    @property
    def error_msg(self) -> str:
        return self.error_details or f"Certificate Web service error (code: {self.error_code})"


class CreateRes(CwsResponse):
    certificate_dn: Optional[str] = Field(default=None, alias="certificateDN")


class DownloadRes(CwsResponse):
    # Base64 encoded certificate data in the requested format
    certificate_data: Optional[str] = Field(default=None, alias="certificateData", repr=False)


class ExistsRes(CwsResponse):
    certificate_exists: bool = Field(default=False, alias="certificateExists")


class ExpirationRes(CwsResponse):
    expiration_date: Optional[datetime] = Field(default=None, alias="expirationDate")


class ExpiringRes(CwsResponse):
    certificate_expiring: bool = Field(default=False, alias="certificateExpiring")


class SerialNumberRes(CwsResponse):
    cert_serial_number: Optional[str] = Field(default=None, alias="certSerialNumber")


class RevokeRes(CwsResponse):
    # True when the service queued the revocation instead of applying it
    requested: Optional[bool] = None
    revoked: Optional[bool] = None


class ViewRes(CwsResponse):
    """Certificate details, unknown fields are kept as extras"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    certificate_dn: Optional[str] = Field(default=None, alias="certificateDN")
    common_name: Optional[str] = Field(default=None, alias="commonName")
    subject_alt_name: List[str] = Field(default_factory=list, alias="subjectAltName")
    serial_number: Optional[str] = Field(default=None, alias="serialNumber")
    issuer: Optional[str] = None
    valid_from: Optional[datetime] = Field(default=None, alias="validFrom")
    valid_to: Optional[datetime] = Field(default=None, alias="validTo")
