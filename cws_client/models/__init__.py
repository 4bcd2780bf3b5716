# cws_client/models/__init__.py
# Request/response models for the certificate web service

from .bundle import CertBundle
from .requests import (
    CertFormat,
    CreateReq,
    CwsRequest,
    DownloadReq,
    ExpiringReq,
    RenewReq,
    RevokeReason,
    RevokeReq,
    check_cn,
    check_password,
)
from .responses import (
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

__all__ = [
    'CertBundle',
    'CertFormat',
    'CreateReq',
    'CwsRequest',
    'DownloadReq',
    'ExpiringReq',
    'RenewReq',
    'RevokeReason',
    'RevokeReq',
    'check_cn',
    'check_password',
    'CreateRes',
    'CwsResponse',
    'DownloadRes',
    'ExistsRes',
    'ExpirationRes',
    'ExpiringRes',
    'RevokeRes',
    'SelfDescribingResponse',
    'SerialNumberRes',
    'ViewRes',
]
