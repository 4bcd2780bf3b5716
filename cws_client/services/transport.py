# cws_client/services/transport.py
"""
Mutual TLS transport for the certificate web service

A requests.Session whose https adapter injects the client's SSLContext into
the urllib3 pools. The session follows no redirects, never retries by itself
and ignores proxy/CA settings from the environment; retrying is left to the
poll-retry controller.
"""

import json
import logging
import ssl
from typing import Optional, Type, TypeVar

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter

from ..exceptions import RemoteOperationError, TransportError
from ..models.requests import CwsRequest
from ..models.responses import CwsResponse

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=CwsResponse)

NULL_RESPONSE_MESSAGE = "Null response from Certificate Web service."

# Body fields never written to the debug log
REDACTED_FIELDS = ("password", "certificateData")
REDACTED = "***"


class TlsHttpAdapter(HTTPAdapter):
    """HTTPAdapter that connects with a fixed SSLContext"""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs):
        self._ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["ssl_context"] = self._ssl_context
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def _redact(body) -> str:
    """JSON body with secret fields masked, non JSON bodies reduced to their size"""
    if body is None:
        return ""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(body)
    except ValueError:
        return f"<{len(body)} characters>"
    if isinstance(payload, dict):
        for field in REDACTED_FIELDS:
            if payload.get(field) is not None:
                payload[field] = REDACTED
    return json.dumps(payload)


def _log_exchange(response: requests.Response, *args, **kwargs):
    """Response hook writing request and response bodies, debug mode only"""
    request = response.request
    logger.info(f"--> {request.method} {request.url}")
    logger.info(f"--> {_redact(request.body)}")
    logger.info(f"<-- {response.status_code} {response.reason} ({response.elapsed.total_seconds():.3f}s)")
    logger.info(f"<-- {_redact(response.content)}")


class CwsTransport:
    """JSON over HTTPS with client certificate authentication"""

    def __init__(self,
                 end_point: str,
                 ssl_context: ssl.SSLContext,
                 timeout: int,
                 debug: bool = False,
                 session: Optional[requests.Session] = None):
        self.end_point = end_point if end_point.endswith("/") else end_point + "/"
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.trust_env = False
        self.session.mount("https://", TlsHttpAdapter(ssl_context, max_retries=0))
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if debug:
            self.session.hooks["response"].append(_log_exchange)

        logger.debug(f"CWS transport initialized for {self.end_point} (timeout: {timeout}s)")

    def post(self, operation: str, req: CwsRequest, response_type: Type[R]) -> R:
        """
        POST a request to <end_point>/<operation> and parse the response body

        Raises:
            TransportError: On connection/timeout failures
            RemoteOperationError: If there is no usable response body
        """
        url = self.end_point + operation
        try:
            res = self.session.post(
                url,
                data=json.dumps(req.to_wire()),
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(str(e)) from e

        # The service reports errors in the body, not with HTTP status codes
        if not res.ok or not res.content:
            logger.error(f"No response body from {url}: HTTP {res.status_code}")
            raise RemoteOperationError(NULL_RESPONSE_MESSAGE)

        try:
            return response_type.model_validate(res.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable response from {url}: {e}")
            raise RemoteOperationError(NULL_RESPONSE_MESSAGE) from e

    def close(self):
        self.session.close()
