"""
HTTP client for the YOP open platform

This module signs requests with the YOP-RSA3 signer, sends them through a
pluggable transport (``requests`` by default) and verifies the
``x-yop-sign`` signature of responses. No retry policy is applied.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Union
from urllib.parse import urlencode

import requests

from .config import YopConfig, load_config
from .exceptions import (
    ResponseVerificationError,
    ServerCommunicationError,
    ValidationError,
)
from .signing import SigningConfig, YopRsaSigner
from .signing.types import ContentType, HttpMethod, HEADER_REQUEST_ID, HEADER_SIGN
from .signing.utils import canonical_json
from .verification import is_valid_rsa_result

logger = logging.getLogger(__name__)

YOP_CENTER_PATH = "yop-center"


@dataclass
class TransportRequest:
    """Fully signed request handed to a transport."""
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[Union[str, bytes]] = None


@dataclass
class TransportResponse:
    """Raw transport response."""
    status_code: int
    headers: Dict[str, str]
    text: str

    def header(self, name: str) -> Optional[str]:
        lower = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lower:
                return value
        return None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Sends one request and returns the raw response."""

    def send(self, request: TransportRequest, timeout: float) -> TransportResponse:
        ...


class RequestsTransport:
    """
    Transport backed by a ``requests.Session``.

    Timeouts and connection failures are raised as ServerCommunicationError.
    """

    def __init__(self, session: Optional[requests.Session] = None, verify_ssl: bool = True):
        self.session = session or requests.Session()
        self.verify_ssl = verify_ssl

    def send(self, request: TransportRequest, timeout: float) -> TransportResponse:
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.Timeout as e:
            raise ServerCommunicationError(
                f"YOP API request timed out after {timeout} seconds",
                "TIMEOUT"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR") from e
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}", "REQUEST_FAILED") from e

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    def close(self) -> None:
        self.session.close()


@dataclass
class YopResponse:
    """
    Verified platform response

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        text: Raw body text
        data: Parsed JSON body ({} for an empty body)
        sign: ``x-yop-sign`` header value, if any
        request_id: ``x-yop-request-id`` header value, if any
    """
    status_code: int
    headers: Dict[str, str]
    text: str
    data: Dict[str, Any] = field(default_factory=dict)
    sign: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def result(self) -> Any:
        return self.data.get("result") if isinstance(self.data, dict) else None


class YopClient:
    """
    Client for the YOP open platform

    Business response codes inside the returned data are left to the caller.
    """

    def __init__(
        self,
        config: Optional[YopConfig] = None,
        transport: Optional[Transport] = None,
        signer: Optional[YopRsaSigner] = None
    ):
        """
        Initialize the client.

        Args:
            config: Explicit configuration (merged with the environment)
            transport: Transport used to send requests
            signer: Signer override, built from the config by default

        Raises:
            ConfigurationError: If required configuration is missing
        """
        self.config = load_config(config)
        self.transport = transport or RequestsTransport()
        self.signer = signer or YopRsaSigner(SigningConfig(
            app_key=self.config.app_key,
            private_key=self.config.secret_key,
        ))
        logger.info(f"Initialized YOP client for {self.config.base_url} (app key {self.config.app_key})")

    def build_url(self, api_url: str) -> str:
        base = self.config.base_url.rstrip("/")
        return f"{base}/{YOP_CENTER_PATH}/{api_url.lstrip('/')}"

    def request(
        self,
        method: Union[str, HttpMethod],
        api_url: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[Mapping[str, Any]] = None,
        content_type: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> YopResponse:
        """
        Sign, send and verify one request.

        Args:
            method: GET or POST
            api_url: API path, e.g. ``/rest/v1.0/trade/order``
            params: Query parameters for GET
            body: Body for POST
            content_type: POST content type (form by default)
            timeout: Seconds, defaults to the configured timeout

        Returns:
            YopResponse: Parsed and verified response

        Raises:
            ValidationError: For a POST without body or an unsupported method
            ServerCommunicationError: On transport errors, non-2xx status or invalid JSON
            ResponseVerificationError: If ``x-yop-sign`` does not verify
        """
        method_name = method.value if isinstance(method, HttpMethod) else str(method).upper()
        url = self.build_url(api_url)
        payload: Optional[str] = None

        if method_name == HttpMethod.GET.value:
            query = {k: v for k, v in (params or {}).items() if v is not None}
            signed = self.signer.sign_request(HttpMethod.GET, api_url, query, content_type="")
            if query:
                url = f"{url}?{urlencode(query)}"
            headers = dict(signed.headers)
        elif method_name == HttpMethod.POST.value:
            if not body:
                raise ValidationError("Invalid request configuration: POST method requires a body")
            content_type = content_type or ContentType.FORM.value
            if ContentType.JSON.value in content_type:
                signed = self.signer.sign_request(HttpMethod.POST, api_url, body, content_type=content_type)
                payload = canonical_json(dict(body))
            else:
                form = {k: v for k, v in body.items() if v is not None}
                signed = self.signer.sign_request(HttpMethod.POST, api_url, form, content_type=content_type)
                payload = urlencode(form)
            headers = dict(signed.headers)
            headers["content-type"] = content_type
        else:
            raise ValidationError(f"Unsupported HTTP method: {method}", "INVALID_METHOD")

        logger.debug(f"Sending {method_name} request to {url}")
        response = self.transport.send(
            TransportRequest(
                method=method_name,
                url=url,
                headers=headers,
                body=payload.encode("utf-8") if payload is not None else None,
            ),
            timeout if timeout is not None else self.config.timeout,
        )
        return self._handle_response(response)

    def _handle_response(self, response: TransportResponse) -> YopResponse:
        text = response.text or ""
        sign = response.header(HEADER_SIGN)

        if sign and not is_valid_rsa_result(text, sign, self.config.yop_public_key):
            raise ResponseVerificationError(
                "Invalid response signature from YOP",
                "INVALID_RESPONSE_SIGNATURE",
                {"status_code": response.status_code}
            )

        if not response.ok:
            code, message = "HTTP_ERROR", text
            try:
                error_data = json.loads(text)
            except ValueError:
                error_data = None
            if isinstance(error_data, dict):
                error_info = error_data.get("error") or error_data
                if isinstance(error_info, dict):
                    code = error_info.get("code") or code
                    message = error_info.get("message") or message
            raise ServerCommunicationError(
                f"YOP API HTTP error: status={response.status_code}, code={code}, message={message}",
                str(code),
                http_status=response.status_code,
                details={"status_code": response.status_code, "code": code}
            )

        if not text.strip():
            logger.warning("Received empty response body for a successful request")
            data: Any = {}
        else:
            try:
                data = json.loads(text)
            except ValueError as e:
                raise ServerCommunicationError(
                    f"Invalid JSON response: {e}",
                    "INVALID_JSON",
                    http_status=response.status_code
                ) from e

        return YopResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=text,
            data=data,
            sign=sign,
            request_id=response.header(HEADER_REQUEST_ID),
        )

    def get(self, api_url: str, params: Optional[Mapping[str, Any]] = None,
            timeout: Optional[float] = None) -> YopResponse:
        return self.request(HttpMethod.GET, api_url, params=params, timeout=timeout)

    def post(self, api_url: str, body: Mapping[str, Any],
             content_type: str = ContentType.FORM.value,
             timeout: Optional[float] = None) -> YopResponse:
        return self.request(HttpMethod.POST, api_url, body=body, content_type=content_type, timeout=timeout)

    def post_json(self, api_url: str, body: Mapping[str, Any],
                  timeout: Optional[float] = None) -> YopResponse:
        return self.request(HttpMethod.POST, api_url, body=body,
                            content_type=ContentType.JSON.value, timeout=timeout)


def create_client(
    config: Optional[YopConfig] = None,
    transport: Optional[Transport] = None
) -> YopClient:
    """
    Create a YOP client.

    Args:
        config: Optional explicit configuration
        transport: Optional transport

    Returns:
        YopClient: Configured client
    """
    return YopClient(config=config, transport=transport)
