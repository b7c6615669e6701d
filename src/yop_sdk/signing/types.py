"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the YOP-RSA3
request signing scheme, together with the injectable clock, randomness
and crypto capabilities used by the signer.
"""

from datetime import datetime
from typing import Dict, Optional, Union, Callable, Any, Protocol, runtime_checkable
from dataclasses import dataclass, field
from enum import Enum

# Literal values embedded in the signed string
AUTH_VERSION = "yop-auth-v3"
AUTH_ALGORITHM = "YOP-RSA2048-SHA256"
EXPIRY_SECONDS = 1800
SIGNATURE_SUFFIX = "$SHA256"

# Wire header names
HEADER_APP_KEY = "x-yop-appkey"
HEADER_CONTENT_SHA256 = "x-yop-content-sha256"
HEADER_REQUEST_ID = "x-yop-request-id"
HEADER_SDK_VERSION = "x-yop-sdk-version"
HEADER_SDK_LANG = "x-yop-sdk-lang"
HEADER_CONTENT_TYPE = "content-type"
HEADER_AUTHORIZATION = "Authorization"
HEADER_SIGN = "x-yop-sign"


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"


class ContentType(str, Enum):
    """Request body content types understood by the content digest"""
    FORM = "application/x-www-form-urlencoded"
    JSON = "application/json"


@dataclass
class SigningContext:
    """
    Everything needed to produce one signed request.

    Attributes:
        app_key: Application key identifier issued by the platform
        private_key: Merchant RSA private key (PEM or raw base64 PKCS#8)
        timestamp: Wire timestamp, ``yyyy-MM-ddThh:mm:ssZ``
        method: HTTP method
        request_path: API path, e.g. ``/rest/v1.0/trade/order``
        query_params: Request parameters (query for GET, body for POST)
        signable_headers: Headers that take part in the canonical request
        request_id: Request nonce sent as ``x-yop-request-id``
        expiry_seconds: Literal expiry embedded in the auth string
    """
    app_key: str
    private_key: Union[str, bytes]
    timestamp: str
    method: HttpMethod
    request_path: str
    query_params: Dict[str, Any] = field(default_factory=dict)
    signable_headers: Dict[str, str] = field(default_factory=dict)
    request_id: str = ""
    expiry_seconds: int = EXPIRY_SECONDS

    def __post_init__(self):
        """Validate context after initialization"""
        if not self.app_key:
            raise ValueError("App key cannot be empty")

        if not self.private_key:
            raise ValueError("Private key cannot be empty")

        if not self.request_path:
            raise ValueError("Request path cannot be empty")

        if self.expiry_seconds != EXPIRY_SECONDS:
            raise ValueError(f"Expiry must be {EXPIRY_SECONDS} seconds")

        if isinstance(self.method, str) and not isinstance(self.method, HttpMethod):
            self.method = HttpMethod(self.method.upper())

        if self.query_params is None:
            self.query_params = {}

        if self.signable_headers is None:
            self.signable_headers = {}


@dataclass
class Signature:
    """
    URL-safe base64 RSA signature with its algorithm suffix.

    Attributes:
        value: URL-safe base64 signature without '=' padding
        algorithm_suffix: Suffix appended on the wire
    """
    value: str
    algorithm_suffix: str = SIGNATURE_SUFFIX

    def __post_init__(self):
        if not self.value:
            raise ValueError("Signature value cannot be empty")

        if any(c in self.value for c in "+/="):
            raise ValueError("Signature value must be URL-safe base64 without padding")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Signature":
        from ..crypto.rsa import encode_url_safe_signature
        return cls(value=encode_url_safe_signature(raw))

    def __str__(self) -> str:
        return self.value + self.algorithm_suffix


@dataclass
class SignedRequest:
    """
    Result of signing a request

    Attributes:
        headers: Every header to send, Authorization included
        authorization: Authorization header value
        canonical_request: Canonical request string that was signed
        signature: Signature over the canonical request
    """
    headers: Dict[str, str]
    authorization: str
    canonical_request: str
    signature: Signature

    def __post_init__(self):
        """Validate signed request"""
        if not self.authorization:
            raise ValueError("Authorization cannot be empty")

        if not isinstance(self.headers, dict):
            raise ValueError("Headers must be a dictionary")


@runtime_checkable
class Clock(Protocol):
    """Source of the wall-clock time used for timestamps and request ids"""

    def now(self) -> datetime:
        ...


@runtime_checkable
class RandomSource(Protocol):
    """Source of the random characters mixed into request ids"""

    def choice(self, alphabet: str) -> str:
        ...


@runtime_checkable
class RequestCrypto(Protocol):
    """Signature and digest primitives used by the signer and verifiers"""

    def sign(self, message: str, private_key: Any) -> bytes:
        ...

    def verify(self, message: str, signature: bytes, public_key: Any) -> bool:
        ...

    def digest(self, data: str) -> str:
        ...


class SigningError(Exception):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"
    INVALID_APP_KEY = "INVALID_APP_KEY"

    # Request errors
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_PATH = "INVALID_PATH"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    CANONICAL_REQUEST_FAILED = "CANONICAL_REQUEST_FAILED"
    DIGEST_CALCULATION_FAILED = "DIGEST_CALCULATION_FAILED"


# Type aliases for convenience
RequestIdGenerator = Callable[[], str]
TimestampGenerator = Callable[[], str]
