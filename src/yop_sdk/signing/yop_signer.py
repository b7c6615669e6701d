"""
YOP-RSA3 request signer

This module provides the signer that turns a request description into the
``x-yop-*`` headers and the ``Authorization`` header expected by the YOP
open platform, using RSA-SHA256 signatures over a canonical request.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from ..crypto.rsa import sign_sha256
from ..exceptions import KeyFormatError
from ..version import SDK_LANG, SDK_VERSION
from .types import (
    SigningContext,
    SignedRequest,
    Signature,
    HttpMethod,
    SigningError,
    SigningErrorCodes,
    AUTH_ALGORITHM,
    HEADER_APP_KEY,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_SHA256,
    HEADER_CONTENT_TYPE,
    HEADER_REQUEST_ID,
    HEADER_SDK_LANG,
    HEADER_SDK_VERSION,
)
from .utils import content_sha256, PerformanceTimer
from .canonical_message import CanonicalRequestBuilder
from .signing_config import SigningConfig, validate_signing_config

logger = logging.getLogger(__name__)

SLOW_SIGNING_THRESHOLD_MS = 50


def sign_canonical_request(canonical_request: str, private_key: Union[str, bytes]) -> str:
    """
    Sign canonical request text and encode it for the Authorization header.

    Args:
        canonical_request: Canonical request text
        private_key: Merchant private key, PEM or raw base64

    Returns:
        str: URL-safe base64 signature followed by ``$SHA256``
    """
    return str(Signature.from_bytes(sign_sha256(canonical_request, private_key)))


class YopRsaSigner:
    """
    YOP-RSA3 request signer

    Builds the mandatory signed headers, the canonical request and the
    ``Authorization`` value for one request at a time. The signer keeps no
    per-request state and may be shared between threads.
    """

    def __init__(self, config: SigningConfig):
        """
        Initialize the signer with configuration.

        Args:
            config: Signing configuration

        Raises:
            SigningError: If configuration is invalid
        """
        validate_signing_config(config)
        self.config = config

    def build_context(
        self,
        method: Union[str, HttpMethod],
        request_path: str,
        params: Optional[Mapping[str, Any]] = None,
        content_type: Optional[str] = None
    ) -> SigningContext:
        """
        Create the signing context for a request.

        Args:
            method: HTTP method
            request_path: API path
            params: Query parameters (GET) or body (POST)
            content_type: Overrides the configured content type

        Returns:
            SigningContext: Context with the mandatory signed headers

        Raises:
            SigningError: If the method is not supported or the digest fails
        """
        try:
            http_method = method if isinstance(method, HttpMethod) else HttpMethod(str(method).upper())
        except ValueError as e:
            raise SigningError(
                f"Unsupported HTTP method: {method}",
                SigningErrorCodes.INVALID_METHOD,
                {"method": str(method)}
            ) from e

        if not request_path:
            raise SigningError("Request path is required", SigningErrorCodes.INVALID_PATH)

        params = dict(params or {})
        effective_type = self.config.content_type if content_type is None else content_type

        headers = {
            HEADER_APP_KEY: self.config.app_key,
            HEADER_CONTENT_SHA256: content_sha256(params, effective_type, http_method, self.config.crypto.digest),
            HEADER_REQUEST_ID: self.config.next_request_id(),
        }
        if http_method == HttpMethod.POST and effective_type:
            headers[HEADER_CONTENT_TYPE] = effective_type

        return SigningContext(
            app_key=self.config.app_key,
            private_key=self.config.private_key,
            timestamp=self.config.next_timestamp(),
            method=http_method,
            request_path=request_path,
            query_params=params,
            signable_headers=headers,
            request_id=headers[HEADER_REQUEST_ID],
        )

    def sign(self, context: SigningContext) -> SignedRequest:
        """
        Sign a prepared context.

        Args:
            context: Signing context

        Returns:
            SignedRequest: Headers to send, Authorization included

        Raises:
            SigningError: If signing fails
        """
        timer = PerformanceTimer()

        builder = CanonicalRequestBuilder(context)
        canonical = builder.build()
        canonical_request = str(canonical)
        signed_headers = builder.signed_headers()
        logger.debug(f"Canonical request:\n{canonical_request}")
        logger.debug(f"Signed headers: {signed_headers}")

        signature = Signature.from_bytes(self._sign_message(canonical_request, context.private_key))
        authorization = f"{AUTH_ALGORITHM} {canonical.auth_string}/{signed_headers}/{signature}"

        headers = dict(context.signable_headers)
        headers[HEADER_SDK_VERSION] = SDK_VERSION
        headers[HEADER_SDK_LANG] = SDK_LANG
        headers[HEADER_AUTHORIZATION] = authorization

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > SLOW_SIGNING_THRESHOLD_MS:
            logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{SLOW_SIGNING_THRESHOLD_MS}ms)")

        return SignedRequest(
            headers=headers,
            authorization=authorization,
            canonical_request=canonical_request,
            signature=signature
        )

    def sign_request(
        self,
        method: Union[str, HttpMethod],
        request_path: str,
        params: Optional[Mapping[str, Any]] = None,
        content_type: Optional[str] = None
    ) -> SignedRequest:
        """
        Build the context for a request and sign it.

        Args:
            method: HTTP method
            request_path: API path
            params: Query parameters (GET) or body (POST)
            content_type: Overrides the configured content type

        Returns:
            SignedRequest: Signing result
        """
        return self.sign(self.build_context(method, request_path, params, content_type))

    def get_auth_headers(
        self,
        method: Union[str, HttpMethod],
        request_path: str,
        params: Optional[Mapping[str, Any]] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        return self.sign_request(method, request_path, params, content_type).headers

    def _sign_message(self, message: str, private_key: Union[str, bytes]) -> bytes:
        try:
            return self.config.crypto.sign(message, private_key)
        except KeyFormatError as e:
            raise SigningError(
                f"Invalid private key: {e}",
                SigningErrorCodes.INVALID_PRIVATE_KEY,
                {"original_error": str(e)}
            ) from e
        except (ValueError, TypeError) as e:
            raise SigningError(
                f"Message signing failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            ) from e


def create_signer(config: SigningConfig) -> YopRsaSigner:
    """
    Create a new YOP-RSA3 signer.

    Args:
        config: Signing configuration

    Returns:
        YopRsaSigner: Configured signer
    """
    return YopRsaSigner(config)


def sign_request(
    app_key: str,
    private_key: Union[str, bytes],
    method: Union[str, HttpMethod],
    request_path: str,
    params: Optional[Mapping[str, Any]] = None,
    content_type: str = ""
) -> Dict[str, str]:
    """
    Convenience function to sign a single request.

    Args:
        app_key: Application key
        private_key: Merchant private key
        method: HTTP method
        request_path: API path
        params: Query parameters (GET) or body (POST)
        content_type: Content type for POST requests

    Returns:
        dict: Headers to send, Authorization included
    """
    config = SigningConfig(app_key=app_key, private_key=private_key, content_type=content_type)
    return YopRsaSigner(config).get_auth_headers(method, request_path, params)
