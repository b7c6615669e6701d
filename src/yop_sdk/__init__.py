"""
YOP Python SDK
YOP-RSA3 request signing, response verification and digital envelopes
"""

from .version import __version__
from .exceptions import (
    YopSDKError,
    ValidationError,
    KeyFormatError,
    ConfigurationError,
    ResponseVerificationError,
    ServerCommunicationError,
)
from .crypto import (
    RsaKeyPair,
    RsaSha256Crypto,
    generate_rsa_key_pair,
    load_private_key,
    load_public_key,
    resolve_public_key_pem,
)
from .signing import (
    YopRsaSigner,
    create_signer,
    sign_request,
    sign_canonical_request,
    SigningConfig,
    SigningConfigBuilder,
    create_signing_config,
    SigningContext,
    SignedRequest,
    Signature,
    SigningError,
    HttpMethod,
    ContentType,
    normalize,
    canonical_params,
    canonical_query_string,
    content_sha256,
    build_canonical_headers,
    generate_request_id,
    format_timestamp,
)
from .verification import (
    EnvelopeResult,
    EnvelopeStatus,
    YopResponseVerifier,
    is_valid_rsa_result,
    is_valid_notify_result,
    extract_biz_result,
    decrypt_envelope,
    seal_envelope,
)
from .config import YopConfig, load_config
from .http_client import (
    YopClient,
    YopResponse,
    RequestsTransport,
    TransportRequest,
    TransportResponse,
    create_client,
)

__all__ = [
    '__version__',
    # Exceptions
    'YopSDKError',
    'ValidationError',
    'KeyFormatError',
    'ConfigurationError',
    'ResponseVerificationError',
    'ServerCommunicationError',
    # Keys
    'RsaKeyPair',
    'RsaSha256Crypto',
    'generate_rsa_key_pair',
    'load_private_key',
    'load_public_key',
    'resolve_public_key_pem',
    # Signing
    'YopRsaSigner',
    'create_signer',
    'sign_request',
    'sign_canonical_request',
    'SigningConfig',
    'SigningConfigBuilder',
    'create_signing_config',
    'SigningContext',
    'SignedRequest',
    'Signature',
    'SigningError',
    'HttpMethod',
    'ContentType',
    'normalize',
    'canonical_params',
    'canonical_query_string',
    'content_sha256',
    'build_canonical_headers',
    'generate_request_id',
    'format_timestamp',
    # Verification
    'EnvelopeResult',
    'EnvelopeStatus',
    'YopResponseVerifier',
    'is_valid_rsa_result',
    'is_valid_notify_result',
    'extract_biz_result',
    'decrypt_envelope',
    'seal_envelope',
    # Configuration and client
    'YopConfig',
    'load_config',
    'YopClient',
    'YopResponse',
    'RequestsTransport',
    'TransportRequest',
    'TransportResponse',
    'create_client',
]
