"""
YOP Python SDK - Request Signing Module

YOP-RSA3 request signing: percent-encoding, canonical parameters and
headers, content digests and the RSA-SHA256 Authorization header.
"""

from .types import (
    SigningContext,
    SignedRequest,
    Signature,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    ContentType,
    Clock,
    RandomSource,
    RequestCrypto,
)

from .yop_signer import (
    YopRsaSigner,
    create_signer,
    sign_request,
    sign_canonical_request,
)

from .signing_config import (
    SigningConfig,
    SigningConfigBuilder,
    create_signing_config,
    validate_signing_config,
)

from .canonical_message import (
    CanonicalHeaders,
    CanonicalRequest,
    build_canonical_headers,
    build_canonical_request,
    build_auth_string,
)

from .utils import (
    normalize,
    canonical_params,
    canonical_query_string,
    content_sha256,
    sort_json_keys,
    canonical_json,
    format_timestamp,
    generate_timestamp,
    generate_request_id,
    SystemClock,
    SystemRandomSource,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'YopRsaSigner',
    'create_signer',
    'sign_request',
    'sign_canonical_request',
    # Types
    'SigningContext',
    'SignedRequest',
    'Signature',
    'SigningError',
    'SigningErrorCodes',
    'HttpMethod',
    'ContentType',
    'Clock',
    'RandomSource',
    'RequestCrypto',
    # Configuration
    'SigningConfig',
    'SigningConfigBuilder',
    'create_signing_config',
    'validate_signing_config',
    # Canonical request
    'CanonicalHeaders',
    'CanonicalRequest',
    'build_canonical_headers',
    'build_canonical_request',
    'build_auth_string',
    # Utilities
    'normalize',
    'canonical_params',
    'canonical_query_string',
    'content_sha256',
    'sort_json_keys',
    'canonical_json',
    'format_timestamp',
    'generate_timestamp',
    'generate_request_id',
    'SystemClock',
    'SystemRandomSource',
]
