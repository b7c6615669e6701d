"""
Canonical request construction for YOP-RSA3 signatures

This module selects and encodes the signed headers and assembles the
newline-joined canonical request that the signer hashes and signs.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from .types import (
    SigningContext,
    SigningError,
    SigningErrorCodes,
    AUTH_VERSION,
    EXPIRY_SECONDS,
    HEADER_CONTENT_TYPE,
)
from .utils import normalize, canonical_query_string

SIGNED_HEADER_PREFIX = "x-yop-"


@dataclass(frozen=True)
class CanonicalHeaders:
    """
    Encoded header block of a canonical request

    Attributes:
        canonical_header_string: ``name:value`` lines joined by newlines
        signed_headers_string: Sorted lowercase header names joined by ';'
    """
    canonical_header_string: str
    signed_headers_string: str


def is_signed_header(name: str) -> bool:
    """True for ``content-type`` and every ``x-yop-*`` header (case-insensitive)."""
    lower = name.lower()
    return lower == HEADER_CONTENT_TYPE or lower.startswith(SIGNED_HEADER_PREFIX)


def build_canonical_headers(headers: Optional[Mapping[str, Optional[str]]]) -> CanonicalHeaders:
    """
    Select, sort and encode the headers covered by the signature.

    Args:
        headers: Candidate headers; entries with a None value are dropped

    Returns:
        CanonicalHeaders: Header block and signed header list
    """
    selected = {}
    for name, value in (headers or {}).items():
        if value is None or not is_signed_header(name):
            continue
        selected[name.lower()] = str(value)

    names = sorted(selected)
    lines = [f"{normalize(name)}:{normalize(selected[name].strip())}" for name in names]
    return CanonicalHeaders(
        canonical_header_string="\n".join(lines),
        signed_headers_string=";".join(names),
    )


def build_auth_string(app_key: str, timestamp: str, expiry_seconds: int = EXPIRY_SECONDS) -> str:
    return f"{AUTH_VERSION}/{app_key}/{timestamp}/{expiry_seconds}"


@dataclass(frozen=True)
class CanonicalRequest:
    """
    The exact text that gets signed

    Attributes:
        auth_string: ``yop-auth-v3/<appKey>/<timestamp>/1800``
        method: Upper-case HTTP method
        path: Request path
        query_string: Canonical query string (empty for POST)
        header_string: Canonical header block
    """
    auth_string: str
    method: str
    path: str
    query_string: str
    header_string: str

    def __post_init__(self):
        if self.method == "POST" and self.query_string:
            raise ValueError("POST requests carry an empty canonical query string")

    def __str__(self) -> str:
        return "\n".join((self.auth_string, self.method, self.path, self.query_string, self.header_string))


class CanonicalRequestBuilder:
    """
    Canonical request builder for YOP-RSA3 signatures
    """

    def __init__(self, context: SigningContext):
        self.context = context

    def build(self) -> CanonicalRequest:
        """
        Build the canonical request for the context.

        Returns:
            CanonicalRequest: Immutable canonical request

        Raises:
            SigningError: If the request cannot be canonicalized
        """
        ctx = self.context
        try:
            method = ctx.method.value
            headers = build_canonical_headers(ctx.signable_headers)
            return CanonicalRequest(
                auth_string=build_auth_string(ctx.app_key, ctx.timestamp, ctx.expiry_seconds),
                method=method,
                path=ctx.request_path,
                query_string=canonical_query_string(ctx.query_params, method),
                header_string=headers.canonical_header_string,
            )
        except (TypeError, ValueError, UnicodeError) as e:
            raise SigningError(
                f"Canonical request construction failed: {e}",
                SigningErrorCodes.CANONICAL_REQUEST_FAILED,
                {"path": ctx.request_path, "original_error": str(e)}
            ) from e

    def signed_headers(self) -> str:
        return build_canonical_headers(self.context.signable_headers).signed_headers_string


def build_canonical_request(context: SigningContext) -> CanonicalRequest:
    """
    Convenience function to build a canonical request.

    Args:
        context: Signing context

    Returns:
        CanonicalRequest: Canonical request
    """
    return CanonicalRequestBuilder(context).build()
