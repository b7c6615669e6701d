"""
Utility functions for request signing

This module provides the byte-level percent-encoder, canonical parameter
and query-string construction, content digest calculation, timestamp
formatting and request id generation used by the YOP-RSA3 signer.
"""

import time
import json
import hashlib
import secrets
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from .types import (
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    Clock,
    RandomSource,
)

logger = logging.getLogger(__name__)

UNRESERVED_BYTES = frozenset(
    b"0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz._~-"
)
REQUEST_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
REQUEST_ID_RANDOM_LENGTH = 24
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    # Sequences render as comma-joined items, None items as empty strings
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _stringify(item) for item in value)
    return str(value)


def normalize(value: Any) -> str:
    """
    Percent-encode a value the way the platform canonicalizes it.

    Unreserved bytes ``[0-9A-Za-z._~-]`` pass through, an already encoded
    ``%7E`` collapses back to ``~`` and every other UTF-8 byte becomes an
    uppercase ``%XX`` escape (so ``' '`` -> ``%20``, ``'+'`` -> ``%2B``,
    ``'*'`` -> ``%2A``).

    Args:
        value: Any value; None encodes to an empty string

    Returns:
        str: Encoded string
    """
    if value is None:
        return ""

    data = _stringify(value).encode("utf-8")
    out = []
    i = 0
    length = len(data)
    while i < length:
        byte = data[i]
        if byte in UNRESERVED_BYTES:
            out.append(chr(byte))
        elif byte == 0x25 and data[i + 1:i + 3] in (b"7E", b"7e"):
            out.append("~")
            i += 2
        else:
            out.append(f"%{byte:02X}")
        i += 1
    return "".join(out)


def canonical_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Build the canonical ``key=value&...`` string of a parameter map.

    Keys and values are trimmed before encoding, empty keys are skipped
    and falsy values encode as empty strings. List values are joined with
    commas; mapping values are not supported. The encoded ``key=value`` tokens are
    sorted as whole strings.

    Args:
        params: Parameter mapping

    Returns:
        str: Canonical parameter string, empty for no parameters
    """
    if not params:
        return ""

    tokens = []
    for key, value in params.items():
        if not key:
            continue
        text = _stringify(value).strip() if value else ""
        tokens.append(f"{normalize(str(key).strip())}={normalize(text)}")

    tokens.sort()
    return "&".join(tokens)


def _is_post(method: Union[str, HttpMethod]) -> bool:
    if isinstance(method, HttpMethod):
        method = method.value
    return str(method).upper() == HttpMethod.POST.value


def canonical_query_string(params: Optional[Mapping[str, Any]], method: Union[str, HttpMethod]) -> str:
    """Canonical query string, always empty for POST requests."""
    if _is_post(method):
        return ""
    if not params:
        return ""
    return canonical_params(params)


def sort_json_keys(value: Any) -> Any:
    """
    Recursively sort the keys of nested dictionaries.

    Lists are returned as-is; dictionaries inside lists keep their order.
    """
    if isinstance(value, dict):
        return {key: sort_json_keys(value[key]) for key in sorted(value)}
    return value


def canonical_json(value: Any) -> str:
    """Compact, key-sorted JSON text used for the digest and the request body."""
    return json.dumps(sort_json_keys(value), ensure_ascii=False, separators=(",", ":"))


def content_sha256(
    params: Optional[Mapping[str, Any]],
    content_type: Optional[str],
    method: Union[str, HttpMethod],
    digest: Optional[Callable[[str], str]] = None
) -> str:
    """
    Calculate the ``x-yop-content-sha256`` header value.

    JSON POST bodies hash their key-sorted JSON text, everything else
    hashes the canonical parameter string (or the empty string).

    Args:
        params: Request parameters or JSON body
        content_type: Configured content type
        method: HTTP method
        digest: Hex digest function over the text, SHA-256 by default

    Returns:
        str: Lowercase hex SHA-256 digest

    Raises:
        SigningError: If the body cannot be serialised
    """
    try:
        if content_type and "application/json" in content_type and _is_post(method):
            text = canonical_json(params if params is not None else {})
        elif params:
            text = canonical_params(params)
        else:
            text = ""
        if digest is not None:
            return digest(text)
    except (TypeError, ValueError) as e:
        raise SigningError(
            f"Content digest calculation failed: {e}",
            SigningErrorCodes.DIGEST_CALCULATION_FAILED,
            {"content_type": content_type, "original_error": str(e)}
        ) from e

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def format_timestamp(moment: datetime) -> str:
    """
    Format a wall-clock time as ``yyyy-MM-ddThh:mm:ssZ``.

    The local date and time fields are used as-is and the ``Z`` is appended
    without converting to UTC.
    """
    return moment.strftime(TIMESTAMP_FORMAT)


class SystemClock:
    """Clock backed by the local wall clock"""

    def now(self) -> datetime:
        return datetime.now()


class SystemRandomSource:
    """Random source backed by the secrets module"""

    def choice(self, alphabet: str) -> str:
        return secrets.choice(alphabet)


def generate_timestamp(clock: Optional[Clock] = None) -> str:
    """Current wire timestamp from the given clock."""
    return format_timestamp((clock or SystemClock()).now())


def generate_request_id(
    clock: Optional[Clock] = None,
    random_source: Optional[RandomSource] = None
) -> str:
    """
    Generate a request id for ``x-yop-request-id``.

    24 random characters are concatenated with the epoch milliseconds of
    the clock, MD5-hashed and formatted in ``8-4-4-4-12`` groups.

    Args:
        clock: Time source (local wall clock by default)
        random_source: Character source (secrets module by default)

    Returns:
        str: UUID-shaped request id
    """
    clock = clock or SystemClock()
    random_source = random_source or SystemRandomSource()

    prefix = "".join(random_source.choice(REQUEST_ID_ALPHABET) for _ in range(REQUEST_ID_RANDOM_LENGTH))
    millis = int(clock.now().timestamp() * 1000)
    digest = hashlib.md5(f"{prefix}{millis}".encode("ascii"), usedforsecurity=False).hexdigest()
    return f"{digest[0:8]}-{digest[8:12]}-{digest[12:16]}-{digest[16:20]}-{digest[20:32]}"


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def reset(self) -> None:
        self.start_time = time.perf_counter()
