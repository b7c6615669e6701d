"""
Response signature verification for the YOP open platform

The platform signs the ``result`` object of its JSON responses and sends the
signature in the ``x-yop-sign`` header. The signed text is recovered from the
raw body with a regular expression rather than by re-serialising parsed JSON,
so the bytes verified are exactly the bytes the platform emitted.
"""

import re
import json
import logging
from typing import Optional

from ..crypto.rsa import (
    PublicKeyMaterial,
    RsaSha256Crypto,
    b64decode_lenient,
    restore_signature,
)
from ..signing.types import RequestCrypto

logger = logging.getLogger(__name__)

RESULT_PATTERN = re.compile(r'"result"\s*:\s*({.*}),\s*"ts"', re.DOTALL)
WHITESPACE_PATTERN = re.compile(r"\s+")

STATE_END_TAG = "</state>"


def extract_signed_result(data: Optional[str]) -> str:
    """
    Extract the signed ``result`` object text from a raw response body.

    Returns:
        str: Matched object text, or an empty string when nothing matches
    """
    match = RESULT_PATTERN.search(data or "")
    return match.group(1) if match else ""


def _verify(message: str, sign: str, public_key: PublicKeyMaterial, crypto: Optional[RequestCrypto]) -> bool:
    crypto = crypto or RsaSha256Crypto()
    signature = b64decode_lenient(restore_signature(sign))
    return crypto.verify(message, signature, public_key)


def is_valid_rsa_result(
    data: Optional[str],
    sign: Optional[str],
    public_key: Optional[PublicKeyMaterial],
    crypto: Optional[RequestCrypto] = None
) -> bool:
    """
    Verify the ``x-yop-sign`` signature of a raw response body.

    The ``result`` object is extracted from the body, every whitespace run
    in it is removed and the remainder is verified with RSA-SHA256.

    Args:
        data: Raw response body text
        sign: ``x-yop-sign`` header value (URL-safe, optional ``$SHA256``)
        public_key: Platform public key, certificate or raw base64 SPKI
        crypto: Optional signature primitives

    Returns:
        bool: True if the signature is valid; never raises
    """
    if not sign or not public_key:
        logger.warning("Response verification skipped: missing signature or public key")
        return False

    try:
        signed_text = WHITESPACE_PATTERN.sub("", extract_signed_result(data))
        valid = _verify(signed_text, sign, public_key, crypto)
    except Exception as e:
        logger.error(f"Error during RSA result verification: {e}")
        return False

    if not valid:
        logger.warning("RSA result verification failed")
    return valid


def is_valid_notify_result(
    result: Optional[str],
    sign: Optional[str],
    public_key: Optional[PublicKeyMaterial],
    crypto: Optional[RequestCrypto] = None
) -> bool:
    """
    Verify a notification payload exactly as received (no trimming).

    Returns:
        bool: True if the signature is valid; never raises
    """
    if not sign or not public_key:
        return False

    try:
        valid = _verify(result or "", sign, public_key, crypto)
    except Exception as e:
        logger.error(f"Error during notify result verification: {e}")
        return False

    if not valid:
        logger.warning("Notify result verification failed")
    return valid


def extract_biz_result(content: str, fmt: Optional[str] = None) -> str:
    """
    Cut the business result out of a signed response body.

    Args:
        content: Raw response body
        fmt: None returns the content unchanged, "json" returns the
            ``result`` object, anything else returns the text between
            ``</state>`` and the trailing ``,"ts"``

    Returns:
        str: Extracted text, empty when the anchors are missing
    """
    if not fmt:
        return content

    if fmt == "json":
        start = content.find('"result"')
        if start == -1:
            return ""
        open_brace = content.find("{", start + len('"result"'))
        if open_brace == -1:
            return ""
        close = content.rfind('},"ts"')
        if close == -1 or close < open_brace:
            return ""
        result = content[open_brace:close + 1]
        try:
            json.loads(result)
        except ValueError:
            logger.error("Extracted result is not valid JSON")
            return ""
        return result

    start = content.find(STATE_END_TAG)
    if start == -1:
        return ""
    start += len(STATE_END_TAG)
    end = content.rfind(',"ts"')
    if end == -1 or end <= start:
        return ""
    return content[start:end].strip()


class YopResponseVerifier:
    """
    Verifier bound to one platform public key

    Key material is resolved on each call and is not cached.
    """

    def __init__(self, public_key: PublicKeyMaterial, crypto: Optional[RequestCrypto] = None):
        if not public_key:
            raise ValueError("Platform public key cannot be empty")
        self.public_key = public_key
        self.crypto = crypto or RsaSha256Crypto()

    def verify_response(self, data: Optional[str], sign: Optional[str]) -> bool:
        return is_valid_rsa_result(data, sign, self.public_key, self.crypto)

    def verify_notification(self, result: Optional[str], sign: Optional[str]) -> bool:
        return is_valid_notify_result(result, sign, self.public_key, self.crypto)
