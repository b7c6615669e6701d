"""
Digital envelope handling for merchant notifications

A digital envelope is ``<key>$<payload>``: ``key`` is a random AES-128 key
encrypted with the merchant RSA public key (PKCS#1 v1.5), ``payload`` is
``<business data>$<platform signature>`` encrypted with that key in ECB
mode. Both segments travel as URL-safe base64 without padding.
"""

import logging
from typing import Optional, Union

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from ..crypto.rsa import (
    KeyMaterial,
    PublicKeyMaterial,
    aes_ecb_decrypt,
    aes_ecb_encrypt,
    encode_url_safe_signature,
    generate_aes_key,
    rsa_decrypt_pkcs1v15,
    rsa_encrypt_pkcs1v15,
    sign_sha256,
    urlsafe_b64decode_lenient,
    urlsafe_b64encode_unpadded,
)
from ..signing.types import RequestCrypto
from .types import (
    ENVELOPE_SEPARATOR,
    MESSAGE_EMPTY_CONTENT,
    MESSAGE_EMPTY_PRIVATE_KEY,
    MESSAGE_EMPTY_PUBLIC_KEY,
    MESSAGE_SIGNATURE_INVALID,
    EnvelopeMessage,
    EnvelopeResult,
)
from .verifier import is_valid_notify_result

logger = logging.getLogger(__name__)


def split_signed_payload(plaintext: str):
    """Split ``<payload>$<signature>`` on the last separator."""
    tokens = plaintext.split(ENVELOPE_SEPARATOR)
    sign = tokens.pop()
    return ENVELOPE_SEPARATOR.join(tokens), sign


def decrypt_envelope(
    content: Optional[str],
    merchant_private_key: Optional[KeyMaterial],
    platform_public_key: Optional[PublicKeyMaterial],
    crypto: Optional[RequestCrypto] = None
) -> EnvelopeResult:
    """
    Open a digital envelope and verify the embedded platform signature.

    Args:
        content: Envelope text ``<key>$<payload>``
        merchant_private_key: Merchant RSA private key, PEM or raw base64
        platform_public_key: Platform public key or certificate
        crypto: Optional signature primitives for the embedded signature

    Returns:
        EnvelopeResult: success with the business payload, or failed with
        a message; never raises
    """
    if not content:
        return EnvelopeResult.failed(MESSAGE_EMPTY_CONTENT)
    if not merchant_private_key:
        return EnvelopeResult.failed(MESSAGE_EMPTY_PRIVATE_KEY)
    if not platform_public_key:
        return EnvelopeResult.failed(MESSAGE_EMPTY_PUBLIC_KEY)

    try:
        message = EnvelopeMessage.parse(content)
        aes_key = rsa_decrypt_pkcs1v15(
            urlsafe_b64decode_lenient(message.encrypted_key_segment),
            merchant_private_key
        )
        plaintext = aes_ecb_decrypt(
            urlsafe_b64decode_lenient(message.encrypted_payload_segment),
            aes_key
        ).decode("utf-8")
        payload, sign = split_signed_payload(plaintext)
        valid = is_valid_notify_result(payload, sign, platform_public_key, crypto)
    except Exception as e:
        logger.error(f"Error during digital envelope handling: {e}")
        return EnvelopeResult.failed(str(e))

    if not valid:
        return EnvelopeResult.failed(MESSAGE_SIGNATURE_INVALID)

    return EnvelopeResult.success(payload)


def seal_envelope(
    payload: str,
    merchant_public_key: PublicKeyMaterial,
    platform_private_key: Union[KeyMaterial, RSAPrivateKey]
) -> str:
    """
    Build a digital envelope the way the platform sends notifications.

    Args:
        payload: Business payload text
        merchant_public_key: Merchant public key (recipient)
        platform_private_key: Key that signs the payload

    Returns:
        str: Envelope text ``<key>$<payload>``
    """
    sign = encode_url_safe_signature(sign_sha256(payload, platform_private_key))
    aes_key = generate_aes_key()
    encrypted_payload = aes_ecb_encrypt(f"{payload}{ENVELOPE_SEPARATOR}{sign}".encode("utf-8"), aes_key)
    encrypted_key = rsa_encrypt_pkcs1v15(aes_key, merchant_public_key)
    return str(EnvelopeMessage(
        encrypted_key_segment=urlsafe_b64encode_unpadded(encrypted_key),
        encrypted_payload_segment=urlsafe_b64encode_unpadded(encrypted_payload),
    ))
