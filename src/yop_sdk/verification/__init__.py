"""
YOP Python SDK - Verification Module

Response signature verification and digital envelope (notification)
decryption for the YOP open platform.
"""

from .types import (
    EnvelopeStatus,
    EnvelopeResult,
    EnvelopeMessage,
    MESSAGE_EMPTY_CONTENT,
    MESSAGE_EMPTY_PRIVATE_KEY,
    MESSAGE_EMPTY_PUBLIC_KEY,
    MESSAGE_SIGNATURE_INVALID,
)

from .verifier import (
    YopResponseVerifier,
    is_valid_rsa_result,
    is_valid_notify_result,
    extract_signed_result,
    extract_biz_result,
)

from .envelope import (
    decrypt_envelope,
    seal_envelope,
)

__all__ = [
    # Types
    'EnvelopeStatus',
    'EnvelopeResult',
    'EnvelopeMessage',
    'MESSAGE_EMPTY_CONTENT',
    'MESSAGE_EMPTY_PRIVATE_KEY',
    'MESSAGE_EMPTY_PUBLIC_KEY',
    'MESSAGE_SIGNATURE_INVALID',
    # Response verification
    'YopResponseVerifier',
    'is_valid_rsa_result',
    'is_valid_notify_result',
    'extract_signed_result',
    'extract_biz_result',
    # Digital envelope
    'decrypt_envelope',
    'seal_envelope',
]
