"""
Cryptographic primitives for the YOP Python SDK
"""

from .rsa import (
    RsaKeyPair,
    RsaSha256Crypto,
    wrap_pem,
    format_private_key,
    load_private_key,
    load_public_key,
    resolve_public_key_pem,
    generate_rsa_key_pair,
    sign_sha256,
    verify_sha256,
    rsa_decrypt_pkcs1v15,
    rsa_encrypt_pkcs1v15,
    aes_ecb_decrypt,
    aes_ecb_encrypt,
    encode_url_safe_signature,
    restore_signature,
    b64decode_lenient,
    urlsafe_b64decode_lenient,
)

__all__ = [
    'RsaKeyPair',
    'RsaSha256Crypto',
    'wrap_pem',
    'format_private_key',
    'load_private_key',
    'load_public_key',
    'resolve_public_key_pem',
    'generate_rsa_key_pair',
    'sign_sha256',
    'verify_sha256',
    'rsa_decrypt_pkcs1v15',
    'rsa_encrypt_pkcs1v15',
    'aes_ecb_decrypt',
    'aes_ecb_encrypt',
    'encode_url_safe_signature',
    'restore_signature',
    'b64decode_lenient',
    'urlsafe_b64decode_lenient',
]
