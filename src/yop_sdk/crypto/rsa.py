"""
RSA and AES primitives for the YOP Python SDK

This module wraps the cryptography package for everything the YOP-RSA3 scheme
needs: loading merchant private keys and platform public keys from the formats
the platform hands out (PEM, raw base64, X.509 certificates), RSA-SHA256
signatures, PKCS#1 v1.5 key transport and AES-128-ECB payload encryption.
"""

import re
import base64
import binascii
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, padding as symmetric_padding, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import KeyFormatError

logger = logging.getLogger(__name__)

PEM_LINE_LENGTH = 64
AES_KEY_LENGTH = 16
SIGNATURE_SUFFIX = "$SHA256"

PRIVATE_KEY_LABEL = "PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"
CERTIFICATE_LABEL = "CERTIFICATE"

PUBLIC_KEY_BEGIN = "-----BEGIN PUBLIC KEY-----"
PUBLIC_KEY_END = "-----END PUBLIC KEY-----"
CERTIFICATE_BEGIN = "-----BEGIN CERTIFICATE-----"
CERTIFICATE_END = "-----END CERTIFICATE-----"

KeyMaterial = Union[str, bytes, bytearray]
PublicKeyMaterial = Union[str, bytes, bytearray, RSAPublicKey]


@dataclass
class RsaKeyPair:
    """
    PEM-encoded RSA key pair.

    Attributes:
        private_key: PKCS#8 private key PEM text
        public_key: SubjectPublicKeyInfo public key PEM text
    """
    private_key: str
    public_key: str

    def __post_init__(self):
        if "PRIVATE KEY" not in self.private_key:
            raise KeyFormatError("Private key must be PEM text", "INVALID_PRIVATE_KEY_TYPE")
        if PUBLIC_KEY_BEGIN not in self.public_key:
            raise KeyFormatError("Public key must be PEM text", "INVALID_PUBLIC_KEY_TYPE")


def _to_text(key_material: KeyMaterial) -> str:
    if isinstance(key_material, (bytes, bytearray)):
        return bytes(key_material).decode("utf-8")
    return str(key_material)


def wrap_pem(body: str, label: str) -> str:
    """
    Wrap base64 key text into a PEM block with 64-character lines.

    Args:
        body: Base64 text, whitespace is ignored
        label: PEM label, e.g. "PUBLIC KEY"

    Returns:
        str: PEM block
    """
    clean = re.sub(r"\s+", "", body)
    lines = [clean[i:i + PEM_LINE_LENGTH] for i in range(0, len(clean), PEM_LINE_LENGTH)]
    return f"-----BEGIN {label}-----\n" + "\n".join(lines) + f"\n-----END {label}-----"


def format_private_key(key_material: KeyMaterial) -> str:
    """
    Return private key PEM text, wrapping raw base64 PKCS#8 when needed.

    Args:
        key_material: PEM text or raw base64 private key

    Returns:
        str: PEM private key text

    Raises:
        KeyFormatError: If the key material is empty
    """
    text = _to_text(key_material).strip()
    if not text:
        raise KeyFormatError("Private key is empty", "EMPTY_PRIVATE_KEY")
    if "-----BEGIN" in text:
        return text
    return wrap_pem(text, PRIVATE_KEY_LABEL)


def load_private_key(key_material: KeyMaterial) -> RSAPrivateKey:
    """
    Load an RSA private key from PEM text or raw base64.

    Args:
        key_material: PKCS#8 / PKCS#1 PEM text or raw base64 PKCS#8

    Returns:
        RSAPrivateKey: Loaded private key

    Raises:
        KeyFormatError: If the key cannot be parsed or is not an RSA key
    """
    pem = format_private_key(key_material)
    try:
        private_key = serialization.load_pem_private_key(pem.encode("ascii"), password=None)
    except (ValueError, TypeError, UnicodeEncodeError) as e:
        raise KeyFormatError(f"Invalid RSA private key: {e}", "INVALID_PRIVATE_KEY") from e

    if not isinstance(private_key, RSAPrivateKey):
        raise KeyFormatError("Private key is not an RSA key", "UNSUPPORTED_KEY_TYPE")
    return private_key


def _certificate_public_key_pem(certificate: x509.Certificate) -> str:
    public_key = certificate.public_key()
    if not isinstance(public_key, RSAPublicKey):
        raise KeyFormatError("Certificate does not carry an RSA public key", "UNSUPPORTED_KEY_TYPE")
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii").strip()


def _public_key_pem(public_key: RSAPublicKey) -> str:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii").strip()


def resolve_public_key_pem(key_material: PublicKeyMaterial) -> str:
    """
    Resolve platform public key material into "PUBLIC KEY" PEM text.

    Accepted inputs, in order of detection:
        - a loaded RSAPublicKey
        - DER-encoded X.509 certificate bytes
        - a CERTIFICATE PEM block
        - a PUBLIC KEY PEM block (retried as a certificate if it holds one)
        - raw base64 SubjectPublicKeyInfo, re-wrapped with 64-character lines

    Args:
        key_material: Public key or certificate in any accepted form

    Returns:
        str: PEM public key text

    Raises:
        KeyFormatError: If no public key can be extracted
    """
    if isinstance(key_material, RSAPublicKey):
        return _public_key_pem(key_material)

    if isinstance(key_material, (bytes, bytearray)):
        data = bytes(key_material)
        if not data.lstrip().startswith(b"-----BEGIN"):
            try:
                return _certificate_public_key_pem(x509.load_der_x509_certificate(data))
            except ValueError:
                pass
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise KeyFormatError(f"Binary key material is not a DER certificate: {e}", "INVALID_CERTIFICATE") from e
    else:
        text = str(key_material)

    text = text.strip()
    if not text:
        raise KeyFormatError("Public key is empty", "EMPTY_PUBLIC_KEY")

    if text.startswith(CERTIFICATE_BEGIN) and text.endswith(CERTIFICATE_END):
        try:
            certificate = x509.load_pem_x509_certificate(text.encode("ascii"))
        except ValueError as e:
            raise KeyFormatError(f"Invalid certificate format: {e}", "INVALID_CERTIFICATE") from e
        return _certificate_public_key_pem(certificate)

    if text.startswith(PUBLIC_KEY_BEGIN) and text.endswith(PUBLIC_KEY_END):
        try:
            serialization.load_pem_public_key(text.encode("ascii"))
            return text
        except UnsupportedAlgorithm as e:
            raise KeyFormatError(f"Unsupported public key algorithm: {e}", "UNSUPPORTED_KEY_TYPE") from e
        except ValueError as direct_error:
            logger.warning("PUBLIC KEY PEM block failed to parse, retrying it as a certificate")
            cert_text = text.replace(PUBLIC_KEY_BEGIN, CERTIFICATE_BEGIN).replace(PUBLIC_KEY_END, CERTIFICATE_END)
            try:
                certificate = x509.load_pem_x509_certificate(cert_text.encode("ascii"))
            except ValueError as cert_error:
                raise KeyFormatError(
                    f"Invalid PUBLIC KEY PEM format: {direct_error}; certificate parsing also failed: {cert_error}",
                    "INVALID_PUBLIC_KEY"
                ) from cert_error
            return _certificate_public_key_pem(certificate)

    body = re.sub(r"\s+", "", text)
    try:
        der = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Public key is neither PEM nor base64: {e}", "INVALID_PUBLIC_KEY") from e

    try:
        serialization.load_der_public_key(der)
    except UnsupportedAlgorithm as e:
        raise KeyFormatError(f"Unsupported public key algorithm: {e}", "UNSUPPORTED_KEY_TYPE") from e
    except ValueError:
        # Raw base64 of a DER certificate rather than an SPKI structure
        try:
            return _certificate_public_key_pem(x509.load_der_x509_certificate(der))
        except ValueError as e:
            raise KeyFormatError(f"Failed to load raw public key: {e}", "INVALID_PUBLIC_KEY") from e
    return wrap_pem(body, PUBLIC_KEY_LABEL)


def load_public_key(key_material: PublicKeyMaterial) -> RSAPublicKey:
    """
    Load the platform RSA public key from any accepted form.

    Args:
        key_material: Public key, certificate or raw base64 SPKI

    Returns:
        RSAPublicKey: Loaded public key

    Raises:
        KeyFormatError: If the key cannot be loaded or is not RSA
    """
    if isinstance(key_material, RSAPublicKey):
        return key_material

    pem = resolve_public_key_pem(key_material)
    try:
        public_key = serialization.load_pem_public_key(pem.encode("ascii"))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Invalid RSA public key: {e}", "INVALID_PUBLIC_KEY") from e

    if not isinstance(public_key, RSAPublicKey):
        raise KeyFormatError("Public key is not an RSA key", "UNSUPPORTED_KEY_TYPE")
    return public_key


def generate_rsa_key_pair(key_size: int = 2048) -> RsaKeyPair:
    """
    Generate an RSA key pair as PEM text.

    Args:
        key_size: Modulus size in bits

    Returns:
        RsaKeyPair: PKCS#8 private key and SPKI public key
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("ascii")
    return RsaKeyPair(private_key=private_pem, public_key=_public_key_pem(private_key.public_key()))


def sign_sha256(message: Union[str, bytes], private_key: Union[KeyMaterial, RSAPrivateKey]) -> bytes:
    """
    Sign a message with RSASSA-PKCS1-v1_5 and SHA-256.

    Args:
        message: Message to sign (strings are UTF-8 encoded)
        private_key: Private key material or loaded key

    Returns:
        bytes: Raw signature
    """
    if isinstance(message, str):
        message = message.encode("utf-8")
    if not isinstance(private_key, RSAPrivateKey):
        private_key = load_private_key(private_key)
    return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())


def verify_sha256(message: Union[str, bytes], signature: bytes, public_key: PublicKeyMaterial) -> bool:
    """
    Verify an RSASSA-PKCS1-v1_5 / SHA-256 signature.

    Args:
        message: Signed message (strings are UTF-8 encoded)
        signature: Raw signature bytes
        public_key: Public key material or loaded key

    Returns:
        bool: True if the signature matches

    Raises:
        KeyFormatError: If the public key cannot be loaded
    """
    if isinstance(message, str):
        message = message.encode("utf-8")
    key = load_public_key(public_key)
    try:
        key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        return True
    except InvalidSignature:
        return False


def _pad_base64(data: str) -> str:
    return data + "=" * (-len(data) % 4)


def b64decode_lenient(data: str) -> bytes:
    """Decode standard base64 whose trailing '=' padding may be missing."""
    return base64.b64decode(_pad_base64(data.strip()))


def urlsafe_b64decode_lenient(data: str) -> bytes:
    """Decode URL-safe base64 whose trailing '=' padding may be missing."""
    return base64.urlsafe_b64decode(_pad_base64(data.strip()))


def urlsafe_b64encode_unpadded(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def encode_url_safe_signature(signature: bytes) -> str:
    """
    Encode a raw signature the way the platform transmits it.

    Standard base64 with '+' -> '-', '/' -> '_' and the '=' padding removed.
    The algorithm suffix is not appended here.
    """
    return urlsafe_b64encode_unpadded(signature)


def restore_signature(sign: str) -> str:
    """
    Turn a transmitted signature back into standard base64 text.

    Removes the "$SHA256" suffix and maps '-' -> '+', '_' -> '/'.
    Padding is not added back.
    """
    return sign.replace(SIGNATURE_SUFFIX, "").replace("-", "+").replace("_", "/")


def rsa_decrypt_pkcs1v15(ciphertext: bytes, private_key: Union[KeyMaterial, RSAPrivateKey]) -> bytes:
    """Decrypt an RSA PKCS#1 v1.5 block (not OAEP)."""
    if not isinstance(private_key, RSAPrivateKey):
        private_key = load_private_key(private_key)
    return private_key.decrypt(ciphertext, padding.PKCS1v15())


def rsa_encrypt_pkcs1v15(plaintext: bytes, public_key: PublicKeyMaterial) -> bytes:
    """Encrypt a short block with RSA PKCS#1 v1.5 padding."""
    return load_public_key(public_key).encrypt(plaintext, padding.PKCS1v15())


def _check_aes_key(key: bytes) -> None:
    if len(key) != AES_KEY_LENGTH:
        raise ValueError(f"Invalid AES-128 key length: {len(key)} bytes")


def aes_ecb_decrypt(ciphertext: bytes, key: bytes) -> bytes:
    """
    Decrypt AES-128-ECB ciphertext and strip PKCS#7 padding.

    Raises:
        ValueError: On a wrong key length, a partial block or bad padding
    """
    _check_aes_key(key)
    decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = symmetric_padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def aes_ecb_encrypt(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt with AES-128-ECB and PKCS#7 padding."""
    _check_aes_key(key)
    padder = symmetric_padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def generate_aes_key() -> bytes:
    return secrets.token_bytes(AES_KEY_LENGTH)


class RsaSha256Crypto:
    """
    Default RequestCrypto implementation: RSA-SHA256 signatures and SHA-256 digests.

    Keys are loaded on every call and never cached.
    """

    def sign(self, message: str, private_key: KeyMaterial) -> bytes:
        return sign_sha256(message, private_key)

    def verify(self, message: str, signature: bytes, public_key: PublicKeyMaterial) -> bool:
        return verify_sha256(message, signature, public_key)

    def digest(self, data: str) -> str:
        return hashlib.sha256(data.encode("utf-8")).hexdigest()
