"""
Configuration management for request signing

This module provides the signer configuration, a fluent builder for it and
validation of the injected capabilities.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .types import (
    SigningError,
    SigningErrorCodes,
    Clock,
    RandomSource,
    RequestCrypto,
    RequestIdGenerator,
    TimestampGenerator,
)
from .utils import (
    SystemClock,
    SystemRandomSource,
    generate_request_id,
    generate_timestamp,
)
from ..crypto.rsa import RsaSha256Crypto, load_private_key
from ..exceptions import KeyFormatError


@dataclass
class SigningConfig:
    """
    Configuration for request signing

    Attributes:
        app_key: Application key issued by the platform
        private_key: Merchant RSA private key, PEM or raw base64
        content_type: Default content type for POST requests ('' for none)
        clock: Time source for timestamps and request ids
        random_source: Character source for request ids
        crypto: Signature/digest primitives
        request_id_generator: Optional override producing request ids
        timestamp_generator: Optional override producing wire timestamps
    """
    app_key: str
    private_key: Union[str, bytes]
    content_type: str = ""
    clock: Optional[Clock] = None
    random_source: Optional[RandomSource] = None
    crypto: Optional[RequestCrypto] = None
    request_id_generator: Optional[RequestIdGenerator] = None
    timestamp_generator: Optional[TimestampGenerator] = None

    def __post_init__(self):
        """Validate signing configuration"""
        if not self.app_key:
            raise ValueError("App key cannot be empty")

        if not self.private_key:
            raise ValueError("Private key cannot be empty")

        if self.content_type is None:
            self.content_type = ""

        if self.clock is None:
            self.clock = SystemClock()

        if self.random_source is None:
            self.random_source = SystemRandomSource()

        if self.crypto is None:
            self.crypto = RsaSha256Crypto()

    def next_request_id(self) -> str:
        if self.request_id_generator:
            return self.request_id_generator()
        return generate_request_id(self.clock, self.random_source)

    def next_timestamp(self) -> str:
        if self.timestamp_generator:
            return self.timestamp_generator()
        return generate_timestamp(self.clock)


class SigningConfigBuilder:
    """
    Builder for creating signing configurations with fluent API
    """

    def __init__(self):
        self._app_key: Optional[str] = None
        self._private_key: Optional[Union[str, bytes]] = None
        self._content_type: str = ""
        self._clock: Optional[Clock] = None
        self._random_source: Optional[RandomSource] = None
        self._crypto: Optional[RequestCrypto] = None
        self._request_id_generator: Optional[RequestIdGenerator] = None
        self._timestamp_generator: Optional[TimestampGenerator] = None

    def app_key(self, app_key: str) -> 'SigningConfigBuilder':
        """
        Set application key.

        Args:
            app_key: Application key issued by the platform

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._app_key = app_key
        return self

    def private_key(self, private_key: Union[str, bytes]) -> 'SigningConfigBuilder':
        """
        Set merchant private key for signing.

        Args:
            private_key: PEM text or raw base64 PKCS#8 key

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._private_key = private_key
        return self

    def content_type(self, content_type: str) -> 'SigningConfigBuilder':
        self._content_type = content_type
        return self

    def clock(self, clock: Clock) -> 'SigningConfigBuilder':
        self._clock = clock
        return self

    def random_source(self, random_source: RandomSource) -> 'SigningConfigBuilder':
        self._random_source = random_source
        return self

    def crypto(self, crypto: RequestCrypto) -> 'SigningConfigBuilder':
        self._crypto = crypto
        return self

    def request_id_generator(self, generator: RequestIdGenerator) -> 'SigningConfigBuilder':
        """
        Set custom request id generator.

        Args:
            generator: Function that returns request id strings

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._request_id_generator = generator
        return self

    def timestamp_generator(self, generator: TimestampGenerator) -> 'SigningConfigBuilder':
        """
        Set custom timestamp generator.

        Args:
            generator: Function that returns wire timestamps

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._timestamp_generator = generator
        return self

    def build(self) -> SigningConfig:
        """
        Build the signing configuration.

        Returns:
            SigningConfig: Complete signing configuration

        Raises:
            SigningError: If configuration is invalid
        """
        if not self._app_key:
            raise SigningError(
                "App key is required",
                SigningErrorCodes.INVALID_CONFIG
            )

        if not self._private_key:
            raise SigningError(
                "Private key is required",
                SigningErrorCodes.INVALID_CONFIG
            )

        return SigningConfig(
            app_key=self._app_key,
            private_key=self._private_key,
            content_type=self._content_type,
            clock=self._clock,
            random_source=self._random_source,
            crypto=self._crypto,
            request_id_generator=self._request_id_generator,
            timestamp_generator=self._timestamp_generator
        )


def create_signing_config() -> SigningConfigBuilder:
    """
    Create a new signing configuration builder.

    Returns:
        SigningConfigBuilder: New configuration builder
    """
    return SigningConfigBuilder()


def validate_signing_config(config: SigningConfig) -> None:
    """
    Validate signing configuration.

    Args:
        config: Signing configuration to validate

    Raises:
        SigningError: If configuration is invalid
    """
    if not isinstance(config, SigningConfig):
        raise SigningError(
            "Configuration must be SigningConfig instance",
            SigningErrorCodes.INVALID_CONFIG
        )

    if not config.app_key or not isinstance(config.app_key, str):
        raise SigningError(
            "App key must be non-empty string",
            SigningErrorCodes.INVALID_APP_KEY
        )

    # Custom crypto capabilities own their key handling
    if isinstance(config.crypto, RsaSha256Crypto):
        try:
            load_private_key(config.private_key)
        except KeyFormatError as e:
            raise SigningError(
                "Invalid private key format",
                SigningErrorCodes.INVALID_PRIVATE_KEY,
                {"original_error": str(e)}
            ) from e

    if config.request_id_generator:
        request_id = config.request_id_generator()
        if not isinstance(request_id, str) or not request_id:
            raise SigningError(
                "Request id generator must return non-empty string",
                SigningErrorCodes.INVALID_CONFIG
            )

    if config.timestamp_generator:
        timestamp = config.timestamp_generator()
        if not isinstance(timestamp, str) or not timestamp:
            raise SigningError(
                "Timestamp generator must return non-empty string",
                SigningErrorCodes.INVALID_CONFIG
            )
