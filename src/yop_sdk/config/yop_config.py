"""
Client configuration for the YOP Python SDK

Loads the application key, merchant private key, platform public key and
API base URL from an explicit config object, a JSON document or the
environment.
"""

import os
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..crypto.rsa import resolve_public_key_pem
from ..exceptions import ConfigurationError, KeyFormatError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openapi.yeepay.com"
DEFAULT_TIMEOUT = 10.0

ENV_APP_KEY = "YOP_APP_KEY"
ENV_SECRET_KEY = "YOP_SECRET_KEY"
ENV_PUBLIC_KEY = "YOP_PUBLIC_KEY"
ENV_PUBLIC_KEY_PATH = "YOP_PUBLIC_KEY_PATH"
ENV_BASE_URL = "YOP_API_BASE_URL"

# JSON field name -> dataclass field name
_FIELD_ALIASES = {
    "appKey": "app_key",
    "app_key": "app_key",
    "secretKey": "secret_key",
    "secret_key": "secret_key",
    "yopPublicKey": "yop_public_key",
    "yop_public_key": "yop_public_key",
    "yopApiBaseUrl": "base_url",
    "baseUrl": "base_url",
    "base_url": "base_url",
    "timeout": "timeout",
}


@dataclass
class YopConfig:
    """
    YOP client configuration

    Attributes:
        app_key: Application key issued by the platform
        secret_key: Merchant private key text (not a path)
        yop_public_key: Platform public key text, PEM/DER certificate or bytes
        base_url: API host, ``/yop-center`` is appended per request
        timeout: Request timeout in seconds
    """
    app_key: Optional[str] = None
    secret_key: Optional[str] = None
    yop_public_key: Optional[Union[str, bytes]] = None
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", "INVALID_TIMEOUT")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'YopConfig':
        """Build a config from a mapping with camelCase or snake_case keys"""
        values: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = _FIELD_ALIASES.get(key)
            if field_name is None:
                logger.debug(f"Ignoring unknown configuration key: {key}")
                continue
            values[field_name] = value
        try:
            if "timeout" in values:
                values["timeout"] = float(values["timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid timeout: {e}", "INVALID_TIMEOUT") from e
        return cls(**values)

    @classmethod
    def from_json(cls, json_string: str) -> 'YopConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration JSON must be an object", "INVALID_FORMAT")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'YopConfig':
        """Load configuration from JSON file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e
        return cls.from_json(json_string)

    def validate(self) -> None:
        """
        Check that every required field is present.

        Raises:
            ConfigurationError: Naming the first missing field
        """
        if not self.app_key:
            raise ConfigurationError(
                "Missing required configuration: app key",
                "MISSING_APP_KEY",
                {"env_var": ENV_APP_KEY}
            )
        if not self.secret_key:
            raise ConfigurationError(
                "Missing required configuration: secret key",
                "MISSING_SECRET_KEY",
                {"env_var": ENV_SECRET_KEY}
            )
        if not self.yop_public_key:
            raise ConfigurationError(
                "Missing required configuration: platform public key",
                "MISSING_PUBLIC_KEY",
                {"env_vars": [ENV_PUBLIC_KEY, ENV_PUBLIC_KEY_PATH]}
            )

    @property
    def yop_center_url(self) -> str:
        return f"{(self.base_url or DEFAULT_BASE_URL).rstrip('/')}/yop-center"


def read_public_key_file(file_path: Union[str, Path]) -> str:
    """
    Read a platform public key file.

    ``.cer`` files are read as binary certificates and their public key is
    extracted; other files are read as UTF-8 text.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(file_path).resolve()
    try:
        if path.suffix.lower() == ".cer":
            return resolve_public_key_pem(path.read_bytes())
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read platform public key from {path}: {e}",
            "PUBLIC_KEY_FILE_ERROR"
        ) from e
    except KeyFormatError as e:
        raise ConfigurationError(
            f"Failed to extract public key from certificate {path}: {e}",
            "PUBLIC_KEY_FILE_ERROR"
        ) from e


def load_config(
    config: Optional[YopConfig] = None,
    environ: Optional[Mapping[str, str]] = None
) -> YopConfig:
    """
    Merge an explicit config with the environment and validate it.

    Fields set on ``config`` win. Without a config object the app key and
    secret key come from the environment. The platform public key falls back
    to ``YOP_PUBLIC_KEY`` and then to the file named by ``YOP_PUBLIC_KEY_PATH``.

    Args:
        config: Optional explicit configuration
        environ: Environment mapping (``os.environ`` by default)

    Returns:
        YopConfig: Complete configuration

    Raises:
        ConfigurationError: If a required field is missing
    """
    env = os.environ if environ is None else environ

    if config is not None:
        merged = replace(config)
    else:
        merged = YopConfig(app_key=env.get(ENV_APP_KEY), secret_key=env.get(ENV_SECRET_KEY))

    if not merged.base_url:
        merged.base_url = env.get(ENV_BASE_URL) or DEFAULT_BASE_URL

    if merged.yop_public_key:
        logger.info("Platform public key loaded from config object")
    elif env.get(ENV_PUBLIC_KEY):
        merged.yop_public_key = env[ENV_PUBLIC_KEY]
        logger.info(f"Platform public key loaded from {ENV_PUBLIC_KEY}")
    elif env.get(ENV_PUBLIC_KEY_PATH):
        merged.yop_public_key = read_public_key_file(env[ENV_PUBLIC_KEY_PATH])
        logger.info(f"Platform public key loaded from {ENV_PUBLIC_KEY_PATH} ({env[ENV_PUBLIC_KEY_PATH]})")

    merged.validate()
    return merged
