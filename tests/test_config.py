"""
Tests for client configuration loading
"""

import json

import pytest

from cryptography.hazmat.primitives import serialization

from yop_sdk.config import YopConfig, load_config
from yop_sdk.config.yop_config import DEFAULT_BASE_URL, read_public_key_file
from yop_sdk.exceptions import ConfigurationError


class TestYopConfig:
    """Test the configuration object"""

    def test_defaults(self):
        config = YopConfig()
        assert config.app_key is None
        assert config.base_url is None
        assert config.timeout == 10.0

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig(timeout=0)
        assert exc_info.value.error_code == "INVALID_TIMEOUT"

    def test_from_dict_camel_case(self):
        config = YopConfig.from_dict({
            "appKey": "app_1",
            "secretKey": "secret",
            "yopPublicKey": "public",
            "yopApiBaseUrl": "https://sandbox.example.com",
            "timeout": "5",
            "unknown": "ignored",
        })
        assert config.app_key == "app_1"
        assert config.secret_key == "secret"
        assert config.yop_public_key == "public"
        assert config.base_url == "https://sandbox.example.com"
        assert config.timeout == 5.0

    def test_from_dict_snake_case(self):
        config = YopConfig.from_dict({"app_key": "app_1", "base_url": "https://x"})
        assert config.app_key == "app_1"
        assert config.base_url == "https://x"

    def test_from_dict_bad_timeout(self):
        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig.from_dict({"timeout": "soon"})
        assert exc_info.value.error_code == "INVALID_TIMEOUT"

    def test_from_json(self):
        config = YopConfig.from_json(json.dumps({"appKey": "app_1"}))
        assert config.app_key == "app_1"

    def test_from_json_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig.from_json("{not json")
        assert exc_info.value.error_code == "PARSE_ERROR"

        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig.from_json("[1, 2]")
        assert exc_info.value.error_code == "INVALID_FORMAT"

    def test_from_file(self, tmp_path):
        path = tmp_path / "yop.json"
        path.write_text(json.dumps({"appKey": "app_file", "secretKey": "s"}), encoding="utf-8")
        config = YopConfig.from_file(path)
        assert config.app_key == "app_file"
        assert config.secret_key == "s"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig.from_file(tmp_path / "missing.json")
        assert exc_info.value.error_code == "FILE_ERROR"

    def test_validate_names_missing_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig(secret_key="s", yop_public_key="p").validate()
        assert exc_info.value.error_code == "MISSING_APP_KEY"

        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig(app_key="a", yop_public_key="p").validate()
        assert exc_info.value.error_code == "MISSING_SECRET_KEY"

        with pytest.raises(ConfigurationError) as exc_info:
            YopConfig(app_key="a", secret_key="s").validate()
        assert exc_info.value.error_code == "MISSING_PUBLIC_KEY"

    def test_yop_center_url(self):
        assert YopConfig(base_url="https://host/").yop_center_url == "https://host/yop-center"
        assert YopConfig().yop_center_url == f"{DEFAULT_BASE_URL}/yop-center"


class TestLoadConfig:
    """Test merging explicit configuration with the environment"""

    def test_explicit_config_wins(self):
        config = YopConfig(app_key="app_1", secret_key="s", yop_public_key="p", base_url="https://x")
        env = {"YOP_APP_KEY": "env_app", "YOP_PUBLIC_KEY": "env_p", "YOP_API_BASE_URL": "https://env"}

        loaded = load_config(config, environ=env)

        assert loaded.app_key == "app_1"
        assert loaded.yop_public_key == "p"
        assert loaded.base_url == "https://x"

    def test_explicit_config_not_mutated(self):
        config = YopConfig(app_key="app_1", secret_key="s")
        loaded = load_config(config, environ={"YOP_PUBLIC_KEY": "env_p"})
        assert loaded.yop_public_key == "env_p"
        assert config.yop_public_key is None
        assert config.base_url is None

    def test_from_environment(self):
        env = {
            "YOP_APP_KEY": "env_app",
            "YOP_SECRET_KEY": "env_secret",
            "YOP_PUBLIC_KEY": "env_public",
            "YOP_API_BASE_URL": "https://sandbox.example.com",
        }
        loaded = load_config(environ=env)
        assert loaded.app_key == "env_app"
        assert loaded.secret_key == "env_secret"
        assert loaded.yop_public_key == "env_public"
        assert loaded.base_url == "https://sandbox.example.com"

    def test_default_base_url(self):
        loaded = load_config(YopConfig(app_key="a", secret_key="s", yop_public_key="p"), environ={})
        assert loaded.base_url == DEFAULT_BASE_URL

    def test_app_key_not_taken_from_env_with_config(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(YopConfig(secret_key="s", yop_public_key="p"), environ={"YOP_APP_KEY": "env_app"})
        assert exc_info.value.error_code == "MISSING_APP_KEY"

    def test_public_key_from_path(self, tmp_path, platform_keys):
        path = tmp_path / "yop_public.pem"
        path.write_text(platform_keys.public_key, encoding="utf-8")
        env = {"YOP_APP_KEY": "a", "YOP_SECRET_KEY": "s", "YOP_PUBLIC_KEY_PATH": str(path)}

        loaded = load_config(environ=env)

        assert loaded.yop_public_key == platform_keys.public_key

    def test_public_key_env_before_path(self, tmp_path):
        env = {
            "YOP_APP_KEY": "a",
            "YOP_SECRET_KEY": "s",
            "YOP_PUBLIC_KEY": "inline",
            "YOP_PUBLIC_KEY_PATH": str(tmp_path / "missing.pem"),
        }
        assert load_config(environ=env).yop_public_key == "inline"

    def test_missing_public_key_file(self, tmp_path):
        env = {"YOP_APP_KEY": "a", "YOP_SECRET_KEY": "s", "YOP_PUBLIC_KEY_PATH": str(tmp_path / "missing.pem")}
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(environ=env)
        assert exc_info.value.error_code == "PUBLIC_KEY_FILE_ERROR"

    def test_missing_everything(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(environ={})
        assert exc_info.value.error_code == "MISSING_APP_KEY"


class TestReadPublicKeyFile:
    """Test reading platform key files"""

    def test_cer_file(self, tmp_path, platform_certificate, platform_keys):
        path = tmp_path / "yop_platform.cer"
        path.write_bytes(platform_certificate.public_bytes(serialization.Encoding.DER))
        assert read_public_key_file(path) == platform_keys.public_key.strip()

    def test_invalid_cer_file(self, tmp_path):
        path = tmp_path / "broken.cer"
        path.write_bytes(b"\x00\x01\x02\xff")
        with pytest.raises(ConfigurationError) as exc_info:
            read_public_key_file(path)
        assert exc_info.value.error_code == "PUBLIC_KEY_FILE_ERROR"

    def test_text_file(self, tmp_path):
        path = tmp_path / "key.txt"
        path.write_text("MIIBIjAN", encoding="utf-8")
        assert read_public_key_file(path) == "MIIBIjAN"
