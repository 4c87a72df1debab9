# chainzmq/common/base/base_config.py
# =============================================================================
# BaseConfig - Foundation for all chainzmq configuration classes
#
# Pydantic v2 settings:
# - SettingsConfigDict (not the deprecated class Config)
# - Automatic .env file loading
# - Case-insensitive environment variables
# - Nested config support via __ delimiter
# - @lru_cache singleton pattern for factory functions
#
# Usage:
#     from chainzmq.common.base.base_config import BaseConfig, BASE_CONFIG_DICT
#     from pydantic_settings import SettingsConfigDict
#     from functools import lru_cache
#
#     class MyConfig(BaseConfig):
#         model_config = SettingsConfigDict(
#             **BASE_CONFIG_DICT,
#             env_prefix="MY_"
#         )
#         timeout_ms: int = 5000
#
#     @lru_cache(maxsize=1)
#     def get_my_config() -> MyConfig:
#         return MyConfig()
# =============================================================================

from pydantic_settings import BaseSettings, SettingsConfigDict


# Shared settings; subclasses unpack this rather than BaseConfig.model_config,
# which already carries an env_prefix
BASE_CONFIG_DICT = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=False,
    extra="ignore",
    env_nested_delimiter="__",
)


class BaseConfig(BaseSettings):
    """Base configuration class for all chainzmq configs.

    Environment Variable Naming:
    - Use domain-specific prefixes (ZMQ_, LOG_, ...)
    - Nested values use __ delimiter

    Singleton Pattern:
    - Each config should have a factory function with @lru_cache(maxsize=1)
    - This ensures config is parsed once at startup, not on every import
    """

    model_config = BASE_CONFIG_DICT

