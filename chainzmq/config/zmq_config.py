# =============================================================================
# File: chainzmq/config/zmq_config.py
# Description: ZeroMQ publisher configuration (topic endpoints + socket options)
# =============================================================================

from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import SettingsConfigDict

from chainzmq.common.base.base_config import BaseConfig, BASE_CONFIG_DICT
from chainzmq.common.exceptions.exceptions import ConfigurationError
from chainzmq.config.logging_config import get_logger

log = get_logger("chainzmq.config.zmq")

# Topic order is also the registration order
TOPIC_HASHBLOCK = "hashblock"
TOPIC_RAWBLOCK = "rawblock"
TOPIC_HASHTX = "hashtx"
TOPIC_RAWTX = "rawtx"
TOPICS = (TOPIC_HASHBLOCK, TOPIC_RAWBLOCK, TOPIC_HASHTX, TOPIC_RAWTX)

# Node option names per topic; the later alias wins when both are set
TOPIC_OPTION_ALIASES: Dict[str, tuple] = {
    topic: (f"zmq-{topic}", f"zmq-pub-{topic}") for topic in TOPICS
}


def _env_aliases(topic: str) -> AliasChoices:
    # AliasChoices takes the first match, so the pub- form goes first
    return AliasChoices(f"zmq_pub_{topic}", f"zmq_{topic}")


class ZmqConfig(BaseConfig):
    """
    ZeroMQ publisher configuration.

    Topic addresses come from ZMQ_<TOPIC> or ZMQ_PUB_<TOPIC>. A missing or
    empty address disables that topic.
    """

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='ZMQ_',
        populate_by_name=True,
    )

    # =========================================================================
    # Topic Endpoints
    # =========================================================================
    hashblock: Optional[str] = Field(
        default=None,
        validation_alias=_env_aliases(TOPIC_HASHBLOCK),
        description="Endpoint for reversed block hashes",
    )
    rawblock: Optional[str] = Field(
        default=None,
        validation_alias=_env_aliases(TOPIC_RAWBLOCK),
        description="Endpoint for raw serialized blocks",
    )
    hashtx: Optional[str] = Field(
        default=None,
        validation_alias=_env_aliases(TOPIC_HASHTX),
        description="Endpoint for reversed transaction hashes",
    )
    rawtx: Optional[str] = Field(
        default=None,
        validation_alias=_env_aliases(TOPIC_RAWTX),
        description="Endpoint for raw serialized transactions",
    )

    # =========================================================================
    # Socket Options
    # =========================================================================
    send_hwm: int = Field(default=1000, ge=0, description="PUB socket send high water mark")
    linger_ms: int = Field(default=0, ge=-1, description="Linger on close in ms (-1 = forever)")
    ipv6: bool = Field(default=False, description="Enable IPv6 on PUB sockets")

    @field_validator(*TOPICS, mode="before")
    @classmethod
    def _blank_is_disabled(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def endpoints(self) -> Dict[str, str]:
        """Enabled topics mapped to their addresses, in registration order."""
        return {
            topic: getattr(self, topic)
            for topic in TOPICS
            if getattr(self, topic)
        }

    def is_configured(self) -> bool:
        """True when at least one topic has an endpoint."""
        return bool(self.endpoints())

    @classmethod
    def from_options(cls, options: Any) -> "ZmqConfig":
        """
        Build config from a node's options (config file / CLI flags).

        ``options`` is either a mapping or an option store exposing a
        ``get(name)`` or ``str(name)`` lookup that returns None for unset
        names. Mapping keys are matched case-insensitively and underscores
        count as hyphens. Topics absent from ``options`` fall back to the
        environment.

        Raises:
            ConfigurationError: options is neither a mapping nor a lookup object
        """
        found = cls._read_options(options)

        # Keyed by the highest-precedence env alias so these beat the environment
        overrides: Dict[str, Any] = {}
        for topic, aliases in TOPIC_OPTION_ALIASES.items():
            for alias in aliases:
                if alias in found:
                    overrides[f"zmq_pub_{topic}"] = found[alias]

        return cls(**overrides)

    @staticmethod
    def _read_options(options: Any) -> Dict[str, Any]:
        if options is None:
            return {}

        if isinstance(options, Mapping):
            return {
                str(key).lower().replace("_", "-"): value
                for key, value in options.items()
            }

        lookup = getattr(options, "get", None) or getattr(options, "str", None)
        if not callable(lookup):
            raise ConfigurationError(
                f"Node options must be a mapping or expose get()/str(), got {type(options).__name__}"
            )

        found: Dict[str, Any] = {}
        for aliases in TOPIC_OPTION_ALIASES.values():
            for alias in aliases:
                value = lookup(alias)
                if value is not None:
                    found[alias] = value
        return found


@lru_cache(maxsize=1)
def get_zmq_config() -> ZmqConfig:
    """Get ZMQ configuration singleton (cached)."""
    config = ZmqConfig()
    if not config.is_configured():
        log.warning("No ZMQ endpoints configured. Nothing will be published.")
    else:
        log.info(f"ZMQ configuration loaded: {config.endpoints()}")
    return config


def reset_zmq_config() -> None:
    """Reset config singleton (for testing)."""
    get_zmq_config.cache_clear()
