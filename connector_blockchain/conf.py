"""
Configuration management for the blockchain connector.
Settings can be overridden explicitly or via environment variables
prefixed with CONNECTOR_BLOCKCHAIN_.
"""
import os
from dataclasses import dataclass
from typing import Dict, Any

from .exceptions import InitializationError

ENV_PREFIX = 'CONNECTOR_BLOCKCHAIN_'

DEFAULTS = {
    'NUMBERS_PIN_URL': 'https://eoqctv92ahgrcif.m.pipedream.net',
    'NUMBERS_COMMIT_URL': 'https://eo883tj75azolos.m.pipedream.net',
    'NUMBERS_ME_URL': 'https://api.numbersprotocol.io/api/v3/auth/users/me',
    'ASSET_PROFILE_URL': 'https://nftsearch.site/asset-profile?cid={cid}',
    'HTTP_TIMEOUT_SECONDS': 30.0,
    'GENERATED_THROUGH': 'https://console.instill.tech',
    'TESTNET': False,
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _coerce(value: Any, default: Any) -> Any:
    """Cast an environment string to the type of its default."""
    if not isinstance(value, str):
        return value
    if isinstance(default, bool):
        return value.strip().lower() in _TRUE_VALUES
    if isinstance(default, float):
        return float(value)
    if isinstance(default, int):
        return int(value)
    return value


class ConnectorSettings:
    def __init__(self, user_settings: Dict[str, Any] = None, defaults: Dict[str, Any] = None):
        self.user_settings = user_settings or {}
        self.defaults = defaults or DEFAULTS

    def __getattr__(self, attr):
        if attr not in self.defaults:
            raise AttributeError(f"Invalid setting: {attr}")

        default = self.defaults[attr]

        # Explicit settings win over the environment
        if attr in self.user_settings:
            return _coerce(self.user_settings[attr], default)

        env_value = os.environ.get(f"{ENV_PREFIX}{attr}")
        if env_value is not None:
            try:
                return _coerce(env_value, default)
            except ValueError as e:
                raise InitializationError(
                    f"Invalid value for {ENV_PREFIX}{attr}: {env_value!r}"
                ) from e

        return default


@dataclass(frozen=True)
class ConnectorOptions:
    """
    Immutable option bag handed to the connector at construction time.
    """
    pin_url: str = DEFAULTS['NUMBERS_PIN_URL']
    commit_url: str = DEFAULTS['NUMBERS_COMMIT_URL']
    me_url: str = DEFAULTS['NUMBERS_ME_URL']
    asset_profile_url: str = DEFAULTS['ASSET_PROFILE_URL']
    timeout: float = DEFAULTS['HTTP_TIMEOUT_SECONDS']
    generated_through: str = DEFAULTS['GENERATED_THROUGH']
    testnet: bool = DEFAULTS['TESTNET']

    @classmethod
    def from_settings(cls, connector_settings: 'ConnectorSettings' = None) -> 'ConnectorOptions':
        """Snapshot the current settings into an options object."""
        s = connector_settings or settings
        return cls(
            pin_url=s.NUMBERS_PIN_URL,
            commit_url=s.NUMBERS_COMMIT_URL,
            me_url=s.NUMBERS_ME_URL,
            asset_profile_url=s.ASSET_PROFILE_URL,
            timeout=s.HTTP_TIMEOUT_SECONDS,
            generated_through=s.GENERATED_THROUGH,
            testnet=s.TESTNET,
        )

    def asset_url(self, asset_cid: str) -> str:
        return self.asset_profile_url.format(cid=asset_cid)


# Global settings instance
settings = ConnectorSettings()
