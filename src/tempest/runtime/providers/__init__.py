"""
Channel configuration providers.

Provides implementations of ChannelConfigProvider for loading
channel configurations from various sources.
"""

from .static_config_provider import StaticChannelConfigProvider
from .yaml_channel_config_provider import YamlChannelConfigProvider

__all__ = [
    "StaticChannelConfigProvider",
    "YamlChannelConfigProvider",
]
