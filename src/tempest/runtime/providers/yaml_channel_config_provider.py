"""
YAML-based channel configuration provider.

Loads a ``channels:`` list from a YAML file. Entries may pull shared
fragments from sibling files with the ``!include`` tag.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..config import ChannelConfig
from .static_config_provider import StaticChannelConfigProvider

_logger = logging.getLogger(__name__)


def _resolve_include(base_dir: Path, reference: str) -> Any:
    """Resolve ``file.yaml`` or ``file.yaml:dotted.key`` relative to base_dir."""
    file_part, _, key_path = reference.partition(":")
    if reference.startswith("/"):
        file_part, key_path = reference, ""

    target = base_dir / file_part
    if not target.is_file():
        _logger.warning("Channel include not found: %s", target)
        return None
    data = yaml.safe_load(target.read_text(encoding="utf-8"))

    for key in filter(None, key_path.split(".")):
        if not isinstance(data, dict) or key not in data:
            _logger.warning("Channel include %s has no key %r", file_part, key)
            return None
        data = data[key]
    return data


def _load_yaml_with_includes(file_path: Path) -> dict[str, Any]:
    """Load a channel file, expanding ``!include`` tags against its directory."""

    class _ChannelLoader(yaml.SafeLoader):
        pass

    _ChannelLoader.add_constructor(
        "!include",
        lambda loader, node: _resolve_include(file_path.parent, loader.construct_scalar(node)),
    )
    return yaml.load(file_path.read_text(encoding="utf-8"), Loader=_ChannelLoader) or {}


class YamlChannelConfigProvider(StaticChannelConfigProvider):
    """Channel list read once from a YAML file."""

    def __init__(self, config_path: str | Path) -> None:
        self.config_path = Path(config_path)
        data = _load_yaml_with_includes(self.config_path)
        entries = data.get("channels") or []
        if not isinstance(entries, list):
            raise ValueError(f"{self.config_path}: 'channels' must be a list")

        channels: list[ChannelConfig] = []
        for entry in entries:
            if not isinstance(entry, dict):
                _logger.warning("Skipping non-mapping channel entry in %s", self.config_path)
                continue
            channels.append(ChannelConfig.from_dict(entry))

        _logger.info("Loaded %d channels from %s", len(channels), self.config_path)
        super().__init__(channels)
