import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_TEXT_LENGTH = 255
DEFAULT_MAX_DIAGNOSTICS = 1000


@dataclass
class ResolverConfig:
    """
    Settings consulted when a catalog is loaded.

    device_name / endpoint_name are the preferred IED and AccessPoint; an
    explicit IcdCatalog.set_active_selection() call overrides them.
    max_text_length is the over-length policy: stored attribute values longer than
    this are rejected (the element is skipped), never truncated. None disables
    the check.
    """
    device_name: Optional[str] = None
    endpoint_name: Optional[str] = None
    max_text_length: Optional[int] = DEFAULT_MAX_TEXT_LENGTH
    max_diagnostics: int = DEFAULT_MAX_DIAGNOSTICS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'device_name': self.device_name,
            'endpoint_name': self.endpoint_name,
            'max_text_length': self.max_text_length,
            'max_diagnostics': self.max_diagnostics
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResolverConfig':
        max_text_length = data.get('max_text_length', DEFAULT_MAX_TEXT_LENGTH)
        if max_text_length is not None:
            max_text_length = int(max_text_length)
            if max_text_length <= 0:
                raise ValueError(f"max_text_length must be positive, got {max_text_length}")

        max_diagnostics = int(data.get('max_diagnostics', DEFAULT_MAX_DIAGNOSTICS))
        if max_diagnostics <= 0:
            raise ValueError(f"max_diagnostics must be positive, got {max_diagnostics}")

        return cls(
            device_name=data.get('device_name') or None,
            endpoint_name=data.get('endpoint_name') or None,
            max_text_length=max_text_length,
            max_diagnostics=max_diagnostics
        )


def load_config(filepath: str) -> ResolverConfig:
    """
    Read a ResolverConfig from a JSON file.
    Raises OSError / ValueError when the file is unreadable or invalid.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object: {filepath}")

    config = ResolverConfig.from_dict(data)
    logger.debug(f"Loaded resolver config from {filepath}: {config.to_dict()}")
    return config


def save_config(config: ResolverConfig, filepath: str):
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=4)
