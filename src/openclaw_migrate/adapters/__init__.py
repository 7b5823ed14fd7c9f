"""
Schema adapters.

Each adapter turns one OpenClaw on-disk schema into a CanonicalModel.
"""

from .base import SourceAdapter, create_adapter, is_safe_agent_id
from .json5_adapter import Json5Adapter
from .yaml_adapter import LegacyYamlAdapter

__all__ = [
    "SourceAdapter",
    "Json5Adapter",
    "LegacyYamlAdapter",
    "create_adapter",
    "is_safe_agent_id",
]
