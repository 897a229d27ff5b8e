"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TAG_PREFIX = "tag:"


@dataclass(frozen=True)
class EngineConfig:
    """Settings for command parsing and status rendering."""

    tagging_enabled: bool = False
    tag_prefix: str = DEFAULT_TAG_PREFIX
