"""Ports (interfaces) used by the rule command engine.

Ports define the minimal contracts for storage, directory lookups and text
rendering so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from core.models import Category, Channel, Group, Rule, Tag


class RuleStoragePort(Protocol):
    """Rule persistence required by the engine.

    Each call is atomic on its own; callers needing a larger unit of work must
    serialize it themselves.
    """

    def find_rules_by_channel(self, channel_id: int) -> list[Rule]:
        ...

    def create(self, rule: Rule) -> Rule:
        ...

    def update(self, rule: Rule) -> Rule:
        ...

    def destroy(self, rule: Rule) -> bool:
        ...


class DirectoryPort(Protocol):
    """Lookups of forum records by name or id."""

    def category_by_slug(self, slug: str) -> Optional[Category]:
        ...

    def category_by_id(self, category_id: int) -> Optional[Category]:
        ...

    def all_category_slugs(self) -> Sequence[str]:
        ...

    def tag_by_name(self, name: str) -> Optional[Tag]:
        ...

    def group_by_id(self, group_id: int) -> Optional[Group]:
        ...

    def channel_by_id(self, channel_id: int) -> Optional[Channel]:
        ...


class MessageCatalogPort(Protocol):
    """Text catalog keyed by message id."""

    def t(self, key: str, **params: Any) -> str:
        ...
