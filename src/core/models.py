"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage or chat-platform specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RuleType:
    """Kinds of rule a channel can hold."""

    NORMAL = "normal"
    GROUP_MESSAGE = "group_message"
    GROUP_MENTION = "group_mention"

    ALL = (NORMAL, GROUP_MESSAGE, GROUP_MENTION)
    GROUP_TYPES = (GROUP_MESSAGE, GROUP_MENTION)


class RuleFilter:
    """Verbosity levels of forwarded activity."""

    WATCH = "watch"
    FOLLOW = "follow"
    MUTE = "mute"

    ALL = (WATCH, FOLLOW, MUTE)


@dataclass(frozen=True)
class CategoryScope:
    """Either every category or exactly one.

    The persisted form keeps a nullable ``category_id``; ``None`` there maps to
    ``CategoryScope.all()``.
    """

    category_id: Optional[int] = None

    @classmethod
    def all(cls) -> "CategoryScope":
        return cls(None)

    @classmethod
    def one(cls, category_id: int) -> "CategoryScope":
        return cls(int(category_id))


@dataclass(frozen=True)
class Rule:
    """Routing rule binding category/tag/group criteria to a channel."""

    id: Optional[int]
    channel_id: int
    type: str
    filter: str
    category_id: Optional[int] = None
    group_id: Optional[int] = None
    tags: Optional[tuple[str, ...]] = None

    @property
    def scope(self) -> CategoryScope:
        return CategoryScope(self.category_id)

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags or ())


@dataclass(frozen=True)
class Channel:
    """Chat conversation that receives forwarded forum activity."""

    id: int
    provider: str
    chat_key: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: int
    slug: str


@dataclass(frozen=True)
class Tag:
    id: int
    name: str


@dataclass(frozen=True)
class Group:
    id: int
    name: str


class ResultCode(str, Enum):
    """Abstract outcomes returned to the command caller."""

    CREATED = "created"
    UPDATED = "updated"
    CREATE_ERROR = "create_error"
    DELETED = "deleted"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    DELETE_ERROR = "delete_error"
    PARSE_ERROR = "parse_error"
    CATEGORY_NOT_FOUND = "category_not_found"
    TAG_NOT_FOUND = "tag_not_found"
    STATUS = "status"
    HELP = "help"


@dataclass(frozen=True)
class CommandResult:
    """Result code plus the parameters needed to render it as text."""

    code: ResultCode
    params: dict[str, Any] = field(default_factory=dict)
