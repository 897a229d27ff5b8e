from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

import pytest

from core.commands import CommandProcessor
from core.config import EngineConfig
from core.models import Category, Channel, Group, Rule, Tag
from core.reconciler import RuleReconciler
from core.status import StatusFormatter


class FakeStorage:
    def __init__(self) -> None:
        self.rules: dict[int, Rule] = {}
        self.writes = 0
        self._next_id = 1

    def find_rules_by_channel(self, channel_id: int) -> list[Rule]:
        # Deliberately newest first: callers must not rely on store order.
        return [rule for rule in reversed(list(self.rules.values())) if rule.channel_id == channel_id]

    def create(self, rule: Rule) -> Rule:
        self.writes += 1
        created = replace(rule, id=self._next_id)
        self._next_id += 1
        self.rules[created.id] = created
        return created

    def update(self, rule: Rule) -> Rule:
        self.writes += 1
        self.rules[rule.id] = rule
        return rule

    def destroy(self, rule: Rule) -> bool:
        self.writes += 1
        return self.rules.pop(rule.id, None) is not None

    def for_channel(self, channel_id: int) -> list[Rule]:
        return sorted(
            (rule for rule in self.rules.values() if rule.channel_id == channel_id),
            key=lambda rule: rule.id,
        )


class FakeDirectory:
    def __init__(self) -> None:
        self.categories = {
            1: Category(id=1, slug="uncategorized"),
            5: Category(id=5, slug="general"),
            6: Category(id=6, slug="support"),
            7: Category(id=7, slug="news"),
        }
        self.tags = {name: Tag(id=index, name=name) for index, name in enumerate(["t1", "t2", "t3"], start=1)}
        self.groups = {10: Group(id=10, name="staff")}
        self.channels = {
            1: Channel(id=1, provider="telegram", chat_key="@team"),
            2: Channel(id=2, provider="telegram", chat_key="chat_id:-100123"),
        }

    def category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self.categories.values() if c.slug == slug), None)

    def category_by_id(self, category_id: int) -> Optional[Category]:
        return self.categories.get(category_id)

    def all_category_slugs(self) -> list[str]:
        return [self.categories[key].slug for key in sorted(self.categories)]

    def tag_by_name(self, name: str) -> Optional[Tag]:
        return self.tags.get(name)

    def group_by_id(self, group_id: int) -> Optional[Group]:
        return self.groups.get(group_id)

    def channel_by_id(self, channel_id: int) -> Optional[Channel]:
        return self.channels.get(channel_id)


class KeyCatalog:
    """Echoes message keys so tests can count which strings were used."""

    def t(self, key: str, **params: Any) -> str:
        if not params:
            return key
        rendered = ",".join(f"{name}={params[name]}" for name in sorted(params))
        return f"{key}({rendered})"


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def catalog() -> KeyCatalog:
    return KeyCatalog()


@pytest.fixture
def channel(directory: FakeDirectory) -> Channel:
    return directory.channels[1]


@pytest.fixture
def other_channel(directory: FakeDirectory) -> Channel:
    return directory.channels[2]


@pytest.fixture
def reconciler(storage: FakeStorage, directory: FakeDirectory) -> RuleReconciler:
    return RuleReconciler(storage=storage, directory=directory)


@pytest.fixture
def make_processor(storage: FakeStorage, directory: FakeDirectory, catalog: KeyCatalog, reconciler: RuleReconciler):
    def _make(tagging_enabled: bool = False) -> CommandProcessor:
        config = EngineConfig(tagging_enabled=tagging_enabled)
        status = StatusFormatter(storage=storage, directory=directory, catalog=catalog, config=config)
        return CommandProcessor(
            reconciler=reconciler,
            status_formatter=status,
            directory=directory,
            config=config,
        )

    return _make
