"""Rule reconciliation and deletion (core domain).

This module is integration-agnostic. It keeps at most one rule per distinct
(category, tag set) criterion on a channel by merging new requests into the
rules already stored.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from core.errors import RuleValidationError
from core.models import CategoryScope, Channel, ResultCode, Rule, RuleType
from core.ports import DirectoryPort, RuleStoragePort
from core.precedence import order_by_precedence
from core.validation import build_rule, normalize_tags, revise_rule

LOGGER = logging.getLogger(__name__)


class ChannelLocks:
    """Registry of one lock per channel id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, channel_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(channel_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[channel_id] = lock
            return lock

    @contextmanager
    def hold(self, channel_id: int) -> Iterator[None]:
        with self._lock_for(channel_id):
            yield


def _merge_tags(requested: Optional[Iterable[str]], rules: Iterable[Rule]) -> List[str]:
    merged: List[str] = list(requested or ())
    for rule in rules:
        for tag in rule.tags or ():
            if tag not in merged:
                merged.append(tag)
    return merged


class RuleReconciler:
    """Creates, merges and deletes rules for a channel.

    Every read-modify-write sequence runs under the channel's lock, so two
    commands for the same channel cannot interleave and pick different
    canonical rules.
    """

    def __init__(
        self,
        storage: RuleStoragePort,
        directory: DirectoryPort,
        locks: Optional[ChannelLocks] = None,
    ) -> None:
        self._storage = storage
        self._directory = directory
        self._locks = locks or ChannelLocks()

    def smart_create_rule(
        self,
        channel: Channel,
        filter_name: str,
        scope: CategoryScope = CategoryScope.all(),
        tags: Optional[Iterable[str]] = None,
    ) -> ResultCode:
        """Create a rule, or fold the request into existing matching rules.

        Returns CREATED, UPDATED, or CREATE_ERROR when the resulting rule would
        be invalid. Tiers:
        1. same category and same tag set: keep one, set its filter.
        2. same category and same filter: keep one, union the tag sets.
        3. otherwise create a new rule.
        """

        requested_tags = normalize_tags(tags)
        wanted = frozenset(requested_tags or ())

        with self._locks.hold(channel.id):
            # Lowest id is the canonical rule.
            existing = sorted(
                self._storage.find_rules_by_channel(channel.id),
                key=lambda rule: rule.id if rule.id is not None else -1,
            )
            same_category = [
                rule
                for rule in existing
                if rule.type == RuleType.NORMAL and rule.scope == scope
            ]

            same_tags = [rule for rule in same_category if rule.tag_set == wanted]
            if same_tags:
                canonical, duplicates = same_tags[0], same_tags[1:]
                try:
                    revised = revise_rule(self._directory, canonical, filter=filter_name)
                except RuleValidationError as exc:
                    LOGGER.warning("Rejected filter update on rule %s: %s", canonical.id, exc)
                    return ResultCode.CREATE_ERROR
                for rule in duplicates:
                    self._storage.destroy(rule)
                self._storage.update(revised)
                LOGGER.info(
                    "Updated rule %s filter to %s (removed %s duplicates)",
                    canonical.id,
                    filter_name,
                    len(duplicates),
                )
                return ResultCode.UPDATED

            same_filter = [rule for rule in same_category if rule.filter == filter_name]
            if same_filter:
                canonical, duplicates = same_filter[0], same_filter[1:]
                merged = _merge_tags(requested_tags, same_filter)
                try:
                    revised = revise_rule(self._directory, canonical, tags=merged)
                except RuleValidationError as exc:
                    LOGGER.warning("Rejected tag merge on rule %s: %s", canonical.id, exc)
                    return ResultCode.CREATE_ERROR
                self._storage.update(revised)
                for rule in duplicates:
                    self._storage.destroy(rule)
                LOGGER.info("Merged tags into rule %s: %s", canonical.id, ", ".join(merged))
                return ResultCode.UPDATED

            try:
                rule = build_rule(
                    self._directory,
                    channel_id=channel.id,
                    filter_name=filter_name,
                    category_id=scope.category_id,
                    tags=requested_tags,
                )
            except RuleValidationError as exc:
                LOGGER.warning("Rejected new rule for channel %s: %s", channel.id, exc)
                return ResultCode.CREATE_ERROR
            created = self._storage.create(rule)
            LOGGER.info("Created rule %s for channel %s", created.id, channel.id)
            return ResultCode.CREATED

    def delete_by_index(self, channel: Channel, index: int) -> ResultCode:
        """Delete the rule at a 1-based position in precedence order."""

        with self._locks.hold(channel.id):
            rules = order_by_precedence(self._storage.find_rules_by_channel(channel.id))
            if index < 1 or index > len(rules):
                return ResultCode.INDEX_OUT_OF_RANGE

            target = rules[index - 1]
            if not self._storage.destroy(target):
                return ResultCode.DELETE_ERROR
            LOGGER.info("Deleted rule %s (index %s) from channel %s", target.id, index, channel.id)
            return ResultCode.DELETED
