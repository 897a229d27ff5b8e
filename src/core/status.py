"""Status text for a channel's rules."""

from __future__ import annotations

from typing import List

from core.config import EngineConfig
from core.models import Channel, Rule, RuleType
from core.ports import DirectoryPort, MessageCatalogPort, RuleStoragePort
from core.precedence import order_by_precedence


class StatusFormatter:
    """Render a channel's rules, in precedence order, through the text catalog."""

    def __init__(
        self,
        storage: RuleStoragePort,
        directory: DirectoryPort,
        catalog: MessageCatalogPort,
        config: EngineConfig,
    ) -> None:
        self._storage = storage
        self._directory = directory
        self._catalog = catalog
        self._config = config

    def _label(self, rule: Rule) -> str:
        if rule.type in RuleType.GROUP_TYPES:
            group = self._directory.group_by_id(rule.group_id) if rule.group_id is not None else None
            if group is None:
                return self._catalog.t("deleted_group")
            return self._catalog.t(f"{rule.type}_template", name=group.name)

        if rule.category_id is None:
            return self._catalog.t("all_categories")
        category = self._directory.category_by_id(rule.category_id)
        if category is None:
            return self._catalog.t("deleted_category")
        return category.slug

    def status_for_channel(self, channel: Channel) -> str:
        """Return the header, one line per rule (1-based index) or the no-rules line."""

        rules = order_by_precedence(self._storage.find_rules_by_channel(channel.id))
        lines: List[str] = [self._catalog.t("status.header") + "\n"]

        for index, rule in enumerate(rules, start=1):
            line = self._catalog.t(
                "status.rule_string",
                index=index,
                filter=rule.filter,
                category=self._label(rule),
            )
            # Tags only render when tagging is switched on for the forum.
            if self._config.tagging_enabled and rule.tags:
                line += self._catalog.t("status.rule_string_tags_suffix", tags=", ".join(rule.tags))
            lines.append(line + "\n")

        if not rules:
            lines.append(self._catalog.t("status.no_rules"))
        return "".join(lines)
