"""Chat command parsing and dispatch (core domain).

Commands arrive as already-split tokens, for example ``["watch", "general",
"tag:release"]``. Every category and tag reference is resolved before the
reconciler runs, so a malformed command never writes anything.
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from core.config import EngineConfig
from core.models import CategoryScope, Channel, CommandResult, ResultCode, RuleFilter
from core.ports import DirectoryPort
from core.reconciler import RuleReconciler
from core.status import StatusFormatter

LOGGER = logging.getLogger(__name__)

# Exactly a non-negative decimal: no sign, whitespace or leading zeros.
_INDEX_PATTERN = re.compile(r"(0|[1-9][0-9]*)")


def _parse_error() -> CommandResult:
    return CommandResult(ResultCode.PARSE_ERROR)


class CommandProcessor:
    """Entry point for rule commands typed in a chat channel."""

    def __init__(
        self,
        reconciler: RuleReconciler,
        status_formatter: StatusFormatter,
        directory: DirectoryPort,
        config: EngineConfig,
    ) -> None:
        self._reconciler = reconciler
        self._status = status_formatter
        self._directory = directory
        self._config = config

    def process_command(self, channel: Channel, tokens: Sequence[str]) -> CommandResult:
        """Dispatch on the first token and return an abstract result."""

        remaining = list(tokens)
        if not remaining:
            return _parse_error()
        command = remaining.pop(0)
        LOGGER.debug("Command %s on channel %s: %s", command, channel.id, remaining)

        if command in RuleFilter.ALL:
            return self._filter_command(channel, command, remaining)
        if command == "remove":
            return self._remove_command(channel, remaining)
        if command == "status":
            return CommandResult(ResultCode.STATUS, {"text": self._status.status_for_channel(channel)})
        if command == "help":
            return CommandResult(ResultCode.HELP)
        return _parse_error()

    def _filter_command(self, channel: Channel, filter_name: str, tokens: List[str]) -> CommandResult:
        if not tokens:
            return _parse_error()

        prefix = self._config.tag_prefix
        scope = CategoryScope.all()
        # A leading tag token means the rule covers all categories.
        if not tokens[0].startswith(prefix):
            category_name = tokens.pop(0)
            category = self._directory.category_by_slug(category_name)
            if category is None:
                return CommandResult(
                    ResultCode.CATEGORY_NOT_FOUND,
                    {"name": category_name, "list": list(self._directory.all_category_slugs())},
                )
            scope = CategoryScope.one(category.id)

        tag_names: List[str] = []
        for token in tokens:
            if not token.startswith(prefix):
                return _parse_error()
            tag_name = token[len(prefix):]
            tag = self._directory.tag_by_name(tag_name)
            if tag is None:
                return CommandResult(ResultCode.TAG_NOT_FOUND, {"name": tag_name})
            tag_names.append(tag.name)

        code = self._reconciler.smart_create_rule(channel, filter_name, scope, tag_names)
        return CommandResult(code)

    def _remove_command(self, channel: Channel, tokens: List[str]) -> CommandResult:
        if len(tokens) != 1 or not _INDEX_PATTERN.fullmatch(tokens[0]):
            return _parse_error()
        return CommandResult(self._reconciler.delete_by_index(channel, int(tokens[0])))
