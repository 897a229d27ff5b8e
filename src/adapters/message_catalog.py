"""Text catalog and result rendering.

Keeping every user-facing string here prevents drift between adapters and
keeps replies consistent regardless of the chat platform.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from core.models import CommandResult, ResultCode

DEFAULT_MESSAGES: dict[str, str] = {
    "parse_error": "Sorry, I didn't understand that. Send `{trigger} help` for instructions.",
    "create.created": "Rule created successfully",
    "create.updated": "Rule updated successfully",
    "create.error": "Sorry, an error occurred while creating that rule.",
    "delete.success": "Rule deleted successfully",
    "delete.error": "Something went wrong while deleting the rule. Check the rule number with `{trigger} status`.",
    "not_found.category": "The category **{name}** can't be found. Available categories: **{list}**",
    "not_found.tag": "The tag **{name}** can't be found.",
    "status.header": "Rules for this channel\n(if multiple rules match a post, the topmost rule is executed)",
    "status.rule_string": "**{index})** **{filter}** posts in **{category}**",
    "status.rule_string_tags_suffix": " with tags: **{tags}**",
    "status.no_rules": "There are no rules set up for this channel. Run `{trigger} help` for instructions.",
    "all_categories": "(all categories)",
    "deleted_category": "(deleted category)",
    "deleted_group": "(deleted group)",
    "group_message_template": "{name} messages",
    "group_mention_template": "{name} mentions",
    "help": (
        "`{trigger} [watch|follow|mute] [category] [tag:name]`\n"
        "Create a filter rule for this channel\n"
        "- **watch** - notifications for all replies\n"
        "- **follow** - notifications for new topics only\n"
        "- **mute** - block notifications for a category or tag\n"
        "Omit the category to match all categories; add as many tags as needed.\n"
        "\n"
        "`{trigger} status`\n"
        "List the rules for this channel\n"
        "\n"
        "`{trigger} remove [rule number]`\n"
        "Remove a rule; the number comes from the status listing\n"
        "\n"
        "`{trigger} help`\n"
        "Show these instructions"
    ),
}

_RESULT_KEYS = {
    ResultCode.CREATED: "create.created",
    ResultCode.UPDATED: "create.updated",
    ResultCode.CREATE_ERROR: "create.error",
    ResultCode.DELETED: "delete.success",
    ResultCode.INDEX_OUT_OF_RANGE: "delete.error",
    ResultCode.DELETE_ERROR: "delete.error",
    ResultCode.PARSE_ERROR: "parse_error",
    ResultCode.CATEGORY_NOT_FOUND: "not_found.category",
    ResultCode.TAG_NOT_FOUND: "not_found.tag",
    ResultCode.HELP: "help",
}


class MessageCatalog:
    """English message catalog with optional per-key overrides from config."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None, trigger: str = "/forum") -> None:
        self._messages = dict(DEFAULT_MESSAGES)
        self._messages.update(overrides or {})
        self._trigger = trigger

    def t(self, key: str, **params: Any) -> str:
        """Return the message for ``key`` with ``params`` substituted."""

        try:
            template = self._messages[key]
        except KeyError:
            raise KeyError(f"Unknown message key: {key}") from None
        return template.format(trigger=self._trigger, **params)


def render_result(result: CommandResult, catalog: MessageCatalog) -> str:
    """Return the reply text for a command result."""

    if result.code == ResultCode.STATUS:
        return result.params["text"]

    params = dict(result.params)
    if result.code == ResultCode.CATEGORY_NOT_FOUND:
        params["list"] = ", ".join(params.get("list", []))
    return catalog.t(_RESULT_KEYS[result.code], **params)
