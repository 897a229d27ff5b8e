"""Rule factory enforcing field invariants before any store interaction."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, List, Optional

from core.errors import RuleValidationError
from core.models import Rule, RuleFilter, RuleType
from core.ports import DirectoryPort


def normalize_tags(tags: Optional[Iterable[str]]) -> Optional[tuple[str, ...]]:
    """Drop duplicates (first seen wins) and map empty collections to None."""

    if tags is None:
        return None
    unique: List[str] = []
    for tag in tags:
        if tag not in unique:
            unique.append(tag)
    return tuple(unique) or None


def _problems(rule: Rule, directory: DirectoryPort) -> List[str]:
    problems: List[str] = []

    if rule.filter not in RuleFilter.ALL:
        problems.append(f"filter: {rule.filter} is not a valid filter")
    if rule.type not in RuleType.ALL:
        problems.append(f"type: {rule.type} is not a valid type")

    if directory.channel_by_id(rule.channel_id) is None:
        problems.append(f"channel_id: {rule.channel_id} is not a valid channel id")

    if rule.type == RuleType.NORMAL:
        if rule.category_id is not None and directory.category_by_id(rule.category_id) is None:
            problems.append(f"category_id: {rule.category_id} is not a valid category id")
        if rule.group_id is not None:
            problems.append("group_id: cannot be specified for that type of rule")
    else:
        if rule.category_id is not None:
            problems.append("category_id: cannot be specified for that type of rule")
        if rule.group_id is None or directory.group_by_id(rule.group_id) is None:
            problems.append(f"group_id: {rule.group_id} is not a valid group id")

    for tag in rule.tags or ():
        if directory.tag_by_name(tag) is None:
            problems.append(f"tags: {tag} is not a valid tag")

    return problems


def validate_rule(rule: Rule, directory: DirectoryPort) -> Rule:
    """Return the rule unchanged, or raise listing every broken invariant."""

    problems = _problems(rule, directory)
    if problems:
        raise RuleValidationError(problems)
    return rule


def build_rule(
    directory: DirectoryPort,
    *,
    channel_id: int,
    filter_name: str = RuleFilter.WATCH,
    rule_type: str = RuleType.NORMAL,
    category_id: Optional[int] = None,
    group_id: Optional[int] = None,
    tags: Optional[Iterable[str]] = None,
    rule_id: Optional[int] = None,
) -> Rule:
    """Create a validated rule.

    Defaults match a freshly created record: ``watch`` filter, ``normal`` type,
    all categories and no tags.
    """

    rule = Rule(
        id=rule_id,
        channel_id=channel_id,
        type=rule_type,
        filter=filter_name,
        category_id=category_id,
        group_id=group_id,
        tags=normalize_tags(tags),
    )
    return validate_rule(rule, directory)


def revise_rule(directory: DirectoryPort, rule: Rule, **changes: Any) -> Rule:
    """Apply field changes to an existing rule and re-validate it."""

    if "tags" in changes:
        changes["tags"] = normalize_tags(changes["tags"])
    return validate_rule(replace(rule, **changes), directory)
