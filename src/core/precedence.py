"""Precedence ordering shared by status display and index-based deletion."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from core.models import Rule, RuleFilter, RuleType

TYPE_RANK = {
    RuleType.GROUP_MENTION: 1,
    RuleType.GROUP_MESSAGE: 2,
    RuleType.NORMAL: 3,
}

FILTER_RANK = {
    RuleFilter.MUTE: 1,
    RuleFilter.WATCH: 2,
    RuleFilter.FOLLOW: 3,
}


def precedence_key(rule: Rule) -> Tuple[int, int, int]:
    """Sort key: type rank, then filter rank, then id.

    The id tie-break makes the order total, so two rules with the same type
    and filter always keep the same relative index.
    """

    type_rank = TYPE_RANK.get(rule.type, len(TYPE_RANK) + 1)
    filter_rank = FILTER_RANK.get(rule.filter, len(FILTER_RANK) + 1)
    rule_id = rule.id if rule.id is not None else -1
    return type_rank, filter_rank, rule_id


def order_by_precedence(rules: Iterable[Rule]) -> List[Rule]:
    """Return rules in display order; index ``i`` in the UI is position ``i - 1``."""

    return sorted(rules, key=precedence_key)
