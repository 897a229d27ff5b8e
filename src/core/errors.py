"""Core exceptions."""

from __future__ import annotations

from typing import Iterable


class RuleValidationError(ValueError):
    """A rule broke one or more field invariants."""

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))
