"""Shared building blocks for rule checkers.

A checker evaluates its rules in a fixed order and accumulates failure
lines into a ``RuleList``; the resulting ``CheckOutcome`` is derived from
those lines.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

from ..schema import CheckOutcome, FeedbackLine, LineLevel

Message = Union[str, Callable[[], str]]


def _render(message: Message) -> str:
    return message() if callable(message) else message


@dataclass
class Rule:
    """A single (predicate, message) pair.

    ``predicate`` returns True when the rule is satisfied. The message is
    only rendered when the rule fails.
    """
    predicate: Callable[[], bool]
    message: Message


@dataclass
class RuleList:
    """Ordered accumulator of rule results for one checker."""
    name: str
    lines: list[FeedbackLine] = field(default_factory=list)
    failures: int = 0

    def require(self, ok: bool, message: Message) -> bool:
        """Record a failure line when ``ok`` is False. Returns ``ok``."""
        if not ok:
            self.fail(message)
        return ok

    def fail(self, message: Message) -> None:
        """Record a failed rule."""
        self.lines.append(FeedbackLine(text=_render(message)))
        self.failures += 1

    def detail(self, message: Message) -> None:
        """Add a failure-level line that does not count as another failure."""
        self.lines.append(FeedbackLine(text=_render(message)))

    def note(self, message: Message) -> None:
        """Add an informational line."""
        self.lines.append(FeedbackLine(text=_render(message), level=LineLevel.INFO))

    def outcome(self, **flags: bool) -> CheckOutcome:
        return CheckOutcome(name=self.name, lines=list(self.lines), failures=self.failures, flags=flags)


def evaluate_rules(rules: Iterable[Rule], acc: RuleList) -> int:
    """Evaluate rules in order into ``acc``. Returns the number that failed."""
    failed = 0
    for rule in rules:
        if not acc.require(rule.predicate(), rule.message):
            failed += 1
    return failed
