"""Efficiency guard check: fixed scalar cells must hold fixed constants."""

from ..cells import format_found, get_number, within
from ..rubric import EFFICIENCY_GUARDS, TOL
from ..schema import CheckOutcome, Workbook
from .base import Rule, RuleList, evaluate_rules


def check_efficiency(workbook: Workbook) -> CheckOutcome:
    acc = RuleList("efficiency")
    main = workbook.sheet("main")

    rules = []
    for guard in EFFICIENCY_GUARDS:
        value = get_number(main, guard.ref)
        rules.append(Rule(
            predicate=lambda value=value, guard=guard: within(value, guard.expected, TOL.eq),
            message=f"{guard.ref} must be {guard.label} (found {format_found(value)})",
        ))
    evaluate_rules(rules, acc)

    return acc.outcome()
