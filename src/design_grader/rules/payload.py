"""Payload check: primary missile count threshold and secondary objective."""

from ..cells import format_found, get_number, is_finite
from ..rubric import TOL
from ..schema import CheckOutcome, Workbook
from .base import RuleList

PRIMARY_CELL = "AB3"  # AIM-120D count
SECONDARY_CELL = "AB4"  # AIM-9X count
PRIMARY_REQUIRED = 8
SECONDARY_OBJECTIVE = 2


def check_payload(workbook: Workbook) -> CheckOutcome:
    """Check the payload.

    Flags:
        payload_objective_pass: threshold met and at least two AIM-9Xs carried
    """
    acc = RuleList("payload")
    main = workbook.sheet("main")
    primary = get_number(main, PRIMARY_CELL)
    secondary = get_number(main, SECONDARY_CELL)

    objective_pass = False
    if not is_finite(primary) or primary < PRIMARY_REQUIRED - TOL.eq:
        count = primary if is_finite(primary) else 0.0
        acc.fail(f"Payload missing: need at least {PRIMARY_REQUIRED} AIM-120Ds (found {format_found(count)})")
    elif is_finite(secondary) and secondary >= SECONDARY_OBJECTIVE - TOL.eq:
        objective_pass = True

    return acc.outcome(payload_objective_pass=objective_pass)
