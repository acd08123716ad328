"""Recurring cost check at the fixed fleet size."""

from ..cells import format_found, get_number, is_finite
from ..rubric import TOL
from ..schema import CheckOutcome, Workbook
from .base import RuleList

FLEET_SIZE = 187
COST_THRESHOLD = 120.0  # $M per aircraft
COST_OBJECTIVE = 110.0


def check_cost(workbook: Workbook) -> CheckOutcome:
    """Check recurring cost.

    Flags:
        cost_objective_pass: cost below the $110M objective at 187 aircraft
    """
    acc = RuleList("cost")
    main = workbook.sheet("main")
    num_aircraft = get_number(main, "N31")
    cost = get_number(main, "Q31")

    objective_pass = False
    if not is_finite(num_aircraft) or abs(num_aircraft - FLEET_SIZE) > 1e-3:
        acc.fail(
            f"Number of aircraft (N31) must be {FLEET_SIZE} to evaluate cost thresholds "
            f"(found {format_found(num_aircraft)})."
        )
    elif not is_finite(cost):
        acc.fail(f"Recurring cost missing for {FLEET_SIZE}-aircraft estimate.")
    else:
        acc.require(
            cost < COST_THRESHOLD + TOL.eq,
            f"Cost above threshold: ${format_found(cost)}M for {FLEET_SIZE} aircraft (needs <${COST_THRESHOLD:.0f}M).",
        )
        objective_pass = cost < COST_OBJECTIVE + TOL.eq

    return acc.outcome(cost_objective_pass=objective_pass)
