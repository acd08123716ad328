"""Thrust margin check over the tabulated mission segments."""

from ..cells import cell_ref, get_number_by_index, is_finite
from ..rubric import (
    THRUST_AVAILABLE_ROW,
    THRUST_DRAG_ROW,
    THRUST_FIRST_COLUMN,
    THRUST_LAST_COLUMN,
    TOL,
)
from ..schema import CheckOutcome, Workbook
from .base import RuleList


def check_thrust(workbook: Workbook) -> CheckOutcome:
    """Available thrust must exceed drag in every segment.

    A segment with missing drag or thrust data counts as a violation.
    """
    acc = RuleList("thrust")
    miss = workbook.sheet("miss")

    short = []
    missing = []
    for col in range(THRUST_FIRST_COLUMN, THRUST_LAST_COLUMN + 1):
        drag = get_number_by_index(miss, THRUST_DRAG_ROW, col)
        available = get_number_by_index(miss, THRUST_AVAILABLE_ROW, col)
        if not is_finite(drag) or not is_finite(available):
            missing.append(col)
        elif drag >= available - TOL.eq:
            short.append(col)

    if missing:
        refs = ", ".join(cell_ref(THRUST_AVAILABLE_ROW - 1, col - 1) for col in missing)
        acc.fail(f"Thrust/drag data missing for {len(missing)} mission segment(s) (check {refs} and the drag row above).")
    if short:
        acc.fail(f"Thrust shortfall: Tavailable <= Drag for {len(short)} mission segment(s).")

    return acc.outcome()
