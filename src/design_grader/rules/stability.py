"""Static stability check: margin and lateral-directional derivatives."""

from ..cells import format_found, get_number, is_finite
from ..schema import CheckOutcome, Workbook
from .base import RuleList


def _derivative(value: float) -> str:
    return f"{value:.6f}" if is_finite(value) else "NaN"


def check_stability(workbook: Workbook) -> CheckOutcome:
    acc = RuleList("stability")
    main = workbook.sheet("main")
    static_margin = get_number(main, "M10")
    clb = get_number(main, "O10")
    cnb = get_number(main, "P10")
    ratio = get_number(main, "Q10")

    if not (is_finite(static_margin) and -0.1 <= static_margin <= 0.11):
        acc.fail(f"Static margin out of bounds (M10 = {format_found(static_margin)})")
        if is_finite(static_margin) and static_margin < 0:
            acc.detail("Warning: aircraft is statically unstable (SM < 0)")
    acc.require(is_finite(clb) and clb < -0.001, f"Clb must be < -0.001 (O10 = {_derivative(clb)})")
    acc.require(is_finite(cnb) and cnb > 0.002, f"Cnb must be > 0.002 (P10 = {_derivative(cnb)})")
    acc.require(
        is_finite(ratio) and -1 <= ratio <= -0.3,
        f"Cnb/Clb ratio must be between -1 and -0.3 (Q10 = {format_found(ratio)})",
    )

    if acc.failures > 0:
        acc.detail(f"Stability criteria failed in {acc.failures} area(s).")
    return acc.outcome()
