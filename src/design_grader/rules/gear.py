"""Landing gear geometry check.

The rotation speed checks are chained: the N21 margin checks only run when
the N20 rotation speed is present.
"""

from ..cells import format_found, get_number, is_finite
from ..rubric import TOL
from ..schema import CheckOutcome, Workbook
from .base import RuleList

ANGLE_TOL = 1e-2
MAIN_GEAR_SHARE_RANGE = (80.0, 95.0)
MAX_ROTATION_SPEED_KTS = 200.0


def _angle_rule(acc: RuleList, name: str, actual: float, limit: float) -> None:
    acc.require(
        is_finite(actual) and is_finite(limit) and actual < limit - ANGLE_TOL,
        f"Violates {name} angle requirement: upper {format_found(actual)}° must be less than "
        f"lower {format_found(limit)}°",
    )


def check_gear(workbook: Workbook) -> CheckOutcome:
    acc = RuleList("gear")
    gear = workbook.sheet("gear")

    low, high = MAIN_GEAR_SHARE_RANGE
    share = get_number(gear, "J20")
    acc.require(
        is_finite(share) and low - TOL.eq <= share <= high + TOL.eq,
        f"Violates nose gear 90/10 rule: {format_found(share)}% (must be between {low:.0f}% and {high:.0f}%)",
    )

    _angle_rule(acc, "tipback", get_number(gear, "L20"), get_number(gear, "L21"))
    _angle_rule(acc, "rollover", get_number(gear, "M20"), get_number(gear, "M21"))

    rotation_speed = get_number(gear, "N20")
    rotation_ref = get_number(gear, "N21")
    if not is_finite(rotation_speed):
        acc.fail("Takeoff rotation speed (N20) missing; must be <200 kts and below N21.")
    else:
        acc.require(
            rotation_speed < MAX_ROTATION_SPEED_KTS - TOL.eq,
            f"Violates takeoff rotation speed: N20 = {format_found(rotation_speed)} kts (must be < 200 kts)",
        )
        if not is_finite(rotation_ref):
            acc.fail("Takeoff speed margin failed: N21 missing; N20 must be below N21.")
        else:
            acc.require(
                rotation_speed < rotation_ref - TOL.eq,
                f"Takeoff speed margin failed: N20 must be less than N21 "
                f"(N20 = {format_found(rotation_speed)}, N21 = {format_found(rotation_ref)})",
            )
            acc.require(
                rotation_ref <= MAX_ROTATION_SPEED_KTS + TOL.eq,
                f"Takeoff speed too high: N21 = {format_found(rotation_ref)} kts (must be ≤ 200 kts). "
                "Reduce your wing loading or T/W ratio.",
            )

    if acc.failures > 0:
        acc.detail(f"Landing gear geometry outside limits in {acc.failures} area(s).")
    return acc.outcome()
