"""Mission profile check.

Compares the 14-leg mission table on the main sheet against the fixed
per-leg expectations and evaluates the combat radius against the range
threshold and objective.
"""

from ..cells import format_found, get_number_by_index, is_finite
from ..rubric import (
    MISSION_LEGS,
    MISSION_ROWS,
    RANGE_OBJECTIVE_NM,
    RANGE_THRESHOLD_NM,
    TOL,
)
from ..schema import CheckOutcome, Workbook
from .base import RuleList


def _mismatch(value: float, expected: float, tolerance: float) -> bool:
    return not is_finite(value) or abs(value - expected) > tolerance


def check_mission_profile(workbook: Workbook, radius: float) -> CheckOutcome:
    """Check mission legs and range.

    Flags:
        range_pass: radius >= 500 nm
        range_objective_pass: radius >= 800 nm
    """
    acc = RuleList("mission")
    main = workbook.sheet("main")

    for leg in MISSION_LEGS:
        def read(row_key: str) -> float:
            return get_number_by_index(main, MISSION_ROWS[row_key], leg.column)

        altitude = read("altitude")
        if _mismatch(altitude, leg.altitude, TOL.alt):
            acc.fail(f"Leg {leg.leg} Altitude must be {leg.altitude:.0f} (found {format_found(altitude)})")

        if leg.check_mach:
            mach = read("mach")
            if _mismatch(mach, leg.mach, TOL.mach):
                acc.fail(f"Leg {leg.leg} Mach must be {leg.mach:g} (found {format_found(mach)})")

        if leg.check_afterburner:
            afterburner = read("afterburner")
            if _mismatch(afterburner, leg.afterburner, TOL.eq):
                acc.fail(f"Leg {leg.leg} AB must be {leg.afterburner:.0f}% (found {format_found(afterburner)}%)")

        if leg.distance is not None:
            distance = read("distance")
            if _mismatch(distance, leg.distance, TOL.dist):
                acc.fail(f"Leg {leg.leg} Supercruise distance must be {leg.distance:.0f} (found {format_found(distance)})")

        if leg.time is not None:
            time = read("time")
            if _mismatch(time, leg.time, TOL.time):
                acc.fail(f"Leg {leg.leg} Time must be {leg.time:.2f} min (found {format_found(time)})")

    range_pass = False
    range_objective_pass = False
    if is_finite(radius):
        if radius >= RANGE_OBJECTIVE_NM - TOL.dist:
            range_pass = True
            range_objective_pass = True
        elif radius >= RANGE_THRESHOLD_NM - TOL.dist:
            range_pass = True
        else:
            acc.fail(
                f"Range below threshold: mission radius = {format_found(radius)} nm "
                f"(needs >= {RANGE_THRESHOLD_NM:.0f} nm)"
            )
    else:
        acc.fail("Mission radius missing; unable to verify range requirement.")

    return acc.outcome(range_pass=range_pass, range_objective_pass=range_objective_pass)
