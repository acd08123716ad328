"""Advisory rule sets.

Coarser per-leg mission and landing gear rules reported alongside a grade
but never folded into the score. Each returns a suggested point delta so
reviewers can see what a stricter rubric would take off.
"""

from ..cells import format_found, get_number, get_number_by_index, is_finite
from ..rubric import MISSION_ROWS
from ..schema import AdvisoryResult, Workbook

# Columns (1-based) of the nine legs the advisory mission rules inspect: K, L, M, N, P, R, S, V, W
ADVISORY_LEG_COLUMNS = (11, 12, 13, 14, 16, 18, 19, 22, 23)
ALT_TOL = 10.0
MACH_TOL = 0.05
TIME_TOL = 0.1
DIST_TOL = 0.5
MAX_MISSION_DEDUCTION = 2

NOSE_SHARE_RANGE = (10.0, 20.0)
PERCENT_TOL = 0.5
ANGLE_TOL = 0.1
SPEED_TOL = 0.5
MAX_GEAR_DEDUCTION = 4

MISSION_LEG_MESSAGES = (
    "Takeoff leg: altitude must be 0 ft with full afterburner.",
    "Climb leg: altitude must lie between the takeoff and cruise altitudes.",
    "Climb leg: Mach must lie between the takeoff and cruise Mach numbers.",
    "Climb leg: afterburner must be off.",
    "First subsonic cruise: at or above 35,000 ft, Mach 0.9, afterburner off.",
    "Second subsonic cruise: at or above 35,000 ft, Mach 0.9, afterburner off.",
    "Supercruise out: at or above 35,000 ft at the constraint cruise Mach (U4), afterburner off, at least 150 nm.",
    "Combat: at or above 30,000 ft, at least Mach 1.2, full afterburner, at least 2 min.",
    "Supercruise back: at or above 35,000 ft at the constraint cruise Mach (U4), afterburner off, at least 150 nm.",
    "Subsonic return: at or above 35,000 ft, Mach 0.9, afterburner off.",
    "Loiter: 10,000 ft, Mach 0.4, afterburner off, 20 min.",
)


def _off(value: float, expected: float, tolerance: float) -> bool:
    return not is_finite(value) or abs(value - expected) > tolerance


def _below(value: float, minimum: float) -> bool:
    return not is_finite(value) or value < minimum


def _subsonic_cruise_off(altitude: float, mach: float, afterburner: float) -> bool:
    return _below(altitude, 35000 - ALT_TOL) or _off(mach, 0.9, MACH_TOL) or _off(afterburner, 0, ALT_TOL)


def _supercruise_off(altitude: float, mach: float, afterburner: float, distance: float, cruise_mach: float) -> bool:
    return (
        _below(altitude, 35000 - ALT_TOL)
        or _off(mach, cruise_mach, MACH_TOL)
        or _off(afterburner, 0, ALT_TOL)
        or _below(distance, 150 - DIST_TOL)
    )


def _between(value: float, lower: float, upper: float, tolerance: float) -> bool:
    return is_finite(value) and is_finite(lower) and is_finite(upper) and lower - tolerance <= value <= upper + tolerance


def run_mission_leg_advisories(workbook: Workbook) -> AdvisoryResult:
    """Apply the advisory per-leg mission rules."""
    main = workbook.sheet("main")
    cruise_mach = get_number(main, "U4")

    def row(key: str) -> list[float]:
        return [get_number_by_index(main, MISSION_ROWS[key], col) for col in ADVISORY_LEG_COLUMNS]

    alt, mach, ab, dist, time = row("altitude"), row("mach"), row("afterburner"), row("distance"), row("time")

    violated = (
        _off(alt[0], 0, ALT_TOL) or _off(ab[0], 100, ALT_TOL),
        not _between(alt[1], alt[0], alt[2], ALT_TOL),
        not _between(mach[1], mach[0], mach[2], MACH_TOL),
        _off(ab[1], 0, ALT_TOL),
        _subsonic_cruise_off(alt[2], mach[2], ab[2]),
        _subsonic_cruise_off(alt[3], mach[3], ab[3]),
        _supercruise_off(alt[4], mach[4], ab[4], dist[4], cruise_mach),
        _below(alt[5], 30000 - ALT_TOL) or _below(mach[5], 1.2 - MACH_TOL)
        or _off(ab[5], 100, ALT_TOL) or _below(time[5], 2 - TIME_TOL),
        _supercruise_off(alt[6], mach[6], ab[6], dist[6], cruise_mach),
        _subsonic_cruise_off(alt[7], mach[7], ab[7]),
        _off(alt[8], 10000, ALT_TOL) or _off(mach[8], 0.4, MACH_TOL)
        or _off(ab[8], 0, ALT_TOL) or _off(time[8], 20, TIME_TOL),
    )

    feedback = [message for failed, message in zip(violated, MISSION_LEG_MESSAGES) if failed]
    if not feedback:
        return AdvisoryResult(name="mission_legs")
    deduction = min(MAX_MISSION_DEDUCTION, len(feedback))
    feedback.append(f"Mission profile issues would cost {deduction} point(s) under the per-leg rubric.")
    return AdvisoryResult(name="mission_legs", delta=-deduction, feedback=feedback)


def run_landing_gear_advisories(workbook: Workbook) -> AdvisoryResult:
    """Apply the advisory landing gear rules.

    A slow-rotation failure is echoed by a second takeoff-speed line; the
    echo is part of the advisory output and does not count as a failure.
    """
    gear = workbook.sheet("gear")
    feedback = []
    failures = 0

    low, high = NOSE_SHARE_RANGE
    nose = get_number(gear, "J19")
    if not is_finite(nose) or nose < low - PERCENT_TOL or nose > high + PERCENT_TOL:
        feedback.append(f"Nose gear carries {format_found(nose)}% of the weight (must be between 10% and 20%).")
        failures += 1

    for name, upper_ref, lower_ref in (("Tipback", "L20", "L21"), ("Rollover", "M20", "M21")):
        upper = get_number(gear, upper_ref)
        lower = get_number(gear, lower_ref)
        if not is_finite(upper) or not is_finite(lower) or upper >= lower - ANGLE_TOL:
            feedback.append(
                f"{name} angle {format_found(upper)}° must be less than {format_found(lower)}° ({upper_ref} < {lower_ref})."
            )
            failures += 1

    rotation = get_number(gear, "N20")
    if not is_finite(rotation) or rotation >= 200 - SPEED_TOL:
        feedback.append(f"Rotation speed {format_found(rotation)} kts must be below 200 kts.")
        failures += 1
    if not is_finite(rotation) or rotation >= 200 - SPEED_TOL:
        feedback.append(f"Takeoff speed {format_found(rotation)} kts too high; reduce wing loading or raise T/W.")

    if failures == 0:
        return AdvisoryResult(name="landing_gear")
    deduction = min(MAX_GEAR_DEDUCTION, failures)
    feedback.append(f"Landing gear issues would cost {deduction} point(s) under the per-item rubric.")
    return AdvisoryResult(name="landing_gear", delta=-deduction, feedback=feedback)
