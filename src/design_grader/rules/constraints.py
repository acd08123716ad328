"""Constraint table and constraint curve check.

Validates the flight conditions of the constraint table on the main sheet
and compares the design point against the tabulated T/W requirement curves
on the consts sheet.
"""

import logging

from ..cells import (
    format_found,
    get_number,
    get_number_by_index,
    get_numbers,
    is_finite,
    within,
)
from ..interpolation import evaluate_curve
from ..rubric import (
    CONSTRAINT_COLUMNS,
    CONSTRAINT_CURVES,
    CONSTRAINT_ROWS,
    CURVE_AXIS_ROW,
    CURVE_FIRST_COLUMN,
    CURVE_LAST_COLUMN,
    DESIGN_THRUST_TO_WEIGHT_CELL,
    DESIGN_WING_LOADING_CELL,
    LANDING_WING_LOADING_LIMIT_CELL,
    TAKEOFF_LANDING_ROWS,
    TOL,
    ConstraintRow,
    RunwayRow,
)
from ..schema import CheckOutcome, Workbook
from .base import RuleList

logger = logging.getLogger(__name__)


def _read_row(main, row: int) -> dict[str, float]:
    return {key: get_number_by_index(main, row, col) for key, col in CONSTRAINT_COLUMNS.items()}


def _check_flight_row(acc: RuleList, main, exp: ConstraintRow, beta_expected: float) -> None:
    values = _read_row(main, exp.row)
    label = exp.label
    acc.require(
        within(values["altitude"], exp.altitude, TOL.alt),
        lambda: f"{label}: Altitude must be {exp.altitude:.0f} (found {format_found(values['altitude'])})",
    )
    acc.require(
        within(values["mach"], exp.mach, TOL.mach),
        lambda: f"{label}: Mach must be {exp.mach:g} (found {format_found(values['mach'])})",
    )
    acc.require(
        within(values["n"], exp.n, TOL.eq),
        lambda: f"{label}: n must be {exp.n:.3f} (found {format_found(values['n'])})",
    )
    acc.require(
        within(values["afterburner"], exp.afterburner, TOL.eq),
        lambda: f"{label}: AB must be {exp.afterburner:.0f}% (found {format_found(values['afterburner'])}%)",
    )
    acc.require(
        within(values["ps"], exp.ps, TOL.eq),
        lambda: f"{label}: Ps must be {exp.ps:.0f} (found {format_found(values['ps'])})",
    )
    if exp.cdx is not None:
        acc.require(
            within(values["cdx"], exp.cdx, TOL.eq),
            lambda: f"{label}: CDx must be {exp.cdx:.3f} (found {format_found(values['cdx'])})",
        )
    acc.require(
        within(values["beta"], beta_expected, TOL.wto),
        lambda: (
            f"{label}: W/WTO must be set for 50% fuel load ({beta_expected:.3f}); "
            f"found {format_found(values['beta'])}"
        ),
    )


def _check_runway_row(acc: RuleList, main, exp: RunwayRow) -> None:
    values = _read_row(main, exp.row)
    label = exp.label
    acc.require(
        within(values["altitude"], 0, TOL.alt),
        f"{label}: Altitude must be 0 (found {format_found(values['altitude'])})",
    )
    acc.require(
        within(values["mach"], exp.speed_ratio, TOL.mach),
        lambda: f"{label}: V/Vstall must be {exp.speed_ratio:g} (found {format_found(values['mach'])})",
    )
    acc.require(
        within(values["n"], exp.mu, exp.mu_tolerance),
        lambda: f"{label}: mu must be {exp.mu:g} (found {format_found(values['n'])})",
    )
    acc.require(
        within(values["afterburner"], exp.afterburner, TOL.eq),
        lambda: f"{label}: AB must be {exp.afterburner:.0f}% (found {format_found(values['afterburner'])}%)",
    )
    acc.require(
        within(values["ps"], exp.distance, TOL.dist),
        lambda: f"{label} distance must be {exp.distance:.0f} ft (found {format_found(values['ps'])})",
    )
    acc.require(
        within(values["beta"], 1.0, TOL.wto),
        lambda: f"{label}: W/WTO must be 1.000 within ±{TOL.wto:.3f} (found {format_found(values['beta'])})",
    )
    acc.require(
        within(values["cdx"], exp.cdx, TOL.eq),
        lambda: f"{label}: CDx must be {exp.cdx:.3f} (found {format_found(values['cdx'])})",
    )


def _check_curves(acc: RuleList, main, consts) -> list[str]:
    """Compare the design point to every constraint curve.

    Returns the labels of failed curves. Curve data problems are reported as
    informational diagnostics and never count as failures.
    """
    failed = []
    ws_design = get_number(main, DESIGN_WING_LOADING_CELL)
    tw_design = get_number(main, DESIGN_THRUST_TO_WEIGHT_CELL)
    if not is_finite(ws_design) or not is_finite(tw_design):
        acc.fail(
            f"Design point missing: W/S ({DESIGN_WING_LOADING_CELL} = {format_found(ws_design)}) and "
            f"T/W ({DESIGN_THRUST_TO_WEIGHT_CELL} = {format_found(tw_design)}) are required for the constraint curves"
        )
        return failed

    ws_axis = get_numbers(consts, CURVE_AXIS_ROW, CURVE_FIRST_COLUMN, CURVE_LAST_COLUMN)
    if sum(1 for v in ws_axis if is_finite(v)) < 2:
        logger.warning("Constraint curve W/S axis has fewer than two values")
        acc.note("Could not verify constraint curves: W/S axis on the constraints sheet has fewer than two values.")
    else:
        for curve in CONSTRAINT_CURVES:
            tw_curve = get_numbers(consts, curve.row, CURVE_FIRST_COLUMN, CURVE_LAST_COLUMN)
            estimate = evaluate_curve(ws_axis, tw_curve, ws_design)
            if not estimate.ok:
                logger.warning("Constraint curve %s not evaluated: %s", curve.label, estimate.diagnostic)
                acc.note(f"Could not verify constraint curve {curve.label}: {estimate.diagnostic}.")
                continue
            if tw_design < estimate.value - TOL.eq:
                failed.append(curve.label)
                acc.fail(
                    f"Constraint curve {curve.label}: T/W={format_found(tw_design)} below required "
                    f"{format_found(estimate.value)} at W/S={format_found(ws_design)}"
                )

    ws_limit_landing = get_number(consts, LANDING_WING_LOADING_LIMIT_CELL)
    if not is_finite(ws_limit_landing):
        acc.note(f"Could not verify landing constraint: W/S limit ({LANDING_WING_LOADING_LIMIT_CELL}) missing.")
    elif ws_design > ws_limit_landing:
        failed.append("Landing")
        acc.fail(
            f"Landing constraint violated: W/S = {format_found(ws_design)} exceeds limit of "
            f"{format_found(ws_limit_landing)}"
        )
    return failed


def check_constraints(workbook: Workbook, beta_expected: float) -> CheckOutcome:
    """Check the constraint table rows and the constraint curves.

    Args:
        workbook: Workbook being graded
        beta_expected: W/WTO expected on the flight-condition rows

    Flags:
        table_pass: every table entry matched
        curves_pass: the design point satisfied every evaluated curve
    """
    acc = RuleList("constraints")
    main = workbook.sheet("main")
    consts = workbook.sheet("consts")

    for row in CONSTRAINT_ROWS:
        _check_flight_row(acc, main, row, beta_expected)
    for row in TAKEOFF_LANDING_ROWS:
        _check_runway_row(acc, main, row)
    table_errors = acc.failures
    lines_before_curves = len(acc.lines)

    try:
        failed_curves = _check_curves(acc, main, consts)
    except (ArithmeticError, ValueError) as e:
        logger.warning("Constraint curve check aborted: %s", e)
        # A failed evaluation attributes no curve failures
        del acc.lines[lines_before_curves:]
        acc.failures = table_errors
        acc.note(f"Could not perform constraint curve check due to error: {e}")
        failed_curves = []
    curve_errors = acc.failures - table_errors

    if len(failed_curves) == 1:
        acc.detail(f"Design did not meet the following constraint curve: {failed_curves[0]}.")
    elif len(failed_curves) >= 2:
        acc.detail(f"Design did not meet the following constraint curves: {', '.join(failed_curves)}.")

    if table_errors > 0:
        acc.detail(f"Constraint table has {table_errors} entry issue(s).")

    if acc.failures > 0:
        acc.detail("Constraint compliance not met; adjust design to satisfy all threshold constraints.")

    return acc.outcome(table_pass=table_errors == 0, curves_pass=curve_errors == 0)
