"""Fuel sufficiency and internal volume check."""

from ..cells import format_found, get_number, is_finite
from ..rubric import TOL
from ..schema import CheckOutcome, Workbook
from .base import RuleList

FUEL_AVAILABLE_CELL = "O18"
FUEL_CAPACITY_CELL = "O15"
FUEL_REQUIRED_CELL = "X40"
VOLUME_REMAINING_CELL = "Q23"


def check_fuel_volume(workbook: Workbook) -> CheckOutcome:
    """Check fuel and volume.

    Flags:
        fuel_pass: fuel available covers fuel required
        volume_pass: internal volume remaining is positive
    """
    acc = RuleList("fuel_volume")
    main = workbook.sheet("main")
    available = get_number(main, FUEL_AVAILABLE_CELL)
    required = get_number(main, FUEL_REQUIRED_CELL)
    volume_remaining = get_number(main, VOLUME_REMAINING_CELL)

    fuel_pass = acc.require(
        is_finite(available) and is_finite(required) and available + TOL.eq >= required,
        f"Fuel available ({format_found(available)}) is less than required "
        f"({format_found(required)}); check reserves.",
    )
    volume_pass = acc.require(
        is_finite(volume_remaining) and volume_remaining > 0,
        f"Volume remaining must be positive ({VOLUME_REMAINING_CELL} = {format_found(volume_remaining)}).",
    )
    return acc.outcome(fuel_pass=fuel_pass, volume_pass=volume_pass)
