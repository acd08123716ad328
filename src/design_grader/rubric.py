"""Fixed grading rubric.

Expected values, tolerances, scoring buckets and objectives as immutable
data. Nothing here is configurable per run; the rule checkers and the
aggregator read these tables so the rubric can be audited in one place.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Tolerances:
    """Absolute tolerances for numeric comparisons."""
    eq: float = 1e-3
    wto: float = 1e-2
    alt: float = 1.0
    mach: float = 1e-2
    time: float = 1e-2
    dist: float = 1e-3


TOL = Tolerances()

BASE_TOTAL = 85.0
OBJECTIVE_TOTAL = 15.0
MAX_SCORE = 100.0
BUCKET_DEDUCTION = 5.0
OBJECTIVE_BONUS = 5.0

# Logical sheet keys, in scan order
SHEET_KEYS = ("main", "aero", "miss", "consts", "gear", "geom")

# W/WTO at 50% fuel when the workbook cannot provide fuel figures
BETA_DEFAULT = 0.87620980519917


# =============================================================================
# Geometry gate
# =============================================================================


@dataclass(frozen=True)
class GeometryBlock:
    """Rectangular block of main-sheet cells that must all be numeric."""
    first_row: int
    last_row: int
    first_column: str
    last_column: str
    skips: frozenset = frozenset()


GEOMETRY_BLOCKS = (
    GeometryBlock(18, 27, "B", "H", frozenset({"B24", "C24", "D27", "E27", "F27", "G27", "H26"})),
    GeometryBlock(34, 53, "C", "F"),
)


# =============================================================================
# Mission profile (main sheet, legs in columns K..X)
# =============================================================================


@dataclass(frozen=True)
class MissionLeg:
    """Expected values for one mission leg."""
    leg: int
    column: int  # 1-based column in the main sheet
    altitude: float
    mach: float
    afterburner: float
    distance: Optional[float] = None  # supercruise legs only
    time: Optional[float] = None  # timed legs only (minutes)
    check_mach: bool = True
    check_afterburner: bool = True


MISSION_ROWS = {
    "altitude": 33,
    "mach": 35,
    "afterburner": 36,
    "distance": 38,
    "time": 39,
}

MISSION_LEGS = (
    MissionLeg(1, 11, 0, 0.268473504, 100, check_mach=False),
    MissionLeg(2, 12, 2000, 0.88, 0),
    MissionLeg(3, 13, 35000, 0.88, 0),
    MissionLeg(4, 14, 35000, 0.88, 0),
    MissionLeg(5, 15, 35000, 0.88, 0),
    MissionLeg(6, 16, 35000, 1.5, 0, distance=400),
    MissionLeg(7, 17, 35000, 0.8, 0),
    MissionLeg(8, 18, 30000, 0.8, 100, time=2),
    MissionLeg(9, 19, 35000, 1.5, 0, distance=400),
    MissionLeg(10, 20, 35000, 0.8, 0),
    MissionLeg(11, 21, 35000, 0.88, 0),
    MissionLeg(12, 22, 35000, 0.88, 0),
    MissionLeg(13, 23, 10000, 0.4, 0, time=20),
    MissionLeg(14, 24, 0, 0.0, 0, check_afterburner=False),
)

RADIUS_CELL = "Y37"
RANGE_THRESHOLD_NM = 500.0
RANGE_OBJECTIVE_NM = 800.0


# =============================================================================
# Efficiency guards
# =============================================================================


@dataclass(frozen=True)
class FixedCell:
    """A main-sheet cell that must equal a constant."""
    ref: str
    expected: float
    label: str


EFFICIENCY_GUARDS = (
    FixedCell("O1", 0.0037, "0.0037"),
    FixedCell("Q1", 2.2, "2.2"),
    FixedCell("C30", 0.8, "0.8"),
    FixedCell("D30", 2.0, "2.0"),
)


# =============================================================================
# Thrust margin (miss sheet)
# =============================================================================

THRUST_DRAG_ROW = 48
THRUST_AVAILABLE_ROW = 49
THRUST_FIRST_COLUMN = 3  # C
THRUST_LAST_COLUMN = 14  # N


# =============================================================================
# Constraint table (main sheet, columns S..Y)
# =============================================================================

CONSTRAINT_COLUMNS = {
    "beta": 19,  # S, W/WTO
    "altitude": 20,  # T
    "mach": 21,  # U
    "n": 22,  # V
    "afterburner": 23,  # W
    "ps": 24,  # X
    "cdx": 25,  # Y
}


@dataclass(frozen=True)
class ConstraintRow:
    """Expected flight condition for one constraint-table row."""
    label: str
    row: int
    altitude: float
    mach: float
    n: float
    afterburner: float
    ps: float
    cdx: Optional[float] = None


CONSTRAINT_ROWS = (
    ConstraintRow("MaxMach", 3, 35000, 2.0, 1, 100, 0, 0),
    ConstraintRow("CruiseMach", 4, 35000, 1.5, 1, 0, 0, 0),
    ConstraintRow("Supercruise", 5, 50000, 1.5, 1, 100, 0, 0),
    ConstraintRow("Cmbt Turn1", 6, 30000, 1.2, 3.0, 100, 0, 0),
    ConstraintRow("Cmbt Turn2", 7, 10000, 0.9, 4.0, 100, 0, 0),
    ConstraintRow("Ps1", 8, 30000, 1.15, 1, 100, 400, 0),
    ConstraintRow("Ps2", 9, 10000, 0.9, 1, 0, 400, 0),
)


@dataclass(frozen=True)
class RunwayRow:
    """Expected takeoff or landing row; distance sits in the Ps column."""
    label: str
    row: int
    speed_ratio: float  # V/Vstall, Mach column
    mu: float
    mu_tolerance: float
    afterburner: float
    distance: float
    cdx: float


TAKEOFF_LANDING_ROWS = (
    RunwayRow("Takeoff", 12, 1.2, 0.03, 5e-4, 100, 3000, 0.035),
    RunwayRow("Landing", 13, 1.3, 0.5, 1e-3, 0, 5000, 0.045),
)


# =============================================================================
# Constraint curves (consts sheet, W/S axis in columns K..AE)
# =============================================================================


@dataclass(frozen=True)
class ConstraintCurve:
    """A tabulated T/W requirement curve."""
    label: str
    row: int


CURVE_AXIS_ROW = 22
CURVE_FIRST_COLUMN = 11  # K
CURVE_LAST_COLUMN = 31  # AE

CONSTRAINT_CURVES = (
    ConstraintCurve("MaxMach", 23),
    ConstraintCurve("Supercruise", 24),
    ConstraintCurve("CombatTurn1", 26),
    ConstraintCurve("CombatTurn2", 27),
    ConstraintCurve("Ps1", 28),
    ConstraintCurve("Ps2", 29),
    ConstraintCurve("Takeoff", 32),
)

DESIGN_WING_LOADING_CELL = "P13"
DESIGN_THRUST_TO_WEIGHT_CELL = "Q13"
LANDING_WING_LOADING_LIMIT_CELL = "L33"


# =============================================================================
# Buckets and objectives
# =============================================================================


@dataclass(frozen=True)
class BucketMember:
    """A check flag contributing to a bucket.

    ``reason`` is shown when the member fails; it may reference the
    outcome's ``{failures}`` count.
    """
    check: str
    flag: str = "passed"
    reason: str = ""


@dataclass(frozen=True)
class Bucket:
    """A group of checks sharing one flat deduction."""
    key: str
    label: str
    members: tuple
    not_met: str


BUCKETS = (
    Bucket(
        "constraints",
        "Constraints",
        (
            BucketMember("constraints", reason="constraint table/curves"),
            BucketMember("payload", reason="payload"),
            BucketMember("efficiency", reason="efficiency guards"),
            BucketMember("thrust", reason="Tavail>Drag"),
            BucketMember("sheet_validity", reason="sheet validation"),
        ),
        "constraints/payload/efficiency/Tavail/sheet validity",
    ),
    Bucket("range", "Range", (BucketMember("mission", "range_pass"),), "range"),
    Bucket(
        "geometry",
        "Geometry",
        (
            BucketMember("controls", reason="controls"),
            BucketMember("stability", reason="stability"),
        ),
        "geometry (controls/stability)",
    ),
    Bucket("gear", "Gear", (BucketMember("gear", reason="{failures} issue(s)"),), "landing gear"),
    Bucket("fuel", "Fuel", (BucketMember("fuel_volume", "fuel_pass"),), "fuel"),
    Bucket("volume", "Volume", (BucketMember("fuel_volume", "volume_pass"),), "volume remaining"),
    Bucket("stealth", "Stealth", (BucketMember("stealth"),), "stealth shaping"),
)

# Informational checks: listed under "Checks not met" without a deduction
INFORMATIONAL_CHECKS = (
    ("mission", "mission table (no deduction)"),
)


@dataclass(frozen=True)
class Objective:
    """An additive bonus for exceeding a baseline requirement."""
    label: str
    check: str
    flag: str


OBJECTIVES = (
    Objective("Range", "mission", "range_objective_pass"),
    Objective("Cost", "cost", "cost_objective_pass"),
    Objective("Payload", "payload", "payload_objective_pass"),
)
