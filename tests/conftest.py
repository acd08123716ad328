"""Shared fixtures: a design workbook that satisfies the whole rubric."""

import pytest

from design_grader.cells import parse_ref
from design_grader.config import CONFIG_ENV_VAR
from design_grader.rubric import (
    CONSTRAINT_COLUMNS,
    CONSTRAINT_CURVES,
    CONSTRAINT_ROWS,
    CURVE_AXIS_ROW,
    CURVE_FIRST_COLUMN,
    CURVE_LAST_COLUMN,
    MISSION_LEGS,
    MISSION_ROWS,
    TAKEOFF_LANDING_ROWS,
    THRUST_AVAILABLE_ROW,
    THRUST_DRAG_ROW,
    THRUST_FIRST_COLUMN,
    THRUST_LAST_COLUMN,
)
from design_grader.schema import Workbook

FUEL_CAPACITY = 10000.0
FUEL_AVAILABLE = 2000.0
BETA = 1 - FUEL_AVAILABLE / (2 * FUEL_CAPACITY)  # 0.9

DESIGN_WING_LOADING = 60.0
DESIGN_THRUST_TO_WEIGHT = 1.2


def curve_axis() -> list[float]:
    """W/S samples 20, 25, ... 120 across K..AE."""
    return [20.0 + 5 * i for i in range(CURVE_LAST_COLUMN - CURVE_FIRST_COLUMN + 1)]


class SheetBuilder:
    """Mutable sheet that grows to fit whatever cells are set."""

    def __init__(self):
        self.rows = []

    def set(self, ref: str, value):
        row, col = parse_ref(ref)
        self._put(row, col, value)
        return self

    def set_at(self, row: int, column: int, value):
        """Set by 1-based row and column."""
        self._put(row - 1, column - 1, value)
        return self

    def set_row(self, row: int, first_column: int, values):
        for offset, value in enumerate(values):
            self.set_at(row, first_column + offset, value)
        return self

    def _put(self, row_idx: int, col_idx: int, value):
        while len(self.rows) <= row_idx:
            self.rows.append([])
        row = self.rows[row_idx]
        while len(row) <= col_idx:
            row.append(None)
        row[col_idx] = value

    def build(self) -> list:
        return [list(row) for row in self.rows]


class DesignWorkbook:
    """Builders for every sheet of a workbook, editable before ``build``."""

    def __init__(self):
        self.main = SheetBuilder()
        self.aero = SheetBuilder()
        self.miss = SheetBuilder()
        self.consts = SheetBuilder()
        self.gear = SheetBuilder()
        self.geom = SheetBuilder()

    def build(self, file_name: str = "design.xlsx") -> Workbook:
        sheets = {
            key: getattr(self, key).build()
            for key in ("main", "aero", "miss", "consts", "gear", "geom")
        }
        return Workbook(sheets=sheets, file_name=file_name)


def _fill_geometry(main: SheetBuilder):
    for row in range(18, 28):
        for col in range(2, 9):  # B..H
            main.set_at(row, col, 1.0)
    for row in range(34, 54):
        for col in range(3, 7):  # C..F
            main.set_at(row, col, 1.0)
        main.set_at(row, 2, (row - 34) * 2.5)  # fuselage station x
        main.set_at(row, 5, 6.0)  # fuselage width

    main.set("D18", 0.0)  # no strake
    main.set("B19", 3.0).set("C19", 2.0).set("H19", 1.5)  # aspect ratios
    main.set("B21", 40.0).set("C21", 40.0).set("H21", 40.0)  # leading-edge sweeps
    main.set_row(23, 2, [20.0, 40.0, 10.0, 10.0, 10.0, 10.0, 40.0])  # component x, B..H
    main.set("H24", 1.0)  # VT lateral offset
    main.set("C25", 0.0)  # PCS vertical location
    main.set("D52", 0.0).set("F52", 6.0)  # fuselage z center and height
    main.set("B32", 50.0)  # fuselage end
    main.set("H29", 3.0).set("I29", 20.0)  # engine diameter and length
    main.set("F31", 10.0).set("F32", 5.0)


def _fill_mission(main: SheetBuilder):
    for leg in MISSION_LEGS:
        main.set_at(MISSION_ROWS["altitude"], leg.column, leg.altitude)
        main.set_at(MISSION_ROWS["mach"], leg.column, leg.mach)
        main.set_at(MISSION_ROWS["afterburner"], leg.column, leg.afterburner)
        if leg.distance is not None:
            main.set_at(MISSION_ROWS["distance"], leg.column, leg.distance)
        if leg.time is not None:
            main.set_at(MISSION_ROWS["time"], leg.column, leg.time)
    main.set("Y37", 900.0)


def _fill_constraint_table(main: SheetBuilder):
    for row in CONSTRAINT_ROWS:
        values = {
            "beta": BETA,
            "altitude": row.altitude,
            "mach": row.mach,
            "n": row.n,
            "afterburner": row.afterburner,
            "ps": row.ps,
            "cdx": row.cdx,
        }
        for key, col in CONSTRAINT_COLUMNS.items():
            main.set_at(row.row, col, values[key])
    for row in TAKEOFF_LANDING_ROWS:
        values = {
            "beta": 1.0,
            "altitude": 0.0,
            "mach": row.speed_ratio,
            "n": row.mu,
            "afterburner": row.afterburner,
            "ps": row.distance,
            "cdx": row.cdx,
        }
        for key, col in CONSTRAINT_COLUMNS.items():
            main.set_at(row.row, col, values[key])
    main.set("P13", DESIGN_WING_LOADING).set("Q13", DESIGN_THRUST_TO_WEIGHT)


def _fill_consts(consts: SheetBuilder):
    axis = curve_axis()
    consts.set_row(CURVE_AXIS_ROW, CURVE_FIRST_COLUMN, axis)
    for curve in CONSTRAINT_CURVES:
        consts.set_row(curve.row, CURVE_FIRST_COLUMN, [0.5 + 0.005 * ws for ws in axis])
    consts.set("L33", 80.0)


def perfect_design() -> DesignWorkbook:
    """Build a design that passes every check and earns every objective."""
    design = DesignWorkbook()
    main = design.main

    _fill_geometry(main)
    _fill_mission(main)
    _fill_constraint_table(main)

    # Efficiency guards
    main.set("O1", 0.0037).set("Q1", 2.2).set("C30", 0.8).set("D30", 2.0)
    # Payload
    main.set("AB3", 10).set("AB4", 3)
    # Stability
    main.set("M10", 0.05).set("O10", -0.002).set("P10", 0.003).set("Q10", -0.5)
    # Fuel and volume
    main.set("O15", FUEL_CAPACITY).set("O18", FUEL_AVAILABLE).set("X40", 1800.0).set("Q23", 50.0)
    # Cost
    main.set("N31", 187).set("Q31", 100.0)

    _fill_consts(design.consts)

    for col in range(THRUST_FIRST_COLUMN, THRUST_LAST_COLUMN + 1):
        design.miss.set_at(THRUST_DRAG_ROW, col, 5000.0)
        design.miss.set_at(THRUST_AVAILABLE_ROW, col, 10000.0)

    design.gear.set("J19", 12.0).set("J20", 88.0)
    design.gear.set("L20", 10.0).set("L21", 15.0)
    design.gear.set("M20", 20.0).set("M21", 25.0)
    design.gear.set("N20", 150.0).set("N21", 180.0)

    design.aero.set("G3", 0.02).set("G4", 0.03)
    design.aero.set("G10", 0.5).set("G11", 0.6)
    design.aero.set("A15", 1.1).set("A16", 1.2)

    design.geom.set("C8", 8.0).set("C10", 8.0)
    design.geom.set("L117", 52.0).set("L118", 51.0)
    design.geom.set("L165", 52.0).set("L166", 51.0)
    return design


@pytest.fixture
def design() -> DesignWorkbook:
    """Editable builders for a design that passes every check."""
    return perfect_design()


@pytest.fixture
def perfect_workbook(design) -> Workbook:
    return design.build()


@pytest.fixture(autouse=True)
def no_config_override(monkeypatch):
    """Keep a config file named by the environment out of every test."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
