"""Tests for the individual rule checkers."""

import pytest

from design_grader.rules import constraints as constraints_module
from design_grader.rules.base import Rule, RuleList, evaluate_rules
from design_grader.rules.constraints import check_constraints
from design_grader.rules.controls import check_control_attachment, wing_leading_edge_x
from design_grader.rules.cost import check_cost
from design_grader.rules.efficiency import check_efficiency
from design_grader.rules.fuel import check_fuel_volume
from design_grader.rules.gear import check_gear
from design_grader.rules.mission import check_mission_profile
from design_grader.rules.payload import check_payload
from design_grader.rules.stability import check_stability
from design_grader.rules.thrust import check_thrust
from design_grader.schema import LineLevel, Workbook

from conftest import BETA, curve_axis

CHECKERS = {
    "mission": lambda wb: check_mission_profile(wb, 900.0),
    "efficiency": check_efficiency,
    "thrust": check_thrust,
    "controls": check_control_attachment,
    "constraints": lambda wb: check_constraints(wb, BETA),
    "payload": check_payload,
    "stability": check_stability,
    "fuel_volume": check_fuel_volume,
    "cost": check_cost,
    "gear": check_gear,
}


class TestRuleList:
    """Tests for the rule accumulator."""

    def test_require_records_failure(self):
        acc = RuleList("demo")
        assert acc.require(True, "never shown")
        assert not acc.require(False, "shown")
        outcome = acc.outcome()
        assert outcome.feedback == ["shown"]
        assert outcome.failures == 1
        assert not outcome.passed

    def test_lazy_message_only_rendered_on_failure(self):
        acc = RuleList("demo")
        acc.require(True, lambda: 1 / 0)
        assert acc.outcome().passed

    def test_notes_do_not_fail(self):
        acc = RuleList("demo")
        acc.note("diagnostic")
        outcome = acc.outcome()
        assert outcome.passed
        assert outcome.notes == ["diagnostic"]
        assert outcome.lines[0].level == LineLevel.INFO

    def test_detail_fails_without_counting(self):
        acc = RuleList("demo")
        acc.detail("summary")
        outcome = acc.outcome()
        assert not outcome.passed
        assert outcome.failures == 0

    def test_evaluate_rules_in_order(self):
        acc = RuleList("demo")
        rules = [
            Rule(lambda: False, "first"),
            Rule(lambda: True, "ok"),
            Rule(lambda: False, "second"),
        ]
        assert evaluate_rules(rules, acc) == 2
        assert acc.outcome().feedback == ["first", "second"]

    def test_flags(self):
        outcome = RuleList("demo").outcome(extra=True)
        assert outcome.flag("extra")
        assert outcome.flag("passed")
        assert not outcome.flag("unknown")


class TestPassIffFeedbackEmpty:
    """Every checker passes exactly when it reports no failure lines."""

    @pytest.mark.parametrize("name", sorted(CHECKERS))
    def test_perfect_design_passes(self, name, perfect_workbook):
        outcome = CHECKERS[name](perfect_workbook)
        assert outcome.passed
        assert outcome.feedback == []

    @pytest.mark.parametrize("name", sorted(CHECKERS))
    def test_empty_workbook_fails_with_explanation(self, name):
        outcome = CHECKERS[name](Workbook())
        assert not outcome.passed
        assert outcome.feedback


class TestMission:
    """Tests for the mission profile check."""

    def test_leg_altitude_mismatch(self, design):
        design.main.set("L33", 3000.0)
        outcome = check_mission_profile(design.build(), 900.0)
        assert outcome.feedback == ["Leg 2 Altitude must be 2000 (found 3000.0)"]
        assert outcome.flag("range_pass")

    def test_leg_mach_and_time_mismatch(self, design):
        design.main.set("M35", 0.7)  # leg 3 Mach
        design.main.set("W39", 15.0)  # leg 13 time
        outcome = check_mission_profile(design.build(), 900.0)
        assert outcome.feedback == [
            "Leg 3 Mach must be 0.88 (found 0.7)",
            "Leg 13 Time must be 20.00 min (found 15.0)",
        ]

    def test_unchecked_cells_ignored(self, design):
        design.main.set("K35", 0.5)  # leg 1 Mach
        design.main.set("X36", 100)  # leg 14 afterburner
        assert check_mission_profile(design.build(), 900.0).passed

    def test_range_threshold_without_objective(self, perfect_workbook):
        outcome = check_mission_profile(perfect_workbook, 600.0)
        assert outcome.passed
        assert outcome.flag("range_pass")
        assert not outcome.flag("range_objective_pass")

    def test_range_objective(self, perfect_workbook):
        outcome = check_mission_profile(perfect_workbook, 800.0)
        assert outcome.flag("range_objective_pass")

    def test_range_below_threshold(self, perfect_workbook):
        outcome = check_mission_profile(perfect_workbook, 400.0)
        assert outcome.feedback == [
            "Range below threshold: mission radius = 400.0 nm (needs >= 500 nm)"
        ]
        assert not outcome.flag("range_pass")

    def test_radius_missing(self, perfect_workbook):
        outcome = check_mission_profile(perfect_workbook, float("nan"))
        assert outcome.feedback == ["Mission radius missing; unable to verify range requirement."]
        assert not outcome.flag("range_pass")


class TestEfficiency:
    """Tests for the efficiency guards."""

    def test_guard_violation(self, design):
        design.main.set("O1", 0.004)
        outcome = check_efficiency(design.build())
        assert outcome.feedback == ["O1 must be 0.0037 (found 0.0)"]

    def test_guard_missing(self, design):
        design.main.set("D30", None)
        outcome = check_efficiency(design.build())
        assert outcome.feedback == ["D30 must be 2.0 (found missing)"]


class TestThrust:
    """Tests for the thrust margin check."""

    def test_shortfall(self, design):
        design.miss.set("E48", 12000.0)
        outcome = check_thrust(design.build())
        assert outcome.feedback == ["Thrust shortfall: Tavailable <= Drag for 1 mission segment(s)."]

    def test_equal_thrust_is_shortfall(self, design):
        design.miss.set("C48", 10000.0)
        assert not check_thrust(design.build()).passed

    def test_missing_segment_is_violation(self, design):
        design.miss.set("N49", None)
        outcome = check_thrust(design.build())
        assert len(outcome.feedback) == 1
        assert outcome.feedback[0].startswith("Thrust/drag data missing for 1 mission segment(s)")
        assert "N49" in outcome.feedback[0]


class TestControls:
    """Tests for the control surface attachment check."""

    def test_pcs_too_far_aft(self, design):
        design.main.set("C23", 49.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == ["PCS X-location too far aft. Must overlap at least 25% of root chord."]

    def test_component_beyond_fuselage_end(self, design):
        design.main.set("E23", 55.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == [
            "One or more components X-location extend beyond the fuselage end (B32 = 50.0)"
        ]

    def test_pcs_outside_vertical_bounds(self, design):
        design.main.set("C25", 4.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == ["PCS Z-location outside fuselage vertical bounds."]

    def test_missing_input_fails_only_its_sub_check(self, design):
        design.geom.set("C8", None)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == ["Unable to verify PCS placement due to missing geometry data"]

    def test_vt_off_fuselage_is_informational(self, design):
        design.main.set("H24", 5.0)
        design.geom.set("L163", 40.0).set("M163", 5.0)
        design.geom.set("M166", 5.0)
        design.geom.set("L41", 50.0).set("M41", 5.0)
        outcome = check_control_attachment(design.build())
        assert outcome.passed
        assert outcome.flag("vt_off_fuselage")
        assert outcome.notes == ["Vertical tail mounted off the fuselage; ensure structural support at the wing."]

    def test_vt_off_fuselage_needs_wing_overlap(self, design):
        design.main.set("H24", 5.0)
        design.geom.set("L163", 40.0).set("M163", 5.0)
        design.geom.set("M166", 5.0)
        design.geom.set("L41", 42.0).set("M41", 5.0)
        outcome = check_control_attachment(design.build())
        assert len(outcome.feedback) == 1
        assert "overlap at least 80%" in outcome.feedback[0]

    def test_aspect_ratio_ordering(self, design):
        design.main.set("C19", 3.5)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == [
            "Pitch control surface aspect ratio (3.50) must be lower than wing aspect ratio (3.00)."
        ]

    def test_vertical_tail_aspect_ratio(self, design):
        design.main.set("H19", 2.95)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == [
            "Vertical tail aspect ratio (2.95) must be lower than wing aspect ratio (3.00)."
        ]

    def test_fuselage_too_narrow_for_engines(self, design):
        for row in range(34, 54):
            design.main.set(f"E{row}", 3.2)
        outcome = check_control_attachment(design.build())
        assert any(line.startswith("Fuselage minimum width (3.20 ft)") for line in outcome.feedback)

    def test_tail_overhang(self, design):
        design.geom.set("L165", 70.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == [
            "Vertical tail extends 20.00 ft beyond the fuselage end (limit 12.00 ft)."
        ]

    def test_engine_protrusion(self, design):
        design.main.set("I29", 40.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == [
            "Engine nacelles protrude 5.00 ft past the fuselage end (limit 3.00 ft)."
        ]

    def test_strake_disconnected(self, design):
        design.main.set("D18", 20.0)
        design.geom.set("K15", 45.0).set("M152", 10.0).set("L155", 5.0).set("L38", 10.0)
        outcome = check_control_attachment(design.build())
        assert outcome.feedback == ["Strake disconnected."]

    def test_strake_connected(self, design):
        design.main.set("D18", 20.0)
        design.geom.set("K15", 45.0).set("M152", 10.0).set("L155", 20.0).set("L38", 10.0)
        assert check_control_attachment(design.build()).passed

    def test_wing_leading_edge_x(self):
        assert wing_leading_edge_x(10.0, 45.0, 5.0) == pytest.approx(15.0)
        assert wing_leading_edge_x(10.0, 0.0, 5.0) == pytest.approx(5.0)


class TestConstraints:
    """Tests for the constraint table and curves."""

    def test_perfect_flags(self, perfect_workbook):
        outcome = check_constraints(perfect_workbook, BETA)
        assert outcome.flag("table_pass")
        assert outcome.flag("curves_pass")

    def test_table_entry_issue(self, design):
        design.main.set("T3", 30000.0)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.feedback == [
            "MaxMach: Altitude must be 35000 (found 30000.0)",
            "Constraint table has 1 entry issue(s).",
            "Constraint compliance not met; adjust design to satisfy all threshold constraints.",
        ]
        assert not outcome.flag("table_pass")
        assert outcome.flag("curves_pass")

    def test_beta_mismatch_on_every_flight_row(self, perfect_workbook):
        outcome = check_constraints(perfect_workbook, 0.8)
        assert outcome.failures == 7
        assert all("W/WTO must be set for 50% fuel load (0.800)" in line for line in outcome.feedback[:7])

    def test_runway_row(self, design):
        design.main.set("X13", 4500.0)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.feedback[0] == "Landing distance must be 5000 ft (found 4500.0)"

    def test_curve_violation(self, design):
        design.main.set("Q13", 0.84)
        design.consts.set_row(23, 11, [0.9] * len(curve_axis()))
        outcome = check_constraints(design.build(), BETA)
        assert outcome.feedback == [
            "Constraint curve MaxMach: T/W=0.8 below required 0.9 at W/S=60.0",
            "Design did not meet the following constraint curve: MaxMach.",
            "Constraint compliance not met; adjust design to satisfy all threshold constraints.",
        ]
        assert outcome.flag("table_pass")
        assert not outcome.flag("curves_pass")

    def test_landing_limit(self, design):
        design.main.set("P13", 90.0)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.feedback[0] == "Landing constraint violated: W/S = 90.0 exceeds limit of 80.0"
        assert "Design did not meet the following constraint curve: Landing." in outcome.feedback

    def test_design_point_missing(self, design):
        design.main.set("P13", None)
        outcome = check_constraints(design.build(), BETA)
        assert not outcome.passed
        assert outcome.feedback[0].startswith("Design point missing")

    def test_curve_data_problems_are_informational(self, design):
        for col in range(11, 32):
            design.consts.set_at(24, col, None)
        design.consts.set("L33", None)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.passed
        assert outcome.notes == [
            "Could not verify constraint curve Supercruise: only 0 valid sample(s); need at least 2.",
            "Could not verify landing constraint: W/S limit (L33) missing.",
        ]

    def test_missing_axis_is_informational(self, design):
        for col in range(11, 32):
            design.consts.set_at(22, col, None)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.passed
        assert outcome.notes[0].startswith("Could not verify constraint curves")

    def test_curve_evaluation_error_is_contained(self, design, monkeypatch):
        def broken(xs, ys, x):
            raise ValueError("bad curve")

        monkeypatch.setattr(constraints_module, "evaluate_curve", broken)
        design.main.set("T3", 30000.0)
        outcome = check_constraints(design.build(), BETA)
        assert outcome.failures == 1
        assert "Could not perform constraint curve check due to error: bad curve" in outcome.notes
        assert outcome.flag("curves_pass")
        assert not outcome.flag("table_pass")


class TestPayload:
    """Tests for the payload check."""

    def test_objective(self, perfect_workbook):
        assert check_payload(perfect_workbook).flag("payload_objective_pass")

    def test_below_threshold(self, design):
        design.main.set("AB3", 6)
        outcome = check_payload(design.build())
        assert outcome.feedback == ["Payload missing: need at least 8 AIM-120Ds (found 6.0)"]
        assert not outcome.flag("payload_objective_pass")

    def test_threshold_without_objective(self, design):
        design.main.set("AB4", 1)
        outcome = check_payload(design.build())
        assert outcome.passed
        assert not outcome.flag("payload_objective_pass")


class TestStability:
    """Tests for the static stability check."""

    def test_unstable(self, design):
        design.main.set("M10", -0.2)
        outcome = check_stability(design.build())
        assert outcome.feedback == [
            "Static margin out of bounds (M10 = -0.2)",
            "Warning: aircraft is statically unstable (SM < 0)",
            "Stability criteria failed in 1 area(s).",
        ]
        assert outcome.failures == 1

    def test_derivatives(self, design):
        design.main.set("O10", 0.0).set("P10", None)
        outcome = check_stability(design.build())
        assert outcome.feedback == [
            "Clb must be < -0.001 (O10 = 0.000000)",
            "Cnb must be > 0.002 (P10 = NaN)",
            "Stability criteria failed in 2 area(s).",
        ]


class TestFuelVolume:
    """Tests for the fuel and volume check."""

    def test_fuel_short(self, design):
        design.main.set("X40", 2500.0)
        outcome = check_fuel_volume(design.build())
        assert not outcome.flag("fuel_pass")
        assert outcome.flag("volume_pass")
        assert outcome.feedback == [
            "Fuel available (2000.0) is less than required (2500.0); check reserves."
        ]

    def test_volume_exhausted(self, design):
        design.main.set("Q23", 0.0)
        outcome = check_fuel_volume(design.build())
        assert outcome.flag("fuel_pass")
        assert not outcome.flag("volume_pass")


class TestCost:
    """Tests for the recurring cost check."""

    def test_objective(self, perfect_workbook):
        assert check_cost(perfect_workbook).flag("cost_objective_pass")

    def test_threshold_only(self, design):
        design.main.set("Q31", 115.0)
        outcome = check_cost(design.build())
        assert outcome.passed
        assert not outcome.flag("cost_objective_pass")

    def test_above_threshold(self, design):
        design.main.set("Q31", 130.0)
        outcome = check_cost(design.build())
        assert outcome.feedback == ["Cost above threshold: $130.0M for 187 aircraft (needs <$120M)."]

    def test_wrong_fleet_size(self, design):
        design.main.set("N31", 150)
        outcome = check_cost(design.build())
        assert outcome.feedback == [
            "Number of aircraft (N31) must be 187 to evaluate cost thresholds (found 150.0)."
        ]
        assert not outcome.flag("cost_objective_pass")


class TestGear:
    """Tests for the landing gear check."""

    def test_main_gear_share(self, design):
        design.gear.set("J20", 70.0)
        outcome = check_gear(design.build())
        assert outcome.feedback == [
            "Violates nose gear 90/10 rule: 70.0% (must be between 80% and 95%)",
            "Landing gear geometry outside limits in 1 area(s).",
        ]

    def test_tipback(self, design):
        design.gear.set("L20", 15.0)
        outcome = check_gear(design.build())
        assert outcome.feedback[0] == (
            "Violates tipback angle requirement: upper 15.0° must be less than lower 15.0°"
        )

    def test_rotation_speed_missing_stops_chain(self, design):
        design.gear.set("N20", None).set("N21", None)
        outcome = check_gear(design.build())
        assert outcome.failures == 1
        assert outcome.feedback[0].startswith("Takeoff rotation speed (N20) missing")

    def test_rotation_margin(self, design):
        design.gear.set("N21", 140.0)
        outcome = check_gear(design.build())
        assert outcome.feedback[0] == (
            "Takeoff speed margin failed: N20 must be less than N21 (N20 = 150.0, N21 = 140.0)"
        )

    def test_takeoff_speed_too_high(self, design):
        design.gear.set("N21", 210.0)
        outcome = check_gear(design.build())
        assert outcome.failures == 1
        assert outcome.feedback[0].startswith("Takeoff speed too high: N21 = 210.0 kts")
