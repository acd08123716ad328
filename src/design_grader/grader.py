"""Grader - orchestration of the Grading Engine.

Runs every rule checker against a design workbook in a fixed order,
combines their outcomes into scoring buckets, adds objective bonuses and
renders the feedback log.
"""

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .cells import (
    column_letter,
    find_error_cells,
    get_cell,
    get_number,
    is_finite,
    parse_ref,
    round_to_tenth,
)
from .config import GraderConfig
from .explainer import FeedbackExplainer
from .rubric import (
    BASE_TOTAL,
    BETA_DEFAULT,
    BUCKET_DEDUCTION,
    BUCKETS,
    GEOMETRY_BLOCKS,
    INFORMATIONAL_CHECKS,
    MAX_SCORE,
    OBJECTIVE_BONUS,
    OBJECTIVES,
    RADIUS_CELL,
    SHEET_KEYS,
)
from .rules.advisory import run_landing_gear_advisories, run_mission_leg_advisories
from .rules.base import RuleList
from .rules.constraints import check_constraints
from .rules.controls import check_control_attachment
from .rules.cost import check_cost
from .rules.efficiency import check_efficiency
from .rules.fuel import FUEL_AVAILABLE_CELL, FUEL_CAPACITY_CELL, check_fuel_volume
from .rules.gear import check_gear
from .rules.mission import check_mission_profile
from .rules.payload import check_payload
from .rules.stability import check_stability
from .rules.thrust import check_thrust
from .schema import AdvisoryResult, BucketResult, CheckOutcome, ScoreReport, Workbook
from .stealth import StealthChecker, check_stealth_shaping

logger = logging.getLogger(__name__)

# Aero tab cells that hold the same value when formulas are inactive
AERO_FORMULA_PAIRS = (("G3", "G4"), ("G10", "G11"), ("A15", "A16"))


class GradingStage(str, Enum):
    """Stages of a grading run."""
    SETUP = "setup"
    GEOMETRY_PREFLIGHT = "geometry_preflight"
    RUN_CHECKS = "run_checks"
    AGGREGATE = "aggregate"
    BONUS = "bonus"
    RENDER = "render"
    DONE = "done"


@dataclass
class GradingContext:
    """Values derived once per run and shared with the checkers."""
    beta_expected: float = BETA_DEFAULT


@dataclass
class PreflightResult:
    """Outcome of the preflight scan."""
    notes: list[str] = field(default_factory=list)
    missing_geometry: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.missing_geometry

    @property
    def geometry_message(self) -> str:
        if self.passed:
            return ""
        return (
            "Sheet validation: Geometry inputs must be numeric "
            f"(missing at {', '.join(self.missing_geometry)})."
        )


def derive_context(workbook: Workbook) -> GradingContext:
    """Derive the expected W/WTO at 50% fuel from the fuel figures."""
    main = workbook.sheet("main")
    fuel_available = get_number(main, FUEL_AVAILABLE_CELL)
    fuel_capacity = get_number(main, FUEL_CAPACITY_CELL)
    if is_finite(fuel_available) and is_finite(fuel_capacity) and fuel_capacity != 0:
        return GradingContext(beta_expected=1 - fuel_available / (2 * fuel_capacity))
    return GradingContext()


def find_missing_geometry(workbook: Workbook) -> list[str]:
    """List geometry-block references that are not numeric, row-major."""
    main = workbook.sheet("main")
    missing = []
    for block in GEOMETRY_BLOCKS:
        _, first_col = parse_ref(f"{block.first_column}1")
        _, last_col = parse_ref(f"{block.last_column}1")
        for row in range(block.first_row, block.last_row + 1):
            for col in range(first_col, last_col + 1):
                ref = f"{column_letter(col)}{row}"
                if ref in block.skips:
                    continue
                if not is_finite(get_number(main, ref)):
                    missing.append(ref)
    return missing


def find_error_markers(workbook: Workbook) -> list[str]:
    """One note per sheet that contains Excel error markers."""
    keys = [key for key in SHEET_KEYS if key in workbook.sheets]
    keys += sorted(key for key in workbook.sheets if key not in SHEET_KEYS)
    notes = []
    for key in keys:
        invalid = find_error_cells(workbook.sheets[key])
        if invalid:
            notes.append(f"Info: Excel errors in {key.capitalize()} sheet at {', '.join(invalid)}.")
    return notes


def check_aero_tab(workbook: Workbook) -> Optional[str]:
    """Detect aero-tab formulas left inactive (paired cells still equal)."""
    aero = workbook.sheet("aero")
    if aero is None:
        return None
    issues = sum(1 for a, b in AERO_FORMULA_PAIRS if get_cell(aero, a) == get_cell(aero, b))
    if issues == 0:
        return None
    return f"Aero tab formulas inactive in {issues} key cell(s); check A15, G3, and G10."


def run_preflight(workbook: Workbook) -> PreflightResult:
    """Scan for error markers, inactive aero formulas and missing geometry."""
    notes = find_error_markers(workbook)
    aero_note = check_aero_tab(workbook)
    if aero_note:
        notes.append(aero_note)
    return PreflightResult(notes=notes, missing_geometry=find_missing_geometry(workbook))


class WorkbookGrader:
    """Grades design workbooks against the fixed rubric.

    Scoring principles:
    - Threshold pool of 85 points, minus 5 per failing bucket
    - A bucket fails as a whole; there is no partial bucket credit
    - Objective bonuses (5 points each) are independent of the buckets
    - Missing geometry stops grading with a score of zero
    - Every deduction is explained in the feedback log

    The grader keeps no state between runs. Configuration is bound once at
    construction, so later config loads never change an existing grader.
    """

    def __init__(
        self,
        stealth_checker: Optional[StealthChecker] = None,
        config: Optional[GraderConfig] = None,
    ):
        """Initialize grader with an optional stealth shaping collaborator.

        Args:
            stealth_checker: Replaces the default edge-alignment check
            config: Supplies the default check's stealth rules (defaults if omitted)
        """
        if stealth_checker is None:
            stealth_config = (config or GraderConfig()).stealth.model_copy(deep=True)
            stealth_checker = functools.partial(check_stealth_shaping, config=stealth_config)
        self.stealth_checker = stealth_checker
        self.explainer = FeedbackExplainer()

    def grade(self, workbook: Workbook, display_name: Optional[str] = None) -> ScoreReport:
        """Grade a workbook.

        Args:
            workbook: Workbook to grade
            display_name: Identifying first line of the log (defaults to the file name)

        Returns:
            The score report with the full feedback log
        """
        name = display_name if display_name is not None else workbook.file_name

        self._enter(GradingStage.SETUP, name)
        context = derive_context(workbook)

        self._enter(GradingStage.GEOMETRY_PREFLIGHT, name)
        preflight = run_preflight(workbook)
        if not preflight.passed:
            logger.info("Geometry gate failed for %s: %d missing cell(s)", name, len(preflight.missing_geometry))
            self._enter(GradingStage.DONE, name)
            return self.explainer.zero_report(name, preflight.geometry_message)

        self._enter(GradingStage.RUN_CHECKS, name)
        outcomes = self._run_checks(workbook, context)
        outcomes["sheet_validity"] = RuleList("sheet_validity").outcome()

        self._enter(GradingStage.AGGREGATE, name)
        buckets = self._aggregate(outcomes)
        threshold = BASE_TOTAL - sum(b.deduction for b in buckets)

        self._enter(GradingStage.BONUS, name)
        objectives = {o.label: outcomes[o.check].flag(o.flag) for o in OBJECTIVES}
        objective_points = OBJECTIVE_BONUS * sum(objectives.values())

        self._enter(GradingStage.RENDER, name)
        threshold_score = round_to_tenth(max(0.0, threshold))
        objective_score = round_to_tenth(objective_points)
        total = min(MAX_SCORE, max(0.0, round_to_tenth(threshold_score + objective_score)))

        checks_not_met = [b.not_met for b, result in zip(BUCKETS, buckets) if not result.passed]
        checks_not_met += [label for check, label in INFORMATIONAL_CHECKS if not outcomes[check].passed]

        score_lines = self.explainer.score_lines(threshold_score, total)
        log = self.explainer.build_log(
            display_name=name,
            notes=preflight.notes,
            bucket_summary=self.explainer.bucket_summary(buckets, objectives, objective_score),
            outcomes=[o for key, o in outcomes.items() if key != "sheet_validity"],
            checks_not_met=checks_not_met,
            score_lines=score_lines,
        )

        self._enter(GradingStage.DONE, name)
        return ScoreReport(
            display_name=name,
            threshold_score=threshold_score,
            objective_score=objective_score,
            score=total,
            max_score=MAX_SCORE,
            score_line=score_lines[1],
            bonus_line="",
            feedback_log=log,
            buckets=buckets,
            objectives=objectives,
            checks_not_met=checks_not_met,
        )

    def _enter(self, stage: GradingStage, name: Optional[str]) -> None:
        logger.debug("Grading %s: %s", name or "<workbook>", stage.value)

    def _run_checks(self, workbook: Workbook, context: GradingContext) -> dict[str, CheckOutcome]:
        """Invoke every checker in the fixed order."""
        radius = get_number(workbook.sheet("main"), RADIUS_CELL)
        outcomes = {}
        outcomes["mission"] = check_mission_profile(workbook, radius)
        outcomes["efficiency"] = check_efficiency(workbook)
        outcomes["thrust"] = check_thrust(workbook)
        outcomes["controls"] = check_control_attachment(workbook)
        outcomes["constraints"] = check_constraints(workbook, context.beta_expected)
        outcomes["payload"] = check_payload(workbook)
        outcomes["stability"] = check_stability(workbook)
        outcomes["fuel_volume"] = check_fuel_volume(workbook)
        outcomes["cost"] = check_cost(workbook)
        outcomes["gear"] = check_gear(workbook)
        outcomes["stealth"] = self._run_stealth(workbook)
        return outcomes

    def _run_stealth(self, workbook: Workbook) -> CheckOutcome:
        acc = RuleList("stealth")
        for line in self.stealth_checker(workbook).feedback:
            acc.fail(line)
        return acc.outcome()

    def _aggregate(self, outcomes: dict[str, CheckOutcome]) -> list[BucketResult]:
        """Combine outcomes into buckets; each failing bucket costs a flat deduction."""
        results = []
        for bucket in BUCKETS:
            reasons = []
            passed = True
            for member in bucket.members:
                outcome = outcomes[member.check]
                if outcome.flag(member.flag):
                    continue
                passed = False
                if member.reason:
                    reasons.append(member.reason.format(failures=outcome.failures))
            if not passed:
                logger.debug("Bucket %s failed: %s", bucket.key, reasons)
            results.append(BucketResult(
                key=bucket.key,
                label=bucket.label,
                passed=passed,
                deduction=0.0 if passed else BUCKET_DEDUCTION,
                reasons=reasons,
            ))
        return results


def grade_workbook(
    workbook: Workbook,
    display_name: Optional[str] = None,
    stealth_checker: Optional[StealthChecker] = None,
    config: Optional[GraderConfig] = None,
) -> ScoreReport:
    """Grade a workbook with a fresh grader."""
    return WorkbookGrader(stealth_checker=stealth_checker, config=config).grade(workbook, display_name)


def run_advisories(workbook: Workbook) -> list[AdvisoryResult]:
    """Run the advisory rule sets (never scored)."""
    return [run_mission_leg_advisories(workbook), run_landing_gear_advisories(workbook)]
