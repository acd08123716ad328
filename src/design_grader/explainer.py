"""Explainer - final phase of the Grading Engine.

Renders bucket results, objective bonuses and checker feedback into the
ordered, human-readable feedback log returned with every score.
"""

from typing import Iterable, Optional

from .rubric import BASE_TOTAL, MAX_SCORE, OBJECTIVE_TOTAL, OBJECTIVES
from .schema import BucketResult, CheckOutcome, ScoreReport


def _pass_fail(passed: bool, failed_text: str = "FAIL") -> str:
    return "PASS" if passed else failed_text


class FeedbackExplainer:
    """Builds the feedback log and score lines for a grading run.

    Log order:
    - identifying line (display name)
    - informational preflight notes
    - bucket summary and objectives line
    - every checker line, in checker invocation order
    - "Checks not met" roll-up
    - threshold and final score lines
    """

    def bucket_summary(
        self,
        buckets: list[BucketResult],
        objectives: dict[str, bool],
        objective_score: float,
    ) -> str:
        """Render the per-bucket PASS/FAIL block plus the objectives line."""
        lines = ["Bucket summary:"]
        for bucket in buckets:
            status = _pass_fail(bucket.passed, f"FAIL (-{bucket.deduction:g})")
            reasons = f" [{'; '.join(bucket.reasons)}]" if bucket.reasons else ""
            lines.append(f"  {bucket.label}: {status}{reasons}")

        objective_parts = [
            f"{objective.label} {_pass_fail(objectives.get(objective.label, False))}"
            for objective in OBJECTIVES
        ]
        lines.append(
            f"Objectives: {', '.join(objective_parts)} => +{objective_score:.1f} / {OBJECTIVE_TOTAL:g}"
        )
        return "\n".join(lines)

    def score_lines(self, threshold_score: float, total_score: float) -> list[str]:
        return [
            f"Threshold score after deductions: {threshold_score:.1f} / {BASE_TOTAL:g}",
            f"Final score: {total_score:.1f} / {MAX_SCORE:g}",
        ]

    def checks_not_met_line(self, checks_not_met: list[str]) -> str:
        if not checks_not_met:
            return ""
        return f"Checks not met: {', '.join(checks_not_met)}"

    def build_log(
        self,
        display_name: Optional[str],
        notes: Iterable[str],
        bucket_summary: str,
        outcomes: Iterable[CheckOutcome],
        checks_not_met: list[str],
        score_lines: list[str],
    ) -> str:
        """Assemble the full newline-joined feedback log."""
        parts = [display_name or "", *notes, bucket_summary]
        for outcome in outcomes:
            parts.extend(line.text for line in outcome.lines)
        parts.append(self.checks_not_met_line(checks_not_met))
        parts.extend(score_lines)
        return "\n".join(part for part in parts if part)

    def zero_report(self, display_name: Optional[str], message: str) -> ScoreReport:
        """Terminal report for a workbook that failed the geometry gate."""
        log = "\n".join(part for part in (display_name or "", message) if part)
        return ScoreReport(
            display_name=display_name,
            threshold_score=0.0,
            objective_score=0.0,
            score=0.0,
            max_score=MAX_SCORE,
            score_line=message,
            bonus_line="",
            feedback_log=log,
            short_circuited=True,
        )
