"""Pydantic models for the Design Grading Engine.

Input schema for design workbooks and output schemas for check outcomes,
scoring buckets and the final score report.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .cells import Sheet


# =============================================================================
# Input Models
# =============================================================================


class Workbook(BaseModel):
    """A design workbook: sheet key -> rows of raw cell values.

    Sheet keys are the logical names used by the rubric (main, aero, miss,
    consts, gear, geom). Rows are 0-based and may be ragged.
    """
    model_config = ConfigDict(frozen=True)

    sheets: dict[str, Sheet] = Field(default_factory=dict)
    file_name: Optional[str] = Field(None, description="Source file name, used as the identifying line")

    def sheet(self, key: str) -> Optional[Sheet]:
        """Get a sheet by key, or None if the workbook lacks it."""
        return self.sheets.get(key)


# =============================================================================
# Check Outcome Models
# =============================================================================


class LineLevel(str, Enum):
    """Severity of a feedback line."""
    FAILURE = "failure"  # Explains why a check failed
    INFO = "info"  # Advisory or diagnostic; never fails a check


class FeedbackLine(BaseModel):
    """One ordered line of checker feedback."""
    text: str
    level: LineLevel = LineLevel.FAILURE


class CheckOutcome(BaseModel):
    """Outcome of a single rule checker.

    ``passed`` is derived from the failure lines so a check can never pass
    with leftover failure messages, nor fail without an explanation.
    """
    name: str
    lines: list[FeedbackLine] = Field(default_factory=list)
    failures: int = Field(0, description="Number of failed rules inside the check")
    flags: dict[str, bool] = Field(default_factory=dict, description="Check-specific sub-results")

    @property
    def feedback(self) -> list[str]:
        """Failure lines in rule order."""
        return [line.text for line in self.lines if line.level == LineLevel.FAILURE]

    @property
    def notes(self) -> list[str]:
        """Informational lines in rule order."""
        return [line.text for line in self.lines if line.level == LineLevel.INFO]

    @property
    def passed(self) -> bool:
        return not self.feedback

    def flag(self, key: str) -> bool:
        """Read a sub-result; ``passed`` is always available."""
        if key == "passed":
            return self.passed
        return self.flags.get(key, False)


# =============================================================================
# Output Models
# =============================================================================


class BucketResult(BaseModel):
    """Pass/fail of one scoring bucket."""
    key: str
    label: str
    passed: bool
    deduction: float = Field(0.0, description="Points deducted (0 when passed)")
    reasons: list[str] = Field(default_factory=list, description="Failed member labels")


class ScoreReport(BaseModel):
    """Final result of a grading run."""
    display_name: Optional[str] = None
    threshold_score: float = Field(0.0, ge=0, le=85)
    objective_score: float = Field(0.0, ge=0, le=15)
    score: float = Field(0.0, ge=0, le=100, description="Total score, one decimal")
    max_score: float = 100.0
    score_line: str = ""
    bonus_line: str = ""
    feedback_log: str = ""
    buckets: list[BucketResult] = Field(default_factory=list)
    objectives: dict[str, bool] = Field(default_factory=dict)
    checks_not_met: list[str] = Field(default_factory=list)
    short_circuited: bool = Field(False, description="True when the geometry gate stopped grading")

    @property
    def total_score(self) -> float:
        return self.score


class AdvisoryResult(BaseModel):
    """Result of an advisory rule set (reported, never scored)."""
    name: str
    delta: int = 0
    feedback: list[str] = Field(default_factory=list)
