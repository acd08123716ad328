"""Design Grading Engine.

Grades aircraft design workbooks against a fixed rubric and returns a
score with an ordered, human-readable feedback log.
"""

from .grader import WorkbookGrader, grade_workbook, run_advisories, run_preflight
from .loader import WorkbookLoadError, load_workbook
from .schema import AdvisoryResult, BucketResult, CheckOutcome, ScoreReport, Workbook

__version__ = "1.0.0"

__all__ = [
    "AdvisoryResult",
    "BucketResult",
    "CheckOutcome",
    "ScoreReport",
    "Workbook",
    "WorkbookGrader",
    "WorkbookLoadError",
    "grade_workbook",
    "load_workbook",
    "run_advisories",
    "run_preflight",
]
