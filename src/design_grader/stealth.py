"""Stealth shaping collaborator.

The grader calls a stealth checker with the workbook and treats an empty
feedback list as a pass. The default checker enforces planform edge
alignment: control surfaces must share the wing's leading-edge sweep.
Any callable with the ``StealthChecker`` signature can replace it.
"""

from typing import Callable, Optional

from pydantic import BaseModel, Field

from .cells import format_found, get_number, is_finite
from .config import StealthConfig
from .schema import Workbook


class StealthResult(BaseModel):
    """Feedback from a stealth shaping check; empty means pass."""
    feedback: list[str] = Field(default_factory=list)


StealthChecker = Callable[[Workbook], StealthResult]


def check_stealth_shaping(workbook: Workbook, config: Optional[StealthConfig] = None) -> StealthResult:
    """Check leading-edge sweep alignment of the aligned surfaces."""
    cfg = config or StealthConfig()
    if not cfg.enabled:
        return StealthResult()

    main = workbook.sheet("main")
    reference_ref = f"{cfg.reference_column}{cfg.sweep_row}"
    reference = get_number(main, reference_ref)
    if not is_finite(reference):
        return StealthResult(feedback=[
            f"Stealth shaping: reference leading-edge sweep ({reference_ref}) missing; unable to verify edge alignment."
        ])

    feedback = []
    for column, surface in cfg.aligned_columns.items():
        ref = f"{column}{cfg.sweep_row}"
        sweep = get_number(main, ref)
        if not is_finite(sweep) or abs(sweep - reference) > cfg.tolerance_deg:
            feedback.append(
                f"Stealth shaping: {surface} leading-edge sweep ({ref} = {format_found(sweep)}°) must align "
                f"with the wing ({reference_ref} = {format_found(reference)}°) within {cfg.tolerance_deg:g}°."
            )
    return StealthResult(feedback=feedback)
