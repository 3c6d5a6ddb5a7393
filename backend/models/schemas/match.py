"""Per-request match artifacts: term matches, gates and score adjustments."""

from typing import Literal

from pydantic import BaseModel


class TermMatch(BaseModel):
    """A job term paired with the candidate term that covers it."""
    source: str  # candidate-side term (normalized)
    target: str  # job-side term, as given
    similarity: float = 0.0  # 1.0 for exact matches
    kind: Literal["exact", "semantic"] = "exact"


class CategoryOverlaps(BaseModel):
    functions: list[TermMatch] = []
    skills: list[TermMatch] = []
    languages: list[TermMatch] = []
    outcomes: list[TermMatch] = []


class GateResult(BaseModel):
    """A hard requirement the candidate failed, with the values involved."""
    type: Literal["yoe_below_min", "education_below_min"]
    yoe: float | None = None
    yoe_min: float | None = None
    tolerance: int | None = None
    education: str | None = None
    education_min: str | None = None


class ScoreAdjustment(BaseModel):
    """A single entry in the reasons trail.

    kind is "boost", "penalty" or "gate"; amount is the signed change
    applied to the score (0 for gates, which zero the score instead).
    """
    kind: Literal["boost", "penalty", "gate"]
    type: str  # e.g. skills_overlap, language_missing, yoe_below_min
    amount: int = 0
    category: str | None = None
    detail: str | None = None
    reason: str = ""
