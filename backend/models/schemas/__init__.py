"""Typed contracts between the upstream extractors and the match engine."""

from models.schemas.job_requirement import JobRequirement
from models.schemas.match import CategoryOverlaps, GateResult, ScoreAdjustment, TermMatch
from models.schemas.profile import Education, LanguageSkill, Location, Profile

__all__ = [
    "Profile",
    "LanguageSkill",
    "Education",
    "Location",
    "JobRequirement",
    "TermMatch",
    "CategoryOverlaps",
    "GateResult",
    "ScoreAdjustment",
]
