"""Hard pass/fail requirements that zero the score when they trigger.

Missing or unrecognized values never trigger a gate.
"""

import logging

from models.schemas.job_requirement import JobRequirement
from models.schemas.match import GateResult
from models.schemas.profile import Profile
from services.text import canonical_education, education_rank

logger = logging.getLogger(__name__)

DEFAULT_EXPERIENCE_TOLERANCE = 1


def experience_gate(
    profile: Profile, job: JobRequirement, tolerance: int = DEFAULT_EXPERIENCE_TOLERANCE
) -> GateResult | None:
    """Fails when the candidate is materially below the minimum years.

    Being within `tolerance` years of the minimum is forgiven.
    """
    if job.yoe_min is None or profile.yoe is None:
        return None
    if profile.yoe < job.yoe_min - tolerance:
        return GateResult(
            type="yoe_below_min",
            yoe=profile.yoe,
            yoe_min=job.yoe_min,
            tolerance=tolerance,
        )
    return None


def education_gate(profile: Profile, job: JobRequirement) -> GateResult | None:
    """Fails when the candidate's ladder rank is strictly below the minimum."""
    candidate_level = profile.education.level if profile.education else None
    required_rank = education_rank(job.education_min)
    candidate_rank = education_rank(candidate_level)
    if required_rank < 0 or candidate_rank < 0:
        return None
    if candidate_rank < required_rank:
        return GateResult(
            type="education_below_min",
            education=canonical_education(candidate_level),
            education_min=canonical_education(job.education_min),
        )
    return None


def evaluate_gates(
    profile: Profile, job: JobRequirement, tolerance: int = DEFAULT_EXPERIENCE_TOLERANCE
) -> list[GateResult]:
    """Run every built-in gate; returns the ones that triggered."""
    triggered = [
        g for g in (
            experience_gate(profile, job, tolerance),
            education_gate(profile, job),
        )
        if g is not None
    ]
    for gate in triggered:
        logger.info("Gate triggered: %s", gate.type)
    return triggered
