from pydantic import BaseModel, Field

from models.schemas.job_requirement import JobRequirement
from models.schemas.profile import Profile


class MatchRequest(BaseModel):
    profile: Profile
    job_requirement: JobRequirement


class BatchMatchRequest(BaseModel):
    profiles: list[Profile] = Field(..., min_length=1, description="Candidates to rank")
    job_requirement: JobRequirement
