"""Job side: the structured job description produced upstream."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator

from models.schemas.profile import Location, _text_items


class JobRequirement(BaseModel):
    """Structured job description.

    education_min is a ladder value:
        None < High School < Diploma/Certificate < Associate < Bachelor
        < Master < PhD/Doctorate
    "Unknown" (or anything off the ladder) disables the education gate.
    """
    model_config = {"frozen": True}

    title: str | None = None
    seniority_hint: str | None = None  # Junior | Mid | Senior | Lead/Head | Director+ | Unknown
    functions: list[str] = []
    hard_skills: list[str] = []
    languages: list[str] = []
    yoe_min: float | None = None
    education_min: str | None = None
    key_outcomes: list[str] = []
    industry_hints: list[str] = []
    work_mode: Literal["Onsite", "Hybrid", "Remote"] | None = None
    location: Location | None = None

    @field_validator("key_outcomes", mode="before")
    @classmethod
    def _coerce_outcomes(cls, value: Any) -> Any:
        return _text_items(value)
