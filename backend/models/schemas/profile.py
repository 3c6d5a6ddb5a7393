"""Candidate side: the structured resume overview produced upstream."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator


def _text_items(value: Any) -> Any:
    """Accept plain strings or {"text": ...} objects in a list of statements."""
    if not isinstance(value, list):
        return value
    items = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("text")
        if item is None:
            continue
        items.append(item)
    return items


class LanguageSkill(BaseModel):
    """A spoken language with an optional proficiency label."""
    model_config = {"frozen": True}

    name: str
    proficiency: str | None = None  # e.g. "Native", "C1", "Fluent"


class Education(BaseModel):
    """Highest completed education."""
    model_config = {"frozen": True}

    level: str | None = None  # ladder value, e.g. "Bachelor", "Master"
    field: str | None = None
    institution: str | None = None
    graduation_year: int | None = None


class Location(BaseModel):
    model_config = {"frozen": True}

    city: str | None = None
    country: str | None = None


class Profile(BaseModel):
    """Structured resume overview.

    Immutable once handed to the engine. Every field is optional: absence
    is never evidence of failure.
    """
    model_config = {"frozen": True}

    title: str | None = None
    seniority_hint: str | None = None  # Junior | Mid | Senior | Lead/Head | Director+ | Unknown
    functions: list[str] = []
    hard_skills: list[str] = []
    languages: list[LanguageSkill] = []
    education: Education | None = None
    yoe: float | None = None
    yoe_basis: Literal["self-reported", "date-derived", "mixed", "unknown"] | None = None
    achievements: list[str] = []
    location: Location | None = None

    @field_validator("languages", mode="before")
    @classmethod
    def _coerce_languages(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [{"name": v} if isinstance(v, str) else v for v in value]

    @field_validator("achievements", mode="before")
    @classmethod
    def _coerce_achievements(cls, value: Any) -> Any:
        return _text_items(value)

    @property
    def language_names(self) -> list[str]:
        return [lang.name for lang in self.languages]
