"""Render structured profiles and jobs into one labeled string for embedding.

Segments always appear in the same label order, whatever order the source
fields were populated in:

    TITLE | SENIORITY | FUNCTIONS | SKILLS | LANGUAGES | EDU | YOE
          | ACHIEVEMENTS/OUTCOMES | INDUSTRIES | WORKMODE

Empty fields are omitted rather than emitted as bare labels.
"""

from models.schemas.job_requirement import JobRequirement
from models.schemas.profile import Profile

SEPARATOR = " | "


def _clean(value: object) -> str:
    return "" if value is None else str(value).strip()


def _join(items: list[str]) -> str:
    return ", ".join(c for c in (_clean(i) for i in items) if c)


def _years(value: float | None) -> str:
    if value is None:
        return ""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def _render(segments: list[tuple[str, str]]) -> str:
    return SEPARATOR.join(f"{label} {value}" for label, value in segments if value)


def build_profile_signal(profile: Profile) -> str:
    education = profile.education.level if profile.education else None
    return _render([
        ("TITLE", _clean(profile.title)),
        ("SENIORITY", _clean(profile.seniority_hint)),
        ("FUNCTIONS", _join(profile.functions)),
        ("SKILLS", _join(profile.hard_skills)),
        ("LANGUAGES", _join(profile.language_names)),
        ("EDU", _clean(education)),
        ("YOE", _years(profile.yoe)),
        ("ACHIEVEMENTS", _join(profile.achievements)),
    ])


def build_job_signal(job: JobRequirement) -> str:
    return _render([
        ("TITLE", _clean(job.title)),
        ("SENIORITY", _clean(job.seniority_hint)),
        ("FUNCTIONS", _join(job.functions)),
        ("SKILLS", _join(job.hard_skills)),
        ("LANGUAGES", _join(job.languages)),
        ("EDU_MIN", _clean(job.education_min)),
        ("YOE_MIN", _years(job.yoe_min)),
        ("OUTCOMES", _join(job.key_outcomes)),
        ("INDUSTRIES", _join(job.industry_hints)),
        ("WORKMODE", _clean(job.work_mode)),
    ])
