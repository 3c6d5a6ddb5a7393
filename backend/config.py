import os

from pydantic import BaseModel
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class CategoryWeights(BaseModel):
    """One integer (or float threshold) per overlap category."""
    functions: float = 0
    skills: float = 0
    languages: float = 0
    outcomes: float = 0

    def get(self, category: str) -> float:
        return getattr(self, category)


class PenaltyWeights(BaseModel):
    language_missing: int = 8
    language_missing_common: int = 3  # e.g. only "English" is missing
    seniority_mismatch: int = 5


class MatchConfig(BaseModel):
    """Scoring knobs. Every constant the composer uses lives here."""
    cosine_weight: int = 75
    experience_tolerance: int = 1
    category_boosts: CategoryWeights = CategoryWeights(
        functions=4, skills=3, languages=4, outcomes=2
    )
    category_caps: CategoryWeights = CategoryWeights(
        functions=8, skills=12, languages=8, outcomes=6
    )
    # A semantic match only earns a boost at or above these cosines
    semantic_thresholds: CategoryWeights = CategoryWeights(
        functions=0.50, skills=0.80, languages=0.85, outcomes=0.72
    )
    penalties: PenaltyWeights = PenaltyWeights()
    common_languages: list[str] = ["english"]


class Settings(BaseSettings):
    max_request_profiles: int = 50
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # Embedding provider settings
    embedding_provider: str = "local"  # "local" | "gemini"
    embedding_model: str = ""  # empty = the provider's default model
    gemini_api_key: str = ""
    embedding_concurrency: int = 8
    cache_ttl_seconds: int = 24 * 60 * 60
    cache_max_entries: int = 0  # 0 = unbounded
    match_timeout_seconds: float = 30.0

    # Scoring settings (nested env vars: MATCH__COSINE_WEIGHT=80)
    match: MatchConfig = MatchConfig()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "protected_namespaces": ("settings_",),
    }


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
