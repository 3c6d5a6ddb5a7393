from pydantic import BaseModel

from models.schemas.match import CategoryOverlaps, GateResult, ScoreAdjustment


class MatchSignals(BaseModel):
    profile: str = ""
    job: str = ""


class MatchResult(BaseModel):
    score: int = 0  # 0-100
    cosine_similarity: float = 0.0  # 4-decimal diagnostic
    base_score: int = 0  # round(cosine * cosine_weight), before adjustments
    overlaps: CategoryOverlaps = CategoryOverlaps()
    gate_outcomes: list[GateResult] = []
    boosts: list[ScoreAdjustment] = []
    penalties: list[ScoreAdjustment] = []
    reasons: list[ScoreAdjustment] = []
    # Scoring transparency fields
    signals: MatchSignals = MatchSignals()
    embedding_model: str = ""

    @property
    def gated(self) -> bool:
        return bool(self.gate_outcomes)


class RankedMatch(BaseModel):
    index: int  # position of the profile in the request
    result: MatchResult


class BatchMatchResponse(BaseModel):
    results: list[RankedMatch] = []
