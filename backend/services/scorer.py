"""Score composer: cosine base score plus overlap boosts and mismatch penalties.

Flow:
    profile + job
      ├─ build signals ─→ embed both (cache) ─→ cosine c
      ├─ term matching, 4 categories in parallel
      │     functions | skills | languages | achievements↔outcomes
      ├─ gates ─→ any triggered: score 0, breakdown still returned
      ├─ base = round(c * cosine_weight)
      ├─ + category boosts (capped)  − language / seniority penalties
      └─ clamp to [0, 100]
"""

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from config import MatchConfig
from models.responses import MatchResult, MatchSignals
from models.schemas.job_requirement import JobRequirement
from models.schemas.match import CategoryOverlaps, GateResult, ScoreAdjustment, TermMatch
from models.schemas.profile import Profile
from services.concurrency import gather_all
from services.embedding_cache import CacheService
from services.errors import MalformedInputError, MatchTimeoutError
from services.gates import evaluate_gates
from services.signal_builder import build_job_signal, build_profile_signal
from services.similarity import cosine_similarity
from services.term_matcher import TermMatcher
from services.text import normalize_token

logger = logging.getLogger(__name__)

CATEGORIES = ("functions", "skills", "languages", "outcomes")

_JUNIOR_MID = {"junior", "mid"}
_LEADERSHIP_HINTS = {"lead/head", "director+"}
_LEADERSHIP_TITLE_WORDS = {"lead", "head", "director", "vp", "chief", "president", "cto", "ceo", "coo", "cfo"}


def validate_inputs(profile: Any, job: Any) -> tuple[Profile, JobRequirement]:
    """Coerce raw payloads into typed inputs; reject anything else up front."""
    try:
        if not isinstance(profile, Profile):
            profile = Profile.model_validate(profile)
        if not isinstance(job, JobRequirement):
            job = JobRequirement.model_validate(job)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid match input: {e.error_count()} error(s)") from e
    return profile, job


def _reads_as_leadership(profile: Profile) -> bool:
    hint = (profile.seniority_hint or "").strip().lower()
    if hint and hint != "unknown":
        return hint in _LEADERSHIP_HINTS
    title_words = set(normalize_token(profile.title).split())
    return bool(title_words & _LEADERSHIP_TITLE_WORDS)


class MatchEngine:
    """Matches one Profile against one JobRequirement.

    All tuning lives in MatchConfig; the cache is the only shared state.
    """

    def __init__(
        self,
        cache: CacheService,
        config: MatchConfig | None = None,
        timeout: float | None = None,
    ) -> None:
        self.cache = cache
        self.config = config or MatchConfig()
        self.timeout = timeout
        self.term_matcher = TermMatcher(cache)

    async def compute_score(
        self,
        profile: Profile | dict,
        job: JobRequirement | dict,
        timeout: float | None = None,
    ) -> MatchResult:
        """Score a candidate against a job.

        Raises MalformedInputError before any embedding call, ProviderError
        if an embedding fails and MatchTimeoutError when the deadline expires.
        """
        profile, job = validate_inputs(profile, job)
        deadline = timeout if timeout is not None else self.timeout
        if not deadline:
            return await self._compute(profile, job)
        try:
            return await asyncio.wait_for(self._compute(profile, job), deadline)
        except asyncio.TimeoutError as e:
            logger.warning("Match timed out after %.1fs", deadline)
            raise MatchTimeoutError(f"Match did not complete within {deadline}s") from e

    async def compute_batch(
        self,
        profiles: list[Profile | dict],
        job: JobRequirement | dict,
        timeout: float | None = None,
    ) -> list[MatchResult]:
        """Score several candidates against one job, results in input order."""
        pairs = [validate_inputs(p, job) for p in profiles]
        return await gather_all(*(self.compute_score(p, j, timeout) for p, j in pairs))

    async def _compute(self, profile: Profile, job: JobRequirement) -> MatchResult:
        profile_signal = build_profile_signal(profile)
        job_signal = build_job_signal(job)

        profile_vec, job_vec = await gather_all(
            self.cache.get("profile", "signal", profile_signal),
            self.cache.get("job", "signal", job_signal),
        )
        cosine = cosine_similarity(profile_vec, job_vec)
        overlaps = await self._compute_overlaps(profile, job)
        gates = evaluate_gates(profile, job, self.config.experience_tolerance)
        base_score = round(cosine * self.config.cosine_weight)

        result = MatchResult(
            cosine_similarity=round(cosine, 4),
            base_score=base_score,
            overlaps=overlaps,
            gate_outcomes=gates,
            signals=MatchSignals(profile=profile_signal, job=job_signal),
            embedding_model=self.cache.model,
        )

        if gates:
            result.score = 0
            result.reasons = [self._gate_reason(g) for g in gates]
            logger.info("Match gated (%s); cosine=%.4f", ", ".join(g.type for g in gates), cosine)
            return result

        boosts = self._boosts(overlaps)
        penalties = self._penalties(profile, job, overlaps)
        raw = base_score + sum(b.amount for b in boosts) + sum(p.amount for p in penalties)

        result.score = max(0, min(100, int(raw)))
        result.boosts = boosts
        result.penalties = penalties
        result.reasons = boosts + penalties
        logger.info(
            "Match scored %d (base=%d, boosts=%d, penalties=%d, cosine=%.4f)",
            result.score, base_score, len(boosts), len(penalties), cosine,
        )
        return result

    async def _compute_overlaps(self, profile: Profile, job: JobRequirement) -> CategoryOverlaps:
        match = self.term_matcher.match_terms
        functions, skills, languages, outcomes = await gather_all(
            match(profile.functions, job.functions, namespace="func"),
            match(profile.hard_skills, job.hard_skills, namespace="skill"),
            match(profile.language_names, job.languages, namespace="lang"),
            match(profile.achievements, job.key_outcomes, namespace="outcome"),
        )
        return CategoryOverlaps(
            functions=functions, skills=skills, languages=languages, outcomes=outcomes
        )

    def _qualifies(self, category: str, m: TermMatch) -> bool:
        return m.kind == "exact" or m.similarity >= self.config.semantic_thresholds.get(category)

    def _boosts(self, overlaps: CategoryOverlaps) -> list[ScoreAdjustment]:
        boosts: list[ScoreAdjustment] = []
        for category in CATEGORIES:
            qualifying = [m for m in getattr(overlaps, category) if self._qualifies(category, m)]
            if not qualifying:
                continue
            per_match = self.config.category_boosts.get(category)
            cap = self.config.category_caps.get(category)
            amount = int(min(cap, per_match * len(qualifying)))
            if amount <= 0:
                continue
            boosts.append(ScoreAdjustment(
                kind="boost",
                type=f"{category}_overlap",
                amount=amount,
                category=category,
                detail=", ".join(m.target for m in qualifying),
                reason=f"{len(qualifying)} {category} overlap(s)",
            ))
        return boosts

    def _penalties(
        self, profile: Profile, job: JobRequirement, overlaps: CategoryOverlaps
    ) -> list[ScoreAdjustment]:
        penalties: list[ScoreAdjustment] = []
        cfg = self.config

        # Languages the job asks for that the candidate does not cover
        covered = {
            normalize_token(m.target)
            for m in overlaps.languages
            if self._qualifies("languages", m)
        }
        common = {normalize_token(lang) for lang in cfg.common_languages}
        seen: set[str] = set()
        for language in job.languages:
            tok = normalize_token(language)
            if not tok or tok in covered or tok in seen:
                continue
            seen.add(tok)
            amount = cfg.penalties.language_missing_common if tok in common else cfg.penalties.language_missing
            penalties.append(ScoreAdjustment(
                kind="penalty",
                type="language_missing",
                amount=-amount,
                category="languages",
                detail=language,
                reason=f"Required language not found: {language}",
            ))

        # Junior/Mid role, leadership-level candidate
        job_level = (job.seniority_hint or "").strip().lower()
        if job_level in _JUNIOR_MID and _reads_as_leadership(profile):
            penalties.append(ScoreAdjustment(
                kind="penalty",
                type="seniority_mismatch",
                amount=-cfg.penalties.seniority_mismatch,
                detail=f"job={job.seniority_hint}, candidate={profile.seniority_hint or profile.title}",
                reason="Candidate reads as leadership for a junior/mid role",
            ))
        return penalties

    @staticmethod
    def _gate_reason(gate: GateResult) -> ScoreAdjustment:
        if gate.type == "yoe_below_min":
            reason = f"{gate.yoe:g} years of experience, role requires {gate.yoe_min:g}"
        else:
            reason = f"Education {gate.education} below required {gate.education_min}"
        return ScoreAdjustment(kind="gate", type=gate.type, amount=0, reason=reason)
