"""Exact-then-semantic term matching between candidate and job term lists.

For each job (target) term:
    1. normalized form present among candidate (source) terms -> exact, 1.0
    2. otherwise the single most similar remaining source term -> semantic

Matching is top-1 with no threshold; deciding whether a semantic match is
good enough to count is the score composer's job.
"""

import logging

from models.schemas.match import TermMatch
from services.concurrency import gather_all
from services.embedding_cache import CacheService
from services.similarity import best_match
from services.text import dedupe_normalized, normalize_token

logger = logging.getLogger(__name__)


class TermMatcher:
    def __init__(self, cache: CacheService) -> None:
        self._cache = cache

    async def match_terms(
        self,
        source_terms: list[str],
        target_terms: list[str],
        *,
        namespace: str = "terms",
        source_id: str = "",
        target_id: str = "",
    ) -> list[TermMatch]:
        """Match every target term against the source terms.

        Results follow target input order. Only targets leave consideration
        after an exact match; the semantic pass searches every source term.
        With no source terms at all, unmatched targets produce no entry. Any
        embedding failure aborts the whole call.
        """
        sources = dedupe_normalized(source_terms)
        source_set = set(sources)

        matches: dict[int, TermMatch] = {}
        pending: list[tuple[int, str, str]] = []  # (target position, raw, normalized)

        for pos, target in enumerate(target_terms):
            tok = normalize_token(target)
            if not tok:
                continue
            if tok in source_set:
                matches[pos] = TermMatch(source=tok, target=target, similarity=1.0, kind="exact")
            else:
                pending.append((pos, target, tok))

        # Every source stays available to the semantic pass, exact hits included
        pool = sources
        if pending and pool:
            target_vecs, source_vecs = await gather_all(
                gather_all(*(
                    self._cache.get(f"{namespace}:right", target_id, tok)
                    for _, _, tok in pending
                )),
                gather_all(*(
                    self._cache.get(f"{namespace}:left", source_id, src)
                    for src in pool
                )),
            )
            for (pos, target, _), vec in zip(pending, target_vecs):
                idx, sim = best_match(vec, source_vecs)
                matches[pos] = TermMatch(
                    source=pool[idx],
                    target=target,
                    similarity=round(sim, 4),
                    kind="semantic",
                )

        result = [matches[pos] for pos in sorted(matches)]
        n_exact = sum(1 for m in result if m.kind == "exact")
        logger.debug(
            "%s: %d exact, %d semantic of %d targets",
            namespace, n_exact, len(result) - n_exact, len(target_terms),
        )
        return result
