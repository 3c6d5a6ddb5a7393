from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_engine
from config import settings
from models.requests import BatchMatchRequest, MatchRequest
from models.responses import BatchMatchResponse, MatchResult, RankedMatch
from services.errors import MalformedInputError, MatchError, MatchTimeoutError, ProviderError
from services.scorer import MatchEngine

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _to_http(e: MatchError) -> HTTPException:
    if isinstance(e, ProviderError):
        status = 502
    elif isinstance(e, MatchTimeoutError):
        status = 504
    elif isinstance(e, MalformedInputError):
        status = 422
    else:
        status = 500
    return HTTPException(status_code=status, detail={"code": e.code, "message": str(e)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body validation failures in the same shape as MalformedInputError."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Invalid match input: {len(errors)} error(s)"
    if where:
        message += f"; first at {where}: {first.get('msg', '')}"
    return JSONResponse(
        status_code=422,
        content={"detail": {"code": MalformedInputError.code, "message": message}},
    )


@router.get("/health")
async def health(engine: MatchEngine = Depends(get_engine)):
    stats = engine.cache.stats()
    return {
        "status": "ok",
        "embedding_provider": settings.embedding_provider,
        "embedding_model": engine.cache.model,
        "cache_entries": stats.entries,
    }


@router.post("/match", response_model=MatchResult)
@limiter.limit("30/minute")
async def match(
    request: Request,
    body: MatchRequest,
    engine: MatchEngine = Depends(get_engine),
):
    try:
        return await engine.compute_score(body.profile, body.job_requirement)
    except MatchError as e:
        raise _to_http(e) from e


@router.post("/match/batch", response_model=BatchMatchResponse)
@limiter.limit("10/minute")
async def match_batch(
    request: Request,
    body: BatchMatchRequest,
    engine: MatchEngine = Depends(get_engine),
):
    if len(body.profiles) > settings.max_request_profiles:
        raise HTTPException(
            status_code=400,
            detail=f"Too many profiles. Max per request: {settings.max_request_profiles}",
        )
    try:
        results = await engine.compute_batch(body.profiles, body.job_requirement)
    except MatchError as e:
        raise _to_http(e) from e

    ranked = sorted(
        (RankedMatch(index=i, result=r) for i, r in enumerate(results)),
        key=lambda m: (-m.result.score, -m.result.cosine_similarity, m.index),
    )
    return BatchMatchResponse(results=ranked)
