"""Errors surfaced by the match engine.

Callers get either a complete MatchResult or exactly one of these.
"""


class MatchError(Exception):
    """Base class for match failures."""

    code = "MATCH_ERROR"


class ProviderError(MatchError):
    """The embedding provider failed (network, auth, rate limit, model load)."""

    code = "PROVIDER_ERROR"


class MalformedInputError(MatchError):
    """Profile or job requirement does not have the expected shape."""

    code = "MALFORMED_INPUT"


class MatchTimeoutError(MatchError):
    """The per-request deadline expired before all embeddings arrived."""

    code = "MATCH_TIMEOUT"
