"""Term normalization and the education ladder."""

import re
import unicodedata

_WS_RE = re.compile(r"\s+")


def _strip_punct(text: str) -> str:
    """Replace every run of Unicode punctuation/symbol characters with one space."""
    out = []
    in_run = False
    for ch in text:
        if unicodedata.category(ch)[0] in ("P", "S"):
            if not in_run:
                out.append(" ")
            in_run = True
        else:
            out.append(ch)
            in_run = False
    return "".join(out)


def normalize_token(term: str | None) -> str:
    """Canonicalize a term for cheap exact-match comparison.

    Lower-cases, turns punctuation/symbols into spaces, collapses whitespace
    and strips one trailing "es" or "s". The plural stripping is deliberately
    naive ("process" -> "proc"), both sides get the same treatment.
    """
    if not term:
        return ""
    t = str(term).lower().strip()
    t = _strip_punct(t)
    t = _WS_RE.sub(" ", t).strip()
    if t.endswith("es"):
        t = t[:-2]
    elif t.endswith("s"):
        t = t[:-1]
    return t


def dedupe_normalized(terms: list[str]) -> list[str]:
    """Normalize terms, dropping empties and keeping first occurrence order."""
    seen: set[str] = set()
    out: list[str] = []
    for term in terms:
        tok = normalize_token(term)
        if tok and tok not in seen:
            seen.add(tok)
            out.append(tok)
    return out


# ---------------------------------------------------------------------------
# Education ladder
# ---------------------------------------------------------------------------

EDUCATION_LADDER: list[str] = [
    "None",
    "High School",
    "Diploma/Certificate",
    "Associate",
    "Bachelor",
    "Master",
    "PhD/Doctorate",
]

_LADDER_LOWER = {level.lower(): level for level in EDUCATION_LADDER}

# Free-form spellings that upstream extractors occasionally emit
DEGREE_PATTERNS: dict[str, list[str]] = {
    "PhD/Doctorate": [
        r"ph\.?d", r"doctorate", r"doctoral", r"doctor of philosophy", r"d\.?phil",
    ],
    "Master": [
        r"m\.?sc\.?", r"m\.?tech", r"mba", r"m\.?eng", r"master(?:'?s)?",
    ],
    "Bachelor": [
        r"b\.?sc\.?", r"b\.?tech", r"b\.?eng", r"bachelor(?:'?s)?", r"undergraduate",
    ],
    "Associate": [
        r"associate(?:'?s)?",
    ],
    "Diploma/Certificate": [
        r"diploma", r"certificate", r"certification",
    ],
    "High School": [
        r"high school", r"secondary school", r"ged",
    ],
}

_DEGREE_COMPILED: dict[str, re.Pattern] = {
    level: re.compile(rf"\b(?:{'|'.join(patterns)})\b", re.IGNORECASE)
    for level, patterns in DEGREE_PATTERNS.items()
}


def canonical_education(level: str | None) -> str | None:
    """Map an education string onto the ladder; None if it is not on it.

    "Unknown" and unrecognized values return None so they never gate.
    """
    if not level:
        return None
    text = level.strip()
    exact = _LADDER_LOWER.get(text.lower())
    if exact:
        return exact
    if text.lower() in ("no degree", "none required"):
        return "None"
    # Highest level wins when a string mentions several
    for canonical, pattern in _DEGREE_COMPILED.items():
        if pattern.search(text):
            return canonical
    return None


def education_rank(level: str | None) -> int:
    """Ordinal rank on the education ladder, or -1 when unknown."""
    canonical = canonical_education(level)
    if canonical is None:
        return -1
    return EDUCATION_LADDER.index(canonical)
