from __future__ import annotations

import re
from typing import Sequence

from .models import Candidate, RankedCandidate

MIN_LIMIT = 1
MAX_LIMIT = 50

_NON_WORD_PATTERN = re.compile(r"\W+")


class InvalidLimit(ValueError):
    pass


def tokenize_job_description(job_description: str) -> list[str]:
    """Lower-cased job description tokens, duplicates kept in order."""
    return [token for token in _NON_WORD_PATTERN.split(job_description.lower()) if token]


def keyword_match_score(tokens: Sequence[str], resume_text: str | None) -> int:
    if not resume_text:
        return 0
    text = resume_text.lower()
    return sum(1 for token in tokens if token in text)


def clamp_limit(limit: int) -> int:
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


def rank_candidates(
    job_description: str | None,
    candidates: Sequence[Candidate],
    limit: int = 10,
) -> list[RankedCandidate]:
    """Order candidates for a job description.

    Without a job description candidates are ordered by their stored ATS
    score. With one, each candidate gets a ``match_score`` counting the
    description tokens found in its resume text; ties fall back to the ATS
    score. Both sorts are stable.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise InvalidLimit(f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}, got {limit!r}")

    ranked = [RankedCandidate(**candidate.model_dump(), resume_text=candidate.resume_text) for candidate in candidates]
    if not ranked:
        return []

    description = (job_description or "").strip()
    if not description:
        ranked.sort(key=lambda item: item.score, reverse=True)
        return ranked[:limit]

    tokens = tokenize_job_description(description)
    for item in ranked:
        item.match_score = keyword_match_score(tokens, item.resume_text)

    ranked.sort(key=lambda item: (item.match_score or 0, item.score), reverse=True)
    return ranked[:limit]
