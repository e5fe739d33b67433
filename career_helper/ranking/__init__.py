from .models import Candidate, RankedCandidate
from .ranker import (
    MAX_LIMIT,
    MIN_LIMIT,
    InvalidLimit,
    clamp_limit,
    keyword_match_score,
    rank_candidates,
    tokenize_job_description,
)

__all__ = [
    "Candidate",
    "RankedCandidate",
    "InvalidLimit",
    "MIN_LIMIT",
    "MAX_LIMIT",
    "clamp_limit",
    "keyword_match_score",
    "rank_candidates",
    "tokenize_job_description",
]
