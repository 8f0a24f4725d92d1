"""
Candidate Ranker

Scores every peer for one student and orders them best first. Ties on the
total score are broken by price (cheaper first), then rating (higher first),
then experience (higher first).
"""
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from app.services.match_scorer import ScoreResult, MatchScorer, field_value, get_match_scorer, to_number


class RankedCandidate(BaseModel):
    """One scored peer in a student's candidate list"""
    model_config = ConfigDict(frozen=True)

    peer: Any
    score: float
    result: ScoreResult


def ranking_key(candidate: RankedCandidate) -> Tuple[float, float, float, float]:
    """Sort key: score desc, charges asc, rating desc, experience desc."""
    peer = candidate.peer
    return (
        -candidate.score,
        to_number(field_value(peer, "charges")),
        -to_number(field_value(peer, "rating")),
        -to_number(field_value(peer, "experience")),
    )


def rank_candidates(
    student: Any,
    peers: Iterable[Any],
    limit: Optional[int] = None,
    scorer: Optional[MatchScorer] = None,
) -> List[RankedCandidate]:
    """
    Rank peers for a student.

    Args:
        student: Student row or dict
        peers: Peer rows or dicts; peers outside the student's subject stay in
            the list with a zero domain score
        limit: Keep only the first N candidates, None for the full order
        scorer: Scorer to use, defaults to the shared MatchScorer

    Returns:
        Freshly computed list of RankedCandidate, best first
    """
    scorer = scorer or get_match_scorer()

    scored = []
    for peer in peers:
        result = scorer.score(student, peer)
        scored.append(RankedCandidate(peer=peer, score=result.total, result=result))

    scored.sort(key=ranking_key)

    if limit is not None:
        return scored[:max(0, limit)]
    return scored
