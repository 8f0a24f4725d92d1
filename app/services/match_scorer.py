"""
Student/Peer Compatibility Scorer

Scores a (student, peer) pair on a 0-1 scale from four components:
- Domain match (50% weight)
- Budget fit (20% weight)
- Peer rating (20% weight)
- Relative experience (10% weight)

The scorer is pure and total: it accepts ORM rows or plain dicts, and any
missing or non-numeric field is treated as 0.
"""
import math
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field

# 0-5 rating scale and the experience scale used when the student gives none
RATING_SCALE = 5.0
EXPERIENCE_SCALE = 5.0

# Slope applied to the part of a price that exceeds the student's budget
OVER_BUDGET_PENALTY = 1.5


class ScoreBreakdown(BaseModel):
    """Component scores, each rounded to 3 decimals"""
    domain_score: float = Field(..., ge=0, le=1)
    budget_score: float = Field(..., ge=0, le=1)
    rating_score: float = Field(..., ge=0, le=1)
    exp_score: float = Field(..., ge=0, le=1)


class ScoreResult(BaseModel):
    """Weighted compatibility score with its breakdown"""
    total: float = Field(..., ge=0, le=1)
    breakdown: ScoreBreakdown


def field_value(record: Any, name: str) -> Any:
    """Read a field from a mapping or an object, None when absent."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def to_number(value: Any) -> float:
    """Coerce to a finite float, falling back to 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def round_score(value: float) -> float:
    """Round half up to 3 decimals."""
    return math.floor(value * 1000 + 0.5) / 1000


class MatchScorer:
    """Compute compatibility scores between students and peer tutors"""

    def __init__(self):
        """Initialize scorer with fixed component weights"""
        self.formula_weights = {
            "domain": 0.50,
            "budget": 0.20,
            "rating": 0.20,
            "experience": 0.10,
        }

    def score(self, student: Any, peer: Any) -> ScoreResult:
        """
        Score one (student, peer) pair.

        Formula:
            total = 0.5*domain + 0.2*budget + 0.2*rating + 0.1*experience

        Args:
            student: Student row or dict (subject, range_budget, experience)
            peer: Peer row or dict (domain, charges, rating, experience)

        Returns:
            ScoreResult with total and breakdown, all in [0, 1]
        """
        domain = self.domain_score(field_value(student, "subject"), field_value(peer, "domain"))
        budget = self.budget_score(field_value(student, "range_budget"), field_value(peer, "charges"))
        rating = self.rating_score(field_value(peer, "rating"))
        experience = self.experience_score(
            field_value(student, "experience"), field_value(peer, "experience")
        )

        total = (
            self.formula_weights["domain"] * domain +
            self.formula_weights["budget"] * budget +
            self.formula_weights["rating"] * rating +
            self.formula_weights["experience"] * experience
        )

        return ScoreResult(
            total=round_score(clamp(total)),
            breakdown=ScoreBreakdown(
                domain_score=domain,
                budget_score=round_score(budget),
                rating_score=round_score(rating),
                exp_score=round_score(experience),
            ),
        )

    @staticmethod
    def domain_score(subject: Any, domain: Any) -> float:
        """1 for a case-insensitive exact match, else 0. No partial credit."""
        return 1.0 if str(subject or "").lower() == str(domain or "").lower() else 0.0

    @staticmethod
    def budget_score(budget: Any, charges: Any) -> float:
        """
        Score how well a peer's price fits the student's budget.

        Logic:
            - no budget and no price: 0.5
            - affordable: 1 - |B - C| / max(1, B), closeness to the budget
            - over budget: 1 - ((C - B) / (B + 1)) * 1.5, floored at 0
        """
        b = to_number(budget)
        c = to_number(charges)

        if b <= 0 and c <= 0:
            score = 0.5
        elif c <= b:
            score = 1 - abs(b - c) / max(1.0, b)
        else:
            score = max(0.0, 1 - ((c - b) / (b + 1)) * OVER_BUDGET_PENALTY)

        return clamp(score)

    @staticmethod
    def rating_score(peer_rating: Any) -> float:
        return clamp(to_number(peer_rating) / RATING_SCALE)

    @staticmethod
    def experience_score(student_experience: Any, peer_experience: Any) -> float:
        """
        Peer experience relative to the student's, capped at 1.

        Falls back to an absolute 0-5 year scale when the student reports no
        experience.
        """
        student_exp = to_number(student_experience)
        peer_exp = to_number(peer_experience)

        if student_exp <= 0:
            return clamp(peer_exp / EXPERIENCE_SCALE)
        return clamp(peer_exp / student_exp)


# Singleton instance
_scorer_instance: Optional[MatchScorer] = None


def get_match_scorer() -> MatchScorer:
    """Get singleton instance of MatchScorer"""
    global _scorer_instance
    if _scorer_instance is None:
        _scorer_instance = MatchScorer()
    return _scorer_instance


def compute_score(student: Any, peer: Any) -> ScoreResult:
    """Score a pair with the shared scorer."""
    return get_match_scorer().score(student, peer)
