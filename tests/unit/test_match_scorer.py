"""
Unit tests for MatchScorer

Tests component formulas, weighting, rounding and input coercion.
"""

import pytest

from app.services.match_scorer import (
    MatchScorer,
    compute_score,
    get_match_scorer,
    round_score,
    to_number,
)


@pytest.fixture
def scorer():
    return MatchScorer()


class TestDomainScore:
    """Test subject/domain matching"""

    def test_exact_match(self, scorer):
        assert scorer.domain_score("Physics", "Physics") == 1.0

    def test_case_insensitive(self):
        result = compute_score({"subject": "Math"}, {"domain": "math"})
        assert result.breakdown.domain_score == 1

    def test_no_partial_credit(self, scorer):
        assert scorer.domain_score("Math", "Mathematics") == 0.0
        assert scorer.domain_score("Physics", "Chemistry") == 0.0

    def test_both_missing_compare_equal(self, scorer):
        """Missing subject and domain both read as empty strings"""
        assert scorer.domain_score(None, None) == 1.0
        assert scorer.domain_score("Math", None) == 0.0


class TestBudgetScore:
    """Test budget fit formula"""

    def test_exact_budget_scores_one(self, scorer):
        assert scorer.budget_score(3000, 3000) == 1.0

    def test_below_budget_decays_with_distance(self, scorer):
        assert scorer.budget_score(2000, 1800) == pytest.approx(0.9)
        assert scorer.budget_score(2000, 1000) == pytest.approx(0.5)
        assert scorer.budget_score(2000, 0) == 0.0

    def test_over_budget_penalty(self, scorer):
        # 1 - (500 / 2001) * 1.5
        assert scorer.budget_score(2000, 2500) == pytest.approx(1 - (500 / 2001) * 1.5)

    def test_over_budget_floored_at_zero(self, scorer):
        assert scorer.budget_score(2000, 5000) == 0.0

    @pytest.mark.parametrize("budget,delta", [(1000, 100), (3000, 500), (5000, 1200)])
    def test_over_budget_steeper_than_under(self, scorer, budget, delta):
        above = scorer.budget_score(budget, budget + delta)
        below = scorer.budget_score(budget, budget - delta)
        assert above <= below

    def test_no_budget_no_charges(self, scorer):
        assert scorer.budget_score(None, None) == 0.5
        assert scorer.budget_score(0, 0) == 0.5

    def test_cheap_peer_with_no_budget(self, scorer):
        """Zero budget and a positive price falls through to the over-budget branch"""
        assert scorer.budget_score(0, 0.5) == pytest.approx(0.25)
        assert scorer.budget_score(0, 1) == 0.0


class TestRatingAndExperience:
    """Test rating and experience components"""

    def test_rating_scaled_to_five(self, scorer):
        assert scorer.rating_score(4) == pytest.approx(0.8)
        assert scorer.rating_score(5) == 1.0

    def test_rating_clamped(self, scorer):
        assert scorer.rating_score(9) == 1.0
        assert scorer.rating_score(-2) == 0.0

    def test_experience_relative_to_student(self, scorer):
        assert scorer.experience_score(4, 2) == pytest.approx(0.5)
        assert scorer.experience_score(2, 3) == 1.0

    def test_experience_absolute_when_student_has_none(self, scorer):
        assert scorer.experience_score(0, 2) == pytest.approx(0.4)
        assert scorer.experience_score(None, 10) == 1.0

    def test_negative_peer_experience_floored(self, scorer):
        assert scorer.experience_score(2, -3) == 0.0


class TestScore:
    """Test the weighted total"""

    def test_weights_sum_to_one(self, scorer):
        assert sum(scorer.formula_weights.values()) == pytest.approx(1.0)

    def test_perfect_match(self, scorer):
        student = {"subject": "Physics", "range_budget": 3000, "experience": 1}
        peer = {"domain": "Physics", "charges": 3000, "rating": 5, "experience": 5}

        result = scorer.score(student, peer)

        assert result.total == 1.0
        assert result.breakdown.domain_score == 1.0
        assert result.breakdown.budget_score == 1.0

    def test_physics_pair_totals(self, scorer):
        student = {"subject": "Physics", "range_budget": 2000, "rating": 3, "experience": 2}
        cheap = {"domain": "Physics", "charges": 1800, "rating": 4, "experience": 3}
        pricey = {"domain": "Physics", "charges": 5000, "rating": 5, "experience": 10}

        assert scorer.score(student, cheap).total == 0.94
        assert scorer.score(student, pricey).total == 0.8

    def test_components_rounded_to_three_decimals(self, scorer):
        student = {"subject": "Math", "range_budget": 3000, "experience": 3}
        peer = {"domain": "Math", "charges": 2000, "rating": 3.3333, "experience": 1}

        breakdown = scorer.score(student, peer).breakdown

        assert breakdown.budget_score == 0.667
        assert breakdown.rating_score == 0.667
        assert breakdown.exp_score == 0.333

    def test_garbage_fields_coerced_to_zero(self, scorer):
        student = {"subject": "Math", "range_budget": "lots", "experience": float("nan")}
        peer = {"domain": "Math", "charges": None, "rating": "five", "experience": True}

        result = scorer.score(student, peer)

        assert 0 <= result.total <= 1
        assert result.breakdown.budget_score == 0.5
        assert result.breakdown.rating_score == 0.0
        assert result.breakdown.exp_score == 0.0

    def test_accepts_objects(self, scorer):
        class Row:
            subject = "Chemistry"
            range_budget = 1000
            experience = 1
            domain = "Chemistry"
            charges = 1000
            rating = 5

        result = scorer.score(Row(), Row())
        assert result.total == 1.0

    def test_empty_records_stay_in_range(self, scorer):
        result = scorer.score({}, {})
        assert 0 <= result.total <= 1
        for value in result.breakdown.model_dump().values():
            assert 0 <= value <= 1

    def test_singleton(self):
        assert get_match_scorer() is get_match_scorer()


class TestHelpers:
    """Test numeric helpers"""

    def test_round_half_up(self):
        assert round_score(0.0625) == 0.063
        assert round_score(0.9444) == 0.944

    @pytest.mark.parametrize("value,expected", [
        ("12.5", 12.5),
        (3, 3.0),
        (None, 0.0),
        (False, 0.0),
        ("abc", 0.0),
        (float("inf"), 0.0),
    ])
    def test_to_number(self, value, expected):
        assert to_number(value) == expected
