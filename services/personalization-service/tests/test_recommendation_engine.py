"""Tests for recommendation_engine.py - independent recommendation rules."""

from datetime import date

import pytest
from finance_model import PortfolioSummary, SpendingSnapshot, UserProfile
from inflation_engine import compare_inflation
from recommendation_engine import generate_recommendations
from threshold_engine import compute_thresholds


def make_profile(age: int = 30, income: float = 100_000.0, location: str = "Pune") -> UserProfile:
    """Create a UserProfile instance for testing."""
    return UserProfile(
        user_id="user-1",
        age=age,
        monthly_income=income,
        location=location,
        risk_tier="moderate",
        profession="",
    )


def run_rules(profile, amounts, portfolio=None, existing_ids=(), inflation=None):
    """Run generate_recommendations with thresholds derived from the profile."""
    return generate_recommendations(
        profile,
        SpendingSnapshot(amounts=amounts),
        compute_thresholds(profile),
        portfolio or PortfolioSummary(),
        inflation=inflation,
        existing_ids=existing_ids,
    )


class TestBudgetControl:
    """Tests for the budget control rule."""

    def test_entertainment_overspend_emits_single_recommendation(self):
        profile = make_profile()
        thresholds = compute_thresholds(profile)
        target_budget = round(100_000 * thresholds.categories["entertainment"].target)

        recommendations = run_rules(profile, {"entertainment": 25_000})

        assert len(recommendations) == 1
        budget = recommendations[0]
        assert budget.id == "entertainment_budget"
        assert budget.monthly_amount == pytest.approx(25_000 - target_budget)
        assert budget.monthly_amount == pytest.approx(13_450)
        assert budget.annual_impact == pytest.approx(budget.monthly_amount * 12)
        assert budget.navigation_params == {"highlight_category": "entertainment"}

    def test_category_names_are_case_insensitive(self):
        recommendations = run_rules(make_profile(), {"Entertainment": 25_000})

        assert [rec.id for rec in recommendations] == ["entertainment_budget"]
        assert recommendations[0].monthly_amount == pytest.approx(13_450)

    def test_spend_under_warning_is_silent(self):
        assert run_rules(make_profile(), {"entertainment": 10_000}) == []

    def test_rationale_mentions_category_inflation(self):
        profile = make_profile()
        spending = SpendingSnapshot(amounts={"entertainment": 25_000})
        inflation = compare_inflation(spending, date(2024, 3, 1), profile.location)

        budget = run_rules(profile, {"entertainment": 25_000}, inflation=inflation)[0]

        assert "rising" in budget.rationale

    def test_existing_id_suppresses_rule(self):
        assert run_rules(make_profile(), {"entertainment": 25_000}, existing_ids=["entertainment_budget"]) == []


class TestSavingsAcceleration:
    """Tests for the savings acceleration rule."""

    def test_low_savings_rate_fires(self):
        recommendations = run_rules(make_profile(), {"food": 60_000, "housing": 35_000})

        assert [rec.id for rec in recommendations] == ["emergency_fund_boost"]
        assert recommendations[0].monthly_amount == 15_000
        assert recommendations[0].priority == "high"

    def test_healthy_savings_rate_is_silent(self):
        assert run_rules(make_profile(), {"food": 30_000}) == []


class TestPortfolioRules:
    """Tests for wealth building, diversification and investment scaling."""

    def test_wealth_building_for_high_income(self):
        recommendations = run_rules(make_profile(income=200_000), {})

        assert [rec.id for rec in recommendations] == ["wealth_building_fund"]
        assert recommendations[0].monthly_amount == 40_000

    def test_wealth_building_skipped_with_investment_goal(self):
        recommendations = run_rules(make_profile(income=200_000), {}, existing_ids=["startup_investment_u1"])

        assert recommendations == []

    def test_low_diversification(self):
        recommendations = run_rules(make_profile(), {}, portfolio=PortfolioSummary(diversification_score=0.4))

        assert [rec.id for rec in recommendations] == ["portfolio_diversification"]

    def test_scale_investment(self):
        portfolio = PortfolioSummary(average_returns=18.0, monthly_investment=10_000)
        recommendations = run_rules(make_profile(), {}, portfolio=portfolio)

        assert [rec.id for rec in recommendations] == ["investment_scaling"]
        assert recommendations[0].monthly_amount == 15_000

    def test_scale_investment_skipped_when_already_investing(self):
        portfolio = PortfolioSummary(average_returns=18.0, monthly_investment=25_000)

        assert run_rules(make_profile(), {}, portfolio=portfolio) == []


class TestRetirementAcceleration:
    """Tests for the retirement acceleration rule."""

    def test_fires_after_45(self):
        recommendations = run_rules(make_profile(age=50), {})

        assert [rec.id for rec in recommendations] == ["retirement_acceleration"]
        assert recommendations[0].priority == "urgent"
        assert recommendations[0].monthly_amount == 30_000

    def test_silent_at_45(self):
        assert run_rules(make_profile(age=45), {}) == []


def test_rules_run_in_fixed_order():
    profile = make_profile(age=50, income=200_000)
    portfolio = PortfolioSummary(diversification_score=0.4, average_returns=18.0, monthly_investment=10_000)

    recommendations = run_rules(profile, {"entertainment": 60_000, "shopping": 40_000}, portfolio=portfolio)

    assert [rec.id for rec in recommendations] == [
        "entertainment_budget",
        "shopping_budget",
        "wealth_building_fund",
        "portfolio_diversification",
        "investment_scaling",
        "retirement_acceleration",
    ]
