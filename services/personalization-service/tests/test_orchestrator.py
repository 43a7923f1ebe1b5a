"""Tests for orchestrator.py - the combined personalization entry point."""

import logging
from dataclasses import asdict
from datetime import date

import pytest
from finance_model import FinanceInputError, Goal, PortfolioSummary, SpendingSnapshot, UserProfile
from orchestrator import compute_personalized_finance
from shared.engine_settings import EngineSettings

AS_OF = date(2024, 3, 15)


def make_profile(**overrides) -> UserProfile:
    """Create a UserProfile instance for testing."""
    values = {
        "user_id": "user-1",
        "age": 28,
        "monthly_income": 125_000.0,
        "location": "Mumbai, Maharashtra",
        "risk_tier": "aggressive",
        "profession": "Software Engineer",
    }
    values.update(overrides)
    return UserProfile(**values)


def make_spending() -> SpendingSnapshot:
    return SpendingSnapshot(
        amounts={"food": 20_000, "housing": 35_000, "transport": 10_000, "entertainment": 8_000, "shopping": 6_000}
    )


def make_portfolio() -> PortfolioSummary:
    return PortfolioSummary(bank_balance=300_000, mutual_funds=200_000, stocks=100_000, diversification_score=0.5)


def make_existing_goal() -> Goal:
    return Goal(
        id="wedding",
        title="Wedding",
        category="Lifestyle",
        target_amount=500_000,
        current_amount=100_000,
        monthly_contribution=20_000,
        target_date=date(2026, 1, 1),
        priority="medium",
        icon="ring",
        description="Wedding fund",
        reasoning="",
        base_target_amount=500_000,
    )


class TestComputePersonalizedFinance:
    """Tests for compute_personalized_finance."""

    def test_combines_every_engine(self):
        result = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)

        assert result.inflation.personal_rate > 6.5
        assert result.thresholds.savings.minimum <= result.thresholds.savings.target
        assert result.goals[0].id == "emergency_fund"
        assert result.goals[0].base_target_amount == 750_000
        assert result.location.city == "mumbai"
        assert "portfolio_diversification" in {rec.id for rec in result.recommendations}

    def test_existing_goals_come_first_and_are_not_regenerated(self):
        result = compute_personalized_finance(
            make_profile(), make_spending(), make_portfolio(), [make_existing_goal()], AS_OF
        )
        ids = [goal.id for goal in result.goals]

        assert ids[0] == "wedding"
        assert len(ids) == len(set(ids))

    def test_second_pass_adds_no_goals(self):
        first = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)
        second = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), first.goals, AS_OF)

        assert [goal.id for goal in second.goals] == [goal.id for goal in first.goals]

    def test_every_goal_carries_insights_field(self):
        result = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)

        assert any(goal.insights for goal in result.goals)

    def test_cross_link_recommendations_follow_rule_output(self):
        result = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)
        ids = [rec.id for rec in result.recommendations]
        cross_link_positions = [i for i, rec_id in enumerate(ids) if rec_id.startswith(("accelerate_", "goal_risk_"))]
        rule_positions = [i for i, rec_id in enumerate(ids) if not rec_id.startswith(("accelerate_", "goal_risk_"))]

        assert cross_link_positions
        assert max(rule_positions) < min(cross_link_positions)
        assert len(ids) == len(set(ids))

    def test_deterministic_output(self):
        first = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)
        second = compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)

        assert asdict(first) == asdict(second)

    def test_settings_limit_optimizations(self):
        settings = EngineSettings(max_optimizations_per_goal=1)
        result = compute_personalized_finance(
            make_profile(), make_spending(), make_portfolio(), [], AS_OF, settings=settings
        )

        for goal in result.goals:
            for insight in goal.insights:
                assert len(insight.optimizations) <= 1

    def test_invalid_spending_raises(self):
        with pytest.raises(FinanceInputError):
            compute_personalized_finance(
                make_profile(), SpendingSnapshot(amounts={"food": -10}), make_portfolio(), [], AS_OF
            )

    def test_logs_hashes_not_raw_values(self, caplog):
        with caplog.at_level(logging.INFO, logger="orchestrator"):
            compute_personalized_finance(make_profile(), make_spending(), make_portfolio(), [], AS_OF)

        events = [record.msg for record in caplog.records if isinstance(record.msg, dict)]
        computed = next(event for event in events if event["event"] == "personalization_computed")
        assert len(computed["profile_hash"]) == 64
        assert "Mumbai" not in str(computed)

    def test_funded_emergency_fund_gets_no_cross_links(self):
        profile = make_profile(age=30, monthly_income=60_000.0, location="Indore", risk_tier="moderate", profession="")
        portfolio = PortfolioSummary(bank_balance=5_000_000)
        spending = SpendingSnapshot(amounts={"food": 15_000, "entertainment": 12_000, "shopping": 8_000})

        result = compute_personalized_finance(profile, spending, portfolio, [], AS_OF)
        emergency = next(goal for goal in result.goals if goal.id == "emergency_fund")
        ids = {rec.id for rec in result.recommendations}

        assert (emergency.target_amount, emergency.current_amount) == (216_000, 216_000)
        assert emergency.insights == []
        assert "accelerate_emergency_fund" not in ids
        assert "goal_risk_emergency_fund" not in ids

    def test_retirement_age_setting_reaches_savings_reasoning(self):
        settings = EngineSettings(retirement_age=60)
        result = compute_personalized_finance(
            make_profile(), make_spending(), make_portfolio(), [], AS_OF, settings=settings
        )

        assert "32 years to retirement" in result.thresholds.savings.reasoning
