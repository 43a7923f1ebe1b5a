from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from finance_model import (
    InflationResult,
    PortfolioSummary,
    Recommendation,
    SpendingSnapshot,
    ThresholdSet,
    UserProfile,
    round_currency,
)
from finance_tables import (
    BUDGET_CONTROL_CATEGORIES,
    DIVERSIFICATION_CUTOFF,
    HIGH_INCOME_CUTOFF,
    HIGH_RETURN_CUTOFF,
    RETIREMENT_ACCELERATION_AGE,
)

logger = logging.getLogger(__name__)

DEFAULT_RETIREMENT_AGE = 65


def _format_rupees(amount: float) -> str:
    return f"₹{amount:,.0f}"


def savings_rate(profile: UserProfile, spending: SpendingSnapshot) -> float:
    """Fraction of income left after spending; negative when spending exceeds income."""
    return (profile.monthly_income - spending.total) / profile.monthly_income


def budget_control(
    category: str,
    profile: UserProfile,
    spending: SpendingSnapshot,
    thresholds: ThresholdSet,
    inflation: Optional[InflationResult] = None,
) -> Optional[Recommendation]:
    threshold = thresholds.categories.get(category)
    if threshold is None:
        return None

    income = profile.monthly_income
    spend = spending.amount(category)
    if spend <= income * threshold.warning:
        return None

    target_budget = round_currency(income * threshold.target)
    monthly_savings = spend - target_budget
    rationale = (
        f"You're spending {_format_rupees(spend)}/month on {category} ({spend / income:.1%} of income). "
        f"{threshold.reasoning}. Reducing to {_format_rupees(target_budget)}/month would free up "
        f"{_format_rupees(monthly_savings)}/month for other goals."
    )
    contribution = inflation.breakdown.get(category) if inflation else None
    if contribution is not None:
        rationale += f" Prices in this category are rising {contribution.rate:.1f}% a year."

    return Recommendation(
        id=f"{category}_budget",
        title=f"{category.capitalize()} Budget Control",
        category="Budgeting",
        priority="medium",
        source_context="spending_analysis",
        rationale=rationale,
        impact=f"Save {_format_rupees(monthly_savings * 12)}/year",
        monthly_amount=monthly_savings,
        annual_impact=monthly_savings * 12,
        navigate_to="SpendingInsights",
        navigation_params={"highlight_category": category},
    )


def savings_acceleration(
    profile: UserProfile, spending: SpendingSnapshot, thresholds: ThresholdSet
) -> Optional[Recommendation]:
    rate = savings_rate(profile, spending)
    band = thresholds.savings
    if rate >= band.minimum:
        return None

    additional = round_currency(profile.monthly_income * (band.target - rate))
    return Recommendation(
        id="emergency_fund_boost",
        title="Emergency Fund Acceleration",
        category="Safety",
        priority="high",
        source_context="savings_analysis",
        rationale=(
            f"Your current savings rate is {rate:.1%}. {band.reasoning}. "
            f"Increasing to {band.target:.1%} would provide better financial security."
        ),
        impact=f"Save an additional {_format_rupees(additional)}/month",
        monthly_amount=additional,
        annual_impact=additional * 12,
        navigate_to="Goals",
        navigation_params={"goal_id": "emergency_fund"},
    )


def wealth_building(profile: UserProfile, existing_ids: Iterable[str]) -> Optional[Recommendation]:
    if profile.monthly_income <= HIGH_INCOME_CUTOFF:
        return None
    if any("investment" in goal_id or "wealth" in goal_id for goal_id in existing_ids):
        return None

    monthly = round_currency(profile.monthly_income * 0.20)
    return Recommendation(
        id="wealth_building_fund",
        title="Wealth Building Investment",
        category="Investment",
        priority="high",
        source_context="income_analysis",
        rationale=(
            f"With an income of {_format_rupees(profile.monthly_income)}/month you should be investing "
            "at least 20% for long-term wealth creation."
        ),
        impact=f"Potential wealth of {_format_rupees(monthly * 60 * 1.12)} in 5 years at 12% returns",
        monthly_amount=monthly,
        annual_impact=monthly * 12,
        navigate_to="Goals",
    )


def diversification(profile: UserProfile, portfolio: PortfolioSummary) -> Optional[Recommendation]:
    if portfolio.diversification_score >= DIVERSIFICATION_CUTOFF:
        return None

    monthly = round_currency(max(10_000.0, profile.monthly_income * 0.15))
    return Recommendation(
        id="portfolio_diversification",
        title="Portfolio Diversification",
        category="Investment",
        priority="medium",
        source_context="portfolio_analysis",
        rationale=(
            f"Your portfolio diversification score is {portfolio.diversification_score:.0%}. "
            "A well-diversified portfolio should score 80% or more to limit risk."
        ),
        impact="Reduce portfolio risk by spreading across asset classes",
        monthly_amount=monthly,
        annual_impact=monthly * 12,
        navigate_to="Portfolio",
    )


def scale_investment(profile: UserProfile, portfolio: PortfolioSummary) -> Optional[Recommendation]:
    income = profile.monthly_income
    if portfolio.average_returns <= HIGH_RETURN_CUTOFF or portfolio.monthly_investment >= income * 0.20:
        return None

    current = portfolio.monthly_investment
    target = income * 0.25
    additional = round_currency(target - current)
    return Recommendation(
        id="investment_scaling",
        title="Scale Up Investments",
        category="Investment",
        priority="high",
        source_context="returns_analysis",
        rationale=(
            f"You're achieving {portfolio.average_returns:g}% returns. Increasing your investment from "
            f"{_format_rupees(current)} to {_format_rupees(target)}/month would accelerate wealth building."
        ),
        impact=(
            f"Additional {_format_rupees(additional * 36 * portfolio.average_returns / 100)} "
            "in returns over 3 years"
        ),
        monthly_amount=additional,
        annual_impact=additional * 12,
        navigate_to="Portfolio",
    )


def retirement_acceleration(
    profile: UserProfile, retirement_age: int = DEFAULT_RETIREMENT_AGE
) -> Optional[Recommendation]:
    if profile.age <= RETIREMENT_ACCELERATION_AGE:
        return None

    years = max(0, retirement_age - profile.age)
    monthly = round_currency(profile.monthly_income * 0.30)
    return Recommendation(
        id="retirement_acceleration",
        title="Retirement Acceleration Plan",
        category="Retirement",
        priority="urgent",
        source_context="age_analysis",
        rationale=(
            f"With {years} years to retirement, contributions need to rise significantly to maintain "
            "your lifestyle after retiring."
        ),
        impact=f"Secure a {_format_rupees(monthly * years * 12)} corpus",
        monthly_amount=monthly,
        annual_impact=monthly * 12,
        navigate_to="Goals",
        navigation_params={"goal_id": "retirement_fund"},
    )


def generate_recommendations(
    profile: UserProfile,
    spending: SpendingSnapshot,
    thresholds: ThresholdSet,
    portfolio: PortfolioSummary,
    inflation: Optional[InflationResult] = None,
    existing_ids: Iterable[str] = (),
    retirement_age: int = DEFAULT_RETIREMENT_AGE,
) -> List[Recommendation]:
    """
    Run every recommendation rule once, in a fixed order.

    Budget control runs per governed discretionary category (entertainment,
    shopping, miscellaneous), then savings acceleration, wealth building,
    diversification, investment scaling and retirement acceleration. A rule whose
    id is already in `existing_ids` (goal or recommendation ids) stays silent.
    """
    known_ids = set(existing_ids)
    rules: List[Callable[[], Optional[Recommendation]]] = [
        lambda category=category: budget_control(category, profile, spending, thresholds, inflation)
        for category in BUDGET_CONTROL_CATEGORIES
    ]
    rules.extend(
        [
            lambda: savings_acceleration(profile, spending, thresholds),
            lambda: wealth_building(profile, known_ids),
            lambda: diversification(profile, portfolio),
            lambda: scale_investment(profile, portfolio),
            lambda: retirement_acceleration(profile, retirement_age),
        ]
    )

    recommendations: List[Recommendation] = []
    for rule in rules:
        recommendation = rule()
        if recommendation is None or recommendation.id in known_ids:
            continue
        known_ids.add(recommendation.id)
        recommendations.append(recommendation)

    logger.debug({"event": "recommendations_generated", "count": len(recommendations)})
    return recommendations
