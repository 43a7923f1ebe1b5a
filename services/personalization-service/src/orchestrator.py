"""
Single entry point combining the inflation, threshold, goal, recommendation and
cross-link engines into one personalized view for a user.

Every dependency on "now" arrives through `as_of`, so identical inputs always
produce identical output.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from cross_link_analyzer import attach_insights, build_cross_link_recommendations
from finance_model import (
    Goal,
    PersonalizedFinance,
    PortfolioSummary,
    SpendingSnapshot,
    UserProfile,
    validate_profile,
    validate_spending,
)
from goal_engine import generate_goals
from inflation_engine import compare_inflation
from location_adjuster import location_insights
from recommendation_engine import generate_recommendations
from shared.engine_settings import EngineSettings
from shared.observability.privacy import hash_payload
from threshold_engine import compute_thresholds

logger = logging.getLogger(__name__)


def compute_personalized_finance(
    profile: UserProfile,
    spending: SpendingSnapshot,
    portfolio: PortfolioSummary,
    existing_goals: Iterable[Goal],
    as_of: date,
    settings: Optional[EngineSettings] = None,
) -> PersonalizedFinance:
    """
    Compute inflation, thresholds, goals and recommendations for one user.

    Args:
        profile: User profile; validated before any engine runs.
        spending: Monthly spending by category; validated before any engine runs.
        portfolio: Current balances and portfolio metrics.
        existing_goals: Goals the user already holds. They are kept first in the
            output and their ids are never regenerated.
        as_of: Calculation date for seasonal factors and target dates.
        settings: Engine tunables; defaults apply when omitted.
    Returns:
        PersonalizedFinance with existing plus new goals (all carrying insights),
        rule recommendations followed by goal cross-link recommendations, and
        location insights.
    Raises:
        FinanceInputError: when the profile or spending violates preconditions.
    """
    settings = settings or EngineSettings()
    validate_profile(profile)
    validate_spending(spending)

    held_goals: List[Goal] = list(existing_goals)
    inflation = compare_inflation(spending, as_of, profile.location, settings.inflation_horizon_months)
    thresholds = compute_thresholds(profile, retirement_age=settings.retirement_age)
    new_goals = generate_goals(
        profile,
        portfolio,
        existing_goals=held_goals,
        as_of=as_of,
        retirement_age=settings.retirement_age,
    )
    goals = attach_insights(
        held_goals + new_goals,
        spending,
        profile,
        max_optimizations=settings.max_optimizations_per_goal,
        min_savings=settings.min_optimization_savings,
    )

    goal_ids = [goal.id for goal in goals]
    recommendations = generate_recommendations(
        profile,
        spending,
        thresholds,
        portfolio,
        inflation=inflation,
        existing_ids=goal_ids,
        retirement_age=settings.retirement_age,
    )
    recommendations.extend(
        build_cross_link_recommendations(goals, existing_ids=goal_ids + [rec.id for rec in recommendations])
    )

    logger.info(
        {
            "event": "personalization_computed",
            "profile_hash": hash_payload(profile),
            "spending_hash": hash_payload(dict(spending.amounts)),
            "as_of": as_of.isoformat(),
            "existing_goal_count": len(held_goals),
            "new_goal_count": len(new_goals),
            "recommendation_count": len(recommendations),
            "personal_inflation": inflation.personal_rate,
        }
    )

    return PersonalizedFinance(
        inflation=inflation,
        thresholds=thresholds,
        goals=goals,
        recommendations=recommendations,
        location=location_insights(profile.location, profile.monthly_income),
    )
