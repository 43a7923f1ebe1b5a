"""
Links goals to spending: which category cuts would finish a goal sooner, and which
spending patterns put a goal at risk.

Insights carry navigation targets as plain data (`navigate_to` plus params) so
presentation layers decide how to route the user.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, List

from finance_model import (
    PRIORITY_LEVELS,
    FinanceInputError,
    Goal,
    GoalImpact,
    GoalInsight,
    GoalRisk,
    NavigationAction,
    Recommendation,
    SpendingOptimization,
    SpendingSnapshot,
    UserProfile,
    round_currency,
)
from finance_tables import (
    DISCRETIONARY_CATEGORIES,
    DISCRETIONARY_RATIO,
    EXTENDED_TIMELINE_MONTHS,
    LOW_SAVINGS_RATE,
    LOWER_INCOME_CUTOFF,
    LOWER_INCOME_ENTERTAINMENT_REDUCTION,
    OPTIMIZATION_RULES,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPTIMIZATIONS = 3
DEFAULT_MIN_SAVINGS = 1000.0

INSIGHTS_SCREEN = "Insights"
METRICS_SCREEN = "MetricDetail"


def months_to_goal(remaining: float, monthly_contribution: float) -> int:
    if remaining <= 0:
        return 0
    if monthly_contribution <= 0:
        raise FinanceInputError(f"monthly_contribution must be positive (received {monthly_contribution})")
    return math.ceil(remaining / monthly_contribution)


def goal_impact(goal: Goal, additional_monthly_savings: float) -> GoalImpact:
    """Timeline change from adding `additional_monthly_savings` to the goal's contribution."""
    remaining = goal.remaining_amount
    current_timeline = months_to_goal(remaining, goal.monthly_contribution)
    new_timeline = months_to_goal(remaining, goal.monthly_contribution + additional_monthly_savings)
    reduction = current_timeline - new_timeline
    improvement = round(reduction / current_timeline * 100, 1) if current_timeline else 0.0
    return GoalImpact(time_reduction=reduction, new_timeline=new_timeline, percentage_improvement=improvement)


def max_reduction(category: str, monthly_income: float) -> float:
    if category == "entertainment" and monthly_income < LOWER_INCOME_CUTOFF:
        return LOWER_INCOME_ENTERTAINMENT_REDUCTION
    return OPTIMIZATION_RULES[category][0]


def spending_optimizations(
    goal: Goal,
    spending: SpendingSnapshot,
    monthly_income: float,
    max_optimizations: int = DEFAULT_MAX_OPTIMIZATIONS,
    min_savings: float = DEFAULT_MIN_SAVINGS,
) -> List[SpendingOptimization]:
    """
    Category cuts worth suggesting for a goal, largest savings first.

    Only categories in the optimization table with savings of at least
    `min_savings` a month qualify; at most `max_optimizations` are returned.
    """
    optimizations: List[SpendingOptimization] = []
    for category, amount in spending.amounts.items():
        if category not in OPTIMIZATION_RULES or amount <= 0:
            continue
        potential = amount * max_reduction(category, monthly_income)
        if potential < min_savings:
            continue
        _, priority, message = OPTIMIZATION_RULES[category]
        optimizations.append(
            SpendingOptimization(
                category=category,
                current_spending=float(amount),
                monthly_savings=round_currency(potential),
                priority=priority,
                message=message,
                impact_on_goal=goal_impact(goal, potential),
            )
        )

    optimizations.sort(key=lambda optimization: optimization.monthly_savings, reverse=True)
    return optimizations[:max_optimizations]


def goal_risks(goal: Goal, spending: SpendingSnapshot, savings_rate: float) -> List[GoalRisk]:
    risks: List[GoalRisk] = []

    if savings_rate < LOW_SAVINGS_RATE:
        risks.append(
            GoalRisk(
                type="low_savings_rate",
                severity="high",
                message=f"Your {savings_rate:.1%} savings rate may delay goal achievement",
                recommendation="Increase income or reduce expenses to improve savings rate",
            )
        )

    discretionary = sum(spending.amount(category) for category in DISCRETIONARY_CATEGORIES)
    if discretionary > goal.monthly_contribution * DISCRETIONARY_RATIO:
        risks.append(
            GoalRisk(
                type="high_discretionary_spending",
                severity="medium",
                message=f"Discretionary spending (₹{discretionary:,.0f}) exceeds goal contribution",
                recommendation="Consider redirecting some discretionary spending to goal savings",
            )
        )

    timeline = months_to_goal(goal.remaining_amount, goal.monthly_contribution)
    if timeline > EXTENDED_TIMELINE_MONTHS:
        risks.append(
            GoalRisk(
                type="extended_timeline",
                severity="medium",
                message=f"Goal timeline of {timeline} months may be too long",
                recommendation="Consider increasing monthly contribution or adjusting goal amount",
            )
        )

    return risks


def goal_insights(
    goal: Goal,
    spending: SpendingSnapshot,
    profile: UserProfile,
    max_optimizations: int = DEFAULT_MAX_OPTIMIZATIONS,
    min_savings: float = DEFAULT_MIN_SAVINGS,
) -> List[GoalInsight]:
    remaining = goal.remaining_amount
    if remaining <= 0:
        return []

    income = profile.monthly_income
    savings_rate = (income - spending.total) / income
    current_timeline = months_to_goal(remaining, goal.monthly_contribution)
    insights: List[GoalInsight] = []

    optimizations = spending_optimizations(goal, spending, income, max_optimizations, min_savings)
    if optimizations:
        potential = sum(optimization.monthly_savings for optimization in optimizations)
        insights.append(
            GoalInsight(
                goal_id=goal.id,
                goal_title=goal.title,
                type="spending_optimization",
                priority=goal.priority,
                navigate_to=INSIGHTS_SCREEN,
                navigation_params={"highlight_category": optimizations[0].category, "goal_context": goal.id},
                current_timeline=current_timeline,
                accelerated_timeline=months_to_goal(remaining, goal.monthly_contribution + potential),
                potential_savings=potential,
                optimizations=optimizations,
            )
        )

    risks = goal_risks(goal, spending, savings_rate)
    if risks:
        insights.append(
            GoalInsight(
                goal_id=goal.id,
                goal_title=goal.title,
                type="goal_risk",
                priority="high",
                navigate_to=INSIGHTS_SCREEN,
                navigation_params={"focus_area": "spending_analysis", "goal_context": goal.id},
                current_timeline=current_timeline,
                risk_factors=risks,
            )
        )

    return insights


def attach_insights(
    goals: Iterable[Goal],
    spending: SpendingSnapshot,
    profile: UserProfile,
    max_optimizations: int = DEFAULT_MAX_OPTIMIZATIONS,
    min_savings: float = DEFAULT_MIN_SAVINGS,
) -> List[Goal]:
    """Return copies of the goals with freshly computed insights; inputs are left untouched."""
    linked = [
        replace(goal, insights=goal_insights(goal, spending, profile, max_optimizations, min_savings))
        for goal in goals
    ]
    logger.debug(
        {
            "event": "goal_insights_attached",
            "goal_count": len(linked),
            "insight_count": sum(len(goal.insights) for goal in linked),
        }
    )
    return linked


def navigation_actions(goal: Goal) -> List[NavigationAction]:
    actions = [
        NavigationAction(
            id="view_spending_impact",
            title="Analyze Spending Impact",
            description=f"See how your spending affects {goal.title}",
            navigate_to=INSIGHTS_SCREEN,
            priority="high",
            params={"highlight_goal": goal.id, "focus_area": "spending_analysis"},
        ),
        NavigationAction(
            id="view_goal_metrics",
            title="Goal Performance Analysis",
            description=f"Deep dive into {goal.title} metrics and projections",
            navigate_to=METRICS_SCREEN,
            priority="medium",
            params={"card_id": "goal_performance", "goal_id": goal.id},
        ),
    ]

    optimization = next((insight for insight in goal.insights if insight.type == "spending_optimization"), None)
    if optimization is not None:
        months_saved = (optimization.current_timeline or 0) - (optimization.accelerated_timeline or 0)
        actions.append(
            NavigationAction(
                id="optimize_spending",
                title="Optimize Spending for Goal",
                description=f"Save ₹{optimization.potential_savings:,.0f}/month to achieve goal faster",
                navigate_to=INSIGHTS_SCREEN,
                priority="high",
                params={
                    "highlight_category": optimization.optimizations[0].category,
                    "goal_context": goal.id,
                    "show_optimization": True,
                },
                impact=f"{months_saved} months faster",
            )
        )

    return sorted(actions, key=lambda action: PRIORITY_LEVELS[action.priority], reverse=True)


def _insight_recommendation(goal: Goal, insight: GoalInsight) -> Recommendation:
    if insight.type == "spending_optimization":
        months_saved = (insight.current_timeline or 0) - (insight.accelerated_timeline or 0)
        categories = ", ".join(optimization.category for optimization in insight.optimizations)
        return Recommendation(
            id=f"accelerate_{goal.id}",
            title=f"Accelerate {goal.title}",
            category=goal.category,
            priority=insight.priority,
            source_context="goal_spending_optimization",
            rationale=(
                f"Trimming {categories} could add ₹{insight.potential_savings:,.0f}/month to {goal.title}, "
                f"finishing in {insight.accelerated_timeline} months instead of {insight.current_timeline}."
            ),
            impact=f"{months_saved} months faster",
            monthly_amount=insight.potential_savings,
            annual_impact=insight.potential_savings * 12,
            navigate_to=insight.navigate_to,
            navigation_params=dict(insight.navigation_params),
        )

    return Recommendation(
        id=f"goal_risk_{goal.id}",
        title=f"{goal.title} At Risk",
        category=goal.category,
        priority=insight.priority,
        source_context="goal_risk",
        rationale=". ".join(risk.message for risk in insight.risk_factors),
        impact=insight.risk_factors[0].recommendation,
        navigate_to=insight.navigate_to,
        navigation_params=dict(insight.navigation_params),
    )


def build_cross_link_recommendations(goals: Iterable[Goal], existing_ids: Iterable[str] = ()) -> List[Recommendation]:
    """Flatten goal insights into recommendations, skipping ids already present."""
    known_ids = set(existing_ids)
    recommendations: List[Recommendation] = []
    for goal in goals:
        for insight in goal.insights:
            recommendation = _insight_recommendation(goal, insight)
            if recommendation.id in known_ids:
                continue
            known_ids.add(recommendation.id)
            recommendations.append(recommendation)
    return recommendations
