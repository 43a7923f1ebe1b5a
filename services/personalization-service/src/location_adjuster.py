from __future__ import annotations

from dataclasses import replace
from typing import Dict, List

from finance_model import CityTier, Goal, LocationAdjustment, LocationInsights, round_currency
from finance_tables import (
    CITY_MULTIPLIERS,
    COST_LEVELS,
    DEFAULT_CITY,
    DEFAULT_CITY_MULTIPLIERS,
    DEFAULT_INFLATION_TIER,
    INFLATION_TIER_CITIES,
    LOWEST_COST_LEVEL,
    TIER_1_5_CITIES,
    TIER_1_CITIES,
)

HOUSING_GOAL_CATEGORIES = frozenset({"housing", "property"})
SAFETY_GOAL_CATEGORIES = frozenset({"safety", "emergency"})


def classify_city(location: str | None) -> str:
    """
    Return the first known city found in the location string, or "default".

    Matching is a lower-case substring check, so "Mumbai, Maharashtra" resolves to
    "mumbai". Unknown or empty locations never raise.
    """
    if not location:
        return DEFAULT_CITY

    normalized = location.lower()
    for city in CITY_MULTIPLIERS:
        if city in normalized:
            return city
    return DEFAULT_CITY


def city_tier(city: str) -> CityTier:
    if city in TIER_1_CITIES:
        return "Tier 1"
    if city in TIER_1_5_CITIES:
        return "Tier 1.5"
    return "Tier 2"


def classify_inflation_tier(location: str | None) -> str:
    """Map a location onto the tier keys used by the per-category inflation multipliers."""
    if not location:
        return DEFAULT_INFLATION_TIER

    normalized = location.lower()
    for tier, cities in INFLATION_TIER_CITIES.items():
        if any(city in normalized for city in cities):
            return tier
    return DEFAULT_INFLATION_TIER


def get_location_adjustment(location: str | None) -> LocationAdjustment:
    city = classify_city(location)
    multipliers = CITY_MULTIPLIERS.get(city, DEFAULT_CITY_MULTIPLIERS)
    return LocationAdjustment(
        city=city,
        tier=city_tier(city),
        property=multipliers["property"],
        living=multipliers["living"],
        general=multipliers["general"],
    )


def multiplier_for_goal_category(adjustment: LocationAdjustment, goal_category: str) -> tuple[float, str]:
    """Pick the multiplier (and the cost label used in notes) for a goal category."""
    normalized = (goal_category or "").strip().lower()
    if normalized in HOUSING_GOAL_CATEGORIES:
        return adjustment.property, "property prices"
    if normalized in SAFETY_GOAL_CATEGORIES:
        return adjustment.living, "living costs"
    return adjustment.general, "costs"


def adjust_amount(amount: float, goal_category: str, location: str | None) -> float:
    """
    Scale an amount by the location multiplier that matches the goal category.

    Housing goals use the property multiplier, safety/emergency goals the living
    multiplier and every other category the general multiplier.
    """
    multiplier, _ = multiplier_for_goal_category(get_location_adjustment(location), goal_category)
    return round_currency(amount * multiplier)


def adjust_goal(goal: Goal, location: str | None) -> Goal:
    """
    Return a copy of the goal with target and contribution scaled for the location.

    The description gains a note naming the adjustment. A current amount that now
    exceeds the scaled target is clamped to it.
    """
    adjustment = get_location_adjustment(location)
    multiplier, cost_label = multiplier_for_goal_category(adjustment, goal.category)

    target_amount = round_currency(goal.target_amount * multiplier)
    monthly_contribution = max(1.0, round_currency(goal.monthly_contribution * multiplier))
    current_amount = min(goal.current_amount, target_amount)
    place = location.strip() if location and location.strip() else "your area"

    return replace(
        goal,
        target_amount=target_amount,
        current_amount=current_amount,
        monthly_contribution=monthly_contribution,
        description=f"{goal.description} (Adjusted for {place} {cost_label}, x{multiplier:.2f})",
    )


def adjust_goals(goals: List[Goal], location: str | None) -> List[Goal]:
    return [adjust_goal(goal, location) for goal in goals]


def cost_level(adjustment: LocationAdjustment) -> str:
    average = (adjustment.property + adjustment.living + adjustment.general) / 3
    for lower_bound, label in COST_LEVELS:
        if average > lower_bound:
            return label
    return LOWEST_COST_LEVEL


def location_insights(location: str | None, monthly_income: float) -> LocationInsights:
    """
    Summarize the location's cost profile with advisory notes for the user.
    """
    adjustment = get_location_adjustment(location)
    place = location or "your city"
    notes: List[Dict[str, str]] = []

    if adjustment.property > 1.5:
        notes.append(
            {
                "type": "property",
                "message": f"{place} has high property costs. Consider nearby areas or a longer down payment timeline.",
                "action": "Explore suburbs or extend timeline by 6-12 months",
            }
        )

    if adjustment.living > 1.3:
        notes.append(
            {
                "type": "emergency",
                "message": f"Higher living costs in {place} require a larger emergency fund.",
                "action": "Increase emergency fund target by 20-30%",
            }
        )

    if monthly_income < 100_000 and adjustment.general > 1.2:
        notes.append(
            {
                "type": "income",
                "message": f"Consider skill development to increase income in {place}'s competitive market.",
                "action": "Focus on professional development goals",
            }
        )

    return LocationInsights(
        city=adjustment.city,
        tier=adjustment.tier,
        cost_level=cost_level(adjustment),
        adjustment=adjustment,
        notes=notes,
    )
