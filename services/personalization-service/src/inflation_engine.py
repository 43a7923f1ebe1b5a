from __future__ import annotations

from datetime import date
from typing import Dict

from finance_model import (
    SEVERITY_LABELS,
    CategoryContribution,
    InflationResult,
    SpendingSnapshot,
    validate_spending,
)
from finance_tables import (
    BEST_IMPACT,
    CATEGORY_INFLATION_RATES,
    FALLBACK_RATE_CATEGORY,
    GOVERNMENT_INFLATION,
    IMPACT_CUTOFFS,
    INFLATION_TIER_MULTIPLIERS,
    RATE_CATEGORY_ALIASES,
    SEASONAL_FACTORS,
    SEVERITY_CUTOFFS,
    STANDARD_WEIGHTS,
    TREND_FACTOR,
    TREND_HORIZON_MONTHS,
)
from location_adjuster import classify_inflation_tier

DEFAULT_HORIZON_MONTHS = 12


def compute_personal_weights(spending: SpendingSnapshot) -> Dict[str, float]:
    """
    Derive category weights from the user's spending, summing to 1.0.

    Args:
        spending: Validated snapshot with non-negative amounts.
    Returns:
        Personal share for every category with nonzero spend; standard-basket
        categories missing from the snapshot share whatever mass is left over in
        proportion to their standard weights. Zero total spending returns the
        standard weights unchanged.
    """
    total = spending.total
    if total <= 0:
        return dict(STANDARD_WEIGHTS)

    weights = {
        category: amount / total
        for category, amount in spending.amounts.items()
        if amount > 0
    }

    remaining = max(0.0, 1.0 - sum(weights.values()))
    for category, standard_weight in STANDARD_WEIGHTS.items():
        if category not in weights:
            weights[category] = standard_weight * remaining

    return weights


def base_rate_for(category: str) -> tuple[str, float]:
    """Resolve the rate-table key and base rate for any spending category."""
    key = category.lower()
    if key not in CATEGORY_INFLATION_RATES:
        key = RATE_CATEGORY_ALIASES.get(key, FALLBACK_RATE_CATEGORY)
    return key, CATEGORY_INFLATION_RATES[key]


def location_adjusted_rates(location: str | None, categories=None) -> Dict[str, float]:
    """
    Scale base category rates by the location tier's per-category multipliers.

    `categories` lets callers request rates for spending categories outside the
    base table (for example "shopping"); by default the base table is used.
    """
    multipliers = INFLATION_TIER_MULTIPLIERS[classify_inflation_tier(location)]
    rates: Dict[str, float] = {}
    for category in categories if categories is not None else CATEGORY_INFLATION_RATES:
        key, base_rate = base_rate_for(category)
        rates[category] = base_rate * multipliers.get(key, 1.0)
    return rates


def seasonal_multiplier(month: int) -> float:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12 (received {month})")
    return SEASONAL_FACTORS[month - 1]


def apply_time_adjustment(rate: float, as_of: date, horizon_months: int) -> float:
    trend = TREND_FACTOR if horizon_months > TREND_HORIZON_MONTHS else 1.0
    return rate * seasonal_multiplier(as_of.month) * trend


def default_rate_for_location(location: str | None) -> float:
    """Standard-basket inflation for the location, with no personal weighting or seasonality."""
    rates = location_adjusted_rates(location)
    weighted = sum(weight * rates[category] for category, weight in STANDARD_WEIGHTS.items())
    return round(weighted, 1)


def calculate_personal_inflation(
    spending: SpendingSnapshot,
    as_of: date,
    location: str | None = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> float:
    """
    Compute the user's personal inflation rate in percent, rounded to one decimal.

    An empty or all-zero snapshot falls back to `default_rate_for_location`.

    Raises:
        FinanceInputError: when any category amount is negative or non-numeric.
    """
    validate_spending(spending)
    if spending.total <= 0:
        return default_rate_for_location(location)

    weights = compute_personal_weights(spending)
    rates = location_adjusted_rates(location, weights.keys())
    raw = sum(weight * rates[category] for category, weight in weights.items())
    return round(apply_time_adjustment(raw, as_of, horizon_months), 1)


def severity_level(personal_rate: float) -> int:
    for lower_bound, level in SEVERITY_CUTOFFS:
        if personal_rate > lower_bound:
            return level
    return 0


def impact_label(difference: float) -> str:
    for lower_bound, label in IMPACT_CUTOFFS:
        if difference > lower_bound:
            return label
    return BEST_IMPACT


def category_breakdown(spending: SpendingSnapshot, location: str | None = None) -> Dict[str, CategoryContribution]:
    weights = compute_personal_weights(spending)
    rates = location_adjusted_rates(location, weights.keys())
    return {
        category: CategoryContribution(
            weight_pct=round(weight * 100, 1),
            rate=round(rates[category], 2),
            contribution=round(weight * rates[category], 1),
        )
        for category, weight in weights.items()
    }


def compare_inflation(
    spending: SpendingSnapshot,
    as_of: date,
    location: str | None = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> InflationResult:
    """
    Build the full comparison of personal inflation against the official baselines.

    Args:
        spending: Categorized monthly spending.
        as_of: Calculation date; only its month is used, for the seasonal factor.
        location: Free-text location, optional.
        horizon_months: Outlook horizon; beyond six months a trend factor applies.
    Returns:
        InflationResult whose `difference` is measured against the location-adjusted
        baseline and `national_difference` against the government rate.
    """
    personal = calculate_personal_inflation(spending, as_of, location, horizon_months)
    location_baseline = default_rate_for_location(location)
    difference = round(personal - location_baseline, 1)
    level = severity_level(personal)

    return InflationResult(
        personal_rate=personal,
        government_baseline=GOVERNMENT_INFLATION,
        location_adjusted_baseline=location_baseline,
        difference=difference,
        national_difference=round(personal - GOVERNMENT_INFLATION, 1),
        is_higher=difference > 0,
        severity=SEVERITY_LABELS[level],
        severity_level=level,
        impact=impact_label(difference),
        breakdown=category_breakdown(spending, location),
    )


def future_value(amount: float, years: float, inflation_rate: float) -> float:
    """Amount needed after `years` to match today's purchasing power."""
    return float(round(amount * (1 + inflation_rate / 100) ** years))


def inflation_beating_return(inflation_rate: float, tax_rate: float = 0.3) -> float:
    """Pre-tax return needed so the post-tax return keeps pace with inflation."""
    if not 0 <= tax_rate < 1:
        raise ValueError(f"tax_rate must be in [0, 1) (received {tax_rate})")
    return round(inflation_rate / (1 - tax_rate), 1)
