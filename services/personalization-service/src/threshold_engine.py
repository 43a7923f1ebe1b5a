from __future__ import annotations

from typing import Dict, Tuple

from finance_model import (
    CategoryThreshold,
    InvestmentThresholds,
    SavingsBand,
    ThresholdSet,
    UserProfile,
    validate_profile,
)
from finance_tables import (
    AGE_MULTIPLIERS,
    BASE_SAVINGS_RATE,
    CATEGORY_BASE_THRESHOLDS,
    DEFAULT_MARKET_RETURN,
    INCOME_MULTIPLIERS,
    RISK_RETURN_MULTIPLIERS,
    RISK_SAVINGS_MULTIPLIERS,
    SAVINGS_CEILING,
    SAVINGS_FLOOR,
    TIER_THRESHOLD_MULTIPLIERS,
)
from location_adjuster import get_location_adjustment

DEFAULT_RETIREMENT_AGE = 65


def _step(value: float, brackets: Tuple[Tuple[float, float], ...]) -> float:
    for upper_bound, multiplier in brackets:
        if value < upper_bound:
            return multiplier
    return brackets[-1][1]


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(value, maximum))


def age_multiplier(age: int) -> float:
    return _step(age, AGE_MULTIPLIERS)


def income_multiplier(monthly_income: float) -> float:
    return _step(monthly_income, INCOME_MULTIPLIERS)


def location_multiplier(location: str | None) -> float:
    return TIER_THRESHOLD_MULTIPLIERS[get_location_adjustment(location).tier]


def risk_multiplier(risk_tier: str) -> float:
    return RISK_SAVINGS_MULTIPLIERS.get(risk_tier, 1.0)


def age_bracket(age: int) -> str:
    if age < 30:
        return "young professional"
    if age < 45:
        return "mid-career professional"
    return "senior professional"


def income_bracket(monthly_income: float) -> str:
    if monthly_income < 100_000:
        return "moderate income"
    if monthly_income < 300_000:
        return "high income"
    return "very high income"


def category_thresholds(profile: UserProfile) -> Dict[str, CategoryThreshold]:
    """
    Warning/target income fractions for each governed spending category.

    warning = base fraction x age x income x city tier multipliers; the target is
    the warning scaled by the category's reduction ratio.
    """
    age_factor = age_multiplier(profile.age)
    income_factor = income_multiplier(profile.monthly_income)
    location_factor = location_multiplier(profile.location)
    tier = get_location_adjustment(profile.location).tier
    reasoning_tail = (
        f"for {age_bracket(profile.age)}s with {income_bracket(profile.monthly_income)} "
        f"in a {tier} city ({profile.location or 'location not provided'})"
    )

    thresholds: Dict[str, CategoryThreshold] = {}
    for category, (base_fraction, target_ratio) in CATEGORY_BASE_THRESHOLDS.items():
        warning = base_fraction * age_factor * income_factor * location_factor
        thresholds[category] = CategoryThreshold(
            warning=round(warning, 4),
            target=round(warning * target_ratio, 4),
            reasoning=(
                f"{category.capitalize()} limit of {warning:.1%} of income recommended {reasoning_tail}; "
                f"factors: age x{age_factor:.2f}, income x{income_factor:.2f}, location x{location_factor:.2f}"
            ),
        )
    return thresholds


def savings_band(profile: UserProfile, retirement_age: int = DEFAULT_RETIREMENT_AGE) -> SavingsBand:
    """
    Savings-rate band as income fractions, always minimum <= target <= optimal.

    Higher risk tolerance lowers the mandated savings rate because more capital is
    expected to flow into investments.
    """
    raw = BASE_SAVINGS_RATE * risk_multiplier(profile.risk_tier) * age_multiplier(profile.age)
    target = _clamp(raw, SAVINGS_FLOOR, SAVINGS_CEILING)
    minimum = _clamp(raw * 0.75, SAVINGS_FLOOR, target)
    optimal = _clamp(raw * 1.5, target, SAVINGS_CEILING)
    years_to_retirement = max(0, retirement_age - profile.age)

    return SavingsBand(
        minimum=round(minimum, 4),
        target=round(target, 4),
        optimal=round(optimal, 4),
        reasoning=(
            f"With {years_to_retirement} years to retirement ({age_bracket(profile.age)}) and a "
            f"{profile.risk_tier.replace('_', ' ')} risk profile, saving {target:.0%} of income balances "
            "current needs with future security"
        ),
    )


def investment_thresholds(profile: UserProfile, market_return: float = DEFAULT_MARKET_RETURN) -> InvestmentThresholds:
    """Annual return bands (percent) for judging portfolio performance."""
    if profile.age < 35:
        age_adjustment = 1.1
    elif profile.age < 50:
        age_adjustment = 1.0
    else:
        age_adjustment = 0.9
    good = market_return * age_adjustment * RISK_RETURN_MULTIPLIERS.get(profile.risk_tier, 1.0)

    return InvestmentThresholds(
        excellent=float(round(good * 1.2)),
        good=float(round(good)),
        average=float(round(good * 0.8)),
        poor=float(round(good * 0.6)),
        reasoning=(
            f"Based on {market_return:g}% average market returns, your age ({profile.age}) "
            f"and {profile.risk_tier.replace('_', ' ')} risk tolerance"
        ),
    )


def compute_thresholds(profile: UserProfile, retirement_age: int = DEFAULT_RETIREMENT_AGE) -> ThresholdSet:
    """
    Derive the full personalized threshold set for a profile.

    Raises:
        FinanceInputError: when age or income fall outside the supported bounds.
    """
    validate_profile(profile)
    return ThresholdSet(
        categories=category_thresholds(profile),
        savings=savings_band(profile, retirement_age),
        investment=investment_thresholds(profile),
    )
