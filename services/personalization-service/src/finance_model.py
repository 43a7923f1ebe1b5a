from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from numbers import Real
from typing import Any, Dict, List, Literal, Mapping

# Risk tolerance tiers, ordered from most to least cautious
RiskTier = Literal[
    "conservative",
    "moderate",
    "moderate_aggressive",
    "aggressive",
    "sophisticated_aggressive",
]
RISK_TIERS: tuple[str, ...] = (
    "conservative",
    "moderate",
    "moderate_aggressive",
    "aggressive",
    "sophisticated_aggressive",
)

Priority = Literal["low", "medium", "high", "urgent"]
PRIORITY_LEVELS = {"low": 0, "medium": 1, "high": 2, "urgent": 3}

# Inflation severity buckets, index == severity level
SEVERITY_LABELS: tuple[str, ...] = (
    "Very Low",
    "Low",
    "Moderate",
    "High",
    "Very High",
    "Extremely High",
)

CityTier = Literal["Tier 1", "Tier 1.5", "Tier 2"]

MIN_AGE = 18
MAX_AGE = 65


class FinanceInputError(ValueError):
    """Raised when a profile or spending snapshot violates the engine's preconditions."""


def normalize_category(category: str) -> str:
    return str(category).strip().lower()


def check_spending_amount(category: str, amount: Any) -> None:
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise FinanceInputError(f"Spending for '{category}' must be numeric (received {amount!r})")
    if not math.isfinite(amount) or amount < 0:
        raise FinanceInputError(f"Spending for '{category}' must not be negative (received {amount})")


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    age: int
    monthly_income: float
    location: str
    risk_tier: RiskTier
    profession: str = ""


@dataclass(frozen=True)
class SpendingSnapshot:
    """
    Monthly spending by category; absent categories count as zero.

    Category names are stored lower-cased and trimmed, and amounts for names that
    collapse to the same key are summed.
    """

    amounts: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        merged: Dict[str, float] = {}
        for category, amount in self.amounts.items():
            key = normalize_category(category)
            if key not in merged:
                merged[key] = amount
                continue
            check_spending_amount(key, merged[key])
            check_spending_amount(key, amount)
            merged[key] = merged[key] + amount
        object.__setattr__(self, "amounts", merged)

    def amount(self, category: str) -> float:
        return float(self.amounts.get(normalize_category(category), 0.0))

    @property
    def total(self) -> float:
        return float(sum(self.amounts.values()))


@dataclass(frozen=True)
class PortfolioSummary:
    bank_balance: float = 0.0
    mutual_funds: float = 0.0
    stocks: float = 0.0
    gold: float = 0.0
    nps: float = 0.0
    diversification_score: float = 1.0
    average_returns: float = 0.0
    monthly_investment: float = 0.0

    @property
    def equity_and_funds(self) -> float:
        return self.mutual_funds + self.stocks

    @property
    def total_value(self) -> float:
        return self.bank_balance + self.mutual_funds + self.stocks + self.gold + self.nps


@dataclass(frozen=True)
class LocationAdjustment:
    city: str
    tier: CityTier
    property: float
    living: float
    general: float


@dataclass
class LocationInsights:
    city: str
    tier: CityTier
    cost_level: str
    adjustment: LocationAdjustment
    notes: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class CategoryContribution:
    weight_pct: float
    rate: float
    contribution: float


@dataclass
class InflationResult:
    personal_rate: float
    government_baseline: float
    location_adjusted_baseline: float
    difference: float
    national_difference: float
    is_higher: bool
    severity: str
    severity_level: int
    impact: str
    breakdown: Dict[str, CategoryContribution] = field(default_factory=dict)


@dataclass
class CategoryThreshold:
    warning: float
    target: float
    reasoning: str


@dataclass
class SavingsBand:
    minimum: float
    target: float
    optimal: float
    reasoning: str


@dataclass
class InvestmentThresholds:
    excellent: float
    good: float
    average: float
    poor: float
    reasoning: str


@dataclass
class ThresholdSet:
    categories: Dict[str, CategoryThreshold]
    savings: SavingsBand
    investment: InvestmentThresholds


@dataclass
class GoalImpact:
    time_reduction: int
    new_timeline: int
    percentage_improvement: float


@dataclass
class SpendingOptimization:
    category: str
    current_spending: float
    monthly_savings: float
    priority: Priority
    message: str
    impact_on_goal: GoalImpact


@dataclass
class GoalRisk:
    type: str
    severity: Literal["medium", "high"]
    message: str
    recommendation: str


@dataclass
class GoalInsight:
    goal_id: str
    goal_title: str
    type: Literal["spending_optimization", "goal_risk"]
    priority: Priority
    navigate_to: str
    navigation_params: Dict[str, Any] = field(default_factory=dict)
    current_timeline: int | None = None
    accelerated_timeline: int | None = None
    potential_savings: float = 0.0
    optimizations: List[SpendingOptimization] = field(default_factory=list)
    risk_factors: List[GoalRisk] = field(default_factory=list)


@dataclass
class NavigationAction:
    id: str
    title: str
    description: str
    navigate_to: str
    priority: Priority
    params: Dict[str, Any] = field(default_factory=dict)
    impact: str | None = None


@dataclass
class Goal:
    id: str
    title: str
    category: str
    target_amount: float
    current_amount: float
    monthly_contribution: float
    target_date: date
    priority: Priority
    icon: str
    description: str
    reasoning: str
    base_target_amount: float
    insights: List[GoalInsight] = field(default_factory=list)

    @property
    def remaining_amount(self) -> float:
        return max(0.0, self.target_amount - self.current_amount)


@dataclass
class Recommendation:
    id: str
    title: str
    category: str
    priority: Priority
    source_context: str
    rationale: str
    impact: str
    monthly_amount: float = 0.0
    annual_impact: float = 0.0
    navigate_to: str | None = None
    navigation_params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PersonalizedFinance:
    inflation: InflationResult
    thresholds: ThresholdSet
    goals: List[Goal]
    recommendations: List[Recommendation]
    location: LocationInsights


def validate_profile(profile: UserProfile) -> None:
    """
    Enforce the bounds the goal and threshold math depends on.

    Raises:
        FinanceInputError: age outside 18-65, non-positive income or an unknown risk tier.
    """

    if isinstance(profile.age, bool) or not isinstance(profile.age, int):
        raise FinanceInputError(f"age must be an integer (received {profile.age!r})")
    if not MIN_AGE <= profile.age <= MAX_AGE:
        raise FinanceInputError(f"age must be between {MIN_AGE} and {MAX_AGE} (received {profile.age})")
    if (
        isinstance(profile.monthly_income, bool)
        or not isinstance(profile.monthly_income, Real)
        or not math.isfinite(profile.monthly_income)
        or profile.monthly_income <= 0
    ):
        raise FinanceInputError(f"monthly_income must be positive (received {profile.monthly_income!r})")
    if profile.risk_tier not in RISK_TIERS:
        raise FinanceInputError(f"Unknown risk tier '{profile.risk_tier}'")


def validate_spending(spending: SpendingSnapshot) -> None:
    """
    Reject negative or non-numeric category amounts instead of clamping them.
    """

    for category, amount in spending.amounts.items():
        check_spending_amount(category, amount)


def round_currency(amount: float) -> float:
    """Round to whole rupees, keeping a float for arithmetic downstream."""
    return float(round(amount))
