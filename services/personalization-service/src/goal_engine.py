"""
Goal synthesis: emergency fund, housing, retirement and profession-specific goals.

Rules run in a fixed order so identical inputs yield identically ordered goals.
Profession handling is split into a classification step (`classify_profession`)
and a parameterization step (`profession_goal_specs`) so each can be tested alone.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Optional

from finance_model import (
    Goal,
    PortfolioSummary,
    Priority,
    UserProfile,
    round_currency,
    validate_profile,
)
from finance_tables import (
    EMERGENCY_BASE_MONTHS,
    EMERGENCY_FAMILY_AGE,
    EMERGENCY_MAX_MONTHS,
    EMERGENCY_MIN_MONTHS,
    HIGH_INCOME,
    LOW_INCOME,
    PROFESSION_KEYWORDS,
    RETIREMENT_REPLACEMENT_RATIO,
)
from location_adjuster import adjust_goal, get_location_adjustment, multiplier_for_goal_category

logger = logging.getLogger(__name__)

DEFAULT_RETIREMENT_AGE = 65


@dataclass(frozen=True)
class Funding:
    """How a goal is seeded from liquid savings once its target is location scaled."""

    balance: float
    cap_ratio: float
    contribution_floor: float
    payoff_months: int


@dataclass(frozen=True)
class GoalSpec:
    """Unscaled goal parameters produced by a rule before location adjustment."""

    key: str
    title: str
    category: str
    target_amount: float
    monthly_contribution: float
    months: int
    priority: Priority
    icon: str
    description: str
    reasoning: str
    current_amount: float = 0.0
    user_scoped: bool = False
    funding: Optional[Funding] = None


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def emergency_months(age: int, monthly_income: float, risk_tier: str) -> int:
    """
    Months of income to hold in the emergency fund, between 3 and 9.

    Starts at 6; older users, conservative profiles and low incomes add a month,
    while younger users, high incomes and aggressive profiles at the family stage
    (35+) remove one.
    """
    months = EMERGENCY_BASE_MONTHS
    if age > 45:
        months += 1
    if age < 25:
        months -= 1
    if risk_tier == "conservative":
        months += 1
    if "aggressive" in risk_tier and age >= EMERGENCY_FAMILY_AGE:
        months -= 1
    if monthly_income > HIGH_INCOME:
        months -= 1
    if monthly_income < LOW_INCOME:
        months += 1
    return max(EMERGENCY_MIN_MONTHS, min(EMERGENCY_MAX_MONTHS, months))


def emergency_fund_spec(profile: UserProfile, portfolio: PortfolioSummary) -> GoalSpec:
    income = profile.monthly_income
    months = emergency_months(profile.age, income, profile.risk_tier)
    target = income * months
    current = min(portfolio.bank_balance, target)
    return GoalSpec(
        key="emergency_fund",
        title="Emergency Fund",
        category="Safety",
        target_amount=target,
        current_amount=current,
        monthly_contribution=max(5000.0, (target - current) / 12),
        months=12,
        funding=Funding(
            balance=portfolio.bank_balance, cap_ratio=1.0, contribution_floor=5000.0, payoff_months=12
        ),
        priority="high",
        icon="shield",
        description=f"{months} months of income set aside for emergencies",
        reasoning=(
            f"{months} months emergency fund recommended for your age ({profile.age}) "
            f"and {profile.risk_tier.replace('_', ' ')} risk profile"
        ),
    )


def housing_spec(profile: UserProfile, portfolio: PortfolioSummary) -> Optional[GoalSpec]:
    income = profile.monthly_income
    if not (profile.age < 35 and income > 80_000):
        return None

    target = income * 24
    current = min(portfolio.bank_balance * 0.3, target * 0.5)
    return GoalSpec(
        key="house_down_payment",
        title="House Down Payment",
        category="Housing",
        target_amount=target,
        current_amount=current,
        monthly_contribution=max(10000.0, (target - current) / 36),
        months=36,
        funding=Funding(
            balance=portfolio.bank_balance * 0.3, cap_ratio=0.5, contribution_floor=10000.0, payoff_months=36
        ),
        priority="medium",
        icon="home",
        description="Down payment for your first home",
        reasoning="Two years of income covers a typical down payment before location adjustment",
    )


def retirement_spec(
    profile: UserProfile,
    portfolio: PortfolioSummary,
    retirement_age: int = DEFAULT_RETIREMENT_AGE,
) -> Optional[GoalSpec]:
    if profile.age <= 25:
        return None

    income = profile.monthly_income
    years = max(1, retirement_age - profile.age)
    target = income * 12 * years * RETIREMENT_REPLACEMENT_RATIO
    return GoalSpec(
        key="retirement_fund",
        title="Retirement Fund",
        category="Retirement",
        target_amount=target,
        current_amount=portfolio.equity_and_funds,
        monthly_contribution=max(15000.0, income * 0.15),
        months=years * 12,
        priority="high",
        icon="sunset",
        description=f"Corpus replacing {RETIREMENT_REPLACEMENT_RATIO:.0%} of income for {years} years",
        reasoning=f"{years} years until retirement at {retirement_age}; current mutual funds and stocks count toward it",
    )


def classify_profession(profession: str | None) -> Optional[str]:
    """Map free-text profession onto a goal template tag, or None when nothing matches."""
    normalized = (profession or "").lower()
    if not normalized:
        return None
    for tag, keywords in PROFESSION_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return tag
    return None


def _tech_specs(profile: UserProfile) -> List[GoalSpec]:
    income = profile.monthly_income
    equipment_target = max(60_000.0, income * 0.72)
    specs = [
        GoalSpec(
            key="skill_development",
            title="Skill Development & Certifications",
            category="Professional",
            target_amount=max(50_000.0, income * 0.6),
            monthly_contribution=max(3000.0, income * 0.05),
            months=12,
            priority="medium",
            icon="graduation-cap",
            description="Courses, certifications and skill upgrades to advance your tech career",
            reasoning="Skill budget of 0.6 months of income",
            user_scoped=True,
        ),
        GoalSpec(
            key="tech_setup",
            title="Home Office & Tech Setup",
            category="Professional",
            target_amount=equipment_target,
            current_amount=equipment_target * 0.25,
            monthly_contribution=max(3000.0, income * 0.075),
            months=6,
            priority="low",
            icon="laptop",
            description="Laptop, monitor and desk setup for productive work",
            reasoning="Equipment budget scaled to income, assuming a quarter is already owned",
            user_scoped=True,
        ),
    ]
    if "aggressive" in profile.risk_tier and income > 100_000:
        specs.append(
            GoalSpec(
                key="startup_investment",
                title="Startup & Angel Investments",
                category="Investment",
                target_amount=income * 6,
                monthly_contribution=max(10000.0, income * 0.08),
                months=24,
                priority="low",
                icon="rocket",
                description="Angel investments in startups and tech companies",
                reasoning="Aggressive risk profile with income above 1,00,000 supports a startup allocation",
                user_scoped=True,
            )
        )
    return specs


def _medical_specs(profile: UserProfile) -> List[GoalSpec]:
    income = profile.monthly_income
    is_doctor = "doctor" in profile.profession.lower()
    return [
        GoalSpec(
            key="practice_setup",
            title="Clinic Setup & Equipment" if is_doctor else "Practice Expansion",
            category="Professional",
            target_amount=income * 12,
            current_amount=income * 2,
            monthly_contribution=max(15000.0, income * 0.12),
            months=36,
            priority="high",
            icon="hospital",
            description="Medical equipment, clinic setup and practice expansion",
            reasoning="One year of income funds practice setup",
            user_scoped=True,
        ),
        GoalSpec(
            key="medical_education",
            title="Medical Education & Conferences",
            category="Professional",
            target_amount=max(150_000.0, income * 1.5),
            monthly_contribution=max(12500.0, income * 0.08),
            months=12,
            priority="medium",
            icon="book",
            description="Conferences, journals and continuing education requirements",
            reasoning="Continuing education budget of 1.5 months of income",
            user_scoped=True,
        ),
        GoalSpec(
            key="professional_insurance",
            title="Professional Liability Insurance",
            category="Safety",
            target_amount=max(100_000.0, income),
            monthly_contribution=max(17000.0, income * 0.1),
            months=6,
            priority="high",
            icon="shield",
            description="Malpractice and professional liability cover",
            reasoning="Liability cover sized to at least one month of income",
            user_scoped=True,
        ),
    ]


def _teaching_specs(profile: UserProfile) -> List[GoalSpec]:
    income = profile.monthly_income
    return [
        GoalSpec(
            key="teacher_development",
            title="Teaching Qualifications & Development",
            category="Professional",
            target_amount=max(200_000.0, income * 4),
            monthly_contribution=max(8000.0, income * 0.15),
            months=24,
            priority="medium",
            icon="graduation-cap",
            description="Higher qualifications, certifications and professional development",
            reasoning="Qualification budget of at least 2,00,000",
            user_scoped=True,
        ),
        GoalSpec(
            key="seasonal_break_fund",
            title="Summer Break Utilization",
            category="Lifestyle",
            target_amount=income * 2,
            monthly_contribution=max(4000.0, income * 0.08),
            months=10,
            priority="low",
            icon="sun",
            description="Summer courses, travel or extra income during the break",
            reasoning="Two months of income for the seasonal break",
            user_scoped=True,
        ),
    ]


def _creative_specs(profile: UserProfile) -> List[GoalSpec]:
    income = profile.monthly_income
    specs = [
        GoalSpec(
            key="creative_development",
            title="Creative Skills & Portfolio Development",
            category="Professional",
            target_amount=max(100_000.0, income * 2),
            monthly_contribution=max(3000.0, income * 0.08),
            months=12,
            priority="medium",
            icon="palette",
            description="Creative courses, portfolio development and freelance setup",
            reasoning="Two months of income for courses and portfolio work",
            user_scoped=True,
        ),
        GoalSpec(
            key="creative_tools",
            title="Creative Tools & Equipment",
            category="Professional",
            target_amount=max(75_000.0, income * 1.5),
            current_amount=25_000.0,
            monthly_contribution=max(2500.0, income * 0.05),
            months=8,
            priority="low",
            icon="tools",
            description="Design software, camera, laptop and other creative tools",
            reasoning="Tool budget of 1.5 months of income",
            user_scoped=True,
        ),
    ]
    if income < 80_000:
        specs.append(
            GoalSpec(
                key="freelance_income",
                title="Freelance Income Development",
                category="Professional",
                target_amount=income * 6,
                monthly_contribution=max(2000.0, income * 0.06),
                months=18,
                priority="high",
                icon="briefcase",
                description="Building a freelance client base and additional income streams",
                reasoning="Six months of income as a freelance buffer while income is below 80,000",
                user_scoped=True,
            )
        )
    return specs


def _business_specs(profile: UserProfile) -> List[GoalSpec]:
    income = profile.monthly_income
    return [
        GoalSpec(
            key="business_expansion",
            title="Business Expansion Capital",
            category="Professional",
            target_amount=income * 8,
            current_amount=income,
            monthly_contribution=max(20000.0, income * 0.15),
            months=18,
            priority="high",
            icon="chart",
            description="Capital for expansion, new equipment or new markets",
            reasoning="Eight months of income for expansion capital",
            user_scoped=True,
        ),
        GoalSpec(
            key="business_emergency",
            title="Business Emergency Fund",
            category="Safety",
            target_amount=income * 6,
            current_amount=income,
            monthly_contribution=max(15000.0, income * 0.12),
            months=12,
            priority="high",
            icon="building",
            description="Emergency fund reserved for business operations and cash flow",
            reasoning="Six months of business expenses kept apart from personal savings",
            user_scoped=True,
        ),
    ]


_PROFESSION_RULES = {
    "tech": _tech_specs,
    "medical": _medical_specs,
    "teaching": _teaching_specs,
    "creative": _creative_specs,
    "business": _business_specs,
}


def profession_goal_specs(tag: Optional[str], profile: UserProfile) -> List[GoalSpec]:
    rule = _PROFESSION_RULES.get(tag or "")
    return rule(profile) if rule else []


def goal_id_for(spec: GoalSpec, profile: UserProfile) -> str:
    return f"{spec.key}_{profile.user_id}" if spec.user_scoped else spec.key


def build_goal(spec: GoalSpec, profile: UserProfile, as_of: date) -> Goal:
    target = round_currency(spec.target_amount)
    current = min(round_currency(max(0.0, spec.current_amount)), target)
    return Goal(
        id=goal_id_for(spec, profile),
        title=spec.title,
        category=spec.category,
        target_amount=target,
        current_amount=current,
        monthly_contribution=round_currency(spec.monthly_contribution),
        target_date=add_months(as_of, spec.months),
        priority=spec.priority,
        icon=spec.icon,
        description=spec.description,
        reasoning=spec.reasoning,
        base_target_amount=target,
    )


def seed_funding(goal: Goal, funding: Funding, location: str | None) -> Goal:
    """
    Re-seed the current amount and contribution against the location-scaled target.

    Savings already covering the scaled target leave nothing remaining, so the
    contribution falls back to the scaled floor.
    """
    multiplier, _ = multiplier_for_goal_category(get_location_adjustment(location), goal.category)
    current = round_currency(min(max(0.0, funding.balance), goal.target_amount * funding.cap_ratio))
    remaining = max(0.0, goal.target_amount - current)
    contribution = max(funding.contribution_floor * multiplier, remaining / funding.payoff_months)
    return replace(goal, current_amount=current, monthly_contribution=max(1.0, round_currency(contribution)))


def goal_specs(
    profile: UserProfile,
    portfolio: PortfolioSummary,
    retirement_age: int = DEFAULT_RETIREMENT_AGE,
) -> List[GoalSpec]:
    """All rule outputs for the profile, in evaluation order."""
    specs: List[GoalSpec] = [emergency_fund_spec(profile, portfolio)]
    for optional_spec in (housing_spec(profile, portfolio), retirement_spec(profile, portfolio, retirement_age)):
        if optional_spec is not None:
            specs.append(optional_spec)
    specs.extend(profession_goal_specs(classify_profession(profile.profession), profile))
    return specs


def generate_goals(
    profile: UserProfile,
    portfolio: PortfolioSummary,
    existing_goals: Iterable[Goal] = (),
    as_of: date | None = None,
    retirement_age: int = DEFAULT_RETIREMENT_AGE,
) -> List[Goal]:
    """
    Generate the goals the user does not have yet, scaled for their location.

    Args:
        profile: Validated user profile.
        portfolio: Current balances used to seed current amounts.
        existing_goals: Goals already held; ids present here are never re-emitted.
        as_of: Date that target dates are measured from.
        retirement_age: Age used by the retirement rule.
    Returns:
        Newly generated goals in rule order; every goal has a positive monthly
        contribution and a current amount no larger than its target.
    Raises:
        FinanceInputError: when the profile violates age or income bounds.
    """
    validate_profile(profile)
    if as_of is None:
        raise ValueError("as_of is required so target dates stay deterministic")

    existing_ids = {goal.id for goal in existing_goals}
    goals: List[Goal] = []
    for spec in goal_specs(profile, portfolio, retirement_age):
        if goal_id_for(spec, profile) in existing_ids:
            continue
        goal = adjust_goal(build_goal(spec, profile, as_of), profile.location)
        if spec.funding is not None:
            goal = seed_funding(goal, spec.funding, profile.location)
        goals.append(goal)

    logger.debug(
        {
            "event": "goals_generated",
            "generated_count": len(goals),
            "skipped_existing": len(existing_ids),
            "profession_tag": classify_profession(profile.profession),
        }
    )
    return goals
