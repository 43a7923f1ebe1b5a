"""
Versioned reference tables consumed by the personalization calculators.

Every hard-coded lookup (city multipliers, category inflation rates, seasonal
factors, threshold step functions) lives here so the arithmetic modules can be
tested against swapped tables without touching their logic.
"""

from __future__ import annotations

from typing import Dict, Tuple

TABLES_VERSION = "2024.1"

# RBI target used as the national baseline.
GOVERNMENT_INFLATION = 6.5

# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

# Ordered: the first city found in the location string wins.
CITY_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "mumbai": {"property": 2.2, "living": 1.8, "general": 1.6},
    "delhi": {"property": 1.9, "living": 1.6, "general": 1.4},
    "bangalore": {"property": 1.7, "living": 1.5, "general": 1.3},
    "gurgaon": {"property": 1.8, "living": 1.5, "general": 1.4},
    "noida": {"property": 1.6, "living": 1.4, "general": 1.3},
    "pune": {"property": 1.4, "living": 1.3, "general": 1.2},
    "hyderabad": {"property": 1.3, "living": 1.2, "general": 1.1},
    "chennai": {"property": 1.3, "living": 1.2, "general": 1.1},
    "kolkata": {"property": 1.2, "living": 1.1, "general": 1.0},
    "ahmedabad": {"property": 1.1, "living": 1.0, "general": 0.9},
    "kochi": {"property": 1.0, "living": 0.9, "general": 0.8},
    "jaipur": {"property": 0.9, "living": 0.8, "general": 0.7},
    "chandigarh": {"property": 1.1, "living": 1.0, "general": 0.9},
    "lucknow": {"property": 0.8, "living": 0.7, "general": 0.6},
    "indore": {"property": 0.7, "living": 0.6, "general": 0.6},
    "surat": {"property": 0.8, "living": 0.7, "general": 0.7},
    "thiruvananthapuram": {"property": 0.9, "living": 0.8, "general": 0.7},
    "mangalore": {"property": 0.8, "living": 0.7, "general": 0.7},
}
DEFAULT_CITY = "default"
DEFAULT_CITY_MULTIPLIERS = {"property": 1.0, "living": 0.9, "general": 0.8}

TIER_1_CITIES = frozenset({"mumbai", "delhi", "bangalore", "gurgaon", "noida"})
TIER_1_5_CITIES = frozenset({"pune", "hyderabad", "chennai", "kolkata", "ahmedabad"})

# (mean multiplier lower bound, label), checked top-down
COST_LEVELS: Tuple[Tuple[float, str], ...] = (
    (1.5, "High Cost"),
    (1.2, "Medium-High Cost"),
    (0.9, "Medium Cost"),
)
LOWEST_COST_LEVEL = "Low Cost"

# ---------------------------------------------------------------------------
# Inflation
# ---------------------------------------------------------------------------

CATEGORY_INFLATION_RATES: Dict[str, float] = {
    "food": 8.7,
    "housing": 4.2,
    "transport": 6.8,
    "healthcare": 5.9,
    "education": 4.1,
    "entertainment": 7.3,
    "clothing": 3.8,
    "miscellaneous": 6.1,
}

# Urban CPI basket; sums to 1.0.
STANDARD_WEIGHTS: Dict[str, float] = {
    "food": 0.459,
    "housing": 0.109,
    "transport": 0.086,
    "healthcare": 0.059,
    "education": 0.047,
    "entertainment": 0.067,
    "clothing": 0.065,
    "miscellaneous": 0.108,
}

# Spending categories that borrow another category's inflation rate.
RATE_CATEGORY_ALIASES: Dict[str, str] = {
    "shopping": "clothing",
    "travel": "transport",
    "fuel": "transport",
    "groceries": "food",
    "dining": "food",
    "rent": "housing",
    "utilities": "housing",
    "medical": "healthcare",
}
FALLBACK_RATE_CATEGORY = "miscellaneous"

INFLATION_TIER_CITIES: Dict[str, frozenset] = {
    "tier1": frozenset(
        {"mumbai", "delhi", "bangalore", "chennai", "kolkata", "hyderabad", "pune", "ahmedabad", "gurgaon", "noida"}
    ),
    "tier2": frozenset({"jaipur", "lucknow", "kanpur", "nagpur", "indore", "thane", "bhopal", "visakhapatnam"}),
}
DEFAULT_INFLATION_TIER = "tier3"

INFLATION_TIER_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "tier1": {
        "food": 1.15,
        "housing": 1.8,
        "transport": 1.25,
        "healthcare": 1.3,
        "education": 1.4,
        "entertainment": 1.2,
        "clothing": 1.1,
        "miscellaneous": 1.15,
    },
    "tier2": {
        "food": 1.05,
        "housing": 1.3,
        "transport": 1.1,
        "healthcare": 1.15,
        "education": 1.2,
        "entertainment": 1.1,
        "clothing": 1.05,
        "miscellaneous": 1.08,
    },
    "tier3": {
        "food": 0.95,
        "housing": 0.7,
        "transport": 0.9,
        "healthcare": 0.85,
        "education": 0.8,
        "entertainment": 0.9,
        "clothing": 0.95,
        "miscellaneous": 0.92,
    },
}

# January first.
SEASONAL_FACTORS: Tuple[float, ...] = (1.10, 1.05, 1.00, 1.02, 1.08, 1.12, 1.15, 1.10, 1.05, 1.08, 1.12, 1.06)
TREND_FACTOR = 1.05
TREND_HORIZON_MONTHS = 6

# (rate lower bound exclusive, severity level), checked top-down
SEVERITY_CUTOFFS: Tuple[Tuple[float, int], ...] = ((15.0, 5), (12.0, 4), (9.0, 3), (6.0, 2), (3.0, 1))

# (difference lower bound exclusive, label), checked top-down
IMPACT_CUTOFFS: Tuple[Tuple[float, str], ...] = (
    (8.0, "extreme"),
    (5.0, "very_high"),
    (3.0, "high"),
    (1.0, "moderate"),
    (-1.0, "good"),
    (-3.0, "very_good"),
)
BEST_IMPACT = "excellent"

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

# category -> (base warning fraction of income, target as a share of the warning)
CATEGORY_BASE_THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "food": (0.25, 0.85),
    "housing": (0.30, 0.90),
    "transport": (0.12, 0.85),
    "entertainment": (0.15, 0.70),
    "shopping": (0.10, 0.70),
    "miscellaneous": (0.08, 0.80),
}
BASE_SAVINGS_RATE = 0.20
SAVINGS_FLOOR = 0.10
SAVINGS_CEILING = 0.40

# (upper bound exclusive, multiplier); the last entry is the open-ended bracket
AGE_MULTIPLIERS: Tuple[Tuple[float, float], ...] = ((25, 1.2), (35, 1.0), (45, 0.8), (float("inf"), 0.6))
INCOME_MULTIPLIERS: Tuple[Tuple[float, float], ...] = (
    (50_000, 0.7),
    (100_000, 0.9),
    (200_000, 1.0),
    (500_000, 1.2),
    (float("inf"), 1.5),
)
TIER_THRESHOLD_MULTIPLIERS: Dict[str, float] = {"Tier 1": 1.3, "Tier 1.5": 1.1, "Tier 2": 0.9}
RISK_SAVINGS_MULTIPLIERS: Dict[str, float] = {
    "conservative": 1.3,
    "moderate": 1.0,
    "moderate_aggressive": 0.9,
    "aggressive": 0.8,
    "sophisticated_aggressive": 0.7,
}
RISK_RETURN_MULTIPLIERS: Dict[str, float] = {
    "conservative": 0.7,
    "moderate": 0.9,
    "moderate_aggressive": 1.0,
    "aggressive": 1.2,
    "sophisticated_aggressive": 1.4,
}
DEFAULT_MARKET_RETURN = 12.0

# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

EMERGENCY_BASE_MONTHS = 6
EMERGENCY_MIN_MONTHS = 3
EMERGENCY_MAX_MONTHS = 9
EMERGENCY_FAMILY_AGE = 35
HIGH_INCOME = 300_000
LOW_INCOME = 50_000
RETIREMENT_REPLACEMENT_RATIO = 0.8

# Ordered: the first tag whose keywords appear in the profession wins.
PROFESSION_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("tech", ("engineer", "product", "data", "designer", "software", "developer")),
    ("medical", ("doctor", "pharmacist", "physician", "surgeon", "dentist")),
    ("teaching", ("teacher", "professor", "lecturer", "educator")),
    ("creative", ("writer", "content", "graphic", "creative", "artist")),
    ("business", ("owner", "entrepreneur", "business", "founder")),
)

# ---------------------------------------------------------------------------
# Recommendations and cross-links
# ---------------------------------------------------------------------------

BUDGET_CONTROL_CATEGORIES: Tuple[str, ...] = ("entertainment", "shopping", "miscellaneous")
HIGH_INCOME_CUTOFF = 150_000
HIGH_RETURN_CUTOFF = 15.0
DIVERSIFICATION_CUTOFF = 0.6
RETIREMENT_ACCELERATION_AGE = 45

# category -> (max reduction fraction, priority, message); entertainment is income dependent
OPTIMIZATION_RULES: Dict[str, Tuple[float, str, str]] = {
    "entertainment": (0.2, "medium", "Reduce entertainment expenses"),
    "food": (0.15, "low", "Optimize dining out expenses"),
    "shopping": (0.4, "high", "Cut non-essential shopping"),
    "travel": (0.5, "medium", "Reduce travel expenses temporarily"),
    "miscellaneous": (0.3, "medium", "Optimize miscellaneous expenses"),
}
LOWER_INCOME_ENTERTAINMENT_REDUCTION = 0.3
LOWER_INCOME_CUTOFF = 100_000
DISCRETIONARY_CATEGORIES: Tuple[str, ...] = ("entertainment", "shopping", "travel")
LOW_SAVINGS_RATE = 0.10
DISCRETIONARY_RATIO = 1.5
EXTENDED_TIMELINE_MONTHS = 60
