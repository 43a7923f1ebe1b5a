"""
Personalization Service exposes the in-process finance engines over HTTP so other
services and the UI can request personal inflation, thresholds, goals and
recommendations for a user.
"""

import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

SERVICES_ROOT = SRC_DIR.parents[1]
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from finance_model import FinanceInputError, Goal, PortfolioSummary, SpendingSnapshot, UserProfile
from finance_tables import TABLES_VERSION
from inflation_engine import compare_inflation
from orchestrator import compute_personalized_finance
from shared.engine_settings import EngineSettings, EngineSettingsError, load_engine_settings
from shared.observability.telemetry import (
    bind_request_context,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Personalization Service")
setup_telemetry(app, service_name="personalization-service", tables_version=TABLES_VERSION)

try:
    ENGINE_SETTINGS = load_engine_settings()
except EngineSettingsError as exc:
    logger.error("Failed to load personalization engine settings: %s", exc)
    raise


def reload_engine_settings_for_tests() -> EngineSettings:
    """
    Refresh engine settings after tests mutate environment variables.
    """

    global ENGINE_SETTINGS

    ENGINE_SETTINGS = load_engine_settings()
    return ENGINE_SETTINGS


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = ensure_request_id(request)
    token = bind_request_context(request_id)
    try:
        response = await call_next(request)
        response.headers.setdefault("x-request-id", request_id)
        return response
    finally:
        reset_request_context(token)


@app.exception_handler(FinanceInputError)
async def finance_input_error_handler(request: Request, exc: FinanceInputError) -> JSONResponse:
    logger.warning({"event": "invalid_finance_input", "path": request.url.path})
    return JSONResponse(status_code=422, content={"error": "invalid_input", "detail": str(exc)})


class UserProfileModel(BaseModel):
    user_id: str
    age: int
    monthly_income: float
    location: str = ""
    risk_tier: Literal["conservative", "moderate", "moderate_aggressive", "aggressive", "sophisticated_aggressive"]
    profession: str = ""

    def to_dataclass(self) -> UserProfile:
        return UserProfile(**self.model_dump())


class PortfolioModel(BaseModel):
    bank_balance: float = 0.0
    mutual_funds: float = 0.0
    stocks: float = 0.0
    gold: float = 0.0
    nps: float = 0.0
    diversification_score: float = 1.0
    average_returns: float = 0.0
    monthly_investment: float = 0.0

    def to_dataclass(self) -> PortfolioSummary:
        return PortfolioSummary(**self.model_dump())


class GoalModel(BaseModel):
    id: str
    title: str
    category: str
    target_amount: float = Field(ge=0)
    current_amount: float = Field(default=0.0, ge=0)
    monthly_contribution: float = Field(gt=0)
    target_date: date
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    icon: str = ""
    description: str = ""
    reasoning: str = ""
    base_target_amount: float | None = None

    def to_dataclass(self) -> Goal:
        values = self.model_dump()
        # User-entered goals are never location scaled.
        if values["base_target_amount"] is None:
            values["base_target_amount"] = values["target_amount"]
        return Goal(**values)


class PersonalizeRequest(BaseModel):
    profile: UserProfileModel
    spending: dict[str, float] = Field(default_factory=dict)
    portfolio: PortfolioModel = Field(default_factory=PortfolioModel)
    existing_goals: list[GoalModel] = Field(default_factory=list)
    as_of: date


class InflationRequest(BaseModel):
    spending: dict[str, float] = Field(default_factory=dict)
    location: str | None = None
    horizon_months: int | None = Field(default=None, gt=0)
    as_of: date


@app.get("/health")
def health_check() -> dict:
    """
    Report Personalization Service readiness; expects no payload.
    Returns a static status document for load balancers and uptime checks.
    """
    return {"status": "ok", "service": "personalization-service"}


@app.post("/personalize")
def personalize(payload: PersonalizeRequest) -> dict[str, Any]:
    """
    Compute the full personalized finance view for one user.
    Expects a `PersonalizeRequest` with profile, spending, portfolio, existing goals and the calculation date.
    Returns the serialized result: inflation, thresholds, goals with insights, recommendations and location insights.
    """
    result = compute_personalized_finance(
        payload.profile.to_dataclass(),
        SpendingSnapshot(amounts=dict(payload.spending)),
        payload.portfolio.to_dataclass(),
        [goal.to_dataclass() for goal in payload.existing_goals],
        payload.as_of,
        settings=ENGINE_SETTINGS,
    )
    return asdict(result)


@app.post("/inflation")
def personal_inflation(payload: InflationRequest) -> dict[str, Any]:
    """
    Compare a spending snapshot's personal inflation against the official baselines.
    The horizon falls back to the configured inflation horizon when omitted.
    Returns the serialized `InflationResult`.
    """
    horizon_months = payload.horizon_months or ENGINE_SETTINGS.inflation_horizon_months
    result = compare_inflation(
        SpendingSnapshot(amounts=dict(payload.spending)),
        payload.as_of,
        payload.location,
        horizon_months,
    )
    return asdict(result)
