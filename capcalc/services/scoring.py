"""Heuristic multi-factor risk scoring for a single property."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..models.analysis import RiskScores
from ..models.property import PropertyInputs
from ..utils.normalize import Bounds

RiskKey = str
Comparables = Optional[Sequence[PropertyInputs]]

RISK_BOUNDS = Bounds(minimum=1.0, maximum=10.0)
NEUTRAL_RISK = 5.0
MAX_RISK = RISK_BOUNDS.maximum


@dataclass(frozen=True)
class RiskFactor:
    """One row of the risk model: how to score a dimension and how much it counts."""

    key: RiskKey
    name: str
    weight: float
    score: Callable[[PropertyInputs, Comparables], float]


@dataclass(frozen=True)
class RiskAttribution:
    key: RiskKey
    name: str
    weight: float
    score: float
    contribution: float
    level: str


# ---------------------------------------------------------------------------
# Individual risk dimensions
# ---------------------------------------------------------------------------


def market_risk(inputs: PropertyInputs, comparables: Comparables = None) -> float:
    if not comparables:
        return NEUTRAL_RISK

    total = 0.0
    for comp in comparables:
        total += comp.purchase_price
    average_price = total / len(comparables)
    if not math.isfinite(average_price):
        # The running sum overflowed; average the scaled prices instead.
        average_price = sum(comp.purchase_price / len(comparables) for comp in comparables)
    if not math.isfinite(average_price) or average_price <= 0:
        return MAX_RISK

    price_variance = abs(inputs.purchase_price - average_price) / average_price
    return RISK_BOUNDS.clamp(price_variance * 10)


def monthly_expenses(inputs: PropertyInputs) -> float:
    return (
        inputs.monthly_hoa
        + inputs.annual_taxes / 12
        + inputs.annual_insurance / 12
        + inputs.annual_maintenance / 12
        + inputs.management_fees / 12
    )


def financial_risk(inputs: PropertyInputs, comparables: Comparables = None) -> float:
    expenses = monthly_expenses(inputs)
    if expenses == 0:
        # Rent with nothing to cover is unbounded coverage; no rent is undefined.
        return 1.0 if inputs.monthly_rent > 0 else MAX_RISK

    dscr = inputs.monthly_rent / expenses
    if dscr >= 2:
        return 1.0
    if dscr >= 1.5:
        return 3.0
    if dscr >= 1.25:
        return 5.0
    if dscr >= 1:
        return 7.0
    return 10.0


def property_condition_risk(inputs: PropertyInputs, comparables: Comparables = None) -> float:
    if inputs.purchase_price <= 0:
        return MAX_RISK
    maintenance_ratio = inputs.annual_maintenance / inputs.purchase_price
    return RISK_BOUNDS.clamp(maintenance_ratio * 1000)


def location_risk(inputs: PropertyInputs, comparables: Comparables = None) -> float:
    # No location data source is wired in yet.
    return NEUTRAL_RISK


def tenant_risk(inputs: PropertyInputs, comparables: Comparables = None) -> float:
    if inputs.purchase_price <= 0:
        return MAX_RISK
    rent_to_price = (inputs.monthly_rent * 12) / inputs.purchase_price
    if rent_to_price >= 0.1:
        return 3.0
    if rent_to_price >= 0.07:
        return 5.0
    if rent_to_price >= 0.05:
        return 7.0
    return 9.0


# ---------------------------------------------------------------------------
# Scoring configuration
# ---------------------------------------------------------------------------

RISK_FACTORS: List[RiskFactor] = [
    RiskFactor("market_risk", "Market Risk", 0.25, market_risk),
    RiskFactor("financial_risk", "Financial Risk", 0.30, financial_risk),
    RiskFactor("property_condition", "Property Condition", 0.15, property_condition_risk),
    RiskFactor("location_risk", "Location Risk", 0.15, location_risk),
    RiskFactor("tenant_risk", "Tenant Risk", 0.15, tenant_risk),
]

RISK_WEIGHTS: Dict[RiskKey, float] = {factor.key: factor.weight for factor in RISK_FACTORS}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def risk_level(score: float) -> str:
    if score <= 3:
        return "Low Risk"
    if score <= 6:
        return "Moderate Risk"
    return "High Risk"


def calculate_risk_scores(
    inputs: PropertyInputs,
    comparables: Comparables = None,
    factors: Sequence[RiskFactor] = RISK_FACTORS,
) -> RiskScores:
    scores = {factor.key: factor.score(inputs, comparables) for factor in factors}
    return RiskScores(**scores)


def calculate_overall_risk_score(
    risk_scores: RiskScores,
    weights: Optional[Dict[RiskKey, float]] = None,
) -> float:
    weights = RISK_WEIGHTS if weights is None else weights
    values = risk_scores.model_dump()
    total = 0.0
    for key, weight in weights.items():
        total += values[key] * weight
    return total


def build_risk_breakdown(
    risk_scores: RiskScores,
    factors: Sequence[RiskFactor] = RISK_FACTORS,
) -> List[RiskAttribution]:
    values = risk_scores.model_dump()
    breakdown: List[RiskAttribution] = []
    for factor in factors:
        score = values[factor.key]
        breakdown.append(
            RiskAttribution(
                key=factor.key,
                name=factor.name,
                weight=factor.weight,
                score=score,
                contribution=score * factor.weight,
                level=risk_level(score),
            )
        )
    return breakdown


__all__ = [
    "RiskFactor",
    "RiskAttribution",
    "RISK_FACTORS",
    "RISK_WEIGHTS",
    "risk_level",
    "calculate_risk_scores",
    "calculate_overall_risk_score",
    "build_risk_breakdown",
    "market_risk",
    "financial_risk",
    "property_condition_risk",
    "location_risk",
    "tenant_risk",
]
