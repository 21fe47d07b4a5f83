"""Pydantic schemas for calculation snapshots, shared reports and tool outputs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .property import CamelModel, PropertyInputs


class CalculationResult(CamelModel):
    annual_income: float
    annual_expenses: float
    noi: float
    cap_rate_purchase: float
    cap_rate_market: Optional[float] = None


class RiskScores(CamelModel):
    market_risk: float
    financial_risk: float
    property_condition: float
    location_risk: float
    tenant_risk: float


class ComparableProperty(CamelModel):
    purchase_price: float
    monthly_rent: float
    cap_rate: float


class RiskFactorPayload(CamelModel):
    key: str
    name: str
    weight: float
    score: float
    contribution: float
    level: str


class ReportSnapshot(CamelModel):
    """The canonical calculation snapshot for one property.

    This is also the shared-report payload, so its JSON shape is part of the
    public contract.
    """

    form_data: PropertyInputs
    results: CalculationResult
    comparable_properties: List[ComparableProperty] = Field(default_factory=list)
    risk_scores: RiskScores
    overall_risk_score: float
    ai_insights: Optional[Dict[str, Any]] = None


class ComparableSummary(CamelModel):
    count: int
    average_cap_rate: Optional[float] = None
    median_cap_rate: Optional[float] = None


class AnalyzeRequest(CamelModel):
    subject: PropertyInputs = Field(..., alias="property")
    comparables: List[PropertyInputs] = Field(default_factory=list)
    ai_insights: Optional[Dict[str, Any]] = None


class AnalysisResponse(CamelModel):
    snapshot: ReportSnapshot
    risk_level: str
    risk_factors: List[RiskFactorPayload]
    comparable_summary: ComparableSummary


class PropertyDetails(CamelModel):
    purchase_price: float = 0.0
    monthly_rent: float = 0.0
    location: str = ""
    property_type: str = "residential"
    square_footage: float = 1000
    year_built: int = 2000
    bedrooms: int = 2
    bathrooms: int = 2
    property_condition: str = "usable"


class ValuationInsights(CamelModel):
    market_value_estimate: str
    confidence_score: float
    key_factors: List[str]
    recommendations: List[str]
    market_trends: str
    risk_assessment: str
    comparable_properties: str


class ShareRequest(CamelModel):
    property_data: Dict[str, Any]


class ShareResponse(CamelModel):
    share_id: str


class SharedReport(CamelModel):
    share_id: str
    property_data: Dict[str, Any]
    created_at: datetime
    expires_at: Optional[datetime] = None


class LoanRequest(CamelModel):
    purchase_price: float = Field(..., ge=0)
    down_payment_percent: float = Field(..., ge=0, le=100)
    interest_rate: float = Field(..., gt=0)
    loan_term: int = Field(..., gt=0)
    monthly_rent: float = 0.0
    monthly_expenses: float = 0.0


class AmortizationRow(CamelModel):
    year: int
    interest_paid: float
    principal_paid: float
    remaining_balance: float


class LoanAnalysis(CamelModel):
    loan_amount: float
    down_payment: float
    monthly_payment: float
    monthly_cash_flow: float
    annual_cash_flow: float
    cash_on_cash_return: float
    total_interest: float
    schedule: List[AmortizationRow] = Field(default_factory=list)


class ROIRequest(CamelModel):
    purchase_price: float = Field(..., ge=0)
    renovation_costs: float = 0.0
    monthly_rent: float = 0.0
    monthly_expenses: float = 0.0
    property_appreciation: float = Field(3.0, ge=0, le=15)
    holding_period: int = Field(5, ge=1, le=30)


class ROIProjection(CamelModel):
    total_investment: float
    annual_cash_flow: float
    cash_on_cash_return: float
    future_value: float
    total_return: float
    total_roi: float


class TaxRequest(CamelModel):
    assessed_value: float = Field(..., ge=0)
    tax_rate: float = Field(1.2, ge=0, le=5)
    annual_increase: float = Field(2.0, ge=0, le=10)
    years_to_project: int = Field(5, ge=1, le=30)


class TaxProjection(CamelModel):
    first_year_tax: float
    monthly_payment: float
    effective_tax_rate: float
    final_year_tax: float
    total_tax_paid: float
    average_annual_increase: float
