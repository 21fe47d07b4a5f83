"""Loan, ROI and property-tax projections built on the core formulas."""

from __future__ import annotations

from typing import List

from ..models.analysis import (
    AmortizationRow,
    LoanAnalysis,
    LoanRequest,
    ROIProjection,
    ROIRequest,
    TaxProjection,
    TaxRequest,
)
from .calculators import calculate_cash_on_cash_return, calculate_monthly_mortgage


def amortization_schedule(principal: float, annual_rate: float, years: int) -> List[AmortizationRow]:
    """Yearly totals of a fixed-rate loan, paid monthly."""

    payment = calculate_monthly_mortgage(principal, annual_rate, years)
    monthly_rate = annual_rate / 1200
    balance = principal
    rows: List[AmortizationRow] = []
    for year in range(1, int(years) + 1):
        interest_paid = 0.0
        principal_paid = 0.0
        for _ in range(12):
            interest = balance * monthly_rate
            reduction = min(payment - interest, balance)
            interest_paid += interest
            principal_paid += reduction
            balance -= reduction
        rows.append(
            AmortizationRow(
                year=year,
                interest_paid=interest_paid,
                principal_paid=principal_paid,
                remaining_balance=max(balance, 0.0),
            )
        )
    return rows


def analyze_loan(request: LoanRequest) -> LoanAnalysis:
    down_payment = request.purchase_price * request.down_payment_percent / 100
    loan_amount = request.purchase_price - down_payment
    monthly_payment = calculate_monthly_mortgage(loan_amount, request.interest_rate, request.loan_term)
    monthly_cash_flow = request.monthly_rent - request.monthly_expenses - monthly_payment
    annual_cash_flow = monthly_cash_flow * 12
    schedule = amortization_schedule(loan_amount, request.interest_rate, request.loan_term)
    return LoanAnalysis(
        loan_amount=loan_amount,
        down_payment=down_payment,
        monthly_payment=monthly_payment,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        cash_on_cash_return=calculate_cash_on_cash_return(annual_cash_flow, down_payment),
        total_interest=sum(row.interest_paid for row in schedule),
        schedule=schedule,
    )


def project_roi(request: ROIRequest) -> ROIProjection:
    total_investment = request.purchase_price + request.renovation_costs
    annual_cash_flow = (request.monthly_rent - request.monthly_expenses) * 12
    future_value = total_investment * (1 + request.property_appreciation / 100) ** request.holding_period
    total_return = (future_value - total_investment) + (annual_cash_flow * request.holding_period)
    return ROIProjection(
        total_investment=total_investment,
        annual_cash_flow=annual_cash_flow,
        cash_on_cash_return=calculate_cash_on_cash_return(annual_cash_flow, total_investment),
        future_value=future_value,
        total_return=total_return,
        total_roi=calculate_cash_on_cash_return(total_return, total_investment),
    )


def project_property_tax(request: TaxRequest) -> TaxProjection:
    growth = 1 + request.annual_increase / 100
    first_year_tax = (request.assessed_value * request.tax_rate) / 100
    final_assessed_value = request.assessed_value * growth ** (request.years_to_project - 1)

    total_tax_paid = 0.0
    for year in range(request.years_to_project):
        year_assessed_value = request.assessed_value * growth**year
        total_tax_paid += (year_assessed_value * request.tax_rate) / 100

    return TaxProjection(
        first_year_tax=first_year_tax,
        monthly_payment=first_year_tax / 12,
        effective_tax_rate=request.tax_rate,
        final_year_tax=(final_assessed_value * request.tax_rate) / 100,
        total_tax_paid=total_tax_paid,
        average_annual_increase=request.annual_increase,
    )


__all__ = ["amortization_schedule", "analyze_loan", "project_roi", "project_property_tax"]
