"""Core investment formulas.

Every function is a total function over floats: zero denominators return a
defined value instead of raising, and no function touches I/O.
"""

from __future__ import annotations

import math

from ..models.analysis import CalculationResult
from ..models.property import PropertyInputs


def calculate_noi(annual_income: float, annual_expenses: float) -> float:
    return annual_income - annual_expenses


def calculate_cap_rate(noi: float, property_value: float) -> float:
    if property_value == 0:
        return 0.0
    return (noi / property_value) * 100


def calculate_monthly_mortgage(principal: float, annual_rate: float, years: float) -> float:
    """Fixed-rate amortized payment; ``annual_rate`` is a percentage (6.5 = 6.5% APR)."""

    monthly_rate = annual_rate / 1200
    number_of_payments = years * 12
    if number_of_payments <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / number_of_payments
    if monthly_rate <= -1:
        return 0.0

    # r * g / (g - 1) with g = (1 + r) ** n, rewritten as r / (1 - 1 / g) so
    # tiny rates and long terms neither cancel to zero nor overflow.
    try:
        denominator = -math.expm1(-number_of_payments * math.log1p(monthly_rate))
    except OverflowError:
        # Negative rates over long terms shrink the payment towards zero.
        return 0.0
    if denominator == 0:
        return principal / number_of_payments
    return (principal * monthly_rate) / denominator


def calculate_cash_on_cash_return(annual_cash_flow: float, total_investment: float) -> float:
    if total_investment == 0:
        return 0.0
    return (annual_cash_flow / total_investment) * 100


def annual_income(inputs: PropertyInputs) -> float:
    return inputs.monthly_rent * 12


def annual_expenses(inputs: PropertyInputs) -> float:
    # management_fees is summed as an annual figure, unlike the monthly HOA.
    return (
        inputs.monthly_hoa * 12
        + inputs.annual_taxes
        + inputs.annual_insurance
        + inputs.annual_maintenance
        + inputs.management_fees
    )


def calculate_results(inputs: PropertyInputs) -> CalculationResult:
    """Income, expenses, NOI and cap rates for one set of property inputs."""

    income = annual_income(inputs)
    expenses = annual_expenses(inputs)
    noi = calculate_noi(income, expenses)
    cap_rate_purchase = calculate_cap_rate(noi, inputs.purchase_price)
    cap_rate_market = calculate_cap_rate(noi, inputs.market_value) if inputs.market_value else None
    return CalculationResult(
        annual_income=income,
        annual_expenses=expenses,
        noi=noi,
        cap_rate_purchase=cap_rate_purchase,
        cap_rate_market=cap_rate_market,
    )


__all__ = [
    "calculate_noi",
    "calculate_cap_rate",
    "calculate_monthly_mortgage",
    "calculate_cash_on_cash_return",
    "calculate_results",
    "annual_income",
    "annual_expenses",
]
