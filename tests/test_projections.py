import pytest

from capcalc.models.analysis import LoanRequest, ROIRequest, TaxRequest
from capcalc.services.calculators import calculate_monthly_mortgage
from capcalc.services.projections import amortization_schedule, analyze_loan, project_property_tax, project_roi


def test_loan_analysis():
    result = analyze_loan(
        LoanRequest(
            purchase_price=375000,
            down_payment_percent=20,
            interest_rate=6.5,
            loan_term=30,
            monthly_rent=2800,
            monthly_expenses=500,
        )
    )
    assert result.down_payment == 75000
    assert result.loan_amount == 300000
    assert result.monthly_payment == pytest.approx(1896.20, abs=0.01)
    assert result.monthly_cash_flow == pytest.approx(2800 - 500 - result.monthly_payment)
    assert result.annual_cash_flow == pytest.approx(result.monthly_cash_flow * 12)
    assert result.cash_on_cash_return == pytest.approx(result.annual_cash_flow / 75000 * 100)
    assert len(result.schedule) == 30
    assert result.total_interest == pytest.approx(result.monthly_payment * 360 - 300000, rel=1e-6)


def test_amortization_pays_down_balance():
    schedule = amortization_schedule(300000, 6.5, 30)
    assert schedule[0].interest_paid > schedule[0].principal_paid
    assert schedule[-1].principal_paid > schedule[-1].interest_paid
    assert schedule[-1].remaining_balance == pytest.approx(0, abs=0.01)
    assert sum(row.principal_paid for row in schedule) == pytest.approx(300000, abs=0.01)


def test_amortization_without_interest():
    schedule = amortization_schedule(120000, 0, 10)
    assert calculate_monthly_mortgage(120000, 0, 10) == 1000
    assert all(row.interest_paid == 0 for row in schedule)
    assert schedule[0].principal_paid == pytest.approx(12000)
    assert schedule[-1].remaining_balance == pytest.approx(0, abs=1e-6)


def test_roi_projection():
    result = project_roi(
        ROIRequest(
            purchase_price=200000,
            renovation_costs=20000,
            monthly_rent=2000,
            monthly_expenses=800,
            property_appreciation=3,
            holding_period=5,
        )
    )
    assert result.total_investment == 220000
    assert result.annual_cash_flow == 14400
    assert result.cash_on_cash_return == pytest.approx(14400 / 220000 * 100)
    assert result.future_value == pytest.approx(220000 * 1.03**5)
    assert result.total_return == pytest.approx((220000 * 1.03**5 - 220000) + 72000)
    assert result.total_roi == pytest.approx(result.total_return / 220000 * 100)


def test_roi_without_investment_is_zero_not_error():
    result = project_roi(ROIRequest(purchase_price=0, monthly_rent=1000))
    assert result.cash_on_cash_return == 0
    assert result.total_roi == 0


def test_tax_projection():
    result = project_property_tax(TaxRequest(assessed_value=300000, tax_rate=1.2, annual_increase=2, years_to_project=5))
    assert result.first_year_tax == pytest.approx(3600)
    assert result.monthly_payment == pytest.approx(300)
    assert result.final_year_tax == pytest.approx(3600 * 1.02**4)
    assert result.total_tax_paid == pytest.approx(3600 * sum(1.02**year for year in range(5)))
    assert result.effective_tax_rate == 1.2
    assert result.average_annual_increase == 2


def test_single_year_tax_projection():
    result = project_property_tax(TaxRequest(assessed_value=250000, tax_rate=1.0, annual_increase=5, years_to_project=1))
    assert result.final_year_tax == pytest.approx(result.first_year_tax)
    assert result.total_tax_paid == pytest.approx(2500)
