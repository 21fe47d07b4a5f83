import math

import pytest

from capcalc.models.analysis import RiskScores
from capcalc.models.property import PropertyInputs
from capcalc.services.scoring import (
    RISK_FACTORS,
    RISK_WEIGHTS,
    build_risk_breakdown,
    calculate_overall_risk_score,
    calculate_risk_scores,
    financial_risk,
    market_risk,
    property_condition_risk,
    risk_level,
    tenant_risk,
)


def _inputs(**fields) -> PropertyInputs:
    return PropertyInputs(postcode="78701", **fields)


def _comps(*prices: float):
    return [_inputs(purchase_price=price) for price in prices]


def test_weights_sum_to_one():
    assert math.isclose(sum(RISK_WEIGHTS.values()), 1.0)
    assert [factor.key for factor in RISK_FACTORS] == [
        "market_risk",
        "financial_risk",
        "property_condition",
        "location_risk",
        "tenant_risk",
    ]


def test_market_risk_without_comparables_is_moderate():
    assert market_risk(_inputs(purchase_price=300000)) == 5
    assert market_risk(_inputs(purchase_price=300000), []) == 5


def test_market_risk_scales_with_price_deviation():
    close = market_risk(_inputs(purchase_price=310000), _comps(300000, 300000))
    far = market_risk(_inputs(purchase_price=400000), _comps(300000, 300000))
    assert close == pytest.approx(1.0)
    assert far == pytest.approx(10 / 3)
    assert far > close


def test_market_risk_is_clamped():
    assert market_risk(_inputs(purchase_price=900000), _comps(100000)) == 10
    assert market_risk(_inputs(purchase_price=100100), _comps(100000)) == 1
    assert market_risk(_inputs(purchase_price=100000), _comps(0, 0)) == 10
    assert market_risk(_inputs(purchase_price=0), _comps(0)) == 10


def test_market_risk_survives_overflowing_price_sum():
    # Two prices of 1e308 overflow a running sum; the average is still 1e308.
    assert market_risk(_inputs(purchase_price=5e307), _comps(1e308, 1e308)) == pytest.approx(5.0)
    assert market_risk(_inputs(purchase_price=1e308), _comps(1e308, 1e308)) == 1
    assert market_risk(_inputs(purchase_price=-1e308), _comps(1e308, 1e308)) == 10


def test_financial_risk_thresholds():
    assert financial_risk(_inputs(monthly_rent=2000, monthly_hoa=1000)) == 1
    assert financial_risk(_inputs(monthly_rent=2000, monthly_hoa=1300)) == 3
    assert financial_risk(_inputs(monthly_rent=2000, monthly_hoa=1600)) == 5
    assert financial_risk(_inputs(monthly_rent=2000, monthly_hoa=2000)) == 7
    assert financial_risk(_inputs(monthly_rent=2000, monthly_hoa=2500)) == 10


def test_financial_risk_uses_monthly_share_of_annual_costs():
    inputs = _inputs(monthly_rent=1000, annual_taxes=6000)
    assert financial_risk(inputs) == 1


def test_financial_risk_without_expenses():
    assert financial_risk(_inputs(monthly_rent=1500)) == 1
    assert financial_risk(_inputs(monthly_rent=0)) == 10


def test_property_condition_risk():
    assert property_condition_risk(_inputs(purchase_price=300000, annual_maintenance=1000)) == pytest.approx(10 / 3)
    assert property_condition_risk(_inputs(purchase_price=100000, annual_maintenance=5000)) == 10
    assert property_condition_risk(_inputs(purchase_price=100000, annual_maintenance=0)) == 1


def test_tenant_risk_thresholds():
    assert tenant_risk(_inputs(purchase_price=120000, monthly_rent=1000)) == 3
    assert tenant_risk(_inputs(purchase_price=120000, monthly_rent=700)) == 5
    assert tenant_risk(_inputs(purchase_price=120000, monthly_rent=500)) == 7
    assert tenant_risk(_inputs(purchase_price=120000, monthly_rent=400)) == 9
    assert tenant_risk(_inputs(purchase_price=300000, monthly_rent=0)) == 9


def test_zero_price_is_maximal_risk_not_nan():
    scores = calculate_risk_scores(_inputs(purchase_price=0, monthly_rent=1000, annual_maintenance=500))
    assert scores.property_condition == 10
    assert scores.tenant_risk == 10
    for value in scores.model_dump().values():
        assert 1 <= value <= 10


def test_overall_score_of_uniform_fives_is_exactly_five():
    scores = RiskScores(
        market_risk=5, financial_risk=5, property_condition=5, location_risk=5, tenant_risk=5
    )
    assert calculate_overall_risk_score(scores) == 5


def test_overall_score_with_custom_weights():
    scores = RiskScores(
        market_risk=8, financial_risk=2, property_condition=5, location_risk=5, tenant_risk=5
    )
    assert calculate_overall_risk_score(scores, {"market_risk": 1.0}) == 8
    assert calculate_overall_risk_score(scores) == pytest.approx(0.25 * 8 + 0.3 * 2 + 0.45 * 5)


def test_breakdown_contributions_add_up():
    scores = calculate_risk_scores(
        _inputs(purchase_price=300000, monthly_rent=2000, monthly_hoa=50, annual_maintenance=1000),
        _comps(280000, 320000),
    )
    breakdown = build_risk_breakdown(scores)
    assert [item.name for item in breakdown][0] == "Market Risk"
    assert sum(item.contribution for item in breakdown) == pytest.approx(calculate_overall_risk_score(scores))


def test_risk_level_bands():
    assert risk_level(1) == "Low Risk"
    assert risk_level(3) == "Low Risk"
    assert risk_level(3.01) == "Moderate Risk"
    assert risk_level(6) == "Moderate Risk"
    assert risk_level(6.01) == "High Risk"
