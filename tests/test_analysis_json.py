import json

import pytest

from capcalc.db.repo import Repo
from capcalc.models.analysis import ReportSnapshot
from capcalc.models.property import PropertyInputs
from capcalc.services.analysis_service import AnalysisService, analyze_property, comparable_summary
from capcalc.services.calculators import calculate_results


def _subject() -> PropertyInputs:
    return PropertyInputs(
        postcode="78701",
        purchasePrice=300000,
        monthlyRent=2000,
        monthlyHoa=50,
        annualTaxes=3600,
        annualInsurance=1200,
        annualMaintenance=1000,
        managementFees=1200,
    )


def _comparables():
    return [
        PropertyInputs(postcode="78701", purchasePrice=280000, monthlyRent=1900, annualTaxes=3000),
        PropertyInputs(postcode="78701", purchasePrice=320000, monthlyRent=2100, annualTaxes=3900, monthlyHoa=100),
    ]


def test_snapshot_contains_required_fields():
    snapshot = analyze_property(_subject(), _comparables())
    data = json.loads(snapshot.model_dump_json(by_alias=True))
    assert set(data) == {
        "formData",
        "results",
        "comparableProperties",
        "riskScores",
        "overallRiskScore",
        "aiInsights",
    }
    assert data["formData"]["purchasePrice"] == 300000
    assert data["results"]["noi"] == 16400
    assert set(data["riskScores"]) == {"marketRisk", "financialRisk", "propertyCondition", "locationRisk", "tenantRisk"}
    assert set(data["comparableProperties"][0]) == {"purchasePrice", "monthlyRent", "capRate"}


def test_snapshot_round_trips_through_json():
    snapshot = analyze_property(_subject(), _comparables(), ai_insights={"marketTrends": "flat", "keyFactors": ["a"]})
    restored = ReportSnapshot.model_validate(json.loads(snapshot.model_dump_json(by_alias=True)))
    assert restored == snapshot
    assert restored.ai_insights == {"marketTrends": "flat", "keyFactors": ["a"]}


def test_comparable_cap_rates_use_same_formula():
    comps = _comparables()
    snapshot = analyze_property(_subject(), comps)
    for row, comp in zip(snapshot.comparable_properties, comps):
        assert row.cap_rate == calculate_results(comp).cap_rate_purchase
        assert row.purchase_price == comp.purchase_price


def test_no_comparables_means_moderate_market_risk():
    snapshot = analyze_property(_subject())
    assert snapshot.risk_scores.market_risk == 5
    assert snapshot.comparable_properties == []
    assert snapshot.results.cap_rate_purchase == pytest.approx(5.4667, abs=1e-4)
    assert snapshot.overall_risk_score == pytest.approx(0.25 * 5 + 0.3 * 1 + 0.15 * (10 / 3) + 0.15 * 5 + 0.15 * 5)


def test_zero_rent_gives_poor_tenant_score():
    subject = _subject().model_copy(update={"monthly_rent": 0})
    snapshot = analyze_property(subject)
    assert snapshot.risk_scores.tenant_risk == 9


def test_comparable_summary():
    snapshot = analyze_property(_subject(), _comparables())
    summary = comparable_summary(snapshot)
    rates = [row.cap_rate for row in snapshot.comparable_properties]
    assert summary.count == 2
    assert summary.average_cap_rate == pytest.approx(sum(rates) / 2)
    assert summary.median_cap_rate == pytest.approx(sum(rates) / 2)
    assert comparable_summary(analyze_property(_subject())).count == 0


def test_service_uses_same_postcode_comparables():
    repo = Repo(mode="memory", seed=False)
    subject = repo.create_property(_subject().model_dump())
    repo.create_property(_comparables()[0].model_dump())
    repo.create_property({"postcode": "90210", "purchase_price": 2000000})
    service = AnalysisService(repo)
    analysis = service.analyze_stored(subject["id"])
    assert analysis.comparable_summary.count == 1
    assert analysis.snapshot.comparable_properties[0].purchase_price == 280000
    assert analysis.risk_level in {"Low Risk", "Moderate Risk", "High Risk"}
    assert [factor.key for factor in analysis.risk_factors][-1] == "tenant_risk"


def test_service_unknown_property():
    service = AnalysisService(Repo(mode="memory", seed=False))
    with pytest.raises(ValueError):
        service.analyze_stored(999)
