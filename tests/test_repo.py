from datetime import datetime, timedelta, timezone

from capcalc.db.mappers import map_property_inputs
from capcalc.db.repo import Repo


def test_seed_from_csv_loads_sample_properties():
    repo = Repo(mode="memory", seed=False)
    count = repo.seed_from_csv("properties.csv")
    assert count == 4
    austin = repo.get_properties_by_postcode("78701")
    assert len(austin) == 3
    assert all(row["postcode"] == "78701" for row in austin)
    without_market_value = [row for row in austin if row["market_value"] is None]
    assert len(without_market_value) == 1


def test_missing_seed_file_is_skipped():
    repo = Repo(mode="memory", seed=False)
    assert repo.seed_from_csv("no_such_file.csv") == 0
    assert repo.list_properties() == []


def test_properties_listed_newest_first():
    repo = Repo(mode="memory", seed=False)
    first = repo.create_property({"postcode": "10001", "purchasePrice": "100000"})
    second = repo.create_property({"postcode": "10001", "purchasePrice": 200000})
    assert [row["id"] for row in repo.list_properties()] == [second["id"], first["id"]]
    assert repo.get_property(first["id"])["purchase_price"] == 100000
    assert repo.get_property(12345) is None


def test_rows_map_to_calculator_inputs():
    inputs = map_property_inputs({"postcode": " 10001 ", "monthlyRent": "1500", "annualTaxes": None, "marketValue": "n/a"})
    assert inputs.postcode == "10001"
    assert inputs.monthly_rent == 1500
    assert inputs.annual_taxes == 0
    assert inputs.market_value is None


def test_shared_reports_store_payload_and_expiry():
    repo = Repo(mode="memory", seed=False)
    expires = datetime.now(timezone.utc) + timedelta(days=30)
    created = repo.create_shared_report({"overallRiskScore": 4.2}, expires)
    fetched = repo.get_shared_report(created["share_id"])
    assert fetched["property_data"] == {"overallRiskScore": 4.2}
    assert fetched["expires_at"] == expires
    assert repo.get_shared_report("missing") is None


def test_unknown_mode_falls_back_to_memory():
    repo = Repo(mode="postgres", seed=False)
    assert repo.mode == "memory"
