from datetime import datetime, timezone
from typing import Any, Dict

from ..models.property import MONEY_FIELDS, PropertyInputs
from ..utils.coerce import to_float, to_int, to_number, to_str

CAMEL_KEYS = {
    "purchasePrice": "purchase_price",
    "marketValue": "market_value",
    "monthlyRent": "monthly_rent",
    "monthlyHoa": "monthly_hoa",
    "annualTaxes": "annual_taxes",
    "annualInsurance": "annual_insurance",
    "annualMaintenance": "annual_maintenance",
    "managementFees": "management_fees",
    "createdAt": "created_at",
}


def _snake(r: Dict[str, Any]) -> Dict[str, Any]:
    return {CAMEL_KEYS.get(key, key): value for key, value in r.items()}


def map_property_row(r: Dict[str, Any]) -> Dict[str, Any]:
    r = _snake(r)
    row: Dict[str, Any] = {
        "id": to_int(r.get("id")),
        "postcode": to_str(r.get("postcode")).strip(),
        "market_value": to_float(r.get("market_value")),
        "created_at": r.get("created_at") or datetime.now(timezone.utc),
    }
    for field in MONEY_FIELDS:
        row[field] = to_number(r.get(field))
    return row


def map_property_inputs(r: Dict[str, Any]) -> PropertyInputs:
    row = map_property_row(r)
    row.pop("id", None)
    row.pop("created_at", None)
    return PropertyInputs(**row)


def map_shared_report_row(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "share_id": to_str(r.get("share_id") or r.get("shareId")),
        "property_data": r.get("property_data") or r.get("propertyData") or {},
        "created_at": r.get("created_at") or r.get("createdAt"),
        "expires_at": r.get("expires_at") or r.get("expiresAt"),
    }
