"""Assemble calculation snapshots for a property and its comparables."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..db.mappers import map_property_inputs
from ..models.analysis import (
    AnalysisResponse,
    ComparableProperty,
    ComparableSummary,
    ReportSnapshot,
    RiskFactorPayload,
)
from ..models.property import PropertyInputs
from ..utils.logging import get_logger
from .calculators import calculate_results
from .scoring import build_risk_breakdown, calculate_overall_risk_score, calculate_risk_scores, risk_level

LOGGER = get_logger("services.analysis")


def analyze_property(
    inputs: PropertyInputs,
    comparables: Optional[Sequence[PropertyInputs]] = None,
    ai_insights: Optional[Dict[str, Any]] = None,
) -> ReportSnapshot:
    """Build the snapshot consumed by report rendering and sharing.

    Comparable cap rates go through ``calculate_results`` exactly like the
    subject property so the two figures are always comparable.
    """

    comparables = list(comparables or [])
    results = calculate_results(inputs)
    comparable_rows = [
        ComparableProperty(
            purchase_price=comp.purchase_price,
            monthly_rent=comp.monthly_rent,
            cap_rate=calculate_results(comp).cap_rate_purchase,
        )
        for comp in comparables
    ]
    risk_scores = calculate_risk_scores(inputs, comparables)
    return ReportSnapshot(
        form_data=inputs,
        results=results,
        comparable_properties=comparable_rows,
        risk_scores=risk_scores,
        overall_risk_score=calculate_overall_risk_score(risk_scores),
        ai_insights=ai_insights,
    )


def comparable_summary(snapshot: ReportSnapshot) -> ComparableSummary:
    cap_rates = np.array([comp.cap_rate for comp in snapshot.comparable_properties], dtype=float)
    if cap_rates.size == 0:
        return ComparableSummary(count=0)
    return ComparableSummary(
        count=int(cap_rates.size),
        average_cap_rate=float(np.mean(cap_rates)),
        median_cap_rate=float(np.median(cap_rates)),
    )


class AnalysisService:
    def __init__(self, repository) -> None:
        self.repository = repository

    def analyze(
        self,
        inputs: PropertyInputs,
        comparables: Optional[Sequence[PropertyInputs]] = None,
        ai_insights: Optional[Dict[str, Any]] = None,
    ) -> AnalysisResponse:
        snapshot = analyze_property(inputs, comparables, ai_insights)
        LOGGER.info(
            "analysis_complete postcode=%s comps=%d overall_risk=%.2f",
            inputs.postcode,
            len(snapshot.comparable_properties),
            snapshot.overall_risk_score,
        )
        return AnalysisResponse(
            snapshot=snapshot,
            risk_level=risk_level(snapshot.overall_risk_score),
            risk_factors=[
                RiskFactorPayload(
                    key=item.key,
                    name=item.name,
                    weight=item.weight,
                    score=item.score,
                    contribution=item.contribution,
                    level=item.level,
                )
                for item in build_risk_breakdown(snapshot.risk_scores)
            ],
            comparable_summary=comparable_summary(snapshot),
        )

    def analyze_stored(self, property_id: int) -> AnalysisResponse:
        row = self.repository.get_property(property_id)
        if not row:
            raise ValueError(f"Property not found: {property_id}")
        inputs = map_property_inputs(row)
        comparables = self.comparables_for(inputs.postcode, exclude_id=property_id)
        return self.analyze(inputs, comparables)

    def comparables_for(self, postcode: str, exclude_id: Optional[int] = None) -> List[PropertyInputs]:
        if not postcode:
            return []
        rows = self.repository.get_properties_by_postcode(postcode)
        return [map_property_inputs(row) for row in rows if row.get("id") != exclude_id]


__all__ = ["AnalysisService", "analyze_property", "comparable_summary"]
