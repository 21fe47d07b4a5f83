"""LLM interface for property valuation insights using Gemini."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import google.generativeai as genai

from ..models.analysis import PropertyDetails
from ..utils.formatting import format_currency, format_percentage
from ..utils.logging import get_logger

LOGGER = get_logger("services.insights_llm")

REQUIRED_KEYS = {
    "marketValueEstimate",
    "confidenceScore",
    "keyFactors",
    "recommendations",
    "marketTrends",
    "riskAssessment",
    "comparableProperties",
}

INSIGHTS_FALLBACK = os.getenv("INSIGHTS_FALLBACK", "true").strip().lower() not in {"0", "false", "no", "off"}


class InsightsError(RuntimeError):
    """Raised when insights cannot be generated and the fallback is disabled."""


SYSTEM_PROMPT = "You are a professional real estate analyst specializing in property valuation and market analysis."

INSIGHTS_PROMPT = """Analyze this real estate property and provide detailed insights:
Property Details:
- Price: {price}
- Monthly Rent: {rent}
- Location: {location}
- Type: {property_type}
- Size: {square_footage} sq ft
- Year Built: {year_built}
- Bedrooms: {bedrooms}
- Bathrooms: {bathrooms}
- Condition: {condition}

Provide a comprehensive analysis including:
1. Estimated market value range and confidence score
2. Key factors affecting valuation
3. Investment recommendations
4. Market trends in the area
5. Risk assessment
6. Comparable properties analysis

Return STRICT JSON with the following structure:
{{
  "marketValueEstimate": "string with value range",
  "confidenceScore": number between 0 and 1,
  "keyFactors": array of strings,
  "recommendations": array of strings,
  "marketTrends": "string describing trends",
  "riskAssessment": "string with risk analysis",
  "comparableProperties": "string with comparables info"
}}"""


class InsightsLLM:
    def __init__(self, model: Optional[str] = None, fallback: Optional[bool] = None) -> None:
        self.fallback = INSIGHTS_FALLBACK if fallback is None else fallback
        self.api_key = os.getenv("GOOGLE_API_KEY")
        preferred = model or os.getenv("LLM_MODEL") or "gemini-2.5-flash"
        self.model_name = preferred.split("/", 1)[-1] if preferred.startswith("models/") else preferred
        self._model = None
        if self.api_key:
            try:
                genai.configure(api_key=self.api_key)
                self._model = genai.GenerativeModel(self.model_name, system_instruction=SYSTEM_PROMPT)
            except Exception as exc:
                LOGGER.warning("Failed to initialise Gemini client: %s", exc)
                self._model = None

    @property
    def available(self) -> bool:
        return self._model is not None

    def generate(self, details: PropertyDetails | Dict[str, Any]) -> Dict[str, Any]:
        details = self._ensure_model(details)
        if not self._model:
            if not self.fallback:
                raise InsightsError("Gemini is not configured and the insights fallback is disabled")
            return self._fallback_insights(details)
        prompt = INSIGHTS_PROMPT.format(
            price=format_currency(details.purchase_price),
            rent=format_currency(details.monthly_rent),
            location=details.location or "unknown",
            property_type=details.property_type,
            square_footage=details.square_footage,
            year_built=details.year_built,
            bedrooms=details.bedrooms,
            bathrooms=details.bathrooms,
            condition=details.property_condition,
        )
        try:
            response = self._model.generate_content(
                prompt,
                generation_config={"temperature": 0.3, "response_mime_type": "application/json"},
            )
            payload = self._load_json(self._extract_text(response))
            if not self._validate_payload(payload):
                raise ValueError("Invalid JSON payload returned by Gemini")
            return payload
        except Exception as exc:
            LOGGER.warning("Gemini insights failed: %s", exc)
            if not self.fallback:
                raise InsightsError(str(exc)) from exc
            return self._fallback_insights(details)

    def _fallback_insights(self, details: PropertyDetails) -> Dict[str, Any]:
        price = details.purchase_price
        annual_rent = details.monthly_rent * 12
        gross_yield = (annual_rent / price) * 100 if price else None
        if price:
            estimate = f"{format_currency(price * 0.95)} - {format_currency(price * 1.05)}"
        else:
            estimate = "insufficient data"

        key_factors = [
            f"Gross rental yield of {format_percentage(gross_yield)}",
            f"{details.bedrooms} bed / {details.bathrooms} bath, {details.square_footage:,.0f} sq ft",
            f"Built {details.year_built}, condition: {details.property_condition}",
        ]
        if gross_yield is None:
            recommendation = "Enter a purchase price to evaluate rental yield."
        elif gross_yield >= 8:
            recommendation = "Yield is strong relative to price; verify expenses and vacancy assumptions."
        elif gross_yield >= 5:
            recommendation = "Yield is moderate; negotiate on price or look for rent upside."
        else:
            recommendation = "Yield is thin; the deal depends on appreciation rather than cash flow."

        return {
            "marketValueEstimate": estimate,
            "confidenceScore": 0.3 if price else 0.0,
            "keyFactors": key_factors,
            "recommendations": [recommendation, "Compare against recent sales in the same postcode."],
            "marketTrends": "Market trend data unavailable; AI insights are not configured.",
            "riskAssessment": "Heuristic estimate only; see the risk score breakdown for detail.",
            "comparableProperties": f"Use saved properties in {details.location or 'this postcode'} as comparables.",
        }

    def _ensure_model(self, details: PropertyDetails | Dict[str, Any]) -> PropertyDetails:
        if isinstance(details, PropertyDetails):
            return details
        return PropertyDetails.model_validate(details)

    def _extract_text(self, response: Any) -> str:
        if hasattr(response, "text") and response.text:
            return response.text
        if hasattr(response, "candidates"):
            for candidate in response.candidates:
                if candidate.content.parts:
                    return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))
        raise ValueError("Empty response from Gemini")

    def _load_json(self, text: str) -> Dict[str, Any]:
        text = text.strip()
        start = text.find("{")
        end = text.rfind("}")
        if start >= 0 and end >= 0:
            text = text[start : end + 1]
        return json.loads(text)

    def _validate_payload(self, data: Dict[str, Any]) -> bool:
        return (
            isinstance(data, dict)
            and REQUIRED_KEYS.issubset(data.keys())
            and isinstance(data.get("keyFactors"), list)
            and isinstance(data.get("recommendations"), list)
        )
