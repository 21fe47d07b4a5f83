import math
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Response
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repo import get_repository
from .models.analysis import (
    AnalysisResponse,
    AnalyzeRequest,
    LoanAnalysis,
    LoanRequest,
    PropertyDetails,
    ReportSnapshot,
    ROIProjection,
    ROIRequest,
    SharedReport,
    ShareRequest,
    ShareResponse,
    TaxProjection,
    TaxRequest,
)
from .models.property import Property, PropertyCreate
from .services.analysis_service import AnalysisService
from .services.insights_llm import InsightsError, InsightsLLM
from .services.pdf_service import PDFService
from .services.projections import analyze_loan, project_property_tax, project_roi
from .utils.logging import get_logger

LOGGER = get_logger("api")

SHARE_TTL_DAYS = int(os.getenv("SHARE_TTL_DAYS", "30"))

app = FastAPI(title="Cap Rate Calculator API")
router = APIRouter(prefix="/api")
insights = InsightsLLM()
pdf_service = PDFService()


def _sanitize(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _sanitize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize(item) for item in value]
    return value


def _analysis_service() -> AnalysisService:
    return AnalysisService(get_repository())


def _pdf_response(snapshot: ReportSnapshot, filename: str) -> Response:
    pdf_bytes = pdf_service.render(snapshot)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


@router.get("/health")
def health(): return {"status": "ok", "insights": "gemini" if insights.available else "fallback"}


# ---------------------------------------------------------------------------
# Properties
@router.post("/properties", response_model=Property)
def create_property(body: PropertyCreate):
    row = get_repository().create_property(body.model_dump())
    return Property(**row)


@router.get("/properties", response_model=List[Property])
def list_properties():
    return [Property(**row) for row in get_repository().list_properties()]


@router.get("/properties/postcode/{postcode}", response_model=List[Property])
def properties_by_postcode(postcode: str):
    return [Property(**row) for row in get_repository().get_properties_by_postcode(postcode)]


@router.get("/properties/{property_id}/analysis", response_model=AnalysisResponse)
def property_analysis(property_id: int):
    try:
        return _analysis_service().analyze_stored(property_id)
    except ValueError:
        raise HTTPException(404, detail="Property not found")


@router.post("/properties/insights")
def property_insights(details: PropertyDetails):
    try:
        payload = insights.generate(details)
    except InsightsError as exc:
        LOGGER.error("insights_failed error=%s", exc)
        raise HTTPException(502, detail="Failed to generate property insights")
    return jsonable_encoder(_sanitize(payload))


@router.post("/analyze", response_model=AnalysisResponse)
def analyze(req: AnalyzeRequest):
    return _analysis_service().analyze(req.subject, req.comparables, req.ai_insights)


# ---------------------------------------------------------------------------
# Shared reports
@router.post("/reports/share", response_model=ShareResponse)
def share_report(req: ShareRequest):
    expires_at = datetime.now(timezone.utc) + timedelta(days=SHARE_TTL_DAYS)
    report = get_repository().create_shared_report(_sanitize(req.property_data), expires_at)
    return ShareResponse(share_id=report["share_id"])


def _load_shared_report(share_id: str) -> SharedReport:
    row = get_repository().get_shared_report(share_id)
    if not row:
        raise HTTPException(404, detail="Report not found")
    report = SharedReport(**row)
    expires_at = report.expires_at
    if expires_at is not None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            LOGGER.info("shared_report_expired share_id=%s expires_at=%s", share_id, expires_at.isoformat())
            raise HTTPException(410, detail="Report has expired")
    return report


@router.get("/reports/share/{share_id}", response_model=SharedReport)
def get_shared_report(share_id: str):
    return _load_shared_report(share_id)


@router.get("/reports/share/{share_id}/pdf")
def shared_report_pdf(share_id: str):
    report = _load_shared_report(share_id)
    try:
        snapshot = ReportSnapshot.model_validate(report.property_data)
    except ValidationError as exc:
        raise HTTPException(422, detail=f"Shared report is not a calculation snapshot: {exc.error_count()} errors")
    return _pdf_response(snapshot, f"property_report_{share_id}.pdf")


@router.post("/reports/pdf")
def report_pdf(snapshot: ReportSnapshot):
    return _pdf_response(snapshot, "property_report.pdf")


# ---------------------------------------------------------------------------
# Investment tools
@router.post("/tools/loan", response_model=LoanAnalysis)
def loan_tool(req: LoanRequest):
    return analyze_loan(req)


@router.post("/tools/roi", response_model=ROIProjection)
def roi_tool(req: ROIRequest):
    return project_roi(req)


@router.post("/tools/tax", response_model=TaxProjection)
def tax_tool(req: TaxRequest):
    return project_property_tax(req)


app.include_router(router)
