"""PDF export of property analysis reports."""

from __future__ import annotations

import io
from typing import List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from ..models.analysis import ReportSnapshot
from ..utils.formatting import format_currency, format_percentage
from .scoring import build_risk_breakdown, risk_level

DISCLAIMER = "Heuristic estimates from user-entered figures. Informational only; not financial advice."
HEADING_COLOR = colors.HexColor("#4B5563")

Row = Tuple[str, str]


class PDFService:
    def render(self, snapshot: ReportSnapshot) -> bytes:
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        width, height = A4
        margin = 0.6 * inch

        c.setTitle("Property Analysis Report")
        c.setFont("Helvetica-Bold", 22)
        c.setFillColor(colors.black)
        c.drawString(margin, height - margin - 10, "Property Analysis Report")

        y = height - margin - 40
        y = self._draw_section(c, "Property Details", self._detail_rows(snapshot), width, y, margin)
        y = self._draw_section(c, "Income & Expenses", self._income_rows(snapshot), width, y - 14, margin)
        y = self._draw_section(c, "Performance Metrics", self._performance_rows(snapshot), width, y - 14, margin)
        y = self._draw_section(c, "Risk Analysis", self._risk_rows(snapshot), width, y - 14, margin)
        if snapshot.comparable_properties:
            y = self._draw_section(c, "Comparable Properties", self._comparable_rows(snapshot), width, y - 14, margin)
        if snapshot.ai_insights:
            self._draw_insights(c, snapshot, width, y - 14, margin)

        c.setFont("Helvetica-Oblique", 8)
        c.setFillColor(colors.grey)
        c.drawString(margin, margin / 2, DISCLAIMER)

        c.showPage()
        c.save()
        buffer.seek(0)
        return buffer.read()

    def _detail_rows(self, snapshot: ReportSnapshot) -> List[Row]:
        form = snapshot.form_data
        rows = [
            ("Postcode", form.postcode or "N/A"),
            ("Purchase Price", self._fmt_value(form.purchase_price)),
        ]
        if form.market_value:
            rows.append(("Market Value", self._fmt_value(form.market_value)))
        return rows

    def _income_rows(self, snapshot: ReportSnapshot) -> List[Row]:
        return [
            ("Monthly Rental Income", self._fmt_value(snapshot.form_data.monthly_rent)),
            ("Annual Income", self._fmt_value(snapshot.results.annual_income)),
            ("Annual Expenses", self._fmt_value(snapshot.results.annual_expenses)),
        ]

    def _performance_rows(self, snapshot: ReportSnapshot) -> List[Row]:
        results = snapshot.results
        rows = [
            ("Net Operating Income (NOI)", self._fmt_value(results.noi)),
            (
                "Cap Rate (Purchase Price)",
                format_percentage(results.cap_rate_purchase) if results.cap_rate_purchase else "N/A",
            ),
        ]
        if results.cap_rate_market is not None:
            rows.append(("Cap Rate (Market Value)", format_percentage(results.cap_rate_market)))
        return rows

    def _risk_rows(self, snapshot: ReportSnapshot) -> List[Row]:
        overall = snapshot.overall_risk_score
        rows = [("Overall Risk Score", f"{overall:.1f} - {risk_level(overall)}")]
        for item in build_risk_breakdown(snapshot.risk_scores):
            rows.append((f"{item.name} (weight {item.weight:.2f})", f"{item.score:.1f} - {item.level}"))
        return rows

    def _comparable_rows(self, snapshot: ReportSnapshot) -> List[Row]:
        return [
            (
                f"{format_currency(comp.purchase_price)} at {format_currency(comp.monthly_rent)}/mo",
                format_percentage(comp.cap_rate),
            )
            for comp in snapshot.comparable_properties[:8]
        ]

    def _draw_section(
        self,
        c: canvas.Canvas,
        title: str,
        rows: Sequence[Row],
        width: float,
        top: float,
        margin: float,
    ) -> float:
        c.setFont("Helvetica-Bold", 13)
        c.setFillColor(HEADING_COLOR)
        c.drawString(margin, top - 14, title)
        c.setFont("Helvetica", 10.5)
        c.setFillColor(colors.black)
        row_height = 13
        y = top - 30
        for idx, (label, value) in enumerate(rows):
            self._draw_row_stripe(c, idx, margin, width, y, row_height, x_padding=6)
            c.drawString(margin + 6, y, label)
            c.drawRightString(width - margin - 6, y, value)
            y -= row_height
        return y

    def _draw_insights(self, c: canvas.Canvas, snapshot: ReportSnapshot, width: float, top: float, margin: float) -> None:
        c.setFont("Helvetica-Bold", 13)
        c.setFillColor(HEADING_COLOR)
        c.drawString(margin, top - 14, "AI Insights")
        c.setFont("Helvetica", 10)
        c.setFillColor(colors.black)
        y = top - 30
        for line in self._insight_lines(snapshot, width - 2 * margin):
            if y < margin + 10:
                break
            c.drawString(margin, y, line)
            y -= 12

    def _insight_lines(self, snapshot: ReportSnapshot, text_width: float) -> List[str]:
        insights = snapshot.ai_insights or {}
        lines: List[str] = []
        estimate = insights.get("marketValueEstimate")
        if estimate:
            lines.append(f"Estimated value: {estimate}")
        for item in (insights.get("recommendations") or [])[:3]:
            lines.extend(self._wrap_text(f"- {item}", text_width))
        assessment = insights.get("riskAssessment")
        if assessment:
            lines.extend(self._wrap_text(f"Risk: {assessment}", text_width))
        return lines

    def _draw_row_stripe(
        self,
        c: canvas.Canvas,
        row_index: int,
        margin: float,
        width: float,
        baseline: float,
        row_height: float,
        *,
        x_padding: float = 0.0,
        y_padding: float = 3.0,
    ) -> None:
        """Shade every other row to create alternating horizontal stripes."""
        if row_index % 2 != 0:
            return
        stripe_y = baseline - row_height + y_padding + 6
        stripe_width = width - 2 * margin - 2 * x_padding
        if stripe_width <= 0:
            return
        c.saveState()
        c.setFillColor(colors.HexColor("#F3F4F6"))
        c.rect(margin + x_padding, stripe_y, stripe_width, row_height, stroke=0, fill=1)
        c.restoreState()

    def _fmt_value(self, value: Optional[float]) -> str:
        if value is None:
            return "N/A"
        return format_currency(value)

    def _wrap_text(self, text: str, width: float, char_width: float = 5.5) -> List[str]:
        max_chars = max(20, int(width / char_width))
        words = text.split()
        lines: List[str] = []
        current: List[str] = []
        for word in words:
            tentative = " ".join(current + [word])
            if len(tentative) > max_chars and current:
                lines.append(" ".join(current))
                current = [word]
            else:
                current.append(word)
        if current:
            lines.append(" ".join(current))
        return lines
