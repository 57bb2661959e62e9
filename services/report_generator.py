# services/report_generator.py

from datetime import date, datetime, time, timezone
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from supabase import Client

from core.logging_config import get_logger
from core.utils import format_brl, format_date_br, to_money, utcnow
from models.enums import ReportType

logger = get_logger("reports")

REPORT_SELECT = (
    "*, condominium:condominiums(id, name, cnpj, address), supplier:suppliers(id, name)"
)

STATUS_LABELS = {
    "open": "Aberta",
    "in_progress": "Em Andamento",
    "completed": "Concluída",
}

TYPE_LABELS = {
    "monthly": "Mensal",
    "quarterly": "Trimestral",
    "yearly": "Anual",
    "custom": "Personalizado",
}


# ============================================================
# Period
# ============================================================
def resolve_period(
    report_type: ReportType,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Explicit dates win. Otherwise: monthly → 1st of this month,
    quarterly → 1st day of this quarter, yearly → 1 January; end is today.
    """
    today = today or utcnow().date()

    if start_date and end_date:
        return start_date, end_date

    if report_type == ReportType.custom:
        raise ValueError("Custom reports require start_date and end_date")

    if report_type == ReportType.quarterly:
        default_start = date(today.year, ((today.month - 1) // 3) * 3 + 1, 1)
    elif report_type == ReportType.yearly:
        default_start = date(today.year, 1, 1)
    else:
        default_start = date(today.year, today.month, 1)

    start = start_date or default_start
    end = end_date or today
    if start > end:
        raise ValueError("start_date must be before or equal to end_date")
    return start, end


def period_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """UTC timestamps covering the whole of both days."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


# ============================================================
# Aggregation
# ============================================================
def request_value(row: Dict[str, Any]) -> float:
    """Final value when set, else the estimate, else 0."""
    return row.get("final_value") or row.get("estimated_value") or 0


def summarize_requests(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    total = len(rows)
    total_value = sum(request_value(r) for r in rows)

    by_type: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        value = request_value(row)
        for stype in row.get("service_types") or []:
            entry = by_type.setdefault(stype, {"count": 0, "value": 0.0})
            entry["count"] += 1
            entry["value"] += value

    return {
        "total_maintenance": total,
        "completed_maintenance": sum(1 for r in rows if r.get("status") == "completed"),
        "total_value": to_money(total_value),
        "average_value": to_money(total_value / total) if total else 0.0,
        "maintenance_by_type": {
            k: {"count": v["count"], "value": to_money(v["value"])} for k, v in by_type.items()
        },
    }


def fetch_report_rows(
    client: Client,
    user_id: str,
    start: date,
    end: date,
    condominium_ids: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    start_at, end_at = period_bounds(start, end)

    query = (
        client.table("maintenance_requests")
        .select(REPORT_SELECT)
        .eq("user_id", user_id)
        .gte("opening_date", start_at.isoformat())
        .lte("opening_date", end_at.isoformat())
    )
    if condominium_ids:
        query = query.in_("condominium_id", condominium_ids)

    result = query.order("opening_date", desc=True).execute()
    return result.data or []


def build_report_data(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """jsonb payload stored on the report row."""
    data = summarize_requests(rows)
    data["maintenance_requests"] = rows
    data["generated_at"] = utcnow().isoformat()
    return data


# ============================================================
# PDF
# ============================================================
def pdf_filename(day: Optional[date] = None) -> str:
    day = day or utcnow().date()
    return f"relatorio-manutencoes-{day.isoformat()}.pdf"


def _table(rows: List[List[Any]], col_widths=None) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563eb")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
    ]))
    return table


def generate_pdf_bytes(report: Dict[str, Any]) -> bytes:
    """
    Render a saved report (title, type, start_date, end_date, data) as an A4 PDF.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=report.get("title") or "Relatório de Manutenções",
    )
    styles = getSampleStyleSheet()
    cell = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=18,
        textColor=colors.HexColor("#1a1a1a"),
        spaceAfter=6,
        alignment=TA_CENTER,
    )

    data = report.get("data") or {}
    story = []

    story.append(Paragraph(report.get("title") or "Relatório de Manutenções", title_style))
    period = (
        f"Período: {format_date_br(report.get('start_date'))} a "
        f"{format_date_br(report.get('end_date'))}"
    )
    report_type = TYPE_LABELS.get(str(report.get("type") or ""), "")
    if report_type:
        period += f" ({report_type})"
    story.append(Paragraph(period, styles["Normal"]))
    story.append(Spacer(1, 0.5 * cm))

    # Summary
    story.append(Paragraph("Resumo", styles["Heading2"]))
    story.append(_table([
        ["Indicador", "Valor"],
        ["Total de manutenções", str(data.get("total_maintenance", 0))],
        ["Manutenções concluídas", str(data.get("completed_maintenance", 0))],
        ["Valor total", format_brl(data.get("total_value"))],
        ["Valor médio", format_brl(data.get("average_value"))],
    ], col_widths=[9 * cm, 8 * cm]))
    story.append(Spacer(1, 0.5 * cm))

    # By service type
    by_type = data.get("maintenance_by_type") or {}
    if by_type:
        story.append(Paragraph("Por tipo de serviço", styles["Heading2"]))
        rows = [["Tipo de serviço", "Quantidade", "Valor"]]
        for stype, totals in sorted(by_type.items(), key=lambda kv: kv[1].get("count", 0), reverse=True):
            rows.append([stype, str(totals.get("count", 0)), format_brl(totals.get("value"))])
        story.append(_table(rows, col_widths=[8 * cm, 4 * cm, 5 * cm]))
        story.append(Spacer(1, 0.5 * cm))

    # Requests
    requests = data.get("maintenance_requests") or []
    story.append(Paragraph("Manutenções", styles["Heading2"]))
    if not requests:
        story.append(Paragraph("Nenhuma manutenção no período.", styles["Normal"]))
    else:
        rows = [["Título", "Condomínio", "Fornecedor", "Status", "Abertura", "Valor"]]
        for row in requests:
            condominium = row.get("condominium") or {}
            supplier = row.get("supplier") or {}
            rows.append([
                Paragraph(row.get("title") or "", cell),
                Paragraph(condominium.get("name") or "-", cell),
                Paragraph(supplier.get("name") or "-", cell),
                STATUS_LABELS.get(row.get("status"), row.get("status") or ""),
                format_date_br(row.get("opening_date")),
                format_brl(request_value(row)),
            ])
        story.append(_table(
            rows,
            col_widths=[4.5 * cm, 3.5 * cm, 3 * cm, 2.3 * cm, 2 * cm, 2.7 * cm],
        ))

    story.append(Spacer(1, 0.5 * cm))
    generated = data.get("generated_at") or utcnow().isoformat()
    story.append(Paragraph(f"Gerado em {format_date_br(generated)}", styles["Normal"]))

    doc.build(story)
    buffer.seek(0)
    logger.info(f"Rendered report PDF ({len(requests)} requests)")
    return buffer.read()
