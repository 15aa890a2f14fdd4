"""PDF report exporters (ReportLab).

Three reports share one page layout:
    - expense report (summary page + detail pages)
    - T2125 report (line table + CRA notes)
    - reimbursement report (client / category breakdown + detail pages)

Every page gets the branded header band, an optional DRAFT watermark and a
footer with the generation date and "Page X of Y". The page total is only
known once the story is laid out, so footers are drawn by a canvas that
defers page output until save().
"""

from __future__ import annotations

import io
import logging
from functools import partial
from xml.sax.saxutils import escape
from typing import TYPE_CHECKING, List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    NextPageTemplate,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from evofinz.services.exports.base import (
    MEDIA_TYPES,
    ExportArtifact,
    ExportOptions,
    dated_filename,
    require_expenses,
)
from evofinz.services.exports.reimbursement_export import reimbursement_filename
from evofinz.services.exports.t2125_export import t2125_filename
from evofinz.services.money import format_currency, format_rate
from evofinz.services.reimbursements import ReimbursementReport
from evofinz.services.tax_rules import T2125_FORM_URL, category_label, status_label
from evofinz.services.tax_summary import (
    build_t2125_report,
    calculate_summary,
    filter_by_year,
    monthly_totals,
)

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

logger = logging.getLogger("evofinz.exports")

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 14 * mm
HEADER_HEIGHT = 40 * mm
FOOTER_HEIGHT = 22 * mm

INDIGO = colors.HexColor("#4F46E5")
INDIGO_LIGHT = colors.HexColor("#635AFF")
BLUE = colors.HexColor("#3B82F6")
GREEN = colors.HexColor("#10B981")
AMBER = colors.HexColor("#F59E0B")
RED = colors.HexColor("#EF4444")
VIOLET = colors.HexColor("#8B5CF6")
MUTED = colors.HexColor("#808080")

PDF_TRANSLATIONS = {
    "es": {
        "expense_report": "REPORTE DE GASTOS",
        "t2125_report": "REPORTE T2125 - CRA",
        "reimbursement_report": "REPORTE DE REEMBOLSOS",
        "detail_title": "DETALLE DE GASTOS",
        "executive_summary": "RESUMEN EJECUTIVO",
        "business_expenses": "RESUMEN DE GASTOS DE NEGOCIO",
        "category_breakdown": "Desglose por Categoría",
        "client_breakdown": "Desglose por Cliente",
        "monthly_breakdown": "Desglose por Mes",
        "total_expenses": "Total Gastos",
        "deductible": "Deducible",
        "reimbursable": "Reembolsable",
        "non_deductible": "No Deducible",
        "total_gross": "Total Bruto",
        "total_deductible": "Total Deducible",
        "hst_gst_paid": "HST/GST Pagado",
        "itc_claimable": "ITC Reclamable",
        "total_to_bill": "Total a Facturar",
        "processed_expenses": "Gastos Procesados",
        "avg_per_expense": "Promedio por Gasto",
        "active_clients": "Clientes Activos",
        "category": "Categoría",
        "quantity": "Cant.",
        "total": "Total",
        "rate": "Tasa",
        "date": "Fecha",
        "vendor": "Proveedor",
        "status": "Estado",
        "amount": "Monto",
        "client": "Cliente",
        "expenses": "Gastos",
        "total_amount": "Monto Total",
        "percent_total": "% del Total",
        "line": "Línea",
        "description": "Descripción",
        "gross_amount": "Monto Bruto",
        "net_deductible": "Deducible",
        "month": "Mes",
        "important_notes": "NOTAS IMPORTANTES",
        "t2125_notes": (
            "• Comidas y entretenimiento (Línea 8523) solo son 50% deducibles según CRA.",
            "• ITC calculado asumiendo HST {hst}. Ajustar según su provincia.",
            "• CCA requiere cálculo separado según la clase del activo.",
            "• Este reporte es solo para referencia. Consulte con un contador profesional.",
        ),
        "t2125_references": "Referencias:",
        "page": "Página",
        "of": "de",
        "generated": "Generado",
        "tagline": "EvoFinz - Gestión Financiera Inteligente",
        "fiscal_year": "Año Fiscal",
        "all_periods": "Todos los períodos",
        "records": "registros",
        "reimbursable_records": "registros reembolsables",
        "draft": "BORRADOR",
        "prepared_by": "Preparado por",
        "business_name": "Empresa",
        "generated_on": "Generado el",
        "period": "Período",
        "months": (
            "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio", "Julio",
            "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
        ),
    },
    "en": {
        "expense_report": "EXPENSE REPORT",
        "t2125_report": "T2125 REPORT - CRA",
        "reimbursement_report": "REIMBURSEMENT REPORT",
        "detail_title": "EXPENSE DETAILS",
        "executive_summary": "EXECUTIVE SUMMARY",
        "business_expenses": "BUSINESS EXPENSES SUMMARY",
        "category_breakdown": "Breakdown by Category",
        "client_breakdown": "Breakdown by Client",
        "monthly_breakdown": "Breakdown by Month",
        "total_expenses": "Total Expenses",
        "deductible": "Deductible",
        "reimbursable": "Reimbursable",
        "non_deductible": "Non-Deductible",
        "total_gross": "Gross Total",
        "total_deductible": "Total Deductible",
        "hst_gst_paid": "HST/GST Paid",
        "itc_claimable": "ITC Claimable",
        "total_to_bill": "Total to Bill",
        "processed_expenses": "Processed Expenses",
        "avg_per_expense": "Avg per Expense",
        "active_clients": "Active Clients",
        "category": "Category",
        "quantity": "Qty",
        "total": "Total",
        "rate": "Rate",
        "date": "Date",
        "vendor": "Vendor",
        "status": "Status",
        "amount": "Amount",
        "client": "Client",
        "expenses": "Expenses",
        "total_amount": "Total Amount",
        "percent_total": "% of Total",
        "line": "Line",
        "description": "Description",
        "gross_amount": "Gross Amount",
        "net_deductible": "Deductible",
        "month": "Month",
        "important_notes": "IMPORTANT NOTES",
        "t2125_notes": (
            "• Meals and entertainment (Line 8523) are only 50% deductible per CRA.",
            "• ITC calculated assuming HST {hst}. Adjust for your province.",
            "• CCA requires separate calculation based on asset class.",
            "• This report is for reference only. Consult a professional accountant.",
        ),
        "t2125_references": "References:",
        "page": "Page",
        "of": "of",
        "generated": "Generated",
        "tagline": "EvoFinz - Intelligent Financial Management",
        "fiscal_year": "Fiscal Year",
        "all_periods": "All periods",
        "records": "records",
        "reimbursable_records": "reimbursable records",
        "draft": "DRAFT",
        "prepared_by": "Prepared by",
        "business_name": "Business",
        "generated_on": "Generated on",
        "period": "Period",
        "months": (
            "January", "February", "March", "April", "May", "June", "July",
            "August", "September", "October", "November", "December",
        ),
    },
}


def translations(language: str) -> dict:
    return PDF_TRANSLATIONS.get(language, PDF_TRANSLATIONS["en"])


# ---------------- Page furniture -----------------
class FooterCanvas(canvas.Canvas):
    """Canvas that buffers pages and stamps "Page X of Y" footers on save."""

    def __init__(self, *args, options: ExportOptions, **kwargs):
        super().__init__(*args, **kwargs)
        self._options = options
        self._saved_page_states: List[dict] = []

    def showPage(self):  # noqa: N802
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total_pages: int) -> None:
        t = translations(self._options.language)
        self.saveState()
        self.setStrokeColor(colors.HexColor("#C8C8C8"))
        self.line(MARGIN, 18 * mm, PAGE_WIDTH - MARGIN, 18 * mm)
        self.setFont("Helvetica", 8)
        self.setFillColor(MUTED)
        left = f"{t['generated']}: {self._options.generated_at.strftime('%d/%m/%Y %H:%M')}"
        if self._options.user_name:
            left += f" | {t['prepared_by']}: {self._options.user_name}"
        self.drawString(MARGIN, 10 * mm, left)
        self.drawCentredString(
            PAGE_WIDTH / 2,
            10 * mm,
            f"{t['page']} {self._pageNumber} {t['of']} {total_pages}",
        )
        self.drawRightString(PAGE_WIDTH - MARGIN, 10 * mm, t["tagline"])
        self.restoreState()


def _draw_header(
    canv: canvas.Canvas, title: str, subtitle: Optional[str], options: ExportOptions
) -> None:
    canv.saveState()
    top = PAGE_HEIGHT
    canv.setFillColor(INDIGO)
    canv.rect(0, top - HEADER_HEIGHT, PAGE_WIDTH, HEADER_HEIGHT, stroke=0, fill=1)
    canv.setFillColor(INDIGO_LIGHT)
    canv.rect(0, top - 2 * mm, PAGE_WIDTH, 2 * mm, stroke=0, fill=1)

    # Phoenix mark: three stacked circles
    for radius, offset, color in (
        (10, 20, "#FBBF24"),
        (6, 18, "#F97316"),
        (3, 16, "#EF4444"),
    ):
        canv.setFillColor(colors.HexColor(color))
        canv.circle(22 * mm, top - offset * mm, radius * mm, stroke=0, fill=1)

    canv.setFillColor(colors.white)
    canv.setFont("Helvetica-Bold", 18)
    canv.drawString(38 * mm, top - 18 * mm, title)
    if subtitle:
        canv.setFont("Helvetica", 10)
        canv.drawString(38 * mm, top - 28 * mm, subtitle)

    canv.setFont("Helvetica-Bold", 12)
    canv.drawString(PAGE_WIDTH - 35 * mm, top - 15 * mm, "EvoFinz")
    canv.setFont("Helvetica", 7)
    canv.drawString(
        PAGE_WIDTH - 35 * mm,
        top - 22 * mm,
        "Chile" if options.country == "CL" else "Canada",
    )
    if options.business_name:
        canv.setFont("Helvetica", 8)
        canv.drawString(PAGE_WIDTH - 35 * mm, top - 30 * mm, options.business_name)
    canv.restoreState()


def _draw_watermark(canv: canvas.Canvas, options: ExportOptions) -> None:
    if not options.is_draft:
        return
    canv.saveState()
    canv.setFont("Helvetica-Bold", 60)
    canv.setFillColor(colors.HexColor("#C8C8C8"))
    canv.translate(PAGE_WIDTH / 2, PAGE_HEIGHT / 2)
    canv.rotate(45)
    canv.drawCentredString(0, 0, translations(options.language)["draft"])
    canv.restoreState()


def _page_template(
    template_id: str, title: str, subtitle: Optional[str], options: ExportOptions
) -> PageTemplate:
    frame = Frame(
        MARGIN,
        FOOTER_HEIGHT,
        PAGE_WIDTH - 2 * MARGIN,
        PAGE_HEIGHT - HEADER_HEIGHT - FOOTER_HEIGHT - 8 * mm,
        id=f"{template_id}-frame",
    )

    def on_page(canv, doc):
        _draw_header(canv, title, subtitle, options)
        _draw_watermark(canv, options)

    return PageTemplate(id=template_id, frames=[frame], onPage=on_page)


def _build_pdf(
    story: list, templates: Sequence[PageTemplate], options: ExportOptions
) -> bytes:
    buffer = io.BytesIO()
    doc = BaseDocTemplate(buffer, pagesize=A4, title="EvoFinz", author="EvoFinz")
    doc.addPageTemplates(list(templates))
    doc.build(story, canvasmaker=partial(FooterCanvas, options=options))
    return buffer.getvalue()


# ---------------- Flowables -----------------
_styles = getSampleStyleSheet()


def _section_title(text: str, color=colors.black, size: int = 11) -> Paragraph:
    style = ParagraphStyle(
        f"section-{size}",
        parent=_styles["Heading2"],
        fontName="Helvetica-Bold",
        fontSize=size,
        leading=size + 4,
        textColor=color,
        spaceBefore=6,
        spaceAfter=4,
    )
    return Paragraph(text, style)


def _small(text: str) -> Paragraph:
    style = ParagraphStyle(
        "note", parent=_styles["Normal"], fontSize=8, leading=11, textColor=MUTED
    )
    return Paragraph(text, style)


def _info_box(options: ExportOptions) -> Optional[Table]:
    if not (options.user_name or options.business_name):
        return None
    t = translations(options.language)
    left: List[str] = []
    if options.business_name:
        left.append(f"<b>{t['business_name']}:</b> {escape(options.business_name)}")
    if options.user_name:
        left.append(f"<b>{t['prepared_by']}:</b> {escape(options.user_name)}")
    right = (
        f"<b>{t['generated_on']}:</b> {options.generated_at.strftime('%d/%m/%Y')}"
    )
    box = Table(
        [[_small("<br/>".join(left)), _small(right)]],
        colWidths=[(PAGE_WIDTH - 2 * MARGIN) * 0.6, (PAGE_WIDTH - 2 * MARGIN) * 0.4],
    )
    box.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#F8FAFC")),
                ("BOX", (0, 0), (-1, -1), 0.5, colors.HexColor("#C8C8C8")),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    return box


def _kpi_boxes(kpis: Sequence[tuple]) -> Table:
    """Row of coloured boxes: (label, value, colour)."""
    label_style = ParagraphStyle(
        "kpi-label",
        parent=_styles["Normal"],
        fontSize=7,
        alignment=1,
        textColor=colors.white,
    )
    value_style = ParagraphStyle(
        "kpi-value",
        parent=_styles["Normal"],
        fontName="Helvetica-Bold",
        fontSize=10,
        leading=13,
        alignment=1,
        textColor=colors.white,
    )
    row = [
        [Paragraph(label, label_style), Paragraph(value, value_style)]
        for label, value, _ in kpis
    ]
    table = Table([row], colWidths=[42 * mm] * len(kpis))
    commands = [
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]
    for idx, (_, _, color) in enumerate(kpis):
        commands.append(("BACKGROUND", (idx, 0), (idx, 0), color))
    table.setStyle(TableStyle(commands))
    return table


def _data_table(
    head: Sequence[str],
    body: Sequence[Sequence[str]],
    widths: Sequence[float],
    header_color,
    *,
    body_size: int = 8,
    align: Optional[dict] = None,
    highlight_last: Optional[colors.Color] = None,
) -> Table:
    table = Table([list(head)] + [list(r) for r in body], colWidths=[w * mm for w in widths], repeatRows=1)
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), header_color),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), body_size),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F5F5F5")]),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for col, how in (align or {}).items():
        commands.append(("ALIGN", (col, 0), (col, -1), how))
    if highlight_last is not None and body:
        commands += [
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("BACKGROUND", (0, -1), (-1, -1), highlight_last),
        ]
    table.setStyle(TableStyle(commands))
    return table


def _clip(text: Optional[str], length: int) -> str:
    return (text or "")[:length]


# ---------------- Expense report -----------------
def render_expenses_pdf(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    lang = options.language
    t = translations(lang)
    rows = filter_by_year(expenses, options.year)
    require_expenses(rows, lang)
    money = partial(format_currency, country=options.country)

    summary = calculate_summary(rows)
    months = monthly_totals(rows)

    subtitle = options.subtitle or (
        f"{t['fiscal_year']}: {options.year}" if options.year else t["all_periods"]
    )
    templates = [
        _page_template("summary", options.title or t["expense_report"], subtitle, options),
        _page_template("detail", t["detail_title"], f"{len(rows)} {t['records']}", options),
    ]

    story: list = []
    info = _info_box(options)
    if info is not None:
        story += [info, Spacer(1, 4 * mm)]
    story.append(_section_title(t["executive_summary"], INDIGO, 12))
    story.append(
        _kpi_boxes(
            [
                (t["total_expenses"], money(summary.total_expenses), BLUE),
                (t["deductible"], money(summary.total_deductible), GREEN),
                (t["reimbursable"], money(summary.total_reimbursable), AMBER),
                (t["non_deductible"], money(summary.total_non_deductible), RED),
            ]
        )
    )
    story.append(Spacer(1, 6 * mm))

    story.append(_section_title(t["category_breakdown"]))
    category_rows = [
        [
            category_label(category, lang),
            str(data.count),
            money(data.total),
            money(data.deductible),
            format_rate(data.deductible / data.total) if data.total else "0%",
        ]
        for category, data in sorted(
            summary.by_category.items(), key=lambda item: item[1].total, reverse=True
        )
    ]
    story.append(
        _data_table(
            [t["category"], t["quantity"], t["total"], t["deductible"], t["rate"]],
            category_rows,
            (50, 18, 32, 32, 22),
            INDIGO,
            align={1: "CENTER", 2: "RIGHT", 3: "RIGHT", 4: "CENTER"},
        )
    )

    if options.group_by == "month" or len(months) > 1:
        story.append(Spacer(1, 6 * mm))
        story.append(_section_title(t["monthly_breakdown"]))
        month_rows = []
        for item in months:
            year, month = item.month.split("-")
            month_rows.append(
                [f"{t['months'][int(month) - 1]} {year}", str(item.count), money(item.total)]
            )
        story.append(
            _data_table(
                [t["month"], t["expenses"], t["total"]],
                month_rows,
                (60, 30, 40),
                VIOLET,
                align={1: "CENTER", 2: "RIGHT"},
            )
        )

    story += [NextPageTemplate("detail"), PageBreak()]
    detail_rows = [
        [
            e.date.isoformat(),
            _clip(e.vendor, 20),
            category_label(e.category or "other", lang),
            status_label(e.status or "pending", lang),
            money(float(e.amount)),
            _clip(e.client_name, 15) or "-",
        ]
        for e in rows
    ]
    story.append(
        _data_table(
            [t["date"], t["vendor"], t["category"], t["status"], t["amount"], t["client"]],
            detail_rows,
            (22, 35, 35, 28, 28, 30),
            INDIGO,
            body_size=7,
            align={4: "RIGHT"},
        )
    )

    content = _build_pdf(story, templates, options)
    base = "gastos" if lang == "es" else "expenses"
    if options.year:
        base = f"{base}_{options.year}"
    logger.info("pdf expense report generated", extra={"records": len(rows)})
    return ExportArtifact(
        filename=dated_filename(base, "pdf", options),
        media_type=MEDIA_TYPES["pdf"],
        content=content,
    )


# ---------------- T2125 report -----------------
def render_t2125_pdf(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    lang = options.language
    t = translations(lang)
    report = build_t2125_report(expenses, year=options.year, hst_rate=options.hst_rate)
    require_expenses(report.deductible_expenses, lang)
    money = partial(format_currency, country=options.country)

    templates = [
        _page_template(
            "t2125",
            t["t2125_report"],
            f"{t['fiscal_year']}: {options.year or t['all_periods']}",
            options,
        )
    ]
    story: list = []
    info = _info_box(options)
    if info is not None:
        story += [info, Spacer(1, 4 * mm)]
    story.append(_section_title(t["business_expenses"], GREEN, 12))
    story.append(
        _kpi_boxes(
            [
                (t["total_gross"], money(report.total_gross), BLUE),
                (t["total_deductible"], money(report.total_deductible), GREEN),
                (t["hst_gst_paid"], money(report.hst_gst_paid), AMBER),
                (t["itc_claimable"], money(report.itc_claimable), VIOLET),
            ]
        )
    )
    story.append(Spacer(1, 6 * mm))
    story.append(_section_title(f"{t['category_breakdown']} T2125"))

    line_rows = [
        [
            line.line,
            _clip(line.name_es if lang == "es" else line.name, 30),
            money(line.gross_amount),
            format_rate(line.deduction_rate),
            money(line.net_deductible),
            str(line.expense_count),
        ]
        for line in report.lines
    ]
    line_rows.append(
        [
            "TOTAL",
            "",
            money(report.total_gross),
            "",
            money(report.total_deductible),
            str(report.deductible_count),
        ]
    )
    story.append(
        _data_table(
            [t["line"], t["description"], t["gross_amount"], t["rate"], t["net_deductible"], t["quantity"]],
            line_rows,
            (18, 55, 30, 18, 30, 18),
            GREEN,
            align={2: "RIGHT", 3: "CENTER", 4: "RIGHT", 5: "CENTER"},
            highlight_last=colors.HexColor("#D1FAE5"),
        )
    )

    story.append(Spacer(1, 8 * mm))
    story.append(_section_title(t["important_notes"], AMBER, 10))
    hst = format_rate(options.hst_rate)
    for note in t["t2125_notes"]:
        story.append(_small(note.format(hst=hst)))
    story.append(Spacer(1, 3 * mm))
    story.append(_small(t["t2125_references"]))
    story.append(_small(f"• T2125: {T2125_FORM_URL}"))

    content = _build_pdf(story, templates, options)
    logger.info(
        "pdf t2125 report generated",
        extra={"year": options.year, "lines": len(report.lines)},
    )
    return ExportArtifact(
        filename=t2125_filename(options.year, "pdf", options),
        media_type=MEDIA_TYPES["pdf"],
        content=content,
    )


# ---------------- Reimbursement report -----------------
def reimbursement_period(report: ReimbursementReport, options: ExportOptions) -> str:
    if report.start_date and report.end_date:
        return (
            f"{report.start_date.strftime('%d/%m/%Y')} - "
            f"{report.end_date.strftime('%d/%m/%Y')}"
        )
    return translations(options.language)["all_periods"]


def render_reimbursement_pdf(
    report: ReimbursementReport, options: ExportOptions
) -> ExportArtifact:
    lang = options.language
    t = translations(lang)
    require_expenses(report.expenses, lang)
    money = partial(format_currency, country=options.country)

    templates = [
        _page_template(
            "summary",
            t["reimbursement_report"],
            f"{t['period']}: {reimbursement_period(report, options)}",
            options,
        ),
        _page_template(
            "detail",
            t["detail_title"],
            f"{report.expense_count} {t['reimbursable_records']}",
            options,
        ),
    ]
    story: list = []
    info = _info_box(options)
    if info is not None:
        story += [info, Spacer(1, 4 * mm)]
    story.append(_section_title(t["executive_summary"], AMBER, 12))
    story.append(
        _kpi_boxes(
            [
                (t["total_to_bill"], money(report.total_reimbursable), GREEN),
                (t["processed_expenses"], str(report.expense_count), BLUE),
                (t["avg_per_expense"], money(report.average_per_expense), AMBER),
                (t["active_clients"], str(len(report.groups)), VIOLET),
            ]
        )
    )
    story.append(Spacer(1, 6 * mm))

    story.append(_section_title(t["client_breakdown"]))
    client_rows = [
        [
            _clip(group.client_name, 25),
            str(group.count),
            money(group.total),
            f"{report.share_of_total(group.total):.1f}%",
        ]
        for group in report.groups
    ]
    client_rows.append(
        ["TOTAL", str(report.expense_count), money(report.total_reimbursable), "100%"]
    )
    story.append(
        _data_table(
            [t["client"], t["expenses"], t["total_amount"], t["percent_total"]],
            client_rows,
            (70, 25, 40, 30),
            AMBER,
            align={1: "CENTER", 2: "RIGHT", 3: "CENTER"},
            highlight_last=colors.HexColor("#FEF3C7"),
        )
    )

    story.append(Spacer(1, 6 * mm))
    story.append(_section_title(t["category_breakdown"]))
    category_rows = [
        [
            category_label(category, lang),
            money(total),
            f"{report.share_of_total(total):.1f}%",
        ]
        for category, total in sorted(
            report.category_totals.items(), key=lambda item: item[1], reverse=True
        )
    ]
    story.append(
        _data_table(
            [t["category"], t["amount"], t["percent_total"]],
            category_rows,
            (80, 45, 35),
            VIOLET,
            align={1: "RIGHT", 2: "CENTER"},
        )
    )

    story += [NextPageTemplate("detail"), PageBreak()]
    detail_rows = [
        [
            e.date.isoformat(),
            _clip(e.client_name, 15) or "-",
            _clip(e.vendor, 18),
            _clip(category_label(e.category or "other", lang), 18),
            money(float(e.amount)),
        ]
        for e in report.expenses
    ]
    story.append(
        _data_table(
            [t["date"], t["client"], t["vendor"], t["category"], t["amount"]],
            detail_rows,
            (24, 35, 40, 45, 30),
            AMBER,
            body_size=7,
            align={4: "RIGHT"},
        )
    )

    content = _build_pdf(story, templates, options)
    logger.info(
        "pdf reimbursement report generated",
        extra={"records": report.expense_count, "clients": len(report.groups)},
    )
    return ExportArtifact(
        filename=reimbursement_filename(report, "pdf", options),
        media_type=MEDIA_TYPES["pdf"],
        content=content,
    )
