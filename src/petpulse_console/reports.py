"""
Tabular PDF reports.

Every export of the console is the same shape: a title, a few context lines,
one grid table with a colored header row, an optional summary block and a
page number in the footer. ``TabularReport`` renders that shape; the builder
functions below fill it for each screen.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .filters import AppointmentSummary, InventoryStats, adoption_summary
from .models.appointment import AppointmentView
from .schemas.adoption import Adoption, Pet
from .schemas.appointment import Appointment
from .schemas.inventory import Product
from .utils.datetime_utils import format_display_date

logger = logging.getLogger(__name__)

# Header fills used by the web console's exports
BLUE = (37, 99, 235)
GREEN = (16, 185, 129)
TEAL = (16, 163, 127)

CLINIC_LINES = (
    "PetPulse - 123 Paws Lane, Colombo 05",
    "Hotline: +94 77 123 4567  |  hello@petpulse.lk",
)

DEFAULT_CURRENCY_LABEL = "Rs."


def _text(value: Any, default: str = "-") -> str:
    if value is None or value == "":
        return default
    return str(value)


def _rgb(color: Tuple[int, int, int]) -> colors.Color:
    red, green, blue = color
    return colors.Color(red / 255, green / 255, blue / 255)


def _money(value: Optional[Decimal], currency_label: str) -> str:
    if value is None:
        return "-"
    return f"{currency_label} {Decimal(value):.2f}"


@dataclass
class TabularReport:
    """A titled grid table rendered to PDF bytes."""

    title: str
    headers: Sequence[str]
    rows: Sequence[Sequence[Any]]
    subtitle_lines: Sequence[str] = field(default_factory=list)
    summary_lines: Sequence[str] = field(default_factory=list)
    header_color: Tuple[int, int, int] = BLUE
    wide: bool = False
    generated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} cells, expected {width}"
                )

    @property
    def pagesize(self) -> Tuple[float, float]:
        return landscape(A4) if self.wide else A4

    def render(self) -> bytes:
        """Build the PDF and return its bytes."""
        buffer = io.BytesIO()
        page_width, _ = self.pagesize
        margin = 0.55 * inch

        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.pagesize,
            rightMargin=margin,
            leftMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=self.title,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ReportTitle", parent=styles["Heading1"], fontSize=18, spaceAfter=6
        )
        meta_style = ParagraphStyle(
            "ReportMeta", parent=styles["Normal"], fontSize=10, spaceAfter=2
        )
        cell_style = ParagraphStyle(
            "ReportCell", parent=styles["Normal"], fontSize=8, leading=10
        )
        head_style = ParagraphStyle(
            "ReportHead",
            parent=cell_style,
            fontName="Helvetica-Bold",
            textColor=colors.white,
        )
        summary_heading = ParagraphStyle(
            "ReportSummaryHeading", parent=styles["Heading2"], fontSize=12
        )

        generated = self.generated_at or datetime.now()
        story: List[Any] = [Paragraph(escape(self.title), title_style)]
        for line in self.subtitle_lines:
            story.append(Paragraph(escape(line), meta_style))
        story.append(
            Paragraph(
                escape(f"Generated: {generated.strftime('%Y-%m-%d %H:%M')}"), meta_style
            )
        )
        story.append(Spacer(1, 0.2 * inch))

        data = [[Paragraph(escape(str(h)), head_style) for h in self.headers]]
        for row in self.rows:
            data.append([Paragraph(escape(_text(cell)), cell_style) for cell in row])

        content_width = page_width - 2 * margin
        col_width = content_width / max(len(self.headers), 1)
        table = Table(data, colWidths=[col_width] * len(self.headers), repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), _rgb(self.header_color)),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("LEFTPADDING", (0, 0), (-1, -1), 4),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 4),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        story.append(table)

        if self.summary_lines:
            story.append(Spacer(1, 0.25 * inch))
            story.append(Paragraph("Summary", summary_heading))
            for line in self.summary_lines:
                story.append(Paragraph(escape(line), meta_style))

        def page_footer(canvas_obj, _doc):
            canvas_obj.saveState()
            canvas_obj.setFont("Helvetica", 9)
            canvas_obj.setFillColor(colors.grey)
            canvas_obj.drawRightString(
                page_width - margin, margin / 2, f"Page {canvas_obj.getPageNumber()}"
            )
            canvas_obj.restoreState()

        doc.build(story, onFirstPage=page_footer, onLaterPages=page_footer)

        pdf_bytes = buffer.getvalue()
        buffer.close()
        logger.info(
            f"Rendered report '{self.title}' ({len(pdf_bytes)} bytes)",
            extra={"rows": len(self.rows)},
        )
        return pdf_bytes

    def save(self, path: Any) -> int:
        """Render into ``path``; returns the number of bytes written."""
        pdf_bytes = self.render()
        with open(path, "wb") as handle:
            handle.write(pdf_bytes)
        return len(pdf_bytes)


def inventory_report(
    products: Iterable[Product],
    stats: Optional[InventoryStats] = None,
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> TabularReport:
    rows = [
        [
            _text(p.name),
            _text(p.category),
            _text(p.sub_category),
            _money(p.price, currency_label),
            _money(p.discount_price, currency_label) if p.discount_price else "-",
            p.quantity,
            format_display_date(p.expiry_date),
            "Active" if p.is_active else "Inactive",
        ]
        for p in products
    ]
    summary: List[str] = []
    if stats is not None:
        summary = [
            f"Total products: {stats.total}",
            f"Low stock: {stats.low_stock}, out of stock: {stats.out_of_stock}",
            f"Near expiry: {stats.near_expiry}",
            f"Inventory value: {_money(stats.total_value, currency_label)}",
        ]
    return TabularReport(
        title="Product Inventory Summary",
        headers=[
            "Product Name",
            "Category",
            "Sub Category",
            "Price",
            "Discount Price",
            "Stock",
            "Expiry Date",
            "Status",
        ],
        rows=rows,
        summary_lines=summary,
    )


def sales_report(
    products: Iterable[Product], currency_label: str = DEFAULT_CURRENCY_LABEL
) -> TabularReport:
    rows = [
        [
            _text(p.name),
            _text(p.category),
            p.quantity,
            _money(p.price, currency_label),
            _money(p.discount_price, currency_label) if p.discount_price else "-",
            f"{p.discount_percent}%" if p.discount_percent is not None else "-",
            format_display_date(p.expiry_date),
        ]
        for p in products
    ]
    return TabularReport(
        title="Sales Report",
        headers=["Product", "Category", "Qty", "Price", "Discount", "Discount %", "Expiry"],
        rows=rows,
    )


def appointments_report(
    appointments: Sequence[Appointment],
    summary: AppointmentSummary,
    view: AppointmentView = AppointmentView.ALL,
    pet_label: str = "All pets",
    query: str = "",
) -> TabularReport:
    """Doctor's appointment export."""
    rows = [
        [
            a.date_iso.isoformat() if a.date_iso else "-",
            a.time_label or "-",
            a.selected_service or "Vet Consultation",
            _text(a.pet_type),
            _text(a.owner_name),
            _text(a.owner_phone),
            a.payment_status,
            a.status,
        ]
        for a in appointments
    ]
    return TabularReport(
        title="Vet Appointments Summary",
        headers=["Date", "Time", "Package", "Pet", "Owner", "Phone", "Payment", "Status"],
        rows=rows,
        subtitle_lines=[
            f"View: {AppointmentView(view).label}   |   Pet: {pet_label}   |   "
            f"Search: {query or '-'}",
            *CLINIC_LINES,
        ],
        summary_lines=summary.lines(),
    )


def caretaker_report(
    appointments: Sequence[Appointment],
    filter_line: str = "All records",
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> TabularReport:
    """Caretaker's grooming and daycare export."""
    rows = [
        [
            a.date_iso.isoformat() if a.date_iso else "-",
            a.time_label or "-",
            _text(a.service),
            a.display_title,
            _text(a.pet_type),
            _text(a.owner_name),
            _text(a.owner_email),
            _text(a.owner_phone),
            a.status,
            a.payment_status,
            f"{Decimal(a.amount or 0):.2f}",
            _text(a.notes),
        ]
        for a in appointments
    ]
    return TabularReport(
        title="Caretaker Appointments Summary",
        headers=[
            "Date",
            "Time",
            "Service",
            "Package",
            "Pet",
            "Owner",
            "Email",
            "Phone",
            "Status",
            "Payment",
            f"Fee ({currency_label})",
            "Notes",
        ],
        rows=rows,
        subtitle_lines=[filter_line, *CLINIC_LINES],
        header_color=GREEN,
        wide=True,
    )


def adoptions_report(
    adoptions: Sequence[Adoption], currency_label: str = DEFAULT_CURRENCY_LABEL
) -> TabularReport:
    rows = []
    for a in adoptions:
        pet = a.pet
        rows.append(
            [
                f"{_text(pet.species if pet else None)} / {_text(pet.breed if pet else None)}",
                _text(a.name, "N/A"),
                _text(a.age, "N/A"),
                _text(a.phone, "N/A"),
                _text(a.occupation, "N/A"),
                _text(a.living_space, "N/A"),
                _text(a.address, "N/A"),
                _money(pet.price if pet else None, currency_label),
                format_display_date(a.requested_on) if a.requested_on else "N/A",
                format_display_date(a.visit) if a.visit else "Not set",
                _text(a.status, "N/A"),
                "Paid" if a.is_paid else "Not Paid",
            ]
        )
    counts = adoption_summary(adoptions)
    return TabularReport(
        title="Adoption Management Summary",
        headers=[
            "Pet",
            "Name",
            "Age",
            "Phone",
            "Occupation",
            "Living Space",
            "Address",
            "Price",
            "Adoption Date",
            "Visit Date",
            "Status",
            "Payment",
        ],
        rows=rows,
        summary_lines=[
            f"Total adoptions: {counts['total']}",
            "By status: "
            + ", ".join(
                f"{status} {counts[status]}"
                for status in ("pending", "approved", "completed", "rejected")
            ),
            f"Paid: {counts['paid']}, not paid: {counts['total'] - counts['paid']}",
        ],
        header_color=TEAL,
        wide=True,
    )


def pets_report(
    pets: Sequence[Pet], currency_label: str = DEFAULT_CURRENCY_LABEL
) -> TabularReport:
    rows = [
        [
            _text(p.species),
            _text(p.breed),
            _text(p.gender),
            _text(p.color),
            f"{p.age} yrs" if p.age else "-",
            f"{p.weight} kg" if p.weight else "-",
            _money(p.price, currency_label),
            _text(p.diet),
            _text(p.medical),
            _text(p.born),
            _text(p.good_with_kids),
            _text(p.good_with_pets),
        ]
        for p in pets
    ]
    return TabularReport(
        title="Pet Management Summary",
        headers=[
            "Species",
            "Breed",
            "Gender",
            "Color",
            "Age",
            "Weight",
            "Price",
            "Diet",
            "Medical",
            "Born",
            "Good with Kids",
            "Good with Pets",
        ],
        rows=rows,
        wide=True,
    )
