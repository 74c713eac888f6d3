"""PDF documents (ReportLab): receipts, admission letters, forms, report cards.

All renderers return PDF bytes. Every page shares the same header: optional
logo, school name and address, document title, rule line.
"""

from dataclasses import dataclass
from datetime import date
from io import BytesIO
import json
import logging
import os
from typing import Any

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode import qr as rl_qr
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from school_portal.settings import Settings

logger = logging.getLogger("uvicorn.error")

PAGE_WIDTH, PAGE_HEIGHT = A4
BRAND = colors.HexColor("#1e3a8a")
MUTED = colors.HexColor("#475569")
ROW_ALT = colors.HexColor("#f8fafc")
ROW_BORDER = colors.HexColor("#e2e8f0")


@dataclass
class ReceiptData:
    receipt_type: str
    student_name: str
    amount: str
    reference: str
    date: str
    reg_no: str | None = None
    term: str | None = None
    session: str | None = None

    def qr_payload(self) -> str:
        payload = {
            "t": self.receipt_type,
            "name": self.student_name,
            "amt": self.amount,
            "ref": self.reference,
            "dt": self.date,
            "reg": self.reg_no or "",
            "term": self.term or "",
            "session": self.session or "",
        }
        return json.dumps(payload, separators=(",", ":"))


def format_amount(amount: float | int | str) -> str:
    """Thousands-separated amount without trailing .00 on whole numbers."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return str(amount)
    return f"{value:,.0f}" if value.is_integer() else f"{value:,.2f}"


def today_label() -> str:
    return date.today().strftime("%d/%m/%Y")


def _header(c: canvas.Canvas, settings: Settings, title: str, subtitle: str | None = None) -> float:
    """Draw the shared header. Returns the y coordinate where content may start."""
    c.setFillColor(colors.HexColor("#fafafa"))
    c.rect(0, PAGE_HEIGHT - 45 * mm, PAGE_WIDTH, 45 * mm, fill=1, stroke=0)

    if settings.logo_path and os.path.exists(settings.logo_path):
        try:
            c.drawImage(
                settings.logo_path,
                15 * mm,
                PAGE_HEIGHT - 37 * mm,
                width=28 * mm,
                height=28 * mm,
                preserveAspectRatio=True,
                mask="auto",
            )
        except Exception:
            logger.warning("Logo could not be loaded for PDF")

    center = PAGE_WIDTH / 2 + 10 * mm
    c.setFillColor(BRAND)
    c.setFont("Helvetica-Bold", 14 if len(settings.school_name) > 35 else 16)
    c.drawCentredString(center, PAGE_HEIGHT - 18 * mm, settings.school_name.upper())

    c.setFillColor(MUTED)
    c.setFont("Helvetica", 9)
    c.drawCentredString(center, PAGE_HEIGHT - 25 * mm, settings.school_address)

    c.setFillColor(colors.black)
    c.setFont("Helvetica-Bold", 12)
    c.drawCentredString(center, PAGE_HEIGHT - 35 * mm, title.upper())
    if subtitle:
        c.setFont("Helvetica", 10)
        c.drawCentredString(center, PAGE_HEIGHT - 41 * mm, subtitle)

    c.setStrokeColor(BRAND)
    c.setLineWidth(0.5)
    c.line(15 * mm, PAGE_HEIGHT - 45 * mm, PAGE_WIDTH - 15 * mm, PAGE_HEIGHT - 45 * mm)
    return PAGE_HEIGHT - 55 * mm


def _draw_qr(c: canvas.Canvas, text: str, x: float, y: float, size: float) -> None:
    widget = rl_qr.QrCodeWidget(text)
    b = widget.getBounds()
    w = b[2] - b[0]
    h = b[3] - b[1]
    d = Drawing(size, size, transform=[size / w, 0, 0, size / h, 0, 0])
    d.add(widget)
    renderPDF.draw(d, c, x, y)


def _finish(c: canvas.Canvas, buf: BytesIO) -> bytes:
    c.showPage()
    c.save()
    data = buf.getvalue()
    buf.close()
    return data


def render_receipt(data: ReceiptData, settings: Settings) -> bytes:
    """Payment receipt with a QR code carrying the receipt fields."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Receipt {data.reference}")
    y_start = _header(c, settings, data.receipt_type)

    # Watermark
    c.saveState()
    c.setFillColor(colors.HexColor("#f0f0f0"))
    c.setFont("Helvetica-Bold", 60)
    c.translate(PAGE_WIDTH / 2, PAGE_HEIGHT / 2 - 20 * mm)
    c.rotate(45)
    c.drawCentredString(0, 0, "OFFICIAL RECEIPT")
    c.restoreState()

    # Content box
    box_top = y_start - 5 * mm
    c.setStrokeColor(colors.HexColor("#c8c8c8"))
    c.roundRect(15 * mm, box_top - 100 * mm, 180 * mm, 100 * mm, 3 * mm, fill=0, stroke=1)

    x_label = 25 * mm
    x_value = 85 * mm
    y = box_top - 15 * mm

    def line(label: str, value: str | None) -> None:
        nonlocal y
        c.setFillColor(colors.black)
        c.setFont("Helvetica-Bold", 11)
        c.drawString(x_label, y, label)
        c.setFont("Helvetica", 11)
        c.drawString(x_value, y, value or "N/A")
        c.setStrokeColor(colors.HexColor("#f0f0f0"))
        c.line(x_label, y - 4 * mm, 185 * mm, y - 4 * mm)
        y -= 12 * mm

    line("Transaction Date:", data.date)
    line("Payment Reference:", data.reference)
    line("Student Name:", data.student_name.upper())
    if data.reg_no:
        line("Registration No:", data.reg_no)
    if data.session:
        line("Academic Session:", data.session)
    if data.term:
        line("Academic Term:", data.term)

    # Amount highlight
    y -= 5 * mm
    c.setFillColor(BRAND)
    c.rect(x_label - 5 * mm, y - 4 * mm, 170 * mm, 12 * mm, fill=1, stroke=0)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(x_label, y, "TOTAL AMOUNT PAID:")
    c.drawRightString(180 * mm, y, f"NGN {data.amount}")

    # Footer
    footer_y = box_top - 115 * mm
    c.setFillColor(colors.HexColor("#646464"))
    c.setFont("Helvetica-Oblique", 9)
    c.drawCentredString(PAGE_WIDTH / 2, footer_y, "This is a computer-generated receipt. No signature is required.")
    c.drawCentredString(
        PAGE_WIDTH / 2,
        footer_y - 5 * mm,
        f"For inquiries: {settings.school_email} | {settings.school_phone}",
    )

    size = 32 * mm
    _draw_qr(c, data.qr_payload(), PAGE_WIDTH - 15 * mm - size, footer_y - 45 * mm, size)
    c.setFont("Helvetica", 7.5)
    c.drawRightString(PAGE_WIDTH - 15 * mm, footer_y - 48 * mm, "Scan to verify receipt details")

    # Border
    c.setStrokeColor(BRAND)
    c.setLineWidth(1)
    c.rect(5 * mm, 5 * mm, 200 * mm, 287 * mm)
    return _finish(c, buf)


def render_admission_letter(student: dict[str, Any], settings: Settings, session: str) -> bytes:
    """Offer of admission for a newly approved student."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    y = _header(c, settings, "Offer of Provisional Admission", f"Session: {session}")

    c.setFont("Helvetica", 11)
    c.drawString(20 * mm, y, f"Date: {today_label()}")
    y -= 12 * mm
    c.drawString(20 * mm, y, f"Dear {student.get('full_name', '')},")
    y -= 10 * mm

    paragraphs = [
        f"We are pleased to offer you provisional admission into {student.get('class_level', '')} "
        f"of {settings.school_name} for the {session} academic session.",
        "Please keep your registration number and portal PIN safe. You will need them to view "
        "results and download fee receipts on the student portal.",
        "This offer is subject to payment of school fees and verification of your documents.",
    ]
    text = c.beginText(20 * mm, y)
    text.setFont("Helvetica", 11)
    text.setLeading(15)
    for paragraph in paragraphs:
        for chunk in _wrap(paragraph, 90):
            text.textLine(chunk)
        text.textLine("")
    c.drawText(text)
    y = text.getY() - 5 * mm

    c.setFont("Helvetica-Bold", 11)
    for label, value in (
        ("Registration No:", student.get("reg_number")),
        ("Portal PIN:", student.get("pin")),
        ("Class:", student.get("class_level")),
    ):
        c.drawString(20 * mm, y, label)
        c.setFont("Helvetica", 11)
        c.drawString(70 * mm, y, str(value or "N/A"))
        c.setFont("Helvetica-Bold", 11)
        y -= 8 * mm

    y -= 20 * mm
    c.drawString(20 * mm, y, "__________________________")
    c.drawString(20 * mm, y - 6 * mm, "Principal")

    size = 28 * mm
    _draw_qr(
        c,
        json.dumps({"t": "admission", "reg": student.get("reg_number"), "name": student.get("full_name")}),
        PAGE_WIDTH - 20 * mm - size,
        y - 10 * mm,
        size,
    )
    return _finish(c, buf)


def _wrap(text: str, width: int) -> list[str]:
    words = text.split()
    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if len(candidate) > width and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def render_application_form(application: dict[str, Any], settings: Settings) -> bytes:
    """Printable copy of a submitted application."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    y_start = _header(
        c,
        settings,
        "Application for Admission",
        f"Ref: {application.get('payment_reference') or 'N/A'}",
    )

    # Photo placeholder
    c.setStrokeColor(colors.black)
    c.rect(160 * mm, y_start - 15 * mm, 30 * mm, 30 * mm)
    c.setFont("Helvetica", 9)
    c.drawCentredString(175 * mm, y_start, "Paste Photo")

    y = y_start - 25 * mm
    left = 20 * mm

    def section(title: str) -> None:
        nonlocal y
        y -= 5 * mm
        c.setFillColor(colors.HexColor("#f0f0f0"))
        c.rect(left, y - 2 * mm, 170 * mm, 6 * mm, fill=1, stroke=0)
        c.setFillColor(colors.black)
        c.setFont("Helvetica-Bold", 10)
        c.drawString(left + 2 * mm, y, title.upper())
        y -= 8 * mm

    def field(label: str, value: Any) -> None:
        nonlocal y
        c.setFont("Helvetica-Bold", 10)
        c.drawString(left, y, f"{label}:")
        c.setFont("Helvetica", 10)
        lines = _wrap(str(value or "N/A"), 60) or ["N/A"]
        for i, chunk in enumerate(lines):
            c.drawString(left + 50 * mm, y - i * 5 * mm, chunk)
        y -= max(10 * mm, len(lines) * 5 * mm)
        c.setStrokeColor(colors.HexColor("#c8c8c8"))
        c.line(left, y + 6 * mm, 190 * mm, y + 6 * mm)

    section("Student Information")
    field("Full Name", application.get("full_name"))
    field("Gender", application.get("gender"))
    field("Date of Birth", application.get("date_of_birth"))
    field("Class Applied", application.get("class_applied"))
    field("Special Needs", application.get("special_needs") or "None")

    section("Academic History")
    field("Previous School", application.get("last_school"))
    field("Islamiyya School", application.get("islamiyya_school"))
    field("Graduation Year", application.get("graduation_year"))

    section("Guardian Information")
    field("Guardian Name", application.get("parent_name"))
    field("Occupation", application.get("parent_occupation"))
    field("Phone Number", application.get("phone"))
    field("Email Address", application.get("email"))
    field("Residential Address", application.get("address"))

    y -= 20 * mm
    c.setFont("Helvetica", 10)
    c.drawString(20 * mm, y, "__________________________")
    c.drawString(140 * mm, y, "__________________________")
    c.drawString(20 * mm, y - 5 * mm, "Guardian Signature")
    c.drawString(140 * mm, y - 5 * mm, "School Official")
    return _finish(c, buf)


REPORT_COLUMNS: list[tuple[str, float]] = [
    ("SUBJECT", 65 * mm),
    ("CA", 20 * mm),
    ("EXAM", 20 * mm),
    ("TOTAL", 20 * mm),
    ("GRADE", 20 * mm),
    ("REMARK", 35 * mm),
]


def _fmt_score(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return str(int(number)) if number.is_integer() else f"{number:g}"


def render_report_card(result: dict[str, Any], student: dict[str, Any], settings: Settings) -> bytes:
    """Term report card: subject table plus performance summary."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    y = _header(c, settings, "Term Report Card") - 5 * mm

    def pair(label: str, value: Any, x_label: float, x_value: float, y_pos: float) -> None:
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x_label, y_pos, label)
        c.setFont("Helvetica", 10)
        c.drawString(x_value, y_pos, str(value or ""))

    pair("Student Name:", student.get("full_name"), 15 * mm, 45 * mm, y)
    pair("Reg No:", student.get("reg_number"), 130 * mm, 160 * mm, y)
    pair("Class:", result.get("class_level") or student.get("class_level"), 15 * mm, 45 * mm, y - 6 * mm)
    pair("Term:", f"{result.get('term', '')} {result.get('session', '')}", 130 * mm, 160 * mm, y - 6 * mm)
    y -= 15 * mm

    start_x = 15 * mm
    row_h = 8 * mm
    table_w = sum(w for _, w in REPORT_COLUMNS)

    # Header row
    c.setFillColor(BRAND)
    c.rect(start_x, y - row_h, table_w, row_h, fill=1, stroke=0)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 9)
    x = start_x
    for title, width in REPORT_COLUMNS:
        c.drawCentredString(x + width / 2, y - 5.5 * mm, title)
        x += width
    y -= row_h

    c.setFont("Helvetica", 9)
    for i, line in enumerate(result.get("scores") or []):
        c.setFillColor(ROW_ALT if i % 2 == 0 else colors.white)
        c.setStrokeColor(ROW_BORDER)
        c.rect(start_x, y - row_h, table_w, row_h, fill=1, stroke=1)
        c.setFillColor(colors.black)
        cells = [
            str(line.get("subject", "")),
            _fmt_score(line.get("ca")),
            _fmt_score(line.get("exam")),
            _fmt_score(line.get("total")),
            str(line.get("grade", "")),
            str(line.get("remark", "")),
        ]
        x = start_x
        for j, ((_, width), value) in enumerate(zip(REPORT_COLUMNS, cells)):
            if j == 0:
                c.drawString(x + 2 * mm, y - 5.5 * mm, value)
            else:
                c.drawCentredString(x + width / 2, y - 5.5 * mm, value)
            x += width
        y -= row_h

    # Summary
    y -= 5 * mm
    c.setFillColor(colors.HexColor("#f1f5f9"))
    c.setStrokeColor(colors.black)
    c.rect(start_x, y - 20 * mm, table_w, 20 * mm, fill=1, stroke=1)
    c.setFillColor(colors.black)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(start_x + 5 * mm, y - 6 * mm, "PERFORMANCE SUMMARY")
    c.drawString(start_x + 5 * mm, y - 14 * mm, f"Total: {_fmt_score(result.get('total_score'))}")
    c.drawString(start_x + 50 * mm, y - 14 * mm, f"Avg: {_fmt_score(result.get('average'))}")
    if result.get("position"):
        population = result.get("class_population")
        label = f"Position: {result['position']}" + (f" of {population}" if population else "")
        c.drawString(start_x + 95 * mm, y - 14 * mm, label)

    y -= 30 * mm
    c.setFont("Helvetica", 10)
    for label, key in (("Teacher's Comment:", "teacher_comment"), ("Principal's Comment:", "principal_comment")):
        if result.get(key):
            c.setFont("Helvetica-Bold", 10)
            c.drawString(start_x, y, label)
            c.setFont("Helvetica", 10)
            for k, chunk in enumerate(_wrap(str(result[key]), 80)):
                c.drawString(start_x + 40 * mm, y - k * 5 * mm, chunk)
            y -= 15 * mm
    if result.get("next_term_begins"):
        c.drawString(start_x, y, f"Next term begins: {result['next_term_begins']}")

    return _finish(c, buf)
