# quotation_generator/services/quotation_document.py
import os
import logging
from io import BytesIO
from xml.sax.saxutils import escape

from flask import current_app, has_app_context
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from werkzeug.security import safe_join

from .aggregation import TAX_RATE, to_decimal
from .formatting import format_date, format_money

logger = logging.getLogger(__name__)


def _local_logo_path(logo_url):
    """Only logos kept in the local uploads folder are embedded."""
    if not logo_url or not logo_url.startswith('/uploads/') or not has_app_context():
        return None
    path = safe_join(current_app.config.get('UPLOAD_FOLDER', 'uploads'), logo_url[len('/uploads/'):])
    return path if path and os.path.isfile(path) else None


def _company_block(settings, styles):
    elements = []
    logo_path = _local_logo_path(settings.logo_url) if settings else None
    if logo_path:
        elements.append(Image(logo_path, width=1.5 * inch, height=0.75 * inch, kind='proportional'))
        elements.append(Spacer(1, 0.1 * inch))

    if settings:
        elements.append(Paragraph(escape(settings.name), styles['Heading2']))
        for line in (settings.address, settings.phone, settings.email):
            if line:
                elements.append(Paragraph(escape(line), styles['Normal']))
    return elements


def render_quotation_pdf(quotation, settings=None):
    """
    Build the printable quotation as PDF bytes.

    ``settings`` is the CompanySettings row; when absent the header carries
    only the quotation number.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=54,
        leftMargin=54,
        topMargin=54,
        bottomMargin=54,
        title=f"Quotation #{quotation.id}",
    )

    styles = getSampleStyleSheet()
    small = ParagraphStyle('Small', parent=styles['Normal'], fontSize=9, leading=12)
    currency = quotation.currency

    elements = _company_block(settings, styles)
    elements.append(Spacer(1, 0.25 * inch))
    elements.append(Paragraph(f"Quotation #{quotation.id}", styles['Title']))
    elements.append(Paragraph(f"<b>Quotation Date:</b> {format_date(quotation.date)}", styles['Normal']))
    elements.append(Paragraph(f"<b>Valid Until:</b> {format_date(quotation.valid_until)}", styles['Normal']))
    elements.append(Paragraph(f"<b>Status:</b> {quotation.status.upper()}", styles['Normal']))
    elements.append(Spacer(1, 0.25 * inch))

    customer = quotation.customer
    elements.append(Paragraph("Bill To", styles['Heading3']))
    if customer:
        elements.append(Paragraph(escape(customer.name), styles['Normal']))
        if customer.company:
            elements.append(Paragraph(escape(customer.company), styles['Normal']))
        for line in (customer.address, customer.email, customer.phone):
            if line:
                elements.append(Paragraph(escape(line), styles['Normal']))
    if quotation.project:
        elements.append(Spacer(1, 0.1 * inch))
        elements.append(Paragraph(f"<b>Project:</b> {escape(quotation.project.name)}", styles['Normal']))
    elements.append(Spacer(1, 0.25 * inch))

    rows = [["Item", "Description", "Qty", "Price", "Amount"]]
    for item in quotation.line_items:
        amount = to_decimal(item.price) * to_decimal(item.quantity)
        rows.append([
            Paragraph(escape(item.name or ''), small),
            Paragraph(escape(item.description or ''), small),
            f"{to_decimal(item.quantity).normalize():f}",
            format_money(item.price, currency),
            format_money(amount, currency),
        ])
    rows.append(["", "", "", "Subtotal", format_money(quotation.subtotal, currency)])
    rows.append(["", "", "", f"Tax ({int(TAX_RATE * 100)}%)", format_money(quotation.tax, currency)])
    rows.append(["", "", "", "Total", format_money(quotation.total, currency)])

    table = Table(rows, colWidths=[1.6 * inch, 2.4 * inch, 0.6 * inch, 1.1 * inch, 1.2 * inch], repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LINEBELOW', (0, 0), (-1, 0), 1, colors.black),
        ('LINEABOVE', (3, -3), (-1, -3), 0.5, colors.grey),
        ('FONTNAME', (3, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (3, -1), (-1, -1), 1, colors.black),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 0.3 * inch))

    if quotation.terms:
        elements.append(Paragraph("Terms &amp; Conditions", styles['Heading3']))
        for line in quotation.terms.splitlines():
            elements.append(Paragraph(escape(line), small))
        elements.append(Spacer(1, 0.2 * inch))

    elements.append(Paragraph("Notes", styles['Heading3']))
    elements.append(Paragraph(escape(quotation.notes or 'No additional notes.'), small))

    doc.build(elements)
    logger.info(f"Rendered quotation {quotation.id} document ({len(rows) - 4} items)")
    return buffer.getvalue()
