"""Printable QR sticker sheets (A4) rendered with reportlab."""

from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, PageBreak

from app.services.identifier_service import build_activation_url
from app.services.sticker_layout import DEFAULT_COLUMNS, DEFAULT_ROWS
from app.services.unit_factory import DEFAULT_PUBLIC_BASE_URL

PAGE_MARGIN = 10 * mm
HEADER_HEIGHT = 8 * mm
FRAME_PADDING = 6  # SimpleDocTemplate frame padding, points per side


def _qr_drawing(data: str, size: float) -> Drawing:
    """Vector QR code scaled to a size x size square."""
    widget = QrCodeWidget(data)
    x1, y1, x2, y2 = widget.getBounds()
    width, height = x2 - x1, y2 - y1
    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(widget)
    return drawing


def _sticker_grid_size(columns: int, rows: int):
    page_width, page_height = A4
    usable_width = page_width - 2 * PAGE_MARGIN - 2 * FRAME_PADDING
    usable_height = page_height - 2 * PAGE_MARGIN - HEADER_HEIGHT - 2 * FRAME_PADDING
    # 1pt slack so rounding never pushes the table off the frame
    return usable_width / columns, (usable_height - 1) / rows


def _draw_header(batch_number: str, product_name: Optional[str]):
    def on_first_page(canvas, doc):
        page_width, page_height = A4
        canvas.saveState()
        canvas.setFont('Helvetica-Bold', 12)
        canvas.drawCentredString(page_width / 2, page_height - PAGE_MARGIN, f"QR Codes - Batch: {batch_number}")
        if product_name:
            canvas.setFont('Helvetica', 10)
            canvas.drawCentredString(page_width / 2, page_height - PAGE_MARGIN - 4 * mm, product_name)
        canvas.restoreState()
    return on_first_page


def render_stickers_pdf(
    pages: List[Dict[str, Any]],
    batch_number: str,
    product_name: Optional[str] = None,
    base_url: str = DEFAULT_PUBLIC_BASE_URL,
    columns: int = DEFAULT_COLUMNS,
    rows: int = DEFAULT_ROWS
) -> BytesIO:
    """
    Render pages produced by sticker_layout.layout_for_print.

    Each sticker holds the QR code of the unit's activation URL, its serial
    key and the product name. Returns a buffer positioned at 0.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=PAGE_MARGIN,
        leftMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN + HEADER_HEIGHT,
        bottomMargin=PAGE_MARGIN,
        title=f"QR Codes - Batch {batch_number}",
    )

    styles = getSampleStyleSheet()
    serial_style = ParagraphStyle(
        'StickerSerial',
        parent=styles['Normal'],
        fontName='Helvetica-Bold',
        fontSize=8,
        leading=10,
        alignment=TA_CENTER
    )
    product_style = ParagraphStyle(
        'StickerProduct',
        parent=styles['Normal'],
        fontSize=6,
        leading=7,
        alignment=TA_CENTER,
        textColor=colors.HexColor('#34495E')
    )

    cell_width, cell_height = _sticker_grid_size(columns, rows)
    qr_size = min(cell_width, cell_height) * 0.6
    product_label = escape(product_name) if product_name else None

    elements = []
    for index, page in enumerate(pages):
        table_data = []
        for row in page['rows']:
            cells = []
            for unit in row:
                cell = [
                    _qr_drawing(build_activation_url(unit.qr_token, base_url), qr_size),
                    Paragraph(escape(unit.serial_key), serial_style),
                ]
                if product_label:
                    cell.append(Paragraph(product_label, product_style))
                cells.append(cell)
            cells.extend([''] * (columns - len(cells)))
            table_data.append(cells)

        table = Table(table_data, colWidths=[cell_width] * columns, rowHeights=[cell_height] * len(table_data))
        table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#C8C8C8')),
        ]))
        elements.append(table)
        if index < len(pages) - 1:
            elements.append(PageBreak())

    if not elements:
        elements.append(Paragraph('No units generated for this batch yet.', styles['Normal']))

    header = _draw_header(batch_number, product_name)
    doc.build(elements, onFirstPage=header)
    buffer.seek(0)
    return buffer
