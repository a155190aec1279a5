# backend/modules/sales_reports/services/report_renderer.py

"""
Paginated PDF rendering of sales analytics.

Tables are drawn through a ``TableRenderer``. The preferred strategy hands
layout to ReportLab's platypus tables; the manual strategy positions text at
fixed column offsets with the canvas alone. ``ReportRenderer`` chooses the
strategy once per instance and swaps in the manual one for any table the
preferred strategy fails on, so a report always covers every section.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from core.config import settings

from ..constants import (
    FALLBACK_LINE_HEIGHT,
    PAGE_BOTTOM_THRESHOLD,
    PAGE_MARGIN,
    SECTION_MIN_SPACE,
    SECTION_SPACING,
)
from ..exceptions import RenderingCapabilityError
from ..schemas.analytics_schemas import DateRange, ReportConfiguration, SalesAnalytics
from ..utils.formatting import format_date, format_time
from .report_sections import TableSection, build_sections

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}

BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
BODY_FONT_SIZE = 8
HEADING_FONT_SIZE = 13
TITLE_FONT_SIZE = 18
CELL_PADDING = 3
ELLIPSIS = "..."


@dataclass
class PageCursor:
    """Vertical position of the next content on the current page"""

    y: float
    page_count: int = 1


@dataclass(frozen=True)
class PageLayout:
    width: float
    height: float
    margin: float = PAGE_MARGIN
    bottom: float = PAGE_BOTTOM_THRESHOLD

    @property
    def top(self) -> float:
        return self.height - self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    def new_page(self, canvas: Canvas, cursor: PageCursor) -> PageCursor:
        canvas.showPage()
        cursor.y = self.top
        cursor.page_count += 1
        return cursor


@dataclass
class RenderedSection:
    title: str
    renderer: str


@dataclass
class ReportDocument:
    """A rendered report ready to be returned to the user"""

    content: bytes
    page_count: int
    filename: str
    sections: List[RenderedSection] = field(default_factory=list)
    media_type: str = "application/pdf"

    @property
    def section_titles(self) -> List[str]:
        return [section.title for section in self.sections]


class TableRenderer(ABC):
    """Draws one table at the cursor, paginating as needed"""

    name: str = "table"

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def draw_table(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        section: TableSection,
    ) -> PageCursor:
        """Draw ``section`` and return the cursor below it"""
        pass


class PreferredGridRenderer(TableRenderer):
    """Grid tables laid out by ReportLab platypus"""

    name = "grid"

    def __init__(self):
        styles = getSampleStyleSheet()
        self.header_style = ParagraphStyle(
            "GridHeader",
            parent=styles["Normal"],
            fontName=BOLD_FONT,
            fontSize=BODY_FONT_SIZE,
            leading=BODY_FONT_SIZE + 2,
            textColor=colors.whitesmoke,
        )
        self.body_style = ParagraphStyle(
            "GridBody",
            parent=styles["Normal"],
            fontName=BODY_FONT,
            fontSize=BODY_FONT_SIZE,
            leading=BODY_FONT_SIZE + 2,
        )

    def is_available(self) -> bool:
        try:
            probe = Table([["probe"]], colWidths=[60])
            probe.wrap(100, 100)
        except Exception as e:
            logger.warning(f"Grid table layout unavailable: {e}")
            return False
        return True

    def _build_table(self, section: TableSection, layout: PageLayout) -> Table:
        data = [[Paragraph(escape(header), self.header_style) for header in section.headers]]
        data.extend(
            [Paragraph(escape(str(cell)), self.body_style) for cell in row]
            for row in section.rows
        )
        table = Table(
            data,
            colWidths=section.column_widths(layout.content_width),
            repeatRows=1,
        )
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("TOPPADDING", (0, 0), (-1, -1), CELL_PADDING),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), CELL_PADDING),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ]
            )
        )
        return table

    def _plan(
        self, canvas: Canvas, cursor: PageCursor, layout: PageLayout, section: TableSection
    ) -> List[Tuple[Table, float, bool]]:
        """Split the table into page-sized parts before anything is drawn"""
        plan = []
        y = cursor.y
        page_break = False
        pending = [self._build_table(section, layout)]

        while pending:
            part = pending.pop(0)
            available = y - layout.bottom
            _, height = part.wrapOn(canvas, layout.content_width, available)
            if height <= available:
                plan.append((part, height, page_break))
                y -= height
                page_break = False
                continue

            pieces = part.split(layout.content_width, available) if available > 0 else []
            if len(pieces) >= 2:
                first = pieces[0]
                _, first_height = first.wrapOn(canvas, layout.content_width, available)
                plan.append((first, first_height, page_break))
                pending = list(pieces[1:]) + pending
            elif y >= layout.top:
                raise RenderingCapabilityError(
                    self.name, section.title, "row does not fit on an empty page"
                )
            else:
                pending.insert(0, part)
            y = layout.top
            page_break = True

        return plan

    def draw_table(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        section: TableSection,
    ) -> PageCursor:
        for part, height, page_break in self._plan(canvas, cursor, layout, section):
            if page_break:
                layout.new_page(canvas, cursor)
            part.drawOn(canvas, layout.margin, cursor.y - height)
            cursor.y -= height
        return cursor


def truncate_text(text: str, width: float, font: str, size: float) -> str:
    """Shorten ``text`` with an ellipsis until it fits ``width`` points"""
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + ELLIPSIS, font, size) > width:
        text = text[:-1]
    return text + ELLIPSIS if text else ""


class ManualPositionRenderer(TableRenderer):
    """Plain text rows at fixed column offsets, drawn on the canvas directly"""

    name = "manual"

    def __init__(self, line_height: float = FALLBACK_LINE_HEIGHT):
        self.line_height = line_height

    def is_available(self) -> bool:
        return True

    def _draw_row(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        cells: List[str],
        widths: List[float],
        font: str,
    ):
        canvas.setFont(font, BODY_FONT_SIZE)
        baseline = cursor.y - self.line_height + CELL_PADDING
        x = layout.margin
        for cell, width in zip(cells, widths):
            text = truncate_text(str(cell), width - 2 * CELL_PADDING, font, BODY_FONT_SIZE)
            canvas.drawString(x + CELL_PADDING, baseline, text)
            x += width
        cursor.y -= self.line_height

    def draw_table(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        section: TableSection,
    ) -> PageCursor:
        widths = section.column_widths(layout.content_width)

        if cursor.y - 2 * self.line_height < layout.bottom:
            layout.new_page(canvas, cursor)
        self._draw_row(canvas, cursor, layout, section.headers, widths, BOLD_FONT)
        canvas.line(layout.margin, cursor.y, layout.margin + layout.content_width, cursor.y)

        for row in section.rows:
            if cursor.y - self.line_height < layout.bottom:
                layout.new_page(canvas, cursor)
                self._draw_row(canvas, cursor, layout, section.headers, widths, BOLD_FONT)
            self._draw_row(canvas, cursor, layout, row, widths, BODY_FONT)

        return cursor


class ReportRenderer:
    """Renders analytics into a paginated PDF"""

    def __init__(
        self,
        preferred: Optional[TableRenderer] = None,
        fallback: Optional[TableRenderer] = None,
        page_size: Optional[str] = None,
    ):
        self.preferred = preferred or PreferredGridRenderer()
        self.fallback = fallback or ManualPositionRenderer()
        self.page_size = PAGE_SIZES[(page_size or settings.REPORT_PAGE_SIZE).upper()]

        if self.preferred.is_available():
            self.primary = self.preferred
        else:
            logger.warning(
                f"Table renderer '{self.preferred.name}' unavailable; "
                f"using '{self.fallback.name}' for every table"
            )
            self.primary = self.fallback

    def _render_table(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        section: TableSection,
    ) -> Tuple[PageCursor, str]:
        """Single entry point for table drawing; returns the renderer used"""
        if self.primary is not self.fallback:
            try:
                return self.primary.draw_table(canvas, cursor, layout, section), self.primary.name
            except Exception as e:
                # The cursor keeps any pages the failed attempt already emitted
                logger.warning(
                    f"Renderer '{self.primary.name}' failed on section "
                    f"'{section.title}', falling back to '{self.fallback.name}': {e}"
                )
        return self.fallback.draw_table(canvas, cursor, layout, section), self.fallback.name

    def _ensure_space(
        self, canvas: Canvas, cursor: PageCursor, layout: PageLayout, needed: float
    ):
        if cursor.y - needed < layout.bottom:
            layout.new_page(canvas, cursor)

    def _draw_header(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        analytics: SalesAnalytics,
        date_range: DateRange,
        title: str,
        config: ReportConfiguration,
    ):
        canvas.setFont(BOLD_FONT, TITLE_FONT_SIZE)
        cursor.y -= TITLE_FONT_SIZE
        canvas.drawString(layout.margin, cursor.y, config.report_title or "Sales Report")

        canvas.setFont(BODY_FONT, 11)
        cursor.y -= 18
        canvas.drawString(layout.margin, cursor.y, title)
        cursor.y -= 14
        canvas.drawString(
            layout.margin,
            cursor.y,
            f"{date_range.label}: {format_date(date_range.start_date)} - "
            f"{format_date(date_range.end_date)}",
        )

        if analytics.is_synthetic:
            cursor.y -= 18
            canvas.setFillColor(colors.red)
            canvas.setFont(BOLD_FONT, 10)
            canvas.drawString(
                layout.margin,
                cursor.y,
                "Demonstration data: no orders were found for this period",
            )
            canvas.setFillColor(colors.black)

        cursor.y -= SECTION_SPACING

    def _draw_section(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        section: TableSection,
    ) -> str:
        self._ensure_space(canvas, cursor, layout, SECTION_MIN_SPACE)
        canvas.setFont(BOLD_FONT, HEADING_FONT_SIZE)
        cursor.y -= HEADING_FONT_SIZE
        canvas.drawString(layout.margin, cursor.y, section.title)
        cursor.y -= 6

        if section.rows:
            cursor, renderer = self._render_table(canvas, cursor, layout, section)
        else:
            renderer = "text"
            canvas.setFont(BODY_FONT, 9)
            cursor.y -= FALLBACK_LINE_HEIGHT
            canvas.drawString(layout.margin, cursor.y, "No data for this period.")

        if section.note:
            self._ensure_space(canvas, cursor, layout, FALLBACK_LINE_HEIGHT)
            canvas.setFont(BODY_FONT, BODY_FONT_SIZE)
            cursor.y -= FALLBACK_LINE_HEIGHT
            canvas.drawString(layout.margin, cursor.y, section.note)

        cursor.y -= SECTION_SPACING
        return renderer

    def _draw_footer(
        self,
        canvas: Canvas,
        cursor: PageCursor,
        layout: PageLayout,
        analytics: SalesAnalytics,
        config: ReportConfiguration,
        generated_at: datetime,
    ):
        notes = []
        if config.additional_notes:
            notes = simpleSplit(config.additional_notes, BODY_FONT, 9, layout.content_width)
        if analytics.is_synthetic:
            notes.append("Figures in this report are generated demonstration data.")

        self._ensure_space(canvas, cursor, layout, FALLBACK_LINE_HEIGHT * 2)
        canvas.setStrokeColor(colors.lightgrey)
        canvas.line(layout.margin, cursor.y, layout.margin + layout.content_width, cursor.y)
        canvas.setStrokeColor(colors.black)

        canvas.setFont(BODY_FONT, 9)
        cursor.y -= FALLBACK_LINE_HEIGHT
        canvas.drawString(
            layout.margin,
            cursor.y,
            f"Generated on: {format_date(generated_at)} {format_time(generated_at)}",
        )
        for line in notes:
            if cursor.y - FALLBACK_LINE_HEIGHT < layout.bottom:
                layout.new_page(canvas, cursor)
                canvas.setFont(BODY_FONT, 9)
            cursor.y -= FALLBACK_LINE_HEIGHT
            canvas.drawString(layout.margin, cursor.y, line)

    def render_report(
        self,
        analytics: SalesAnalytics,
        date_range: DateRange,
        title: str,
        config: Optional[ReportConfiguration] = None,
    ) -> ReportDocument:
        config = config or ReportConfiguration()
        generated_at = datetime.now()

        buffer = BytesIO()
        width, height = self.page_size
        layout = PageLayout(width=width, height=height)
        canvas = Canvas(buffer, pagesize=self.page_size)
        canvas.setTitle(config.report_title or f"Sales Report - {date_range.label}")

        cursor = PageCursor(y=layout.top)
        self._draw_header(canvas, cursor, layout, analytics, date_range, title, config)

        rendered = []
        for section in build_sections(analytics, config).sections:
            renderer = self._draw_section(canvas, cursor, layout, section)
            rendered.append(RenderedSection(title=section.title, renderer=renderer))

        self._draw_footer(canvas, cursor, layout, analytics, config, generated_at)
        canvas.save()

        filename = (
            f"sales-report-{analytics.restaurant_id}-"
            f"{date_range.start_date:%Y%m%d}-{date_range.end_date:%Y%m%d}.pdf"
        )
        logger.info(
            f"Rendered sales report {filename}: {len(rendered)} sections, "
            f"{cursor.page_count} pages"
        )
        return ReportDocument(
            content=buffer.getvalue(),
            page_count=cursor.page_count,
            filename=filename,
            sections=rendered,
        )
