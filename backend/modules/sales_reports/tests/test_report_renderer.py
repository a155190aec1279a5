# backend/modules/sales_reports/tests/test_report_renderer.py

import pytest
from datetime import datetime, timedelta
from io import BytesIO
from unittest.mock import patch

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen.canvas import Canvas

from modules.sales_reports.exceptions import RenderingCapabilityError
from modules.sales_reports.interfaces import InMemoryCreditSource
from modules.sales_reports.schemas.analytics_schemas import DateRange, ReportConfiguration
from modules.sales_reports.services.report_renderer import (
    ManualPositionRenderer,
    PageCursor,
    PageLayout,
    PreferredGridRenderer,
    ReportRenderer,
    TableRenderer,
    truncate_text,
)
from modules.sales_reports.services.report_sections import TableSection, build_sections

from modules.sales_reports.tests.factories import (
    CreditTransactionFactory,
    OrderFactory,
    build_analytics,
)

DEFAULT_TITLES = [
    "Executive Summary",
    "Business Insights",
    "Top Selling Items",
    "Category Performance",
    "Popular Item Combinations",
    "Table Performance",
    "Tax & Discount Summary",
    "Top Customers",
    "Payment Methods",
    "Credit Analysis",
    "Order Types",
    "Staff Performance",
    "Daily Sales",
    "Peak Hours",
]


class BrokenRenderer(TableRenderer):
    """Preferred strategy that claims availability and then fails"""

    name = "broken"

    def is_available(self):
        return True

    def draw_table(self, canvas, cursor, layout, section):
        raise RuntimeError("layout engine crashed")


class UnavailableRenderer(BrokenRenderer):
    name = "unavailable"

    def is_available(self):
        return False


@pytest.fixture
def busy_analytics(day_start, day_end):
    """Enough orders that the order list spans several pages"""
    orders = [
        OrderFactory(created_at=day_start + timedelta(minutes=10 * n))
        for n in range(90)
    ]
    return build_analytics(orders, day_start, day_end, allow_synthetic_data=False)


def blank_canvas():
    return Canvas(BytesIO(), pagesize=A4)


class TestReportRenderer:
    """Test cases for PDF report rendering"""

    def test_renders_pdf_with_default_sections(self, sample_analytics, day_range):
        document = ReportRenderer().render_report(sample_analytics, day_range, "Spice Garden")

        assert document.content.startswith(b"%PDF")
        assert document.media_type == "application/pdf"
        assert document.page_count >= 1
        assert document.section_titles == DEFAULT_TITLES
        assert {section.renderer for section in document.sections} == {"grid"}

    def test_filename_carries_restaurant_and_window(self, sample_analytics, day_range):
        document = ReportRenderer().render_report(sample_analytics, day_range, "Spice Garden")

        assert document.filename == "sales-report-rest-1-20261016-20261016.pdf"

    def test_failing_renderer_falls_back_per_table(self, sample_analytics, day_range):
        """Test every section still renders when the preferred strategy fails"""
        renderer = ReportRenderer(preferred=BrokenRenderer())

        document = renderer.render_report(sample_analytics, day_range, "Spice Garden")

        assert document.content.startswith(b"%PDF")
        assert document.section_titles == DEFAULT_TITLES
        assert {section.renderer for section in document.sections} == {"manual"}

    def test_fallback_is_logged(self, sample_analytics, day_range, caplog):
        renderer = ReportRenderer(preferred=BrokenRenderer())

        with caplog.at_level("WARNING"):
            renderer.render_report(sample_analytics, day_range, "Spice Garden")

        assert "falling back to 'manual'" in caplog.text

    def test_unavailable_preferred_is_never_used(self, sample_analytics, day_range):
        renderer = ReportRenderer(preferred=UnavailableRenderer())

        assert renderer.primary is renderer.fallback
        document = renderer.render_report(sample_analytics, day_range, "Spice Garden")
        assert {section.renderer for section in document.sections} == {"manual"}

    def test_long_order_list_paginates(self, busy_analytics, day_range):
        config = ReportConfiguration(include_order_details=True)

        document = ReportRenderer().render_report(busy_analytics, day_range, "Spice Garden", config)

        assert "Detailed Order List" in document.section_titles
        assert document.page_count > 1

    def test_long_order_list_paginates_with_manual_renderer(self, busy_analytics, day_range):
        config = ReportConfiguration(include_order_details=True)
        renderer = ReportRenderer(preferred=UnavailableRenderer())

        document = renderer.render_report(busy_analytics, day_range, "Spice Garden", config)

        assert document.page_count > 1

    def test_synthetic_report_renders(self, day_start, day_end, day_range):
        analytics = build_analytics([], day_start, day_end, allow_synthetic_data=True)

        document = ReportRenderer().render_report(analytics, day_range, "Spice Garden")

        assert analytics.is_synthetic
        assert document.content.startswith(b"%PDF")

    def test_letter_page_size(self, sample_analytics, day_range):
        document = ReportRenderer(page_size="letter").render_report(
            sample_analytics, day_range, "Spice Garden"
        )
        assert document.content.startswith(b"%PDF")

    def test_additional_notes(self, sample_analytics, day_range):
        config = ReportConfiguration(additional_notes="Closed early on Friday for maintenance. " * 10)

        document = ReportRenderer().render_report(sample_analytics, day_range, "Spice Garden", config)

        assert document.content.startswith(b"%PDF")

    def test_long_notes_continue_on_new_pages(self, sample_analytics, day_range):
        plain = ReportRenderer().render_report(sample_analytics, day_range, "Spice Garden")
        config = ReportConfiguration(additional_notes="Closed early on Friday for maintenance. " * 400)

        document = ReportRenderer().render_report(sample_analytics, day_range, "Spice Garden", config)

        assert document.page_count > plain.page_count

    def test_footer_lines_never_cross_bottom_margin(self, sample_analytics):
        layout = PageLayout(*A4)
        cursor = PageCursor(y=layout.bottom + 30)
        canvas = blank_canvas()
        config = ReportConfiguration(additional_notes="Closed early on Friday for maintenance. " * 400)

        with patch.object(canvas, "drawString", wraps=canvas.drawString) as draw:
            ReportRenderer()._draw_footer(
                canvas, cursor, layout, sample_analytics, config, datetime(2026, 10, 17, 9, 0)
            )

        assert cursor.page_count > 2
        assert draw.call_count > 1
        assert all(call.args[1] >= layout.bottom for call in draw.call_args_list)


class TestBuildSections:
    """Test cases for section selection and order"""

    def test_toggles_drop_sections(self, sample_analytics):
        config = ReportConfiguration(
            include_menu_analysis=False,
            include_table_analysis=False,
            include_customer_analysis=False,
            include_staff_analysis=False,
            include_time_analysis=False,
            include_tax_breakdown=False,
            include_discount_analysis=False,
            include_credit_analysis=False,
        )

        plan = build_sections(sample_analytics, config)

        assert plan.titles == [
            "Executive Summary",
            "Business Insights",
            "Payment Methods",
            "Order Types",
        ]

    def test_order_details_opt_in(self, sample_analytics):
        plan = build_sections(sample_analytics, ReportConfiguration(include_order_details=True))

        assert plan.titles.index("Detailed Order List") == plan.titles.index("Tax & Discount Summary") + 1

    def test_tax_only(self, sample_analytics):
        config = ReportConfiguration(include_discount_analysis=False)

        tax = next(s for s in build_sections(sample_analytics, config).sections if s.key == "tax")

        assert [row[0] for row in tax.rows] == [
            "Gross Subtotal",
            "Total Tax",
            "Effective Tax Rate",
            "Net Revenue (excl. tax)",
        ]

    def test_credit_details_capped_with_note(self, sample_orders, day_start, day_end):
        credits = InMemoryCreditSource(
            [
                CreditTransactionFactory(created_at=datetime(2026, 10, 16, 12, n))
                for n in range(20)
            ]
        )
        analytics = build_analytics(
            sample_orders, day_start, day_end, credit_source=credits, allow_synthetic_data=False
        )

        plan = build_sections(analytics, ReportConfiguration())

        details = next(s for s in plan.sections if s.key == "credit_transactions")
        assert len(details.rows) == 15
        assert details.note == "Showing first 15 of 20 credit transactions"

    def test_summary_formats_currency(self, sample_analytics):
        summary = build_sections(sample_analytics, ReportConfiguration()).sections[0]

        assert summary.rows[0] == ["Total Revenue", "Rs. 805.00"]

    def test_column_widths_follow_weights(self):
        section = TableSection("T", ["a", "b"], [], weights=[1, 3])
        assert section.column_widths(400) == [100, 300]


class TestTableRenderers:
    """Test cases for the individual table strategies"""

    def test_grid_rejects_row_taller_than_a_page(self):
        layout = PageLayout(*A4)
        section = TableSection("Notes", ["Note"], [["word " * 5000]])
        canvas = blank_canvas()

        with pytest.raises(RenderingCapabilityError):
            PreferredGridRenderer().draw_table(canvas, PageCursor(y=layout.top), layout, section)

    def test_grid_splits_across_pages(self):
        layout = PageLayout(*A4)
        section = TableSection("Rows", ["N", "Value"], [[str(n), "x"] for n in range(200)])
        cursor = PageCursor(y=layout.top)

        PreferredGridRenderer().draw_table(blank_canvas(), cursor, layout, section)

        assert cursor.page_count > 1
        assert layout.bottom <= cursor.y <= layout.top

    def test_manual_repeats_pages(self):
        layout = PageLayout(*A4)
        section = TableSection("Rows", ["N", "Value"], [[str(n), "x"] for n in range(200)])
        cursor = PageCursor(y=layout.top)

        ManualPositionRenderer().draw_table(blank_canvas(), cursor, layout, section)

        assert cursor.page_count > 1

    def test_grid_is_available(self):
        assert PreferredGridRenderer().is_available()


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("Naan", 100, "Helvetica", 8) == "Naan"

    def test_long_text_gets_ellipsis(self):
        text = truncate_text("Paneer Butter Masala with Garlic Naan", 60, "Helvetica", 8)
        assert text.endswith("...")
        assert len(text) < len("Paneer Butter Masala with Garlic Naan")
