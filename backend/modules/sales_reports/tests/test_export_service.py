# backend/modules/sales_reports/tests/test_export_service.py

import csv
import io
import pytest

import openpyxl

from modules.sales_reports.exceptions import ExportFormatError
from modules.sales_reports.interfaces import InMemoryOrderSource
from modules.sales_reports.services.export_service import ExportService, flat_sections
from modules.sales_reports.services.sales_report_service import SalesReportService

from modules.sales_reports.tests.factories import build_analytics


def csv_rows(text):
    return list(csv.reader(io.StringIO(text)))


class TestFlatSections:
    def test_section_titles(self, sample_analytics):
        titles = [section.title for section in flat_sections(sample_analytics)]

        assert titles[0] == "EXECUTIVE SUMMARY"
        assert "PAYMENT METHODS" in titles
        assert titles[-1] == "CREDIT ANALYSIS"

    def test_credit_section_absent_without_credit(self, sample_analytics):
        analytics = sample_analytics.model_copy(update={"credit_analytics": None})

        titles = [section.title for section in flat_sections(analytics)]

        assert "CREDIT ANALYSIS" not in titles

    def test_every_row_matches_its_header(self, sample_analytics):
        for section in flat_sections(sample_analytics):
            assert all(len(row) == len(section.headers) for row in section.rows), section.title


class TestExportService:
    """Test cases for csv and xlsx exports"""

    def test_csv_contents(self, sample_analytics, day_range):
        text = ExportService().export_csv(sample_analytics, day_range)
        rows = csv_rows(text)

        assert rows[0] == ["Sales Report - Yesterday"]
        assert rows[1] == ["Period: 16 Oct 2026 - 16 Oct 2026"]
        assert ["EXECUTIVE SUMMARY"] in rows
        assert ["Total Revenue", "805.0"] in rows
        assert ["Cash", "2", "465.0", "57.76%"] in rows
        assert "Demonstration data" not in text

    def test_csv_marks_synthetic_data(self, day_start, day_end, day_range):
        analytics = build_analytics([], day_start, day_end, allow_synthetic_data=True)

        rows = csv_rows(ExportService().export_csv(analytics, day_range))

        assert rows[2] == ["Demonstration data"]

    def test_xlsx_sheets(self, sample_analytics, day_range):
        content = ExportService().export_xlsx(sample_analytics, day_range)

        wb = openpyxl.load_workbook(io.BytesIO(content))
        assert wb.sheetnames[0] == "Executive Summary"
        assert "Payment Methods" in wb.sheetnames
        ws = wb["Executive Summary"]
        assert ws["A1"].value == "Executive Summary - Yesterday"
        assert ws["A3"].value == "Metric"
        assert ws["A4"].value == "Total Revenue"
        assert ws["B4"].value == pytest.approx(805.0)

    @pytest.mark.parametrize(
        "format_type, media_type",
        [
            ("csv", "text/csv"),
            ("XLSX", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        ],
    )
    def test_export_dispatch(self, sample_analytics, day_range, format_type, media_type):
        content, returned_type, filename = ExportService().export(
            sample_analytics, day_range, format_type
        )

        assert content
        assert returned_type == media_type
        assert filename.startswith("sales-report-rest-1-")
        assert filename.endswith(f".{format_type.lower()}")

    def test_unsupported_format(self, sample_analytics, day_range):
        with pytest.raises(ExportFormatError) as exc_info:
            ExportService().export(sample_analytics, day_range, "xml")

        assert exc_info.value.error_code == "UNSUPPORTED_EXPORT_FORMAT"


class TestSalesReportServiceExports:
    """Test cases for the result envelope around rendering and exports"""

    @pytest.fixture
    def service(self):
        return SalesReportService(InMemoryOrderSource())

    def test_export_flat(self, service, sample_analytics, day_range):
        result = service.export_flat(sample_analytics, day_range)

        assert result.success
        assert result.data.startswith("Sales Report - Yesterday")

    def test_export_unsupported_format(self, service, sample_analytics, day_range):
        result = service.export(sample_analytics, day_range, "xml")

        assert not result.success
        assert result.error_code == "UNSUPPORTED_EXPORT_FORMAT"

    def test_generate_report(self, service, sample_analytics, day_range):
        result = service.generate_report(sample_analytics, day_range, "Spice Garden")

        assert result.success
        assert result.data.content.startswith(b"%PDF")

    def test_generate_report_failure(self, service, sample_analytics, day_range):
        service.renderer.render_report = lambda *args, **kwargs: 1 / 0

        result = service.generate_report(sample_analytics, day_range, "Spice Garden")

        assert not result.success
        assert result.error_code == "REPORT_FAILED"

    def test_date_ranges(self, service):
        labels = [r.label for r in service.get_date_ranges()]
        assert labels[0] == "Yesterday"
        assert len(labels) == 6
