import logging
from typing import Optional

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from property_api.config import settings
from property_api.reports.layout import Column, ColumnKind, Report, ReportSection

logger = logging.getLogger(__name__)

FONT = "Helvetica"
MARGIN = 40
ROW_HEIGHT = 14
HEADER_HEIGHT = 16


def _latin1(text: str) -> str:
    """Core PDF fonts only cover Latin-1"""
    return text.encode("latin-1", "replace").decode("latin-1")


class PdfRenderer:
    """
    Renders a Report as a letter-size PDF with fixed-width table columns.

    Rows are written until the cursor passes ``page_break_y`` (points from
    the top), then a new page starts with a "(Continued)" title and the
    column headers repeated.
    """

    media_type = "application/pdf"
    extension = "pdf"

    def __init__(self, page_break_y: Optional[float] = None, currency_symbol: Optional[str] = None):
        self.page_break_y = page_break_y if page_break_y is not None else settings.REPORT_PAGE_BREAK_Y
        self.currency_symbol = currency_symbol or settings.CURRENCY_SYMBOL
        self.rows_written = 0
        self.page_count = 0

    def render(self, report: Report) -> bytes:
        self.rows_written = 0
        pdf = FPDF(unit="pt", format="letter")
        pdf.set_margins(MARGIN, MARGIN, MARGIN)
        # Page breaks are driven by page_break_y, not by fpdf
        pdf.set_auto_page_break(False)
        pdf.set_title(_latin1(report.title))
        pdf.add_page()

        self._title(pdf, report.title, size=20)
        pdf.set_font(FONT, "", 12)
        for line in report.header_lines:
            self._line(pdf, line, align="C")
        pdf.ln(10)

        pdf.set_font(FONT, "", 12)
        for line in report.summary:
            self._line(pdf, line)
        if report.summary:
            pdf.ln(10)

        for section in report.sections:
            self._section(pdf, report, section)

        self.page_count = pdf.page_no()
        logger.debug("Rendered %s PDF: %d pages, %d rows", report.slug, self.page_count, self.rows_written)
        return bytes(pdf.output())

    def _section(self, pdf: FPDF, report: Report, section: ReportSection) -> None:
        if pdf.get_y() > self.page_break_y:
            pdf.add_page()

        pdf.set_font(FONT, "B", 14)
        self._line(pdf, section.title)
        pdf.ln(4)

        if not section.rows:
            pdf.set_font(FONT, "", 11)
            self._line(pdf, section.empty_message)
            pdf.ln(10)
            return

        self._header_row(pdf, section.columns)
        for row in section.rows:
            if pdf.get_y() > self.page_break_y:
                pdf.add_page()
                self._title(pdf, f"{report.title} (Continued)", size=14)
                self._header_row(pdf, section.columns)
            self._row(pdf, section.columns, row)
            self.rows_written += 1

        if section.totals:
            pdf.set_font(FONT, "B", 9)
            self._cells(pdf, section.columns, section.totals)
        pdf.ln(12)

    def _title(self, pdf: FPDF, text: str, size: int) -> None:
        pdf.set_font(FONT, "B", size)
        pdf.cell(0, size + 6, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")

    def _line(self, pdf: FPDF, text: str, align: str = "L") -> None:
        pdf.cell(0, ROW_HEIGHT + 2, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align=align)

    def _header_row(self, pdf: FPDF, columns: list[Column]) -> None:
        pdf.set_font(FONT, "B", 10)
        for column in columns:
            pdf.cell(column.width, HEADER_HEIGHT, self._fit(pdf, column.header, column.width), border="B")
        pdf.ln(HEADER_HEIGHT + 2)

    def _row(self, pdf: FPDF, columns: list[Column], row: dict) -> None:
        pdf.set_font(FONT, "", 9)
        self._cells(pdf, columns, row)

    def _cells(self, pdf: FPDF, columns: list[Column], row: dict) -> None:
        for column in columns:
            text = column.format(row.get(column.key), self.currency_symbol)
            align = "R" if column.kind in (ColumnKind.CURRENCY, ColumnKind.NUMBER, ColumnKind.PERCENT) else "L"
            pdf.cell(column.width, ROW_HEIGHT, self._fit(pdf, text, column.width), align=align)
        pdf.ln(ROW_HEIGHT)

    @staticmethod
    def _fit(pdf: FPDF, text: str, width: float) -> str:
        """Truncate text so it stays inside its column"""
        text = _latin1(text)
        limit = width - 4
        if pdf.get_string_width(text) <= limit:
            return text
        while text and pdf.get_string_width(text + "...") > limit:
            text = text[:-1]
        return text + "..."
