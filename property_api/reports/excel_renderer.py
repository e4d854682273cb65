import re
from enum import Enum
from io import BytesIO
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from property_api.config import settings
from property_api.reports.layout import Column, ColumnKind, Report, ReportSection

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="FFD9D9D9", end_color="FFD9D9D9", fill_type="solid")
TITLE_FONT = Font(bold=True, size=14)

# Characters Excel rejects in sheet titles, and its title length limit
_INVALID_TITLE_CHARS = re.compile(r"[\[\]\*\?/\\:]")
_MAX_TITLE_LENGTH = 31


def _sheet_title(title: str, used: set[str]) -> str:
    base = _INVALID_TITLE_CHARS.sub("-", title)[:_MAX_TITLE_LENGTH] or "Sheet"
    candidate, suffix = base, 2
    while candidate.lower() in used:
        tail = f" ({suffix})"
        candidate = base[: _MAX_TITLE_LENGTH - len(tail)] + tail
        suffix += 1
    used.add(candidate.lower())
    return candidate


class ExcelRenderer:
    """Renders a Report as an XLSX workbook with one worksheet per section"""

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    extension = "xlsx"

    def __init__(self, currency_symbol: Optional[str] = None):
        self.currency_symbol = currency_symbol or settings.CURRENCY_SYMBOL

    @property
    def currency_format(self) -> str:
        return f'"{self.currency_symbol}"#,##0.00'

    def render(self, report: Report) -> bytes:
        workbook = Workbook()
        workbook.remove(workbook.active)
        used_titles: set[str] = set()

        sections = report.sections or [ReportSection(title="Summary", columns=[])]
        for index, section in enumerate(sections):
            sheet = workbook.create_sheet(title=_sheet_title(section.title, used_titles))
            self._preamble(sheet, report, with_summary=index == 0)
            self._table(sheet, section)

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def _preamble(self, sheet: Worksheet, report: Report, with_summary: bool) -> None:
        sheet.append([report.title])
        sheet.cell(row=sheet.max_row, column=1).font = TITLE_FONT
        for line in report.header_lines:
            sheet.append([line])
        if with_summary and report.summary:
            sheet.append([])
            for line in report.summary:
                sheet.append([line])
        sheet.append([])

    def _table(self, sheet: Worksheet, section: ReportSection) -> None:
        if not section.columns:
            return
        if not section.rows:
            sheet.append([section.empty_message])

        sheet.append([column.header for column in section.columns])
        for cell in sheet[sheet.max_row]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

        for row in section.rows:
            self._append(sheet, section.columns, row)

        if section.totals:
            self._append(sheet, section.columns, section.totals)
            for cell in sheet[sheet.max_row]:
                cell.font = HEADER_FONT

        for position, column in enumerate(section.columns, start=1):
            sheet.column_dimensions[get_column_letter(position)].width = max(column.width / 5, 10)

    def _append(self, sheet: Worksheet, columns: list[Column], row: dict) -> None:
        sheet.append([self._value(column, row.get(column.key)) for column in columns])
        for cell, column in zip(sheet[sheet.max_row], columns):
            if column.kind == ColumnKind.CURRENCY:
                cell.number_format = self.currency_format
            elif column.kind == ColumnKind.DATE:
                cell.number_format = "yyyy-mm-dd"
            elif column.kind == ColumnKind.PERCENT:
                cell.number_format = '0.00"%"'

    @staticmethod
    def _value(column: Column, value: Any) -> Any:
        if value is None:
            return None
        if column.kind in (ColumnKind.CURRENCY, ColumnKind.PERCENT):
            return float(value) if not isinstance(value, str) else value
        if isinstance(value, Enum):
            return value.value
        return value
