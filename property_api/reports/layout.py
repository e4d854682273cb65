"""
Format-neutral report layout.

A Report is assembled by ReportService from query results and handed to a
renderer (PDF or XLSX). Renderers never query the database; each row dict
in a section becomes exactly one output row.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


class ColumnKind(str, Enum):
    TEXT = "text"
    CURRENCY = "currency"
    DATE = "date"
    NUMBER = "number"
    PERCENT = "percent"


@dataclass(frozen=True)
class Column:
    """
    One table column.

    width is in PDF points; the spreadsheet renderer scales it to
    character widths.
    """

    header: str
    key: str
    width: float = 90
    kind: ColumnKind = ColumnKind.TEXT

    def format(self, value: Any, currency_symbol: str = "$") -> str:
        """Render a cell value as display text"""
        if value is None or value == "":
            return ""
        if self.kind == ColumnKind.CURRENCY:
            return f"{currency_symbol}{float(value):,.2f}"
        if self.kind == ColumnKind.PERCENT:
            return f"{float(value):.2f}%"
        if self.kind == ColumnKind.DATE and isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)


@dataclass
class ReportSection:
    """A titled table: typed columns, rows keyed by column key, optional totals row"""

    title: str
    columns: list[Column]
    rows: list[dict[str, Any]] = field(default_factory=list)
    totals: Optional[dict[str, Any]] = None
    empty_message: str = "No records found."


@dataclass
class Report:
    title: str
    slug: str
    sections: list[ReportSection]
    subtitle: list[str] = field(default_factory=list)
    summary: list[str] = field(default_factory=list)
    generated_on: date = field(default_factory=date.today)

    @property
    def header_lines(self) -> list[str]:
        """Subtitle lines followed by the generation date"""
        return [*self.subtitle, f"Generated on: {self.generated_on.isoformat()}"]

    def filename(self, extension: str) -> str:
        return f"{self.slug}-{self.generated_on.isoformat()}.{extension}"
