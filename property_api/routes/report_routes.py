import logging
from datetime import date
from enum import Enum
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.reports.excel_renderer import ExcelRenderer
from property_api.reports.pdf_renderer import PdfRenderer
from property_api.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter()


class ReportType(str, Enum):
    ARREARS = "arrears"
    PAYMENTS = "payments"
    OCCUPANCY = "occupancy"
    LEASE_EXPIRATION = "lease-expiration"
    INCOME = "income"


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


@router.get("/{report_type}/{report_format}")
def download_report(
    report_type: ReportType,
    report_format: ReportFormat,
    start_date: Optional[date] = Query(None, description="Payments/income: start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="Payments/income: end date (inclusive)"),
    db: Session = Depends(get_db),
):
    """
    Download a report as a PDF or XLSX attachment.

    - arrears, payments, occupancy, lease-expiration, income
    - start_date/end_date apply to the payments and income reports
    """
    report = ReportService(db).build(report_type.value, start_date, end_date)
    renderer = PdfRenderer() if report_format == ReportFormat.PDF else ExcelRenderer()
    content = renderer.render(report)
    filename = report.filename(renderer.extension)

    logger.info("Generated %s (%d bytes)", filename, len(content))
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
