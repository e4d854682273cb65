import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from property_api.config import settings
from property_api.repositories.lease_repository import LeaseRepository
from property_api.repositories.payment_repository import PaymentRepository
from property_api.repositories.unit_repository import UnitRepository
from property_api.reports.layout import Column, ColumnKind, Report, ReportSection
from property_api.services.payment_service import PaymentService
from property_api.services.unit_service import UnitService
from property_api.core.dates import last_twelve_months_start
from property_api.core.exceptions import ValidationException

logger = logging.getLogger(__name__)

CURRENCY = ColumnKind.CURRENCY
DATE = ColumnKind.DATE
NUMBER = ColumnKind.NUMBER

# (title, lower bound, upper bound) on days remaining, bounds inclusive
EXPIRATION_BUCKETS = (
    ("Expired Leases", None, -1),
    ("Expiring Within 30 Days", 0, 30),
    ("Expiring in 1-3 Months", 31, 90),
    ("Expiring After 3 Months", 91, None),
)


def _period_line(start_date: Optional[date], end_date: Optional[date]) -> str:
    if start_date and end_date:
        return f"Period: {start_date.isoformat()} to {end_date.isoformat()}"
    if start_date:
        return f"Period: from {start_date.isoformat()}"
    if end_date:
        return f"Period: until {end_date.isoformat()}"
    return "Period: all dates"


class ReportService:
    """
    Assembles report layouts from current data.

    Each builder returns a format-neutral Report; rendering to PDF or XLSX
    is done by property_api.reports renderers.
    """

    def __init__(self, db: Session):
        self.db = db
        self.lease_repo = LeaseRepository(db)
        self.payment_repo = PaymentRepository(db)
        self.unit_repo = UnitRepository(db)
        self.payment_service = PaymentService(db)
        self.unit_service = UnitService(db)

    def money(self, value: float) -> str:
        return f"{settings.CURRENCY_SYMBOL}{value:,.2f}"

    def arrears_report(self, today: Optional[date] = None) -> Report:
        """Tenants with active leases whose prorated rent exceeds what they paid"""
        entries = self.payment_service.compute_arrears(today)
        rows = [entry.model_dump() for entry in entries]
        total_expected = sum(e.expected_amount for e in entries)
        total_paid = sum(e.total_paid for e in entries)
        total_arrears = sum(e.arrears for e in entries)

        section = ReportSection(
            title="Tenants in Arrears",
            columns=[
                Column("Tenant", "tenant_name", 110),
                Column("Unit", "unit_number", 50),
                Column("Phone", "phone", 80),
                Column("Monthly Rent", "rent_amount", 70, CURRENCY),
                Column("Expected", "expected_amount", 75, CURRENCY),
                Column("Paid", "total_paid", 70, CURRENCY),
                Column("Balance Due", "arrears", 75, CURRENCY),
            ],
            rows=rows,
            totals={
                "tenant_name": "Total",
                "expected_amount": total_expected,
                "total_paid": total_paid,
                "arrears": total_arrears,
            } if rows else None,
            empty_message="No tenants currently in arrears.",
        )
        return Report(
            title="Tenant Arrears Report",
            slug="arrears-report",
            sections=[section],
            summary=[
                f"Total Tenants in Arrears: {len(rows)}",
                f"Total Arrears: {self.money(total_arrears)}",
            ],
            generated_on=today or date.today(),
        )

    def payments_report(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Report:
        """Payment history, newest first, optionally within a date range"""
        payments = self.payment_service.get_payments(start_date=start_date, end_date=end_date)
        rows = [
            {
                "payment_date": p.payment_date,
                "tenant_name": p.tenant_name,
                "unit_number": p.unit_number or "N/A",
                "amount": float(p.amount),
                "payment_method": p.payment_method,
                "payment_type": p.payment_type,
                "status": p.status,
                "reference_number": p.reference_number,
            }
            for p in payments
        ]
        total = sum(row["amount"] for row in rows)

        section = ReportSection(
            title="Payment History",
            columns=[
                Column("Date", "payment_date", 62, DATE),
                Column("Tenant", "tenant_name", 100),
                Column("Unit", "unit_number", 45),
                Column("Amount", "amount", 70, CURRENCY),
                Column("Method", "payment_method", 75),
                Column("Type", "payment_type", 55),
                Column("Status", "status", 60),
                Column("Reference", "reference_number", 65),
            ],
            rows=rows,
            totals={"tenant_name": "Total", "amount": total} if rows else None,
            empty_message="No payments recorded during this period.",
        )
        return Report(
            title="Payment History Report",
            slug="payment-history",
            sections=[section],
            subtitle=[_period_line(start_date, end_date)],
            summary=[f"Total Payments: {len(rows)}", f"Total Amount: {self.money(total)}"],
        )

    def occupancy_report(self) -> Report:
        """Occupancy summary plus one row per unit with its active lease, if any"""
        stats = self.unit_service.compute_occupancy_stats()
        active_by_unit = {lease.unit_id: lease for lease in self.lease_repo.get_active()}

        rows = []
        for unit in self.unit_repo.get_all():
            lease = active_by_unit.get(unit.id)
            rows.append(
                {
                    "unit_number": unit.unit_number,
                    "type": unit.type,
                    "status": unit.status,
                    "rent_amount": float(unit.rent_amount),
                    "tenant_name": lease.tenant_name if lease else "Vacant",
                    "lease_start": lease.start_date if lease else None,
                    "lease_end": lease.end_date if lease else None,
                }
            )

        section = ReportSection(
            title="Unit Details",
            columns=[
                Column("Unit", "unit_number", 55),
                Column("Type", "type", 80),
                Column("Status", "status", 70),
                Column("Rent", "rent_amount", 70, CURRENCY),
                Column("Tenant", "tenant_name", 117),
                Column("Lease Start", "lease_start", 70, DATE),
                Column("Lease End", "lease_end", 70, DATE),
            ],
            rows=rows,
            empty_message="No units found.",
        )
        return Report(
            title="Occupancy Report",
            slug="occupancy-report",
            sections=[section],
            summary=[
                f"Total Units: {stats.total_units}",
                f"Occupied Units: {stats.occupied_units}",
                f"Vacant Units: {stats.vacant_units}",
                f"Maintenance Units: {stats.maintenance_units}",
                f"Occupancy Rate: {stats.occupancy_rate:.2f}%",
                f"Potential Monthly Income: {self.money(stats.potential_income)}",
                f"Actual Monthly Income: {self.money(stats.actual_income)}",
            ],
        )

    def lease_expiration_report(self, today: Optional[date] = None) -> Report:
        """Active leases grouped by how soon they end; empty groups are left out"""
        today = today or date.today()
        buckets: dict[str, list[dict]] = defaultdict(list)
        leases = self.lease_repo.get_active()

        for lease in leases:
            days_remaining = (lease.end_date - today).days
            row = {
                "unit_number": lease.unit_number,
                "tenant_name": lease.tenant_name,
                "tenant_email": lease.tenant_email,
                "end_date": lease.end_date,
                "days_remaining": days_remaining,
                "rent_amount": float(lease.rent_amount),
            }
            for title, low, high in EXPIRATION_BUCKETS:
                if (low is None or days_remaining >= low) and (high is None or days_remaining <= high):
                    buckets[title].append(row)
                    break

        columns = [
            Column("Unit", "unit_number", 60),
            Column("Tenant", "tenant_name", 120),
            Column("Email", "tenant_email", 140),
            Column("End Date", "end_date", 70, DATE),
            Column("Days Remaining", "days_remaining", 70, NUMBER),
            Column("Monthly Rent", "rent_amount", 72, CURRENCY),
        ]
        sections = [
            ReportSection(title=title, columns=columns, rows=buckets[title])
            for title, _, _ in EXPIRATION_BUCKETS
            if buckets[title]
        ]
        summary = [f"Total Active Leases: {len(leases)}"]
        summary += [f"{title}: {len(buckets[title])}" for title, _, _ in EXPIRATION_BUCKETS]
        if not leases:
            summary.append("No active leases found.")

        return Report(
            title="Lease Expiration Report",
            slug="lease-expiration",
            sections=sections,
            summary=summary,
            generated_on=today,
        )

    def income_report(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Report:
        """
        Income per month and per payment method.

        Defaults to the current month and the 11 before it.
        """
        end_date = end_date or date.today()
        start_date = start_date or last_twelve_months_start(end_date)
        if end_date < start_date:
            raise ValidationException("end_date must not be before start_date")

        payments = self.payment_repo.get_with_filters(start_date=start_date, end_date=end_date)
        by_month: dict[str, list[float]] = defaultdict(list)
        by_method: dict[str, list[float]] = defaultdict(list)
        for payment in payments:
            by_month[payment.payment_date.strftime("%Y-%m")].append(float(payment.amount))
            by_method[payment.payment_method.value].append(float(payment.amount))

        total_income = sum(float(p.amount) for p in payments)
        month_rows = [
            {
                "month": month,
                "total_amount": sum(amounts),
                "payment_count": len(amounts),
                "average": sum(amounts) / len(amounts),
            }
            for month, amounts in sorted(by_month.items())
        ]
        method_rows = [
            {
                "payment_method": method,
                "count": len(amounts),
                "total_amount": sum(amounts),
                "percentage": round(len(amounts) * 100 / len(payments), 2),
            }
            for method, amounts in sorted(by_method.items(), key=lambda item: -sum(item[1]))
        ]

        sections = [
            ReportSection(
                title="Monthly Income",
                columns=[
                    Column("Month", "month", 100),
                    Column("Total Amount", "total_amount", 110, CURRENCY),
                    Column("Payments", "payment_count", 80, NUMBER),
                    Column("Average Payment", "average", 110, CURRENCY),
                ],
                rows=month_rows,
                totals={
                    "month": "Total",
                    "total_amount": total_income,
                    "payment_count": len(payments),
                } if month_rows else None,
                empty_message="No income recorded during this period.",
            ),
            ReportSection(
                title="Payment Methods",
                columns=[
                    Column("Method", "payment_method", 120),
                    Column("Count", "count", 80, NUMBER),
                    Column("Total Amount", "total_amount", 110, CURRENCY),
                    Column("Share of Payments", "percentage", 100, ColumnKind.PERCENT),
                ],
                rows=method_rows,
                empty_message="No income recorded during this period.",
            ),
        ]
        return Report(
            title="Income Report",
            slug="income-report",
            sections=sections,
            subtitle=[_period_line(start_date, end_date)],
            summary=[
                f"Total Income: {self.money(total_income)}",
                f"Total Payments: {len(payments)}",
            ],
        )

    def build(self, report_type: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Report:
        """Build a report by its URL name"""
        builders = {
            "arrears": lambda: self.arrears_report(),
            "payments": lambda: self.payments_report(start_date, end_date),
            "occupancy": lambda: self.occupancy_report(),
            "lease-expiration": lambda: self.lease_expiration_report(),
            "income": lambda: self.income_report(start_date, end_date),
        }
        report = builders[report_type]()
        logger.info("Built %s report", report.slug)
        return report
