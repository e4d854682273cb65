"""Repository for Invoice model operations."""

from datetime import date
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from property_api.models.invoice import Invoice
from property_api.models.lease import Lease
from property_api.models.enums import InvoiceStatus


class InvoiceRepository:
    """Repository for Invoice model operations"""

    def __init__(self, db: Session):
        self.db = db

    def _with_details(self):
        return self.db.query(Invoice).options(
            joinedload(Invoice.tenant),
            joinedload(Invoice.lease).joinedload(Lease.unit),
            selectinload(Invoice.line_items),
        )

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        """
        Get invoice by ID with tenant, lease and line items loaded.

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice object or None if not found
        """
        return self._with_details().filter(Invoice.id == invoice_id).first()

    def get_all(
        self, tenant_id: Optional[int] = None, status: Optional[InvoiceStatus] = None
    ) -> list[Invoice]:
        """Get invoices, latest issue date first"""
        query = self._with_details()
        if tenant_id is not None:
            query = query.filter(Invoice.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.issue_date.desc(), Invoice.invoice_number.desc()).all()

    def get_overdue(self, today: date) -> list[Invoice]:
        """Invoices past due that were never paid or cancelled"""
        return (
            self._with_details()
            .filter(
                Invoice.due_date < today,
                Invoice.status.in_((InvoiceStatus.SENT, InvoiceStatus.DRAFT)),
            )
            .order_by(Invoice.due_date.asc())
            .all()
        )

    def count_numbers_for_year(self, year: int) -> int:
        """
        Count invoices numbered in the given year.

        Args:
            year: Four-digit year

        Returns:
            Number of invoices whose number matches INV-<year>-%
        """
        return (
            self.db.query(func.count(Invoice.id))
            .filter(Invoice.invoice_number.like(f"INV-{year}-%"))
            .scalar()
        )

    def stats_by_status(self, since: date) -> list[tuple[InvoiceStatus, int, float]]:
        """
        Count and total amount per status for invoices issued on or after ``since``.

        Returns:
            List of (status, count, total_amount) tuples
        """
        rows = (
            self.db.query(
                Invoice.status,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total_amount), 0),
            )
            .filter(Invoice.issue_date >= since)
            .group_by(Invoice.status)
            .all()
        )
        return [(status, count, float(total)) for status, count, total in rows]

    def create_no_commit(self, invoice: Invoice) -> Invoice:
        """Add invoice without committing (for atomic ops)"""
        self.db.add(invoice)
        self.db.flush()
        return invoice

    def update(self, invoice: Invoice) -> Invoice:
        """Persist changes made to an invoice"""
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def delete(self, invoice: Invoice) -> None:
        """Delete an invoice and its line items"""
        self.db.delete(invoice)
        self.db.commit()
