import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from property_api.database import atomic
from property_api.models.invoice import Invoice, InvoiceLineItem
from property_api.models.enums import InvoiceStatus
from property_api.repositories.invoice_repository import InvoiceRepository
from property_api.repositories.lease_repository import LeaseRepository
from property_api.repositories.payment_repository import PaymentRepository
from property_api.repositories.tenant_repository import TenantRepository
from property_api.schemas.invoice_schemas import (
    InvoiceCreate,
    InvoiceStatusStat,
    InvoiceUpdate,
    LineItemCreate,
)
from property_api.core.dates import last_twelve_months_start
from property_api.core.exceptions import NotFoundException, ValidationException
from property_api.core.transitions import ensure_transition

logger = logging.getLogger(__name__)


def _build_line_items(items: list[LineItemCreate]) -> list[InvoiceLineItem]:
    return [
        InvoiceLineItem(
            position=position,
            description=item.description,
            quantity=item.quantity,
            rate=item.rate,
            amount=item.amount,
        )
        for position, item in enumerate(items)
    ]


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.invoice_repo = InvoiceRepository(db)
        self.payment_repo = PaymentRepository(db)
        self.lease_repo = LeaseRepository(db)
        self.tenant_repo = TenantRepository(db)

    def generate_invoice_number(self, today: Optional[date] = None) -> str:
        """
        Next invoice number for the current year, e.g. INV-2024-007.

        Derived from the count of this year's invoices, so calling it twice
        without inserting returns the same number. Two concurrent creators
        can race to the same number; the unique constraint rejects the
        second insert as a conflict.

        Deleting one of this year's invoices lowers the count, so the next
        number collides with an existing one and creation fails with a
        conflict until the count catches up again.
        """
        year = (today or date.today()).year
        sequence = self.invoice_repo.count_numbers_for_year(year) + 1
        return f"INV-{year}-{sequence:03d}"

    def get_invoice(self, invoice_id: int) -> Invoice:
        """
        Get invoice by ID with line items.

        Raises:
            NotFoundException: If invoice doesn't exist
        """
        invoice = self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            raise NotFoundException("Invoice not found")
        return invoice

    def list_invoices(
        self, tenant_id: Optional[int] = None, status: Optional[InvoiceStatus] = None
    ) -> list[Invoice]:
        return self.invoice_repo.get_all(tenant_id=tenant_id, status=status)

    def list_overdue(self, today: Optional[date] = None) -> list[Invoice]:
        """Draft or sent invoices whose due date has passed"""
        return self.invoice_repo.get_overdue(today or date.today())

    def create_invoice(self, data: InvoiceCreate) -> Invoice:
        """
        Create an invoice with a generated number.

        Raises:
            NotFoundException: If tenant or lease doesn't exist
            ConflictException: If the generated number was taken concurrently
        """
        self._check_references(data.tenant_id, data.lease_id)

        with atomic(self.db):
            invoice = Invoice(
                invoice_number=self.generate_invoice_number(),
                tenant_id=data.tenant_id,
                lease_id=data.lease_id,
                issue_date=data.issue_date,
                due_date=data.due_date,
                amount=data.amount,
                tax_amount=data.tax_amount,
                total_amount=round(data.amount + data.tax_amount, 2),
                status=data.status,
                description=data.description,
                payment_terms=data.payment_terms,
                notes=data.notes,
                line_items=_build_line_items(data.line_items),
            )
            self.invoice_repo.create_no_commit(invoice)

        logger.info("Invoice %s created for tenant %s", invoice.invoice_number, data.tenant_id)
        return self.get_invoice(invoice.id)

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        """
        Partially update an invoice.

        The total is recomputed from amount and tax; given line items replace
        the existing ones.

        Raises:
            NotFoundException: If invoice, tenant or lease doesn't exist
            InvalidStateException: If the status change is not allowed
            ValidationException: If the due date would precede the issue date
        """
        invoice = self.get_invoice(invoice_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"line_items"})

        if "status" in changes:
            ensure_transition(invoice.status, changes["status"], "invoice")

        self._check_references(changes.get("tenant_id"), changes.get("lease_id"))

        issue_date = changes.get("issue_date", invoice.issue_date)
        due_date = changes.get("due_date", invoice.due_date)
        if due_date < issue_date:
            raise ValidationException("due_date must not be before issue_date")

        for field, value in changes.items():
            setattr(invoice, field, value)
        invoice.total_amount = round(float(invoice.amount) + float(invoice.tax_amount), 2)

        if data.line_items is not None:
            invoice.line_items = _build_line_items(data.line_items)

        self.invoice_repo.update(invoice)
        return self.get_invoice(invoice_id)

    def update_status(self, invoice_id: int, status: InvoiceStatus) -> Invoice:
        """
        Move an invoice to another status.

        Raises:
            NotFoundException: If invoice doesn't exist
            InvalidStateException: If the status change is not allowed
        """
        invoice = self.get_invoice(invoice_id)
        ensure_transition(invoice.status, status, "invoice")
        invoice.status = status
        self.invoice_repo.update(invoice)
        logger.info("Invoice %s status set to %s", invoice.invoice_number, status.value)
        return self.get_invoice(invoice_id)

    def mark_as_paid(self, invoice_id: int, payment_id: Optional[int] = None) -> Invoice:
        """
        Mark an invoice paid, optionally linking the payment that settled it.

        Both rows change in one transaction; nothing is written if either
        is missing.

        Raises:
            NotFoundException: If invoice or payment doesn't exist
            InvalidStateException: If the invoice cannot become paid (e.g. cancelled)
        """
        with atomic(self.db):
            invoice = self.get_invoice(invoice_id)
            ensure_transition(invoice.status, InvoiceStatus.PAID, "invoice")
            invoice.status = InvoiceStatus.PAID

            if payment_id is not None:
                payment = self.payment_repo.get_by_id(payment_id)
                if not payment:
                    raise NotFoundException("Payment not found")
                payment.invoice_id = invoice.id

        logger.info("Invoice %s marked as paid (payment %s)", invoice.invoice_number, payment_id)
        return self.get_invoice(invoice_id)

    def delete_invoice(self, invoice_id: int) -> None:
        invoice = self.get_invoice(invoice_id)
        invoice_number = invoice.invoice_number
        self.invoice_repo.delete(invoice)
        logger.info("Invoice %s deleted", invoice_number)

    def get_stats(self, today: Optional[date] = None) -> list[InvoiceStatusStat]:
        """Count and total per status for invoices issued in the last 12 months"""
        since = last_twelve_months_start(today)
        return [
            InvoiceStatusStat(status=status, count=count, total_amount=round(total, 2))
            for status, count, total in self.invoice_repo.stats_by_status(since)
        ]

    def _check_references(self, tenant_id: Optional[int], lease_id: Optional[int]) -> None:
        if tenant_id is not None and not self.tenant_repo.get_by_id(tenant_id):
            raise NotFoundException("Tenant not found")
        if lease_id is not None and not self.lease_repo.get_by_id(lease_id):
            raise NotFoundException("Lease not found")
