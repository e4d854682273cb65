from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from property_api.models.base import Base, TimestampMixin, enum_column
from property_api.models.enums import InvoiceStatus

if TYPE_CHECKING:
    from property_api.models.tenant import Tenant
    from property_api.models.lease import Lease
    from property_api.models.payment import Payment


class Invoice(Base, TimestampMixin):
    """
    Billing document for a tenant, optionally tied to a lease.

    invoice_number has the form INV-<year>-<sequence> with the sequence
    counted per year (see InvoiceRepository.count_numbers_for_year).
    total_amount is always amount + tax_amount.
    """

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lease_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("leases.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    issue_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    tax_amount: Mapped[float] = mapped_column(
        Numeric(precision=10, scale=2), nullable=False, default=0
    )
    total_amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        enum_column(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="invoices")
    lease: Mapped["Lease | None"] = relationship("Lease", back_populates="invoices")
    line_items: Mapped[list["InvoiceLineItem"]] = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
    )
    payments: Mapped[list["Payment"]] = relationship("Payment", back_populates="invoice")

    @property
    def tenant_name(self) -> str | None:
        return self.tenant.name if self.tenant else None

    @property
    def tenant_email(self) -> str | None:
        return self.tenant.email if self.tenant else None

    @property
    def unit_number(self) -> str | None:
        if self.lease is None or self.lease.unit is None:
            return None
        return self.lease.unit.unit_number

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, invoice_number='{self.invoice_number}', status={self.status})>"


class InvoiceLineItem(Base):
    """One billed line: quantity x rate = amount"""

    __tablename__ = "invoice_line_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False, default=1)
    rate: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="line_items")
