from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from property_api.models.base import Base, TimestampMixin, enum_column
from property_api.models.enums import PaymentMethod, PaymentStatus, PaymentType

if TYPE_CHECKING:
    from property_api.models.tenant import Tenant
    from property_api.models.lease import Lease
    from property_api.models.invoice import Invoice


class Payment(Base, TimestampMixin):
    """
    Money received from a tenant.

    Optionally attributed to a lease and, once an invoice is marked paid
    with it, linked to that invoice. Only rent-type payments count against
    arrears.
    """

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
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
    invoice_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("invoices.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod), nullable=False
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        enum_column(PaymentType), nullable=False, default=PaymentType.RENT
    )
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus), nullable=False, default=PaymentStatus.COMPLETED
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="payments")
    lease: Mapped["Lease | None"] = relationship("Lease", back_populates="payments")
    invoice: Mapped["Invoice | None"] = relationship("Invoice", back_populates="payments")

    # Composite index for arrears lookups
    __table_args__ = (Index("ix_payments_tenant_type", "tenant_id", "payment_type"),)

    @property
    def tenant_name(self) -> str | None:
        return self.tenant.name if self.tenant else None

    @property
    def unit_number(self) -> str | None:
        if self.lease is None or self.lease.unit is None:
            return None
        return self.lease.unit.unit_number
