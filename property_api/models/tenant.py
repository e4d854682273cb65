"""Tenant model: a person renting one or more units."""

from datetime import date, timedelta
from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from property_api.models.base import Base, TimestampMixin
from property_api.models.enums import LeaseStatus

if TYPE_CHECKING:
    from property_api.models.lease import Lease
    from property_api.models.payment import Payment
    from property_api.models.invoice import Invoice

RECENT_PAYMENT_DAYS = 30


class Tenant(Base, TimestampMixin):
    """
    Identity and contact details of a renter.

    A tenant owns leases, payments and invoices. It can only be deleted
    while it holds no active or pending lease (enforced in TenantService);
    deleting it removes its history with it.
    """

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    leases: Mapped[list["Lease"]] = relationship(
        "Lease",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    @property
    def active_leases(self) -> int:
        return sum(1 for lease in self.leases if lease.status == LeaseStatus.ACTIVE)

    @property
    def recent_payments(self) -> float:
        """Total paid in the last 30 days"""
        since = date.today() - timedelta(days=RECENT_PAYMENT_DAYS)
        return round(sum(float(p.amount) for p in self.payments if p.payment_date >= since), 2)

    # Current rental, from the first active lease
    @property
    def current_lease(self) -> "Lease | None":
        active = [lease for lease in self.leases if lease.status == LeaseStatus.ACTIVE]
        return min(active, key=lambda lease: lease.id) if active else None

    @property
    def unit_id(self) -> int | None:
        lease = self.current_lease
        return lease.unit_id if lease else None

    @property
    def unit_number(self) -> str | None:
        lease = self.current_lease
        return lease.unit_number if lease else None

    @property
    def rent_amount(self) -> float | None:
        lease = self.current_lease
        return lease.rent_amount if lease else None

    @property
    def start_date(self) -> date | None:
        lease = self.current_lease
        return lease.start_date if lease else None

    @property
    def end_date(self) -> date | None:
        lease = self.current_lease
        return lease.end_date if lease else None

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}')>"
