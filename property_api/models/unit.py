from datetime import date
from sqlalchemy import String, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from property_api.models.base import Base, TimestampMixin, enum_column
from property_api.models.enums import LeaseStatus, UnitStatus, UnitType

if TYPE_CHECKING:
    from property_api.models.lease import Lease


class Unit(Base, TimestampMixin):
    """
    A rentable physical unit.

    Status is kept in step with the unit's leases by LeaseService; it is
    only set by hand for maintenance.
    """

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    type: Mapped[UnitType] = mapped_column(enum_column(UnitType), nullable=False)
    square_feet: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[float | None] = mapped_column(Numeric(precision=3, scale=1), nullable=True)
    rent_amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    status: Mapped[UnitStatus] = mapped_column(
        enum_column(UnitStatus), nullable=False, default=UnitStatus.VACANT, index=True
    )
    features: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    leases: Mapped[list["Lease"]] = relationship(
        "Lease",
        back_populates="unit",
        cascade="all, delete-orphan",  # Lease history goes with the unit
    )

    # Occupant details from the active lease, if any
    @property
    def active_lease(self) -> "Lease | None":
        return next((lease for lease in self.leases if lease.status == LeaseStatus.ACTIVE), None)

    @property
    def tenant_name(self) -> str | None:
        lease = self.active_lease
        return lease.tenant_name if lease else None

    @property
    def tenant_email(self) -> str | None:
        lease = self.active_lease
        return lease.tenant_email if lease else None

    @property
    def start_date(self) -> date | None:
        lease = self.active_lease
        return lease.start_date if lease else None

    @property
    def end_date(self) -> date | None:
        lease = self.active_lease
        return lease.end_date if lease else None

    @property
    def lease_rent(self) -> float | None:
        lease = self.active_lease
        return lease.rent_amount if lease else None

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, unit_number='{self.unit_number}', status={self.status})>"
