"""Status and type enums shared by models, schemas and services."""

from enum import Enum as PyEnum


class UnitType(str, PyEnum):
    """Rentable unit layout"""

    STUDIO = "studio"
    ONE_BEDROOM = "one_bedroom"
    TWO_BEDROOM = "two_bedroom"
    THREE_BEDROOM = "three_bedroom"
    HOUSE = "house"


class UnitStatus(str, PyEnum):
    """
    Unit occupancy status.

    Mirrors the lifecycle of the unit's leases:
    - OCCUPIED while an active lease holds the unit
    - VACANT once that lease is terminated or moves out of active
    - MAINTENANCE is set manually and is never touched by lease operations
      except when a lease on the unit becomes active or is terminated
    """

    VACANT = "vacant"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class LeaseStatus(str, PyEnum):
    """
    Lease lifecycle status.

    PENDING and ACTIVE are "open": at most one open lease may reference a
    unit. COMPLETED is reached through renewal, TERMINATED through the
    terminate operation.
    """

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    COMPLETED = "completed"

    @property
    def is_open(self) -> bool:
        return self in (LeaseStatus.PENDING, LeaseStatus.ACTIVE)

    @property
    def is_deletable(self) -> bool:
        """Active, completed and terminated leases must be terminated, not deleted"""
        return self not in (LeaseStatus.ACTIVE, LeaseStatus.COMPLETED, LeaseStatus.TERMINATED)


OPEN_LEASE_STATUSES = (LeaseStatus.ACTIVE, LeaseStatus.PENDING)


class PaymentMethod(str, PyEnum):
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    MOBILE_MONEY = "mobile_money"


class PaymentType(str, PyEnum):
    RENT = "rent"
    DEPOSIT = "deposit"
    LATE_FEE = "late_fee"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class PaymentStatus(str, PyEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class InvoiceStatus(str, PyEnum):
    """Invoice billing status"""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
