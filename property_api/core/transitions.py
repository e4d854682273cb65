"""
Status transition tables.

One table per status enum. A mutating operation checks its status change
once through ``ensure_transition``; staying in the same status is always
allowed. Terminate and renew are lifecycle operations with fixed targets
and do not consult the lease table.
"""

from enum import Enum

from property_api.core.exceptions import InvalidStateException
from property_api.models.enums import InvoiceStatus, LeaseStatus, UnitStatus

LEASE_TRANSITIONS: dict[LeaseStatus, frozenset[LeaseStatus]] = {
    LeaseStatus.PENDING: frozenset(
        {LeaseStatus.ACTIVE, LeaseStatus.EXPIRED, LeaseStatus.TERMINATED}
    ),
    LeaseStatus.ACTIVE: frozenset(
        {LeaseStatus.EXPIRED, LeaseStatus.TERMINATED, LeaseStatus.COMPLETED}
    ),
    LeaseStatus.EXPIRED: frozenset(
        {LeaseStatus.ACTIVE, LeaseStatus.TERMINATED, LeaseStatus.COMPLETED}
    ),
    LeaseStatus.TERMINATED: frozenset(),
    LeaseStatus.COMPLETED: frozenset(),
}

UNIT_TRANSITIONS: dict[UnitStatus, frozenset[UnitStatus]] = {
    UnitStatus.VACANT: frozenset({UnitStatus.OCCUPIED, UnitStatus.MAINTENANCE}),
    UnitStatus.OCCUPIED: frozenset({UnitStatus.VACANT, UnitStatus.MAINTENANCE}),
    UnitStatus.MAINTENANCE: frozenset({UnitStatus.VACANT, UnitStatus.OCCUPIED}),
}

INVOICE_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset(
        {InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.DRAFT, InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset(
        {InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.PAID: frozenset({InvoiceStatus.SENT}),
    InvoiceStatus.CANCELLED: frozenset({InvoiceStatus.DRAFT}),
}

_TABLES: dict[type[Enum], dict] = {
    LeaseStatus: LEASE_TRANSITIONS,
    UnitStatus: UNIT_TRANSITIONS,
    InvoiceStatus: INVOICE_TRANSITIONS,
}


def can_transition(current: Enum, target: Enum) -> bool:
    """
    Check whether moving from ``current`` to ``target`` is legal.

    Args:
        current: Status the record is in now
        target: Requested status (same enum type)

    Returns:
        True if the change is allowed
    """
    if type(current) is not type(target):
        raise TypeError(f"Cannot compare {type(current).__name__} with {type(target).__name__}")
    if current == target:
        return True
    return target in _TABLES[type(current)][current]


def ensure_transition(current: Enum, target: Enum, entity: str) -> None:
    """Raise InvalidStateException unless the status change is legal"""
    if not can_transition(current, target):
        raise InvalidStateException(
            f"Cannot change {entity} status from '{current.value}' to '{target.value}'"
        )
