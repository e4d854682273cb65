from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

from property_api.models.unit import Unit
from property_api.models.lease import Lease
from property_api.models.enums import OPEN_LEASE_STATUSES, LeaseStatus, UnitStatus


class UnitRepository:
    """Repository for Unit data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, unit_id: int) -> Unit | None:
        """Get unit by ID"""
        return self.db.query(Unit).filter(Unit.id == unit_id).first()

    def get_by_id_for_update(self, unit_id: int) -> Unit | None:
        """
        Get unit by ID and lock its row until the transaction ends.

        Serializes concurrent lease writes for the same unit on databases
        that support SELECT ... FOR UPDATE (ignored by SQLite, which locks
        the whole database on write).
        """
        return self.db.query(Unit).filter(Unit.id == unit_id).with_for_update().first()

    def get_by_number(self, unit_number: str, exclude_id: int | None = None) -> Unit | None:
        """Get unit by its unit number, optionally ignoring one unit (for updates)"""
        query = self.db.query(Unit).filter(Unit.unit_number == unit_number)
        if exclude_id is not None:
            query = query.filter(Unit.id != exclude_id)
        return query.first()

    def get_all(self, status: UnitStatus | None = None) -> list[Unit]:
        """Get all units ordered by unit number, optionally by status, with leases loaded"""
        query = self.db.query(Unit).options(selectinload(Unit.leases).joinedload(Lease.tenant))
        if status is not None:
            query = query.filter(Unit.status == status)
        return query.order_by(Unit.unit_number.asc()).all()

    def get_active_lease(self, unit_id: int) -> Lease | None:
        """Get the active lease currently holding the unit, if any"""
        return (
            self.db.query(Lease)
            .filter(Lease.unit_id == unit_id, Lease.status == LeaseStatus.ACTIVE)
            .first()
        )

    def count_open_leases(self, unit_id: int, exclude_lease_id: int | None = None) -> int:
        """
        Count active or pending leases referencing the unit.

        Args:
            unit_id: Unit ID
            exclude_lease_id: Lease to leave out of the count (the one being updated)

        Returns:
            Number of open leases
        """
        query = self.db.query(func.count(Lease.id)).filter(
            Lease.unit_id == unit_id, Lease.status.in_(OPEN_LEASE_STATUSES)
        )
        if exclude_lease_id is not None:
            query = query.filter(Lease.id != exclude_lease_id)
        return query.scalar()

    def count_by_status(self) -> dict[UnitStatus, int]:
        """Number of units per status (statuses with no units are omitted)"""
        rows = self.db.query(Unit.status, func.count(Unit.id)).group_by(Unit.status).all()
        return {status: count for status, count in rows}

    def income_totals(self) -> tuple[float, float]:
        """
        Sum of rent over all units and over occupied units.

        Returns:
            Tuple of (potential_income, actual_income)
        """
        potential, actual = self.db.query(
            func.coalesce(func.sum(Unit.rent_amount), 0),
            func.coalesce(
                func.sum(case((Unit.status == UnitStatus.OCCUPIED, Unit.rent_amount), else_=0)),
                0,
            ),
        ).one()
        return float(potential), float(actual)

    def create(self, unit: Unit) -> Unit:
        """Create a new unit"""
        self.db.add(unit)
        self.db.commit()
        self.db.refresh(unit)
        return unit

    def update(self, unit: Unit) -> Unit:
        """Update existing unit"""
        self.db.commit()
        self.db.refresh(unit)
        return unit

    def set_status_no_commit(self, unit: Unit, status: UnitStatus) -> None:
        """Change unit status inside a caller-managed transaction"""
        unit.status = status
        self.db.flush()

    def delete(self, unit: Unit) -> None:
        """Delete unit (cascades to its lease history)"""
        self.db.delete(unit)
        self.db.commit()
