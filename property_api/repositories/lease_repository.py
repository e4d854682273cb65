from datetime import date
from typing import Optional
from sqlalchemy.orm import Session, joinedload

from property_api.models.lease import Lease
from property_api.models.enums import LeaseStatus


class LeaseRepository:
    """Repository for Lease data access"""

    def __init__(self, db: Session):
        self.db = db

    def _with_parties(self):
        """Base query loading tenant and unit alongside each lease"""
        return self.db.query(Lease).options(joinedload(Lease.tenant), joinedload(Lease.unit))

    def get_by_id(self, lease_id: int) -> Optional[Lease]:
        """Get lease by ID"""
        return self._with_parties().filter(Lease.id == lease_id).first()

    def get_all(
        self, tenant_id: Optional[int] = None, unit_id: Optional[int] = None
    ) -> list[Lease]:
        """
        Get leases, newest start date first.

        Args:
            tenant_id: Optional tenant filter
            unit_id: Optional unit filter

        Returns:
            List of leases with tenant and unit loaded
        """
        query = self._with_parties()
        if tenant_id is not None:
            query = query.filter(Lease.tenant_id == tenant_id)
        if unit_id is not None:
            query = query.filter(Lease.unit_id == unit_id)
        return query.order_by(Lease.start_date.desc(), Lease.id.desc()).all()

    def get_active(self) -> list[Lease]:
        """Get active leases ordered by end date (soonest first)"""
        return (
            self._with_parties()
            .filter(Lease.status == LeaseStatus.ACTIVE)
            .order_by(Lease.end_date.asc(), Lease.id.asc())
            .all()
        )

    def get_expiring(self, start: date, until: date) -> list[Lease]:
        """Get active leases whose end date falls within [start, until]"""
        return (
            self._with_parties()
            .filter(
                Lease.status == LeaseStatus.ACTIVE,
                Lease.end_date >= start,
                Lease.end_date <= until,
            )
            .order_by(Lease.end_date.asc(), Lease.id.asc())
            .all()
        )

    def create_no_commit(self, lease: Lease) -> Lease:
        """Create single lease without committing (for atomic ops)"""
        self.db.add(lease)
        self.db.flush()  # Assign ID without committing
        return lease

    def flush(self) -> None:
        """Push pending lease changes inside the caller's transaction"""
        self.db.flush()

    def refresh(self, lease: Lease) -> Lease:
        self.db.refresh(lease)
        return lease

    def clear_chain_links(self, lease_id: int) -> None:
        """Null previous_lease_id/renewal_id references to a lease (caller commits)"""
        self.db.query(Lease).filter(Lease.renewal_id == lease_id).update(
            {Lease.renewal_id: None}, synchronize_session="fetch"
        )
        self.db.query(Lease).filter(Lease.previous_lease_id == lease_id).update(
            {Lease.previous_lease_id: None}, synchronize_session="fetch"
        )

    def delete_no_commit(self, lease: Lease) -> None:
        """Delete a lease inside a caller-managed transaction"""
        self.db.delete(lease)
        self.db.flush()
