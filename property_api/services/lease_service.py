import logging
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from property_api.config import settings
from property_api.database import atomic
from property_api.models.lease import Lease
from property_api.models.unit import Unit
from property_api.models.enums import LeaseStatus, UnitStatus
from property_api.repositories.lease_repository import LeaseRepository
from property_api.repositories.tenant_repository import TenantRepository
from property_api.repositories.unit_repository import UnitRepository
from property_api.schemas.lease_schemas import LeaseCreate, LeaseRenew, LeaseTerminate, LeaseUpdate
from property_api.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from property_api.core.transitions import ensure_transition

logger = logging.getLogger(__name__)

UNIT_UNAVAILABLE = "Unit is not available for the specified dates"


class LeaseService:
    """
    Keeps leases and unit occupancy consistent.

    Every write that touches both a lease and a unit runs in one transaction
    (``atomic``) with the unit row locked, so a failed call leaves both rows
    exactly as they were. Invariants maintained:

    - at most one active or pending lease per unit
    - a lease becoming active marks its unit occupied
    - terminating a lease marks its unit vacant
    """

    def __init__(self, db: Session):
        self.db = db
        self.lease_repo = LeaseRepository(db)
        self.unit_repo = UnitRepository(db)
        self.tenant_repo = TenantRepository(db)

    # Queries

    def get_lease(self, lease_id: int) -> Lease:
        """
        Get lease by ID with tenant and unit loaded.

        Raises:
            NotFoundException: If lease doesn't exist
        """
        lease = self.lease_repo.get_by_id(lease_id)
        if not lease:
            raise NotFoundException("Lease not found")
        return lease

    def list_leases(
        self, tenant_id: Optional[int] = None, unit_id: Optional[int] = None
    ) -> list[Lease]:
        """List leases, optionally for one tenant and/or unit"""
        if tenant_id is not None and not self.tenant_repo.get_by_id(tenant_id):
            raise NotFoundException("Tenant not found")
        if unit_id is not None and not self.unit_repo.get_by_id(unit_id):
            raise NotFoundException("Unit not found")
        return self.lease_repo.get_all(tenant_id=tenant_id, unit_id=unit_id)

    def list_active(self) -> list[Lease]:
        return self.lease_repo.get_active()

    def list_expiring(self, days: Optional[int] = None, today: Optional[date] = None) -> list[Lease]:
        """Active leases ending between today and today + days (inclusive)"""
        today = today or date.today()
        if days is None:
            days = settings.EXPIRING_LEASE_DAYS
        return self.lease_repo.get_expiring(today, today + timedelta(days=days))

    # Writes

    def create_lease(self, data: LeaseCreate) -> Lease:
        """
        Create a lease for a tenant on a unit.

        Rent defaults to the unit's rent. An active lease marks the unit occupied.

        Raises:
            NotFoundException: If tenant or unit doesn't exist
            ConflictException: If the lease is open and the unit already has an open lease
        """
        if not self.tenant_repo.get_by_id(data.tenant_id):
            raise NotFoundException("Tenant not found")

        with atomic(self.db):
            unit = self._lock_unit(data.unit_id)

            if data.status.is_open and self.unit_repo.count_open_leases(unit.id) > 0:
                raise ConflictException(UNIT_UNAVAILABLE)

            lease = Lease(
                tenant_id=data.tenant_id,
                unit_id=unit.id,
                start_date=data.start_date,
                end_date=data.end_date,
                rent_amount=data.rent_amount if data.rent_amount is not None else unit.rent_amount,
                security_deposit=data.security_deposit,
                lease_terms=data.lease_terms,
                status=data.status,
            )
            self.lease_repo.create_no_commit(lease)

            if lease.status == LeaseStatus.ACTIVE:
                self.unit_repo.set_status_no_commit(unit, UnitStatus.OCCUPIED)

        logger.info(
            "Lease %s created for tenant %s on unit %s (%s)",
            lease.id, lease.tenant_id, lease.unit_id, lease.status.value,
        )
        return self.get_lease(lease.id)

    def update_lease(self, lease_id: int, data: LeaseUpdate) -> Lease:
        """
        Partially update a lease and propagate the change to unit status.

        Availability is re-checked (excluding this lease) whenever the lease
        ends up open and either moves to another unit or was not open before.

        Raises:
            NotFoundException: If lease, new tenant or new unit doesn't exist
            InvalidStateException: If the status change is not allowed
            ValidationException: If the resulting end date precedes the start date
            ConflictException: If the target unit already has another open lease
        """
        lease = self.get_lease(lease_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        old_status = lease.status
        old_unit_id = lease.unit_id
        new_status = changes.get("status", old_status)
        new_unit_id = changes.get("unit_id", old_unit_id)
        unit_changed = new_unit_id != old_unit_id

        ensure_transition(old_status, new_status, "lease")

        start_date = changes.get("start_date", lease.start_date)
        end_date = changes.get("end_date", lease.end_date)
        if end_date < start_date:
            raise ValidationException("end_date must not be before start_date")

        if "tenant_id" in changes and not self.tenant_repo.get_by_id(changes["tenant_id"]):
            raise NotFoundException("Tenant not found")

        with atomic(self.db):
            units = self._lock_units(new_unit_id, old_unit_id)
            new_unit = units[new_unit_id]

            if new_status.is_open and (unit_changed or not old_status.is_open):
                if self.unit_repo.count_open_leases(new_unit.id, exclude_lease_id=lease.id) > 0:
                    raise ConflictException(UNIT_UNAVAILABLE)

            for field, value in changes.items():
                setattr(lease, field, value)
            self.lease_repo.flush()

            if new_status == LeaseStatus.ACTIVE:
                self.unit_repo.set_status_no_commit(new_unit, UnitStatus.OCCUPIED)

            if old_status == LeaseStatus.ACTIVE and (unit_changed or new_status != LeaseStatus.ACTIVE):
                self.unit_repo.set_status_no_commit(units[old_unit_id], UnitStatus.VACANT)

        if new_status != old_status:
            logger.info(
                "Lease %s status changed from %s to %s", lease_id, old_status.value, new_status.value
            )
        return self.get_lease(lease_id)

    def terminate_lease(self, lease_id: int, data: LeaseTerminate) -> Lease:
        """
        End a lease early and free its unit.

        The unit becomes vacant whatever status it had before.

        Raises:
            NotFoundException: If lease doesn't exist
        """
        lease = self.get_lease(lease_id)

        with atomic(self.db):
            unit = self._lock_unit(lease.unit_id)
            lease.status = LeaseStatus.TERMINATED
            lease.termination_date = data.termination_date or date.today()
            lease.termination_reason = data.termination_reason
            self.lease_repo.flush()
            self.unit_repo.set_status_no_commit(unit, UnitStatus.VACANT)

        logger.info("Lease %s terminated, unit %s vacant", lease_id, lease.unit_id)
        return self.get_lease(lease_id)

    def renew_lease(self, lease_id: int, data: LeaseRenew) -> Lease:
        """
        Close a lease as completed and open its successor.

        The new lease is active, copies tenant, unit and deposit, and carries
        rent and terms forward unless new values are given. Both leases are
        linked (previous_lease_id / renewal_id) and the unit stays occupied.

        Returns:
            The new lease

        Raises:
            NotFoundException: If lease doesn't exist
        """
        source = self.get_lease(lease_id)

        with atomic(self.db):
            unit = self._lock_unit(source.unit_id)

            # Source must leave the open set before the successor is inserted
            source.status = LeaseStatus.COMPLETED
            self.lease_repo.flush()

            renewal = Lease(
                tenant_id=source.tenant_id,
                unit_id=source.unit_id,
                start_date=data.new_start_date,
                end_date=data.new_end_date,
                rent_amount=(
                    data.new_rent_amount if data.new_rent_amount is not None else source.rent_amount
                ),
                security_deposit=source.security_deposit,
                lease_terms=(
                    data.new_lease_terms if data.new_lease_terms is not None else source.lease_terms
                ),
                status=LeaseStatus.ACTIVE,
                previous_lease_id=source.id,
            )
            self.lease_repo.create_no_commit(renewal)

            source.renewal_id = renewal.id
            self.unit_repo.set_status_no_commit(unit, UnitStatus.OCCUPIED)

        logger.info("Lease %s renewed as lease %s", lease_id, renewal.id)
        return self.get_lease(renewal.id)

    def delete_lease(self, lease_id: int) -> None:
        """
        Delete a lease that never took effect.

        Renewal links pointing at it are cleared in the same transaction.

        Raises:
            NotFoundException: If lease doesn't exist
            InvalidStateException: If the lease is active, completed or terminated
        """
        lease = self.get_lease(lease_id)
        if not lease.status.is_deletable:
            raise InvalidStateException(
                "Cannot delete an active, completed or terminated lease. Terminate it instead."
            )

        with atomic(self.db):
            self.lease_repo.clear_chain_links(lease.id)
            self.lease_repo.delete_no_commit(lease)
        logger.info("Lease %s deleted", lease_id)

    def _lock_unit(self, unit_id: int) -> Unit:
        unit = self.unit_repo.get_by_id_for_update(unit_id)
        if not unit:
            raise NotFoundException("Unit not found")
        return unit

    def _lock_units(self, *unit_ids: int) -> dict[int, Unit]:
        """Lock several units in ascending id order so concurrent moves cannot deadlock"""
        return {unit_id: self._lock_unit(unit_id) for unit_id in sorted(set(unit_ids))}
