import logging
from sqlalchemy.orm import Session

from property_api.models.unit import Unit
from property_api.models.enums import UnitStatus
from property_api.repositories.unit_repository import UnitRepository
from property_api.schemas.unit_schemas import (
    OccupancyStatsResponse,
    OccupancyStatusCount,
    UnitCreate,
    UnitUpdate,
)
from property_api.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
)
from property_api.core.transitions import ensure_transition

logger = logging.getLogger(__name__)


class UnitService:
    """Service layer for unit business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.unit_repo = UnitRepository(db)

    def list_units(self) -> list[Unit]:
        return self.unit_repo.get_all()

    def list_vacant(self) -> list[Unit]:
        return self.unit_repo.get_all(status=UnitStatus.VACANT)

    def list_occupied(self) -> list[Unit]:
        return self.unit_repo.get_all(status=UnitStatus.OCCUPIED)

    def get_unit(self, unit_id: int) -> Unit:
        """
        Get unit by ID.

        Raises:
            NotFoundException: If unit doesn't exist
        """
        unit = self.unit_repo.get_by_id(unit_id)
        if not unit:
            raise NotFoundException("Unit not found")
        return unit

    def get_by_number(self, unit_number: str) -> Unit:
        unit = self.unit_repo.get_by_number(unit_number)
        if not unit:
            raise NotFoundException("Unit not found")
        return unit

    def create_unit(self, data: UnitCreate) -> Unit:
        """
        Create a unit.

        Raises:
            ConflictException: If the unit number is taken
        """
        if self.unit_repo.get_by_number(data.unit_number):
            raise ConflictException("Unit number already exists")

        unit = self.unit_repo.create(Unit(**data.model_dump()))
        logger.info("Unit %s (%s) created", unit.id, unit.unit_number)
        return unit

    def update_unit(self, unit_id: int, data: UnitUpdate) -> Unit:
        """Apply the provided fields; a status change goes through the same checks as update_status"""
        unit = self.get_unit(unit_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if changes.get("unit_number") and self.unit_repo.get_by_number(
            changes["unit_number"], exclude_id=unit_id
        ):
            raise ConflictException("Unit number already exists")

        status = changes.pop("status", None)
        if status is not None:
            self._check_status_change(unit, status)
            unit.status = status

        for field, value in changes.items():
            setattr(unit, field, value)
        return self.unit_repo.update(unit)

    def update_status(self, unit_id: int, status: UnitStatus) -> Unit:
        """
        Manually change a unit's status.

        Raises:
            NotFoundException: If unit doesn't exist
            InvalidStateException: If the change is illegal, or the unit is set
                vacant while an active lease still holds it
        """
        unit = self.get_unit(unit_id)
        self._check_status_change(unit, status)
        unit.status = status
        unit = self.unit_repo.update(unit)
        logger.info("Unit %s status set to %s", unit_id, status.value)
        return unit

    def _check_status_change(self, unit: Unit, status: UnitStatus) -> None:
        ensure_transition(unit.status, status, "unit")
        if status == UnitStatus.VACANT and self.unit_repo.get_active_lease(unit.id):
            raise InvalidStateException(
                "Cannot mark unit as vacant while it has an active lease"
            )

    def delete_unit(self, unit_id: int) -> None:
        """
        Delete a unit and its lease history.

        Raises:
            ConflictException: If an active or pending lease references the unit
        """
        unit = self.get_unit(unit_id)
        if self.unit_repo.count_open_leases(unit_id) > 0:
            raise ConflictException("Cannot delete unit with active or pending leases")

        self.unit_repo.delete(unit)
        logger.info("Unit %s deleted", unit_id)

    def compute_occupancy_stats(self) -> OccupancyStatsResponse:
        """
        Summarize occupancy across all units.

        Percentages are of the total unit count, rounded to two places.
        Potential income sums every unit's rent; actual income only the
        occupied ones.
        """
        counts = self.unit_repo.count_by_status()
        total = sum(counts.values())

        def share(count: int) -> float:
            return round(count * 100 / total, 2) if total else 0.0

        by_status = [
            OccupancyStatusCount(status=status, count=counts[status], percentage=share(counts[status]))
            for status in UnitStatus
            if status in counts
        ]
        potential, actual = self.unit_repo.income_totals()
        occupied = counts.get(UnitStatus.OCCUPIED, 0)

        return OccupancyStatsResponse(
            by_status=by_status,
            total_units=total,
            occupied_units=occupied,
            vacant_units=counts.get(UnitStatus.VACANT, 0),
            maintenance_units=counts.get(UnitStatus.MAINTENANCE, 0),
            occupancy_rate=share(occupied),
            potential_income=round(potential, 2),
            actual_income=round(actual, 2),
        )
