from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.services.unit_service import UnitService
from property_api.schemas.common_schemas import MessageResponse
from property_api.schemas.unit_schemas import (
    OccupancyStatsResponse,
    UnitCreate,
    UnitResponse,
    UnitStatusUpdate,
    UnitUpdate,
)

router = APIRouter()


@router.get("", response_model=list[UnitResponse])
def list_units(db: Session = Depends(get_db)):
    """Get all units ordered by unit number"""
    return UnitService(db).list_units()


@router.post("", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(data: UnitCreate, db: Session = Depends(get_db)):
    """
    Create a unit.

    - Unit number must be unique
    - Status defaults to vacant
    """
    return UnitService(db).create_unit(data)


@router.get("/vacant", response_model=list[UnitResponse])
def list_vacant_units(db: Session = Depends(get_db)):
    return UnitService(db).list_vacant()


@router.get("/occupied", response_model=list[UnitResponse])
def list_occupied_units(db: Session = Depends(get_db)):
    return UnitService(db).list_occupied()


@router.get("/occupancy-stats", response_model=OccupancyStatsResponse)
def get_occupancy_stats(db: Session = Depends(get_db)):
    """Unit counts per status, occupancy rate and potential vs. actual rent income"""
    return UnitService(db).compute_occupancy_stats()


@router.get("/number/{unit_number}", response_model=UnitResponse)
def get_unit_by_number(unit_number: str, db: Session = Depends(get_db)):
    return UnitService(db).get_by_number(unit_number)


@router.get("/{unit_id}", response_model=UnitResponse)
def get_unit(unit_id: int, db: Session = Depends(get_db)):
    return UnitService(db).get_unit(unit_id)


@router.put("/{unit_id}", response_model=UnitResponse)
def update_unit(unit_id: int, data: UnitUpdate, db: Session = Depends(get_db)):
    """Update unit details (only provided fields change)"""
    return UnitService(db).update_unit(unit_id, data)


@router.patch("/{unit_id}/status", response_model=UnitResponse)
def update_unit_status(unit_id: int, data: UnitStatusUpdate, db: Session = Depends(get_db)):
    """
    Change a unit's status manually.

    - A unit held by an active lease cannot be set vacant; terminate the lease instead
    """
    return UnitService(db).update_status(unit_id, data.status)


@router.delete("/{unit_id}", response_model=MessageResponse)
def delete_unit(unit_id: int, db: Session = Depends(get_db)):
    """Delete a unit; rejected while an active or pending lease references it"""
    UnitService(db).delete_unit(unit_id)
    return MessageResponse(message="Unit deleted successfully")
