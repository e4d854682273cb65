from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.services.lease_service import LeaseService
from property_api.schemas.common_schemas import MessageResponse
from property_api.schemas.lease_schemas import (
    LeaseCreate,
    LeaseRenew,
    LeaseResponse,
    LeaseTerminate,
    LeaseUpdate,
)

router = APIRouter()


@router.get("", response_model=list[LeaseResponse])
def list_leases(
    tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
    unit_id: Optional[int] = Query(None, description="Filter by unit ID"),
    db: Session = Depends(get_db),
):
    """Get leases, newest start date first"""
    return LeaseService(db).list_leases(tenant_id=tenant_id, unit_id=unit_id)


@router.post("", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
def create_lease(data: LeaseCreate, db: Session = Depends(get_db)):
    """
    Create a lease.

    - Rejected if the unit already has an active or pending lease
    - Rent defaults to the unit's rent
    - An active lease marks the unit occupied
    """
    return LeaseService(db).create_lease(data)


@router.get("/active", response_model=list[LeaseResponse])
def list_active_leases(db: Session = Depends(get_db)):
    return LeaseService(db).list_active()


@router.get("/expiring", response_model=list[LeaseResponse])
def list_expiring_leases(
    days: Optional[int] = Query(None, ge=0, le=3650, description="Look-ahead window in days"),
    db: Session = Depends(get_db),
):
    """Active leases ending within the next ``days`` days (default 30)"""
    return LeaseService(db).list_expiring(days)


@router.get("/{lease_id}", response_model=LeaseResponse)
def get_lease(lease_id: int, db: Session = Depends(get_db)):
    return LeaseService(db).get_lease(lease_id)


@router.put("/{lease_id}", response_model=LeaseResponse)
def update_lease(lease_id: int, data: LeaseUpdate, db: Session = Depends(get_db)):
    """
    Update a lease.

    - Status changes must follow the lease lifecycle
    - Unit status follows the lease (occupied when active, vacant when it stops being active)
    """
    return LeaseService(db).update_lease(lease_id, data)


@router.patch("/{lease_id}/terminate", response_model=LeaseResponse)
def terminate_lease(
    lease_id: int, data: Optional[LeaseTerminate] = None, db: Session = Depends(get_db)
):
    """Terminate a lease and mark its unit vacant"""
    return LeaseService(db).terminate_lease(lease_id, data or LeaseTerminate())


@router.post("/{lease_id}/renew", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
def renew_lease(lease_id: int, data: LeaseRenew, db: Session = Depends(get_db)):
    """
    Renew a lease.

    - The current lease is completed and linked to the new active lease
    - Returns the new lease
    """
    return LeaseService(db).renew_lease(lease_id, data)


@router.delete("/{lease_id}", response_model=MessageResponse)
def delete_lease(lease_id: int, db: Session = Depends(get_db)):
    """Delete a pending or expired lease; active, completed and terminated leases are kept"""
    LeaseService(db).delete_lease(lease_id)
    return MessageResponse(message="Lease deleted successfully")
