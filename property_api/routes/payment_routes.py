from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.services.payment_service import PaymentService
from property_api.schemas.common_schemas import MessageResponse
from property_api.schemas.payment_schemas import (
    ArrearsEntry,
    PaymentCreate,
    PaymentMonthlyStat,
    PaymentResponse,
    PaymentUpdate,
)

router = APIRouter()


@router.get("", response_model=list[PaymentResponse])
def list_payments(
    tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    db: Session = Depends(get_db),
):
    """Get payments with optional filters, newest first"""
    return PaymentService(db).get_payments(
        tenant_id=tenant_id, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(data: PaymentCreate, db: Session = Depends(get_db)):
    """Record a payment from a tenant, optionally against a lease"""
    return PaymentService(db).create_payment(data)


@router.get("/stats", response_model=list[PaymentMonthlyStat])
def get_payment_stats(db: Session = Depends(get_db)):
    """Payment count and total per month and type over the last 12 months"""
    return PaymentService(db).get_monthly_stats()


@router.get("/arrears", response_model=list[ArrearsEntry])
def get_arrears(db: Session = Depends(get_db)):
    """
    Tenants behind on rent.

    - Expected rent is prorated as days since lease start / 30 x monthly rent
    - Sorted by amount owed, largest first
    """
    return PaymentService(db).compute_arrears()


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentService(db).get_payment(payment_id)


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(payment_id: int, data: PaymentUpdate, db: Session = Depends(get_db)):
    return PaymentService(db).update_payment(payment_id, data)


@router.delete("/{payment_id}", response_model=MessageResponse)
def delete_payment(payment_id: int, db: Session = Depends(get_db)):
    PaymentService(db).delete_payment(payment_id)
    return MessageResponse(message="Payment deleted successfully")
