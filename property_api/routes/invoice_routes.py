from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.models.enums import InvoiceStatus
from property_api.services.invoice_service import InvoiceService
from property_api.schemas.common_schemas import MessageResponse
from property_api.schemas.invoice_schemas import (
    InvoiceCreate,
    InvoiceNumberResponse,
    InvoiceResponse,
    InvoiceStatusStat,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    MarkPaidRequest,
)

router = APIRouter()


@router.get("", response_model=list[InvoiceResponse])
def list_invoices(
    tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
):
    """Get invoices, latest issue date first"""
    return InvoiceService(db).list_invoices(tenant_id=tenant_id, status=invoice_status)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(data: InvoiceCreate, db: Session = Depends(get_db)):
    """
    Create an invoice.

    - Number is assigned as INV-<year>-<sequence>
    - total_amount = amount + tax_amount
    - Requires at least one line item
    """
    return InvoiceService(db).create_invoice(data)


@router.get("/stats", response_model=list[InvoiceStatusStat])
def get_invoice_stats(db: Session = Depends(get_db)):
    return InvoiceService(db).get_stats()


@router.get("/overdue", response_model=list[InvoiceResponse])
def list_overdue_invoices(db: Session = Depends(get_db)):
    """Draft or sent invoices past their due date"""
    return InvoiceService(db).list_overdue()


@router.get("/generate-number", response_model=InvoiceNumberResponse)
def generate_invoice_number(db: Session = Depends(get_db)):
    """Preview the number the next invoice will receive"""
    return InvoiceNumberResponse(invoice_number=InvoiceService(db).generate_invoice_number())


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return InvoiceService(db).get_invoice(invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(invoice_id: int, data: InvoiceUpdate, db: Session = Depends(get_db)):
    return InvoiceService(db).update_invoice(invoice_id, data)


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: int, data: InvoiceStatusUpdate, db: Session = Depends(get_db)
):
    return InvoiceService(db).update_status(invoice_id, data.status)


@router.patch("/{invoice_id}/mark-paid", response_model=InvoiceResponse)
def mark_invoice_paid(
    invoice_id: int, data: Optional[MarkPaidRequest] = None, db: Session = Depends(get_db)
):
    """Mark an invoice paid and optionally link the settling payment"""
    payment_id = data.payment_id if data else None
    return InvoiceService(db).mark_as_paid(invoice_id, payment_id)


@router.delete("/{invoice_id}", response_model=MessageResponse)
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    InvoiceService(db).delete_invoice(invoice_id)
    return MessageResponse(message="Invoice deleted successfully")
