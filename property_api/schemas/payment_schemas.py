from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional

from property_api.models.enums import PaymentMethod, PaymentStatus, PaymentType


class PaymentCreate(BaseModel):
    """Schema for recording a payment"""

    tenant_id: int = Field(..., gt=0)
    lease_id: Optional[int] = Field(None, gt=0)
    amount: float = Field(..., gt=0)
    payment_date: date
    payment_method: PaymentMethod
    payment_type: PaymentType = PaymentType.RENT
    reference_number: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    status: PaymentStatus = PaymentStatus.COMPLETED


class PaymentUpdate(BaseModel):
    """Schema for correcting a payment"""

    tenant_id: Optional[int] = Field(None, gt=0)
    lease_id: Optional[int] = Field(None, gt=0)
    amount: Optional[float] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    payment_type: Optional[PaymentType] = None
    reference_number: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[PaymentStatus] = None


class PaymentResponse(BaseModel):
    """Schema for payment response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    lease_id: Optional[int]
    invoice_id: Optional[int]
    tenant_name: Optional[str]
    unit_number: Optional[str]
    amount: float
    payment_date: date
    payment_method: PaymentMethod
    payment_type: PaymentType
    reference_number: Optional[str]
    description: Optional[str]
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime


class ArrearsEntry(BaseModel):
    """
    One active lease whose prorated expected rent exceeds rent paid.

    expected_amount = days_since_start / 30 * rent_amount; an approximation,
    not a calendar billing schedule.
    """

    tenant_id: int
    tenant_name: str
    email: str
    phone: Optional[str]
    lease_id: int
    unit_number: str
    rent_amount: float
    start_date: date
    days_elapsed: int
    expected_amount: float
    total_paid: float
    arrears: float


class PaymentMonthlyStat(BaseModel):
    """Payments of one type in one calendar month"""

    month: str = Field(..., description="YYYY-MM")
    payment_type: PaymentType
    payment_count: int
    total_amount: float
