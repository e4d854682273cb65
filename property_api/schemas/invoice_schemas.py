from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Optional

from property_api.models.enums import InvoiceStatus


class LineItemCreate(BaseModel):
    """One billed line; amount defaults to quantity x rate"""

    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(default=1, gt=0)
    rate: float = Field(..., ge=0)
    amount: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def fill_amount(self) -> "LineItemCreate":
        if self.amount is None:
            self.amount = round(self.quantity * self.rate, 2)
        return self


class LineItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    description: str
    quantity: float
    rate: float
    amount: float


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice; the number is generated server-side"""

    tenant_id: int = Field(..., gt=0)
    lease_id: Optional[int] = Field(None, gt=0)
    issue_date: date
    due_date: date
    amount: float = Field(..., gt=0)
    tax_amount: float = Field(default=0, ge=0)
    description: Optional[str] = None
    line_items: list[LineItemCreate] = Field(..., min_length=1)
    payment_terms: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT

    @model_validator(mode="after")
    def check_dates(self) -> "InvoiceCreate":
        if self.due_date < self.issue_date:
            raise ValueError("due_date must not be before issue_date")
        return self


class InvoiceUpdate(BaseModel):
    """Schema for updating an invoice; line_items replace the existing list when given"""

    tenant_id: Optional[int] = Field(None, gt=0)
    lease_id: Optional[int] = Field(None, gt=0)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    amount: Optional[float] = Field(None, gt=0)
    tax_amount: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    line_items: Optional[list[LineItemCreate]] = Field(None, min_length=1)
    payment_terms: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    status: Optional[InvoiceStatus] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class MarkPaidRequest(BaseModel):
    payment_id: Optional[int] = Field(None, gt=0)


class InvoiceResponse(BaseModel):
    """Schema for invoice response"""

    model_config = {"from_attributes": True}

    id: int
    invoice_number: str
    tenant_id: int
    lease_id: Optional[int]
    tenant_name: Optional[str]
    tenant_email: Optional[str]
    unit_number: Optional[str]
    issue_date: date
    due_date: date
    amount: float
    tax_amount: float
    total_amount: float
    status: InvoiceStatus
    description: Optional[str]
    line_items: list[LineItemResponse]
    payment_terms: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class InvoiceNumberResponse(BaseModel):
    invoice_number: str


class InvoiceStatusStat(BaseModel):
    """Invoices in one status over the last 12 months"""

    status: InvoiceStatus
    count: int
    total_amount: float
