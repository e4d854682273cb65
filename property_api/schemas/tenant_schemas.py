from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TenantCreate(BaseModel):
    """Schema for creating a tenant"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    emergency_contact: Optional[str] = Field(None, max_length=255)
    emergency_phone: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


class TenantUpdate(BaseModel):
    """Schema for updating a tenant (only provided fields change)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    emergency_contact: Optional[str] = Field(None, max_length=255)
    emergency_phone: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


class TenantResponse(BaseModel):
    """Tenant details response"""

    id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    emergency_contact: Optional[str]
    emergency_phone: Optional[str]
    notes: Optional[str]
    active_leases: int = 0
    recent_payments: float = 0
    # Current rental from the active lease, if any
    unit_id: Optional[int] = None
    unit_number: Optional[str] = None
    rent_amount: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
