from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Optional

from property_api.models.enums import LeaseStatus


class LeaseCreate(BaseModel):
    """Schema for creating a new lease"""

    tenant_id: int = Field(..., gt=0)
    unit_id: int = Field(..., gt=0)
    start_date: date
    end_date: date
    rent_amount: Optional[float] = Field(None, ge=0, description="Defaults to the unit's rent")
    security_deposit: Optional[float] = Field(None, ge=0)
    lease_terms: Optional[str] = None
    status: LeaseStatus = LeaseStatus.PENDING

    @model_validator(mode="after")
    def check_dates(self) -> "LeaseCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaseUpdate(BaseModel):
    """Schema for updating a lease (only provided fields change)"""

    tenant_id: Optional[int] = Field(None, gt=0)
    unit_id: Optional[int] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)
    lease_terms: Optional[str] = None
    status: Optional[LeaseStatus] = None


class LeaseTerminate(BaseModel):
    """Termination details; date defaults to today"""

    termination_date: Optional[date] = None
    termination_reason: Optional[str] = Field(None, max_length=500)


class LeaseRenew(BaseModel):
    """Renewal terms; rent and terms carry forward when omitted"""

    new_start_date: date
    new_end_date: date
    new_rent_amount: Optional[float] = Field(None, ge=0)
    new_lease_terms: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "LeaseRenew":
        if self.new_end_date < self.new_start_date:
            raise ValueError("new_end_date must not be before new_start_date")
        return self


class LeaseResponse(BaseModel):
    """Schema for lease response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    unit_id: int
    tenant_name: Optional[str]
    tenant_email: Optional[str]
    unit_number: Optional[str]
    unit_type: Optional[str]
    start_date: date
    end_date: date
    rent_amount: float
    security_deposit: Optional[float]
    lease_terms: Optional[str]
    status: LeaseStatus
    termination_date: Optional[date]
    termination_reason: Optional[str]
    previous_lease_id: Optional[int]
    renewal_id: Optional[int]
    created_at: datetime
    updated_at: datetime
