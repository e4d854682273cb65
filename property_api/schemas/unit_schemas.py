from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional

from property_api.models.enums import UnitStatus, UnitType


class UnitCreate(BaseModel):
    """Schema for creating a new unit"""

    unit_number: str = Field(..., min_length=1, max_length=50)
    type: UnitType
    square_feet: Optional[int] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    rent_amount: float = Field(..., ge=0)
    status: UnitStatus = UnitStatus.VACANT
    features: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None


class UnitUpdate(BaseModel):
    """Schema for updating a unit"""

    unit_number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[UnitType] = None
    square_feet: Optional[int] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    rent_amount: Optional[float] = Field(None, ge=0)
    status: Optional[UnitStatus] = None
    features: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None


class UnitStatusUpdate(BaseModel):
    status: UnitStatus


class UnitResponse(BaseModel):
    """Schema for unit response"""

    model_config = {"from_attributes": True}

    id: int
    unit_number: str
    type: UnitType
    square_feet: Optional[int]
    bedrooms: Optional[int]
    bathrooms: Optional[float]
    rent_amount: float
    status: UnitStatus
    features: Optional[str]
    address: Optional[str]
    description: Optional[str]
    # Active lease, if any
    tenant_name: Optional[str] = None
    tenant_email: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    lease_rent: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class OccupancyStatusCount(BaseModel):
    """Units in one status and their share of all units"""

    status: UnitStatus
    count: int
    percentage: float


class OccupancyStatsResponse(BaseModel):
    """Occupancy breakdown and income potential across all units"""

    by_status: list[OccupancyStatusCount]
    total_units: int
    occupied_units: int
    vacant_units: int
    maintenance_units: int
    occupancy_rate: float
    potential_income: float
    actual_income: float
