from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from property_api.database import get_db
from property_api.services.tenant_service import TenantService
from property_api.schemas.common_schemas import MessageResponse
from property_api.schemas.tenant_schemas import TenantCreate, TenantResponse, TenantUpdate

router = APIRouter()


@router.get("", response_model=list[TenantResponse])
def list_tenants(db: Session = Depends(get_db)):
    """Get all tenants ordered by name"""
    return TenantService(db).list_tenants()


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(data: TenantCreate, db: Session = Depends(get_db)):
    """
    Create a tenant.

    - Email must be unique
    """
    return TenantService(db).create_tenant(data)


@router.get("/search/{query}", response_model=list[TenantResponse])
def search_tenants(query: str, db: Session = Depends(get_db)):
    """Search tenants by name, email or phone (case-insensitive substring)"""
    return TenantService(db).search_tenants(query)


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(tenant_id: int, db: Session = Depends(get_db)):
    return TenantService(db).get_tenant(tenant_id)


@router.put("/{tenant_id}", response_model=TenantResponse)
def update_tenant(tenant_id: int, data: TenantUpdate, db: Session = Depends(get_db)):
    """Update tenant details (only provided fields change)"""
    return TenantService(db).update_tenant(tenant_id, data)


@router.delete("/{tenant_id}", response_model=MessageResponse)
def delete_tenant(tenant_id: int, db: Session = Depends(get_db)):
    """
    Delete a tenant.

    - Rejected while the tenant holds an active or pending lease
    - Cascades to the tenant's lease history, payments and invoices
    """
    TenantService(db).delete_tenant(tenant_id)
    return MessageResponse(message="Tenant deleted successfully")
