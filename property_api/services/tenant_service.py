import logging
from sqlalchemy.orm import Session

from property_api.models.tenant import Tenant
from property_api.repositories.tenant_repository import TenantRepository
from property_api.schemas.tenant_schemas import TenantCreate, TenantUpdate
from property_api.core.exceptions import ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class TenantService:
    """Service layer for tenant business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)

    def list_tenants(self) -> list[Tenant]:
        return self.tenant_repo.get_all()

    def search_tenants(self, query: str) -> list[Tenant]:
        """Find tenants whose name, email or phone contains ``query``"""
        return self.tenant_repo.search(query.strip())

    def get_tenant(self, tenant_id: int) -> Tenant:
        """
        Get tenant by ID.

        Raises:
            NotFoundException: If tenant doesn't exist
        """
        tenant = self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundException("Tenant not found")
        return tenant

    def create_tenant(self, data: TenantCreate) -> Tenant:
        """
        Create a tenant.

        Raises:
            ConflictException: If another tenant already uses the email
        """
        if self.tenant_repo.get_by_email(data.email):
            raise ConflictException("Tenant with this email already exists")

        tenant = self.tenant_repo.create(Tenant(**data.model_dump()))
        logger.info("Tenant %s created", tenant.id)
        return tenant

    def update_tenant(self, tenant_id: int, data: TenantUpdate) -> Tenant:
        """Apply the provided non-null fields to a tenant"""
        tenant = self.get_tenant(tenant_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if changes.get("email") and self.tenant_repo.get_by_email(
            changes["email"], exclude_id=tenant_id
        ):
            raise ConflictException("Tenant with this email already exists")

        for field, value in changes.items():
            setattr(tenant, field, value)
        return self.tenant_repo.update(tenant)

    def delete_tenant(self, tenant_id: int) -> None:
        """
        Delete a tenant along with its lease, payment and invoice history.

        Raises:
            NotFoundException: If tenant doesn't exist
            ConflictException: If the tenant still holds an active or pending lease
        """
        tenant = self.get_tenant(tenant_id)
        if self.tenant_repo.count_open_leases(tenant_id) > 0:
            raise ConflictException("Cannot delete tenant with active or pending leases")

        self.tenant_repo.delete(tenant)
        logger.info("Tenant %s deleted", tenant_id)
