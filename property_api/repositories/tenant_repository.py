"""Repository for Tenant model operations."""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from property_api.models.tenant import Tenant
from property_api.models.lease import Lease
from property_api.models.enums import OPEN_LEASE_STATUSES


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def _with_history(self):
        """Base query loading leases (with units) and payments for the read-model fields"""
        return self.db.query(Tenant).options(
            selectinload(Tenant.leases).joinedload(Lease.unit),
            selectinload(Tenant.payments),
        )

    def get_by_id(self, tenant_id: int) -> Tenant | None:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant ID

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_by_email(self, email: str, exclude_id: int | None = None) -> Tenant | None:
        """Get tenant by email, optionally ignoring one tenant (for updates)"""
        query = self.db.query(Tenant).filter(func.lower(Tenant.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(Tenant.id != exclude_id)
        return query.first()

    def get_all(self) -> list[Tenant]:
        """Get all tenants ordered by name"""
        return self._with_history().order_by(Tenant.name.asc(), Tenant.id.asc()).all()

    def search(self, term: str) -> list[Tenant]:
        """
        Case-insensitive substring search over name, email and phone.

        Args:
            term: Text to look for

        Returns:
            Matching tenants ordered by name
        """
        pattern = f"%{term}%"
        return (
            self._with_history()
            .filter(
                or_(
                    Tenant.name.ilike(pattern),
                    Tenant.email.ilike(pattern),
                    Tenant.phone.ilike(pattern),
                )
            )
            .order_by(Tenant.name.asc())
            .all()
        )

    def count_open_leases(self, tenant_id: int) -> int:
        """Count the tenant's active or pending leases"""
        return (
            self.db.query(func.count(Lease.id))
            .filter(Lease.tenant_id == tenant_id, Lease.status.in_(OPEN_LEASE_STATUSES))
            .scalar()
        )

    def create(self, tenant: Tenant) -> Tenant:
        """
        Create a new tenant.

        Args:
            tenant: Tenant object to create

        Returns:
            Created Tenant object with ID populated
        """
        self.db.add(tenant)
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def update(self, tenant: Tenant) -> Tenant:
        """Persist changes made to a tenant"""
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def delete(self, tenant: Tenant) -> None:
        """
        Delete a tenant.

        WARNING: This will cascade delete all leases, payments and invoices
        associated with this tenant.

        Args:
            tenant: Tenant object to delete
        """
        self.db.delete(tenant)
        self.db.commit()
