from datetime import date
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from property_api.models.payment import Payment
from property_api.models.lease import Lease
from property_api.models.enums import PaymentType


class PaymentRepository:
    """Repository for Payment data access"""

    def __init__(self, db: Session):
        self.db = db

    def _with_parties(self):
        return self.db.query(Payment).options(
            joinedload(Payment.tenant),
            joinedload(Payment.lease).joinedload(Lease.unit),
        )

    def create(self, payment: Payment) -> Payment:
        """Create a new payment"""
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """Get payment by ID"""
        return self._with_parties().filter(Payment.id == payment_id).first()

    def get_with_filters(
        self,
        tenant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Payment]:
        """
        Get payments, newest first.

        Args:
            tenant_id: Optional tenant filter
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)

        Returns:
            List of payments with tenant and lease/unit loaded
        """
        query = self._with_parties()

        if tenant_id is not None:
            query = query.filter(Payment.tenant_id == tenant_id)

        if start_date is not None:
            query = query.filter(Payment.payment_date >= start_date)

        if end_date is not None:
            query = query.filter(Payment.payment_date <= end_date)

        return query.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()

    def update(self, payment: Payment) -> Payment:
        """Update a payment"""
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def delete(self, payment: Payment) -> None:
        """Delete a payment"""
        self.db.delete(payment)
        self.db.commit()

    def rent_paid_by_tenant(self) -> dict[int, float]:
        """Total of rent-type payments per tenant"""
        rows = (
            self.db.query(Payment.tenant_id, func.sum(Payment.amount))
            .filter(Payment.payment_type == PaymentType.RENT)
            .group_by(Payment.tenant_id)
            .all()
        )
        return {tenant_id: float(total or 0) for tenant_id, total in rows}

