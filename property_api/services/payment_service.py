import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from property_api.models.payment import Payment
from property_api.repositories.payment_repository import PaymentRepository
from property_api.repositories.lease_repository import LeaseRepository
from property_api.repositories.tenant_repository import TenantRepository
from property_api.schemas.payment_schemas import (
    ArrearsEntry,
    PaymentCreate,
    PaymentMonthlyStat,
    PaymentUpdate,
)
from property_api.core.dates import last_twelve_months_start
from property_api.core.exceptions import NotFoundException, ValidationException

logger = logging.getLogger(__name__)

# Rent is prorated over 30-day months when estimating what a tenant owes
DAYS_PER_BILLING_MONTH = 30


class PaymentService:
    """Service layer for payment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.payment_repo = PaymentRepository(db)
        self.lease_repo = LeaseRepository(db)
        self.tenant_repo = TenantRepository(db)

    def create_payment(self, data: PaymentCreate) -> Payment:
        """
        Record a payment.

        Raises:
            NotFoundException: If tenant or lease doesn't exist
        """
        self._check_references(data.tenant_id, data.lease_id)

        payment = self.payment_repo.create(Payment(**data.model_dump()))
        logger.info(
            "Payment %s of %.2f recorded for tenant %s", payment.id, data.amount, data.tenant_id
        )
        return self.get_payment(payment.id)

    def get_payment(self, payment_id: int) -> Payment:
        """
        Get payment by ID.

        Raises:
            NotFoundException: If payment doesn't exist
        """
        payment = self.payment_repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundException("Payment not found")
        return payment

    def get_payments(
        self,
        tenant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Payment]:
        """
        Get payments with filters.

        Raises:
            ValidationException: If end_date is before start_date
        """
        if start_date and end_date and end_date < start_date:
            raise ValidationException("end_date must not be before start_date")
        return self.payment_repo.get_with_filters(
            tenant_id=tenant_id, start_date=start_date, end_date=end_date
        )

    def update_payment(self, payment_id: int, data: PaymentUpdate) -> Payment:
        """Apply the provided fields to a payment"""
        payment = self.get_payment(payment_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        self._check_references(changes.get("tenant_id"), changes.get("lease_id"))

        for field, value in changes.items():
            setattr(payment, field, value)
        self.payment_repo.update(payment)
        return self.get_payment(payment_id)

    def delete_payment(self, payment_id: int) -> None:
        payment = self.get_payment(payment_id)
        self.payment_repo.delete(payment)
        logger.info("Payment %s deleted", payment_id)

    def get_monthly_stats(self, today: Optional[date] = None) -> list[PaymentMonthlyStat]:
        """
        Count and sum of payments per month and payment type.

        Covers the current month and the 11 before it, newest month first.
        """
        since = last_twelve_months_start(today)
        buckets: dict[tuple[str, object], list[float]] = defaultdict(list)
        for payment in self.payment_repo.get_with_filters(start_date=since):
            month = payment.payment_date.strftime("%Y-%m")
            buckets[(month, payment.payment_type)].append(float(payment.amount))

        stats = [
            PaymentMonthlyStat(
                month=month,
                payment_type=payment_type,
                payment_count=len(amounts),
                total_amount=round(sum(amounts), 2),
            )
            for (month, payment_type), amounts in buckets.items()
        ]
        stats.sort(key=lambda s: (s.month, s.payment_type.value))
        stats.sort(key=lambda s: s.month, reverse=True)
        return stats

    def compute_arrears(self, today: Optional[date] = None) -> list[ArrearsEntry]:
        """
        Estimate what each tenant with an active lease still owes.

        expected = days since lease start / 30 * monthly rent, compared to the
        sum of the tenant's rent payments. Only positive balances are
        returned, largest first.
        """
        today = today or date.today()
        paid_by_tenant = self.payment_repo.rent_paid_by_tenant()

        entries = []
        for lease in self.lease_repo.get_active():
            days_elapsed = max((today - lease.start_date).days, 0)
            rent = float(lease.rent_amount)
            expected = days_elapsed / DAYS_PER_BILLING_MONTH * rent
            paid = paid_by_tenant.get(lease.tenant_id, 0.0)
            arrears = expected - paid
            if arrears <= 0:
                continue

            entries.append(
                ArrearsEntry(
                    tenant_id=lease.tenant_id,
                    tenant_name=lease.tenant.name,
                    email=lease.tenant.email,
                    phone=lease.tenant.phone,
                    lease_id=lease.id,
                    unit_number=lease.unit.unit_number,
                    rent_amount=rent,
                    start_date=lease.start_date,
                    days_elapsed=days_elapsed,
                    expected_amount=round(expected, 2),
                    total_paid=round(paid, 2),
                    arrears=round(arrears, 2),
                )
            )

        entries.sort(key=lambda e: e.arrears, reverse=True)
        return entries

    def _check_references(self, tenant_id: Optional[int], lease_id: Optional[int]) -> None:
        if tenant_id is not None and not self.tenant_repo.get_by_id(tenant_id):
            raise NotFoundException("Tenant not found")
        if lease_id is not None and not self.lease_repo.get_by_id(lease_id):
            raise NotFoundException("Lease not found")
