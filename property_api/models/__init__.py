"""ORM models. Importing this package registers every mapper with Base."""

from property_api.models.base import Base
from property_api.models.tenant import Tenant
from property_api.models.unit import Unit
from property_api.models.lease import Lease
from property_api.models.payment import Payment
from property_api.models.invoice import Invoice, InvoiceLineItem

__all__ = ["Base", "Tenant", "Unit", "Lease", "Payment", "Invoice", "InvoiceLineItem"]
