class PropertyManagerException(Exception):
    """Base exception for the property manager"""

    pass


class NotFoundException(PropertyManagerException):
    """Raised when a referenced tenant, unit, lease, payment or invoice is absent"""

    pass


class ConflictException(PropertyManagerException):
    """Raised when a write would clash with existing records (open lease on unit, duplicate email)"""

    pass


class InvalidStateException(PropertyManagerException):
    """Raised when an operation is not allowed in the record's current status"""

    pass


class ValidationException(PropertyManagerException):
    """Raised for business logic validation errors"""

    pass
