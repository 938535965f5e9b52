class CaseManagerException(Exception):
    """Base exception for the case manager"""

    pass


class UnauthorizedException(CaseManagerException):
    """Raised when JWT validation fails"""

    pass


class NotFoundException(CaseManagerException):
    """
    Raised when no row matches both the record id and the caller's tenancy filter.

    Covers rows that do not exist and rows owned by another centre alike.
    """

    pass


class ForbiddenException(CaseManagerException):
    """Raised when the caller's role has no grant for the operation"""

    pass


class ValidationException(CaseManagerException):
    """Raised for malformed input (unknown fields, undecodable payloads, constraint violations)"""

    pass


class StoreException(CaseManagerException):
    """
    Raised when the relational store fails a statement.

    Carries the operation and entity name only. Bound parameter values are
    never included so that tenant data cannot leak into logs or responses.
    """

    def __init__(self, operation: str, entity: str, reason: str = "store error"):
        self.operation = operation
        self.entity = entity
        self.reason = reason
        super().__init__(f"{operation} on {entity} failed: {reason}")


class TransientStoreException(StoreException):
    """Raised for connection loss, timeouts and deadlocks; safe to retry"""

    def __init__(self, operation: str, entity: str, reason: str = "store temporarily unavailable"):
        super().__init__(operation, entity, reason)
