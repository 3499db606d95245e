"""
Domain Exceptions

Custom exceptions for scheduling errors with discriminated error types, so
callers can tell a user-correctable validation failure from a failed quality
gate, a missing capability or a persistence failure.
"""

from enum import Enum
from uuid import UUID


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    PRECONDITION = "precondition"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_CONFLICT = "resource_conflict"
    NOT_FOUND = "not_found"
    REPOSITORY = "repository"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        full_message = f"Validation failed for field '{field_name}': {message}"
        details = details or {}
        details.update(
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            }
        )

        super().__init__(full_message, ErrorType.VALIDATION, details)


class InvalidInputError(ValidationError):
    """Malformed or missing input; rejected before any write."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
    ) -> None:
        super().__init__(field_name, value, message, error_code="INVALID_INPUT")


class PreconditionFailedError(DomainError):
    """Raised when a scheduling precondition such as the material QC gate fails."""

    def __init__(self, message: str, work_order_id: UUID | None = None) -> None:
        details = {"work_order_id": str(work_order_id) if work_order_id else None}
        super().__init__(message, ErrorType.PRECONDITION, details)
        self.work_order_id = work_order_id


class UnauthorizedError(DomainError):
    """Raised when an actor lacks the capability an operation requires."""

    def __init__(self, actor: str, capability: str) -> None:
        details = {"actor": actor, "capability": capability}
        super().__init__(
            f"Actor {actor} lacks capability: {capability}",
            ErrorType.AUTHORIZATION,
            details,
        )
        self.actor = actor
        self.capability = capability


class BusinessRuleError(DomainError):
    """Raised when business rules are violated."""

    def __init__(
        self, message: str, details: dict[str, str | int | bool | None] | None = None
    ) -> None:
        super().__init__(message, ErrorType.BUSINESS_RULE, details)


class AssignmentStatusError(BusinessRuleError):
    """Raised when an assignment status transition is invalid."""

    def __init__(
        self, assignment_id: UUID, current_status: str, attempted_status: str
    ) -> None:
        details = {
            "assignment_id": str(assignment_id),
            "current_status": current_status,
            "attempted_status": attempted_status,
        }
        super().__init__(
            f"Cannot change assignment {assignment_id} from {current_status} to {attempted_status}",
            details,
        )
        self.assignment_id = assignment_id
        self.current_status = current_status
        self.attempted_status = attempted_status


class ResourceConflictError(DomainError):
    """Raised when a machine would be double-booked."""

    def __init__(
        self, message: str, details: dict[str, str | int | bool | None] | None = None
    ) -> None:
        super().__init__(message, ErrorType.RESOURCE_CONFLICT, details)


class EntityNotFoundError(DomainError):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: UUID) -> None:
        details = {"entity_type": entity_type, "entity_id": str(entity_id)}
        super().__init__(f"{entity_type} not found: {entity_id}", ErrorType.NOT_FOUND, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class AssignmentNotFoundError(EntityNotFoundError):
    """Raised when a machine assignment is not found."""

    def __init__(self, assignment_id: UUID) -> None:
        super().__init__("Assignment", assignment_id)
        self.assignment_id = assignment_id


class WorkOrderNotFoundError(EntityNotFoundError):
    """Raised when a work order is not found."""

    def __init__(self, work_order_id: UUID) -> None:
        super().__init__("WorkOrder", work_order_id)
        self.work_order_id = work_order_id


class StoreError(DomainError):
    """Raised when the persistence layer fails mid-operation."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message, ErrorType.REPOSITORY, {"operation": operation})
        self.operation = operation
