from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: machine-readable error code, stable across releases
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(ServiceError):
    """Raised when the request carries no usable credential."""

    http_status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(ServiceError):
    """Raised when the actor is authenticated but not allowed to do this."""

    http_status = 403
    default_code = "FORBIDDEN"
    default_message = "You do not have access to this resource"


class NotFoundError(ServiceError):
    """Raised when a requested resource was not found.

    Also raised for resources owned by another tenant, so callers cannot
    probe for their existence.
    """

    http_status = 404
    default_code = "NOT_FOUND"
    default_message = "Not found"


class ConflictError(ServiceError):
    """Raised when a resource conflict occurs (e.g., duplicate entry)."""

    http_status = 409
    default_code = "CONFLICT"
    default_message = "Conflict"


# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------


class TenantIdRequiredError(ForbiddenError):
    """A platform-level actor hit a route that only makes sense inside a tenant."""

    default_code = "TENANT_ID_REQUIRED"
    default_message = "This operation requires a restaurant context"


class TenantMismatchError(ForbiddenError):
    """A payload or filter named a tenant other than the caller's own."""

    default_code = "TENANT_MISMATCH"
    default_message = "Tenant id does not match the authenticated context"


# ---------------------------------------------------------------------------
# Order acceptance
# ---------------------------------------------------------------------------


class NoActiveSubscriptionError(ForbiddenError):
    default_code = "NO_ACTIVE_SUBSCRIPTION"
    default_message = "No active subscription for this customer"


class OrderValidationError(ServiceValidationError):
    """Client-correctable order rejection; ``reason`` is echoed in details."""

    reason = "INVALID_ORDER"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None):
        merged = {"reason": self.reason}
        if details:
            merged.update(details)
        super().__init__(message, details=merged)


class PlanMismatchError(OrderValidationError):
    reason = "PLAN_MISMATCH"
    default_message = "Number of meal selections does not match the subscription plan"


class SnackNotAllowedError(OrderValidationError):
    reason = "SNACK_NOT_ALLOWED"
    default_message = "Snack selection is not allowed for this order"


class InvalidMealReferenceError(OrderValidationError):
    reason = "INVALID_MEAL_REFERENCE"
    default_message = "One or more selected meals are invalid"


class OrderDateInPastError(OrderValidationError):
    reason = "ORDER_DATE_IN_PAST"
    default_message = "Orders cannot be placed for a past date"


class OrderAlreadyExistsError(ConflictError):
    default_code = "ORDER_ALREADY_EXISTS"
    default_message = "An order already exists for this date"


# ---------------------------------------------------------------------------
# Status and notifications
# ---------------------------------------------------------------------------


class InvalidStatusTransitionError(ConflictError):
    default_code = "INVALID_STATUS_TRANSITION"
    default_message = "Order status cannot move backwards"


class OrderNotReadyError(ConflictError):
    default_code = "ORDER_NOT_READY"
    default_message = "Order is not ready yet"
