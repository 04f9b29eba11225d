"""Response bodies and error format shared by all endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldError(_CamelModel):
    """One invalid request field."""

    field: str = Field(..., description="Dotted path of the offending field")
    message: str = Field(..., description="What is wrong with it")


class ErrorBody(_CamelModel):
    """
    Body of every non-2xx response.

    `error` is the human-readable message, `code` the machine-readable one.
    `errors` is only set for validation failures.
    """

    error: str
    code: str
    errors: list[FieldError] | None = None
    request_id: str | None = None


class MessageResponse(_CamelModel):
    message: str


class CustomerCreated(MessageResponse):
    customer_id: int


class AddressCreated(MessageResponse):
    address_id: int


class SingleAddressCheck(_CamelModel):
    has_only_one_address: bool


class HealthStatus(_CamelModel):
    """Liveness probe payload."""

    status: str
    timestamp: datetime
    database: str
    backend: str
    uptime: float = Field(..., description="Seconds since startup")


def error_response(
    code: str,
    message: str,
    errors: list[dict] | None = None,
    request_id: str | None = None,
) -> ErrorBody:
    """Create an error body."""
    return ErrorBody(
        error=message,
        code=code,
        errors=[FieldError(**e) for e in errors] if errors else None,
        request_id=request_id,
    )


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Customer & Address
    LAST_ADDRESS = "LAST_ADDRESS"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Messages:
    """Human-readable response messages."""

    CUSTOMER_CREATED = "Customer created successfully"
    CUSTOMER_UPDATED = "Customer updated successfully"
    CUSTOMER_DELETED = "Customer and all addresses deleted successfully"
    ADDRESS_ADDED = "Address added successfully"
    ADDRESS_UPDATED = "Address updated successfully"
    ADDRESS_DELETED = "Address deleted successfully"
    VALIDATION_FAILED = "Request validation failed"
    INTERNAL_ERROR = "Something went wrong, please try again later."
