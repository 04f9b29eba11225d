"""API modules for HTTP interface."""

from api.base import (
    ErrorBody,
    FieldError,
    MessageResponse,
    CustomerCreated,
    AddressCreated,
    SingleAddressCheck,
    HealthStatus,
    error_response,
    ErrorCodes,
    Messages,
)
