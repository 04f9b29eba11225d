"""Customer domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.models.address import Address, AddressCreate

PHONE_PATTERN = r"^[0-9]{10}$"

# Keeps (page - 1) * limit well inside a bigint OFFSET
MAX_PAGE = 1_000_000

# Shared config: camelCase on the wire, snake_case in Python, trimmed text
_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class CustomerCreate(BaseModel):
    """Data required to create a customer."""

    model_config = _WIRE_CONFIG

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)


class CustomerUpdate(BaseModel):
    """Data that can be updated on a customer. All fields optional."""

    model_config = _WIRE_CONFIG

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)


class CustomerWithAddressesCreate(BaseModel):
    """Request body for creating a customer together with its addresses."""

    model_config = _WIRE_CONFIG

    customer: CustomerCreate
    addresses: list[AddressCreate] = Field(..., min_length=1)


class Customer(BaseModel):
    """Full customer entity as stored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    first_name: str
    last_name: str
    phone_number: str
    created_at: datetime


class CustomerDetail(Customer):
    """Customer with its addresses embedded."""

    addresses: list[Address] = Field(default_factory=list)


class SortField(str, Enum):
    """Customer fields a listing may be ordered by."""

    ID = "id"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    PHONE_NUMBER = "phoneNumber"
    CREATED_AT = "createdAt"

    @property
    def attribute(self) -> str:
        """Snake-case attribute / column name."""
        return {
            SortField.ID: "id",
            SortField.FIRST_NAME: "first_name",
            SortField.LAST_NAME: "last_name",
            SortField.PHONE_NUMBER: "phone_number",
            SortField.CREATED_AT: "created_at",
        }[self]


class SortOrder(str, Enum):
    """Listing direction."""

    ASC = "asc"
    DESC = "desc"


class CustomerQuery(BaseModel):
    """Pagination, sorting and address filters for a customer listing."""

    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(5, ge=1, le=100)
    sort_by: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC
    city: str | None = None
    state: str | None = None
    pin_code: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def address_filters(self) -> dict[str, str]:
        """Non-empty address filters keyed by attribute name."""
        filters = {"city": self.city, "state": self.state, "pin_code": self.pin_code}
        return {k: v for k, v in filters.items() if v}


class Pagination(BaseModel):
    """Pagination metadata returned alongside a page of customers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class CustomerPage(BaseModel):
    """One page of a customer listing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customers: list[Customer]
    pagination: Pagination
