"""Core domain models."""

from core.models.address import Address, AddressCreate, AddressUpdate
from core.models.customer import (
    Customer,
    CustomerCreate,
    CustomerUpdate,
    CustomerDetail,
    CustomerWithAddressesCreate,
    CustomerQuery,
    CustomerPage,
    Pagination,
    SortField,
    SortOrder,
)

__all__ = [
    # Address
    "Address", "AddressCreate", "AddressUpdate",
    # Customer
    "Customer", "CustomerCreate", "CustomerUpdate", "CustomerDetail",
    "CustomerWithAddressesCreate",
    # Listing
    "CustomerQuery", "CustomerPage", "Pagination", "SortField", "SortOrder",
]
