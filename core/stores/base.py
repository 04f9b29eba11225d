"""
Record store interface shared by the Postgres and in-memory backends.

A record store is the sole writer of customers and addresses. Every
operation enforces the cross-entity rules itself:

- a customer is created together with at least one address, atomically
- at most one address per customer is primary
- a customer's last address cannot be deleted
- deleting a customer deletes its addresses

Failures are raised as the typed exceptions in core.exceptions.
"""

import math
from abc import ABC, abstractmethod

from core.exceptions import InvalidInputError
from core.models import (
    Address,
    AddressCreate,
    AddressUpdate,
    Customer,
    CustomerCreate,
    CustomerDetail,
    CustomerPage,
    CustomerQuery,
    CustomerUpdate,
    Pagination,
)


class RecordStore(ABC):
    """Owner of the customer and address collections."""

    backend: str = "abstract"

    def initialize(self) -> None:
        """Prepare storage. Called once at application startup."""

    def close(self) -> None:
        """Release storage resources. Called once at shutdown."""

    @abstractmethod
    def ping(self) -> bool:
        """True if the backing storage is reachable."""

    @abstractmethod
    def create_customer(
        self, data: CustomerCreate, addresses: list[AddressCreate]
    ) -> CustomerDetail:
        """
        Create a customer and all of its addresses as one unit.

        Raises:
            InvalidInputError: If no address is supplied
            DuplicatePhoneError: If the phone number is taken
        """

    @abstractmethod
    def get_customer(self, customer_id: int) -> CustomerDetail:
        """
        Get customer with its addresses.

        Raises:
            CustomerNotFoundError: If customer does not exist
        """

    @abstractmethod
    def list_customers(self, query: CustomerQuery) -> CustomerPage:
        """Filtered, sorted page of customers. Out-of-range pages are empty."""

    @abstractmethod
    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        """
        Update customer fields (only non-None fields are changed).

        Raises:
            CustomerNotFoundError: If customer does not exist
            DuplicatePhoneError: If the new phone belongs to another customer
        """

    @abstractmethod
    def delete_customer(self, customer_id: int) -> None:
        """
        Delete a customer and every address it owns.

        Raises:
            CustomerNotFoundError: If customer does not exist
        """

    @abstractmethod
    def list_addresses(self, customer_id: int) -> list[Address]:
        """Addresses of a customer in creation order. Empty if none."""

    @abstractmethod
    def add_address(self, customer_id: int, data: AddressCreate) -> Address:
        """
        Attach a new address to a customer.

        Raises:
            CustomerNotFoundError: If customer does not exist
        """

    @abstractmethod
    def update_address(self, address_id: int, data: AddressUpdate) -> Address:
        """
        Update address fields (only non-None fields are changed).

        Raises:
            AddressNotFoundError: If address does not exist
        """

    @abstractmethod
    def delete_address(self, address_id: int) -> None:
        """
        Delete an address.

        Raises:
            AddressNotFoundError: If address does not exist
            LastAddressError: If it is the customer's only address
        """

    @abstractmethod
    def is_single_address(self, customer_id: int) -> bool:
        """True iff the customer owns exactly one address."""


def require_addresses(addresses: list[AddressCreate]) -> None:
    """Reject a customer creation that carries no address."""
    if not addresses:
        raise InvalidInputError(
            "At least one address is required",
            [{"field": "addresses", "message": "At least one address is required"}],
        )


def primary_flags(addresses: list[AddressCreate]) -> list[bool]:
    """
    Resolve which of a new customer's addresses is primary.

    The first address flagged primary wins. If none is flagged, the first
    address becomes primary. Exactly one True is returned for a non-empty list.
    """
    flags = [False] * len(addresses)
    if not addresses:
        return flags

    chosen = next((i for i, a in enumerate(addresses) if a.is_primary), 0)
    flags[chosen] = True
    return flags


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so filter text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_page(customers: list[Customer], total: int, query: CustomerQuery) -> CustomerPage:
    """Wrap one page of customers with its pagination metadata."""
    return CustomerPage(
        customers=customers,
        pagination=Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=math.ceil(total / query.limit) if total else 0,
        ),
    )
