"""
In-memory record store.

Customers and addresses live in insertion-ordered dicts owned by the store
instance. One re-entrant lock guards every operation, reads included, so
multi-step writes (create with addresses, primary reassignment, cascade
delete) are never observed half-done.

Multi-row creation is staged: every record is built first and the
collections are only touched once all of them exist.
"""

import logging
import threading

from core.exceptions import (
    AddressNotFoundError,
    CustomerNotFoundError,
    DuplicatePhoneError,
    LastAddressError,
)
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
    SortOrder,
)
from core.stores.base import RecordStore, build_page, primary_flags, require_addresses
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class MemoryRecordStore(RecordStore):
    """Record store backed by process-local collections."""

    backend = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._customers: dict[int, Customer] = {}
        self._addresses: dict[int, Address] = {}
        self._last_customer_id = 0
        self._last_address_id = 0

    def ping(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    def create_customer(
        self, data: CustomerCreate, addresses: list[AddressCreate]
    ) -> CustomerDetail:
        require_addresses(addresses)

        with self._lock:
            self._ensure_phone_available(data.phone_number)

            # Stage
            customer = Customer(
                id=self._last_customer_id + 1,
                first_name=data.first_name,
                last_name=data.last_name,
                phone_number=data.phone_number,
                created_at=now_utc(),
            )
            staged = [
                Address(
                    id=self._last_address_id + offset,
                    customer_id=customer.id,
                    address_line=address.address_line,
                    city=address.city,
                    state=address.state,
                    pin_code=address.pin_code,
                    is_primary=primary,
                )
                for offset, (address, primary) in enumerate(
                    zip(addresses, primary_flags(addresses)), start=1
                )
            ]

            # Publish
            self._customers[customer.id] = customer
            for address in staged:
                self._addresses[address.id] = address
            self._last_customer_id = customer.id
            self._last_address_id += len(staged)

        logger.info(f"Created customer {customer.id} with {len(staged)} address(es)")
        return CustomerDetail(**customer.model_dump(), addresses=staged)

    def get_customer(self, customer_id: int) -> CustomerDetail:
        with self._lock:
            customer = self._get_customer(customer_id)
            return CustomerDetail(
                **customer.model_dump(),
                addresses=self._addresses_of(customer_id),
            )

    def list_customers(self, query: CustomerQuery) -> CustomerPage:
        filters = query.address_filters

        with self._lock:
            matching = [
                c for c in self._customers.values()
                if not filters or any(
                    _matches(a, filters) for a in self._addresses_of(c.id)
                )
            ]

        # Plain str ordering is by code point, as COLLATE "C" in postgres
        attribute = query.sort_by.attribute
        matching.sort(
            key=lambda c: (getattr(c, attribute), c.id),
            reverse=query.order == SortOrder.DESC,
        )

        page = matching[query.offset:query.offset + query.limit]
        return build_page(page, len(matching), query)

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        updates = data.model_dump(exclude_none=True)

        with self._lock:
            current = self._get_customer(customer_id)
            if not updates:
                return current

            phone = updates.get("phone_number")
            if phone is not None and phone != current.phone_number:
                self._ensure_phone_available(phone)

            updated = current.model_copy(update=updates)
            self._customers[customer_id] = updated

        logger.info(f"Updated customer {customer_id}: {', '.join(sorted(updates))}")
        return updated

    def delete_customer(self, customer_id: int) -> None:
        with self._lock:
            self._get_customer(customer_id)
            owned = [a.id for a in self._addresses.values() if a.customer_id == customer_id]
            for address_id in owned:
                del self._addresses[address_id]
            del self._customers[customer_id]

        logger.info(f"Deleted customer {customer_id} and {len(owned)} address(es)")

    # -------------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------------

    def list_addresses(self, customer_id: int) -> list[Address]:
        with self._lock:
            return self._addresses_of(customer_id)

    def add_address(self, customer_id: int, data: AddressCreate) -> Address:
        with self._lock:
            self._get_customer(customer_id)
            siblings = self._addresses_of(customer_id)

            make_primary = data.is_primary or not siblings
            if make_primary:
                self._clear_primary(customer_id)

            address = Address(
                id=self._last_address_id + 1,
                customer_id=customer_id,
                address_line=data.address_line,
                city=data.city,
                state=data.state,
                pin_code=data.pin_code,
                is_primary=make_primary,
            )
            self._addresses[address.id] = address
            self._last_address_id = address.id

        logger.info(f"Added address {address.id} to customer {customer_id}")
        return address

    def update_address(self, address_id: int, data: AddressUpdate) -> Address:
        updates = data.model_dump(exclude_none=True)

        with self._lock:
            current = self._get_address(address_id)
            if not updates:
                return current

            if updates.get("is_primary"):
                self._clear_primary(current.customer_id, keep=address_id)

            updated = current.model_copy(update=updates)
            self._addresses[address_id] = updated

        logger.info(f"Updated address {address_id}: {', '.join(sorted(updates))}")
        return updated

    def delete_address(self, address_id: int) -> None:
        with self._lock:
            address = self._get_address(address_id)
            if len(self._addresses_of(address.customer_id)) <= 1:
                logger.warning(
                    f"Refused to delete address {address_id}: last address of "
                    f"customer {address.customer_id}"
                )
                raise LastAddressError(address_id, address.customer_id)

            del self._addresses[address_id]

        logger.info(f"Deleted address {address_id}")

    def is_single_address(self, customer_id: int) -> bool:
        with self._lock:
            return len(self._addresses_of(customer_id)) == 1

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _get_customer(self, customer_id: int) -> Customer:
        customer = self._customers.get(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    def _get_address(self, address_id: int) -> Address:
        address = self._addresses.get(address_id)
        if address is None:
            raise AddressNotFoundError(address_id)
        return address

    def _addresses_of(self, customer_id: int) -> list[Address]:
        return [a for a in self._addresses.values() if a.customer_id == customer_id]

    def _ensure_phone_available(self, phone_number: str) -> None:
        if any(c.phone_number == phone_number for c in self._customers.values()):
            logger.warning("Rejected duplicate phone number")
            raise DuplicatePhoneError(phone_number)

    def _clear_primary(self, customer_id: int, keep: int | None = None) -> None:
        for address in self._addresses_of(customer_id):
            if address.is_primary and address.id != keep:
                self._addresses[address.id] = address.model_copy(update={"is_primary": False})


def _matches(address: Address, filters: dict[str, str]) -> bool:
    """Case-insensitive substring match of every filter against one address."""
    return all(
        needle.lower() in getattr(address, field).lower()
        for field, needle in filters.items()
    )
