"""
PostgreSQL record store.

Each multi-step operation runs inside one PostgresClient.transaction().
Address writes lock the owning customer row (SELECT ... FOR UPDATE) first,
so primary-flag reassignment and the last-address check cannot interleave
with another write to the same customer. Deleting a customer relies on the
ON DELETE CASCADE foreign key to remove its addresses in the same statement.
"""

import logging
from typing import Any

import psycopg2
import psycopg2.errors

from clients.postgres_client import PostgresClient, Transaction
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
)
from core.stores.base import (
    RecordStore,
    build_page,
    escape_like,
    primary_flags,
    require_addresses,
)
from utils.timezone import now_utc, to_utc

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS customers (
    id SERIAL PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    phone_number TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT customers_phone_number_key UNIQUE (phone_number)
);

CREATE TABLE IF NOT EXISTS addresses (
    id SERIAL PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
    address_line TEXT NOT NULL,
    city TEXT NOT NULL,
    state TEXT NOT NULL,
    pin_code TEXT NOT NULL,
    is_primary BOOLEAN NOT NULL DEFAULT false
);

CREATE INDEX IF NOT EXISTS addresses_customer_id_idx ON addresses (customer_id);
"""

_PHONE_CONSTRAINT = "customers_phone_number_key"

# Valid columns that can be updated
_CUSTOMER_UPDATABLE_COLUMNS = {"first_name", "last_name", "phone_number"}
_ADDRESS_UPDATABLE_COLUMNS = {"address_line", "city", "state", "pin_code", "is_primary"}

# Text sorts compare by code point, matching the in-memory store
_TEXT_SORT_COLUMNS = {"first_name", "last_name", "phone_number"}


def _customer_from_row(row: dict[str, Any]) -> Customer:
    return Customer.model_validate({**row, "created_at": to_utc(row["created_at"])})


def _is_phone_conflict(exc: psycopg2.errors.UniqueViolation) -> bool:
    return exc.diag.constraint_name == _PHONE_CONSTRAINT


def _set_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build "col = %s, ..." and its params from whitelisted updates."""
    return (
        ", ".join(f"{column} = %s" for column in updates),
        list(updates.values()),
    )


class PostgresRecordStore(RecordStore):
    """Record store backed by PostgreSQL."""

    backend = "postgres"

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def initialize(self) -> None:
        """Create tables and indexes if they don't exist."""
        self.postgres.execute(SCHEMA)
        logger.info("Database schema ready")

    def close(self) -> None:
        self.postgres.close()

    def ping(self) -> bool:
        try:
            return self.postgres.execute_scalar("SELECT 1") == 1
        except psycopg2.Error as e:
            logger.error(f"Database ping failed: {e}")
            return False

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    def create_customer(
        self, data: CustomerCreate, addresses: list[AddressCreate]
    ) -> CustomerDetail:
        require_addresses(addresses)

        try:
            with self.postgres.transaction() as tx:
                customer = _customer_from_row(tx.execute_single(
                    """
                    INSERT INTO customers (first_name, last_name, phone_number, created_at)
                    VALUES (%s, %s, %s, %s)
                    RETURNING *
                    """,
                    (data.first_name, data.last_name, data.phone_number, now_utc())
                ))

                created = [
                    self._insert_address(tx, customer.id, address, primary)
                    for address, primary in zip(addresses, primary_flags(addresses))
                ]
        except psycopg2.errors.UniqueViolation as e:
            if not _is_phone_conflict(e):
                raise
            logger.warning("Rejected duplicate phone number")
            raise DuplicatePhoneError(data.phone_number) from e

        logger.info(f"Created customer {customer.id} with {len(created)} address(es)")
        return CustomerDetail(**customer.model_dump(), addresses=created)

    def get_customer(self, customer_id: int) -> CustomerDetail:
        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                "SELECT * FROM customers WHERE id = %s",
                (customer_id,)
            )
            if row is None:
                raise CustomerNotFoundError(customer_id)

            addresses = self._select_addresses(tx, customer_id)

        return CustomerDetail(**_customer_from_row(row).model_dump(), addresses=addresses)

    def list_customers(self, query: CustomerQuery) -> CustomerPage:
        where = ""
        params: list[Any] = []

        filters = query.address_filters
        if filters:
            conditions = " AND ".join(f"a.{column} ILIKE %s" for column in filters)
            where = (
                "WHERE EXISTS (SELECT 1 FROM addresses a "
                f"WHERE a.customer_id = c.id AND {conditions})"
            )
            params = [f"%{escape_like(value)}%" for value in filters.values()]

        # Column and direction come from enums, never from raw input
        column = f"c.{query.sort_by.attribute}"
        if query.sort_by.attribute in _TEXT_SORT_COLUMNS:
            column += ' COLLATE "C"'
        direction = query.order.value.upper()

        with self.postgres.transaction() as tx:
            total = tx.execute_scalar(
                f"SELECT COUNT(*) FROM customers c {where}",
                tuple(params)
            )
            rows = tx.execute(
                f"""
                SELECT c.* FROM customers c
                {where}
                ORDER BY {column} {direction}, c.id {direction}
                LIMIT %s OFFSET %s
                """,
                tuple(params + [query.limit, query.offset])
            )

        return build_page([_customer_from_row(row) for row in rows], total, query)

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        updates = data.model_dump(exclude_none=True)
        valid_updates = {k: v for k, v in updates.items() if k in _CUSTOMER_UPDATABLE_COLUMNS}

        try:
            with self.postgres.transaction() as tx:
                current = self._lock_customer(tx, customer_id)
                if not valid_updates:
                    return _customer_from_row(current)

                set_clause, params = _set_clause(valid_updates)
                row = tx.execute_single(
                    f"UPDATE customers SET {set_clause} WHERE id = %s RETURNING *",
                    tuple(params + [customer_id])
                )
        except psycopg2.errors.UniqueViolation as e:
            if not _is_phone_conflict(e):
                raise
            logger.warning(f"Rejected duplicate phone number for customer {customer_id}")
            raise DuplicatePhoneError(data.phone_number) from e

        logger.info(f"Updated customer {customer_id}: {', '.join(sorted(valid_updates))}")
        return _customer_from_row(row)

    def delete_customer(self, customer_id: int) -> None:
        deleted = self.postgres.execute(
            "DELETE FROM customers WHERE id = %s RETURNING id",
            (customer_id,)
        )
        if not deleted:
            raise CustomerNotFoundError(customer_id)

        logger.info(f"Deleted customer {customer_id} and its addresses")

    # -------------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------------

    def list_addresses(self, customer_id: int) -> list[Address]:
        with self.postgres.transaction() as tx:
            return self._select_addresses(tx, customer_id)

    def add_address(self, customer_id: int, data: AddressCreate) -> Address:
        with self.postgres.transaction() as tx:
            self._lock_customer(tx, customer_id)

            count = tx.execute_scalar(
                "SELECT COUNT(*) FROM addresses WHERE customer_id = %s",
                (customer_id,)
            )
            make_primary = data.is_primary or count == 0
            if make_primary:
                self._clear_primary(tx, customer_id)

            address = self._insert_address(tx, customer_id, data, make_primary)

        logger.info(f"Added address {address.id} to customer {customer_id}")
        return address

    def update_address(self, address_id: int, data: AddressUpdate) -> Address:
        updates = data.model_dump(exclude_none=True)
        valid_updates = {k: v for k, v in updates.items() if k in _ADDRESS_UPDATABLE_COLUMNS}

        with self.postgres.transaction() as tx:
            current = self._lock_address(tx, address_id)
            if not valid_updates:
                return Address.model_validate(current)

            if valid_updates.get("is_primary"):
                self._clear_primary(tx, current["customer_id"], keep=address_id)

            set_clause, params = _set_clause(valid_updates)
            row = tx.execute_single(
                f"UPDATE addresses SET {set_clause} WHERE id = %s RETURNING *",
                tuple(params + [address_id])
            )

        logger.info(f"Updated address {address_id}: {', '.join(sorted(valid_updates))}")
        return Address.model_validate(row)

    def delete_address(self, address_id: int) -> None:
        with self.postgres.transaction() as tx:
            current = self._lock_address(tx, address_id)
            customer_id = current["customer_id"]

            count = tx.execute_scalar(
                "SELECT COUNT(*) FROM addresses WHERE customer_id = %s",
                (customer_id,)
            )
            if count <= 1:
                logger.warning(
                    f"Refused to delete address {address_id}: last address of "
                    f"customer {customer_id}"
                )
                raise LastAddressError(address_id, customer_id)

            tx.execute("DELETE FROM addresses WHERE id = %s", (address_id,))

        logger.info(f"Deleted address {address_id}")

    def is_single_address(self, customer_id: int) -> bool:
        count = self.postgres.execute_scalar(
            "SELECT COUNT(*) FROM addresses WHERE customer_id = %s",
            (customer_id,)
        )
        return count == 1

    # -------------------------------------------------------------------------
    # Internals (run inside the caller's transaction)
    # -------------------------------------------------------------------------

    def _lock_customer(self, tx: Transaction, customer_id: int) -> dict[str, Any]:
        row = tx.execute_single(
            "SELECT * FROM customers WHERE id = %s FOR UPDATE",
            (customer_id,)
        )
        if row is None:
            raise CustomerNotFoundError(customer_id)
        return row

    def _lock_address(self, tx: Transaction, address_id: int) -> dict[str, Any]:
        """Lock the address's customer, then return the address row."""
        customer_id = tx.execute_scalar(
            "SELECT customer_id FROM addresses WHERE id = %s",
            (address_id,)
        )
        if customer_id is None:
            raise AddressNotFoundError(address_id)

        self._lock_customer(tx, customer_id)

        row = tx.execute_single(
            "SELECT * FROM addresses WHERE id = %s",
            (address_id,)
        )
        if row is None:
            # Deleted between the lookup and the lock
            raise AddressNotFoundError(address_id)
        return row

    def _select_addresses(self, tx: Transaction, customer_id: int) -> list[Address]:
        rows = tx.execute(
            "SELECT * FROM addresses WHERE customer_id = %s ORDER BY id",
            (customer_id,)
        )
        return [Address.model_validate(row) for row in rows]

    def _insert_address(
        self, tx: Transaction, customer_id: int, data: AddressCreate, is_primary: bool
    ) -> Address:
        row = tx.execute_single(
            """
            INSERT INTO addresses (
                customer_id, address_line, city, state, pin_code, is_primary
            ) VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (customer_id, data.address_line, data.city, data.state, data.pin_code, is_primary)
        )
        return Address.model_validate(row)

    def _clear_primary(self, tx: Transaction, customer_id: int, keep: int | None = None) -> None:
        tx.execute(
            """
            UPDATE addresses SET is_primary = false
            WHERE customer_id = %s AND is_primary AND id <> %s
            """,
            (customer_id, keep if keep is not None else 0)
        )
