"""Typed exceptions raised by the record stores."""


class RecordStoreError(Exception):
    """Base class for expected record store failures."""


class InvalidInputError(RecordStoreError):
    """
    Request data violates a shape or range constraint.

    Carries per-field details so the HTTP layer can report them.
    """

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)


class NotFoundError(RecordStoreError):
    """Referenced entity does not exist."""


class CustomerNotFoundError(NotFoundError):
    """No customer with the given ID."""

    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__("Customer not found")


class AddressNotFoundError(NotFoundError):
    """No address with the given ID."""

    def __init__(self, address_id: int):
        self.address_id = address_id
        super().__init__("Address not found")


class ConflictError(RecordStoreError):
    """Write would break a uniqueness rule."""


class DuplicatePhoneError(ConflictError):
    """Phone number already belongs to another customer."""

    def __init__(self, phone_number: str):
        self.phone_number = phone_number
        super().__init__("Phone number already exists")


class InvariantViolationError(RecordStoreError):
    """Write would break a cross-entity rule."""


class LastAddressError(InvariantViolationError):
    """
    Address is the only one its customer has.

    A customer must keep at least one address; delete the customer instead.
    """

    def __init__(self, address_id: int, customer_id: int):
        self.address_id = address_id
        self.customer_id = customer_id
        super().__init__(
            "Cannot delete the last address. Customer must have at least one address."
        )
