"""Customer endpoints under /api/customers."""

from fastapi import APIRouter, Query
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from api.base import CustomerCreated, MessageResponse, Messages, SingleAddressCheck
from api.errors import field_errors
from core.exceptions import InvalidInputError
from core.models import CustomerQuery, CustomerUpdate, CustomerWithAddressesCreate
from core.stores import RecordStore


def build_customer_query(
    page: int,
    limit: int,
    sort_by: str,
    order: str,
    city: str | None = None,
    state: str | None = None,
    pin_code: str | None = None,
) -> CustomerQuery:
    """
    Validate listing parameters.

    Raises:
        InvalidInputError: With per-parameter messages, using the query
            string names (sortBy, pinCode, ...)
    """
    try:
        return CustomerQuery(
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order.lower(),
            city=city,
            state=state,
            pin_code=pin_code,
        )
    except ValidationError as e:
        errors = [
            {**err, "field": to_camel(err["field"])}
            for err in field_errors(e.errors())
        ]
        raise InvalidInputError("Invalid query parameters", errors) from e


def create_customers_router(store: RecordStore) -> APIRouter:
    router = APIRouter(prefix="/customers", tags=["customers"])

    @router.post("", status_code=201)
    def create_customer(body: CustomerWithAddressesCreate):
        customer = store.create_customer(body.customer, body.addresses)
        return CustomerCreated(
            message=Messages.CUSTOMER_CREATED,
            customer_id=customer.id,
        ).model_dump(by_alias=True)

    @router.get("")
    def list_customers(
        page: int = Query(1),
        limit: int = Query(5),
        sort_by: str = Query("createdAt", alias="sortBy"),
        order: str = Query("desc"),
        city: str | None = Query(None),
        state: str | None = Query(None),
        pin_code: str | None = Query(None, alias="pinCode"),
    ):
        query = build_customer_query(page, limit, sort_by, order, city, state, pin_code)
        return store.list_customers(query).model_dump(mode="json", by_alias=True)

    @router.get("/{customer_id}")
    def get_customer(customer_id: int):
        return store.get_customer(customer_id).model_dump(mode="json", by_alias=True)

    @router.get("/{customer_id}/isSingleAddress")
    def is_single_address(customer_id: int):
        return SingleAddressCheck(
            has_only_one_address=store.is_single_address(customer_id)
        ).model_dump(by_alias=True)

    @router.put("/{customer_id}")
    def update_customer(customer_id: int, body: CustomerUpdate):
        store.update_customer(customer_id, body)
        return MessageResponse(message=Messages.CUSTOMER_UPDATED).model_dump()

    @router.delete("/{customer_id}")
    def delete_customer(customer_id: int):
        store.delete_customer(customer_id)
        return MessageResponse(message=Messages.CUSTOMER_DELETED).model_dump()

    return router
