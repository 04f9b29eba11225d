"""Address endpoints."""

from fastapi import APIRouter

from api.base import AddressCreated, MessageResponse, Messages
from core.models import AddressCreate, AddressUpdate
from core.stores import RecordStore


def create_addresses_router(store: RecordStore) -> APIRouter:
    router = APIRouter(tags=["addresses"])

    @router.get("/customers/{customer_id}/addresses")
    def list_addresses(customer_id: int):
        return [
            a.model_dump(mode="json", by_alias=True)
            for a in store.list_addresses(customer_id)
        ]

    @router.post("/customers/{customer_id}/addresses", status_code=201)
    def add_address(customer_id: int, body: AddressCreate):
        address = store.add_address(customer_id, body)
        return AddressCreated(
            message=Messages.ADDRESS_ADDED,
            address_id=address.id,
        ).model_dump(by_alias=True)

    @router.put("/addresses/{address_id}")
    def update_address(address_id: int, body: AddressUpdate):
        store.update_address(address_id, body)
        return MessageResponse(message=Messages.ADDRESS_UPDATED).model_dump()

    @router.delete("/addresses/{address_id}")
    def delete_address(address_id: int):
        store.delete_address(address_id)
        return MessageResponse(message=Messages.ADDRESS_DELETED).model_dump()

    return router
