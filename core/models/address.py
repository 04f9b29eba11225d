"""Address domain models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PIN_CODE_PATTERN = r"^[0-9]{6}$"

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class AddressCreate(BaseModel):
    """Data required to create an address."""

    model_config = _WIRE_CONFIG

    address_line: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pin_code: str = Field(..., pattern=PIN_CODE_PATTERN)
    is_primary: bool = False


class AddressUpdate(BaseModel):
    """Data that can be updated on an address. All fields optional."""

    model_config = _WIRE_CONFIG

    address_line: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    pin_code: str | None = Field(None, pattern=PIN_CODE_PATTERN)
    is_primary: bool | None = None


class Address(BaseModel):
    """Full address entity as stored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    customer_id: int
    address_line: str
    city: str
    state: str
    pin_code: str
    is_primary: bool
