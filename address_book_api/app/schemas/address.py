"""
Pydantic schemas for shipping addresses.

An address belongs to exactly one user within one tenant.  Clients
submit only the content fields (``AddressCreate``); the scoping
fields, the identifier and the timestamps are assigned by the
service and appear in ``AddressRead``.

All text fields are stripped of surrounding whitespace.  Required
fields must not be empty after stripping; a blank ``line2`` is
treated as absent.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, validator


CONTENT_FIELDS = ("line1", "line2", "city", "state", "postcode", "country")


class AddressCreate(BaseModel):
    """Schema for creating a new address."""

    line1: str = Field(..., max_length=255, description="Street address, P.O. box", example="221B Baker Street")
    line2: Optional[str] = Field(None, max_length=255, description="Apartment, suite, unit, building, floor", example="Flat 2")
    city: str = Field(..., max_length=100, example="London")
    state: str = Field(..., max_length=100, description="State, province or region", example="Greater London")
    postcode: str = Field(..., max_length=20, example="NW1 6XE")
    country: str = Field(..., max_length=100, example="GB")

    model_config = {
        "extra": "forbid",
    }

    @validator("line1", "city", "state", "postcode", "country", pre=True)
    def validate_required_text(cls, v):
        if v is None:
            raise ValueError("field is required")
        if not isinstance(v, str):
            raise ValueError("must be a string")
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @validator("line2", pre=True)
    def validate_line2(cls, v):
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("must be a string")
        return v.strip() or None

    def content_key(self) -> Tuple[str, ...]:
        """Values compared by the duplicate check, in column order.

        ``line2`` is reported as ``''`` when absent, matching how it is
        stored.
        """
        return tuple(getattr(self, name) or "" for name in CONTENT_FIELDS)


class AddressUpdate(AddressCreate):
    """Schema for updating an address.

    An update replaces all content fields, so it is validated exactly
    like a new address.  Scoping fields cannot be changed.
    """


class AddressRead(BaseModel):
    """Schema for reading an address."""

    address_id: str
    tenant_id: str
    user_id: str
    line1: str
    line2: Optional[str]
    city: str
    state: str
    postcode: str
    country: str
    created_at: str
    updated_at: str

    model_config = {
        "from_attributes": True,
    }


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    code: str = Field(..., example="ADDRESS_DUPLICATE")
    message: str = Field(..., example="An identical address already exists")
