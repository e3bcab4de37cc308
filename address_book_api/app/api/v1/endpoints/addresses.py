"""
Address book endpoints for API v1.

These routes manage shipping addresses for the calling user.  Users
keep several addresses (home, office, etc.) which the checkout flow
offers for selection and the delivery service uses for routing.

The caller's identity comes from the gateway headers (see
``core.security``).  Users can only see and change their own
addresses; administrators may additionally read other users'
addresses within the same tenant.  Errors raised by the service layer
are translated into HTTP responses by the handlers registered in
``main.py``.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from address_book_api.app.core.security import RequestContext, get_request_context
from address_book_api.app.schemas.address import (
    AddressCreate,
    AddressRead,
    AddressUpdate,
    ErrorResponse,
)
from address_book_api.app.services.address_service import AddressService


router = APIRouter()

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
_FORBIDDEN = {status.HTTP_403_FORBIDDEN: {"model": ErrorResponse}}
_INVALID = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}
_DUPLICATE = {status.HTTP_409_CONFLICT: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=AddressRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new shipping address",
    responses={**_INVALID, **_DUPLICATE},
)
async def create_address(
    address_in: AddressCreate,
    context: RequestContext = Depends(get_request_context),
) -> AddressRead:
    """Save a new shipping address for the authenticated user.

    Rejects an address identical to one the user already has (409).
    """
    return await AddressService.create_address(context, address_in)


@router.get(
    "",
    response_model=List[AddressRead],
    summary="Get all addresses for user",
    responses=_FORBIDDEN,
)
async def list_addresses(
    user_id: Optional[str] = Query(
        None,
        alias="userId",
        description="List this user's addresses instead of the caller's (admin only)",
    ),
    context: RequestContext = Depends(get_request_context),
) -> List[AddressRead]:
    """Return the caller's addresses in creation order.

    Administrators may pass ``userId`` to view a customer's addresses.
    """
    return await AddressService.list_addresses(context, query_user_id=user_id)


@router.get(
    "/{address_id}",
    response_model=AddressRead,
    summary="Get address by ID",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
async def get_address(
    address_id: uuid.UUID,
    context: RequestContext = Depends(get_request_context),
) -> AddressRead:
    """Retrieve a specific address, e.g. the one picked at checkout."""
    return await AddressService.get_address(context, address_id)


@router.put(
    "/{address_id}",
    response_model=AddressRead,
    summary="Update an existing address",
    responses={**_INVALID, **_NOT_FOUND, **_FORBIDDEN, **_DUPLICATE},
)
async def update_address(
    address_id: uuid.UUID,
    address_in: AddressUpdate,
    context: RequestContext = Depends(get_request_context),
) -> AddressRead:
    """Replace the content of a saved address.  Owner only."""
    return await AddressService.update_address(context, address_id, address_in)


@router.delete(
    "/{address_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an address",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
async def delete_address(
    address_id: uuid.UUID,
    context: RequestContext = Depends(get_request_context),
) -> None:
    """Remove an address from the user's address book.  Owner only."""
    await AddressService.delete_address(context, address_id)
    return None
