"""
storefront/routers/users.py
Signup and address book.

- `POST /users/signup` → creates the user document (empty cart / orders / addresses)
- `GET /users/{user_id}/addresses` → list
- `POST /users/{user_id}/addresses` → add (id generated)
- `DELETE /users/{user_id}/addresses/{address_id}` → remove, 404 if absent
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status

from storefront.core.deps import get_account_service
from storefront.schemas.user import AddressCreate, AddressOut, SignupResponse, UserCreate
from storefront.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: UserCreate, service: AccountService = Depends(get_account_service)):
    return service.signup(payload)


@router.get("/{user_id}/addresses", response_model=List[AddressOut])
def list_addresses(user_id: str, service: AccountService = Depends(get_account_service)):
    return service.list_addresses(user_id)


@router.post("/{user_id}/addresses", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
def add_address(
    user_id: str,
    address: AddressCreate,
    service: AccountService = Depends(get_account_service),
):
    return service.add_address(user_id, address)


@router.delete("/{user_id}/addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(
    user_id: str,
    address_id: str,
    service: AccountService = Depends(get_account_service),
):
    service.remove_address(user_id, address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
