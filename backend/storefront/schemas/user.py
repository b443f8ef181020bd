"""
storefront/schemas/user.py - User, signup and address schemas.

A user document (`users/{id}`) always holds three arrays, created empty at signup:
`cart` (CartItem lines), `orders` (Order snapshots) and `addresses`.
"""
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

PHONE_REGEX = r'^\+?[\d\s]{7,20}$'
NameStr = Annotated[str, Field(min_length=1, max_length=100)]
PhoneStr = Annotated[str, Field(pattern=PHONE_REGEX)]


class AddressBase(BaseModel):
    label:    Optional[str] = Field(None, description="Label for the address (home, work...)")
    house:    Optional[str] = Field(None, description="House / building")
    street:   str           = Field(...,  min_length=1, description="Street")
    city:     str           = Field(...,  min_length=1, description="City")
    zip_code: str           = Field(...,  min_length=1, description="Postal code")


class AddressCreate(AddressBase):
    pass


class AddressOut(AddressBase):
    id: str


class UserCreate(BaseModel):
    first_name: NameStr
    last_name:  NameStr
    email:      EmailStr
    phone:      PhoneStr
    password:   str = Field(..., min_length=6, max_length=128)


class SignupResponse(BaseModel):
    user_id: str
    token: str
    refresh_token: str


class User(BaseModel):
    """Typed view of a user document; the arrays default to empty, never None."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cart: List[Dict[str, Any]] = Field(default_factory=list)
    orders: List[Dict[str, Any]] = Field(default_factory=list)
    addresses: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "User":
        return cls(
            id=doc_id,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
            phone=data.get("phone"),
            cart=list(data.get("cart") or []),
            orders=list(data.get("orders") or []),
            addresses=list(data.get("addresses") or []),
        )
