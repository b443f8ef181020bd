"""
storefront/services/accounts.py - Signup and address book of a user document.
"""
from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from storefront.core.deadline import Deadline
from storefront.core.errors import AlreadyExists
from storefront.core.logging import get_logger, sanitize_id
from storefront.core.security import PasswordHasher, TokenIssuer
from storefront.repositories.users import UserStore
from storefront.schemas.user import AddressCreate, AddressOut, SignupResponse, UserCreate
from storefront.utils.ids import require_id

logger = get_logger("storefront.users")


class AccountService:
    def __init__(
        self,
        users: UserStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        *,
        timeout: float,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.timeout = timeout

    def signup(self, payload: UserCreate) -> SignupResponse:
        """
        Create a user document with empty cart / orders / addresses.
        Email and phone must not be in use by another user. The queries below answer the
        common case with a precise message; the store reserves both values atomically with
        the insert, which settles concurrent signups.
        """
        email = payload.email.lower()
        deadline = Deadline(self.timeout)
        if self.users.exists_with("email", email, timeout=deadline.remaining("signup")):
            raise AlreadyExists("user email already exists")
        if self.users.exists_with("phone", payload.phone, timeout=deadline.remaining("signup")):
            raise AlreadyExists("this phone number is already in use")

        user_id = uuid4().hex
        token, refresh_token = self.tokens.issue_tokens({
            "uid": user_id,
            "email": email,
            "first_name": payload.first_name,
            "last_name": payload.last_name,
        })
        now = datetime.now(timezone.utc)
        self.users.create(
            {
                "user_id": user_id,
                "first_name": payload.first_name,
                "last_name": payload.last_name,
                "email": email,
                "phone": payload.phone,
                "password": self.hasher.hash(payload.password),
                "token": token,
                "refresh_token": refresh_token,
                "created_at": now,
                "updated_at": now,
            },
            timeout=deadline.remaining("signup"),
            user_id=user_id,
            unique=("email", "phone"),
        )
        logger.info("signup user=%s", sanitize_id(user_id))
        return SignupResponse(user_id=user_id, token=token, refresh_token=refresh_token)

    def add_address(self, user_id: str, address: AddressCreate) -> AddressOut:
        uid = require_id(user_id, "user")
        out = AddressOut(id=uuid4().hex, **address.model_dump())
        self.users.add_address(uid, out.model_dump(), timeout=self.timeout)
        logger.info("address add user=%s address=%s", sanitize_id(uid), out.id)
        return out

    def list_addresses(self, user_id: str) -> List[AddressOut]:
        uid = require_id(user_id, "user")
        user = self.users.find_by_id(uid, timeout=self.timeout)
        return [AddressOut(**a) for a in user.addresses]

    def remove_address(self, user_id: str, address_id: str) -> None:
        uid = require_id(user_id, "user")
        aid = require_id(address_id, "address")
        self.users.remove_address(uid, aid, timeout=self.timeout)
        logger.info("address remove user=%s address=%s", sanitize_id(uid), sanitize_id(aid))
