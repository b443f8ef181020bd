"""
FastAPI dependency providers.

Stores and services are built per request from one cached Settings object and one cached
Firestore client; nothing is reached through module-level globals. Tests swap the
providers with `app.dependency_overrides`.
"""
from functools import lru_cache

from fastapi import Depends

from storefront.config import Settings, build_firestore_client
from storefront.core.security import FirebaseTokenIssuer, PasswordHasher, Pbkdf2Hasher, TokenIssuer
from storefront.repositories.products import ProductStore
from storefront.repositories.users import UserStore
from storefront.services.accounts import AccountService
from storefront.services.cart_aggregator import CartAggregator
from storefront.services.cart_service import CartService


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def _firestore_client():
    return build_firestore_client(get_settings())


def get_firestore():
    return _firestore_client()


def get_product_store(
    client=Depends(get_firestore),
    settings: Settings = Depends(get_settings),
) -> ProductStore:
    return ProductStore(client, settings)


def get_user_store(
    client=Depends(get_firestore),
    settings: Settings = Depends(get_settings),
) -> UserStore:
    return UserStore(client, settings)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return Pbkdf2Hasher(iterations=settings.password_hash_iterations)


def get_token_issuer(
    settings: Settings = Depends(get_settings),
    client=Depends(get_firestore),  # the Admin SDK app must exist before minting tokens
) -> TokenIssuer:
    return FirebaseTokenIssuer(refresh_token_bytes=settings.refresh_token_bytes)


def get_cart_service(
    products: ProductStore = Depends(get_product_store),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> CartService:
    return CartService(
        products,
        users,
        write_timeout=settings.write_timeout,
        checkout_timeout=settings.checkout_timeout,
    )


def get_cart_aggregator(
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> CartAggregator:
    return CartAggregator(users, timeout=settings.checkout_timeout)


def get_account_service(
    users: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
) -> AccountService:
    return AccountService(users, hasher, tokens, timeout=settings.write_timeout)
