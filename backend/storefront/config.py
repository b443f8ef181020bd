"""
storefront/config.py - Application configuration and Firestore client construction.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and builds the Firebase Admin app + Firestore client from the provided credentials.
Nothing is initialized at import time: `build_firestore_client` is called once by the
dependency layer (see `storefront.core.deps`) and the client is injected from there.
"""
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    firebase_cred_file: str = Field('firebase_service_account.json', env='FIREBASE_CRED_FILE')
    firebase_project_id: str = Field(..., env='FIREBASE_PROJECT_ID')
    firebase_collection_prefix: str = Field('', env='FIREBASE_COLLECTION_PREFIX')

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = Field(None, env='FIREBASE_PRIVATE_KEY_ID')
    firebase_private_key: Optional[str] = Field(None, env='FIREBASE_PRIVATE_KEY')
    firebase_client_email: Optional[str] = Field(None, env='FIREBASE_CLIENT_EMAIL')
    firebase_client_id: Optional[str] = Field(None, env='FIREBASE_CLIENT_ID')
    firebase_auth_uri: Optional[str] = Field(None, env='FIREBASE_AUTH_URI')
    firebase_token_uri: Optional[str] = Field(None, env='FIREBASE_TOKEN_URI')
    firebase_auth_provider_x509_cert_url: Optional[str] = Field(None, env='FIREBASE_AUTH_PROVIDER_X509_CERT_URL')
    firebase_client_x509_cert_url: Optional[str] = Field(None, env='FIREBASE_CLIENT_X509_CERT_URL')

    debug: bool = Field(False, env='DEBUG')
    log_level: str = Field('INFO', env='LOG_LEVEL')
    allowed_origins: str = Field('*', env='ALLOWED_ORIGINS')  # Comma-separated list or '*' for all

    # Request deadlines (seconds)
    write_timeout: float = Field(5.0, gt=0, env='WRITE_TIMEOUT')          # add / remove / instant buy
    checkout_timeout: float = Field(100.0, gt=0, env='CHECKOUT_TIMEOUT')  # cart summary / checkout
    # 1 → a contended transaction fails instead of being replayed; retries belong to the caller
    transaction_max_attempts: int = Field(1, ge=1, env='TRANSACTION_MAX_ATTEMPTS')

    password_hash_iterations: int = Field(260_000, ge=1, env='PASSWORD_HASH_ITERATIONS')
    refresh_token_bytes: int = Field(32, ge=16, env='REFRESH_TOKEN_BYTES')

    class Config:
        env_file = ".env"
        case_sensitive = False

    def collection(self, name: str) -> str:
        """Prefix-aware collection name (FIREBASE_COLLECTION_PREFIX)."""
        prefix = (self.firebase_collection_prefix or "").strip()
        return f"{prefix}{name}" if prefix else name

    @property
    def origins(self) -> list:
        if not self.allowed_origins or self.allowed_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(',') if origin.strip()]


def _credentials_from(settings: Settings) -> credentials.Certificate:
    # Check if we have environment variables for Firebase credentials (Cloud Run)
    if all([
        settings.firebase_private_key_id,
        settings.firebase_private_key,
        settings.firebase_client_email,
        settings.firebase_client_id,
        settings.firebase_auth_uri,
        settings.firebase_token_uri,
        settings.firebase_auth_provider_x509_cert_url,
        settings.firebase_client_x509_cert_url
    ]):
        cred_dict = {
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key_id": settings.firebase_private_key_id,
            "private_key": settings.firebase_private_key.replace("\\n", "\n"),
            "client_email": settings.firebase_client_email,
            "client_id": settings.firebase_client_id,
            "auth_uri": settings.firebase_auth_uri,
            "token_uri": settings.firebase_token_uri,
            "auth_provider_x509_cert_url": settings.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": settings.firebase_client_x509_cert_url
        }
        return credentials.Certificate(cred_dict)
    # Use service account file (local development)
    return credentials.Certificate(settings.firebase_cred_file)


def build_firestore_client(settings: Settings):
    """
    Initialize the Firebase Admin SDK (once per process) and return a Firestore client.
    """
    try:
        firebase_app = firebase_admin.get_app()
    except ValueError:
        # No default app yet
        firebase_app = firebase_admin.initialize_app(
            _credentials_from(settings),
            {'projectId': settings.firebase_project_id},
        )
    return firestore.client(app=firebase_app)
