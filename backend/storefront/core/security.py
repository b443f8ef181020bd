"""
storefront/core/security.py - Pluggable password hashing and token issuance.

The account service only depends on two small contracts:

- `PasswordHasher.hash(password) -> str` / `verify(password, hashed) -> bool`
- `TokenIssuer.issue_tokens(claims) -> (token, refresh_token)`

Defaults: PBKDF2-SHA256 from `hashlib` (stored as `pbkdf2_sha256$<iters>$<salt>$<hash>`)
and Firebase custom tokens minted by the Admin SDK, with an opaque random refresh token.
"""
import base64
import hashlib
import hmac
import secrets
from typing import Any, Dict, Protocol, Tuple

from firebase_admin import auth as firebase_auth


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue_tokens(self, claims: Dict[str, Any]) -> Tuple[str, str]: ...


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


class Pbkdf2Hasher:
    algorithm = "pbkdf2_sha256"

    def __init__(self, iterations: int = 260_000):
        self.iterations = iterations

    def _derive(self, password: str, salt: str, iterations: int) -> str:
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), iterations)
        return _b64(dk)

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(16)
        return f"{self.algorithm}${self.iterations}${salt}${self._derive(password, salt, self.iterations)}"

    def verify(self, password: str, hashed: str) -> bool:
        try:
            algorithm, iterations, salt, expected = hashed.split("$", 3)
        except ValueError:
            return False
        if algorithm != self.algorithm or not iterations.isdigit():
            return False
        return hmac.compare_digest(self._derive(password, salt, int(iterations)), expected)


class FirebaseTokenIssuer:
    """Mints a Firebase custom token for `claims["uid"]`; the rest become developer claims."""

    def __init__(self, refresh_token_bytes: int = 32):
        self.refresh_token_bytes = refresh_token_bytes

    def issue_tokens(self, claims: Dict[str, Any]) -> Tuple[str, str]:
        uid = claims["uid"]
        developer_claims = {k: v for k, v in claims.items() if k != "uid" and v is not None}
        token = firebase_auth.create_custom_token(uid, developer_claims or None)
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token, secrets.token_urlsafe(self.refresh_token_bytes)
