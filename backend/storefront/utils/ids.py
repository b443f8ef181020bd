import re
from typing import Optional

from storefront.core.errors import InvalidInput

_RESERVED_ID = re.compile(r"^__.*__$")
_MAX_ID_BYTES = 1500
# invisible characters that sneak in through copy/paste
_INVISIBLE = ("\u200b", "\u200c", "\u200d", "\ufeff", "\xa0")


def clean_id(value: Optional[str]) -> str:
    v = (value or "").strip()
    for ch in _INVISIBLE:
        v = v.replace(ch, "")
    return v


def require_id(value: Optional[str], what: str) -> str:
    """
    Validate a document identifier supplied by a client.

    Raises InvalidInput when the value is empty or cannot name a Firestore document
    (contains '/', is '.' or '..', matches '__*__', or exceeds 1500 bytes).
    """
    v = clean_id(value)
    if not v:
        raise InvalidInput(f"{what} id is empty")
    if "/" in v or v in (".", "..") or _RESERVED_ID.match(v) or len(v.encode("utf-8")) > _MAX_ID_BYTES:
        raise InvalidInput(f"{what} id is not a valid identifier")
    return v
