"""Base repository: shared Firestore client and error translation."""
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from google.api_core import exceptions as gexc

from storefront.config import Settings
from storefront.core.errors import CartError, NotFound, StoreError, Timeout

T = TypeVar("T")


class FirestoreRepository:
    """Base class for all Firestore-backed stores."""
    collection_name = ""

    def __init__(self, client, settings: Settings):
        self.client = client
        self.settings = settings

    @property
    def collection(self):
        return self.client.collection(self.settings.collection(self.collection_name))

    def document(self, doc_id: str):
        return self.collection.document(doc_id)

    def transaction(self):
        return self.client.transaction(max_attempts=self.settings.transaction_max_attempts)


@contextmanager
def store_call(operation: str, not_found: str = "Document not found") -> Iterator[None]:
    """
    Translate Google API failures raised inside the block into the core error taxonomy.

    DeadlineExceeded / RetryError → Timeout, NotFound → NotFound(not_found),
    other API errors → StoreError. Anything else propagates unchanged.
    """
    try:
        yield
    except CartError:
        raise
    except (gexc.DeadlineExceeded, gexc.RetryError) as exc:
        raise Timeout(f"{operation} timed out") from exc
    except gexc.NotFound as exc:
        raise NotFound(not_found) from exc
    except gexc.GoogleAPICallError as exc:
        raise StoreError(f"{operation} failed: {exc.message or exc}") from exc


# firestore.transactional reports a commit that lost every attempt as a plain ValueError
EXHAUSTED_ATTEMPTS = "Failed to commit transaction in"


def run_transaction(operation: str, body: Callable[..., T], transaction, *args: Any) -> T:
    """Run a `@firestore.transactional` body; running out of commit attempts is a StoreError."""
    try:
        return body(transaction, *args)
    except ValueError as exc:
        if not str(exc).startswith(EXHAUSTED_ATTEMPTS):
            raise
        raise StoreError(f"{operation} failed: {exc}") from exc
