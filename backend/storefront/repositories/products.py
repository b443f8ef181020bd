from pydantic import ValidationError

from storefront.core.errors import ERROR_PRODUCT_NOT_FOUND, NotFound, SchemaMismatch
from storefront.repositories.base import FirestoreRepository, store_call
from storefront.schemas.product import Product


class ProductStore(FirestoreRepository):
    """Read-only lookups in the `products` collection."""
    collection_name = "products"

    def find_by_id(self, product_id: str, *, timeout: float) -> Product:
        with store_call("product lookup", ERROR_PRODUCT_NOT_FOUND):
            snap = self.document(product_id).get(retry=None, timeout=timeout)
        if not snap.exists:
            raise NotFound(ERROR_PRODUCT_NOT_FOUND)
        try:
            return Product.from_doc(snap.id, snap.to_dict() or {})
        except ValidationError as exc:
            raise SchemaMismatch(f"product {snap.id} has an unexpected shape") from exc
