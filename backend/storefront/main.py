"""
# `storefront/main.py` - Application entry point

- Builds the FastAPI app (`title`, `description`, `version`).
- CORS from `settings.allowed_origins` (comma separated list or `*`).
- Routers: cart/checkout (`/add-to-cart`, `/remove-item`, `/cart`, `/checkout`,
  `/instant-buy`) and users (`/users/...`).
- One exception handler for the whole `CartError` hierarchy:
  body `{"error": kind, "message": text}`, status from the error.
  Store failures are logged at ERROR, timeouts at WARNING (distinct message),
  client errors at INFO.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import Settings
from storefront.core.deps import get_settings
from storefront.core.errors import CartError, StoreError, Timeout
from storefront.core.logging import configure_logging, get_logger
from storefront.routers import carts, users

logger = get_logger("storefront.api")


async def cart_error_handler(request: Request, exc: CartError) -> JSONResponse:
    where = f"{request.method} {request.url.path}"
    if isinstance(exc, Timeout):
        logger.warning("store timeout on %s: %s", where, exc.message)
    elif isinstance(exc, StoreError):
        logger.error("store failure on %s: %s", where, exc.message, exc_info=exc.__cause__ is not None)
    else:
        logger.info("%s rejected (%s): %s", where, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Storefront Cart & Checkout API",
        description="Cart, checkout and instant-buy operations over per-user Firestore documents.",
        version="1.0.0",
        debug=settings.debug,
        redirect_slashes=False,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CartError, cart_error_handler)

    app.include_router(carts.router)
    app.include_router(users.router)

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()

# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
