"""
IDA Sisustuspood assistant API - FastAPI application entry point.

Chat assistant, bundle builder and storefront helpers for the IDA
Sisustuspood furniture store.

Run with:
    uvicorn sisustus.api.main:app --app-dir backend --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sisustus.api.deps import close_catalog
from sisustus.api.routes_bundle import router as bundle_router
from sisustus.api.routes_chat import router as chat_router
from sisustus.api.routes_storefront import router as storefront_router
from sisustus.config import COMMERCE_CONFIG, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

SUPPORT_CONTACT = (
    f"Kirjuta meile {COMMERCE_CONFIG['support_email']} või helista {COMMERCE_CONFIG['support_phone']}."
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the shared Store API client when the server stops."""
    yield
    close_catalog()
    logger.info("[api] Store API client closed")


app = FastAPI(
    title="IDA Sisustuspood Assistant API",
    description="Chat assistant and bundle builder for IDA Sisustuspood",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS middleware (the storefront widget is embedded on the shop domain)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions and answer with an apology and support contacts.

    The exception itself is only logged; clients never see its type or text.
    """
    error_type = type(exc).__name__

    error_messages = {
        "ValueError": "Vabandust, päringus on vigased andmed. Palun kontrolli andmeid.",
        "ConnectionError": "Vabandust, poe andmetega ei õnnestunud ühendust saada.",
        "TimeoutError": "Vabandust, päring võttis liiga kaua aega.",
    }
    message = error_messages.get(error_type, "Vabandust, tekkis ootamatu viga.")

    logger.error("[api] %s: %s | Path: %s", error_type, exc, request.url.path)

    status_code = 400 if isinstance(exc, ValueError) else 500

    return JSONResponse(
        status_code=status_code,
        content={"message": f"{message} {SUPPORT_CONTACT}"},
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(chat_router)
app.include_router(bundle_router)
app.include_router(storefront_router)


# ---------------------------------------------------------------------------
# Root & health-check endpoints
# ---------------------------------------------------------------------------
@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    return {
        "name": "IDA Sisustuspood Assistant API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sisustus.api.main:app", host="0.0.0.0", port=8000, reload=True)
