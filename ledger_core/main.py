"""
Ledger Core — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledger_core.config import get_settings
from ledger_core.logging_config import configure_logging
from ledger_core.api.accounts import router as accounts_router
from ledger_core.api.health import router as health_router
from ledger_core.api.transactions import router as transactions_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Append-only double-entry ledger with derived balances",
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors: 400, not 422."""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
