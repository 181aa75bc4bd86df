from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .composer import compose_error
from .config import settings
from .errors import SmetaError
from .routers import calculate, payments, telegram
from .stores import payment_registry, token_store

logger = logging.getLogger("smeta")

app = FastAPI(
    title="Smeta Calculators",
    description="Paid, time-limited access to construction estimate calculators",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


async def smeta_error_handler(request: Request, exc: SmetaError):
    if exc.status_code >= 403:
        logger.info("%s %s rejected: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content=compose_error(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=compose_error("Ошибка: некорректный запрос."))


app.add_exception_handler(SmetaError, smeta_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# API routes
app.include_router(calculate.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(telegram.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.APP_NAME}


@app.on_event("startup")
def init_stores():
    """Fresh in-memory stores for this process."""
    token_store.init()
    payment_registry.init()
    logger.info(
        "Stores ready (confirmation=%s, redemption=%s, token ttl=%s)",
        settings.PAYMENT_CONFIRMATION_MODE, settings.PAYMENT_REDEMPTION_MODE, settings.access_ttl,
    )
