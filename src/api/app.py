"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from src.api.error import ClientError
from src.api.middleware import log_requests
from src.api.routes import bookings, recurring, invoices, payments, webhooks, jobs, realtime
from src.adapter.services.authenticator import JoseAuthenticator
from src.adapter.services.broadcaster import InMemoryBroadcaster
from src.adapter.services.email_sender import create_email_sender
from src.adapter.services.payment_processor import StripePaymentProcessor
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.depends import AsyncSessionLocal
from src.worker.scheduler import build_job_runner

logger = logging.getLogger(__name__)


def create_app(config, session_factory: Optional[sessionmaker] = None) -> FastAPI:
    """
    Build the API with its collaborators

    Collaborators are created once here and kept on ``app.state``; the
    background job runner shares the invoice locks and email sender.
    """
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session_factory = session_factory or AsyncSessionLocal

    email_sender = create_email_sender(
        provider=config.EMAIL_PROVIDER,
        api_key=config.EMAIL_API_KEY,
        from_address=config.EMAIL_FROM,
        api_url=config.EMAIL_API_URL,
    )
    processor = None
    if config.STRIPE_SECRET_KEY:
        processor = StripePaymentProcessor(
            secret_key=config.STRIPE_SECRET_KEY,
            webhook_secret=config.STRIPE_WEBHOOK_SECRET,
            frontend_url=config.FRONTEND_URL,
            currency=config.CURRENCY,
        )
    else:
        logger.warning("STRIPE_SECRET_KEY not set; card payments are disabled")

    invoice_locks = InvoiceLockRegistry()
    job_runner = build_job_runner(
        session_factory, config=config, email_sender=email_sender, locks=invoice_locks
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.SCHEDULER_ENABLED:
            app.state.job_runner.start()
        yield
        await app.state.job_runner.shutdown()

    app = FastAPI(
        title="Cleaning Service API",
        description="Bookings, recurring schedules, invoicing and payments",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.tax_rate = Decimal(str(config.TAX_RATE))
    app.state.email_sender = email_sender
    app.state.payment_processor = processor
    app.state.broadcaster = InMemoryBroadcaster()
    app.state.authenticator = JoseAuthenticator(
        secret=config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
        expires_minutes=config.JWT_EXPIRES_MINUTES,
    )
    app.state.invoice_locks = invoice_locks
    app.state.job_runner = job_runner

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        app.middleware("http")(log_requests)

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.error.code, "message": exc.error.message}},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request parameters")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": f"{location}: {message}" if location else message,
                }
            },
        )

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    prefix = config.API_PREFIX or ""
    for module in (bookings, recurring, invoices, payments, webhooks, jobs):
        app.include_router(module.router, prefix=prefix)
    app.include_router(realtime.router)

    return app
