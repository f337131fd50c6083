"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from habitat_payroll import __version__
from habitat_payroll.api.routes import health_router, payroll_router, records_router
from habitat_payroll.api.schemas import ConfirmationResponse, ErrorResponse
from habitat_payroll.config import Settings, configure_logging, get_settings
from habitat_payroll.database import create_tables, dispose_db, init_db
from habitat_payroll.services.leave_service import EntitlementConfirmationRequired
from habitat_payroll.services.repository import PayrollRunNotFoundError
from habitat_payroll.services.run_finalizer import (
    EmptyPayrollRunError,
    InvalidPaymentAmountError,
)
from habitat_payroll.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    engine, _ = init_db()
    await create_tables(engine)
    yield
    # Shutdown
    await dispose_db()


def _error(status_code: int, exc: Exception, code: str) -> JSONResponse:
    body = ErrorResponse(detail=str(exc), code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Habitat Payroll API",
        description="Payslip computation and payroll run settlement",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollRunNotFoundError)
    async def run_not_found_handler(
        request: Request, exc: PayrollRunNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, exc, "RUN_NOT_FOUND")

    @app.exception_handler(EmptyPayrollRunError)
    async def empty_run_handler(request: Request, exc: EmptyPayrollRunError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc, "EMPTY_RUN")

    @app.exception_handler(InvalidPaymentAmountError)
    async def payment_amount_handler(
        request: Request, exc: InvalidPaymentAmountError
    ) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc, "INVALID_PAYMENT_AMOUNT")

    @app.exception_handler(InvalidTransitionError)
    async def transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc, "INVALID_TRANSITION")

    @app.exception_handler(EntitlementConfirmationRequired)
    async def entitlement_handler(
        request: Request, exc: EntitlementConfirmationRequired
    ) -> JSONResponse:
        body = ConfirmationResponse(detail=exc.plan.message)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=body.model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(records_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
