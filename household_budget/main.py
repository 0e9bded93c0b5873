"""
Main application entry point.

This module initializes the FastAPI application and includes all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from household_budget.core.config import settings
from household_budget.core.exceptions import BudgetError, BudgetErrorKind
from household_budget.core.logging import logger
from household_budget.core.middleware import RequestLoggingMiddleware
from household_budget.db.session import init_models
from household_budget.routers.budgets import router as budgets_router
from household_budget.routers.health import router as health_router

ERROR_STATUS_CODES = {
    BudgetErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BudgetErrorKind.AMOUNT_INVALID: status.HTTP_400_BAD_REQUEST,
    BudgetErrorKind.PERIOD_INVALID: status.HTTP_400_BAD_REQUEST,
    BudgetErrorKind.ALREADY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    BudgetErrorKind.OVERLAP_EXISTS: status.HTTP_409_CONFLICT,
    BudgetErrorKind.INSUFFICIENT_FUNDS: status.HTTP_409_CONFLICT,
    BudgetErrorKind.CALCULATION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
    debug=settings.debug,
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(BudgetError)
async def budget_error_handler(request: Request, exc: BudgetError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES[exc.kind]
    if status_code >= 500:
        logger.error(f"Budget operation failed on {request.url.path}: {exc}")
    else:
        logger.warning(f"Budget request rejected on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "kind": exc.kind.value},
    )


# Include routers with /api prefix
app.include_router(
    health_router,
    prefix="/api/health",
    tags=["health"],
)
app.include_router(
    budgets_router,
    prefix="/api/budgets",
    tags=["budgets"],
)


@app.on_event("startup")
async def startup_event():
    """Actions to run on application startup."""
    logger.info(f"Starting {settings.api.title}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database URL: {settings.database.url[:20]}...")
    await init_models()
    logger.info(f"API Docs available at: http://{settings.api.host}:{settings.api.port}/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to run on application shutdown."""
    logger.info(f"Shutting down {settings.api.title}")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.api.title,
        "version": settings.api.version,
        "docs": "/docs",
    }
