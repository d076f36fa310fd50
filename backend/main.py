import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.api_client import ApiError, ApiErrorType
from core.business_date import business_date
from core.config import settings
from core.logging_setup import configure_logging
from routers.brands import router as brands_router
from routers.dashboard import router as dashboard_router
from routers.estimates import router as estimates_router
from routers.income_expenses import router as income_expenses_router
from routers.kinds import router as kinds_router
from routers.onboarding import router as onboarding_router
from routers.payments import router as payments_router
from routers.quantities import router as quantities_router
from routers.reports import router as reports_router
from routers.stock import router as stock_router
from routers.transfers import router as transfers_router
from services.brand_search import BrandSearch

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    app.state.brand_search = BrandSearch()
    logger.info("Ledger service up, upstream %s", settings.api_base_url)
    yield


app = FastAPI(
    title="Liquor Ledger API",
    description="Estimates, reports and daily stock sheets computed over the shop API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    # auth failures pass through so the caller can log in again
    if exc.error_type == ApiErrorType.UNAUTHORIZED:
        code = status.HTTP_401_UNAUTHORIZED
    elif exc.error_type == ApiErrorType.FORBIDDEN:
        code = status.HTTP_403_FORBIDDEN
    elif exc.error_type == ApiErrorType.TIMEOUT:
        code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "error_type": exc.error_type.value, "upstream_status": exc.status_code},
    )


@app.get("/healthz", tags=["meta"])
def healthz():
    return {"status": "ok"}


@app.get("/business-date", tags=["meta"])
def get_business_date():
    return {"business_date": business_date().isoformat(), "day_start": settings.business_day_start}


app.include_router(quantities_router, prefix="/quantities", tags=["quantities"])
app.include_router(estimates_router, prefix="/estimates", tags=["estimates"])
app.include_router(brands_router, prefix="/brands", tags=["brands"])
app.include_router(kinds_router, prefix="/kinds", tags=["kinds"])

# Reports and daily sheets
app.include_router(reports_router, prefix="/reports", tags=["reports"])
app.include_router(stock_router, prefix="/stock", tags=["stock"])
app.include_router(income_expenses_router, prefix="/income-expenses", tags=["income-expenses"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(payments_router, prefix="/payments", tags=["payments"])

# Stock movement
app.include_router(transfers_router, prefix="/transfers", tags=["transfers"])
app.include_router(onboarding_router, prefix="/onboarding", tags=["onboarding"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
