from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.api_client import LedgerApiClient
from core.business_date import REPORT_TYPES, months_in_year, resolve_period, weeks_in_month
from core.deps import get_api_client
from schemas.reports import BrandReport, IncomeExpenseReport
from services.reports import income_expense_report, sales_report, stock_lifted_report

router = APIRouter()


class _Period:
    """Query parameters shared by every report endpoint."""

    def __init__(
        self,
        report_type: str = Query(default="daily"),
        day: Optional[date] = None,
        year: Optional[int] = Query(default=None, ge=2000, le=2100),
        month: Optional[int] = Query(default=None, ge=1, le=12),
        week: Optional[int] = Query(default=None, ge=1, le=5),
        start: Optional[date] = None,
        end: Optional[date] = None,
    ):
        if report_type not in REPORT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"report_type must be one of {', '.join(REPORT_TYPES)}",
            )
        self.report_type = report_type
        try:
            self.start, self.end = resolve_period(
                report_type, day=day, year=year, month=month, week=week, start=start, end=end
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/stock-lifted", response_model=BrandReport)
def get_stock_lifted(period: _Period = Depends(), client: LedgerApiClient = Depends(get_api_client)):
    return stock_lifted_report(client, period.report_type, period.start, period.end)


@router.get("/sales", response_model=BrandReport)
def get_sales(period: _Period = Depends(), client: LedgerApiClient = Depends(get_api_client)):
    return sales_report(client, period.report_type, period.start, period.end)


@router.get("/income-expenses", response_model=IncomeExpenseReport)
def get_income_expenses(period: _Period = Depends(), client: LedgerApiClient = Depends(get_api_client)):
    return income_expense_report(client, period.report_type, period.start, period.end)


@router.get("/weeks", response_model=List[Dict])
def list_weeks(year: int = Query(ge=2000, le=2100), month: int = Query(ge=1, le=12)):
    return weeks_in_month(year, month)


@router.get("/months", response_model=List[Dict])
def list_months(year: int = Query(ge=2000, le=2100)):
    return months_in_year(year)
