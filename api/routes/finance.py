"""Expense, income and finance summary routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from domain.mappers import DocumentMapper
from domain.schemas.finance_schemas import (
    BillAnalysisRequest,
    BillTextRequest,
    ExpenseCreate,
    ExpenseUpdate,
    IncomeCreate,
    IncomeUpdate,
)
from services.finance_service import ExpenseService, FinanceService, IncomeService, parse_bill_text

router = APIRouter(tags=["Finance"])
logger = logging.getLogger("lifetrack.api.finance")


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@router.get("/expenses")
def list_expenses(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Expenses in a date range, newest first (max 100)"""
    expenses = ExpenseService.list(db, user, start_date, end_date, category)
    return {"expenses": [DocumentMapper.to_response(e) for e in expenses]}


@router.post("/expenses", status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ExpenseService.create(db, user, payload))


@router.put("/expenses/{expense_id}")
def update_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ExpenseService.update(db, user, expense_id, payload))


@router.delete("/expenses/{expense_id}")
def delete_expense(
    expense_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    ExpenseService.delete(db, user, expense_id)
    return {"message": "Expense deleted successfully"}


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------


@router.get("/income")
def list_income(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    income = IncomeService.list(db, user, start_date, end_date, category)
    return {"income": [DocumentMapper.to_response(i) for i in income]}


@router.post("/income", status_code=status.HTTP_201_CREATED)
def create_income(
    payload: IncomeCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(IncomeService.create(db, user, payload))


@router.put("/income/{income_id}")
def update_income(
    income_id: str,
    payload: IncomeUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(IncomeService.update(db, user, income_id, payload))


@router.delete("/income/{income_id}")
def delete_income(
    income_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    IncomeService.delete(db, user, income_id)
    return {"message": "Income deleted successfully"}


# ---------------------------------------------------------------------------
# Summary and bills
# ---------------------------------------------------------------------------


@router.get("/finance/summary")
def finance_summary(
    period: str = Query("month", description="week, month or year"),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    week: Optional[int] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Income, expenses and balance of one period"""
    return FinanceService.get_summary(db, user, period, year, month, week)


@router.post("/finance/analyze-bill")
def analyze_bill(payload: BillAnalysisRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Extract total, merchant, date and items from a bill photo"""
    return FinanceService.analyze_bill(payload)


@router.post("/finance/parse-bill-text")
def parse_bill(payload: BillTextRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Parse OCR text of a receipt"""
    return {"success": True, "analysis": parse_bill_text(payload.text)}
