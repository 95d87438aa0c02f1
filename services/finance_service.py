from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import re

from pymongo.database import Database

from adapters import openai_adapter
from app.exceptions import LifeTrackError, NotFoundError, ServiceValidationError
from domain.enums import FinancePeriod
from domain.mappers import DocumentMapper
from domain.schemas.finance_schemas import (
    BillAnalysisRequest,
    ExpenseCreate,
    ExpenseUpdate,
    IncomeCreate,
    IncomeUpdate,
)
from repositories import ExpenseRepository, IncomeRepository
from services.dates import parse_day, today_str

logger = logging.getLogger("lifetrack.services.finance")

DEFAULT_CURRENCY = "HUF"
UNKNOWN_MERCHANT = "Unknown"
RECENT_TRANSACTIONS = 10
MAX_BILL_ITEMS = 20
MAX_ITEM_PRICE = 50000

MERCHANT_CHAINS = ("LIDL", "TESCO", "SPAR", "ALDI", "PENNY", "CBA")
TOTAL_MARKERS = ("ÖSSZESEN", "TOTAL", "ÖSSZEG", "FIZETENDŐ")
SKIP_ITEM_MARKERS = ("ÖSSZESEN", "TOTAL", "NYUGTA", "LIDL", "TESCO")

AMOUNT_RE = re.compile(r"\d{1,3}(?:\s?\d{3})*(?:\s?[.,]\d{2})?")
DATE_RE = re.compile(r"(\d{4}[.,]\s?\d{1,2}[.,]\s?\d{1,2})|(\d{1,2}[.,]\s?\d{1,2}[.,]\s?\d{4})")
ITEM_RE = re.compile(r"(.+?)\s+(\d{1,3}(?:\s?\d{3})*(?:\s?[.,]\d{2})?)\s*$")

BILL_PROMPT = """Analyze this receipt/bill image and extract the following information as JSON:
{
  "total_amount": number,
  "merchant": string,
  "date": string (YYYY-MM-DD),
  "items": [{"name": string, "price": number, "quantity": number}],
  "currency": string,
  "confidence": number (0-1)
}
Be as accurate as possible. Use null for values you cannot determine. Currency is an
ISO code such as "HUF", "EUR" or "USD". Confidence reflects how certain the extraction is."""

MOCK_BILL = {
    "total_amount": 4590,
    "merchant": "SPAR",
    "items": [
        {"name": "Bread", "price": 450, "quantity": 1},
        {"name": "Milk 2.8%", "price": 390, "quantity": 2},
        {"name": "Chicken breast", "price": 2150, "quantity": 1},
        {"name": "Apples", "price": 1210, "quantity": 1},
    ],
    "currency": DEFAULT_CURRENCY,
    "confidence": 0.5,
}


def _parse_amount(text: str) -> float:
    return float(re.sub(r"\s", "", text).replace(",", "."))


def parse_bill_text(text: str) -> Dict[str, Any]:
    """
    Extract merchant, total, date and line items from plain receipt text.

    Merchant is looked up among known chains in the first 5 lines, the total
    is the largest amount on a total line, and when no total line exists it
    defaults to the sum of the items.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    merchant = UNKNOWN_MERCHANT
    total = 0.0
    bill_date = today_str()
    items: List[Dict[str, Any]] = []

    for line in lines[:5]:
        if any(chain in line.upper() for chain in MERCHANT_CHAINS):
            merchant = line
            break

    for line in lines:
        upper = line.upper()
        if any(marker in upper for marker in TOTAL_MARKERS):
            amounts = [_parse_amount(m) for m in AMOUNT_RE.findall(line)]
            if amounts:
                total = max(amounts)

        match = DATE_RE.search(line)
        if match:
            parts = re.sub(r"[.,\s]+", ".", match.group(0)).split(".")
            if len(parts) == 3:
                if len(parts[0]) == 4:
                    year, month, day = parts
                else:
                    day, month, year = parts
                bill_date = f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    for line in lines:
        upper = line.upper()
        if len(line) < 5 or any(marker in upper for marker in SKIP_ITEM_MARKERS):
            continue
        match = ITEM_RE.match(line)
        if not match:
            continue
        name = match.group(1).strip()
        price = _parse_amount(match.group(2))
        if 0 < price < MAX_ITEM_PRICE and len(name) > 2:
            items.append({"name": name, "price": price, "quantity": 1})

    items = items[:MAX_BILL_ITEMS]
    if total == 0 and items:
        total = sum(item["price"] for item in items)

    confidence = 1.0
    if total == 0:
        confidence *= 0.5
    if not items:
        confidence *= 0.7
    if merchant == UNKNOWN_MERCHANT:
        confidence *= 0.8

    return {
        "total_amount": total,
        "merchant": merchant,
        "date": bill_date,
        "items": items,
        "currency": DEFAULT_CURRENCY,
        "confidence": round(confidence, 2),
    }


def clean_bill_analysis(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize a model answer: defaults for missing values, confidence clamped to 0..1."""
    items = []
    for item in raw.get("items") or []:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        items.append({
            "name": str(item["name"]),
            "price": item.get("price") or 0,
            "quantity": item.get("quantity") or 1,
        })
    confidence = raw.get("confidence")
    if not isinstance(confidence, (int, float)):
        confidence = 0.5
    return {
        "total_amount": raw.get("total_amount") or raw.get("totalAmount") or 0,
        "merchant": raw.get("merchant") or UNKNOWN_MERCHANT,
        "date": raw.get("date") or today_str(),
        "items": items,
        "currency": raw.get("currency") or DEFAULT_CURRENCY,
        "confidence": min(max(float(confidence), 0.0), 1.0),
    }


def period_window(
    period: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
    week: Optional[int] = None,
    today: Optional[date] = None,
) -> Tuple[date, date, Dict[str, int]]:
    """
    Inclusive date window for a finance summary.

    Weeks are ISO weeks, months and years are calendar ones; missing parts
    default to the period containing ``today``.
    """
    if period not in {p.value for p in FinancePeriod}:
        raise ServiceValidationError("Period must be week, month or year")

    today = today or date.today()
    iso_year, iso_week, _ = today.isocalendar()
    year = year or (iso_year if period == FinancePeriod.WEEK.value else today.year)
    month = month or today.month
    week = week or iso_week

    try:
        if period == FinancePeriod.WEEK.value:
            start = date.fromisocalendar(year, week, 1)
            end = start + timedelta(days=6)
        elif period == FinancePeriod.YEAR.value:
            start, end = date(year, 1, 1), date(year, 12, 31)
        else:
            start = date(year, month, 1)
            end = date(year, month, monthrange(year, month)[1])
    except ValueError:
        raise ServiceValidationError("Invalid period parameters")
    return start, end, {"year": year, "month": month, "week": week}


class _TransactionService:
    repository_cls = ExpenseRepository
    not_found_message = "Transaction not found"

    @classmethod
    def list(
        cls,
        db: Database,
        user: Dict[str, Any],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        start = parse_day(start_date, "start_date").isoformat() if start_date else None
        end = parse_day(end_date, "end_date").isoformat() if end_date else None
        return cls.repository_cls(db).list_filtered(user["_id"], start, end, category)

    @classmethod
    def create(cls, db: Database, user: Dict[str, Any], data: Union[ExpenseCreate, IncomeCreate]) -> Dict[str, Any]:
        document = DocumentMapper.to_storage(data.model_dump())
        document["user_id"] = user["_id"]
        document["date"] = document.get("date") or today_str()
        record = cls.repository_cls(db).create(document)
        logger.info(
            "Created %s %s (%s) for user %s",
            cls.repository_cls.collection_name, record["_id"], record["amount"], user["_id"],
        )
        return record

    @classmethod
    def update(cls, db: Database, user: Dict[str, Any], record_id: str, data: Union[ExpenseUpdate, IncomeUpdate]) -> Dict[str, Any]:
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        repo = cls.repository_cls(db)
        if not fields:
            record = repo.get_owned(record_id, user["_id"])
        else:
            record = repo.update_owned(record_id, user["_id"], fields)
        if not record:
            raise NotFoundError(cls.not_found_message)
        return record

    @classmethod
    def delete(cls, db: Database, user: Dict[str, Any], record_id: str) -> None:
        if not cls.repository_cls(db).delete_owned(record_id, user["_id"]):
            raise NotFoundError(cls.not_found_message)


class ExpenseService(_TransactionService):
    repository_cls = ExpenseRepository
    not_found_message = "Expense not found"


class IncomeService(_TransactionService):
    repository_cls = IncomeRepository
    not_found_message = "Income not found"


class FinanceService:
    @staticmethod
    def get_summary(
        db: Database,
        user: Dict[str, Any],
        period: str = FinancePeriod.MONTH.value,
        year: Optional[int] = None,
        month: Optional[int] = None,
        week: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Totals, per-category sums and the most recent transactions of one period.

        Args:
            period: week, month or year
            year/month/week: select a specific period instead of the current one

        Returns:
            Summary dict; ``balance`` is income minus expenses
        """
        start, end, current = period_window(period, year, month, week)
        start_s, end_s = start.isoformat(), end.isoformat()
        expenses = ExpenseRepository(db).list_filtered(user["_id"], start_s, end_s, limit=0)
        income = IncomeRepository(db).list_filtered(user["_id"], start_s, end_s, limit=0)

        total_expenses = sum(e.get("amount") or 0 for e in expenses)
        total_income = sum(i.get("amount") or 0 for i in income)

        transactions = [FinanceService._transaction("expense", e) for e in expenses]
        transactions += [FinanceService._transaction("income", i) for i in income]
        transactions.sort(key=lambda t: (t["date"], t["created_at"]), reverse=True)
        for t in transactions:
            t.pop("created_at")

        return {
            "total_expenses": total_expenses,
            "total_income": total_income,
            "balance": total_income - total_expenses,
            "expenses_by_category": FinanceService._by_category(expenses),
            "income_by_category": FinanceService._by_category(income),
            "recent_transactions": transactions[:RECENT_TRANSACTIONS],
            "period": period,
            "start_date": start_s,
            "end_date": end_s,
            "current_period": current,
        }

    @staticmethod
    def _by_category(records: List[Dict[str, Any]]) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for record in records:
            category = record.get("category") or "other"
            totals[category] = totals.get(category, 0) + (record.get("amount") or 0)
        return totals

    @staticmethod
    def _transaction(kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "type": kind,
            "id": str(record["_id"]),
            "amount": record.get("amount"),
            "category": record.get("category"),
            "description": record.get("description"),
            "date": record.get("date") or "",
            "created_at": record.get("created_at") or datetime.min,
        }

    @staticmethod
    def analyze_bill(data: BillAnalysisRequest) -> Dict[str, Any]:
        """
        Extract bill data from an image with the vision model.

        When the model is not configured or the call fails a canned bill marked
        ``is_mock`` is returned so the client can still prefill the form.
        """
        image_url = data.image_url or openai_adapter.image_data_url(data.image_base64, data.mime_type)
        if openai_adapter.is_configured():
            try:
                raw = openai_adapter.vision_json(BILL_PROMPT, image_url, max_tokens=1000)
                return {"success": True, "analysis": clean_bill_analysis(raw), "is_mock": False}
            except LifeTrackError as exc:
                logger.warning("Bill analysis failed, returning mock bill: %s", exc)
        else:
            logger.info("AI not configured, returning mock bill analysis")

        mock = dict(MOCK_BILL, date=today_str(), items=[dict(i) for i in MOCK_BILL["items"]])
        return {"success": True, "analysis": mock, "is_mock": True}
