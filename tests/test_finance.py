"""
Tests for expenses, income, finance summaries and bill analysis.
"""

from datetime import date

import pytest

from app.config import settings
from app.exceptions import ServiceValidationError, UpstreamServiceError
from adapters import openai_adapter
from services.finance_service import parse_bill_text, period_window

from test_constants import LIDL_RECEIPT_NO_TOTAL, TESCO_RECEIPT
from test_fixtures import api


def add_expense(client, headers, amount, category="groceries", day="2024-03-15", **extra):
    payload = {"amount": amount, "category": category, "description": f"{category} {amount}", "date": day}
    payload.update(extra)
    r = client.post(api("/expenses"), json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def add_income(client, headers, amount, category="salary", day="2024-03-05"):
    r = client.post(
        api("/income"),
        json={"amount": amount, "category": category, "description": "Monthly pay", "date": day},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


# =============================================================================
# EXPENSES AND INCOME
# =============================================================================


def test_create_expense(client, auth_headers):
    expense = add_expense(
        client,
        auth_headers,
        1438,
        payment_method="card",
        extracted_items=[{"name": "Kenyér", "price": 450}],
    )
    assert expense["id"]
    assert expense["date"] == "2024-03-15"
    assert expense["payment_method"] == "card"
    assert expense["extracted_items"] == [{"name": "Kenyér", "price": 450.0, "quantity": 1.0}]


def test_expense_date_defaults_to_today(client, auth_headers):
    r = client.post(
        api("/expenses"),
        json={"amount": 900, "category": "coffee", "description": "Flat white"},
        headers=auth_headers,
    )
    assert r.json()["date"] == date.today().isoformat()


def test_negative_expense_rejected(client, auth_headers):
    r = client.post(
        api("/expenses"),
        json={"amount": -5, "category": "coffee", "description": "Refund?"},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_expenses_filters(client, auth_headers):
    add_expense(client, auth_headers, 1000, day="2024-03-01")
    add_expense(client, auth_headers, 2000, category="transport", day="2024-03-10")
    add_expense(client, auth_headers, 3000, day="2024-04-02")

    march = client.get(
        api("/expenses?start_date=2024-03-01&end_date=2024-03-31"), headers=auth_headers
    ).json()["expenses"]
    assert [e["amount"] for e in march] == [2000, 1000]

    groceries = client.get(api("/expenses?category=groceries"), headers=auth_headers).json()["expenses"]
    assert [e["amount"] for e in groceries] == [3000, 1000]


def test_list_expenses_invalid_date(client, auth_headers):
    r = client.get(api("/expenses?start_date=March"), headers=auth_headers)
    assert r.status_code == 400


def test_update_and_delete_expense(client, auth_headers):
    expense = add_expense(client, auth_headers, 1000)

    r = client.put(api(f"/expenses/{expense['id']}"), json={"amount": 1250}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["amount"] == 1250
    assert r.json()["category"] == "groceries"

    assert client.delete(api(f"/expenses/{expense['id']}"), headers=auth_headers).status_code == 200
    r = client.delete(api(f"/expenses/{expense['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Expense not found"


def test_expenses_are_private(client, auth_headers):
    from test_fixtures import register_user

    expense = add_expense(client, auth_headers, 1000)
    other_headers, _ = register_user(client, "michael")

    assert client.get(api("/expenses"), headers=other_headers).json()["expenses"] == []
    r = client.put(api(f"/expenses/{expense['id']}"), json={"amount": 1}, headers=other_headers)
    assert r.status_code == 404


def test_income_crud(client, auth_headers):
    income = add_income(client, auth_headers, 450000)
    assert income["category"] == "salary"

    listed = client.get(api("/income"), headers=auth_headers).json()["income"]
    assert [i["id"] for i in listed] == [income["id"]]

    r = client.put(api(f"/income/{income['id']}"), json={"source": "Acme Kft."}, headers=auth_headers)
    assert r.json()["source"] == "Acme Kft."

    client.delete(api(f"/income/{income['id']}"), headers=auth_headers)
    r = client.delete(api(f"/income/{income['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Income not found"


# =============================================================================
# SUMMARY
# =============================================================================


def test_period_window():
    assert period_window("week", 2024, week=1)[:2] == (date(2024, 1, 1), date(2024, 1, 7))
    assert period_window("month", 2024, 2)[:2] == (date(2024, 2, 1), date(2024, 2, 29))
    assert period_window("year", 2023)[:2] == (date(2023, 1, 1), date(2023, 12, 31))


def test_period_window_defaults_to_current_period():
    start, end, current = period_window("month", today=date(2024, 5, 20))
    assert (start, end) == (date(2024, 5, 1), date(2024, 5, 31))
    assert current == {"year": 2024, "month": 5, "week": 21}


def test_period_window_rejects_bad_values():
    with pytest.raises(ServiceValidationError):
        period_window("month", 2024, 13)
    with pytest.raises(ServiceValidationError):
        period_window("decade")


def test_monthly_summary(client, auth_headers):
    add_income(client, auth_headers, 300000)
    add_expense(client, auth_headers, 1438, day="2024-03-15")
    add_expense(client, auth_headers, 2000, category="transport", day="2024-03-20")
    add_expense(client, auth_headers, 999, day="2024-04-01")

    summary = client.get(
        api("/finance/summary?period=month&year=2024&month=3"), headers=auth_headers
    ).json()

    assert summary["total_expenses"] == 3438
    assert summary["total_income"] == 300000
    assert summary["balance"] == 296562
    assert summary["expenses_by_category"] == {"groceries": 1438, "transport": 2000}
    assert summary["income_by_category"] == {"salary": 300000}
    assert [t["date"] for t in summary["recent_transactions"]] == ["2024-03-20", "2024-03-15", "2024-03-05"]
    assert summary["recent_transactions"][-1]["type"] == "income"
    assert (summary["start_date"], summary["end_date"]) == ("2024-03-01", "2024-03-31")


def test_weekly_summary(client, auth_headers):
    add_expense(client, auth_headers, 1438, day="2024-03-15")
    add_expense(client, auth_headers, 2000, day="2024-03-20")

    summary = client.get(
        api("/finance/summary?period=week&year=2024&week=11"), headers=auth_headers
    ).json()
    assert summary["total_expenses"] == 1438
    assert summary["balance"] == -1438


def test_recent_transactions_capped(client, auth_headers):
    for day in range(1, 13):
        add_expense(client, auth_headers, 100, day=f"2024-03-{day:02d}")

    summary = client.get(api("/finance/summary?year=2024&month=3"), headers=auth_headers).json()
    assert summary["total_expenses"] == 1200
    assert len(summary["recent_transactions"]) == 10


def test_summary_invalid_period(client, auth_headers):
    r = client.get(api("/finance/summary?period=decade"), headers=auth_headers)
    assert r.status_code == 400


# =============================================================================
# BILLS
# =============================================================================


def test_parse_tesco_receipt():
    bill = parse_bill_text(TESCO_RECEIPT)

    assert bill["merchant"] == "TESCO Global Áruházak Zrt."
    assert bill["total_amount"] == 1438
    assert bill["date"] == "2024-03-15"
    assert [(i["name"], i["price"]) for i in bill["items"]] == [
        ("Kenyér", 450),
        ("Tej 2,8% 1L", 389),
        ("Banán 1kg", 599),
    ]
    assert bill["currency"] == "HUF"
    assert bill["confidence"] == 1.0


def test_parse_receipt_without_total_sums_items():
    bill = parse_bill_text(LIDL_RECEIPT_NO_TOTAL)
    assert bill["merchant"] == "LIDL Magyarország"
    assert bill["date"] == "2024-04-15"
    assert bill["total_amount"] == 548


def test_parse_unreadable_receipt():
    bill = parse_bill_text("thanks!\n***")
    assert bill["merchant"] == "Unknown"
    assert bill["items"] == []
    assert bill["total_amount"] == 0
    assert bill["date"] == date.today().isoformat()
    assert bill["confidence"] == 0.28


def test_parse_bill_text_endpoint(client, auth_headers):
    r = client.post(api("/finance/parse-bill-text"), json={"text": TESCO_RECEIPT}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["analysis"]["total_amount"] == 1438


def test_analyze_bill_requires_image(client, auth_headers):
    r = client.post(api("/finance/analyze-bill"), json={}, headers=auth_headers)
    assert r.status_code == 400


def test_analyze_bill_without_ai_returns_mock(client, auth_headers):
    r = client.post(api("/finance/analyze-bill"), json={"image_url": "https://img.example/bill.jpg"}, headers=auth_headers)
    body = r.json()
    assert body["is_mock"] is True
    assert body["analysis"]["merchant"] == "SPAR"
    assert body["analysis"]["date"] == date.today().isoformat()


def test_analyze_bill_with_ai(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(
        openai_adapter,
        "vision_json",
        lambda prompt, image_url, **kwargs: {
            "totalAmount": 1438,
            "merchant": "TESCO",
            "date": "2024-03-15",
            "items": [{"name": "Kenyér", "price": 450}, {"price": 3}],
            "confidence": 1.7,
        },
    )

    body = client.post(
        api("/finance/analyze-bill"), json={"image_base64": "aGVsbG8="}, headers=auth_headers
    ).json()
    assert body["is_mock"] is False
    assert body["analysis"] == {
        "total_amount": 1438,
        "merchant": "TESCO",
        "date": "2024-03-15",
        "items": [{"name": "Kenyér", "price": 450, "quantity": 1}],
        "currency": "HUF",
        "confidence": 1.0,
    }


def test_analyze_bill_ai_failure_returns_mock(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")

    def broken(prompt, image_url, **kwargs):
        raise UpstreamServiceError("AI service error")

    monkeypatch.setattr(openai_adapter, "vision_json", broken)
    body = client.post(
        api("/finance/analyze-bill"), json={"image_url": "https://img.example/bill.jpg"}, headers=auth_headers
    ).json()
    assert body["is_mock"] is True
