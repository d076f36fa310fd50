"""
Daily payments and the counter balance.

The counter balance is what should be left in the till once the day's
collections are banked: opening + today's sale + other income - expenses -
(cash + UPI + card). The opening balance is the previous day's closing
balance, as reported by the shop API summary.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from core.api_client import LedgerApiClient
from core.business_date import business_date
from core.money import money, to_decimal
from schemas.payments import CounterBalance, PaymentAmounts, PaymentRecord, PaymentSheet
from services.dashboard import summary_number

logger = logging.getLogger(__name__)


def counter_balance(opening, sale, other_income, expenses, collected) -> CounterBalance:
    closing = (
        to_decimal(opening) + to_decimal(sale) + to_decimal(other_income)
        - to_decimal(expenses) - to_decimal(collected)
    )
    closing = money(closing)
    if closing > 0:
        status = "SHORT"
    elif closing < 0:
        status = "SURPLUS"
    else:
        status = "BALANCED"
    return CounterBalance(
        opening_balance=float(money(opening)),
        todays_sale=float(money(sale)),
        other_income=float(money(other_income)),
        expenses=float(money(expenses)),
        collected=float(money(collected)),
        closing_balance=float(closing),
        status=status,
    )


def balance_from_summary(summary: dict, collected: Decimal) -> CounterBalance:
    return counter_balance(
        summary_number(summary, "openingBalance"),
        summary_number(summary, "totalSales"),
        summary_number(summary, "totalOtherIncome"),
        summary_number(summary, "totalExpenses"),
        collected,
    )


def stored_amounts(data: dict) -> Optional[PaymentAmounts]:
    current = data.get("payment") if isinstance(data, dict) else None
    if not current:
        return None
    return PaymentAmounts.model_validate(current)


def build_payment_sheet(day: date, data: dict, summary: dict) -> PaymentSheet:
    amounts = stored_amounts(data)
    saved = amounts is not None
    amounts = amounts or PaymentAmounts()
    recent = [PaymentRecord.model_validate(r) for r in (data or {}).get("recentPayments") or []]
    return PaymentSheet(
        payment_date=day,
        cash_amount=amounts.cash_amount,
        upi_amount=amounts.upi_amount,
        card_amount=amounts.card_amount,
        total=float(money(amounts.total)),
        saved=saved,
        balance=balance_from_summary(summary or {}, amounts.total),
        recent_payments=recent,
    )


def load_payment_sheet(client: LedgerApiClient, day: Optional[date] = None) -> PaymentSheet:
    day = day or business_date()
    return build_payment_sheet(day, client.payments(day), client.summary(day))


def payment_payload(day: date, amounts: PaymentAmounts) -> dict:
    return {
        "payment_date": day.isoformat(),
        "cash_amount": amounts.cash_amount,
        "upi_amount": amounts.upi_amount,
        "card_amount": amounts.card_amount,
    }


def save_payment(client: LedgerApiClient, amounts: PaymentAmounts, day: Optional[date] = None) -> PaymentSheet:
    day = day or business_date()
    client.save_payment(payment_payload(day, amounts))
    logger.info("Payments for %s saved: total %s", day, money(amounts.total))
    return load_payment_sheet(client, day)
