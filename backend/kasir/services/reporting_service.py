# Overview: Service-layer operations for reporting; read-only folds over committed sales.

"""
Every report is scoped to the actor's own sales (cashier_id == actor).

Range semantics:
- stats_for_range / daily_breakdown / payment_method_breakdown: [start, end)
- transactions_list / transactions_stats: start and end both inclusive,
  matching the transaction-history filter of the mobile client

"Today" and "this month" are calendar boundaries in REPORTING_TIMEZONE.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime

from flask import current_app
from sqlalchemy.orm import selectinload

from ..errors import ValidationError
from ..extensions import db
from ..models import Sale
from ..validation import normalize_payment_method
from kasir.time_utils import (
    from_epoch_ms,
    local_date_key,
    local_day_bounds,
    local_month_bounds,
    resolve_timezone,
    to_epoch_ms,
    utcnow,
)
from .catalog_service import require_actor

MAX_PAGE_SIZE = 100


def reporting_timezone():
    return resolve_timezone(current_app.config.get("REPORTING_TIMEZONE", "UTC"))


def _sales_query(actor_id: int):
    return db.session.query(Sale).filter(Sale.cashier_id == actor_id)


def _in_range(query, start: datetime | None, end: datetime | None):
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at < end)
    return query


def _ms_param(field: str, value: int | None) -> datetime | None:
    try:
        return from_epoch_ms(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be epoch milliseconds") from exc


def _ms_bounds(start_ms: int | None, end_ms: int | None) -> tuple[datetime | None, datetime | None]:
    """
    Inclusive epoch-ms range -> half-open datetime range.

    Stored timestamps keep microseconds, so the end becomes end_ms + 1 to
    include everything within the end millisecond.
    """
    start = _ms_param("start_date", start_ms)
    end = _ms_param("end_date", end_ms + 1) if end_ms is not None else None
    return start, end


def _fold(sales: list[Sale]) -> dict:
    total_revenue = sum(sale.total_revenue for sale in sales)
    total_cost = sum(sale.total_cost for sale in sales)
    total_profit = sum(sale.total_profit for sale in sales)
    count = len(sales)
    return {
        "totalRevenue": total_revenue,
        "totalCost": total_cost,
        "totalProfit": total_profit,
        "totalTransactions": count,
        "averageTransaction": total_revenue // count if count else 0,
    }


def _daily(sales: list[Sale], tz) -> dict:
    days: dict[str, dict] = OrderedDict()
    for sale in sorted(sales, key=lambda s: (s.created_at, s.id)):
        key = local_date_key(sale.created_at, tz)
        bucket = days.setdefault(key, {"revenue": 0, "cost": 0, "profit": 0, "transactions": 0})
        bucket["revenue"] += sale.total_revenue
        bucket["cost"] += sale.total_cost
        bucket["profit"] += sale.total_profit
        bucket["transactions"] += 1
    return dict(days)


def _payment_methods(sales: list[Sale]) -> dict:
    counts: dict[str, int] = {}
    for sale in sales:
        counts[sale.payment_method] = counts.get(sale.payment_method, 0) + 1
    return counts


def stats_for_range(actor_id: int | None, start: datetime, end: datetime) -> dict:
    actor_id = require_actor(actor_id)
    sales = _in_range(_sales_query(actor_id), start, end).all()
    return _fold(sales)


def daily_breakdown(actor_id: int | None, start: datetime, end: datetime) -> dict:
    actor_id = require_actor(actor_id)
    sales = _in_range(_sales_query(actor_id), start, end).all()
    return _daily(sales, reporting_timezone())


def payment_method_breakdown(actor_id: int | None, start: datetime | None = None, end: datetime | None = None) -> dict:
    actor_id = require_actor(actor_id)
    sales = _in_range(_sales_query(actor_id), start, end).all()
    return _payment_methods(sales)


def today_stats(actor_id: int | None, now: datetime | None = None) -> dict:
    actor_id = require_actor(actor_id)
    tz = reporting_timezone()
    start, end = local_day_bounds(now or utcnow(), tz)
    sales = _in_range(_sales_query(actor_id), start, end).all()
    result = _fold(sales)
    result.update({"start": to_epoch_ms(start), "end": to_epoch_ms(end), "timezone": tz.key})
    return result


def monthly_stats(actor_id: int | None, now: datetime | None = None) -> dict:
    """Month-to-date totals plus a per-day breakdown that sums back to them."""
    actor_id = require_actor(actor_id)
    tz = reporting_timezone()
    start, end = local_month_bounds(now or utcnow(), tz)
    sales = _in_range(_sales_query(actor_id), start, end).all()
    result = _fold(sales)
    result.update({
        "dailyStats": _daily(sales, tz),
        "start": to_epoch_ms(start),
        "end": to_epoch_ms(end),
        "timezone": tz.key,
    })
    return result


def _clamp_limit(limit, default: int) -> int:
    if limit is None:
        return default
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError("limit must be a positive integer")
    return min(limit, MAX_PAGE_SIZE)


def _with_lines(query):
    return query.options(selectinload(Sale.lines), selectinload(Sale.cashier))


def _sale_payload(sale: Sale) -> dict:
    return sale.to_dict(include_lines=True)


def recent_sales(actor_id: int | None, limit: int | None = None) -> list[dict]:
    actor_id = require_actor(actor_id)
    limit = _clamp_limit(limit, 10)
    sales = (
        _with_lines(_sales_query(actor_id))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )
    return [_sale_payload(sale) for sale in sales]


def transactions_list(
    actor_id: int | None,
    *,
    start_ms: int | None = None,
    end_ms: int | None = None,
    payment_method: str | None = None,
    customer_name: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[dict]:
    actor_id = require_actor(actor_id)
    limit = _clamp_limit(limit, 20)
    if offset is None:
        offset = 0
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValidationError("offset must be a non-negative integer")

    query = _in_range(_sales_query(actor_id), *_ms_bounds(start_ms, end_ms))
    if payment_method:
        query = query.filter(Sale.payment_method == normalize_payment_method(payment_method))
    if customer_name:
        query = query.filter(Sale.customer_name == customer_name)

    sales = (
        _with_lines(query)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [_sale_payload(sale) for sale in sales]


def transactions_stats(actor_id: int | None, *, start_ms: int | None = None, end_ms: int | None = None) -> dict:
    actor_id = require_actor(actor_id)
    sales = _in_range(_sales_query(actor_id), *_ms_bounds(start_ms, end_ms)).all()
    result = _fold(sales)
    result["paymentMethods"] = _payment_methods(sales)
    return result
