"""
Reporting service tests.

Sales are inserted with fixed timestamps so day and month boundaries can be
checked exactly.
"""

from datetime import datetime

import pytest

from kasir.errors import UnauthorizedError, ValidationError
from kasir.extensions import db
from kasir.models import Sale, SaleLine
from kasir.services import reporting_service, sales_service
from kasir.time_utils import local_month_bounds, resolve_timezone, to_epoch_ms


def _record_sale(user, created_at, revenue, cost, method="cash", customer=None, lines=()):
    sale = Sale(
        created_at=created_at,
        total_revenue=revenue,
        total_cost=cost,
        total_profit=revenue - cost,
        payment_method=method,
        cashier_id=user.id,
        customer_name=customer,
    )
    db.session.add(sale)
    db.session.flush()
    for line in lines:
        db.session.add(SaleLine(sale_id=sale.id, **line))
    db.session.commit()
    return sale


# =============================================================================
# TODAY / MONTH
# =============================================================================


class TestTodayStats:

    def test_today_folds_only_todays_sales(self, cashier, other_cashier):
        _record_sale(cashier, datetime(2026, 3, 11, 1, 0), 3000, 1800)
        _record_sale(cashier, datetime(2026, 3, 11, 4, 0), 1500, 500)
        _record_sale(cashier, datetime(2026, 3, 10, 23, 59, 59), 9999, 0)
        _record_sale(cashier, datetime(2026, 3, 12, 0, 0), 7777, 0)
        _record_sale(other_cashier, datetime(2026, 3, 11, 2, 0), 5000, 0)

        stats = reporting_service.today_stats(cashier.id, now=datetime(2026, 3, 11, 5, 0))

        assert stats["totalRevenue"] == 4500
        assert stats["totalCost"] == 2300
        assert stats["totalProfit"] == 2200
        assert stats["totalTransactions"] == 2
        assert stats["averageTransaction"] == 2250
        assert stats["start"] == to_epoch_ms(datetime(2026, 3, 11))
        assert stats["end"] == to_epoch_ms(datetime(2026, 3, 12))
        assert stats["timezone"] == "UTC"

    def test_no_sales_gives_zeros(self, cashier):
        stats = reporting_service.today_stats(cashier.id, now=datetime(2026, 3, 11, 5, 0))

        assert stats["totalRevenue"] == 0
        assert stats["totalTransactions"] == 0
        assert stats["averageTransaction"] == 0

    def test_average_is_floored(self, cashier):
        for revenue in (1000, 1000, 1001):
            _record_sale(cashier, datetime(2026, 3, 11, 1, 0), revenue, 0)

        stats = reporting_service.today_stats(cashier.id, now=datetime(2026, 3, 11, 5, 0))

        assert stats["averageTransaction"] == 1000

    def test_day_follows_reporting_timezone(self, app, cashier, monkeypatch):
        monkeypatch.setitem(app.config, "REPORTING_TIMEZONE", "Asia/Jakarta")
        # 2026-03-11 03:00 in Jakarta (UTC+7)
        _record_sale(cashier, datetime(2026, 3, 10, 20, 0), 3000, 0)
        # 2026-03-10 23:00 in Jakarta, the previous local day
        _record_sale(cashier, datetime(2026, 3, 10, 16, 0), 1000, 0)

        stats = reporting_service.today_stats(cashier.id, now=datetime(2026, 3, 11, 5, 0))

        assert stats["totalRevenue"] == 3000
        assert stats["totalTransactions"] == 1
        assert stats["start"] == to_epoch_ms(datetime(2026, 3, 10, 17, 0))
        assert stats["timezone"] == "Asia/Jakarta"

    def test_missing_actor_is_unauthorized(self, db_session):
        with pytest.raises(UnauthorizedError):
            reporting_service.today_stats(None)


class TestMonthlyStats:

    def test_month_totals_and_daily_breakdown(self, cashier):
        _record_sale(cashier, datetime(2026, 3, 1, 0, 0), 1000, 400)
        _record_sale(cashier, datetime(2026, 3, 1, 10, 0), 2000, 1000)
        _record_sale(cashier, datetime(2026, 3, 14, 8, 0), 500, 100)
        _record_sale(cashier, datetime(2026, 2, 28, 23, 59), 8000, 0)
        _record_sale(cashier, datetime(2026, 4, 1, 0, 0), 8000, 0)

        stats = reporting_service.monthly_stats(cashier.id, now=datetime(2026, 3, 15, 12, 0))

        assert stats["totalRevenue"] == 3500
        assert stats["totalCost"] == 1500
        assert stats["totalProfit"] == 2000
        assert stats["totalTransactions"] == 3
        assert stats["averageTransaction"] == 1166
        assert stats["dailyStats"] == {
            "2026-03-01": {"revenue": 3000, "cost": 1400, "profit": 1600, "transactions": 2},
            "2026-03-14": {"revenue": 500, "cost": 100, "profit": 400, "transactions": 1},
        }

    def test_daily_breakdown_sums_to_month_totals(self, cashier):
        for day, revenue, cost in [(2, 1200, 300), (2, 800, 800), (9, 4500, 2000), (20, 999, 1)]:
            _record_sale(cashier, datetime(2026, 5, day, 6, 30), revenue, cost)

        stats = reporting_service.monthly_stats(cashier.id, now=datetime(2026, 5, 25))
        days = stats["dailyStats"].values()

        assert sum(d["revenue"] for d in days) == stats["totalRevenue"]
        assert sum(d["cost"] for d in days) == stats["totalCost"]
        assert sum(d["profit"] for d in days) == stats["totalProfit"]
        assert sum(d["transactions"] for d in days) == stats["totalTransactions"]

    def test_december_rolls_into_next_year(self):
        start, end = local_month_bounds(datetime(2026, 12, 31, 23, 0), resolve_timezone("UTC"))

        assert start == datetime(2026, 12, 1)
        assert end == datetime(2027, 1, 1)


# =============================================================================
# RANGE FOLDS
# =============================================================================


class TestRangeFolds:

    def test_range_is_half_open(self, cashier):
        _record_sale(cashier, datetime(2026, 6, 1), 100, 0)
        _record_sale(cashier, datetime(2026, 6, 2), 200, 0)

        stats = reporting_service.stats_for_range(cashier.id, datetime(2026, 6, 1), datetime(2026, 6, 2))

        assert stats["totalRevenue"] == 100
        assert stats["totalTransactions"] == 1

    def test_daily_breakdown_for_range(self, cashier):
        _record_sale(cashier, datetime(2026, 6, 1, 9), 100, 50)
        _record_sale(cashier, datetime(2026, 6, 3, 9), 300, 100)

        days = reporting_service.daily_breakdown(cashier.id, datetime(2026, 6, 1), datetime(2026, 6, 30))

        assert list(days) == ["2026-06-01", "2026-06-03"]
        assert days["2026-06-03"]["profit"] == 200

    def test_payment_method_breakdown(self, cashier):
        _record_sale(cashier, datetime(2026, 6, 1), 100, 0, method="cash")
        _record_sale(cashier, datetime(2026, 6, 1), 100, 0, method="cash")
        _record_sale(cashier, datetime(2026, 6, 1), 100, 0, method="transfer")

        assert reporting_service.payment_method_breakdown(cashier.id) == {"cash": 2, "transfer": 1}

    def test_committed_sales_are_reported(self, cashier, make_product):
        product = make_product(cashier, unit_price=1000, unit_cost=600, stock_quantity=10)
        sales_service.commit_sale(cashier.id, [{"product_id": product.id, "quantity": 3}], "cash")
        sales_service.commit_sale(cashier.id, [{"product_id": product.id, "quantity": 1}], "card")

        stats = reporting_service.today_stats(cashier.id)

        assert stats["totalRevenue"] == 4000
        assert stats["totalCost"] == 2400
        assert stats["totalTransactions"] == 2


# =============================================================================
# RECENT SALES / TRANSACTION HISTORY
# =============================================================================


class TestTransactions:

    def test_recent_sales_newest_first_with_limit(self, cashier):
        for hour in range(12):
            _record_sale(cashier, datetime(2026, 7, 1, hour), 100 + hour, 0)

        default = reporting_service.recent_sales(cashier.id)
        three = reporting_service.recent_sales(cashier.id, limit=3)

        assert len(default) == 10
        assert [s["total_revenue"] for s in three] == [111, 110, 109]
        assert three[0]["cashier_name"] == "Siti"

    def test_list_includes_lines(self, cashier):
        _record_sale(
            cashier, datetime(2026, 7, 1, 9), 2000, 1200,
            lines=[{
                "product_id": 1, "product_name": "Kopi", "quantity": 2, "unit_price": 1000,
                "unit_cost": 600, "line_revenue": 2000, "line_cost": 1200,
            }],
        )

        items = reporting_service.transactions_list(cashier.id)

        assert len(items) == 1
        assert items[0]["items"][0]["product_name"] == "Kopi"
        assert items[0]["cashier_name"] == "Siti"
        assert "cashierName" not in items[0]

    def test_date_range_end_is_inclusive(self, cashier):
        _record_sale(cashier, datetime(2026, 7, 1, 8), 100, 0)
        _record_sale(cashier, datetime(2026, 7, 1, 12), 200, 0)
        _record_sale(cashier, datetime(2026, 7, 1, 18), 300, 0)

        items = reporting_service.transactions_list(
            cashier.id,
            start_ms=to_epoch_ms(datetime(2026, 7, 1, 8)),
            end_ms=to_epoch_ms(datetime(2026, 7, 1, 12)),
        )

        assert [s["total_revenue"] for s in items] == [200, 100]

    def test_end_bound_includes_sale_in_the_same_millisecond(self, cashier, make_product):
        product = make_product(cashier, stock_quantity=5)
        sale_id = sales_service.commit_sale(cashier.id, [{"product_id": product.id, "quantity": 1}], "cash")
        created_ms = sales_service.get_sale(cashier.id, sale_id).to_dict()["created_at"]

        items = reporting_service.transactions_list(cashier.id, start_ms=created_ms, end_ms=created_ms)
        stats = reporting_service.transactions_stats(cashier.id, start_ms=created_ms, end_ms=created_ms)

        assert [s["id"] for s in items] == [sale_id]
        assert stats["totalTransactions"] == 1

    def test_sub_millisecond_timestamp_matches_its_millisecond(self, cashier):
        created_at = datetime(2026, 10, 19, 12, 5, 13, 411715)
        _record_sale(cashier, created_at, 100, 0)
        ms = to_epoch_ms(created_at)

        assert ms == to_epoch_ms(datetime(2026, 10, 19, 12, 5, 13, 411000))
        assert len(reporting_service.transactions_list(cashier.id, start_ms=ms, end_ms=ms)) == 1
        assert reporting_service.transactions_list(cashier.id, end_ms=ms - 1) == []

    @pytest.mark.parametrize("kwargs", [
        {"start_ms": 99999999999999999},
        {"end_ms": 99999999999999999},
        {"start_ms": -99999999999999999},
    ])
    def test_out_of_range_dates_are_rejected(self, cashier, kwargs):
        with pytest.raises(ValidationError):
            reporting_service.transactions_list(cashier.id, **kwargs)
        with pytest.raises(ValidationError):
            reporting_service.transactions_stats(cashier.id, **kwargs)

    def test_filters_by_payment_method_and_customer(self, cashier):
        _record_sale(cashier, datetime(2026, 7, 1, 8), 100, 0, method="cash", customer="Budi")
        _record_sale(cashier, datetime(2026, 7, 1, 9), 200, 0, method="card", customer="Budi")
        _record_sale(cashier, datetime(2026, 7, 1, 10), 300, 0, method="cash", customer="Ani")

        cash = reporting_service.transactions_list(cashier.id, payment_method="CASH")
        budi = reporting_service.transactions_list(cashier.id, customer_name="Budi")
        both = reporting_service.transactions_list(cashier.id, payment_method="cash", customer_name="Budi")

        assert [s["total_revenue"] for s in cash] == [300, 100]
        assert [s["total_revenue"] for s in budi] == [200, 100]
        assert [s["total_revenue"] for s in both] == [100]

    def test_paging(self, cashier):
        for hour in range(5):
            _record_sale(cashier, datetime(2026, 7, 1, hour), hour, 0)

        page = reporting_service.transactions_list(cashier.id, limit=2, offset=2)

        assert [s["total_revenue"] for s in page] == [2, 1]

    def test_limit_is_capped(self, cashier):
        for minute in range(3):
            _record_sale(cashier, datetime(2026, 7, 1, 0, minute), 1, 0)

        assert len(reporting_service.transactions_list(cashier.id, limit=500)) == 3

    @pytest.mark.parametrize("kwargs", [{"limit": 0}, {"limit": -5}, {"offset": -1}])
    def test_invalid_paging_is_rejected(self, cashier, kwargs):
        with pytest.raises(ValidationError):
            reporting_service.transactions_list(cashier.id, **kwargs)

    def test_unknown_payment_method_filter_is_rejected(self, cashier):
        with pytest.raises(ValidationError):
            reporting_service.transactions_list(cashier.id, payment_method="bitcoin")

    def test_other_users_sales_are_excluded(self, cashier, other_cashier):
        _record_sale(other_cashier, datetime(2026, 7, 1, 8), 100, 0)

        assert reporting_service.transactions_list(cashier.id) == []
        assert reporting_service.recent_sales(cashier.id) == []

    def test_transactions_stats_with_payment_breakdown(self, cashier):
        _record_sale(cashier, datetime(2026, 7, 1, 8), 1000, 400, method="cash")
        _record_sale(cashier, datetime(2026, 7, 2, 8), 3000, 1000, method="transfer")
        _record_sale(cashier, datetime(2026, 7, 3, 8), 5000, 0, method="cash")

        stats = reporting_service.transactions_stats(
            cashier.id,
            start_ms=to_epoch_ms(datetime(2026, 7, 1)),
            end_ms=to_epoch_ms(datetime(2026, 7, 2, 8)),
        )

        assert stats["totalRevenue"] == 4000
        assert stats["totalProfit"] == 2600
        assert stats["totalTransactions"] == 2
        assert stats["averageTransaction"] == 2000
        assert stats["paymentMethods"] == {"cash": 1, "transfer": 1}
