"""
Sales Service - sale commit

A sale is committed in one database transaction: validate every cart line
against current stock, snapshot product name/price/cost into the lines,
compute totals, then decrement stock and insert the header plus lines.
Either all of it becomes visible or none of it does.

FAILURE ORDER:
- ValidationError / UnauthorizedError: before touching the database
- NotFoundError / InsufficientStockError: after reads, before any write
- ConflictError: a conditional decrement matched no row because another
  commit took the units after our read; everything is rolled back
"""

from __future__ import annotations

import logging

from ..errors import ConflictError, InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import Product, Sale, SaleLine
from ..validation import normalize_customer_name, normalize_payment_method, validate_cart_items
from kasir.time_utils import utcnow
from .catalog_service import can_access, require_actor
from .concurrency import conditional_stock_update, run_with_retry

logger = logging.getLogger(__name__)


def _load_product(actor_id: int, product_id: int) -> Product | None:
    product = db.session.get(Product, product_id)
    if product is None or not product.is_active or not can_access(actor_id, product):
        return None
    return product


def _build_lines(actor_id: int, items: list[dict]) -> list[dict]:
    """
    Validate each cart line in submission order and snapshot pricing.

    Duplicate product ids are not merged: each line is checked against the
    stock left after the earlier lines of the same cart.
    """
    claimed: dict[int, int] = {}
    lines = []

    for item in items:
        product_id = item["product_id"]
        quantity = item["quantity"]

        product = _load_product(actor_id, product_id)
        if product is None:
            raise NotFoundError(
                f"Product not found: {product_id}",
                details={"product_id": product_id},
            )

        available = product.stock_quantity - claimed.get(product_id, 0)
        if quantity > available:
            raise InsufficientStockError(
                product_name=product.name,
                requested=quantity,
                available=available,
                product_id=product_id,
            )
        claimed[product_id] = claimed.get(product_id, 0) + quantity

        lines.append({
            "product_id": product_id,
            "product_name": product.name,
            "quantity": quantity,
            "unit_price": product.unit_price,
            "unit_cost": product.unit_cost,
            "line_revenue": product.unit_price * quantity,
            "line_cost": (product.unit_cost or 0) * quantity,
        })

    return lines


def _commit_locked(
    actor_id: int,
    items: list[dict],
    payment_method: str,
    customer_name: str | None,
) -> Sale:
    lines = _build_lines(actor_id, items)

    total_revenue = sum(line["line_revenue"] for line in lines)
    total_cost = sum(line["line_cost"] for line in lines)

    for line in lines:
        if not conditional_stock_update(line["product_id"], -line["quantity"]):
            logger.warning(
                "Stock conflict on product %s while committing sale for user %s",
                line["product_id"], actor_id,
            )
            raise ConflictError(
                f"Stock for {line['product_name']} changed during checkout; please retry",
                details={"product_id": line["product_id"]},
            )

    sale = Sale(
        created_at=utcnow(),
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=total_revenue - total_cost,
        payment_method=payment_method,
        cashier_id=actor_id,
        customer_name=customer_name,
    )
    db.session.add(sale)
    db.session.flush()

    for line in lines:
        db.session.add(SaleLine(sale_id=sale.id, **line))

    return sale


def commit_sale(
    actor_id: int | None,
    items: list[dict],
    payment_method: str,
    customer_name: str | None = None,
) -> int:
    """
    Commit a cart as a sale and return the new sale id.

    Raises UnauthorizedError, ValidationError, NotFoundError,
    InsufficientStockError or ConflictError. On any error the session is
    rolled back: no stock change, no sale, no lines.
    """
    actor_id = require_actor(actor_id)
    cart = validate_cart_items(items)
    method = normalize_payment_method(payment_method)
    customer = normalize_customer_name(customer_name)

    def _op():
        # Reads below must not reuse objects left over from earlier work in this session.
        db.session.expire_all()
        sale = _commit_locked(actor_id, cart, method, customer)
        db.session.commit()
        return sale.id

    sale_id = run_with_retry(_op)
    logger.info(
        "Sale %s committed by user %s: %s line(s), payment=%s",
        sale_id, actor_id, len(cart), method,
    )
    return sale_id


def get_sale(actor_id: int | None, sale_id: int) -> Sale:
    """Sale with its lines; only the cashier who recorded it can read it."""
    actor_id = require_actor(actor_id)
    sale = db.session.get(Sale, sale_id)
    if sale is None or sale.cashier_id != actor_id:
        raise NotFoundError("Sale not found", details={"sale_id": sale_id})
    return sale
