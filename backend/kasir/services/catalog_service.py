# backend/kasir/services/catalog_service.py
"""
Catalog Service

OWNERSHIP: a product is visible to and editable by an actor when it has no
owner (shared catalog entry) or when the actor owns it. The same check is
applied to get, list, update, deactivate and stock correction.

STOCK: only the sale commit and adjust_stock change stock_quantity through
the conditional update in concurrency.py. update_product never touches
stock; a patch that carries stock_quantity is rejected.
"""
from __future__ import annotations

import logging

from ..errors import (
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..extensions import db
from ..models import Product
from ..validation import MAX_STOCK
from .concurrency import conditional_stock_update, run_with_retry

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {"name", "unit_price", "unit_cost", "category"}


def require_actor(actor_id: int | None) -> int:
    if actor_id is None:
        raise UnauthorizedError()
    return actor_id


def can_access(actor_id: int, product: Product) -> bool:
    return product.owner_id is None or product.owner_id == actor_id


def visible_products_query(actor_id: int):
    """Active products the actor can see: owned by them or unowned."""
    return db.session.query(Product).filter(
        Product.is_active.is_(True),
        db.or_(Product.owner_id == actor_id, Product.owner_id.is_(None)),
    )


def get_product(actor_id: int | None, product_id: int) -> Product:
    """Raises NotFoundError when absent or not accessible to the actor."""
    actor_id = require_actor(actor_id)
    product = db.session.get(Product, product_id)
    if product is None or not can_access(actor_id, product):
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def _get_mutable_product(actor_id: int, product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    if not can_access(actor_id, product):
        raise ForbiddenError("You do not own this product", details={"product_id": product_id})
    return product


def list_active(actor_id: int | None, category: str | None = None) -> list[Product]:
    actor_id = require_actor(actor_id)
    query = visible_products_query(actor_id)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def categories(actor_id: int | None) -> list[str]:
    """Distinct categories among the products the actor can see."""
    actor_id = require_actor(actor_id)
    rows = (
        visible_products_query(actor_id)
        .with_entities(Product.category)
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    return [row.category for row in rows]


def create_product(actor_id: int | None, patch: dict) -> Product:
    """Create a product owned by the actor from a validated patch."""
    actor_id = require_actor(actor_id)

    def _op():
        product = Product(
            name=patch["name"],
            unit_price=patch["unit_price"],
            unit_cost=patch.get("unit_cost"),
            stock_quantity=patch["stock_quantity"],
            category=patch["category"],
            owner_id=actor_id,
            is_active=True,
        )
        db.session.add(product)
        db.session.commit()
        return product

    product = run_with_retry(_op)
    logger.info("Product %s created by user %s", product.id, actor_id)
    return product


def update_product(actor_id: int | None, product_id: int, patch: dict) -> Product:
    """
    Apply a validated patch.

    The ORM version check turns a concurrent stock change (sale commit or
    correction) into ConflictError instead of a lost update.
    """
    actor_id = require_actor(actor_id)
    if "stock_quantity" in patch:
        raise ValidationError("stock_quantity is changed through stock adjustments, not product edits")

    def _op():
        product = _get_mutable_product(actor_id, product_id)
        if not product.is_active:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        for k, v in patch.items():
            if k in PRODUCT_MUTABLE_FIELDS:
                setattr(product, k, v)
        db.session.commit()
        return product

    product = run_with_retry(_op)
    logger.info("Product %s updated by user %s: %s", product_id, actor_id, sorted(patch))
    return product


def deactivate_product(actor_id: int | None, product_id: int) -> Product:
    """Soft delete. Past sale lines keep referencing the row."""
    actor_id = require_actor(actor_id)

    def _op():
        product = _get_mutable_product(actor_id, product_id)
        product.is_active = False
        db.session.commit()
        return product

    product = run_with_retry(_op)
    logger.info("Product %s deactivated by user %s", product_id, actor_id)
    return product


def adjust_stock(actor_id: int | None, product_id: int, delta: int, *, commit: bool = True) -> Product:
    """
    Manual stock correction by a signed delta.

    Raises InsufficientStockError when the result would be negative.
    """
    actor_id = require_actor(actor_id)
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError("delta must be an integer")
    if delta == 0:
        raise ValidationError("delta must be non-zero")
    if abs(delta) > MAX_STOCK:
        raise ValidationError(f"delta cannot exceed {MAX_STOCK}")

    def _op():
        product = _get_mutable_product(actor_id, product_id)
        if not product.is_active:
            raise NotFoundError("Product not found", details={"product_id": product_id})

        if not conditional_stock_update(product.id, delta):
            db.session.rollback()
            current = db.session.get(Product, product_id)
            raise InsufficientStockError(
                product_name=current.name,
                requested=-delta,
                available=current.stock_quantity,
                product_id=product_id,
            )

        if commit:
            db.session.commit()
        db.session.refresh(product)
        return product

    product = run_with_retry(_op)
    logger.info(
        "Stock for product %s adjusted by %+d by user %s (now %s)",
        product_id, delta, actor_id, product.stock_quantity,
    )
    return product
