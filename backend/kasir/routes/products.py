# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/kasir/routes/products.py
"""
Product catalog routes.

VISIBILITY: every route sees the caller's own products plus unowned shared
products. Mutating someone else's product returns 403.
"""
from flask import Blueprint, request, g

from ..services import catalog_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    coerce_int,
)
from ..errors import ValidationError
from ..decorators import json_body, require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "unit_price", "unit_cost", "stock_quantity", "category"},
    required_on_create={"name", "unit_price", "stock_quantity", "category"},
)
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "unit_price", "unit_cost", "category"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products():
    """
    List active products visible to the caller.

    Query params:
    - category: str (optional) - exact category filter
    """
    category = request.args.get("category") or None
    products = catalog_service.list_active(g.actor_id, category=category)
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


@products_bp.get("/categories")
@require_auth
def list_categories():
    return {"categories": catalog_service.categories(g.actor_id)}


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    product = catalog_service.get_product(g.actor_id, product_id)
    return {"product": product.to_dict()}


@products_bp.post("")
@require_auth
def create_product_route():
    """Create a product owned by the caller."""
    payload = json_body()

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    created = catalog_service.create_product(g.actor_id, patch)
    return {"product": created.to_dict()}, 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    """
    Update a product.

    Only the owner (or anyone, for unowned products) may update.
    Stock is not editable here; use POST /<id>/stock.
    """
    payload = json_body()

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
    enforce_rules_product(patch)

    updated = catalog_service.update_product(g.actor_id, product_id, patch)
    return {"product": updated.to_dict()}, 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    """Soft delete (is_active=False)."""
    catalog_service.deactivate_product(g.actor_id, product_id)
    return {"ok": True}, 200


@products_bp.post("/<int:product_id>/stock")
@require_auth
def adjust_stock_route(product_id: int):
    """
    Manual stock correction.

    Body: {"delta": int} - positive to add, negative to remove.
    """
    payload = json_body()
    if "delta" not in payload:
        raise ValidationError("delta is required")
    delta = coerce_int("delta", payload["delta"])

    product = catalog_service.adjust_stock(g.actor_id, product_id, delta)
    return {"product": product.to_dict()}, 200
