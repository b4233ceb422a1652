from __future__ import annotations

from ..extensions import db
from kasir.time_utils import to_utc_z, to_epoch_ms

class Product(db.Model):
    """
    Product master data.

    OWNERSHIP: owner_id is the user who created the product. A product with
    no owner is a shared catalog entry that any authenticated user may edit.

    LIFECYCLE: never physically deleted. Deactivation sets is_active=False so
    historical sale lines keep pointing at a real row.

    STOCK: stock_quantity is only decremented by the sale commit and by manual
    stock corrections, both through a conditional UPDATE that cannot take it
    below zero. The CHECK constraint is the last line.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("unit_price >= 0", name="ck_products_price_non_negative"),
        db.CheckConstraint("unit_cost IS NULL OR unit_cost >= 0", name="ck_products_cost_non_negative"),
        db.Index("ix_products_owner_active", "owner_id", "is_active"),
        db.Index("ix_products_owner_category", "owner_id", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)

    # Whole currency units; no fractional subunits
    unit_price = db.Column(db.BigInteger, nullable=False)
    # HPP (cost of goods) per unit, optional
    unit_cost = db.Column(db.BigInteger, nullable=True)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(120), nullable=False, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock_quantity} owner_id={self.owner_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": self.unit_price,
            "unit_cost": self.unit_cost,
            "stock_quantity": self.stock_quantity,
            "category": self.category,
            "is_active": self.is_active,
            "owner_id": self.owner_id,
            "version_id": self.version_id,
            "created_at": to_epoch_ms(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
