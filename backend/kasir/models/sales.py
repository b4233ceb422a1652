from __future__ import annotations

from ..extensions import db
from kasir.time_utils import to_utc_z, to_epoch_ms

class Sale(db.Model):
    """
    Committed sale header.

    IMMUTABLE: written once by the sale commit together with all of its
    lines. There is no update or delete path. total_profit is stored as
    computed at commit time and never recomputed.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("total_profit = total_revenue - total_cost", name="ck_sales_profit"),
        db.CheckConstraint("payment_method IN ('cash', 'card', 'transfer')", name="ck_sales_payment_method"),
        db.Index("ix_sales_cashier_created", "cashier_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    total_revenue = db.Column(db.BigInteger, nullable=False)
    total_cost = db.Column(db.BigInteger, nullable=False)
    total_profit = db.Column(db.BigInteger, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False, index=True)
    cashier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    customer_name = db.Column(db.String(255), nullable=True)

    cashier = db.relationship("User", backref=db.backref("sales", lazy=True))
    lines = db.relationship("SaleLine", back_populates="sale", order_by="SaleLine.id", lazy=True)

    def to_dict(self, include_lines: bool = False) -> dict:
        data = {
            "id": self.id,
            "created_at": to_epoch_ms(self.created_at),
            "created_at_iso": to_utc_z(self.created_at),
            "total_revenue": self.total_revenue,
            "total_cost": self.total_cost,
            "total_profit": self.total_profit,
            "payment_method": self.payment_method,
            "cashier_id": self.cashier_id,
            "customer_name": self.customer_name,
        }
        if include_lines:
            data["items"] = [line.to_dict() for line in self.lines]
            data["cashier_name"] = self.cashier.display_name if self.cashier else "Unknown"
        return data


class SaleLine(db.Model):
    """
    One product-quantity entry of a committed sale.

    SNAPSHOTS: product_name, unit_price and unit_cost are copied from the
    product at commit time. Later product edits never touch these rows.
    """
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.BigInteger, nullable=False)
    unit_cost = db.Column(db.BigInteger, nullable=True)

    line_revenue = db.Column(db.BigInteger, nullable=False)
    line_cost = db.Column(db.BigInteger, nullable=False)

    sale = db.relationship("Sale", back_populates="lines")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "unit_cost": self.unit_cost,
            "line_revenue": self.line_revenue,
            "line_cost": self.line_cost,
        }
