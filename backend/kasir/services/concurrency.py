# Overview: Service-layer helpers for concurrency; retries, rollbacks and conditional stock updates.

from __future__ import annotations

import logging
import time

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConflictError
from ..extensions import db
from ..models import Product

logger = logging.getLogger(__name__)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation, rolling back the session on any failure.

    OperationalError (database locked, deadlock) is retried with exponential
    backoff. StaleDataError (ORM version check lost) is surfaced as
    ConflictError and never retried here: the caller decides whether to
    re-read and try again.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning("Database busy, retrying (attempt %s of %s)", attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))
        except StaleDataError as exc:
            db.session.rollback()
            raise ConflictError("Record was modified concurrently; reload and try again") from exc
        except Exception:
            db.session.rollback()
            raise


def conditional_stock_update(product_id: int, delta: int) -> bool:
    """
    Atomically add delta to a product's stock if the result stays >= 0.

    Compare-and-set on the value itself: the WHERE clause re-checks the
    current stock inside the UPDATE, so two racing decrements can never both
    succeed past zero. Bumps version_id so ORM edits holding an older
    version fail their own check.

    Returns False when no row matched (stock would go negative). Does not
    commit.
    """
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(
            stock_quantity=Product.stock_quantity + delta,
            version_id=Product.version_id + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Product.stock_quantity >= -delta)

    result = db.session.execute(stmt)
    return result.rowcount == 1
