"""
Stock Service Layer
Keeps items.stock in step with purchases and sales.

None of these methods commit: callers run them inside their own transaction
so a failure on any line leaves every item untouched.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..models import Item, Purchase, Sale
from .unit_conversion import to_base_quantity

logger = logging.getLogger(__name__)


class StockService:
    """Service class for stock movements"""

    @staticmethod
    def _lock_item(db: Session, item_id: int) -> Optional[Item]:
        return db.query(Item).filter(Item.id == item_id).with_for_update().first()

    @staticmethod
    def base_quantity(item: Item, quantity: float, unit: Optional[str]) -> float:
        return to_base_quantity(quantity, unit, item.base_unit, item.unit_conversions)

    @staticmethod
    def apply_purchase_stock(db: Session, purchase: Purchase) -> Dict[int, float]:
        """Add every purchase line to stock. Returns {item_id: new_stock}."""
        changes = {}
        for line in purchase.items:
            item = StockService._lock_item(db, line.item_id)
            if item is None:
                raise ValueError(f"Item {line.item_id} not found")
            item.stock = (item.stock or 0) + StockService.base_quantity(item, line.quantity, line.unit)
            changes[item.id] = item.stock
        db.flush()
        return changes

    @staticmethod
    def rollback_purchase_stock(db: Session, purchase: Purchase) -> Dict[int, float]:
        """
        Take every purchase line back out of stock, clamped at zero.
        Lines whose item no longer exists are skipped.
        """
        changes = {}
        for line in purchase.items:
            item = StockService._lock_item(db, line.item_id)
            if item is None:
                logger.warning("Purchase %s references missing item %s", purchase.id, line.item_id)
                continue
            quantity = StockService.base_quantity(item, line.quantity, line.unit)
            item.stock = max(0, (item.stock or 0) - quantity)
            changes[item.id] = item.stock
        db.flush()
        return changes

    @staticmethod
    def deduct_sale_stock(db: Session, sale: Sale) -> Dict[int, float]:
        """Remove sold quantities from stock; refuses to go below zero."""
        changes = {}
        for line in sale.items:
            item = StockService._lock_item(db, line.item_id)
            if item is None:
                raise ValueError(f"Item {line.item_id} not found")
            quantity = StockService.base_quantity(item, line.quantity, line.unit)
            available = item.stock or 0
            if quantity > available:
                raise ValueError(
                    f"Insufficient stock for '{item.name}': {available:g} available, {quantity:g} requested"
                )
            item.stock = available - quantity
            changes[item.id] = item.stock
        db.flush()
        return changes
