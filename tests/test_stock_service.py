import pytest

from pharmasys.models import Item, Purchase, PurchaseItem, Sale, SaleItem
from pharmasys.services.stock_service import StockService


def _stock(db, item_id):
    db.expire_all()
    return db.query(Item).filter(Item.id == item_id).first().stock


def test_apply_purchase_converts_to_base_unit(db, amoxicillin):
    purchase = Purchase(invoice_number="PB-1", items=[
        PurchaseItem(item_id=amoxicillin, quantity=2, unit="Box", price=50000, subtotal=100000),
        PurchaseItem(item_id=amoxicillin, quantity=30, unit="Strip", price=5000, subtotal=150000),
    ])

    changes = StockService.apply_purchase_stock(db, purchase)

    assert changes == {amoxicillin: 25}
    db.rollback()
    assert _stock(db, amoxicillin) == 20


def test_apply_purchase_unknown_item(db, amoxicillin):
    purchase = Purchase(invoice_number="PB-2", items=[
        PurchaseItem(item_id=9999, quantity=1, price=1, subtotal=1),
    ])
    with pytest.raises(ValueError, match="not found"):
        StockService.apply_purchase_stock(db, purchase)
    db.rollback()


def test_rollback_purchase_clamps_at_zero_and_skips_missing_items(db, amoxicillin):
    purchase = Purchase(invoice_number="PB-3", items=[
        PurchaseItem(item_id=amoxicillin, quantity=2500, unit="Tablet", price=500, subtotal=1),
        PurchaseItem(item_id=9999, quantity=1, price=1, subtotal=1),
    ])

    changes = StockService.rollback_purchase_stock(db, purchase)

    assert changes == {amoxicillin: 0}
    db.commit()
    assert _stock(db, amoxicillin) == 0


def test_deduct_sale_refuses_negative_stock(db, amoxicillin):
    sale = Sale(invoice_number="INV-X", items=[
        SaleItem(item_id=amoxicillin, quantity=21, unit="Box", price=65000, subtotal=1),
    ])
    with pytest.raises(ValueError, match="Insufficient stock"):
        StockService.deduct_sale_stock(db, sale)
    db.rollback()
    assert _stock(db, amoxicillin) == 20


def test_deduct_sale_in_secondary_unit(db, amoxicillin):
    sale = Sale(invoice_number="INV-Y", items=[
        SaleItem(item_id=amoxicillin, quantity=50, unit="Tablet", price=650, subtotal=32500),
    ])
    assert StockService.deduct_sale_stock(db, sale) == {amoxicillin: 19.5}
    db.rollback()
