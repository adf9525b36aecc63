from typing import Optional

from sqlalchemy.orm import Session

from ..models import Item, ItemCategory, ItemType, ItemUnit


def type_code(type_name: Optional[str]) -> str:
    """Single letter for a medicine class (Indonesian drug classification)."""
    if not type_name:
        return "X"
    name = type_name.lower()
    if "bebas" in name and "terbatas" not in name:
        return "B"
    if "bebas terbatas" in name:
        return "T"
    if "keras" in name:
        return "K"
    if "narkotika" in name:
        return "N"
    if "fitofarmaka" in name:
        return "F"
    if "herbal" in name:
        return "H"
    return type_name[0].upper()


def unit_code(unit_name: Optional[str]) -> str:
    if not unit_name:
        return "X"
    return unit_name[0].upper()


def category_code(category_name: Optional[str]) -> str:
    if not category_name:
        return "XX"
    if category_name.lower().startswith("anti"):
        rest = category_name[4:]
        return "A" + rest[0].upper() if rest else "A"
    if len(category_name) >= 2:
        return category_name[:2].upper()
    return category_name.upper() + "X"


def next_sequence(prefix: str, existing_codes) -> int:
    """Next sequence after the highest numeric suffix among codes sharing ``prefix``."""
    numbers = []
    for code in existing_codes:
        if not code or not code.startswith(prefix):
            continue
        suffix = code[len(prefix):]
        if suffix.isdigit():
            numbers.append(int(suffix))
    return max(numbers) + 1 if numbers else 1


def generate_item_code(db: Session, type_id: int, category_id: int, unit_id: int) -> str:
    item_type = db.query(ItemType).filter(ItemType.id == type_id).first()
    category = db.query(ItemCategory).filter(ItemCategory.id == category_id).first()
    unit = db.query(ItemUnit).filter(ItemUnit.id == unit_id).first()

    prefix = (
        type_code(item_type.name if item_type else None)
        + unit_code(unit.name if unit else None)
        + category_code(category.name if category else None)
    )
    codes = [row.code for row in db.query(Item.code).filter(Item.code.like(f"{prefix}%")).all()]
    return f"{prefix}{next_sequence(prefix, codes):02d}"
