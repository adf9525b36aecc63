"""
Unit conversion helpers for items.

An item tracks stock and prices in its base unit. Each entry of
``items.unit_conversions`` declares a secondary unit and its conversion
rate: one base unit holds ``conversion_rate`` of that unit, so

    unit price          = base-unit price / conversion_rate
    quantity in base    = quantity in unit / conversion_rate
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def round_price(value: float) -> float:
    """Round half-up to a whole currency unit."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def derive_unit_price(price: float, conversion_rate: float) -> float:
    if not conversion_rate or conversion_rate <= 0:
        return 0.0
    return round_price((price or 0) / conversion_rate)


def _first(raw: Dict[str, Any], *keys, default=None):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _to_unit_id(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_unit_conversions(raw, units: Optional[Iterable] = None) -> List[Dict[str, Any]]:
    """
    Normalise the stored ``unit_conversions`` value.

    Accepts a JSON string, a list or None. Legacy camelCase keys are read as
    aliases. When ``units`` (rows with ``id`` and ``name``) is given, a missing
    ``to_unit_id`` is resolved from the unit name.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Could not parse unit_conversions: %r", raw)
            return []
    if not isinstance(raw, list):
        return []

    units_by_name = {u.name: u.id for u in units} if units else {}

    parsed = []
    for conv in raw:
        if not isinstance(conv, dict):
            continue
        unit_name = conv.get("unit_name") or ""
        to_unit_id = _to_unit_id(conv.get("to_unit_id"))
        if to_unit_id is None:
            to_unit_id = units_by_name.get(unit_name)
        parsed.append({
            "unit_name": unit_name,
            "to_unit_id": to_unit_id,
            "conversion_rate": float(_first(conv, "conversion_rate", "conversion", default=0) or 0),
            "base_price": float(_first(conv, "base_price", "basePrice", default=0) or 0),
            "sell_price": float(_first(conv, "sell_price", "sellPrice", default=0) or 0),
        })
    return parsed


def validate_unit_conversions(conversions: List[Dict[str, Any]], base_unit: Optional[str] = None):
    """Raise ValueError when a conversion list breaks the per-item rules."""
    seen = set()
    for conv in conversions:
        name = (conv.get("unit_name") or "").strip()
        if not name:
            raise ValueError("Conversion unit name is required")
        if conv.get("conversion_rate") is None or conv["conversion_rate"] <= 0:
            raise ValueError(f"Conversion rate for '{name}' must be greater than zero")
        if base_unit and name == base_unit:
            raise ValueError(f"'{name}' is already the base unit")
        if name in seen:
            raise ValueError(f"Duplicate conversion for unit '{name}'")
        seen.add(name)


def apply_conversion_prices(base_price: float, sell_price: float, conversions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return copies of ``conversions`` with per-unit prices derived from the item prices."""
    result = []
    for conv in conversions:
        rate = conv.get("conversion_rate") or 0
        result.append({
            **conv,
            "base_price": derive_unit_price(base_price, rate),
            "sell_price": derive_unit_price(sell_price, rate),
        })
    return result


def find_conversion(conversions: List[Dict[str, Any]], unit_name: str) -> Optional[Dict[str, Any]]:
    for conv in conversions:
        if conv.get("unit_name") == unit_name:
            return conv
    return None


def to_base_quantity(quantity: float, unit: Optional[str], base_unit: Optional[str], conversions) -> float:
    """Express ``quantity`` of ``unit`` in the item's base unit."""
    quantity = quantity or 0
    if not unit or unit == base_unit:
        return quantity
    conv = find_conversion(parse_unit_conversions(conversions), unit)
    if conv and conv["conversion_rate"] > 0:
        return quantity / conv["conversion_rate"]
    # Unknown units count one-for-one
    return quantity


def unit_sell_price(item, unit: Optional[str]) -> float:
    if not unit or unit == item.base_unit:
        return item.sell_price or 0.0
    conv = find_conversion(parse_unit_conversions(item.unit_conversions), unit)
    if conv is None:
        raise ValueError(f"Unit '{unit}' is not configured for item '{item.name}'")
    return conv["sell_price"] or derive_unit_price(item.sell_price, conv["conversion_rate"])


def profit_percentage(base_price: float, sell_price: float) -> Optional[float]:
    if base_price is not None and sell_price is not None and base_price > 0 and sell_price >= 0:
        return (sell_price - base_price) / base_price * 100
    return None


def sell_price_from_margin(base_price: float, margin_percentage: float) -> float:
    return round_price((base_price or 0) * (1 + (margin_percentage or 0) / 100))
