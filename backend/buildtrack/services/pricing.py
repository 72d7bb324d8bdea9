"""
Line item pricing.

WHAT: Computes line item totals and the estimate amount.

WHY: The amount of an estimate is never taken from the client when items
are available. Every write path runs the items through here so
``amount == sum(item.total)`` holds for whatever is stored.

HOW: Decimal arithmetic, each line total quantized to cents (the precision
of the amount columns), amount is the sum of the quantized totals.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Sequence

from buildtrack.core.exceptions import ValidationError


CENTS = Decimal("0.01")
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = 1_000_000_000
FALLBACK_LINE_DESCRIPTION = "Project Total"


@dataclass(frozen=True)
class PricedItems:
    """Line items with totals filled in, plus their sum."""

    items: List[Dict[str, Any]]
    amount: Decimal


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Convert a numeric input to Decimal.

    Raises:
        ValidationError: If the value is not a finite number or is larger
            than MAX_AMOUNT
    """
    if isinstance(value, bool):
        raise ValidationError(message=f"{field} must be a number", field=field)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(message=f"{field} must be a number", field=field)
    if not result.is_finite():
        raise ValidationError(message=f"{field} must be a finite number", field=field)
    if abs(result) > MAX_AMOUNT:
        raise ValidationError(message=f"{field} must not exceed {MAX_AMOUNT}", field=field)
    return result


def _quantity(value: Any, index: int) -> int:
    field = f"items[{index}].quantity"
    quantity = to_decimal(value, field)
    if quantity != quantity.to_integral_value():
        raise ValidationError(message=f"{field} must be a whole number", field=field)
    if quantity < 1:
        raise ValidationError(message=f"{field} must be at least 1", field=field)
    if quantity > MAX_QUANTITY:
        raise ValidationError(message=f"{field} must not exceed {MAX_QUANTITY}", field=field)
    return int(quantity)


def price_line_item(item: Mapping[str, Any], index: int = 0) -> Dict[str, Any]:
    """
    Validate one line item and compute its total.

    Args:
        item: Mapping with description, quantity and unit_price
        index: Position in the item list (for error messages)

    Returns:
        Line item dict ready for storage

    Raises:
        ValidationError: If any field is missing or out of range
    """
    description = item.get("description")
    if not isinstance(description, str) or not description.strip():
        raise ValidationError(
            message=f"items[{index}].description is required",
            field=f"items[{index}].description",
        )

    if item.get("quantity") is None:
        raise ValidationError(
            message=f"items[{index}].quantity is required",
            field=f"items[{index}].quantity",
        )
    quantity = _quantity(item["quantity"], index)

    if item.get("unit_price") is None:
        raise ValidationError(
            message=f"items[{index}].unit_price is required",
            field=f"items[{index}].unit_price",
        )
    unit_price = to_decimal(item["unit_price"], f"items[{index}].unit_price")
    if unit_price < 0:
        raise ValidationError(
            message=f"items[{index}].unit_price must not be negative",
            field=f"items[{index}].unit_price",
        )

    total = unit_price * quantity
    if total > MAX_AMOUNT:
        raise ValidationError(
            message=f"items[{index}] total must not exceed {MAX_AMOUNT}",
            field=f"items[{index}].total",
        )
    total = total.quantize(CENTS, rounding=ROUND_HALF_UP)
    return {
        "description": description.strip(),
        "quantity": quantity,
        "unit_price": float(unit_price),
        "total": float(total),
    }


def price_line_items(items: Sequence[Mapping[str, Any]]) -> PricedItems:
    """
    Price an ordered list of line items.

    Args:
        items: Line items in display order

    Returns:
        PricedItems with totals and the summed amount

    Raises:
        ValidationError: If the list is empty or any item is invalid
    """
    if not items:
        raise ValidationError(message="At least one line item is required", field="items")

    priced = [price_line_item(item, index) for index, item in enumerate(items)]
    amount = sum((Decimal(str(item["total"])) for item in priced), Decimal("0"))
    if amount > MAX_AMOUNT:
        raise ValidationError(message=f"amount must not exceed {MAX_AMOUNT}", field="amount")
    return PricedItems(items=priced, amount=amount.quantize(CENTS))


def fallback_line_items(amount: Any) -> PricedItems:
    """
    Build the single synthetic line used when an estimate has no items.

    WHAT: One "Project Total" line, quantity 1, priced at the given amount.

    Raises:
        ValidationError: If the amount is negative or not a number
    """
    value = to_decimal(amount, "amount")
    if value < 0:
        raise ValidationError(message="amount must not be negative", field="amount")
    return price_line_items(
        [{"description": FALLBACK_LINE_DESCRIPTION, "quantity": 1, "unit_price": value}]
    )
