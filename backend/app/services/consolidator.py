"""
Cross-dish ingredient consolidation.

Responsibility: given every parsed ingredient line of a menu (tagged with the
dish role it came from), produce one ShoppingListItem per distinct name.

Design:
- Items are keyed by the parsed name exactly as written; no normalisation
  beyond what the parser already trimmed.
- Amounts are merged with a deliberately simple heuristic — there is no unit
  conversion. Numbers are summed and the first amount's wording is reused, so
  "300g" + "1個" gives "301g" and "大さじ2" + "小さじ1" gives "大さじ3".
  Vague amounts ("少々", "適量") win outright.
- Output is sorted by category priority; ties keep first-seen order.
"""

import re
import uuid
from typing import Iterable, Optional

from ..models.menu import DishRole
from ..models.shopping import ParsedIngredient, ShoppingListItem
from .categorizer import get_category_priority
from .ingredient_parser import UNSPECIFIED_AMOUNT

# Any contributing amount matching this makes the total unspecified.
_VAGUE_AMOUNT = re.compile(r"(適量|少々|お好み)")

# First integer, decimal or "a/b" fraction anywhere in the amount ("1/2個", "大さじ2").
_NUMBER = re.compile(r"(\d*\.?\d+(?:/\d*\.?\d+)?)\s*")


def _find_quantity(amount: str) -> Optional[tuple[float, str, str]]:
    """
    Return (value, text before the number, text after it) for the first number
    in an amount, or None if there is no positive number.

    "1/2個" → (0.5, "", "個"), "大さじ2" → (2.0, "大さじ", "").
    """
    match = _NUMBER.search(amount)
    if not match:
        return None

    token = match.group(1)
    if "/" in token:
        numerator, denominator = token.split("/", 1)
        if float(denominator) == 0:
            return None
        value = float(numerator) / float(denominator)
    else:
        value = float(token)

    if value <= 0:
        return None
    return value, amount[: match.start()], amount[match.end():]


def _format_quantity(total: float) -> str:
    rounded = round(total, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def consolidate_amounts(amounts: list[str]) -> str:
    """
    Merge the raw amounts recorded for one ingredient into a single string.

    - any vague amount → UNSPECIFIED_AMOUNT
    - every amount has a positive number → the sum, written in place of the
      first amount's number ("大さじ1" + "大さじ2" → "大さじ3")
    - otherwise → the first amount, verbatim
    """
    if not amounts:
        return UNSPECIFIED_AMOUNT

    if any(_VAGUE_AMOUNT.search(amount) for amount in amounts):
        return UNSPECIFIED_AMOUNT

    quantities = [_find_quantity(amount) for amount in amounts]
    if all(q is not None for q in quantities):
        total = sum(value for value, _, _ in quantities)
        _, prefix, suffix = quantities[0]
        return f"{prefix}{_format_quantity(total)}{suffix}"

    return amounts[0]


def _new_item_id() -> str:
    return f"ingredient-{uuid.uuid4().hex}"


def consolidate_ingredients(
    entries: Iterable[tuple[ParsedIngredient, DishRole]],
) -> list[ShoppingListItem]:
    """
    Merge parsed ingredients that share a name into ShoppingListItems.

    Args:
        entries: (parsed ingredient, dish role) pairs in menu traversal order
                 (main dish lines, then side dish, then soup)

    Returns:
        Items sorted by category priority, ties in first-seen order.
    """
    consolidated: dict[str, ShoppingListItem] = {}

    for info, dish in entries:
        existing = consolidated.get(info.name)
        if existing is None:
            consolidated[info.name] = ShoppingListItem(
                id=_new_item_id(),
                ingredient=info.name,
                amount=info.amount,
                original_amounts=[info.amount],
                category=info.category,
                from_dishes=[dish],
                unit=info.unit,
                priority=get_category_priority(info.category),
            )
            continue

        existing.original_amounts.append(info.amount)
        if dish not in existing.from_dishes:
            existing.from_dishes.append(dish)
        existing.amount = consolidate_amounts(existing.original_amounts)

    # sorted() is stable, so equal priorities keep insertion order
    return sorted(consolidated.values(), key=lambda item: item.priority)
