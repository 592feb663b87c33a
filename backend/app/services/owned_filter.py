from typing import Iterable

from ..models.shopping import ShoppingListItem


def is_owned(ingredient: str, owned: Iterable[str]) -> bool:
    """True if the ingredient contains, or is contained in, any owned entry (case-sensitive)."""
    for entry in owned:
        # Blank entries would be a substring of everything
        if not entry.strip():
            continue
        if entry in ingredient or ingredient in entry:
            return True
    return False


def filter_owned(items: list[ShoppingListItem], owned: Iterable[str]) -> list[ShoppingListItem]:
    """Drop items the user already has. Surviving items keep their order."""
    owned = list(owned)
    return [item for item in items if not is_owned(item.ingredient, owned)]
