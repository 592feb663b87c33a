"""
Shopping list construction.

Pipeline: menu lines → parse (+ categorise) → consolidate → drop owned → ShoppingList.

Rules:
- No I/O of any kind; every function here is a plain transformation.
- The built list captures copies of its inputs (menu, owned ingredients) so later
  edits to the caller's objects never leak into it.
- toggle_item returns a new ShoppingList; the input list is left untouched.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Iterable, Union

from pydantic import ValidationError

from ..models.menu import DishRole, Menu
from ..models.shopping import ShoppingList
from .consolidator import consolidate_ingredients
from .ingredient_parser import parse_ingredient
from .owned_filter import filter_owned

logger = logging.getLogger(__name__)


class ShoppingListBuildError(ValueError):
    """Raised when the menu handed to the builder is structurally incomplete."""


def _coerce_menu(menu: Union[Menu, dict, Any]) -> Menu:
    if menu is None:
        raise ShoppingListBuildError("Menu is required to build a shopping list")

    if not isinstance(menu, Menu):
        try:
            menu = Menu.model_validate(menu)
        except ValidationError as e:
            raise ShoppingListBuildError(f"Menu is incomplete: {e}") from e

    # model_construct() bypasses validation, so check the shape explicitly
    for role, field in (
        (DishRole.MAIN, "main_dish"),
        (DishRole.SIDE, "side_dish"),
        (DishRole.SOUP, "soup"),
    ):
        dish = getattr(menu, field, None)
        if dish is None:
            raise ShoppingListBuildError(f"Menu is missing its {role.value} dish")
        if getattr(dish, "ingredients", None) is None:
            raise ShoppingListBuildError(f"{role.value} dish has no ingredient list")
    return menu


def _menu_lines(menu: Menu) -> list[tuple[str, DishRole]]:
    return [(line, role) for role, dish in menu.dishes() for line in dish.ingredients]


def extract_ingredients_from_menu(menu: Menu) -> list[tuple[str, DishRole]]:
    """All (ingredient line, dish role) pairs: main dish first, then side dish, then soup."""
    return _menu_lines(_coerce_menu(menu))


def list_menu_ingredient_names(menu: Menu) -> list[str]:
    """
    Distinct parsed ingredient names in menu order.

    These are the candidates offered to the user when they tick off what they
    already have, before the list is built.
    """
    names = [parse_ingredient(line).name for line, _ in extract_ingredients_from_menu(menu)]
    return list(dict.fromkeys(name for name in names if name))


def build_shopping_list(menu: Menu, owned_ingredients: Iterable[str] = ()) -> ShoppingList:
    """
    Build a shopping list for a menu, excluding ingredients the user already owns.

    Args:
        menu: The generated Menu (or a dict with the same shape)
        owned_ingredients: Free-text names of ingredients already at hand

    Returns:
        A fresh ShoppingList with no items checked.

    Raises:
        ShoppingListBuildError: if a dish or its ingredient list is missing.
    """
    menu = _coerce_menu(menu)
    owned = list(owned_ingredients or [])

    parsed = [
        (parse_ingredient(line), role)
        for line, role in _menu_lines(menu)
    ]
    consolidated = consolidate_ingredients(parsed)
    needed = filter_owned(consolidated, owned)

    shopping_list = ShoppingList(
        id=f"shopping-list-{uuid.uuid4().hex}",
        items=needed,
        created_at=datetime.now(),
        menu_snapshot=menu.model_copy(deep=True),
        user_ingredients=owned,
    )

    logger.info(
        "[SHOPPING] Built list %s: %d lines → %d unique → %d needed (owned=%d)",
        shopping_list.id,
        len(parsed),
        len(consolidated),
        shopping_list.total_items,
        len(owned),
    )
    return shopping_list


def toggle_item(shopping_list: ShoppingList, item_id: str) -> ShoppingList:
    """
    Flip the checked flag of one item and recompute the counters.

    Unknown ids are ignored and the same list is returned.
    """
    if shopping_list.find_item(item_id) is None:
        logger.warning("[SHOPPING] toggle ignored, no item %s in %s", item_id, shopping_list.id)
        return shopping_list

    items = [
        item.model_copy(update={"checked": not item.checked}) if item.id == item_id else item
        for item in shopping_list.items
    ]
    updated = shopping_list.model_copy(update={"items": items})
    updated.recount()
    return updated
