from ..models.shopping import IngredientCategory, ShoppingList
from .categorizer import get_category_icon

TITLE = "買い物リスト"
SEPARATOR = "━" * 20


def format_shopping_list_text(shopping_list: ShoppingList) -> str:
    """
    Render a shopping list as plain text for clipboard export.

    Category blocks follow IngredientCategory declaration order (not item
    priority); empty categories are skipped. Same list in, same bytes out.
    """
    grouped = shopping_list.grouped()

    lines: list[str] = [TITLE, SEPARATOR, ""]
    for category in IngredientCategory:
        items = grouped.get(category)
        if not items:
            continue
        lines.append(f"{get_category_icon(category)} {category.value}")
        for item in items:
            lines.append(f"□ {item.ingredient}（{item.amount}）")
        lines.append("")

    return "\n".join(lines) + "\n"
