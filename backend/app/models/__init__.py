from .menu import Dish, DishRole, Menu, MenuGenerationRequest
from .shopping import IngredientCategory, ParsedIngredient, ShoppingList, ShoppingListItem

__all__ = [
    "Dish",
    "DishRole",
    "Menu",
    "MenuGenerationRequest",
    "IngredientCategory",
    "ParsedIngredient",
    "ShoppingList",
    "ShoppingListItem",
]
