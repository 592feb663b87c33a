from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

from app.models.menu import DishRole, Menu


class IngredientCategory(str, Enum):
    VEGETABLES = "野菜"
    MEAT_FISH = "肉・魚・卵"
    SEASONINGS = "調味料"
    DAIRY = "乳製品"
    GRAINS = "穀物"
    OTHERS = "その他"


class ParsedIngredient(BaseModel):
    """One raw ingredient line split into name / amount / unit."""

    name: str
    amount: str
    unit: str = ""
    category: IngredientCategory


class ShoppingListItem(BaseModel):
    """A single ingredient after merging its occurrences across all dishes."""

    id: str
    ingredient: str
    amount: str
    original_amounts: List[str]
    category: IngredientCategory
    checked: bool = False
    from_dishes: List[DishRole]  # roles that use this ingredient, no duplicates
    unit: str = ""
    priority: int


class ShoppingList(BaseModel):
    """Final output: consolidated items plus the inputs they were built from."""

    id: str
    items: List[ShoppingListItem]
    total_items: int = 0
    checked_items: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    menu_snapshot: Menu
    user_ingredients: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sync_counts(self) -> "ShoppingList":
        self.recount()
        return self

    def recount(self) -> None:
        """Recompute total_items / checked_items from items."""
        self.total_items = len(self.items)
        self.checked_items = sum(1 for item in self.items if item.checked)

    def find_item(self, item_id: str):
        return next((item for item in self.items if item.id == item_id), None)

    def grouped(self) -> Dict[IngredientCategory, List[ShoppingListItem]]:
        """Items keyed by category, in the order they appear in items."""
        result: Dict[IngredientCategory, List[ShoppingListItem]] = {}
        for item in self.items:
            result.setdefault(item.category, []).append(item)
        return result
