from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class DishRole(str, Enum):
    MAIN = "主菜"
    SIDE = "副菜"
    SOUP = "汁物"


class Dish(BaseModel):
    """A single generated dish. Ingredient lines carry their amount in parentheses."""

    name: str
    ingredients: List[str]
    instructions: List[str]


class Menu(BaseModel):
    """One meal: main dish, side dish and soup."""

    main_dish: Dish
    side_dish: Dish
    soup: Dish

    def dishes(self) -> list[tuple[DishRole, Dish]]:
        """Dishes in fixed role order (main, side, soup)."""
        return [
            (DishRole.MAIN, self.main_dish),
            (DishRole.SIDE, self.side_dish),
            (DishRole.SOUP, self.soup),
        ]


class MenuGenerationRequest(BaseModel):
    """Request body for menu generation"""

    ingredients: List[str]
    cuisine: Optional[str] = None
    cooking_time: Optional[str] = None
