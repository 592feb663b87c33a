import uuid
from datetime import datetime
from typing import Optional

from app.models.menu import Menu, MenuGenerationRequest
from app.models.shopping import ShoppingList


class SessionData:
    """Container for one user's menu and shopping list. Lives only in memory."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = datetime.now()
        self.last_updated = datetime.now()
        self.menu: Optional[Menu] = None
        self.last_request: Optional[MenuGenerationRequest] = None  # for retry
        self.owned_ingredients: list[str] = []
        self.shopping_list: Optional[ShoppingList] = None

    def _touch(self):
        self.last_updated = datetime.now()

    def set_menu(self, menu: Menu, request: Optional[MenuGenerationRequest] = None):
        """Store a new menu; any list built for the previous menu is discarded."""
        self.menu = menu
        if request is not None:
            self.last_request = request
        self.reset_shopping_list()

    def set_shopping_list(self, shopping_list: ShoppingList):
        self.shopping_list = shopping_list
        self.owned_ingredients = list(shopping_list.user_ingredients)
        self._touch()

    def reset_shopping_list(self):
        """Back to the owned-ingredient selection step."""
        self.owned_ingredients = []
        self.shopping_list = None
        self._touch()

    def to_dict(self):
        """Convert session to dictionary for serialization"""
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "has_menu": self.menu is not None,
            "menu": self.menu.model_dump(mode="json") if self.menu else None,
            "owned_ingredients": self.owned_ingredients,
            "has_shopping_list": self.shopping_list is not None,
        }


class SessionManager:
    def __init__(self):
        self._sessions: dict[str, SessionData] = {}

    def create_session(self) -> SessionData:
        session = SessionData(str(uuid.uuid4()))
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[SessionData]:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self):
        self._sessions.clear()


session_manager = SessionManager()
