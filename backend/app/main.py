from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from app.models.menu import Menu, MenuGenerationRequest
from app.services.ai_service import MISSING_API_KEY_MESSAGE, GeminiService, MenuGenerationError
from app.services.session_manager import SessionData, session_manager
from app.services.shopping_list_builder import (
    ShoppingListBuildError,
    build_shopping_list,
    list_menu_ingredient_names,
    toggle_item,
)
from app.services.text_formatter import format_shopping_list_text

# Load environment variables (override=True ensures .env wins over any shell env vars)
load_dotenv(override=True)

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize services
try:
    ai_service: Optional[GeminiService] = GeminiService()
except MenuGenerationError as e:
    logger.error(f"Failed to initialize AI service: {e}")
    ai_service = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle context manager"""
    logger.info("Application starting up")
    yield
    logger.info("Application shutting down")
    session_manager.clear()


# Create FastAPI app
app = FastAPI(
    title="Kondate Shopping List",
    description="Menu generation and shopping list builder",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(dict.fromkeys(["http://localhost:3000", FRONTEND_URL])),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ShoppingListRequest(BaseModel):
    """Request body for building a shopping list"""

    owned_ingredients: list[str] = Field(default_factory=list)


# ============================================================================
# Shared helpers
# ============================================================================


def _require_session(session_id: str) -> SessionData:
    session = session_manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _require_menu(session: SessionData) -> Menu:
    if session.menu is None:
        raise HTTPException(status_code=404, detail="No menu for this session")
    return session.menu


def _require_shopping_list(session: SessionData):
    if session.shopping_list is None:
        raise HTTPException(status_code=404, detail="No shopping list for this session")
    return session.shopping_list


async def _generate(request: MenuGenerationRequest) -> Menu:
    """Run the generator, translating its failures into HTTP errors with the message intact."""
    if not request.ingredients or not any(i.strip() for i in request.ingredients):
        raise HTTPException(status_code=400, detail="食材を入力してください")
    if not ai_service:
        raise HTTPException(status_code=503, detail=MISSING_API_KEY_MESSAGE)

    try:
        return await ai_service.generate_menu(request)
    except MenuGenerationError as e:
        logger.error("Menu generation error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# REST Endpoints — Health
# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "ai_service_ready": ai_service is not None,
    }


# ============================================================================
# Menu generation (stateless)
# ============================================================================


@app.post("/api/menu/generate")
async def generate_menu(request: MenuGenerationRequest) -> Menu:
    """Generate a menu without attaching it to a session"""
    return await _generate(request)


# ============================================================================
# Session Endpoints
# ============================================================================


@app.post("/api/sessions")
async def create_session():
    """Create a new in-memory session"""
    session = session_manager.create_session()
    return {"session_id": session.session_id}


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str):
    return _require_session(session_id).to_dict()


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str):
    """Discard a session and everything built in it"""
    if not session_manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True}


@app.post("/api/sessions/{session_id}/menu")
async def generate_session_menu(session_id: str, request: MenuGenerationRequest) -> Menu:
    session = _require_session(session_id)
    menu = await _generate(request)
    session.set_menu(menu, request)
    return menu


@app.post("/api/sessions/{session_id}/menu/retry")
async def retry_session_menu(session_id: str) -> Menu:
    """Regenerate using the last request made in this session"""
    session = _require_session(session_id)
    if session.last_request is None:
        raise HTTPException(status_code=404, detail="No previous menu request to retry")
    menu = await _generate(session.last_request)
    session.set_menu(menu)
    return menu


@app.put("/api/sessions/{session_id}/menu")
async def put_session_menu(session_id: str, menu: Menu) -> Menu:
    """Attach a caller-supplied menu to the session"""
    session = _require_session(session_id)
    session.set_menu(menu)
    return menu


@app.get("/api/sessions/{session_id}/ingredients")
async def list_ingredients(session_id: str):
    """Distinct ingredient names from the menu, for the 'already have' step"""
    session = _require_session(session_id)
    return {"ingredients": list_menu_ingredient_names(_require_menu(session))}


# ============================================================================
# Shopping list Endpoints
# ============================================================================


@app.post("/api/sessions/{session_id}/shopping-list")
async def create_shopping_list(session_id: str, request: ShoppingListRequest):
    session = _require_session(session_id)
    menu = _require_menu(session)
    try:
        shopping_list = build_shopping_list(menu, request.owned_ingredients)
    except ShoppingListBuildError as e:
        raise HTTPException(status_code=422, detail=str(e))
    session.set_shopping_list(shopping_list)
    return shopping_list.model_dump(mode="json")


@app.get("/api/sessions/{session_id}/shopping-list")
async def get_shopping_list(session_id: str):
    session = _require_session(session_id)
    return _require_shopping_list(session).model_dump(mode="json")


@app.post("/api/sessions/{session_id}/shopping-list/items/{item_id}/toggle")
async def toggle_shopping_list_item(session_id: str, item_id: str):
    session = _require_session(session_id)
    updated = toggle_item(_require_shopping_list(session), item_id)
    session.set_shopping_list(updated)
    return updated.model_dump(mode="json")


@app.get("/api/sessions/{session_id}/shopping-list/text")
async def get_shopping_list_text(session_id: str):
    """Plain-text rendition for clipboard export"""
    session = _require_session(session_id)
    return {"text": format_shopping_list_text(_require_shopping_list(session))}


@app.delete("/api/sessions/{session_id}/shopping-list")
async def reset_shopping_list(session_id: str):
    session = _require_session(session_id)
    session.reset_shopping_list()
    return {"reset": True}
