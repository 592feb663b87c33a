import json
import logging
import os
import re
from typing import Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from app.models.menu import Menu, MenuGenerationRequest

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_google_api_key_here"


# ---------------------------------------------------------------------------
# User-facing error messages
#
# Callers show these verbatim, so keep them in the app's display language.
# ---------------------------------------------------------------------------

MISSING_API_KEY_MESSAGE = (
    "Gemini APIキーが設定されていません。.envファイルにGOOGLE_API_KEYを設定してください。"
)
INVALID_API_KEY_MESSAGE = "Gemini APIキーが無効です。正しいAPIキーを設定してください。"
QUOTA_EXCEEDED_MESSAGE = "Gemini APIの利用制限に達しました。アカウントの利用状況を確認してください。"
RATE_LIMITED_MESSAGE = "APIの利用制限に達しました。しばらく待ってから再試行してください。"
EMPTY_RESPONSE_MESSAGE = "Gemini APIから空の応答が返されました"
NO_JSON_MESSAGE = "AIの応答にJSONが含まれていません"
INVALID_JSON_MESSAGE = "AIからの応答を解析できませんでした"
INCOMPLETE_MENU_MESSAGE = "献立の構成が不正です（主菜・副菜・汁物のいずれかが不足）"
GENERIC_ERROR_MESSAGE = "献立の生成中に予期しないエラーが発生しました"


class MenuGenerationError(Exception):
    """Menu generation failed; str(error) is safe to show to the user."""


# ---------------------------------------------------------------------------
# Schema helper for Gemini API compatibility
# ---------------------------------------------------------------------------


def _strip_additional_properties(schema: dict) -> dict:
    """
    Recursively remove 'additionalProperties' from a JSON schema dict.
    The Gemini API doesn't support this OpenAPI 3.1 field that Pydantic v2 adds.
    """
    if isinstance(schema, dict):
        schema.pop("additionalProperties", None)
        for value in schema.values():
            if isinstance(value, dict):
                _strip_additional_properties(value)
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, dict):
                        _strip_additional_properties(item)
    return schema


_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


def extract_json_object(content: str) -> str:
    """
    Pull the outermost JSON object out of a model response.

    Handles ```json fences, bare ``` fences and leading/trailing chatter.
    Raises MenuGenerationError if no object boundaries are found.
    """
    cleaned = content.strip()

    fence = _FENCED_JSON.search(cleaned) if "```json" in cleaned else _FENCED_ANY.search(cleaned)
    if fence:
        cleaned = fence.group(1).strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or start >= end:
        logger.error("No valid JSON found in response: %s", content)
        raise MenuGenerationError(NO_JSON_MESSAGE)

    return cleaned[start : end + 1]


def parse_menu_response(content: Optional[str]) -> Menu:
    """Turn raw response text into a Menu, raising MenuGenerationError on any shape problem."""
    if not content or not content.strip():
        raise MenuGenerationError(EMPTY_RESPONSE_MESSAGE)

    json_string = extract_json_object(content)
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        logger.error("JSON parse error: %s | extracted: %s", e, json_string)
        raise MenuGenerationError(INVALID_JSON_MESSAGE) from e

    if not isinstance(data, dict) or not all(data.get(k) for k in ("main_dish", "side_dish", "soup")):
        raise MenuGenerationError(INCOMPLETE_MENU_MESSAGE)

    try:
        return Menu.model_validate(data)
    except ValidationError as e:
        logger.error("Menu validation failed: %s", e)
        raise MenuGenerationError(INCOMPLETE_MENU_MESSAGE) from e


def classify_api_error(error: Exception) -> str:
    """Map a Gemini client exception to the user-facing message for it."""
    code = getattr(error, "code", None)
    text = str(error).lower()

    if code in (401, 403) or "401" in text or "api_key_invalid" in text or "api key not valid" in text:
        return INVALID_API_KEY_MESSAGE
    if "quota" in text:
        return QUOTA_EXCEEDED_MESSAGE
    if code == 429 or "429" in text or "rate_limit" in text or "resource_exhausted" in text:
        return RATE_LIMITED_MESSAGE
    return GENERIC_ERROR_MESSAGE


MENU_GENERATION_PROMPT = """
あなたは料理の専門家です。与えられた条件に基づいて、1食分の献立（主菜・副菜・汁物）を提案してください。

条件：
- 食材: {ingredients}
- ジャンル: {cuisine}
- 調理時間: {cooking_time}

以下のJSON形式で回答してください：
{{
  "main_dish": {{
    "name": "料理名",
    "ingredients": ["材料1（分量）", "材料2（分量）", "..."],
    "instructions": ["手順1", "手順2", "..."]
  }},
  "side_dish": {{ ...同じ形式... }},
  "soup": {{ ...同じ形式... }}
}}

注意点：
- 栄養バランスを考慮してください
- 指定された調理時間内で作れる献立にしてください
- 与えられた食材は主菜・副菜・汁物のどれかで使用してください
- 主菜・副菜・汁物は同じ食材ばかりに偏らず、複数の食材を追加してバランスよく組み合わせてください
- 材料には必ず「食材名（分量）」の形で分量を含めてください
"""

SYSTEM_INSTRUCTION = (
    "あなたは日本料理の専門家です。献立を提案し、必ず有効なJSONのみを回答してください。"
    "説明文は不要です。JSONのみを出力してください。"
)


class GeminiService:
    """Generates three-dish menus with Google Gemini."""

    def __init__(self, api_key: Optional[str] = None, client=None):
        key = api_key or os.getenv("GOOGLE_API_KEY")
        if not key or key == PLACEHOLDER_API_KEY:
            raise MenuGenerationError(MISSING_API_KEY_MESSAGE)

        self.client = client or genai.Client(api_key=key)
        self.model_name = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.temperature = float(os.getenv("MENU_TEMPERATURE", "0.7"))

    @staticmethod
    def build_prompt(request: MenuGenerationRequest) -> str:
        return MENU_GENERATION_PROMPT.format(
            ingredients=", ".join(request.ingredients),
            cuisine=request.cuisine or "なし",
            cooking_time=request.cooking_time or "30分",
        )

    async def _async_json_call(self, contents, schema: type[BaseModel]) -> Optional[str]:
        """Call Gemini async in JSON mode and return the raw response text."""
        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=_strip_additional_properties(schema.model_json_schema()),
            temperature=self.temperature,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=config,
        )
        return response.text

    async def generate_menu(self, request: MenuGenerationRequest) -> Menu:
        """
        Generate a main dish / side dish / soup menu from the user's ingredients.

        Raises:
            MenuGenerationError: with a message meant to be shown as-is.
        """
        logger.info(
            "🤖 AI CALL: generate_menu (ingredients=%d, cuisine=%s, time=%s)",
            len(request.ingredients),
            request.cuisine,
            request.cooking_time,
        )
        try:
            content = await self._async_json_call(self.build_prompt(request), Menu)
        except MenuGenerationError:
            raise
        except Exception as e:
            logger.error("Error generating menu: %s", e)
            raise MenuGenerationError(classify_api_error(e)) from e

        menu = parse_menu_response(content)
        logger.info(
            "✅ AI RESPONSE: generate_menu → %s / %s / %s",
            menu.main_dish.name,
            menu.side_dish.name,
            menu.soup.name,
        )
        return menu
