# src/ascend/suggestions.py
"""
AI sub-goal suggestions for Ascend.

Given the title of a new goal, a language model proposes a handful of
actionable sub-tasks that the tracker turns into child goals. A second call
produces a short motivational line for a goal's current progress.

Suggestions are a convenience: every failure (missing key, network error,
empty or malformed response) is logged and collapses to an empty list or a
fixed fallback sentence, never an exception.
"""

import json
import logging
from typing import Any, List, Optional, Protocol

from pydantic import ValidationError

# --- Import check for google-genai ---
google_genai_available = False
try:
    from google import genai
    google_genai_available = True
except ImportError:
    genai = None  # type: ignore

from .exceptions import SuggestionError
from .models import SubgoalSuggestion

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
MOTIVATION_EMPTY_FALLBACK = "Keep going, you're doing great!"
MOTIVATION_ERROR_FALLBACK = "Consistency is key!"

SUBGOAL_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "description": {"type": "STRING"},
        },
        "required": ["title"],
    },
}


class SuggestionService(Protocol):
    """What the tracker needs from a suggestion backend."""

    async def suggest_subgoals(self, title: str, context: Optional[str] = None) -> List[SubgoalSuggestion]:
        ...

    async def generate_motivation(self, title: str, progress: int) -> str:
        ...


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (optionally tagged ``json``)."""
    content = text.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
        content = content.strip()
    return content


def parse_suggestions(text: str, max_items: int) -> List[SubgoalSuggestion]:
    """
    Parse a model response into suggestions.

    Raises:
        SuggestionError: If the text is not a JSON array.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise SuggestionError("gemini", f"response is not valid JSON: {e}")
    if not isinstance(data, list):
        raise SuggestionError("gemini", f"expected a JSON array, got {type(data).__name__}")

    suggestions: List[SubgoalSuggestion] = []
    for item in data:
        if len(suggestions) >= max_items:
            break
        if not isinstance(item, dict):
            continue
        try:
            suggestions.append(SubgoalSuggestion.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed suggestion: %r", item)
    return suggestions


class NullSuggestionService:
    """Used when suggestions are disabled."""

    async def suggest_subgoals(self, title: str, context: Optional[str] = None) -> List[SubgoalSuggestion]:
        return []

    async def generate_motivation(self, title: str, progress: int) -> str:
        return MOTIVATION_EMPTY_FALLBACK


class GeminiSuggestionService:
    """
    Sub-goal suggestions backed by the Google Gemini API via google-genai.

    The client is created lazily so that a missing API key only matters when
    a suggestion is actually requested.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        client: Optional[Any] = None,
        min_items: int = 3,
        max_items: int = 5,
        temperature: float = 0.3,
    ):
        self.api_key = api_key
        self.model = model
        self.min_items = min_items
        self.max_items = max_items
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_config(cls, config: Any) -> "SuggestionService":
        """Build from a SuggestionsConfig; disabled config gives a NullSuggestionService."""
        if not config.enabled:
            return NullSuggestionService()
        return cls(
            api_key=config.api_key,
            model=config.model,
            min_items=config.min_items,
            max_items=config.max_items,
            temperature=config.temperature,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            if not google_genai_available:
                raise SuggestionError("gemini", "google-genai is not installed")
            if not self.api_key:
                raise SuggestionError("gemini", "no API key configured (set GEMINI_API_KEY)")
            self._client = genai.Client(api_key=self.api_key)
            logger.debug("Google Gen AI client initialized for model %s", self.model)
        return self._client

    def _subgoal_prompt(self, title: str, context: Optional[str]) -> str:
        prompt = (
            f"Break down the following goal into {self.min_items}-{self.max_items} "
            f'actionable, concrete sub-tasks.\n\nGOAL: "{title}"\n'
        )
        if context:
            prompt += f"CONTEXT: {context}\n"
        prompt += (
            "\nRespond with a JSON array of objects, each with a short "
            '"title" and a one-sentence "description".'
        )
        return prompt

    async def suggest_subgoals(self, title: str, context: Optional[str] = None) -> List[SubgoalSuggestion]:
        """
        Ask the model for sub-tasks of ``title``.

        Args:
            title: Title of the goal being broken down.
            context: Optional extra context (e.g. the parent goal).

        Returns:
            Up to ``max_items`` suggestions; empty on any failure.
        """
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=self._subgoal_prompt(title, context),
                config={
                    "response_mime_type": "application/json",
                    "response_schema": SUBGOAL_RESPONSE_SCHEMA,
                    "temperature": self.temperature,
                },
            )
            text = getattr(response, "text", None)
            if not text:
                logger.warning("Empty suggestion response for goal '%s'", title)
                return []
            suggestions = parse_suggestions(text, self.max_items)
            logger.info("Received %d sub-goal suggestions for '%s'", len(suggestions), title)
            return suggestions
        except SuggestionError as e:
            logger.warning("Sub-goal suggestions unavailable: %s", e)
            return []
        except Exception as e:
            logger.error("Sub-goal suggestion request failed: %s", e)
            return []

    async def generate_motivation(self, title: str, progress: int) -> str:
        """One short motivational sentence for a goal at ``progress`` percent."""
        prompt = (
            f'I am working on the goal "{title}" and I am {progress}% done. '
            "Give me one short, encouraging sentence."
        )
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            logger.warning("Motivation request failed: %s", e)
            return MOTIVATION_ERROR_FALLBACK
        text = (getattr(response, "text", None) or "").strip()
        return text or MOTIVATION_EMPTY_FALLBACK
