"""Dish suggestion service backed by a generative model."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from food_miniapp.domain.errors import ProviderCallFailure, ResponseShapeInvalid
from food_miniapp.domain.suggestions import SuggestionSet
from food_miniapp.services.cache import Cache, SingleFlight

HARM_CATEGORIES = ("HARM_CATEGORY_HARASSMENT", "HARM_CATEGORY_HATE_SPEECH")
BLOCK_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

_PROMPT_TEMPLATE = """\
You are an expert culinary guide. Your task is to provide exactly 3 traditional \
dish suggestions for a specific country and meal type.

Rules:
- The output must be a valid JSON object.
- The root object must have a single key: "suggestions".
- The "suggestions" key must be an array of 3 dish objects.
- Each dish object must have the following keys: "dishName" (string), \
"preparationTime" (string, e.g., "Approx. 45 minutes"), "keyIngredients" \
(array of strings), and "youtubeSearchQuery" (string, a concise and effective \
search query for finding a recipe video on YouTube).

Country: {country}
Meal Type: {meal_type}
"""

_logger = logging.getLogger(__name__)


class SuggestionClient(Protocol):
    """Interface for the generative model call."""

    async def generate(
        self,
        *,
        prompt: str,
        safety_settings: list[tuple[str, str]],
    ) -> str:
        """Return the raw text of a JSON-mode completion."""


def cache_key(country: str, meal_type: str) -> str:
    """Build the case-insensitive cache key for a country and meal type."""
    return f"{country.lower()}-{meal_type.lower()}"


def build_prompt(country: str, meal_type: str) -> str:
    """Render the suggestion instruction for the model."""
    return _PROMPT_TEMPLATE.format(country=country, meal_type=meal_type)


def safety_settings() -> list[tuple[str, str]]:
    """Harassment and hate speech blocked at medium and above."""
    return [(category, BLOCK_THRESHOLD) for category in HARM_CATEGORIES]


def parse_suggestions(raw: str) -> SuggestionSet:
    """Decode and validate a model response into a suggestion set."""
    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ResponseShapeInvalid(f"Response is not valid JSON: {exc}") from exc
    try:
        return SuggestionSet.model_validate(payload)
    except ValidationError as exc:
        raise ResponseShapeInvalid(
            f"Invalid response structure: {exc.error_count()} errors"
        ) from exc


@dataclass
class SuggestionService:
    """Fetches dish suggestions, caching only valid results."""

    client: SuggestionClient
    cache: Cache
    single_flight: SingleFlight

    async def fetch_suggestions(
        self, country: str, meal_type: str
    ) -> SuggestionSet | None:
        """Return three suggestions, or None when they could not be produced.

        None means "try again later"; failures are never cached.
        """
        key = cache_key(country, meal_type)
        cached = self.cache.get(key)
        if isinstance(cached, SuggestionSet):
            _logger.info("Suggestion cache HIT for %s", key)
            return cached
        _logger.info("Suggestion cache MISS for %s", key)
        return await self.single_flight.run(
            key, lambda: self._generate(key, country, meal_type)
        )

    async def _generate(
        self, key: str, country: str, meal_type: str
    ) -> SuggestionSet | None:
        try:
            raw = await self._call_provider(country, meal_type)
            suggestions = parse_suggestions(raw)
        except (ProviderCallFailure, ResponseShapeInvalid) as exc:
            _logger.warning("Fetching suggestions failed: key=%s error=%s", key, exc)
            return None
        self.cache.put(key, suggestions)
        return suggestions

    async def _call_provider(self, country: str, meal_type: str) -> str:
        try:
            return await self.client.generate(
                prompt=build_prompt(country, meal_type),
                safety_settings=safety_settings(),
            )
        except ProviderCallFailure:
            raise
        except Exception as exc:
            raise ProviderCallFailure(str(exc)) from exc
