"""Models for generated dish suggestions."""

from pydantic import BaseModel, ConfigDict, Field

SUGGESTION_COUNT = 3


class DishSuggestion(BaseModel):
    """Single traditional dish suggested by the model."""

    model_config = ConfigDict(frozen=True)

    dish_name: str = Field(alias="dishName")
    preparation_time: str = Field(alias="preparationTime")
    key_ingredients: list[str] = Field(alias="keyIngredients")
    youtube_search_query: str = Field(alias="youtubeSearchQuery")


class SuggestionSet(BaseModel):
    """Structured output for a country and meal type; always three dishes."""

    model_config = ConfigDict(frozen=True)

    suggestions: list[DishSuggestion] = Field(
        min_length=SUGGESTION_COUNT, max_length=SUGGESTION_COUNT
    )
