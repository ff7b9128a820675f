"""Dish suggestion endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import APIRouter, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from food_miniapp.containers import AppContainer

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.get("")
async def get_suggestions(
    request: Request,
    country: Annotated[str, Query(min_length=1)],
    meal_type: Annotated[str, Query(alias="mealType", min_length=1)],
) -> dict[str, Any]:
    """Return three traditional dishes for a country and meal type."""
    container: AppContainer = request.app.state.container
    suggestions = await container.suggestion_service.fetch_suggestions(
        country, meal_type
    )
    if suggestions is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Suggestions unavailable, try again later",
        )
    return suggestions.model_dump(by_alias=True)
