"""Preference endpoints backed by the UserPreferences contract."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, HTTPException, Path, Request, status

from food_miniapp.api.models import (
    PreferencesPayload,
    PreferencesResponse,
    TransactionResponse,
)
from food_miniapp.domain.errors import PreferencesUnavailable, PreferencesWriteFailed
from food_miniapp.domain.preferences import MAX_FID

if TYPE_CHECKING:
    from food_miniapp.containers import AppContainer

router = APIRouter(prefix="/preferences", tags=["preferences"])

Fid = Annotated[int, Path(ge=0, le=MAX_FID)]


@router.get("/{fid}")
async def get_preferences(fid: Fid, request: Request) -> PreferencesResponse:
    """Return the preferences stored for a fid."""
    container: AppContainer = request.app.state.container
    try:
        record = await container.preference_service.get_preferences(fid)
    except PreferencesUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Preferences not set"
        )
    return PreferencesResponse(
        fid=fid,
        country=record.country,
        dietary_restrictions=record.dietary_restrictions,
    )


@router.put("/{fid}", status_code=status.HTTP_202_ACCEPTED)
async def set_preferences(
    fid: Fid, payload: PreferencesPayload, request: Request
) -> TransactionResponse:
    """Submit a preference update transaction."""
    container: AppContainer = request.app.state.container
    try:
        tx_hash = await container.preference_service.set_preferences(
            fid, payload.country, payload.dietary_restrictions
        )
    except PreferencesWriteFailed as exc:
        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if exc.retryable
            else status.HTTP_422_UNPROCESSABLE_ENTITY
        )
        raise HTTPException(status_code=status_code, detail=str(exc)) from exc
    return TransactionResponse(transaction_hash=tx_hash)
