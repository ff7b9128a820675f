"""Pydantic models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field


class PreferencesPayload(BaseModel):
    """Request body for updating preferences."""

    model_config = ConfigDict(populate_by_name=True)

    country: str
    dietary_restrictions: str = Field(alias="dietaryRestrictions")


class PreferencesResponse(BaseModel):
    """Stored preferences for a fid."""

    fid: int
    country: str
    dietary_restrictions: str = Field(serialization_alias="dietaryRestrictions")


class TransactionResponse(BaseModel):
    """Hash of a submitted, unconfirmed transaction."""

    transaction_hash: str = Field(serialization_alias="transactionHash")
