"""Domain models for on-chain food preferences."""

from dataclasses import dataclass

MAX_FID = 2**64 - 1


@dataclass(frozen=True)
class PreferenceRecord:
    """Country and dietary restrictions stored for one fid."""

    country: str
    dietary_restrictions: str
