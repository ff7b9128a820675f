"""On-chain food preference store."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from food_miniapp.domain.contract import EventLog
from food_miniapp.domain.errors import (
    PreferencesUnavailable,
    PreferencesWriteFailed,
    ReadFailure,
    SimulationFailure,
    SubmissionFailure,
)
from food_miniapp.domain.preferences import MAX_FID, PreferenceRecord

READ_FUNCTION = "fidToPreferences"
WRITE_FUNCTION = "setUserPreferences"
UPDATED_EVENT = "UserPreferencesUpdated"

EventHandler = Callable[[list[EventLog]], Awaitable[None] | None]
ErrorHandler = Callable[[Exception], None]

_logger = logging.getLogger(__name__)


class Subscription(Protocol):
    """Handle for a running event subscription."""

    @property
    def active(self) -> bool:
        """Return True until the subscription is cancelled."""

    async def cancel(self) -> None:
        """Stop delivery; the handler is not invoked after this returns."""


class ChainGateway(Protocol):
    """Interface for contract reads, writes and event subscriptions."""

    async def read(self, function_name: str, args: Sequence[object]) -> object:
        """Call a view function at the latest block."""

    async def write(self, function_name: str, args: Sequence[object]) -> str:
        """Simulate, sign and submit a transaction; return its hash."""

    def subscribe(
        self,
        event_name: str,
        handler: EventHandler,
        on_error: ErrorHandler | None = None,
    ) -> Subscription:
        """Deliver batches of new event logs to the handler until cancelled."""


@dataclass
class PreferenceService:
    """Maps a fid to its preference record stored on-chain."""

    gateway: ChainGateway

    async def get_preferences(self, fid: int) -> PreferenceRecord | None:
        """Return stored preferences, or None when nothing is set."""
        _validate_fid(fid)
        try:
            data = await self.gateway.read(READ_FUNCTION, [fid])
            country, dietary_restrictions = data  # type: ignore[misc]
        except (ReadFailure, TypeError, ValueError) as exc:
            _logger.warning("Reading preferences failed: fid=%s error=%s", fid, exc)
            raise PreferencesUnavailable(
                "Failed to read preferences from the blockchain."
            ) from exc

        if not country and not dietary_restrictions:
            return None
        return PreferenceRecord(
            country=country, dietary_restrictions=dietary_restrictions
        )

    async def set_preferences(
        self, fid: int, country: str, dietary_restrictions: str
    ) -> str:
        """Submit a preference update and return the transaction hash.

        The hash is returned as soon as the node accepts the transaction;
        reads may still show the previous values until it is mined.
        """
        _validate_fid(fid)
        try:
            tx_hash = await self.gateway.write(
                WRITE_FUNCTION, [fid, country, dietary_restrictions]
            )
        except SimulationFailure as exc:
            _logger.warning("Preference write would revert: fid=%s error=%s", fid, exc)
            raise PreferencesWriteFailed(
                "Failed to write preferences to the blockchain.", retryable=False
            ) from exc
        except SubmissionFailure as exc:
            _logger.warning("Preference write not submitted: fid=%s error=%s", fid, exc)
            raise PreferencesWriteFailed(
                "Failed to write preferences to the blockchain.", retryable=True
            ) from exc
        _logger.info("Preference write submitted: fid=%s tx=%s", fid, tx_hash)
        return tx_hash

    def on_preferences_updated(
        self, handler: EventHandler, on_error: ErrorHandler | None = None
    ) -> Subscription:
        """Watch UserPreferencesUpdated events.

        Logs may be delivered more than once, so handlers must be idempotent.
        """
        _logger.info("Listening for %s events", UPDATED_EVENT)
        return self.gateway.subscribe(UPDATED_EVENT, handler, on_error)


def _validate_fid(fid: int) -> None:
    """Reject identities that are not unsigned 64-bit integers."""
    if isinstance(fid, bool) or not isinstance(fid, int) or not 0 <= fid <= MAX_FID:
        raise ValueError(f"fid must be an unsigned 64-bit integer, got {fid!r}")
