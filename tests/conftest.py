"""Shared test fixtures."""

import asyncio
import json
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from food_miniapp.config import Settings
from food_miniapp.containers import AppContainer
from food_miniapp.domain.errors import ReadFailure
from food_miniapp.services.cache import InMemoryCache, SingleFlight
from food_miniapp.services.preferences import (
    ChainGateway,
    ErrorHandler,
    EventHandler,
    PreferenceService,
    Subscription,
)
from food_miniapp.services.suggestions import SuggestionClient, SuggestionService


def dish(name: str) -> dict[str, object]:
    return {
        "dishName": name,
        "preparationTime": "Approx. 45 minutes",
        "keyIngredients": ["flour", "water", "salt"],
        "youtubeSearchQuery": f"{name} recipe",
    }


VALID_RESPONSE = json.dumps(
    {"suggestions": [dish("Croissant"), dish("Quiche"), dish("Ratatouille")]}
)


@dataclass
class FakeSubscription(Subscription):
    """Subscription handle that only records cancellation."""

    event_name: str
    handler: EventHandler
    on_error: ErrorHandler | None = None
    cancelled: bool = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    async def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeChainGateway(ChainGateway):
    """In-memory contract where writes are confirmed immediately."""

    preferences: dict[int, tuple[str, str]] = field(default_factory=dict)
    writes: list[tuple[str, list[object]]] = field(default_factory=list)
    subscriptions: list[FakeSubscription] = field(default_factory=list)
    read_error: Exception | None = None
    write_error: Exception | None = None

    async def read(self, function_name: str, args: Sequence[object]) -> object:
        if self.read_error is not None:
            raise self.read_error
        if function_name != "fidToPreferences":
            raise ReadFailure(f"unknown function {function_name}")
        (fid,) = args
        return list(self.preferences.get(int(fid), ("", "")))  # type: ignore[call-overload]

    async def write(self, function_name: str, args: Sequence[object]) -> str:
        if self.write_error is not None:
            raise self.write_error
        fid, country, dietary_restrictions = args
        self.writes.append((function_name, list(args)))
        self.preferences[int(fid)] = (str(country), str(dietary_restrictions))  # type: ignore[call-overload]
        return f"0x{len(self.writes):064x}"

    def subscribe(
        self,
        event_name: str,
        handler: EventHandler,
        on_error: ErrorHandler | None = None,
    ) -> Subscription:
        subscription = FakeSubscription(event_name, handler, on_error)
        self.subscriptions.append(subscription)
        return subscription


@dataclass
class FakeSuggestionClient(SuggestionClient):
    """Suggestion client returning queued responses and counting calls."""

    responses: list[str | Exception] = field(default_factory=lambda: [VALID_RESPONSE])
    prompts: list[str] = field(default_factory=list)
    safety: list[list[tuple[str, str]]] = field(default_factory=list)
    delay_seconds: float = 0.0

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(
        self,
        *,
        prompt: str,
        safety_settings: list[tuple[str, str]],
    ) -> str:
        self.prompts.append(prompt)
        self.safety.append(safety_settings)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        response = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings() -> Settings:
    return Settings(
        contract_address="0x" + "22" * 20,
        rpc_url="https://sepolia.base.org",
        private_key="11" * 32,
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def chain_gateway() -> FakeChainGateway:
    return FakeChainGateway()


@pytest.fixture
def suggestion_client() -> FakeSuggestionClient:
    return FakeSuggestionClient()


@pytest.fixture
def container(
    settings: Settings,
    chain_gateway: FakeChainGateway,
    suggestion_client: FakeSuggestionClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        chain_gateway=chain_gateway,
        preference_service=PreferenceService(chain_gateway),
        suggestion_service=SuggestionService(
            client=suggestion_client,
            cache=InMemoryCache(),
            single_flight=SingleFlight(),
        ),
        close_resources=close_resources,
    )
