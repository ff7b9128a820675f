"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from food_miniapp.adapters.gemini_suggestion_client import GeminiSuggestionClient
from food_miniapp.adapters.web3_chain_gateway import Web3ChainGateway
from food_miniapp.config import Settings
from food_miniapp.domain.contract import (
    USER_PREFERENCES_ABI,
    ContractBinding,
    load_abi,
)
from food_miniapp.services.cache import InMemoryCache, SingleFlight
from food_miniapp.services.preferences import ChainGateway, PreferenceService
from food_miniapp.services.suggestions import SuggestionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies.

    One container is built per process; its clients and cache live until exit.
    """

    settings: Settings
    chain_gateway: ChainGateway
    preference_service: PreferenceService
    suggestion_service: SuggestionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    abi = (
        load_abi(resolved_settings.contract_abi_path)
        if resolved_settings.contract_abi_path
        else USER_PREFERENCES_ABI
    )
    chain_gateway = Web3ChainGateway.create(
        rpc_url=resolved_settings.rpc_url,
        binding=ContractBinding(address=resolved_settings.contract_address, abi=abi),
        private_key=resolved_settings.private_key,
        chain_id=resolved_settings.chain_id,
        poll_interval_seconds=resolved_settings.event_poll_interval_seconds,
        max_block_span=resolved_settings.event_max_block_span,
        max_handler_attempts=resolved_settings.event_max_handler_attempts,
    )
    preference_service = PreferenceService(chain_gateway)
    suggestion_client = GeminiSuggestionClient.create(
        api_key=resolved_settings.gemini_api_key,
        model=resolved_settings.gemini_model,
        temperature=resolved_settings.gemini_temperature,
    )
    suggestion_service = SuggestionService(
        client=suggestion_client,
        cache=InMemoryCache(
            max_entries=resolved_settings.suggestion_cache_max_entries,
            ttl_seconds=resolved_settings.suggestion_cache_ttl_seconds,
        ),
        single_flight=SingleFlight(),
    )

    async def close_resources() -> None:
        await chain_gateway.close()

    return AppContainer(
        settings=resolved_settings,
        chain_gateway=chain_gateway,
        preference_service=preference_service,
        suggestion_service=suggestion_service,
        close_resources=close_resources,
    )
