"""web3.py-backed gateway to the UserPreferences contract."""

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract
from web3.exceptions import (
    ABIFunctionNotFound,
    ContractLogicError,
    Web3ValidationError,
)

from food_miniapp.domain.contract import ContractBinding, EventLog
from food_miniapp.domain.errors import (
    ReadFailure,
    SimulationFailure,
    SubmissionFailure,
)
from food_miniapp.services.preferences import (
    ChainGateway,
    ErrorHandler,
    EventHandler,
    Subscription,
)

_logger = logging.getLogger(__name__)

# Errors that will recur for identical inputs against the same state.
_REJECTED_ERRORS = (ContractLogicError, Web3ValidationError, ABIFunctionNotFound)


@dataclass
class Web3ChainGateway(ChainGateway):
    """Chain gateway holding one RPC connection and one signing account."""

    web3: AsyncWeb3
    contract: AsyncContract
    account: LocalAccount
    chain_id: int
    poll_interval_seconds: float = 2.0
    max_block_span: int = 1000
    max_handler_attempts: int = 3
    subscriptions: list["PollingSubscription"] = field(default_factory=list)

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        rpc_url: str,
        binding: ContractBinding,
        private_key: str,
        chain_id: int,
        poll_interval_seconds: float = 2.0,
        max_block_span: int = 1000,
        max_handler_attempts: int = 3,
    ) -> "Web3ChainGateway":
        """Create a gateway with an HTTP provider and a local signing account."""
        web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        contract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(binding.address),
            abi=binding.abi,
        )
        return cls(
            web3=web3,
            contract=contract,
            account=Account.from_key(private_key),
            chain_id=chain_id,
            poll_interval_seconds=poll_interval_seconds,
            max_block_span=max_block_span,
            max_handler_attempts=max_handler_attempts,
        )

    async def read(self, function_name: str, args: Sequence[object]) -> object:
        """Call a view function at the latest block."""
        try:
            call = getattr(self.contract.functions, function_name)(*args)
            return await call.call(block_identifier="latest")
        except Exception as exc:
            _logger.warning("Contract read %s failed: %s", function_name, exc)
            raise ReadFailure(f"{function_name} read failed: {exc}") from exc

    async def write(self, function_name: str, args: Sequence[object]) -> str:
        """Simulate the call, then sign and submit it without awaiting a receipt."""
        sender = self.account.address
        try:
            call = getattr(self.contract.functions, function_name)(*args)
            await call.call({"from": sender})
        except _REJECTED_ERRORS as exc:
            _logger.warning("Contract write %s would revert: %s", function_name, exc)
            raise SimulationFailure(f"{function_name} simulation failed: {exc}") from exc
        except Exception as exc:
            _logger.warning("Contract simulation %s failed: %s", function_name, exc)
            raise SubmissionFailure(f"{function_name} simulation failed: {exc}") from exc

        try:
            nonce = await self.web3.eth.get_transaction_count(sender, "pending")
            transaction = await call.build_transaction(
                {"from": sender, "nonce": nonce, "chainId": self.chain_id}
            )
            signed = self.account.sign_transaction(transaction)
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as exc:
            _logger.warning("Contract write %s would revert: %s", function_name, exc)
            raise SimulationFailure(f"{function_name} gas estimate failed: {exc}") from exc
        except Exception as exc:
            _logger.warning("Contract write %s not submitted: %s", function_name, exc)
            raise SubmissionFailure(f"{function_name} submission failed: {exc}") from exc
        return "0x" + bytes(tx_hash).hex()

    def subscribe(
        self,
        event_name: str,
        handler: EventHandler,
        on_error: ErrorHandler | None = None,
    ) -> Subscription:
        """Start polling for new event logs; must be called inside an event loop."""
        subscription = PollingSubscription(
            gateway=self,
            event_name=event_name,
            handler=handler,
            on_error=on_error,
            poll_interval_seconds=self.poll_interval_seconds,
            max_block_span=self.max_block_span,
            max_handler_attempts=self.max_handler_attempts,
        )
        subscription.start()
        self.subscriptions.append(subscription)
        return subscription

    def discard(self, subscription: "PollingSubscription") -> None:
        """Forget a cancelled subscription."""
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    async def latest_block(self) -> int:
        """Return the current block height."""
        return await self.web3.eth.block_number

    async def get_logs(
        self, event_name: str, from_block: int, to_block: int
    ) -> list[EventLog]:
        """Fetch decoded logs for an inclusive block range, oldest first."""
        event = getattr(self.contract.events, event_name)()
        raw_logs = await event.get_logs(from_block=from_block, to_block=to_block)
        logs = [_to_event_log(raw) for raw in raw_logs]
        return sorted(logs, key=lambda log: (log.block_number, log.log_index))

    async def close(self) -> None:
        """Cancel all open subscriptions and close the provider session."""
        for subscription in list(self.subscriptions):
            await subscription.cancel()
        await self.web3.provider.disconnect()


class PollingSubscription(Subscription):
    """Polls for new logs and hands each non-empty batch to a handler.

    Logs are fetched in ranges of at most ``max_block_span`` blocks. A failed
    fetch leaves the cursor in place, so the range is fetched again on the next
    poll. A batch whose handler fails ``max_handler_attempts`` times in a row is
    reported through ``on_error`` and skipped.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        gateway: Web3ChainGateway,
        event_name: str,
        handler: EventHandler,
        on_error: ErrorHandler | None,
        poll_interval_seconds: float,
        max_block_span: int = 1000,
        max_handler_attempts: int = 3,
    ) -> None:
        if max_block_span < 1 or max_handler_attempts < 1:
            raise ValueError("max_block_span and max_handler_attempts must be positive")
        self.gateway = gateway
        self.event_name = event_name
        self.handler = handler
        self.on_error = on_error
        self.poll_interval_seconds = poll_interval_seconds
        self.max_block_span = max_block_span
        self.max_handler_attempts = max_handler_attempts
        self._active = False
        self._cursor: int | None = None
        self._handler_failures = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._active = True
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def cancel(self) -> None:
        self._active = False
        self.gateway.discard(self)
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        if task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while self._active:
            try:
                await self._poll()
            except Exception as exc:
                _logger.warning("Watching %s events failed: %s", self.event_name, exc)
                self._report(exc)
            await asyncio.sleep(self.poll_interval_seconds)

    async def _poll(self) -> None:
        latest = await self.gateway.latest_block()
        if self._cursor is None:
            self._cursor = latest
            return
        while self._active and self._cursor < latest:
            to_block = min(latest, self._cursor + self.max_block_span)
            logs = await self.gateway.get_logs(
                self.event_name, self._cursor + 1, to_block
            )
            if logs and self._active:
                await self._deliver(logs)
            self._cursor = to_block

    async def _deliver(self, logs: list[EventLog]) -> None:
        _logger.info("Received %s %s events", len(logs), self.event_name)
        try:
            result = self.handler(logs)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            self._handler_failures += 1
            if self._handler_failures < self.max_handler_attempts:
                raise
            _logger.exception(
                "Skipping %s %s events after %s failed deliveries",
                len(logs),
                self.event_name,
                self._handler_failures,
            )
            self._handler_failures = 0
            self._report(exc)
            return
        self._handler_failures = 0

    def _report(self, exc: Exception) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(exc)
        except Exception:
            _logger.exception("Error callback for %s events failed", self.event_name)


def _to_event_log(raw: object) -> EventLog:
    """Convert web3 event data into an EventLog."""
    data = dict(raw)  # type: ignore[call-overload]
    return EventLog(
        event=str(data["event"]),
        args=dict(data["args"]),
        block_number=int(data["blockNumber"]),
        log_index=int(data["logIndex"]),
        transaction_hash="0x" + bytes(data["transactionHash"]).hex(),
    )
