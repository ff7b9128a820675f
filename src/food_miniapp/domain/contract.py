"""Contract binding and event models for the UserPreferences contract."""

import json
from dataclasses import dataclass
from pathlib import Path

USER_PREFERENCES_ABI: list[dict[str, object]] = [
    {
        "type": "function",
        "name": "fidToPreferences",
        "stateMutability": "view",
        "inputs": [{"name": "fid", "type": "uint256"}],
        "outputs": [
            {"name": "country", "type": "string"},
            {"name": "dietaryRestrictions", "type": "string"},
        ],
    },
    {
        "type": "function",
        "name": "setUserPreferences",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "fid", "type": "uint256"},
            {"name": "country", "type": "string"},
            {"name": "dietaryRestrictions", "type": "string"},
        ],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "UserPreferencesUpdated",
        "anonymous": False,
        "inputs": [
            {"name": "fid", "type": "uint256", "indexed": True},
            {"name": "country", "type": "string", "indexed": False},
            {"name": "dietaryRestrictions", "type": "string", "indexed": False},
        ],
    },
]


@dataclass(frozen=True)
class ContractBinding:
    """Deployed contract address and the ABI used to talk to it."""

    address: str
    abi: list[dict[str, object]]


@dataclass(frozen=True)
class EventLog:
    """A decoded contract event log entry."""

    event: str
    args: dict[str, object]
    block_number: int
    log_index: int
    transaction_hash: str


def load_abi(path: str | Path) -> list[dict[str, object]]:
    """Load an ABI from a bare ABI list or a compiled artifact with an "abi" key."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ValueError(f"No ABI found in {path}")
    return data
