"""
Runner configuration from the environment (and .env in the working directory).

Contract address and ABI are supplied from outside rather than embedded:
LIFESTREAM_CONTRACT_ADDRESS is required, LIFESTREAM_ABI_PATH is optional
(defaults to the built-in LifeStreamOracle ABI).
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from web3 import Web3

from lifestream.abi import LIFESTREAM_ORACLE_ABI, load_contract_abi
from lifestream.errors import ConfigurationError
from lifestream.schema import ContractRef

ENV_CONTRACT_ADDRESS = "LIFESTREAM_CONTRACT_ADDRESS"
ENV_ABI_PATH = "LIFESTREAM_ABI_PATH"
ENV_RPC_URL = "LIFESTREAM_RPC_URL"
ENV_PRIVATE_KEY = "CLIENT_PRIVATE_KEY"
ENV_CHAIN_ID = "LIFESTREAM_CHAIN_ID"
ENV_COMPLETE_EVIDENCE_URI = "LIFESTREAM_COMPLETE_EVIDENCE_URI"

# Hardhat / Ganache default
DEFAULT_RPC_URL = "http://127.0.0.1:8545"

SECONDS_PER_DAY = 24 * 60 * 60

PLACEHOLDER_MARKERS = ("YOUR", "REPLACE", "<", ">")


def load_env_file(path: Optional[Path] = None) -> None:
    """Load .env (cwd by default) without overriding variables already exported."""
    load_dotenv(path or Path.cwd() / ".env", override=False)


def is_placeholder(value: str) -> bool:
    upper_value = value.upper()
    return any(marker in upper_value for marker in PLACEHOLDER_MARKERS)


class RunnerConfig(BaseModel):
    """Everything one runner pass needs besides the wallet."""

    contract_address: str
    abi: List[Dict[str, Any]] = Field(default_factory=lambda: list(LIFESTREAM_ORACLE_ABI))
    rpc_url: str = DEFAULT_RPC_URL
    private_key: Optional[str] = Field(None, repr=False)
    chain_id: Optional[int] = None
    goal_description: str = "Finish Solidity Project"
    goal_category: str = "education"
    goal_difficulty: int = 3
    stake_wei: int = Web3.to_wei("0.05", "ether")
    deadline_days: int = 7
    receipt_timeout: float = 120.0
    complete_evidence_uri: Optional[str] = None

    @property
    def deadline_offset(self) -> int:
        """Seconds between "now" and the goal deadline (604800 for 7 days)."""
        return self.deadline_days * SECONDS_PER_DAY

    def contract_ref(self) -> ContractRef:
        return ContractRef(address=self.contract_address, abi=self.abi)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RunnerConfig":
        """
        Build config from env vars. Pass `env` to read from a mapping instead
        of os.environ (the .env file is not loaded in that case).

        Raises ConfigurationError for a missing or placeholder contract
        address, an unreadable ABI file, or a non-numeric number.
        """
        if env is None:
            load_env_file()
            env = os.environ

        def get(name: str) -> str:
            return (env.get(name) or "").strip()

        address = get(ENV_CONTRACT_ADDRESS)
        if not address or is_placeholder(address):
            raise ConfigurationError(
                f"Set {ENV_CONTRACT_ADDRESS} to the deployed LifeStreamOracle address "
                f"(got {address or 'nothing'})."
            )

        kwargs: Dict[str, Any] = {"contract_address": address}
        abi_path = get(ENV_ABI_PATH)
        if abi_path:
            kwargs["abi"] = load_contract_abi(abi_path)
        if get(ENV_RPC_URL):
            kwargs["rpc_url"] = get(ENV_RPC_URL)
        if get(ENV_PRIVATE_KEY):
            kwargs["private_key"] = get(ENV_PRIVATE_KEY)
        if get(ENV_COMPLETE_EVIDENCE_URI):
            kwargs["complete_evidence_uri"] = get(ENV_COMPLETE_EVIDENCE_URI)
        if get("LIFESTREAM_GOAL_DESCRIPTION"):
            kwargs["goal_description"] = get("LIFESTREAM_GOAL_DESCRIPTION")
        if get("LIFESTREAM_GOAL_CATEGORY"):
            kwargs["goal_category"] = get("LIFESTREAM_GOAL_CATEGORY")

        try:
            if get(ENV_CHAIN_ID):
                kwargs["chain_id"] = int(get(ENV_CHAIN_ID))
            if get("LIFESTREAM_GOAL_DIFFICULTY"):
                kwargs["goal_difficulty"] = int(get("LIFESTREAM_GOAL_DIFFICULTY"))
            if get("LIFESTREAM_DEADLINE_DAYS"):
                kwargs["deadline_days"] = int(get("LIFESTREAM_DEADLINE_DAYS"))
            if get("LIFESTREAM_RECEIPT_TIMEOUT"):
                kwargs["receipt_timeout"] = float(get("LIFESTREAM_RECEIPT_TIMEOUT"))
            if get("LIFESTREAM_STAKE_ETH"):
                kwargs["stake_wei"] = Web3.to_wei(get("LIFESTREAM_STAKE_ETH"), "ether")
        except (ValueError, ArithmeticError) as e:
            raise ConfigurationError(f"Invalid number in LifeStream config: {e}") from e

        return cls(**kwargs)
