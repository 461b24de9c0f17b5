"""
LifeStream: goal staking on the LifeStreamOracle contract.

Connect a wallet, stake ETH on a goal, read it back, complete it with
evidence, verify it and mint the achievement.

Wallet is explicit: NodeWallet (accounts held by the node / wallet endpoint)
or LocalKeyWallet (CLIENT_PRIVATE_KEY). Contract address and ABI come from
LIFESTREAM_CONTRACT_ADDRESS / LIFESTREAM_ABI_PATH.
"""

__version__ = "0.1.0"

from lifestream.errors import (
    LifeStreamError,
    ConfigurationError,
    AuthorizationError,
    SubmissionError,
    QueryError,
    NotFoundError,
)
from lifestream.schema import ContractRef, Goal, GoalRequest, RunResult
from lifestream.abi import LIFESTREAM_ORACLE_ABI, load_contract_abi
from lifestream.config import RunnerConfig
from lifestream.contract import GoalContract
from lifestream.wallet import Signer, WalletProvider, NodeWallet, LocalKeyWallet, make_wallet
from lifestream.runner import run_actions, build_goal_request

__all__ = [
    "__version__",
    "LifeStreamError",
    "ConfigurationError",
    "AuthorizationError",
    "SubmissionError",
    "QueryError",
    "NotFoundError",
    "ContractRef",
    "Goal",
    "GoalRequest",
    "RunResult",
    "LIFESTREAM_ORACLE_ABI",
    "load_contract_abi",
    "RunnerConfig",
    "GoalContract",
    "Signer",
    "WalletProvider",
    "NodeWallet",
    "LocalKeyWallet",
    "make_wallet",
    "run_actions",
    "build_goal_request",
]
