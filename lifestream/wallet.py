"""
Wallet providers: where the signing account comes from.

The runner never reaches for an ambient wallet; it is handed a provider with
two capabilities:
  authorize() -> Signer             ask the wallet for an account
  bind(contract_ref, signer)        contract binding that sends as that account

NodeWallet  - accounts held by the node or wallet endpoint (Hardhat, Ganache,
              a wallet RPC bridge). It signs; we only ask for accounts.
LocalKeyWallet - local keypair from CLIENT_PRIVATE_KEY (env or .env).
              Never reads or writes a key file.
"""

import os
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from lifestream.config import DEFAULT_RPC_URL, ENV_PRIVATE_KEY, RunnerConfig, load_env_file
from lifestream.contract import GoalContract
from lifestream.errors import AuthorizationError
from lifestream.schema import ContractRef

# EIP-1193 / JSON-RPC error codes
USER_REJECTED = 4001
METHOD_NOT_FOUND = -32601
METHOD_NOT_SUPPORTED = -32004
UNSUPPORTED_METHOD = (METHOD_NOT_FOUND, METHOD_NOT_SUPPORTED)


def _error_code(error) -> Optional[int]:
    """JSON-RPC error code; some bridges send the error as a bare string."""
    return error.get("code") if isinstance(error, dict) else None


class Signer:
    """Authorized account for one run. `account` is set only for local keys."""

    def __init__(self, address: str, account: Optional[LocalAccount] = None):
        self.address = address
        self.account = account

    @property
    def signs_locally(self) -> bool:
        return self.account is not None

    def __repr__(self) -> str:
        kind = "local" if self.signs_locally else "node"
        return f"Signer({self.address}, {kind})"


class WalletProvider:
    """Capability passed into the runner. Subclasses implement authorize()."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        w3: Optional[AsyncWeb3] = None,
        receipt_timeout: float = 120.0,
        chain_id: Optional[int] = None,
    ):
        self.rpc_url = rpc_url or DEFAULT_RPC_URL
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        self.receipt_timeout = receipt_timeout
        self.chain_id = chain_id

    async def authorize(self) -> Signer:
        raise NotImplementedError

    def bind(self, contract_ref: ContractRef, signer: Signer) -> GoalContract:
        return GoalContract(
            self.w3,
            contract_ref,
            signer,
            receipt_timeout=self.receipt_timeout,
            chain_id=self.chain_id,
        )

    async def close(self) -> None:
        """Release the provider's HTTP session."""
        await self.w3.provider.disconnect()


class NodeWallet(WalletProvider):
    """Accounts managed by the RPC endpoint; transactions go out via eth_sendTransaction."""

    async def _request(self, method: str) -> dict:
        try:
            return await self.w3.provider.make_request(method, [])
        except Exception as e:
            raise AuthorizationError(f"Wallet unavailable at {self.rpc_url}: {e}") from e

    async def authorize(self) -> Signer:
        response = await self._request("eth_requestAccounts")
        error = response.get("error")
        if error and _error_code(error) in UNSUPPORTED_METHOD:
            # Plain dev nodes expose unlocked accounts without a connect prompt
            response = await self._request("eth_accounts")
            error = response.get("error")
        if error:
            if _error_code(error) == USER_REJECTED:
                raise AuthorizationError("Wallet connection request was rejected by the user.")
            message = error.get("message", error) if isinstance(error, dict) else error
            raise AuthorizationError(f"Wallet refused account access: {message}")

        accounts = response.get("result") or []
        if not accounts:
            raise AuthorizationError(f"Wallet at {self.rpc_url} returned no accounts.")
        return Signer(Web3.to_checksum_address(accounts[0]))


def load_key_from_env() -> LocalAccount:
    """
    Load key from CLIENT_PRIVATE_KEY env or .env file.
    Raises AuthorizationError if it is not set or is not a valid key.
    """
    load_env_file()
    pk = (os.getenv(ENV_PRIVATE_KEY) or "").strip()
    if not pk:
        raise AuthorizationError(
            f"Set {ENV_PRIVATE_KEY} in the environment (never commit it), "
            "or unset it to use the node's accounts."
        )
    return account_from_key(pk)


def account_from_key(private_key: str) -> LocalAccount:
    if private_key.startswith("0x"):
        private_key = private_key[2:]
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise AuthorizationError(f"{ENV_PRIVATE_KEY} is not a valid private key.") from e


class LocalKeyWallet(WalletProvider):
    """Local keypair; builds, signs and broadcasts raw transactions itself."""

    def __init__(self, account: Optional[LocalAccount] = None, **kwargs):
        super().__init__(**kwargs)
        self._account = account

    @property
    def address(self) -> Optional[str]:
        return self._account.address if self._account else None

    async def authorize(self) -> Signer:
        if self._account is None:
            self._account = load_key_from_env()
        try:
            connected = await self.w3.is_connected()
        except Exception as e:
            raise AuthorizationError(f"Cannot connect to RPC: {self.rpc_url}: {e}") from e
        if not connected:
            raise AuthorizationError(f"Cannot connect to RPC: {self.rpc_url}")
        return Signer(self._account.address, self._account)

    @classmethod
    def from_key(cls, private_key: str, **kwargs) -> "LocalKeyWallet":
        """Create wallet from raw private key (hex string)."""
        return cls(account=account_from_key(private_key), **kwargs)


def make_wallet(config: RunnerConfig) -> WalletProvider:
    """LocalKeyWallet when a private key is configured, otherwise NodeWallet."""
    kwargs = {
        "rpc_url": config.rpc_url,
        "receipt_timeout": config.receipt_timeout,
        "chain_id": config.chain_id,
    }
    if config.private_key:
        return LocalKeyWallet.from_key(config.private_key, **kwargs)
    return NodeWallet(**kwargs)
