"""
Async binding for the LifeStreamOracle contract.

State-changing calls are dry-run first (eth_call) so a revert reason shows up
before anything is sent, then submitted as the signer and awaited until the
receipt is in. View calls return plain Python values.
"""

import os
from typing import Any, List, Optional

from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from lifestream.errors import ConfigurationError, QueryError, SubmissionError
from lifestream.schema import ContractRef, Goal, GoalRequest


class GoalContract:
    """
    Contract bound to a signer.

    `signer` needs `.address`, and `.account` (a LocalAccount) when the key is
    held locally; with `.account` None the node signs via eth_sendTransaction.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        ref: ContractRef,
        signer: Any,
        receipt_timeout: float = 120.0,
        chain_id: Optional[int] = None,
    ):
        try:
            address = Web3.to_checksum_address(ref.address)
        except ValueError as e:
            raise ConfigurationError(f"Contract address is not a valid address: {ref.address}") from e
        self._w3 = w3
        self._contract = w3.eth.contract(address=address, abi=ref.abi)
        self.address = address
        self.signer = signer
        self.receipt_timeout = receipt_timeout
        self.chain_id = chain_id

    # -- transactions --------------------------------------------------------

    async def create_goal(self, request: GoalRequest) -> str:
        """createGoal(description, category, deadline, difficulty) payable. Returns tx hash."""
        return await self._transact("createGoal", *request.to_call_args(), value=request.stake_wei)

    async def complete_goal(self, goal_id: int, evidence_uri: str) -> str:
        return await self._transact("completeGoal", goal_id, evidence_uri)

    async def verify_and_mint_achievement(self, goal_id: int) -> str:
        return await self._transact("verifyAndMintAchievement", goal_id)

    # -- views ---------------------------------------------------------------

    async def get_goal_details(self, goal_id: int) -> Goal:
        values = await self._call("getGoalDetails", goal_id)
        try:
            return Goal.from_details(goal_id, values)
        except ValueError as e:
            raise QueryError(f"getGoalDetails({goal_id}) returned an unexpected shape: {e}") from e

    async def get_user_goals(self, address: Optional[str] = None) -> List[int]:
        """Goal ids owned by `address` (default: the signer), oldest first."""
        user = Web3.to_checksum_address(address or self.signer.address)
        return [int(goal_id) for goal_id in await self._call("getUserGoals", user)]

    async def get_user_achievement_count(self, address: Optional[str] = None) -> int:
        user = Web3.to_checksum_address(address or self.signer.address)
        return int(await self._call("getUserAchievementCount", user))

    async def get_contract_balance(self) -> int:
        """Balance held by the contract (stakes), in wei."""
        return int(await self._call("getContractBalance"))

    # -- internals -----------------------------------------------------------

    async def _call(self, fn_name: str, *args: Any) -> Any:
        try:
            return await getattr(self._contract.functions, fn_name)(*args).call({"from": self.signer.address})
        except Exception as e:
            raise QueryError(f"{fn_name} call failed: {e}") from e

    async def _transact(self, fn_name: str, *args: Any, value: int = 0) -> str:
        fn = getattr(self._contract.functions, fn_name)(*args)
        tx_params = {"from": self.signer.address}
        if value:
            tx_params["value"] = value

        # Dry-run to surface the revert reason before anything is signed
        try:
            await fn.call(tx_params)
        except ContractLogicError as e:
            raise SubmissionError(f"{fn_name} would revert: {e}") from e
        except Exception as e:
            if "out of gas" not in str(e).lower():
                raise SubmissionError(f"{fn_name} dry run failed: {e}") from e
            # RPC often caps eth_call gas; the real tx estimates its own
            if os.getenv("LIFESTREAM_DEBUG"):
                print(f"⚠️  {fn_name} dry run hit the RPC gas cap, sending anyway")

        try:
            if self.signer.account is None:
                tx_hash = await fn.transact(tx_params)
            else:
                tx_hash = await self._send_signed(fn, tx_params)
        except Exception as e:
            raise SubmissionError(f"{fn_name} was rejected: {e}") from e
        tx_hex = Web3.to_hex(tx_hash)

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except TimeExhausted as e:
            raise SubmissionError(
                f"{fn_name} tx {tx_hex} not confirmed after {self.receipt_timeout:g}s", tx_hash=tx_hex
            ) from e
        except Exception as e:
            raise SubmissionError(f"{fn_name} tx {tx_hex} receipt wait failed: {e}", tx_hash=tx_hex) from e
        if receipt["status"] != 1:
            raise SubmissionError(f"{fn_name} reverted on chain (tx {tx_hex})", tx_hash=tx_hex)
        return tx_hex

    async def _send_signed(self, fn: Any, tx_params: dict) -> bytes:
        """Build, sign with the local key and broadcast. Returns the tx hash."""
        params = dict(tx_params)
        params["nonce"] = await self._w3.eth.get_transaction_count(self.signer.address)
        if self.chain_id:
            params["chainId"] = self.chain_id
        tx = await fn.build_transaction(params)
        signed = self.signer.account.sign_transaction(tx)
        return await self._w3.eth.send_raw_transaction(signed.raw_transaction)
