"""
LifeStream CLI.

Commands:
  lifestream run [--complete URI]      create a goal, read it back (optionally complete it)
  lifestream goals [ADDRESS]           list goal ids (default: your account)
  lifestream goal GOAL_ID              show goal details
  lifestream complete GOAL_ID URI      mark a goal complete with evidence
  lifestream verify GOAL_ID            verify a goal and mint its achievement
  lifestream achievements [ADDRESS]    achievement count
  lifestream balance                   ETH held by the contract

Config comes from the environment / .env (see lifestream.config).
"""
import asyncio
import sys
from typing import Awaitable, Callable, List, Optional

from web3 import Web3

from lifestream.config import RunnerConfig, load_env_file
from lifestream.contract import GoalContract
from lifestream.runner import run_actions
from lifestream.wallet import Signer, make_wallet

USAGE = """LifeStream CLI

Commands:
  lifestream run [--complete URI]      create a goal and read it back
  lifestream goals [ADDRESS]           list goal ids
  lifestream goal GOAL_ID              show goal details
  lifestream complete GOAL_ID URI      complete a goal with evidence
  lifestream verify GOAL_ID            verify a goal and mint its achievement
  lifestream achievements [ADDRESS]    achievement count
  lifestream balance                   contract balance

Set LIFESTREAM_CONTRACT_ADDRESS (and LIFESTREAM_RPC_URL, CLIENT_PRIVATE_KEY if needed) in .env."""


class UsageError(Exception):
    pass


def _goal_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise UsageError(f"GOAL_ID must be an integer, got {value!r}") from None


async def _with_contract(
    config: RunnerConfig,
    action: Callable[[GoalContract, Signer], Awaitable[None]],
) -> None:
    """Authorize, bind, run one action, always release the provider."""
    wallet = make_wallet(config)
    try:
        signer = await wallet.authorize()
        contract = wallet.bind(config.contract_ref(), signer)
        await action(contract, signer)
    finally:
        await wallet.close()


async def run_command(config: RunnerConfig, args: List[str]) -> None:
    evidence_uri = None
    rest = list(args)
    if "--complete" in rest:
        idx = rest.index("--complete")
        if idx + 1 >= len(rest):
            raise UsageError("--complete needs an evidence URI (e.g. ipfs://...)")
        evidence_uri = rest[idx + 1]
        del rest[idx:idx + 2]
    if rest:
        raise UsageError(f"Unknown argument for run: {' '.join(rest)}\nUsage: lifestream run [--complete URI]")
    wallet = make_wallet(config)
    try:
        await run_actions(wallet, config, complete_evidence_uri=evidence_uri)
    finally:
        await wallet.close()


async def goals_command(config: RunnerConfig, args: List[str]) -> None:
    address = args[0] if args else None

    async def action(contract: GoalContract, signer: Signer) -> None:
        owner = address or signer.address
        goal_ids = await contract.get_user_goals(owner)
        if not goal_ids:
            print(f"📭 No goals for {owner}")
            return
        print(f"📌 Goals for {owner}: {', '.join(str(g) for g in goal_ids)}")

    await _with_contract(config, action)


async def goal_command(config: RunnerConfig, args: List[str]) -> None:
    if not args:
        raise UsageError("Usage: lifestream goal GOAL_ID")
    goal_id = _goal_id(args[0])

    async def action(contract: GoalContract, signer: Signer) -> None:
        goal = await contract.get_goal_details(goal_id)
        print("📌 Goal Details:")
        for line in goal.summary_lines():
            print(f"   {line}")

    await _with_contract(config, action)


async def complete_command(config: RunnerConfig, args: List[str]) -> None:
    if len(args) < 2:
        raise UsageError("Usage: lifestream complete GOAL_ID EVIDENCE_URI")
    goal_id = _goal_id(args[0])
    evidence_uri = args[1]

    async def action(contract: GoalContract, signer: Signer) -> None:
        print(f"📝 Completing goal #{goal_id} with {evidence_uri}...")
        tx = await contract.complete_goal(goal_id, evidence_uri)
        print(f"✅ Goal completed with evidence! Tx: {tx}")

    await _with_contract(config, action)


async def verify_command(config: RunnerConfig, args: List[str]) -> None:
    if not args:
        raise UsageError("Usage: lifestream verify GOAL_ID")
    goal_id = _goal_id(args[0])

    async def action(contract: GoalContract, signer: Signer) -> None:
        print(f"🔎 Verifying goal #{goal_id} and minting achievement...")
        tx = await contract.verify_and_mint_achievement(goal_id)
        print(f"🏅 Achievement minted! Tx: {tx}")

    await _with_contract(config, action)


async def achievements_command(config: RunnerConfig, args: List[str]) -> None:
    address = args[0] if args else None

    async def action(contract: GoalContract, signer: Signer) -> None:
        owner = address or signer.address
        count = await contract.get_user_achievement_count(owner)
        print(f"🏅 {owner} has {count} achievement(s)")

    await _with_contract(config, action)


async def balance_command(config: RunnerConfig, args: List[str]) -> None:
    async def action(contract: GoalContract, signer: Signer) -> None:
        balance_wei = await contract.get_contract_balance()
        print(f"💰 Contract {contract.address} holds {Web3.from_wei(balance_wei, 'ether')} ETH")

    await _with_contract(config, action)


COMMANDS = {
    "run": run_command,
    "goals": goals_command,
    "goal": goal_command,
    "complete": complete_command,
    "verify": verify_command,
    "achievements": achievements_command,
    "balance": balance_command,
}


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv
    load_env_file()
    if not argv or argv[0] not in COMMANDS:
        if argv:
            print(f"Unknown command: {argv[0]}\n")
        print(USAGE)
        sys.exit(1)

    command = COMMANDS[argv[0]]
    try:
        config = RunnerConfig.from_env()
        asyncio.run(command(config, argv[1:]))
    except UsageError as e:
        print(e)
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
