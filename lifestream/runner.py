"""
Action runner: authorize -> bind -> createGoal -> getUserGoals -> getGoalDetails
[-> completeGoal].

Strictly sequential; each state-changing call is awaited until its receipt
is in before the next step. No retries and no local recovery: the first
failure propagates to the caller (the CLI reports it once).
"""

import time
from typing import Callable, Optional

from lifestream.config import RunnerConfig
from lifestream.errors import NotFoundError
from lifestream.schema import GoalRequest, RunResult
from lifestream.wallet import WalletProvider


def build_goal_request(config: RunnerConfig, now: Callable[[], float] = time.time) -> GoalRequest:
    """Goal from config with deadline = now + deadline_days (7 days = 604800s by default)."""
    return GoalRequest(
        description=config.goal_description,
        category=config.goal_category,
        deadline=int(now()) + config.deadline_offset,
        difficulty=config.goal_difficulty,
        stake_wei=config.stake_wei,
    )


async def run_actions(
    wallet: WalletProvider,
    config: RunnerConfig,
    *,
    complete_evidence_uri: Optional[str] = None,
    now: Callable[[], float] = time.time,
) -> RunResult:
    """
    One runner pass against the configured contract.

    wallet: WalletProvider (or any object with async authorize() and bind()).
    complete_evidence_uri: if given (or set in config), also mark the new goal
        complete with this evidence URI. Otherwise no completeGoal call is made.
    now: clock used for the deadline; seconds since the epoch.

    Raises AuthorizationError, SubmissionError, NotFoundError or QueryError.
    """
    print("🔐 Requesting wallet connection...")
    signer = await wallet.authorize()
    print(f"✅ Connected as {signer.address}")

    contract = wallet.bind(config.contract_ref(), signer)

    request = build_goal_request(config, now)
    print(f"🚀 Creating a goal (stake {request.stake_wei} wei, deadline {request.deadline})...")
    create_tx = await contract.create_goal(request)
    print(f"✅ Goal created! Tx: {create_tx}")

    goal_ids = await contract.get_user_goals(signer.address)
    if not goal_ids:
        raise NotFoundError(f"No goals found for {signer.address} after createGoal (tx {create_tx})")
    latest_goal_id = goal_ids[-1]

    goal = await contract.get_goal_details(latest_goal_id)
    print("📌 Goal Details:")
    for line in goal.summary_lines():
        print(f"   {line}")

    complete_tx = None
    evidence_uri = complete_evidence_uri or config.complete_evidence_uri
    if evidence_uri:
        complete_tx = await contract.complete_goal(latest_goal_id, evidence_uri)
        print(f"✅ Goal completed with evidence! Tx: {complete_tx}")

    return RunResult(
        account=signer.address,
        create_tx_hash=create_tx,
        goal=goal,
        complete_tx_hash=complete_tx,
    )
