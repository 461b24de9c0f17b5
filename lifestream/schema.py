"""
Data shapes exchanged with the LifeStreamOracle contract.

Goals are owned and mutated by the contract; these models only mirror what
createGoal takes and what getGoalDetails returns.
"""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field


class ContractRef(BaseModel):
    """Deployed contract: address + interface. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Contract address (0x...)")
    abi: List[Dict[str, Any]] = Field(..., description="Contract ABI (function entries)")


class GoalRequest(BaseModel):
    """Arguments for createGoal plus the stake sent as msg.value."""

    description: str
    category: str
    deadline: int = Field(..., description="Unix timestamp (seconds)")
    difficulty: int = Field(..., description="Contract enforces the bounds (1-5 on the reference deployment)")
    stake_wei: int = Field(0, description="Value attached to the call, in wei")

    def to_call_args(self) -> tuple:
        """Positional args for createGoal(string,string,uint256,uint256)."""
        return (self.description, self.category, self.deadline, self.difficulty)


class Goal(BaseModel):
    """Goal as returned by getGoalDetails."""

    goal_id: int
    owner: str
    description: str
    category: str
    deadline: int
    difficulty: int
    completed: bool
    verified: bool
    stake: int = Field(..., description="Staked amount in wei")
    evidence_uri: str = ""
    created_at: int

    @classmethod
    def from_details(cls, goal_id: int, values: Sequence[Any]) -> "Goal":
        """Build from the (owner, description, category, deadline, difficulty,
        completed, verified, stake, evidenceURI, createdAt) tuple."""
        if len(values) != 10:
            raise ValueError(f"getGoalDetails returned {len(values)} values, expected 10")
        owner, description, category, deadline, difficulty, completed, verified, stake, evidence_uri, created_at = values
        return cls(
            goal_id=goal_id,
            owner=owner,
            description=description,
            category=category,
            deadline=deadline,
            difficulty=difficulty,
            completed=completed,
            verified=verified,
            stake=stake,
            evidence_uri=evidence_uri,
            created_at=created_at,
        )

    def summary_lines(self) -> List[str]:
        """Human-readable lines for the console."""
        return [
            f"Goal #{self.goal_id}: {self.description} [{self.category}]",
            f"Owner: {self.owner}",
            f"Deadline: {self.deadline}  Difficulty: {self.difficulty}",
            f"Stake: {self.stake / 10**18:g} ETH ({self.stake} wei)",
            f"Completed: {self.completed}  Verified: {self.verified}",
            f"Evidence: {self.evidence_uri or '(none)'}",
            f"Created at: {self.created_at}",
        ]


class RunResult(BaseModel):
    """What a runner pass did: who signed, which txs, which goal it read back."""

    account: str
    create_tx_hash: str
    goal: Goal
    complete_tx_hash: Optional[str] = None
