"""
LifeStreamOracle contract interface.

The built-in ABI covers the seven functions the SDK calls. A compiled
artifact (Hardhat/Remix JSON) can replace it via LIFESTREAM_ABI_PATH.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from lifestream.errors import ConfigurationError


def _fn(name: str, inputs: list, outputs: list, mutability: str) -> Dict[str, Any]:
    return {
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs],
        "name": name,
        "outputs": [{"internalType": t, "name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
        "type": "function",
    }


LIFESTREAM_ORACLE_ABI: List[Dict[str, Any]] = [
    _fn(
        "createGoal",
        [("_description", "string"), ("_category", "string"), ("_deadline", "uint256"), ("_difficulty", "uint256")],
        [],
        "payable",
    ),
    _fn("completeGoal", [("_goalId", "uint256"), ("_evidenceURI", "string")], [], "nonpayable"),
    _fn("verifyAndMintAchievement", [("_goalId", "uint256")], [], "nonpayable"),
    _fn(
        "getGoalDetails",
        [("_goalId", "uint256")],
        [
            ("owner", "address"),
            ("description", "string"),
            ("category", "string"),
            ("deadline", "uint256"),
            ("difficulty", "uint256"),
            ("completed", "bool"),
            ("verified", "bool"),
            ("stakeAmount", "uint256"),
            ("evidenceURI", "string"),
            ("createdAt", "uint256"),
        ],
        "view",
    ),
    _fn("getUserGoals", [("_user", "address")], [("", "uint256[]")], "view"),
    _fn("getUserAchievementCount", [("_user", "address")], [("", "uint256")], "view"),
    _fn("getContractBalance", [], [("", "uint256")], "view"),
]

# Functions the binding calls; a replacement ABI must provide all of them.
REQUIRED_FUNCTIONS = (
    "createGoal",
    "completeGoal",
    "verifyAndMintAchievement",
    "getGoalDetails",
    "getUserGoals",
    "getUserAchievementCount",
    "getContractBalance",
)


def load_contract_abi(abi_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from a JSON file.

    Accepts a bare ABI list or a compiler artifact that wraps it under "abi".
    Relative paths resolve from the current directory. Raises
    ConfigurationError if the file is missing, not JSON, or lacks one of
    REQUIRED_FUNCTIONS.
    """
    p = Path(abi_path).expanduser().resolve()
    if not p.is_file():
        raise ConfigurationError(f"ABI file not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"ABI file is not valid JSON: {p} - {e}") from e

    # Hardhat/Truffle artifacts wrap the ABI under an "abi" key
    if isinstance(data, dict) and isinstance(data.get("abi"), list):
        data = data["abi"]
    if not isinstance(data, list):
        raise ConfigurationError(f"ABI file does not contain an ABI list: {p}")

    names = {entry.get("name") for entry in data if isinstance(entry, dict) and entry.get("type") == "function"}
    missing = [fn for fn in REQUIRED_FUNCTIONS if fn not in names]
    if missing:
        raise ConfigurationError(f"ABI at {p} is missing functions: {', '.join(missing)}")
    return data
