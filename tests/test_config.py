"""Tests for RunnerConfig.from_env and ABI loading."""

import json

import pytest

from lifestream.abi import LIFESTREAM_ORACLE_ABI, REQUIRED_FUNCTIONS, load_contract_abi
from lifestream.config import RunnerConfig, is_placeholder
from lifestream.errors import ConfigurationError

CONTRACT = "0xd9145CCE52D386f254917e481eB44e9943F39138"


class TestRunnerConfig:

    def test_defaults(self):
        config = RunnerConfig.from_env({"LIFESTREAM_CONTRACT_ADDRESS": CONTRACT})

        assert config.contract_address == CONTRACT
        assert config.abi == LIFESTREAM_ORACLE_ABI
        assert config.rpc_url == "http://127.0.0.1:8545"
        assert config.private_key is None
        assert config.stake_wei == 50_000_000_000_000_000
        assert config.goal_difficulty == 3
        assert config.deadline_offset == 604800
        assert config.complete_evidence_uri is None

    def test_overrides(self):
        config = RunnerConfig.from_env({
            "LIFESTREAM_CONTRACT_ADDRESS": CONTRACT,
            "LIFESTREAM_RPC_URL": "https://rpc.sepolia.org",
            "LIFESTREAM_CHAIN_ID": "11155111",
            "LIFESTREAM_STAKE_ETH": "0.1",
            "LIFESTREAM_GOAL_DIFFICULTY": "5",
            "LIFESTREAM_DEADLINE_DAYS": "30",
            "LIFESTREAM_RECEIPT_TIMEOUT": "300",
            "LIFESTREAM_COMPLETE_EVIDENCE_URI": "ipfs://proof",
        })

        assert config.rpc_url == "https://rpc.sepolia.org"
        assert config.chain_id == 11155111
        assert config.stake_wei == 10**17
        assert config.goal_difficulty == 5
        assert config.deadline_offset == 30 * 86400
        assert config.receipt_timeout == 300.0
        assert config.complete_evidence_uri == "ipfs://proof"

    def test_missing_address(self):
        with pytest.raises(ConfigurationError, match="LIFESTREAM_CONTRACT_ADDRESS"):
            RunnerConfig.from_env({})

    def test_placeholder_address(self):
        with pytest.raises(ConfigurationError):
            RunnerConfig.from_env({"LIFESTREAM_CONTRACT_ADDRESS": "0xYourDeployedContractAddressHere"})

    def test_bad_number(self):
        with pytest.raises(ConfigurationError, match="Invalid number"):
            RunnerConfig.from_env({"LIFESTREAM_CONTRACT_ADDRESS": CONTRACT, "LIFESTREAM_GOAL_DIFFICULTY": "hard"})

    def test_private_key_not_in_repr(self):
        config = RunnerConfig(contract_address=CONTRACT, private_key="0xsecret")
        assert "0xsecret" not in repr(config)

    def test_contract_ref_is_frozen(self):
        ref = RunnerConfig(contract_address=CONTRACT).contract_ref()
        assert ref.address == CONTRACT
        with pytest.raises(Exception):
            ref.address = "0x0"

    def test_reads_dotenv(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        # set then delete so monkeypatch restores the variable afterwards
        monkeypatch.setenv("LIFESTREAM_CONTRACT_ADDRESS", "unset")
        monkeypatch.delenv("LIFESTREAM_CONTRACT_ADDRESS")
        (tmp_path / ".env").write_text(f"LIFESTREAM_CONTRACT_ADDRESS={CONTRACT}\n")

        assert RunnerConfig.from_env().contract_address == CONTRACT

    def test_is_placeholder(self):
        assert is_placeholder("<contract address>")
        assert is_placeholder("REPLACE_ME")
        assert not is_placeholder(CONTRACT)


class TestLoadContractAbi:

    def test_bare_list(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps(LIFESTREAM_ORACLE_ABI))
        assert load_contract_abi(path) == LIFESTREAM_ORACLE_ABI

    def test_artifact_with_abi_key(self, tmp_path):
        path = tmp_path / "LifeStreamOracle.json"
        path.write_text(json.dumps({"contractName": "LifeStreamOracle", "abi": LIFESTREAM_ORACLE_ABI, "bytecode": "0x"}))
        assert load_contract_abi(str(path)) == LIFESTREAM_ORACLE_ABI

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_contract_abi(tmp_path / "nope.json")

    def test_not_json(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text("function createGoal(string)")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_contract_abi(path)

    def test_missing_functions(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps([e for e in LIFESTREAM_ORACLE_ABI if e["name"] != "getUserGoals"]))
        with pytest.raises(ConfigurationError, match="getUserGoals"):
            load_contract_abi(path)

    def test_builtin_abi_has_every_function(self):
        names = [entry["name"] for entry in LIFESTREAM_ORACLE_ABI]
        assert sorted(names) == sorted(REQUIRED_FUNCTIONS)

    def test_abi_path_from_env(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps({"abi": LIFESTREAM_ORACLE_ABI}))
        config = RunnerConfig.from_env({"LIFESTREAM_CONTRACT_ADDRESS": CONTRACT, "LIFESTREAM_ABI_PATH": str(path)})
        assert config.abi == LIFESTREAM_ORACLE_ABI
