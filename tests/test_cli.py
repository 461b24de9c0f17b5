"""Tests for the lifestream CLI dispatch and top-level error handling."""

from unittest.mock import AsyncMock, Mock

import pytest

from lifestream import cli
from lifestream.errors import SubmissionError
from lifestream.schema import Goal

CONTRACT = "0xd9145CCE52D386f254917e481eB44e9943F39138"
OWNER = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LIFESTREAM_CONTRACT_ADDRESS", CONTRACT)
    monkeypatch.delenv("CLIENT_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("LIFESTREAM_COMPLETE_EVIDENCE_URI", raising=False)


@pytest.fixture
def wallet(monkeypatch):
    contract = Mock()
    contract.address = CONTRACT
    contract.get_goal_details = AsyncMock(return_value=Goal.from_details(
        12, [OWNER, "Finish Solidity Project", "education", 1_700_604_800, 3, False, False, 5 * 10**16, "", 1_700_000_000]
    ))
    contract.get_user_goals = AsyncMock(return_value=[7, 9, 12])
    contract.complete_goal = AsyncMock(return_value="0x" + "cd" * 32)
    contract.verify_and_mint_achievement = AsyncMock(return_value="0x" + "ef" * 32)
    contract.get_user_achievement_count = AsyncMock(return_value=2)
    contract.get_contract_balance = AsyncMock(return_value=15 * 10**16)

    fake = Mock()
    fake.authorize = AsyncMock(return_value=Mock(address=OWNER, account=None))
    fake.bind = Mock(return_value=contract)
    fake.close = AsyncMock()
    fake.contract = contract
    monkeypatch.setattr(cli, "make_wallet", Mock(return_value=fake))
    return fake


class TestCli:

    def test_no_command_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 1
        assert "lifestream run" in capsys.readouterr().out

    def test_unknown_command(self, capsys):
        with pytest.raises(SystemExit):
            cli.main(["stake"])
        assert "Unknown command: stake" in capsys.readouterr().out

    def test_missing_config_reports_one_error(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("LIFESTREAM_CONTRACT_ADDRESS", "")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert out.count("❌ Error:") == 1
        assert "LIFESTREAM_CONTRACT_ADDRESS" in out

    def test_goal_command(self, env, wallet, capsys):
        cli.main(["goal", "12"])
        wallet.contract.get_goal_details.assert_awaited_once_with(12)
        wallet.close.assert_awaited_once()
        assert "Goal #12" in capsys.readouterr().out

    def test_goal_id_must_be_integer(self, env, wallet, capsys):
        with pytest.raises(SystemExit):
            cli.main(["goal", "latest"])
        assert "GOAL_ID must be an integer" in capsys.readouterr().out

    def test_goals_command(self, env, wallet, capsys):
        cli.main(["goals"])
        wallet.contract.get_user_goals.assert_awaited_once_with(OWNER)
        assert "7, 9, 12" in capsys.readouterr().out

    def test_complete_command(self, env, wallet):
        cli.main(["complete", "12", "ipfs://proof"])
        wallet.contract.complete_goal.assert_awaited_once_with(12, "ipfs://proof")

    def test_verify_command(self, env, wallet, capsys):
        cli.main(["verify", "12"])
        wallet.contract.verify_and_mint_achievement.assert_awaited_once_with(12)
        assert "Achievement minted" in capsys.readouterr().out

    def test_achievements_and_balance(self, env, wallet, capsys):
        cli.main(["achievements"])
        cli.main(["balance"])
        out = capsys.readouterr().out
        assert "has 2 achievement(s)" in out
        assert "0.15 ETH" in out

    def test_run_command_with_complete(self, env, wallet):
        wallet.contract.create_goal = AsyncMock(return_value="0x" + "ab" * 32)
        cli.main(["run", "--complete", "ipfs://proof"])
        wallet.contract.complete_goal.assert_awaited_once_with(12, "ipfs://proof")
        wallet.close.assert_awaited_once()

    def test_run_failure_closes_wallet_and_exits(self, env, wallet, capsys):
        wallet.contract.create_goal = AsyncMock(side_effect=SubmissionError("createGoal would revert: Stake required"))
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run"])
        assert exc_info.value.code == 1
        assert "❌ Error: createGoal would revert: Stake required" in capsys.readouterr().out
        wallet.contract.get_user_goals.assert_not_awaited()
        wallet.close.assert_awaited_once()

    def test_run_rejects_unknown_argument(self, env, wallet, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run", "--compelte", "ipfs://proof"])
        assert exc_info.value.code == 1
        assert "Unknown argument for run: --compelte ipfs://proof" in capsys.readouterr().out
        wallet.authorize.assert_not_awaited()
