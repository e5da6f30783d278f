"""
Tests for the payout-keeper CLI.

The CLI always runs against a tmp state file and --static-price.
"""
import argparse
import json

import pytest

from payout_keeper.cli import main, usd_to_fixed
from payout_keeper.project_constants import DAY_S
from payout_keeper.store import load_state

from conftest import KEEPER, OWNER, STRANGER, T0, WINNER


@pytest.fixture
def state_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("RPC_URL", "INFURA_API_KEY", "STATE_FILE", "CHECK_INTERVAL_S", "TRIGGER_INTERVAL_S"):
        monkeypatch.delenv(name, raising=False)
    return str(tmp_path / "state.json")


def run(state_path, *args, now=T0, price="50.00"):
    argv = ["--state", state_path, "--now", str(now)]
    if price is not None:
        argv += ["--static-price", price]
    argv += args
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def initialized(state_path):
    code = run(
        state_path,
        "init",
        "--owner", OWNER,
        "--trigger", KEEPER,
        "--winner", WINNER,
        "--prize-usd", "100.00",
    )
    assert code == 0
    return state_path


class TestInit:
    def test_writes_state(self, initialized):
        state = load_state(initialized)

        assert state.owner == OWNER
        assert state.prize_usd == 100_00000000
        assert state.last_trigger_time == T0

    def test_refuses_to_overwrite(self, initialized):
        with pytest.raises(SystemExit, match="already exists"):
            main([
                "--state", initialized, "init",
                "--owner", OWNER, "--trigger", KEEPER,
                "--winner", WINNER, "--prize-usd", "1",
            ])


class TestCommands:
    def test_fund_and_upkeep(self, initialized, capsys):
        assert run(initialized, "fund", "--caller", OWNER, "--amount", str(3 * 10**18)) == 0

        code = run(initialized, "upkeep", "--caller", KEEPER, now=T0 + 15 * DAY_S)

        assert code == 0
        assert "Paid 2.0" in capsys.readouterr().out
        state = load_state(initialized)
        assert state.balance == 10**18
        assert state.last_trigger_time == T0 + 15 * DAY_S

    def test_upkeep_too_early(self, initialized, capsys):
        run(initialized, "fund", "--caller", OWNER, "--amount", "1000")

        assert run(initialized, "upkeep", "--caller", KEEPER, now=T0 + DAY_S) == 0
        assert "No payout" in capsys.readouterr().out

    def test_rejected_call_exits_nonzero(self, initialized):
        assert run(initialized, "fund", "--caller", STRANGER, "--amount", "1") == 1
        assert load_state(initialized).balance == 0

    def test_check_exit_codes(self, initialized):
        run(initialized, "fund", "--caller", OWNER, "--amount", "1")

        assert run(initialized, "check", now=T0 + DAY_S) == 3
        assert run(initialized, "check", now=T0 + 31 * DAY_S) == 0

    def test_check_without_funds(self, initialized):
        assert run(initialized, "check", now=T0 + 31 * DAY_S) == 1

    def test_pause_blocks_upkeep(self, initialized):
        run(initialized, "fund", "--caller", OWNER, "--amount", str(10**19))
        run(initialized, "pause", "--caller", OWNER)

        assert load_state(initialized).paused is True
        assert run(initialized, "upkeep", "--caller", KEEPER, now=T0 + 15 * DAY_S) == 1

        run(initialized, "resume", "--caller", OWNER)
        assert run(initialized, "upkeep", "--caller", KEEPER, now=T0 + 15 * DAY_S) == 0

    def test_withdraw(self, initialized):
        run(initialized, "receive", "--amount", "10")

        assert run(initialized, "withdraw", "--caller", OWNER, "--amount", "11", "--payee", OWNER) == 1
        assert run(initialized, "withdraw", "--caller", OWNER, "--amount", "10", "--payee", OWNER) == 0
        assert load_state(initialized).balance == 0

    def test_setters(self, initialized):
        run(initialized, "set-winner", "--caller", OWNER, "--address", STRANGER)
        run(initialized, "set-prize", "--caller", OWNER, "--prize-usd", "250")
        run(initialized, "set-trigger", "--caller", OWNER, "--address", STRANGER)

        state = load_state(initialized)
        assert state.winner == STRANGER
        assert state.prize_usd == 250_00000000
        assert state.authorized_trigger == STRANGER

    def test_price(self, state_path, capsys):
        assert run(state_path, "price", price="2500") == 0

        quote = json.loads(capsys.readouterr().out)
        assert quote["answer"] == 2500_00000000
        assert quote["usd"] == 2500.0

    def test_quote(self, initialized, capsys):
        assert run(initialized, "quote", price="2500") == 0

        assert "40000000000000000 wei" in capsys.readouterr().out

    def test_keep(self, initialized, capsys):
        run(initialized, "fund", "--caller", OWNER, "--amount", str(10**19))

        code = run(
            initialized,
            "keep", "--caller", KEEPER, "--interval", "0", "--cycles", "1",
        )

        # --now is not used by the keeper's wall clock, which is far past T0 + 30 days
        assert code == 0
        assert "Payouts made: 1" in capsys.readouterr().out
        assert load_state(initialized).balance < 10**19


class TestChainlinkFeedPath:
    """Commands without --static-price build the on-chain feed client."""

    def test_fund_with_rpc_url(self, initialized, monkeypatch):
        monkeypatch.setenv("RPC_URL", "https://rpc.test")

        assert run(initialized, "fund", "--caller", OWNER, "--amount", "5", price=None) == 0
        assert load_state(initialized).balance == 5

    def test_admin_commands_need_no_rpc_url(self, initialized):
        assert run(initialized, "pause", "--caller", OWNER, price=None) == 0
        assert run(initialized, "set-winner", "--caller", OWNER, "--address", STRANGER, price=None) == 0

        state = load_state(initialized)
        assert state.paused is True
        assert state.winner == STRANGER

    def test_upkeep_without_rpc_url_is_rejected(self, initialized):
        run(initialized, "fund", "--caller", OWNER, "--amount", str(10**19), price=None)

        code = run(initialized, "upkeep", "--caller", KEEPER, now=T0 + 15 * DAY_S, price=None)

        assert code == 1
        state = load_state(initialized)
        assert state.last_trigger_time == T0
        assert state.balance == 10**19


class TestUsdToFixed:
    def test_whole_and_fractional(self):
        assert usd_to_fixed("100") == 100_00000000
        assert usd_to_fixed("0.00000001") == 1

    @pytest.mark.parametrize("value", ["0.000000001", "1.123456789"])
    def test_too_many_decimals(self, value):
        with pytest.raises(argparse.ArgumentTypeError, match="decimal places"):
            usd_to_fixed(value)

    @pytest.mark.parametrize("value", ["inf", "-Infinity", "nan", "abc"])
    def test_not_a_number(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            usd_to_fixed(value)

    def test_parser_reports_bad_value(self, state_path, capsys):
        code = run(state_path, "set-prize", "--caller", OWNER, "--prize-usd", "inf")

        assert code == 2
        assert "not a USD amount" in capsys.readouterr().err
