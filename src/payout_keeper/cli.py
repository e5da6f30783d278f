from __future__ import annotations

import argparse
import json
import logging
import os
import time
from decimal import Decimal, InvalidOperation

from .config import Settings
from .contract import PayoutAutomation
from .errors import PayoutError
from .keeper import Keeper
from .oracle import ChainlinkFeedClient, StaticPriceFeed
from .payout import compute_amount, to_native
from .project_constants import FEED_DECIMALS
from .state import PayoutState
from .store import load_state, save_state


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def usd_to_fixed(value: str) -> int:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a USD amount: {value!r}")
    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f"not a USD amount: {value!r}")
    scaled = amount.scaleb(FEED_DECIMALS)
    if scaled != scaled.to_integral_value():
        raise argparse.ArgumentTypeError(
            f"{value!r} has more than {FEED_DECIMALS} decimal places"
        )
    return int(scaled)


def fixed_to_usd(raw: int) -> str:
    return f"{Decimal(raw) / (10**FEED_DECIMALS):,.2f}"


def _now(args: argparse.Namespace) -> int:
    return args.now if args.now is not None else int(time.time())


def build_oracle(args: argparse.Namespace, settings: Settings):
    if args.static_price is not None:
        return StaticPriceFeed(args.static_price, max_age_s=settings.price_max_age_s)
    return ChainlinkFeedClient(
        settings.rpc_url,
        settings.price_feed,
        timeout_s=args.timeout,
        max_age_s=settings.price_max_age_s,
    )


def open_contract(args: argparse.Namespace, settings: Settings) -> PayoutAutomation:
    return PayoutAutomation(
        load_state(settings.state_file),
        build_oracle(args, settings),
        check_interval_s=settings.check_interval_s,
        trigger_interval_s=settings.trigger_interval_s,
    )


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(
        rpc_url_override=args.rpc_url, state_file_override=args.state
    )


def cmd_init(args: argparse.Namespace) -> int:
    settings = _settings(args)
    if os.path.exists(settings.state_file) and not args.force:
        raise SystemExit(
            f"{settings.state_file} already exists; pass --force to overwrite it."
        )
    state = PayoutState.create(
        owner=args.owner,
        authorized_trigger=args.trigger,
        prize_usd=args.prize_usd,
        winner=args.winner,
        now=_now(args),
    )
    save_state(state, settings.state_file)
    print(f"🧾 Wrote state: {settings.state_file}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    settings = _settings(args)
    state = load_state(settings.state_file)
    now = _now(args)
    elapsed = now - state.last_trigger_time

    print("========================================")
    print("💸 PRIZE PAYOUT STATUS")
    print("========================================")
    print(f"Owner          : {state.owner}")
    print(f"Trigger        : {state.authorized_trigger}")
    print(f"Winner         : {state.winner}")
    print(f"Prize (USD)    : {fixed_to_usd(state.prize_usd)}")
    print(f"Balance        : {to_native(state.balance)} ({state.balance} wei)")
    print(f"Paused         : {'yes' if state.paused else 'no'}")
    print(f"Last trigger   : {state.last_trigger_time} ({elapsed}s ago)")
    print(f"Check interval : {settings.check_interval_s}s")
    print(f"Trigger intvl  : {settings.trigger_interval_s}s")
    return 0


def cmd_price(args: argparse.Namespace) -> int:
    settings = _settings(args)
    oracle = build_oracle(args, settings)
    try:
        quote = oracle.current_price(now=_now(args))
    finally:
        oracle.close()
    print(json.dumps(
        {
            "round_id": quote.round_id,
            "answer": quote.answer,
            "decimals": quote.decimals,
            "updated_at": quote.updated_at,
            "usd": quote.to_usd(),
        },
        indent=2,
    ))
    return 0


def cmd_quote(args: argparse.Namespace) -> int:
    """Native amount the current prize would pay at the current price."""
    settings = _settings(args)
    state = load_state(settings.state_file)
    oracle = build_oracle(args, settings)
    try:
        quote = oracle.current_price(now=_now(args))
    finally:
        oracle.close()
    amount = compute_amount(state.prize_usd, quote.price)
    print(f"Prize {fixed_to_usd(state.prize_usd)} USD @ {quote.to_usd():,.2f} USD")
    print(f"Payout        : {to_native(amount)} ({amount} wei)")
    return 0


def _mutate(args: argparse.Namespace, action) -> int:
    settings = _settings(args)
    contract = open_contract(args, settings)
    try:
        result = action(contract)
    finally:
        contract.oracle.close()
    save_state(contract.snapshot(), settings.state_file)
    if result is not None:
        print(result)
    return 0


def cmd_fund(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: f"Balance: {c.fund(args.caller, args.amount)} wei")


def cmd_receive(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: f"Balance: {c.receive(args.amount)} wei")


def cmd_withdraw(args: argparse.Namespace) -> int:
    return _mutate(
        args,
        lambda c: f"Balance: {c.withdraw(args.caller, args.amount, args.payee)} wei",
    )


def cmd_pause(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: c.pause(args.caller))


def cmd_resume(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: c.resume(args.caller))


def cmd_set_trigger(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: c.set_authorized_trigger(args.caller, args.address))


def cmd_set_prize(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: c.set_prize(args.caller, args.prize_usd))


def cmd_set_winner(args: argparse.Namespace) -> int:
    return _mutate(args, lambda c: c.set_winner(args.caller, args.address))


def cmd_check(args: argparse.Namespace) -> int:
    settings = _settings(args)
    contract = open_contract(args, settings)
    try:
        due = contract.is_due(_now(args))
    finally:
        contract.oracle.close()
    print("due" if due else "not due")
    return 0 if due else 3


def cmd_upkeep(args: argparse.Namespace) -> int:
    def run(c: PayoutAutomation) -> str:
        event = c.run_upkeep(args.caller, _now(args))
        if event is None:
            return "No payout: trigger interval has not elapsed."
        return f"🏆 Paid {to_native(event.amount)} ({event.amount} wei) to {event.recipient}"

    return _mutate(args, run)


def cmd_keep(args: argparse.Namespace) -> int:
    settings = _settings(args)
    contract = open_contract(args, settings)
    contract.subscribe(lambda _event: save_state(contract.snapshot(), settings.state_file))
    keeper = Keeper(contract, args.caller)
    try:
        paid = keeper.run(args.interval, max_cycles=args.cycles)
    finally:
        contract.oracle.close()
    print(f"Payouts made: {paid}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="payout-keeper",
        description="Automated USD-denominated prize payout keeper.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=10.0, help="Price feed timeout seconds.")
    p.add_argument("--state", default=None, help="State file path (else STATE_FILE env).")
    p.add_argument(
        "--static-price",
        type=usd_to_fixed,
        default=None,
        help="Use a fixed USD price instead of the on-chain feed (e.g. 2500.00).",
    )
    p.add_argument(
        "--now", type=int, default=None, help="Unix time to act at (default: wall clock)."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("init", help="Create a new payout state file.")
    i.add_argument("--owner", required=True)
    i.add_argument("--trigger", required=True, help="Authorized trigger (keeper) address.")
    i.add_argument("--winner", required=True)
    i.add_argument("--prize-usd", required=True, type=usd_to_fixed, help="e.g. 100.00")
    i.add_argument("--force", action="store_true", help="Overwrite an existing file.")
    i.set_defaults(func=cmd_init)

    sub.add_parser("status", help="Show the payout state.").set_defaults(func=cmd_status)
    sub.add_parser("price", help="Read the current price quote.").set_defaults(func=cmd_price)
    sub.add_parser(
        "quote", help="Native amount the prize would pay right now."
    ).set_defaults(func=cmd_quote)

    f = sub.add_parser("fund", help="Owner deposit.")
    f.add_argument("--caller", required=True)
    f.add_argument("--amount", required=True, type=int, help="Amount in wei.")
    f.set_defaults(func=cmd_fund)

    r = sub.add_parser("receive", help="Plain incoming transfer.")
    r.add_argument("--amount", required=True, type=int, help="Amount in wei.")
    r.set_defaults(func=cmd_receive)

    w = sub.add_parser("withdraw", help="Owner withdrawal.")
    w.add_argument("--caller", required=True)
    w.add_argument("--amount", required=True, type=int, help="Amount in wei.")
    w.add_argument("--payee", required=True)
    w.set_defaults(func=cmd_withdraw)

    for name, func, help_text in (
        ("pause", cmd_pause, "Pause payouts."),
        ("resume", cmd_resume, "Resume payouts."),
    ):
        s = sub.add_parser(name, help=help_text)
        s.add_argument("--caller", required=True)
        s.set_defaults(func=func)

    st = sub.add_parser("set-trigger", help="Change the authorized trigger.")
    st.add_argument("--caller", required=True)
    st.add_argument("--address", required=True)
    st.set_defaults(func=cmd_set_trigger)

    sp = sub.add_parser("set-prize", help="Change the USD prize.")
    sp.add_argument("--caller", required=True)
    sp.add_argument("--prize-usd", required=True, type=usd_to_fixed)
    sp.set_defaults(func=cmd_set_prize)

    sw = sub.add_parser("set-winner", help="Change the winner.")
    sw.add_argument("--caller", required=True)
    sw.add_argument("--address", required=True)
    sw.set_defaults(func=cmd_set_winner)

    sub.add_parser(
        "check", help="Is the payout due? Exit code 0 when due, 3 when not."
    ).set_defaults(func=cmd_check)

    u = sub.add_parser("upkeep", help="Run the payout trigger once.")
    u.add_argument("--caller", required=True)
    u.set_defaults(func=cmd_upkeep)

    k = sub.add_parser("keep", help="Poll and trigger in a loop.")
    k.add_argument("--caller", required=True)
    k.add_argument("--interval", type=float, default=3600.0, help="Poll interval seconds.")
    k.add_argument("--cycles", type=int, default=None, help="Stop after N polls.")
    k.set_defaults(func=cmd_keep)

    return p


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except PayoutError as e:
        logging.getLogger("payout").error("Rejected (%s): %s", e.kind, e)
        code = 1
    raise SystemExit(code)
