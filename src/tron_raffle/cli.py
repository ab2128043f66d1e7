from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict

from .addresses import display_address
from .config import Settings
from .draw import build_audit, select_winner
from .errors import AmountMismatch, RaffleError
from .issuer import issue_entry_code
from .ledger import ParticipantLedger
from .participation import (
    ParticipationClaim,
    format_amount,
    log_publisher,
    parse_amount,
    validate_participation,
)
from .project_constants import MIN_PARTICIPANTS
from .trongrid import TronGridClient
from .verify import verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _emit(obj: Dict[str, Any]) -> None:
    print(json.dumps(obj, indent=2))


def _fail(err: RaffleError) -> int:
    logging.getLogger("raffle").warning("%s: %s", err.kind, err.message)
    _emit(err.to_dict())
    return 1


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(
        trongrid_api_override=args.trongrid_api,
        ledger_path_override=args.ledger,
    )


def cmd_issue(args: argparse.Namespace) -> int:
    entry = issue_entry_code()
    _emit({"code": entry.code, "amount": entry.amount_str})
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("validate")

    try:
        amount = parse_amount(args.amount)
    except ValueError as e:
        return _fail(AmountMismatch(str(e)))

    claim = ParticipationClaim(
        entry_code=args.code,
        txid=args.txid,
        address=args.address,
        amount=amount,
    )
    ledger = ParticipantLedger(settings.ledger_path)

    client = TronGridClient(
        settings.trongrid_api, api_key=settings.api_key, timeout_s=args.timeout
    )
    try:
        participant = validate_participation(claim, client, ledger, log_publisher)
    except RaffleError as e:
        return _fail(e)
    finally:
        client.close()
        ledger.close()

    log.info("Ledger            : %s", settings.ledger_path)
    _emit(
        {
            "message": "participation validated and recorded",
            "txid": participant.txid,
            "address": participant.address,
            "address_base58": display_address(participant.address),
            "amount": format_amount(participant.amount),
        }
    )
    return 0


def cmd_draw(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("draw")

    ledger = ParticipantLedger(settings.ledger_path)
    try:
        participants = ledger.validated_participants()
    finally:
        ledger.close()
    log.info("Validated entrants: %d", len(participants))

    try:
        result = select_winner(participants, min_participants=args.min_participants)
    except RaffleError as e:
        return _fail(e)

    audit = build_audit(result, participants, args.min_participants)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    print("========================================")
    print("VERIFIABLE TRON RAFFLE DRAW")
    print("========================================")
    print(f"Entrants      : {len(result.txids)}")
    print(f"SHA-256       : {result.digest_hex}")
    print(f"Winner index  : {result.winner_index}")
    print("----------------------------------------")
    print("WINNER")
    print(f"TXID          : {result.winner.txid}")
    print(f"Address       : {audit['winner']['address_base58']}")
    print(f"Amount        : {audit['winner']['amount']}")
    print("----------------------------------------")
    print(f"Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    try:
        result = verify_audit(args.audit)
    except RaffleError as e:
        return _fail(e)
    print("AUDIT VERIFIED")
    print(f"Winner TXID   : {result['winner_txid']}")
    print(f"Winner index  : {result['winner_index']}")
    print(f"Entrants      : {result['participant_count']}")
    print(f"SHA-256       : {result['digest_hex']}")
    return 0


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from e
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tron-raffle",
        description="Verifiable raffle over TRON payment proofs.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--trongrid-api", default=None, help="Override TronGrid URL (else use env)."
    )
    p.add_argument(
        "--ledger", default=None, help="Participant ledger path (else use env)."
    )
    p.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("issue", help="Issue an entry code and target amount.")
    i.set_defaults(func=cmd_issue)

    v = sub.add_parser("validate", help="Validate a payment and record the entrant.")
    v.add_argument("--code", required=True, help="Entry code from `issue`.")
    v.add_argument("--txid", required=True, help="Transaction id of the payment.")
    v.add_argument("--address", required=True, help="Sender address as on chain.")
    v.add_argument(
        "--amount", required=True, help="Amount paid, e.g. 7.034"
    )
    v.set_defaults(func=cmd_validate)

    d = sub.add_parser("draw", help="Run the draw and write an audit JSON.")
    d.add_argument(
        "--min-participants",
        type=_positive_int,
        default=MIN_PARTICIPANTS,
        help=f"Minimum validated entrants (default {MIN_PARTICIPANTS}).",
    )
    d.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    d.set_defaults(func=cmd_draw)

    a = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    a.add_argument("--audit", required=True, help="Path to audit.json.")
    a.set_defaults(func=cmd_verify)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
