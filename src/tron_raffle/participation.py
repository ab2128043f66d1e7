from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Callable, Dict

from .errors import AddressMismatch, AmountMismatch, TransactionInvalid
from .project_constants import AMOUNT_QUANTUM, NEW_PARTICIPATION_EVENT
from .trongrid import TronGridClient, VerifiedTransaction, verify_payment

if TYPE_CHECKING:
    from .ledger import ParticipantLedger

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipationClaim:
    entry_code: str
    txid: str
    address: str
    amount: Decimal


@dataclass(frozen=True)
class Participant:
    entry_code: str
    txid: str
    address: str
    amount: Decimal
    validated: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_code": self.entry_code,
            "txid": self.txid,
            "address": self.address,
            "amount": format_amount(self.amount),
            "validated": self.validated,
        }


Publisher = Callable[[str, Participant], None]


def parse_amount(text: Any) -> Decimal:
    try:
        value = Decimal(str(text).strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal amount: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a decimal amount: {text!r}")
    if value < 0:
        raise ValueError(f"Amount must not be negative: {text!r}")
    try:
        format_amount(value)
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: {text!r}") from e
    return value


def format_amount(value: Decimal) -> str:
    return str(value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP))


def match_claim(claim: ParticipationClaim, verified: VerifiedTransaction) -> Participant:
    """
    Accepts the claim only if the on-chain amount agrees to three decimals
    and the sender is the exact claimed address (case-sensitive).
    Amount is checked first.
    """
    if not verified.success:
        raise TransactionInvalid(f"Transaction {claim.txid} is not valid")
    try:
        claimed = format_amount(claim.amount)
        paid = format_amount(verified.amount)
    except InvalidOperation as e:
        raise AmountMismatch(
            f"Amount for {claim.txid} cannot be compared at three decimals"
        ) from e
    if claimed != paid:
        raise AmountMismatch(
            f"Amount mismatch for {claim.txid}: claimed {claimed}, paid {paid}"
        )
    if claim.address != verified.sender:
        raise AddressMismatch(
            f"Address mismatch for {claim.txid}: claimed {claim.address}, "
            f"sender {verified.sender}"
        )
    return Participant(
        entry_code=claim.entry_code,
        txid=claim.txid,
        address=verified.sender,
        amount=verified.amount,
        validated=True,
    )


def log_publisher(event: str, participant: Participant) -> None:
    logging.getLogger("broadcast").info("%s %s", event, participant.to_dict())


def validate_participation(
    claim: ParticipationClaim,
    client: TronGridClient,
    ledger: "ParticipantLedger",
    publish: Publisher = log_publisher,
) -> Participant:
    verified = verify_payment(client, claim.txid)
    participant = match_claim(claim, verified)
    ledger.insert(participant)
    log.info("Recorded participation %s for code %s", claim.txid, claim.entry_code)

    # Best-effort: a subscriber failure never undoes a recorded participation.
    try:
        publish(NEW_PARTICIPATION_EVENT, participant)
    except Exception:
        log.exception("Broadcast of %s failed", claim.txid)
    return participant
