from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple

from .addresses import display_address
from .errors import InsufficientParticipants
from .participation import Participant, format_amount
from .project_constants import MIN_PARTICIPANTS


@dataclass(frozen=True)
class DrawResult:
    winner: Participant
    txids: List[str]
    digest_hex: str
    digest_int: int
    winner_index: int


def compute_index(txids: Sequence[str]) -> Tuple[int, str, int]:
    """sha256("".join(txids)) read as a base-16 integer, mod len(txids)."""
    if not txids:
        raise ValueError("Cannot draw from an empty list.")
    digest_hex = hashlib.sha256("".join(txids).encode("utf-8")).hexdigest()
    digest_int = int(digest_hex, 16)
    return digest_int % len(txids), digest_hex, digest_int


def select_winner(
    participants: Sequence[Participant],
    min_participants: int = MIN_PARTICIPANTS,
) -> DrawResult:
    if min_participants < 1:
        raise ValueError("min_participants must be at least 1")
    if len(participants) < min_participants:
        raise InsufficientParticipants(
            f"Not enough participants: {len(participants)} < {min_participants}"
        )

    # Order is the ledger's insertion order; never re-sort here.
    txids = [p.txid for p in participants]
    index, digest_hex, digest_int = compute_index(txids)
    return DrawResult(
        winner=participants[index],
        txids=txids,
        digest_hex=digest_hex,
        digest_int=digest_int,
        winner_index=index,
    )


def build_audit(
    result: DrawResult,
    participants: Sequence[Participant],
    min_participants: int,
) -> Dict[str, Any]:
    return {
        "metadata": {
            "tool": "tron-raffle",
            "version": "1.0.0",
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "hash_algorithm": "sha256",
            "min_participants": min_participants,
            "participant_count": len(result.txids),
            "digest_hex": result.digest_hex,
            "digest_int": str(result.digest_int),  # big int; store as string
            "winner_index": result.winner_index,
        },
        "winner": {
            "txid": result.winner.txid,
            "address": result.winner.address,
            "address_base58": display_address(result.winner.address),
            "amount": format_amount(result.winner.amount),
        },
        # Entrants in draw order so anyone can re-run.
        "all_entrants": [
            {
                "index": i,
                "txid": p.txid,
                "address": p.address,
                "amount": format_amount(p.amount),
            }
            for i, p in enumerate(participants)
        ],
    }
