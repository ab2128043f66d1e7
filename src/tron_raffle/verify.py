from __future__ import annotations

import json
from typing import Any, Dict

from .draw import compute_index
from .errors import AuditMismatch


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        try:
            audit = json.load(f)
        except ValueError as e:
            raise AuditMismatch(f"Audit is not valid JSON: {e}") from e

    try:
        meta = audit["metadata"]
        entrants = audit["all_entrants"]
        txids = [e["txid"] for e in entrants]
        addresses = [e["address"] for e in entrants]
        count_expected = int(meta["participant_count"])
        min_participants = int(meta["min_participants"])
        digest_expected = meta["digest_hex"]
        index_expected = int(meta["winner_index"])
        winner_txid_expected = audit["winner"]["txid"]
        winner_address_expected = audit["winner"]["address"]
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise AuditMismatch(f"Audit is missing or has malformed field: {e}") from e

    if len(txids) != count_expected:
        raise AuditMismatch(
            f"Entrant count mismatch: audit={count_expected} recomputed={len(txids)}"
        )
    if not txids or len(txids) < min_participants:
        raise AuditMismatch(
            f"Draw ran below threshold: {len(txids)} < {min_participants}"
        )

    index, digest_hex, digest_int = compute_index(txids)
    if digest_hex != digest_expected:
        raise AuditMismatch(
            f"Digest mismatch: audit={digest_expected} recomputed={digest_hex}"
        )

    if index != index_expected:
        raise AuditMismatch(
            f"Winner index mismatch: audit={index_expected} recomputed={index}"
        )

    if txids[index] != winner_txid_expected:
        raise AuditMismatch(
            f"Winner mismatch: audit={winner_txid_expected} recomputed={txids[index]}"
        )
    if addresses[index] != winner_address_expected:
        raise AuditMismatch(
            f"Winner address mismatch: audit={winner_address_expected} "
            f"recomputed={addresses[index]}"
        )

    return {
        "ok": True,
        "digest_hex": digest_hex,
        "digest_int": digest_int,
        "winner_index": index,
        "winner_txid": txids[index],
        "winner_address": addresses[index],
        "participant_count": len(txids),
    }
