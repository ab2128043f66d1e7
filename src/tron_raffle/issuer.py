from __future__ import annotations

import secrets
from dataclasses import dataclass
from decimal import Decimal

from .project_constants import (
    AMOUNT_QUANTUM,
    ENTRY_AMOUNT_BAND_MILLIS,
    ENTRY_AMOUNT_BASE,
    ENTRY_CODE_BYTES,
)


@dataclass(frozen=True)
class EntryCode:
    code: str
    amount: Decimal

    @property
    def amount_str(self) -> str:
        return str(self.amount.quantize(AMOUNT_QUANTUM))


def issue_entry_code(nbytes: int = ENTRY_CODE_BYTES) -> EntryCode:
    """
    Returns a fresh entry code and the exact amount the participant must pay.
    Nothing is stored; collisions are only made unlikely, not checked.
    """
    code = secrets.token_hex(nbytes).upper()
    millis = secrets.randbelow(ENTRY_AMOUNT_BAND_MILLIS)
    amount = (ENTRY_AMOUNT_BASE + Decimal(millis) * AMOUNT_QUANTUM).quantize(
        AMOUNT_QUANTUM
    )
    return EntryCode(code=code, amount=amount)
