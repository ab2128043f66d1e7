from __future__ import annotations

from typing import Dict


class RaffleError(Exception):
    """Base for every failure surfaced to the caller of a raffle operation."""

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.kind, "message": self.message}


class OracleError(RaffleError):
    """TronGrid could not be reached or answered with something unusable."""


class TransactionInvalid(RaffleError):
    """TronGrid reports the transaction as unsuccessful."""


class AmountMismatch(RaffleError):
    pass


class AddressMismatch(RaffleError):
    pass


class InsufficientParticipants(RaffleError):
    pass


class DuplicateTransaction(RaffleError):
    """The transaction id already backs a recorded participation."""


class AuditMismatch(RaffleError):
    """Recomputing an audit file does not reproduce its recorded result."""
