"""
Project-wide immutable parameters for the TRON raffle.

These values define the public rules of the raffle.
Changing them changes eligibility or the draw and MUST be publicly announced.
"""

from decimal import Decimal

# TronGrid amounts are integers in the smallest unit (6 decimals)
UNIT_DIVISOR = 1_000_000

# Amounts are matched down to the millis the issuer promises
AMOUNT_PLACES = 3
AMOUNT_QUANTUM = Decimal("0.001")

# Target amounts fall in [7.000, 7.009]
ENTRY_AMOUNT_BASE = Decimal("7")
ENTRY_AMOUNT_BAND_MILLIS = 10

# 3 random bytes -> 6 upper-case hex characters
ENTRY_CODE_BYTES = 3

# Validated participants required before a draw may run
MIN_PARTICIPANTS = 150

DEFAULT_TRONGRID_API = "https://api.trongrid.io"

# Append-only participant ledger (SQLite, insertion order is draw order)
DEFAULT_LEDGER_FILE = "participants.db"

NEW_PARTICIPATION_EVENT = "new-participation"
