from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from .errors import OracleError, TransactionInvalid
from .project_constants import AMOUNT_QUANTUM, UNIT_DIVISOR

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedTransaction:
    txid: str
    success: bool
    amount: Decimal
    sender: str


class TronGridClient:
    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["TRON-PRO-API-KEY"] = api_key
        self.client = httpx.Client(
            timeout=timeout_s, headers=headers, transport=transport
        )

    def close(self) -> None:
        self.client.close()

    def get_transaction(self, txid: str) -> Dict[str, Any]:
        """Fetches one transaction. Single attempt; failures surface immediately."""
        url = f"{self.api_url}/v1/transaction/{txid}"
        try:
            resp = self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise OracleError(f"TronGrid request for {txid} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise OracleError(f"TronGrid returned non-JSON body for {txid}") from e
        if not isinstance(data, dict):
            raise OracleError(f"TronGrid returned malformed payload for {txid}")
        return data


def extract_transfer(txid: str, payload: Dict[str, Any]) -> VerifiedTransaction:
    """
    Payload shape:
    {"success": true,
     "data": [{"raw_data": {"contract": [{"parameter": {"value": {
         "amount": 7034000, "owner_address": "41..."}}}]}}]}
    """
    if not isinstance(payload, dict) or "success" not in payload:
        raise OracleError(f"Malformed payload for {txid}: no success flag")
    if not payload["success"]:
        raise TransactionInvalid(f"Transaction {txid} is not valid")

    try:
        value = payload["data"][0]["raw_data"]["contract"][0]["parameter"]["value"]
        raw_amount = value["amount"]
        sender = value["owner_address"]
    except (KeyError, IndexError, TypeError) as e:
        raise OracleError(f"Malformed payload for {txid}: missing {e}") from e

    if isinstance(raw_amount, bool) or not isinstance(raw_amount, int) or raw_amount < 0:
        raise OracleError(f"Malformed payload for {txid}: amount={raw_amount!r}")
    if not isinstance(sender, str):
        raise OracleError(f"Malformed payload for {txid}: owner_address={sender!r}")

    amount = Decimal(raw_amount) / Decimal(UNIT_DIVISOR)
    try:
        amount.quantize(AMOUNT_QUANTUM)
    except InvalidOperation as e:
        raise OracleError(f"Amount out of range for {txid}: {raw_amount}") from e
    return VerifiedTransaction(txid=txid, success=True, amount=amount, sender=sender)


def verify_payment(client: TronGridClient, txid: str) -> VerifiedTransaction:
    payload = client.get_transaction(txid)
    verified = extract_transfer(txid, payload)
    log.debug("Verified %s: amount=%s sender=%s", txid, verified.amount, verified.sender)
    return verified
