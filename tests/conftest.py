"""Shared fixtures: a fake TronGrid served through httpx.MockTransport."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

import httpx
import pytest

from tron_raffle.participation import Participant
from tron_raffle.trongrid import TronGridClient

SENDER = "41a614f803b6fd780986a42c78ec9c7f77e6ded13c"
OTHER_SENDER = "41a614f803b6fd780986a42c78ec9c7f77e6ded13d"
API_URL = "https://trongrid.test"


def tx_payload(
    amount: Any = 7_034_000, owner: str = SENDER, success: bool = True
) -> Dict[str, Any]:
    return {
        "success": success,
        "data": [
            {
                "raw_data": {
                    "contract": [
                        {"parameter": {"value": {"amount": amount, "owner_address": owner}}}
                    ]
                }
            }
        ],
    }


class FakeTronGrid:
    """Routes /v1/transaction/{txid} to canned responses and records requests."""

    def __init__(self) -> None:
        self.responses: Dict[str, httpx.Response] = {}
        self.requests: List[httpx.Request] = []

    def add(self, txid: str, payload: Any, status_code: int = 200) -> None:
        self.responses[txid] = httpx.Response(status_code, json=payload)

    def add_raw(self, txid: str, content: bytes, status_code: int = 200) -> None:
        self.responses[txid] = httpx.Response(status_code, content=content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        txid = request.url.path.rsplit("/", 1)[-1]
        if txid not in self.responses:
            return httpx.Response(404, json={"success": False})
        return self.responses[txid]

    def client(self, api_key: str | None = None) -> TronGridClient:
        return TronGridClient(
            API_URL, api_key=api_key, transport=httpx.MockTransport(self.handler)
        )


@pytest.fixture
def tron() -> FakeTronGrid:
    return FakeTronGrid()


@pytest.fixture
def make_participants():
    def _make(txids: List[str]) -> List[Participant]:
        return [
            Participant(
                entry_code=f"C{i:05d}",
                txid=txid,
                address=SENDER,
                amount=Decimal("7.001"),
            )
            for i, txid in enumerate(txids)
        ]

    return _make
