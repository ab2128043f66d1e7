from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .project_constants import DEFAULT_LEDGER_FILE, DEFAULT_TRONGRID_API


@dataclass(frozen=True)
class Settings:
    trongrid_api: str
    api_key: str | None
    ledger_path: str

    @staticmethod
    def from_env(
        trongrid_api_override: str | None = None,
        ledger_path_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        # CLI flags win over env; env wins over the public defaults.
        trongrid_api = (
            trongrid_api_override
            or os.getenv("TRONGRID_API", "").strip()
            or DEFAULT_TRONGRID_API
        )
        ledger_path = (
            ledger_path_override
            or os.getenv("RAFFLE_LEDGER_PATH", "").strip()
            or DEFAULT_LEDGER_FILE
        )
        api_key = os.getenv("TRONGRID_API_KEY", "").strip() or None

        return Settings(
            trongrid_api=trongrid_api, api_key=api_key, ledger_path=ledger_path
        )
