from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from .envs import Settings
from .http_client import create_http_session
from .ledger import LedgerResult, describe_error
from .log import log


@dataclass(frozen=True)
class FundingReceipt:
    account: str
    status_code: int


class FaucetClient:
    """Friendbot-style faucet: ``GET <faucet_url>?addr=<account>`` funds the account."""

    def __init__(self, settings: Settings, session: Any | None = None) -> None:
        self.settings = settings
        self._session = session

    @property
    def session(self) -> Any:
        if self._session is None:
            self._session = create_http_session()
        return self._session

    def fund(self, account: str) -> LedgerResult[FundingReceipt]:
        try:
            response = self.session.get(
                self.settings.faucet_url,
                params={"addr": account},
                timeout=self.settings.http_timeout,
            )
        except requests.RequestException as exc:
            log("faucet.request.error", public_key=account, err=describe_error(exc))
            return LedgerResult.failure("transport", describe_error(exc))

        status_code = int(getattr(response, "status_code", 0) or 0)
        if not 200 <= status_code < 300:
            log("faucet.response.error", public_key=account, status_code=status_code)
            return LedgerResult.failure(
                "transport", f"HTTP {status_code}", status_code=status_code
            )

        log("faucet.funded", public_key=account, status_code=status_code)
        return LedgerResult.success(FundingReceipt(account=account, status_code=status_code))
