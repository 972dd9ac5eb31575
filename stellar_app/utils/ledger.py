"""Boundary around the Soroban RPC server and the SDK transaction builders.

Every public method returns a :class:`LedgerResult` instead of raising, so the
UI actions only branch on explicit outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Literal, Optional, TypeVar

import requests
from stellar_sdk import Account, Keypair, SorobanServer, TransactionEnvelope
from stellar_sdk.exceptions import ConnectionError as SdkConnectionError
from stellar_sdk.soroban_rpc import SendTransactionStatus

from .envs import Settings
from .log import log
from .pool_tx import (
    PreparedTransaction,
    build_pool_deposit,
    build_pool_withdraw,
    liquidity_pool_id,
)

T = TypeVar("T")

ErrorKind = Literal["precondition", "transport", "ledger"]


@dataclass(frozen=True)
class LedgerResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    status_code: Optional[int] = None

    @classmethod
    def success(cls, value: T) -> "LedgerResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, *, status_code: Optional[int] = None
    ) -> "LedgerResult[T]":
        return cls(ok=False, error_kind=kind, message=message, status_code=status_code)


@dataclass(frozen=True)
class SubmittedTransaction:
    hash: str
    status: str


def describe_error(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__


def _error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, (requests.RequestException, ConnectionError, TimeoutError, SdkConnectionError)):
        return "transport"
    return "ledger"


class LedgerClient:
    """Thin wrapper over :class:`stellar_sdk.SorobanServer` for one network."""

    def __init__(self, settings: Settings, server: Any | None = None) -> None:
        self.settings = settings
        self._server = server

    @property
    def server(self) -> Any:
        if self._server is None:
            self._server = SorobanServer(self.settings.rpc_url)
        return self._server

    def _guard(self, operation: str, call: Callable[[], T], **context: Any) -> LedgerResult[T]:
        try:
            value = call()
        except Exception as exc:
            kind = _error_kind(exc)
            log(f"ledger.{operation}.error", kind=kind, err=describe_error(exc), **context)
            return LedgerResult.failure(kind, describe_error(exc))
        return LedgerResult.success(value)

    def load_account(self, public_key: str) -> LedgerResult[Account]:
        return self._guard(
            "load_account",
            lambda: self.server.load_account(public_key),
            public_key=public_key,
        )

    def pool_id(self, asset_name: str, issuer: str) -> LedgerResult[str]:
        return self._guard(
            "pool_id",
            lambda: liquidity_pool_id(asset_name, issuer),
            public_key=issuer,
            asset_name=asset_name,
        )

    def prepare_pool_deposit(
        self,
        account: Account,
        keypair: Keypair,
        *,
        asset_name: str,
        max_amount_a: str,
        max_amount_b: str,
    ) -> LedgerResult[PreparedTransaction]:
        return self._guard(
            "prepare_deposit",
            lambda: build_pool_deposit(
                account,
                keypair,
                asset_name=asset_name,
                max_amount_a=max_amount_a,
                max_amount_b=max_amount_b,
                network_passphrase=self.settings.network_passphrase,
                base_fee=self.settings.base_fee,
                timeout=self.settings.tx_timeout,
            ),
            public_key=keypair.public_key,
            asset_name=asset_name,
        )

    def prepare_pool_withdraw(
        self,
        account: Account,
        keypair: Keypair,
        *,
        pool_id: str,
        amount: str,
    ) -> LedgerResult[PreparedTransaction]:
        return self._guard(
            "prepare_withdraw",
            lambda: build_pool_withdraw(
                account,
                keypair,
                pool_id=pool_id,
                amount=amount,
                network_passphrase=self.settings.network_passphrase,
                base_fee=self.settings.base_fee,
                timeout=self.settings.tx_timeout,
            ),
            public_key=keypair.public_key,
            pool_id=pool_id,
        )

    def submit(self, envelope: TransactionEnvelope) -> LedgerResult[SubmittedTransaction]:
        result = self._guard("submit", lambda: self.server.send_transaction(envelope))
        if not result.ok:
            return LedgerResult.failure(result.error_kind or "ledger", result.message)

        response = result.value
        status = getattr(response, "status", None)
        status_text = getattr(status, "value", status) or ""
        tx_hash = str(getattr(response, "hash", "") or envelope.hash_hex())

        if status_text == SendTransactionStatus.ERROR.value:
            detail = getattr(response, "error_result_xdr", None) or "no error result"
            log("ledger.submit.rejected", severity="error", hash=tx_hash, status=status_text, detail=detail)
            return LedgerResult.failure(
                "ledger", f"Transaction rejected ({status_text}): {detail}"
            )

        if status_text == SendTransactionStatus.TRY_AGAIN_LATER.value:
            log("ledger.submit.warning", hash=tx_hash, status=status_text)
        else:
            log("ledger.submit.accepted", hash=tx_hash, status=status_text)

        return LedgerResult.success(SubmittedTransaction(hash=tx_hash, status=str(status_text)))
