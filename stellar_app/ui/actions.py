"""Button handlers for the liquidity pool page.

Every handler follows the same shape: check its inputs, report a precondition
error without touching any loading flag when something is missing, otherwise
raise its loading flag, call the network boundary, update state, notify, and
drop the flag again no matter how the call ended.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

import streamlit as st
from stellar_sdk import Keypair

from ..utils.faucet import FaucetClient
from ..utils.ledger import LedgerClient, LedgerResult
from ..utils.locks import AccountBusy, AccountGate
from ..utils.log import log
from .notifications import Notifier
from .state import SessionState

T = TypeVar("T")

EXPLORER_LINK_LABEL = "View Transaction"

MSG_NEED_KEYPAIR = "Please generate a keypair first."
MSG_NEED_POOL_INPUTS = "Please ensure you have a keypair, asset name, and token amounts."
MSG_NEED_WITHDRAW_INPUTS = (
    "Please ensure you have a keypair, liquidity pool ID, and withdrawal amount."
)


def _present(value: Any) -> bool:
    return value is not None and str(value) != ""


class PoolActions:
    """The four independent actions behind the page buttons."""

    def __init__(
        self,
        state: SessionState,
        notifier: Notifier,
        *,
        ledger: LedgerClient,
        faucet: FaucetClient,
        gate: AccountGate | None = None,
        keypair_factory: Callable[[], Keypair] = Keypair.random,
    ) -> None:
        self.state = state
        self.notifier = notifier
        self.ledger = ledger
        self.faucet = faucet
        self.gate = gate
        self._keypair_factory = keypair_factory

    @contextmanager
    def _loading(self, action: str) -> Iterator[None]:
        self.state.set_loading(action, True)
        try:
            yield
        finally:
            self.state.set_loading(action, False)

    def _precondition_failed(self, action: str, message: str) -> bool:
        log("ui.action.precondition", severity="warning", action=action, message=message)
        self.notifier.error(message)
        return False

    def _failed(self, action: str, prefix: str, result: LedgerResult[Any]) -> bool:
        log(
            f"ui.{action}.failed",
            kind=result.error_kind,
            err=result.message,
            public_key=self.state.public_key,
        )
        self.notifier.error(f"{prefix}: {result.message}")
        return False

    @contextmanager
    def _account_gate(self, account: str) -> Iterator[None]:
        if self.gate is None:
            yield
            return
        with self.gate.hold(account):
            yield

    # generate

    def generate_keypair(self) -> Keypair:
        with self._loading("generate_keypair"):
            keypair = self._keypair_factory()
            self.state.keypair = keypair
        log("ui.keypair.generated", public_key=keypair.public_key)
        self.notifier.info(f"Generated new keypair. Public key: {keypair.public_key}")
        return keypair

    # fund

    def fund_account(self) -> bool:
        keypair = self.state.keypair
        if keypair is None:
            return self._precondition_failed("fund_account", MSG_NEED_KEYPAIR)

        public_key = keypair.public_key
        with self._loading("fund_account"):
            result = self.faucet.fund(public_key)

        if result.ok:
            self.notifier.success(f"Account {public_key} successfully funded.")
            return True

        log("ui.fund_account.failed", kind=result.error_kind, err=result.message, public_key=public_key)
        if result.status_code is not None:
            self.notifier.error(
                f"Something went wrong funding account: {public_key}. ({result.message})"
            )
        else:
            self.notifier.error(f"Error funding account {public_key}: {result.message}")
        return False

    # create pool

    def create_liquidity_pool(self) -> bool:
        keypair = self.state.keypair
        asset_name = self.state.field("asset_name")
        amount_a = self.state.field("token_a_amount")
        amount_b = self.state.field("token_b_amount")
        if keypair is None or not all(_present(v) for v in (asset_name, amount_a, amount_b)):
            return self._precondition_failed("create_liquidity_pool", MSG_NEED_POOL_INPUTS)

        try:
            with self._account_gate(keypair.public_key):
                with self._loading("create_liquidity_pool"):
                    return self._create_pool(keypair, asset_name, amount_a, amount_b)
        except AccountBusy as exc:
            return self._precondition_failed("create_liquidity_pool", str(exc))

    def _create_pool(self, keypair: Keypair, asset_name: str, amount_a: str, amount_b: str) -> bool:
        prefix = "Error creating Liquidity Pool"

        account = self.ledger.load_account(keypair.public_key)
        if not account.ok:
            return self._failed("create_liquidity_pool", prefix, account)

        pool_id_result = self.ledger.pool_id(asset_name, keypair.public_key)
        if not pool_id_result.ok:
            return self._failed("create_liquidity_pool", prefix, pool_id_result)

        pool_id = pool_id_result.value
        self.state.pool_id = pool_id
        log("ui.create_liquidity_pool.pool_id", pool_id=pool_id, asset_name=asset_name)

        prepared = self.ledger.prepare_pool_deposit(
            account.value,
            keypair,
            asset_name=asset_name,
            max_amount_a=amount_a,
            max_amount_b=amount_b,
        )
        if not prepared.ok:
            return self._failed("create_liquidity_pool", prefix, prepared)

        submitted = self.ledger.submit(prepared.value.envelope)
        if not submitted.ok:
            return self._failed("create_liquidity_pool", prefix, submitted)

        tx_hash = submitted.value.hash
        log("ui.create_liquidity_pool.submitted", pool_id=pool_id, tx_hash=tx_hash)
        self.notifier.success(
            "Liquidity Pool created.",
            link_url=self.ledger.settings.explorer_link(tx_hash),
            link_label=EXPLORER_LINK_LABEL,
        )
        return True

    # withdraw

    def withdraw_from_pool(self) -> bool:
        keypair = self.state.keypair
        pool_id = self.state.pool_id
        amount = self.state.field("withdraw_amount")
        if keypair is None or not _present(pool_id) or not _present(amount):
            return self._precondition_failed("withdraw_from_pool", MSG_NEED_WITHDRAW_INPUTS)

        try:
            with self._account_gate(keypair.public_key):
                with self._loading("withdraw_from_pool"):
                    return self._withdraw(keypair, pool_id, amount)
        except AccountBusy as exc:
            return self._precondition_failed("withdraw_from_pool", str(exc))

    def _withdraw(self, keypair: Keypair, pool_id: str, amount: str) -> bool:
        prefix = "Error withdrawing from Liquidity Pool"

        account = self.ledger.load_account(keypair.public_key)
        if not account.ok:
            return self._failed("withdraw_from_pool", prefix, account)

        prepared = self.ledger.prepare_pool_withdraw(
            account.value, keypair, pool_id=pool_id, amount=amount
        )
        if not prepared.ok:
            return self._failed("withdraw_from_pool", prefix, prepared)

        submitted = self.ledger.submit(prepared.value.envelope)
        if not submitted.ok:
            return self._failed("withdraw_from_pool", prefix, submitted)

        tx_hash = submitted.value.hash
        log("ui.withdraw_from_pool.submitted", pool_id=pool_id, tx_hash=tx_hash)
        self.notifier.success(
            "Withdrawal successful.",
            link_url=self.ledger.settings.explorer_link(tx_hash),
            link_label=EXPLORER_LINK_LABEL,
        )
        return True


def run_ui_action(
    action: Callable[[], T],
    *,
    description: str,
    spinner: str | None = None,
) -> T | None:
    """Run a button handler from a Streamlit callback.

    Handlers report their own failures through notifications; anything that
    still escapes is logged and rendered as an error instead of killing the run.
    """

    try:
        if spinner:
            with st.spinner(spinner):
                return action()
        return action()
    except Exception as exc:  # pragma: no cover - UI feedback
        log("ui.action.error", action=description, exc=exc, err=str(exc))
        st.error(f"Unexpected error in {description}: {exc}")
        return None
