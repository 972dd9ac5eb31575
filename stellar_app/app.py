from __future__ import annotations

import sys
from pathlib import Path

import requests
import streamlit as st

if __package__ in (None, ""):
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

from stellar_app.ui.actions import PoolActions, run_ui_action
from stellar_app.ui.components import (
    account_card,
    action_button,
    activity_log,
    inject_css,
    render_notifications,
    status_line,
)
from stellar_app.ui.notifications import Notifier
from stellar_app.ui.state import SessionState
from stellar_app.utils.envs import Settings, get_settings
from stellar_app.utils.faucet import FaucetClient
from stellar_app.utils.http_client import create_http_session
from stellar_app.utils.ledger import LedgerClient
from stellar_app.utils.locks import AccountGate

PAGE_TITLE = "Manage Liquidity Pool"


@st.cache_resource(show_spinner=False)
def cached_account_gate() -> AccountGate:
    """Process-wide gate shared by every browser session."""

    return AccountGate()


@st.cache_resource(show_spinner=False)
def cached_http_session() -> requests.Session:
    return create_http_session()


def build_actions(state: SessionState, settings: Settings) -> PoolActions:
    gate = cached_account_gate() if settings.serialize_ledger_actions else None
    return PoolActions(
        state,
        Notifier(state),
        ledger=LedgerClient(settings),
        faucet=FaucetClient(settings, session=cached_http_session()),
        gate=gate,
    )


def _callback(actions: PoolActions, name: str, spinner: str):
    handler = getattr(actions, name)

    def _run() -> None:
        run_ui_action(handler, description=name, spinner=spinner)

    return _run


def render_page(actions: PoolActions) -> None:
    state = actions.state

    st.markdown(
        f"<h2 style='text-align:center;font-weight:600'>{PAGE_TITLE}</h2>",
        unsafe_allow_html=True,
    )
    account_card(state)
    st.write("")

    action_button(
        state, "generate_keypair", _callback(actions, "generate_keypair", "Generating keypair…")
    )
    action_button(
        state,
        "fund_account",
        _callback(actions, "fund_account", "Requesting testnet funds…"),
        primary=False,
    )

    st.text_input("Asset Name", key="asset_name")
    st.text_input("Token A Amount (XLM)", key="token_a_amount")
    st.text_input("Token B Amount (Custom Asset)", key="token_b_amount")
    action_button(
        state,
        "create_liquidity_pool",
        _callback(actions, "create_liquidity_pool", "Submitting pool deposit…"),
    )

    st.text_input("Liquidity Pool ID", key="liquidity_pool_id")
    st.text_input("Withdraw Amount", key="withdraw_amount")
    action_button(
        state,
        "withdraw_from_pool",
        _callback(actions, "withdraw_from_pool", "Submitting withdrawal…"),
    )

    status_line(state)
    render_notifications(actions.notifier)
    activity_log(int(state.store.get("activity_limit") or 50))


def main() -> None:
    st.set_page_config(page_title=PAGE_TITLE, page_icon="💧", layout="centered")
    inject_css()
    state = SessionState()
    render_page(build_actions(state, get_settings()))


if __name__ == "__main__":
    main()
