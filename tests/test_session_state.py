from __future__ import annotations

import pytest
from stellar_sdk import Keypair

from stellar_app.ui.state import (
    BASE_SESSION_STATE,
    LOADING_KEYS,
    SessionState,
    ensure_keys,
)


def test_ensure_keys_seeds_defaults_without_overwriting():
    store = {"asset_name": "XYZ"}

    ensure_keys({"withdraw_amount": "5", "token_a_amount": None}, state=store)

    assert store["asset_name"] == "XYZ"
    assert store["withdraw_amount"] == "5"
    assert store["token_a_amount"] == BASE_SESSION_STATE["token_a_amount"]
    assert store["loading"] == {key: False for key in LOADING_KEYS}


def test_keypair_and_public_key():
    state = SessionState({})
    assert state.keypair is None
    assert state.public_key is None

    keypair = Keypair.random()
    state.keypair = keypair

    assert state.keypair is keypair
    assert state.public_key == keypair.public_key


def test_form_fields_are_plain_strings():
    state = SessionState({})

    state.set_field("token_a_amount", 100)
    state.set_field("withdraw_amount", None)

    assert state.field("token_a_amount") == "100"
    assert state.field("withdraw_amount") == ""
    with pytest.raises(KeyError):
        state.field("liquidity_pool_id")


def test_pool_id_is_user_editable():
    store: dict = {}
    state = SessionState(store)

    state.pool_id = "deadbeef"
    assert store["liquidity_pool_id"] == "deadbeef"

    store["liquidity_pool_id"] = "typed-by-user"
    assert state.pool_id == "typed-by-user"


def test_loading_flags_are_independent():
    state = SessionState({})

    state.set_loading("fund_account", True)

    assert state.is_loading("fund_account") is True
    assert state.is_loading("create_liquidity_pool") is False
    flags = state.loading_flags()
    flags["fund_account"] = False
    assert state.is_loading("fund_account") is True

    with pytest.raises(KeyError):
        state.set_loading("launch_rocket", True)


def test_notification_queue_drains_once():
    state = SessionState({})

    state.push_notification("one")
    state.push_notification("two")

    assert state.pop_notifications() == ["one", "two"]
    assert state.pop_notifications() == []
