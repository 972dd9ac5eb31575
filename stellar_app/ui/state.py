"""Session state helpers for the liquidity pool page."""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

import streamlit as st
from stellar_sdk import Keypair

LOADING_KEYS: tuple[str, ...] = (
    "generate_keypair",
    "fund_account",
    "create_liquidity_pool",
    "withdraw_from_pool",
)

FORM_FIELDS: tuple[str, ...] = (
    "asset_name",
    "token_a_amount",
    "token_b_amount",
    "withdraw_amount",
)

POOL_ID_KEY = "liquidity_pool_id"
KEYPAIR_KEY = "keypair"
STATUS_KEY = "status_message"
LOADING_KEY = "loading"
_NOTIFICATIONS_KEY = "_pending_notifications"

BASE_SESSION_STATE: dict[str, Any] = {
    KEYPAIR_KEY: None,
    POOL_ID_KEY: "",
    STATUS_KEY: "",
    "asset_name": "",
    "token_a_amount": "",
    "token_b_amount": "",
    "withdraw_amount": "",
    "activity_limit": 50,
}


def _default_loading() -> dict[str, bool]:
    return {key: False for key in LOADING_KEYS}


def ensure_keys(
    overrides: Mapping[str, Any] | None = None,
    state: MutableMapping[str, Any] | None = None,
) -> None:
    """Populate ``st.session_state`` (or ``state``) with the page defaults."""

    defaults = dict(BASE_SESSION_STATE)
    if overrides:
        for key, value in overrides.items():
            if value is None:
                continue
            defaults[key] = value

    target = st.session_state if state is None else state
    for key, value in defaults.items():
        if key not in target:
            target[key] = value
    if LOADING_KEY not in target:
        target[LOADING_KEY] = _default_loading()
    if _NOTIFICATIONS_KEY not in target:
        target[_NOTIFICATIONS_KEY] = []


class SessionState:
    """Typed accessors over the per-browser-session mapping.

    Writes are plain assignments; nothing here validates values. Streamlit
    re-renders the page after every callback, which is how the view learns
    about changes.
    """

    def __init__(self, store: MutableMapping[str, Any] | None = None) -> None:
        self._store = st.session_state if store is None else store
        ensure_keys(state=self._store)

    @property
    def store(self) -> MutableMapping[str, Any]:
        return self._store

    # keypair

    @property
    def keypair(self) -> Keypair | None:
        return self._store.get(KEYPAIR_KEY)

    @keypair.setter
    def keypair(self, value: Keypair | None) -> None:
        self._store[KEYPAIR_KEY] = value

    @property
    def public_key(self) -> str | None:
        keypair = self.keypair
        return keypair.public_key if keypair is not None else None

    # pool id

    @property
    def pool_id(self) -> str:
        return str(self._store.get(POOL_ID_KEY) or "")

    @pool_id.setter
    def pool_id(self, value: str) -> None:
        self._store[POOL_ID_KEY] = value

    # form fields

    def field(self, name: str) -> str:
        if name not in FORM_FIELDS:
            raise KeyError(f"unknown form field: {name}")
        value = self._store.get(name)
        return "" if value is None else str(value)

    def set_field(self, name: str, value: Any) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(f"unknown form field: {name}")
        self._store[name] = "" if value is None else str(value)

    # loading flags

    def loading_flags(self) -> dict[str, bool]:
        flags = _default_loading()
        flags.update(self._store.get(LOADING_KEY) or {})
        return flags

    def is_loading(self, action: str) -> bool:
        return bool(self.loading_flags().get(action, False))

    def set_loading(self, action: str, value: bool) -> None:
        if action not in LOADING_KEYS:
            raise KeyError(f"unknown action: {action}")
        flags = self.loading_flags()
        flags[action] = bool(value)
        self._store[LOADING_KEY] = flags

    # status line

    @property
    def status_message(self) -> str:
        return str(self._store.get(STATUS_KEY) or "")

    @status_message.setter
    def status_message(self, value: str) -> None:
        self._store[STATUS_KEY] = value

    # notification queue, drained by the page on every run

    def push_notification(self, notification: Any) -> None:
        pending = list(self._store.get(_NOTIFICATIONS_KEY) or [])
        pending.append(notification)
        self._store[_NOTIFICATIONS_KEY] = pending

    def pop_notifications(self) -> list[Any]:
        pending = list(self._store.get(_NOTIFICATIONS_KEY) or [])
        self._store[_NOTIFICATIONS_KEY] = []
        return pending
