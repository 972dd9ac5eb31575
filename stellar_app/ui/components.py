"""Streamlit building blocks for the liquidity pool page."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

import streamlit as st

from ..utils.log import read_tail
from .notifications import Notifier
from .state import SessionState

THEME_CSS = """
.block-container { max-width: 720px; padding-top: 2rem; padding-bottom: 2rem; }
.stButton > button { border-radius: 8px; text-transform: none; font-weight: 600; height: 48px; }
.stButton > button[kind="primary"] { background: #000000; border-color: #000000; color: #ffffff; }
.stButton > button[kind="secondary"] { background: #ffffff; border-color: #000000; color: #000000; }
.stTextInput input { border-radius: 8px; }
.pool-card { border-radius: 16px; padding: 1rem 1.1rem; border: 1px solid rgba(148, 163, 184, 0.35); background: #ffffff; }
.pool-card__title { font-weight: 600; margin-bottom: 0.35rem; }
.pool-card code { word-break: break-all; }
"""

BUTTON_LABELS: dict[str, str] = {
    "generate_keypair": "Generate Keypair",
    "fund_account": "Fund Account",
    "create_liquidity_pool": "Create Liquidity Pool",
    "withdraw_from_pool": "Withdraw from Pool",
}

BUSY_LABEL = "Working…"

_SEVERITY_ICONS = {"error": "⛔", "critical": "⛔", "warning": "⚠️", "info": "•"}


def inject_css(css: str = THEME_CSS) -> None:
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)


def action_button(
    state: SessionState,
    action: str,
    on_click: Callable[[], Any],
    *,
    primary: bool = True,
) -> bool:
    """Render the button for ``action``; disabled while its loading flag is set."""

    busy = state.is_loading(action)
    label = BUSY_LABEL if busy else BUTTON_LABELS[action]
    return st.button(
        label,
        key=f"btn_{action}",
        on_click=on_click,
        disabled=busy,
        type="primary" if primary else "secondary",
        use_container_width=True,
    )


def account_card(state: SessionState) -> None:
    public_key = state.public_key
    if public_key:
        body = f"<code>{public_key}</code>"
    else:
        body = "No keypair yet. Generate one to get started."
    st.markdown(
        f'<div class="pool-card"><div class="pool-card__title">Account</div>{body}</div>',
        unsafe_allow_html=True,
    )


def status_line(state: SessionState) -> None:
    message = state.status_message
    if message:
        st.caption(message)


def render_notifications(notifier: Notifier) -> None:
    """Show every queued notification once as a toast."""

    for notification in notifier.drain():
        st.toast(notification.markdown(), icon=notification.icon)


def _format_ts(value: Any) -> str:
    try:
        moment = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return "--:--:--"
    return moment.strftime("%H:%M:%S")


def format_activity(records: Iterable[Mapping[str, Any]]) -> list[str]:
    """Turn parsed log records into compact, newest-first lines."""

    lines: list[str] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        event = str(record.get("event") or "")
        if not event.startswith(("ui.", "ledger.", "faucet.")):
            continue
        severity = str(record.get("severity") or "info")
        icon = _SEVERITY_ICONS.get(severity, "•")
        payload = record.get("payload") or {}
        detail = payload.get("message") or payload.get("err") or ""
        line = f"{icon} `{_format_ts(record.get('ts'))}` {event}"
        if detail:
            line = f"{line}: {detail}"
        lines.append(line)
    lines.reverse()
    return lines


def activity_log(limit: int = 50) -> None:
    with st.expander("Recent activity", expanded=False):
        lines = format_activity(read_tail(limit, parse=True))
        if not lines:
            st.caption("Nothing logged yet.")
            return
        st.markdown("\n".join(f"- {line}" for line in lines))
