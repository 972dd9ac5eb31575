"""UI helpers for the Streamlit front-end."""

from .state import ensure_keys, BASE_SESSION_STATE, SessionState
from . import components

__all__ = ["ensure_keys", "BASE_SESSION_STATE", "SessionState", "components"]
