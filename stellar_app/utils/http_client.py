from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter

_DEFAULT_POOL_CONNECTIONS = 10
_DEFAULT_POOL_MAXSIZE = 10


def create_http_session(
    *,
    pool_connections: int = _DEFAULT_POOL_CONNECTIONS,
    pool_maxsize: int = _DEFAULT_POOL_MAXSIZE,
) -> requests.Session:
    """Return a :class:`requests.Session` with pooled HTTP(S) adapters mounted."""

    session = requests.Session()
    for prefix in ("http://", "https://"):
        session.mount(
            prefix,
            HTTPAdapter(pool_connections=pool_connections, pool_maxsize=pool_maxsize),
        )
    return session
