import os
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

os.environ.setdefault("STELLAR_APP_DATA_DIR", tempfile.mkdtemp(prefix="stellar-app-tests-"))

# Ensure the project root is on sys.path for module imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stellar_sdk import Account  # noqa: E402
from stellar_sdk.soroban_rpc import SendTransactionStatus  # noqa: E402

from stellar_app.ui.actions import PoolActions  # noqa: E402
from stellar_app.ui.notifications import Notifier  # noqa: E402
from stellar_app.ui.state import SessionState  # noqa: E402
from stellar_app.utils.envs import Settings  # noqa: E402
from stellar_app.utils.faucet import FaucetClient  # noqa: E402
from stellar_app.utils.ledger import LedgerClient  # noqa: E402
from stellar_app.utils.locks import AccountGate  # noqa: E402


class FakeServer:
    """Stands in for ``SorobanServer``: hands out accounts and accepts envelopes."""

    def __init__(self, *, status=SendTransactionStatus.PENDING, error_result_xdr=None):
        self.status = status
        self.error_result_xdr = error_result_xdr
        self.loaded: list[str] = []
        self.sent: list = []
        self.load_error: Exception | None = None
        self.send_error: Exception | None = None

    def load_account(self, account_id):
        self.loaded.append(account_id)
        if self.load_error is not None:
            raise self.load_error
        return Account(account_id, 1)

    def send_transaction(self, envelope):
        self.sent.append(envelope)
        if self.send_error is not None:
            raise self.send_error
        return SimpleNamespace(
            status=self.status,
            hash=envelope.hash_hex(),
            error_result_xdr=self.error_result_xdr,
        )

    @property
    def calls(self) -> int:
        return len(self.loaded) + len(self.sent)


class FakeSession:
    """Stands in for ``requests.Session`` on the faucet side."""

    def __init__(self, status_code=200, error: Exception | None = None):
        self.status_code = status_code
        self.error = error
        self.requests: list[tuple[str, dict, float]] = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, dict(params or {}), timeout))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(status_code=self.status_code)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def state() -> SessionState:
    return SessionState({})


@pytest.fixture
def gate() -> AccountGate:
    return AccountGate()


@pytest.fixture
def actions(state, settings, fake_server, fake_session, gate) -> PoolActions:
    return PoolActions(
        state,
        Notifier(state),
        ledger=LedgerClient(settings, server=fake_server),
        faucet=FaucetClient(settings, session=fake_session),
        gate=gate,
    )
