from __future__ import annotations

import time

import requests
from stellar_sdk import Keypair
from stellar_sdk.exceptions import SdkError
from stellar_sdk.soroban_rpc import SendTransactionStatus

from stellar_app.utils import ledger as ledger_module
from stellar_app.utils.ledger import LedgerClient, LedgerResult
from stellar_app.utils.pool_tx import liquidity_pool_id

from conftest import FakeServer


def _client(settings, server):
    return LedgerClient(settings, server=server)


def _prepared_withdraw(client, keypair):
    account = client.load_account(keypair.public_key).value
    return client.prepare_pool_withdraw(account, keypair, pool_id="ab" * 32, amount="1")


def test_result_helpers():
    ok = LedgerResult.success(5)
    failed = LedgerResult.failure("transport", "boom")

    assert ok.ok and ok.value == 5 and ok.error_kind is None
    assert not failed.ok and failed.value is None
    assert (failed.error_kind, failed.message) == ("transport", "boom")
    assert failed.status_code is None
    assert LedgerResult.failure("transport", "HTTP 502", status_code=502).status_code == 502


def test_load_account_wraps_sdk_errors(settings):
    server = FakeServer()
    server.load_error = SdkError("resource missing")
    client = _client(settings, server)

    result = client.load_account(Keypair.random().public_key)

    assert result.ok is False
    assert result.error_kind == "ledger"
    assert result.message == "resource missing"


def test_load_account_classifies_transport_errors(settings):
    server = FakeServer()
    server.load_error = requests.ConnectTimeout("timed out")
    client = _client(settings, server)

    result = client.load_account(Keypair.random().public_key)

    assert result.error_kind == "transport"


def test_error_without_message_falls_back_to_type_name(settings):
    server = FakeServer()
    server.load_error = RuntimeError()
    result = _client(settings, server).load_account(Keypair.random().public_key)

    assert result.message == "RuntimeError"


def test_pool_id_matches_builder_and_reports_bad_asset_code(settings, fake_server):
    client = _client(settings, fake_server)
    issuer = Keypair.random().public_key

    result = client.pool_id("ABC", issuer)
    invalid = client.pool_id("THIS-IS-NOT-VALID", issuer)

    assert result.ok is True
    assert result.value == liquidity_pool_id("ABC", issuer)
    assert invalid.ok is False
    assert invalid.error_kind == "ledger"
    assert fake_server.calls == 0


def test_prepare_deposit_reports_invalid_amount(settings, fake_server):
    client = _client(settings, fake_server)
    keypair = Keypair.random()
    account = client.load_account(keypair.public_key).value

    result = client.prepare_pool_deposit(
        account, keypair, asset_name="ABC", max_amount_a="abc", max_amount_b="1"
    )

    assert result.ok is False
    assert result.error_kind == "ledger"


def test_prepare_uses_settings_for_fee_and_timeout(fake_server):
    from stellar_app.utils.envs import Settings

    settings = Settings(base_fee=250, tx_timeout=60)
    client = _client(settings, fake_server)
    keypair = Keypair.random()

    prepared = _prepared_withdraw(client, keypair)

    tx = prepared.value.envelope.transaction
    assert tx.fee == 250
    assert tx.preconditions.time_bounds.max_time >= int(time.time()) + 59


def test_submit_pending_is_success(settings, fake_server):
    client = _client(settings, fake_server)
    keypair = Keypair.random()
    prepared = _prepared_withdraw(client, keypair)

    result = client.submit(prepared.value.envelope)

    assert result.ok is True
    assert result.value.hash == prepared.value.envelope.hash_hex()
    assert result.value.status == "PENDING"


def test_submit_try_again_later_is_logged_as_warning(settings, monkeypatch):
    events: list[tuple[str, dict]] = []
    monkeypatch.setattr(ledger_module, "log", lambda event, **kw: events.append((event, kw)))
    server = FakeServer(status=SendTransactionStatus.TRY_AGAIN_LATER)
    client = _client(settings, server)
    prepared = _prepared_withdraw(client, Keypair.random())

    result = client.submit(prepared.value.envelope)

    assert result.ok is True
    assert events[-1][0] == "ledger.submit.warning"


def test_submit_error_status_is_failure(settings):
    server = FakeServer(status=SendTransactionStatus.ERROR, error_result_xdr="XDR==")
    client = _client(settings, server)
    prepared = _prepared_withdraw(client, Keypair.random())

    result = client.submit(prepared.value.envelope)

    assert result.ok is False
    assert result.error_kind == "ledger"
    assert result.message == "Transaction rejected (ERROR): XDR=="


def test_server_is_built_lazily_from_settings(settings, monkeypatch):
    created: list[str] = []

    class _Server:
        def __init__(self, url):
            created.append(url)

    monkeypatch.setattr(ledger_module, "SorobanServer", _Server)
    client = LedgerClient(settings)

    assert created == []
    first = client.server
    assert client.server is first
    assert created == [settings.rpc_url]
