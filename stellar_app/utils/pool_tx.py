"""Transaction builders for the liquidity pool actions.

Everything here delegates to :mod:`stellar_sdk`; the functions only choose the
operations and their arguments. They raise whatever the SDK raises, callers
in :mod:`stellar_app.utils.ledger` turn that into a result.
"""

from __future__ import annotations

from dataclasses import dataclass

from stellar_sdk import (
    Account,
    Asset,
    Keypair,
    LiquidityPoolAsset,
    Price,
    TransactionBuilder,
    TransactionEnvelope,
)

# Fee tier of every constant-product pool on the network, in basis points.
POOL_FEE_BP = 30

# Deposits only execute while the pool price sits exactly at 1:1.
DEPOSIT_MIN_PRICE = Price(1, 1)
DEPOSIT_MAX_PRICE = Price(1, 1)

WITHDRAW_MIN_AMOUNT = "0"


@dataclass(frozen=True)
class PreparedTransaction:
    envelope: TransactionEnvelope
    pool_id: str

    @property
    def hash_hex(self) -> str:
        return self.envelope.hash_hex()


def custom_asset(asset_name: str, issuer: str) -> Asset:
    return Asset(asset_name.strip(), issuer)


def pool_asset(asset_name: str, issuer: str) -> LiquidityPoolAsset:
    """Pair the native asset with ``asset_name`` issued by ``issuer``."""

    return LiquidityPoolAsset(Asset.native(), custom_asset(asset_name, issuer), POOL_FEE_BP)


def liquidity_pool_id(asset_name: str, issuer: str) -> str:
    """Return the hex id of the constant-product pool for the native/custom pair."""

    return pool_asset(asset_name, issuer).liquidity_pool_id


def _builder(account: Account, *, network_passphrase: str, base_fee: int) -> TransactionBuilder:
    return TransactionBuilder(
        source_account=account,
        network_passphrase=network_passphrase,
        base_fee=base_fee,
    )


def build_pool_deposit(
    account: Account,
    keypair: Keypair,
    *,
    asset_name: str,
    max_amount_a: str,
    max_amount_b: str,
    network_passphrase: str,
    base_fee: int,
    timeout: int,
) -> PreparedTransaction:
    """Trust the pool share asset, then deposit both reserves. Signed by ``keypair``."""

    lp_asset = pool_asset(asset_name, keypair.public_key)
    pool_id = lp_asset.liquidity_pool_id

    envelope = (
        _builder(account, network_passphrase=network_passphrase, base_fee=base_fee)
        .append_change_trust_op(asset=lp_asset)
        .append_liquidity_pool_deposit_op(
            liquidity_pool_id=pool_id,
            max_amount_a=str(max_amount_a).strip(),
            max_amount_b=str(max_amount_b).strip(),
            min_price=DEPOSIT_MIN_PRICE,
            max_price=DEPOSIT_MAX_PRICE,
        )
        .set_timeout(timeout)
        .build()
    )
    envelope.sign(keypair)
    return PreparedTransaction(envelope=envelope, pool_id=pool_id)


def build_pool_withdraw(
    account: Account,
    keypair: Keypair,
    *,
    pool_id: str,
    amount: str,
    network_passphrase: str,
    base_fee: int,
    timeout: int,
) -> PreparedTransaction:
    """Redeem ``amount`` pool shares with no minimum on either returned asset."""

    envelope = (
        _builder(account, network_passphrase=network_passphrase, base_fee=base_fee)
        .append_liquidity_pool_withdraw_op(
            liquidity_pool_id=pool_id,
            amount=str(amount).strip(),
            min_amount_a=WITHDRAW_MIN_AMOUNT,
            min_amount_b=WITHDRAW_MIN_AMOUNT,
        )
        .set_timeout(timeout)
        .build()
    )
    envelope.sign(keypair)
    return PreparedTransaction(envelope=envelope, pool_id=pool_id)
