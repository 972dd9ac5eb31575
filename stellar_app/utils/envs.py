from __future__ import annotations
import os, json
from dataclasses import asdict, fields
from pydantic.dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from stellar_sdk import Network

from .log import log
from .paths import SETTINGS_FILE

TESTNET_RPC_URL = "https://soroban-testnet.stellar.org"
TESTNET_FAUCET_URL = "https://friendbot.stellar.org"
TESTNET_EXPLORER_TX_URL = "https://stellar.expert/explorer/testnet/tx/"


@dataclass
class Settings:
    # network
    rpc_url: str = TESTNET_RPC_URL
    faucet_url: str = TESTNET_FAUCET_URL
    network_passphrase: str = Network.TESTNET_NETWORK_PASSPHRASE
    explorer_tx_url: str = TESTNET_EXPLORER_TX_URL

    # transactions
    base_fee: int = 100
    tx_timeout: int = 30
    http_timeout: float = 15.0

    # one in-flight ledger transaction per account
    serialize_ledger_actions: bool = True

    def explorer_link(self, tx_hash: str) -> str:
        return f"{self.explorer_tx_url.rstrip('/')}/{tx_hash}"


_ENV_MAP = {
    "rpc_url": "STELLAR_RPC_URL",
    "faucet_url": "STELLAR_FAUCET_URL",
    "network_passphrase": "STELLAR_NETWORK_PASSPHRASE",
    "explorer_tx_url": "STELLAR_EXPLORER_TX_URL",
    "base_fee": "STELLAR_BASE_FEE",
    "tx_timeout": "STELLAR_TX_TIMEOUT",
    "http_timeout": "STELLAR_HTTP_TIMEOUT",
    "serialize_ledger_actions": "STELLAR_SERIALIZE_LEDGER_ACTIONS",
}

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off"}

_INT_FIELDS = {"base_fee", "tx_timeout"}
_FLOAT_FIELDS = {"http_timeout"}
_BOOL_FIELDS = {"serialize_ledger_actions"}

CacheKey = Tuple[Optional[float], Tuple[Tuple[str, Any], ...]]

_CACHE: dict[str, Any] = {
    "settings": None,
    "key": None,
}


def _coerce_bool(value: Any) -> bool:
    """Return a strict boolean for configuration style inputs."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return bool(lowered)
    return bool(value)


def _cast_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _cast_float(value: Any) -> Optional[float]:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _cast_field(name: str, value: Any) -> Any:
    caster: Callable[[Any], Any] | None = None
    if name in _INT_FIELDS:
        caster = _cast_int
    elif name in _FLOAT_FIELDS:
        caster = _cast_float
    elif name in _BOOL_FIELDS:
        caster = _coerce_bool
    if caster is None:
        return str(value).strip()
    return caster(value)


def _read_env() -> Dict[str, Optional[str]]:
    return {k: os.getenv(v) for k, v in _ENV_MAP.items()}


def _env_overrides(raw_env: Optional[Dict[str, Optional[str]]] = None) -> Dict[str, Any]:
    raw_env = raw_env if raw_env is not None else _read_env()
    overrides: Dict[str, Any] = {}
    for name, raw in raw_env.items():
        if raw is None or not str(raw).strip():
            continue
        value = _cast_field(name, raw)
        if value is None:
            log("envs.settings.env_invalid", field=name, env=_ENV_MAP[name], value=raw)
            continue
        overrides[name] = value
    return overrides


def _file_signature() -> Optional[float]:
    try:
        return SETTINGS_FILE.stat().st_mtime
    except OSError:
        return None


def _load_settings_payload() -> Dict[str, Any]:
    if not SETTINGS_FILE.exists():
        return {}
    try:
        payload = json.loads(SETTINGS_FILE.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as exc:
        log("envs.settings.file_error", path=str(SETTINGS_FILE), err=str(exc))
        return {}
    if not isinstance(payload, dict):
        log("envs.settings.file_invalid", path=str(SETTINGS_FILE))
        return {}

    cleaned: Dict[str, Any] = {}
    for name, value in payload.items():
        if name not in _ENV_MAP or value is None:
            continue
        cast = _cast_field(name, value)
        if cast is not None:
            cleaned[name] = cast
    return cleaned


def _filter_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    allowed = {f.name for f in fields(Settings)}
    return {k: v for k, v in payload.items() if k in allowed}


def get_settings(force_reload: bool = False) -> Settings:
    """Return settings merged from defaults, ``settings.json`` and the environment."""

    raw_env = _read_env()
    key: CacheKey = (_file_signature(), tuple(sorted(raw_env.items())))

    cached = _CACHE.get("settings")
    if not force_reload and cached is not None and _CACHE.get("key") == key:
        return cached

    merged = asdict(Settings())
    merged.update(_load_settings_payload())
    merged.update(_env_overrides(raw_env))

    settings = Settings(**_filter_fields(merged))
    _CACHE["settings"] = settings
    _CACHE["key"] = key
    return settings


def invalidate_settings_cache() -> None:
    _CACHE["settings"] = None
    _CACHE["key"] = None
