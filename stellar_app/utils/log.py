from __future__ import annotations

import json
import threading
import time
import traceback
from pathlib import Path
from types import TracebackType
from typing import Any, Iterable, Iterator, Mapping

from .file_io import atomic_write_text, tail_lines
from .paths import LOG_DIR

LOG_FILE = LOG_DIR / "app.log"
ERROR_LOG_FILE = LOG_DIR / "error.log"

# Retention limits; tests shrink them through monkeypatching.
MAX_LOG_BYTES = 2_000_000
RETAIN_LOG_LINES = 2_000
MAX_ERROR_LOG_BYTES = 1_000_000
ERROR_RETAIN_LOG_LINES = 1_000

_LOCK = threading.RLock()

_RESET_DONE = False

_SEVERITY_KEYWORDS = {
    "critical": "critical",
    "fatal": "critical",
    "error": "error",
    "fail": "error",
    "failed": "error",
    "exception": "error",
    "warn": "warning",
    "warning": "warning",
}

_STRUCTURED_ALIASES: dict[str, tuple[str, ...]] = {
    "account": ("account", "public_key", "publicKey"),
    "poolId": ("poolId", "pool_id", "liquidity_pool_id"),
    "txHash": ("txHash", "tx_hash", "hash"),
    "asset": ("asset", "asset_code", "asset_name"),
}

_STRUCTURED_ALIAS_MAP: dict[str, str] = {
    alias: canonical
    for canonical, aliases in _STRUCTURED_ALIASES.items()
    for alias in aliases
}

_SENSITIVE_KEYWORDS = ("secret", "seed", "private", "token", "password")

_ERROR_SEVERITIES = {"error", "critical"}


def _normalise_limit(value: int | str | None, fallback: int) -> int:
    try:
        limit = int(value) if value is not None else fallback
    except (TypeError, ValueError):
        limit = fallback
    return max(limit, 0)


def _iter_json_lines(
    lines: Iterable[str], *, drop_invalid: bool
) -> Iterator[tuple[str, Any | None]]:
    """Yield ``(raw, parsed)`` pairs for JSON lines, tolerating blanks."""

    for raw in lines:
        text = raw.strip()
        if not text:
            if drop_invalid:
                continue
            yield raw, None
            continue

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            if drop_invalid:
                continue
            raise ValueError(f"invalid JSON log line: {raw!r}") from None

        yield raw, parsed


def _is_sensitive_key(key: object) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.strip().lower()
    return any(token in lowered for token in _SENSITIVE_KEYWORDS)


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _sanitize_mapping(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    return value


def _sanitize_mapping(mapping: Mapping[Any, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in mapping.items():
        key_text = key if isinstance(key, str) else str(key)
        if _is_sensitive_key(key_text):
            cleaned[key_text] = "***"
        else:
            cleaned[key_text] = _sanitize_value(value)
    return cleaned


def _json_default(value: Any) -> str:
    return str(value)


def _prune_log_file(
    path: Path, *, max_bytes: int, retain_lines: int, size_hint: int | None = None
) -> None:
    """Truncate ``path`` to its last ``retain_lines`` when it exceeds ``max_bytes``."""

    if max_bytes <= 0 or retain_lines <= 0:
        return
    if not path.exists():
        return

    try:
        size = size_hint if size_hint is not None else path.stat().st_size
    except OSError:
        return

    if size <= max_bytes:
        return

    tail = tail_lines(path, retain_lines, errors="replace", drop_blank=True)
    cleaned = [raw for raw, _ in _iter_json_lines(tail, drop_invalid=True)]
    text = "\n".join(cleaned) + "\n" if cleaned else ""
    atomic_write_text(path, text, preserve_permissions=True)


def reset_logs_on_start(*, force: bool = False) -> None:
    """Start every application launch with empty log files."""

    global _RESET_DONE

    if _RESET_DONE and not force:
        return

    with _LOCK:
        if _RESET_DONE and not force:
            return

        for target in (LOG_FILE, ERROR_LOG_FILE):
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                target.unlink()
            except FileNotFoundError:
                pass
            except OSError:
                atomic_write_text(target, "", preserve_permissions=True)

        _RESET_DONE = True


def _derive_severity(event: str, explicit: str | None) -> str:
    if explicit:
        return explicit.lower()

    tokens = [part.lower() for part in event.replace("-", ".").replace("_", ".").split(".") if part]
    for token in tokens:
        mapped = _SEVERITY_KEYWORDS.get(token)
        if mapped:
            return mapped
    # Partial matches for names like "runtime.failure" that do not split into keywords.
    lowered = event.lower()
    for keyword, mapped in _SEVERITY_KEYWORDS.items():
        if keyword in lowered:
            return mapped
    return "info"


def _normalise_exception(
    exc: BaseException | tuple[type[BaseException], BaseException, TracebackType | None] | None,
) -> dict[str, Any] | None:
    if exc is None:
        return None

    if isinstance(exc, tuple):
        exc_type, exc_value, tb = exc
    else:
        exc_type = type(exc)
        exc_value = exc
        tb = exc.__traceback__

    if exc_type is None or exc_value is None:
        return None

    formatted_tb = "".join(traceback.format_exception(exc_type, exc_value, tb))
    return {
        "type": f"{exc_type.__module__}.{exc_type.__name__}",
        "message": str(exc_value),
        "traceback": formatted_tb,
    }


def _split_structured_payload(payload: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(context, remaining)`` with canonical ledger metadata keys."""

    context: dict[str, Any] = {}
    remaining: dict[str, Any] = {}

    for key, value in payload.items():
        canonical = _STRUCTURED_ALIAS_MAP.get(str(key))
        if canonical is not None:
            context[canonical] = value
        else:
            remaining[key] = value

    return context, remaining


def _append_record(path: Path, text: str) -> int:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(text + "\n")
        handle.flush()
        return handle.tell()


def log(
    event: str,
    *,
    severity: str | None = None,
    exc: BaseException | tuple[type[BaseException], BaseException, TracebackType | None] | None = None,
    **payload: Any,
) -> None:
    """Append a JSON record with ``event`` and ``payload`` to the log file."""

    context, remaining_payload = _split_structured_payload(payload)

    record: dict[str, Any] = {
        "ts": int(time.time() * 1000),
        "event": event,
        "severity": _derive_severity(event, severity),
        "thread": threading.current_thread().name,
        "context": _sanitize_mapping(context),
        "payload": _sanitize_mapping(remaining_payload),
    }

    exception_payload = _normalise_exception(exc)
    if exception_payload is not None:
        record["exception"] = exception_payload

    text = json.dumps(record, ensure_ascii=False, default=_json_default)

    with _LOCK:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        size_hint = _append_record(LOG_FILE, text)
        _prune_log_file(
            LOG_FILE,
            max_bytes=MAX_LOG_BYTES,
            retain_lines=RETAIN_LOG_LINES,
            size_hint=size_hint,
        )

        if record["severity"] in _ERROR_SEVERITIES:
            error_size = _append_record(ERROR_LOG_FILE, text)
            _prune_log_file(
                ERROR_LOG_FILE,
                max_bytes=MAX_ERROR_LOG_BYTES,
                retain_lines=ERROR_RETAIN_LOG_LINES,
                size_hint=error_size,
            )


def read_tail(
    n: int | str = 200,
    *,
    parse: bool = False,
    drop_invalid: bool = True,
) -> list[Any]:
    """Return the tail of the log file, optionally parsed as JSON objects."""

    limit = _normalise_limit(n, 200)
    if limit <= 0:
        return []

    lines = tail_lines(LOG_FILE, limit, errors="replace")

    if not parse:
        return lines

    return [
        parsed
        for _, parsed in _iter_json_lines(lines, drop_invalid=drop_invalid)
        if parsed is not None
    ]


reset_logs_on_start()
