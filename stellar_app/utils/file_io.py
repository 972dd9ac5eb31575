"""Small filesystem primitives shared by the log writer.

Log pruning rewrites the JSONL file in place, so writes go through a temporary
file followed by :func:`os.replace`, and tail reads walk the file backwards in
blocks instead of loading it whole.
"""

from __future__ import annotations

from pathlib import Path
import contextlib
import os
import tempfile

__all__ = ["atomic_write_text", "tail_lines"]

_BLOCK_SIZE = 8192


def atomic_write_text(
    path: Path | str,
    text: str,
    *,
    encoding: str = "utf-8",
    preserve_permissions: bool = True,
) -> None:
    """Replace the contents of ``path`` with ``text`` in a single rename."""

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    existing_mode: int | None = None
    if preserve_permissions and destination.exists():
        with contextlib.suppress(FileNotFoundError):
            existing_mode = destination.stat().st_mode

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding=encoding, delete=False, dir=destination.parent
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
            handle.flush()

        if existing_mode is not None:
            with contextlib.suppress(FileNotFoundError):
                os.chmod(tmp_name, existing_mode)

        os.replace(tmp_name, destination)
    except Exception:
        if tmp_name:
            with contextlib.suppress(FileNotFoundError):
                os.remove(tmp_name)
        raise


def _read_tail_bytes(path: Path, limit: int) -> bytes:
    with path.open("rb") as handle:
        handle.seek(0, os.SEEK_END)
        position = handle.tell()
        buffer = bytearray()
        newlines = 0
        while position > 0 and newlines <= limit:
            read_size = min(_BLOCK_SIZE, position)
            position -= read_size
            handle.seek(position)
            chunk = handle.read(read_size)
            buffer[:0] = chunk
            newlines += chunk.count(b"\n")
    return bytes(buffer)


def tail_lines(
    path: Path | str,
    limit: int,
    *,
    encoding: str = "utf-8",
    errors: str = "strict",
    drop_blank: bool = False,
) -> list[str]:
    """Return up to ``limit`` trailing lines of ``path`` without line endings."""

    target = Path(path)
    if limit <= 0 or not target.exists():
        return []

    text = _read_tail_bytes(target, limit).decode(encoding, errors=errors)
    lines = text.splitlines()[-limit:]
    if drop_blank:
        lines = [line for line in lines if line.strip()]
    return lines
