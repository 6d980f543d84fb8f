"""Small helpers for byte buffers."""

from __future__ import annotations

from collections.abc import Iterable


def _is_print(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E


def pretty_print(data: bytes | str, max_length: int = 32) -> str:
    """Escape unprintable bytes and quotes as ``\\xNN`` and truncate to ``max_length``."""
    raw = data.encode() if isinstance(data, str) else bytes(data)
    parts: list[str] = []
    length = 0
    truncated = False
    for byte in raw:
        if length >= max_length:
            truncated = True
            break
        piece = chr(byte) if _is_print(byte) and byte != ord('"') else f"\\x{byte:02x}"
        parts.append(piece)
        length += len(piece)
    ret = "".join(parts)
    if truncated:
        ret = ret[:-3] + "..." if len(ret) >= 3 else ret + "..."
    return ret


def concat(buffers: Iterable[bytes]) -> bytes:
    """Concatenate a sequence of buffers into one."""
    return b"".join(buffers)