"""Time-ordered identifiers for new recipes.

Identifiers are 12 bytes rendered as 20 lowercase base32hex characters:

* 6 bytes: milliseconds since the Unix epoch (big-endian)
* 3 bytes: fingerprint of the host name and process id
* 3 bytes: per-millisecond counter

The alphabet is in ASCII order, so string comparison of two identifiers
matches the order in which they were generated.
"""
from __future__ import annotations

import hashlib
import os
import socket
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

ALPHABET = "0123456789abcdefghijklmnopqrstuv"
ID_LENGTH = 20
_COUNTER_MAX = 0xFFFFFF
_DECODE = {char: index for index, char in enumerate(ALPHABET)}


def _default_fingerprint() -> bytes:
    seed = f"{socket.gethostname()}:{os.getpid()}".encode("utf-8")
    return hashlib.sha256(seed).digest()[:3]


class IdGenerator:
    """Thread safe generator of unique, sortable identifiers."""

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        fingerprint: Optional[bytes] = None,
    ) -> None:
        self._clock = clock or time.time
        self._fingerprint = fingerprint if fingerprint is not None else _default_fingerprint()
        if len(self._fingerprint) != 3:
            raise ValueError("fingerprint must be exactly 3 bytes")
        self._lock = threading.Lock()
        self._last_millis = -1
        self._counter = 0

    def new_id(self) -> str:
        with self._lock:
            millis = int(self._clock() * 1000)
            if millis > self._last_millis:
                self._last_millis = millis
                self._counter = 0
            elif self._counter < _COUNTER_MAX:
                # Same millisecond, or the clock stepped backwards.
                self._counter += 1
            else:
                self._last_millis += 1
                self._counter = 0
            raw = (
                self._last_millis.to_bytes(6, "big")
                + self._fingerprint
                + self._counter.to_bytes(3, "big")
            )
        return _encode(raw)

    __call__ = new_id

    @staticmethod
    def timestamp_of(recipe_id: str) -> datetime:
        """Return the creation time embedded in *recipe_id*."""

        raw = _decode(recipe_id)
        millis = int.from_bytes(raw[:6], "big")
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def _encode(raw: bytes) -> str:
    # 96 bits padded to 100 so every character holds five bits.
    value = int.from_bytes(raw, "big") << 4
    chars = []
    for _ in range(ID_LENGTH):
        chars.append(ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def _decode(recipe_id: str) -> bytes:
    if len(recipe_id) != ID_LENGTH:
        raise ValueError(f"Invalid identifier length: {recipe_id!r}")
    value = 0
    for char in recipe_id:
        try:
            value = (value << 5) | _DECODE[char]
        except KeyError:
            raise ValueError(f"Invalid identifier character {char!r}") from None
    return (value >> 4).to_bytes(12, "big")


_default_generator = IdGenerator()


def new_id() -> str:
    """Return a fresh identifier from the process-wide generator."""

    return _default_generator.new_id()
