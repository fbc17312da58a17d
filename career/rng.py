# career/rng.py
from __future__ import annotations

import hashlib
import random
import struct
from typing import Union

Part = Union[int, str, bytes]

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _encode(part: Part) -> bytes:
    if isinstance(part, bytes):
        return b"b" + part
    if isinstance(part, int):
        return b"i" + struct.pack("<Q", part & 0xFFFFFFFFFFFFFFFF)
    return b"s" + str(part).encode("utf-8")


def mix(base_seed: int, *parts: Part) -> int:
    """
    Career seed + labels -> positive 31-bit seed.
    hash() is salted per process, so a keyed blake2b digest is used instead;
    saves replay identically on any machine.
    """
    h = hashlib.blake2b(_encode(int(base_seed)), digest_size=8)
    for p in parts:
        h.update(b"\x1f")
        h.update(_encode(p))
    return (int.from_bytes(h.digest(), "little") & 0x7FFFFFFF) or 1


def child_rng(base_seed: int, *parts: Part) -> random.Random:
    return random.Random(mix(base_seed, *parts))


def matchday_rng(base_seed: int, stream: str, season: int, matchday: int) -> random.Random:
    """Independent stream per purpose per matchday (offers, resolution, id allocation)."""
    return child_rng(base_seed, stream, season, matchday)


def short_id(rng: random.Random, length: int = 9) -> str:
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(length))
