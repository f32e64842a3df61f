from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass, field
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Seed = Union[int, str, bytes, None]


def _seed_bytes(seed: Seed) -> bytes:
    if seed is None:
        return b""
    if isinstance(seed, bytes):
        return seed
    if isinstance(seed, bool):
        raise TypeError("Unsupported seed type: %r" % (type(seed),))
    if isinstance(seed, int):
        if seed < 0:
            raise ValueError("Seed must be non-negative")
        length = (seed.bit_length() + 7) // 8 or 1
        return seed.to_bytes(length, "big")
    if isinstance(seed, str):
        s = seed.strip()
        if s.startswith("0x"):
            # Hex as printed by seed_hex; kept byte-exact so leading zeros survive
            digits = s[2:]
            try:
                return bytes.fromhex(digits if len(digits) % 2 == 0 else "0" + digits)
            except ValueError:
                return s.encode("utf-8")
        if s.isdigit():
            return _seed_bytes(int(s))
        return s.encode("utf-8")
    raise TypeError("Unsupported seed type: %r" % (type(seed),))


@dataclass(frozen=True)
class RNGManager:
    """Hands out independent, reproducible random streams.

    Each map build should own its own ``random.Random``; deriving them here
    from one master seed keeps builds reproducible without sharing state:

        rngm = RNGManager(42)
        layout_rng = rngm.context_rng("map_layout")
        pregen_rng = rngm.context_rng("map_layout", 2)

    Digit-only strings are read as integers so a seed typed on the command
    line matches the same seed given in code. ``None`` picks a random seed.
    """

    master_seed: Seed = None
    _master: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.master_seed is None:
            raw = secrets.token_bytes(16)
            logger.info("No master seed provided; generated random seed: %s", raw.hex())
        else:
            raw = _seed_bytes(self.master_seed)
        object.__setattr__(self, "_master", raw)

    @property
    def seed_hex(self) -> str:
        return self._master.hex()

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """64-bit seed from the master seed, a domain name and identifiers."""
        payload = json.dumps(
            {"domain": domain, "ids": identifiers, "master": self._master.hex()},
            sort_keys=True,
            separators=(",", ":"),
        )
        digest = hashlib.blake2b(payload.encode("utf-8"), digest_size=8).digest()
        seed = int.from_bytes(digest, "big")
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed)
        return seed

    def context_rng(self, domain: str, *identifiers: Any) -> random.Random:
        return random.Random(self.derive_seed(domain, *identifiers))


def make_rng(seed: Optional[Seed], domain: str = "map_layout") -> random.Random:
    """Random source for one build, derived from ``seed``."""
    return RNGManager(seed).context_rng(domain)
