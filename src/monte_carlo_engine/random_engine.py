"""
Seedable pseudo-random engine with derived distribution samplers

xorshift128+ core whose 128-bit state is taken from a SHA-256 digest of the
seed, so equal seeds replay identical sequences on every platform.
"""
import hashlib
import logging
import math
import secrets
import sys
from typing import List, MutableSequence, Optional, TypeVar, Union

from utils.exceptions import ConfigurationError
from utils.helpers import require_positive_shape

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MASK64 = 0xFFFFFFFFFFFFFFFF
_MASK53 = 0x1FFFFFFFFFFFFF
_TWO_53 = float(1 << 53)

SeedType = Union[int, str, bytes, None]

class RandomEngine:
    """Deterministic uniform source plus Normal/Gamma/Beta samplers"""

    def __init__(self, seed: SeedType = None):
        self.seed = seed
        if seed is None:
            material = secrets.token_bytes(16)
        else:
            raw = seed if isinstance(seed, bytes) else str(seed).encode("utf-8")
            material = hashlib.sha256(raw).digest()[:16]

        self._s0 = int.from_bytes(material[:8], "big") or 1
        self._s1 = int.from_bytes(material[8:16], "big") or 1

    @property
    def seeded(self) -> bool:
        return self.seed is not None

    def _next_bits53(self) -> int:
        """Advance xorshift128+ and return the low 53 bits of the output"""
        a = self._s0
        b = self._s1
        self._s0 = b
        a ^= (a << 23) & _MASK64
        a ^= a >> 17
        a ^= b ^ (b >> 26)
        self._s1 = a
        return (a + b) & _MASK53

    def next_float(self) -> float:
        """Uniform float in [0, 1)"""
        return self._next_bits53() / _TWO_53

    def next_int(self, low: int, high: int) -> int:
        """
        Uniform integer in the closed range [low, high]

        Uses rejection sampling so that every value is equally likely.
        """
        if high < low:
            raise ConfigurationError(f"Empty integer range [{low}, {high}]")
        span = high - low + 1
        if span > (1 << 53):
            raise ConfigurationError(f"Integer range of {span} values exceeds 2**53")
        limit = ((1 << 53) // span) * span
        while True:
            r = self._next_bits53()
            if r < limit:
                return low + r % span

    def next_normal(self) -> float:
        """Standard normal via Box-Muller"""
        u1 = self.next_float()
        u2 = self.next_float()
        return math.sqrt(-2.0 * math.log(u1 or sys.float_info.min)) * math.cos(2.0 * math.pi * u2)

    def next_gamma(self, alpha: float) -> float:
        """
        Gamma(alpha, 1) via Marsaglia & Tsang

        Shapes below one are boosted: Gamma(a) = Gamma(a + 1) * U ** (1 / a).
        """
        alpha = require_positive_shape(alpha)
        return self._gamma(alpha)

    def _gamma(self, alpha: float) -> float:
        if alpha < 1.0:
            return self._gamma(alpha + 1.0) * self.next_float() ** (1.0 / alpha)

        d = alpha - 1.0 / 3.0
        c = 1.0 / math.sqrt(9.0 * d)

        while True:
            x = self.next_normal()
            v = 1.0 + c * x
            while v <= 0.0:
                x = self.next_normal()
                v = 1.0 + c * x

            v = v * v * v
            u = self.next_float()
            if u < 1.0 - 0.0331 * (x * x) * (x * x):
                return d * v
            if u > 0.0 and math.log(u) < 0.5 * x * x + d * (1.0 - v + math.log(v)):
                return d * v

    def next_beta(self, alpha: float, beta: float) -> float:
        """Beta(alpha, beta) as Gamma(alpha) / (Gamma(alpha) + Gamma(beta))"""
        alpha = require_positive_shape(alpha)
        beta = require_positive_shape(beta)
        x = self._gamma(alpha)
        y = self._gamma(beta)
        total = x + y
        if total <= 0.0:
            # both draws underflowed; fall back to the distribution mean
            return alpha / (alpha + beta)
        return x / total

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place; returns the same sequence"""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(0, i)
            items[i], items[j] = items[j], items[i]
        return items

    def permutation(self, n: int) -> List[int]:
        """Shuffled copy of range(n)"""
        return list(self.shuffle(list(range(n))))

    def spawn(self, stream: Union[int, str]) -> "RandomEngine":
        """
        Derive an independent engine for one worker partition

        Seeded parents derive children from (seed, stream) alone, so the
        partitioning is reproducible regardless of how many draws the
        parent has made.
        """
        if self.seeded:
            return RandomEngine(seed=f"{self.seed}/{stream}")
        return RandomEngine(seed=f"{self._next_bits53()}/{stream}")

    @staticmethod
    def halton(index: int, base: int) -> float:
        """Element ``index`` of the Halton (radical inverse) sequence in ``base``"""
        if base < 2:
            raise ConfigurationError(f"Halton base must be >= 2, got {base}")
        result = 0.0
        f = 1.0 / base
        i = index

        while i > 0:
            result += f * (i % base)
            i //= base
            f /= base

        return result

    def __repr__(self) -> str:
        return f"RandomEngine(seed={self.seed!r})"
