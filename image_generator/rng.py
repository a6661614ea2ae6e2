"""
Seeded random source for layer contents and layer ordering.

A single RandomSource is created per generation run and passed explicitly to
both the file pool builder and the shuffler, so the bytes written and the
resulting layer order are fully determined by the seed.
"""

import logging
import random

logger = logging.getLogger(__name__)

# Alphabet and bit-packing constants used by RandomSource.rand_bytes
LETTER_BYTES = b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
LETTER_IDX_BITS = 6  # 6 bits to represent a letter index
LETTER_IDX_MASK = (1 << LETTER_IDX_BITS) - 1  # All 1-bits, as many as LETTER_IDX_BITS
LETTER_IDX_MAX = 63 // LETTER_IDX_BITS  # Number of letter indices fitting in 63 bits

SEED_MIN = -(2**63)
SEED_MAX = 2**63 - 1


class RandomSource:
    """
    Deterministic pseudo-random source seeded from a signed 64-bit integer.

    Args:
        seed: Signed 64-bit seed

    Raises:
        ValueError: If seed is not an int in the signed 64-bit range

    Note:
        random.Random seeds from the absolute value of an int, so the seed is
        reinterpreted as unsigned first. Seeds 5 and -5 give different streams.
    """

    def __init__(self, seed: int):
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError(f"seed must be an integer, got {type(seed).__name__}")
        if not SEED_MIN <= seed <= SEED_MAX:
            raise ValueError(f"seed {seed} is outside the signed 64-bit range")

        self.seed = seed
        self._rng = random.Random(seed & 0xFFFFFFFFFFFFFFFF)

    def __repr__(self):
        return f"RandomSource(seed={self.seed})"

    def int63(self) -> int:
        """Return a non-negative 63-bit integer."""
        return self._rng.getrandbits(63)

    def intn(self, n: int) -> int:
        """Return a uniform integer in [0, n)."""
        if n <= 0:
            raise ValueError(f"intn requires a positive bound, got {n}")
        return self._rng.randrange(n)

    def rand_bytes(self, n: int) -> bytes:
        """
        Produce n bytes drawn uniformly from LETTER_BYTES.

        Each 63-bit draw is consumed as LETTER_IDX_MAX 6-bit indices. Indices
        past the end of the alphabet are discarded, so the number of draws per
        output byte depends on the seed. The buffer is filled from the last
        byte to the first, and one draw is always taken up front even when
        n is 0.

        Args:
            n: Number of bytes to produce

        Returns:
            Exactly n bytes from the a-zA-Z alphabet

        Example:
            >>> RandomSource(1).rand_bytes(8)  # doctest: +SKIP
            b'...'
        """
        buf = bytearray(n)
        alphabet_size = len(LETTER_BYTES)

        i = n - 1
        cache, remain = self.int63(), LETTER_IDX_MAX
        while i >= 0:
            if remain == 0:
                cache, remain = self.int63(), LETTER_IDX_MAX
            idx = cache & LETTER_IDX_MASK
            if idx < alphabet_size:
                buf[i] = LETTER_BYTES[idx]
                i -= 1
            cache >>= LETTER_IDX_BITS
            remain -= 1

        return bytes(buf)


def shuffle_in_place(items: list, source: RandomSource) -> None:
    """
    Permute items in place with a seeded Fisher-Yates pass.

    For each position i, swaps items[i] with a uniformly chosen items[j],
    j in [0, i]. The permutation depends only on the state of source and
    the length of items.

    Args:
        items: List to reorder
        source: Random source shared with the rest of the run
    """
    for i in range(len(items)):
        j = source.intn(i + 1)
        items[i], items[j] = items[j], items[i]

    logger.debug(f"Shuffled {len(items)} items")
