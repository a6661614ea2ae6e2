"""Tests for the seeded random source and shuffler."""

import random

import pytest

from image_generator.rng import (
    LETTER_BYTES,
    SEED_MAX,
    SEED_MIN,
    RandomSource,
    shuffle_in_place,
)


def _reference_letters(seed, n):
    """Straightforward rendition of the 6-bit packing scheme, front to back."""
    rng = random.Random(seed & 0xFFFFFFFFFFFFFFFF)
    letters = []
    cache, remain = rng.getrandbits(63), 10
    while len(letters) < n:
        if remain == 0:
            cache, remain = rng.getrandbits(63), 10
        idx = cache & 0x3F
        if idx < 52:
            letters.append(LETTER_BYTES[idx])
        cache >>= 6
        remain -= 1
    return bytes(reversed(letters))


def test_rand_bytes_length_and_alphabet():
    """Output has the requested length and only a-zA-Z bytes."""
    data = RandomSource(4848484).rand_bytes(4096)

    assert len(data) == 4096
    assert set(data) <= set(LETTER_BYTES)
    assert len(LETTER_BYTES) == 52


def test_rand_bytes_is_deterministic():
    """Same seed gives identical bytes across sources."""
    assert RandomSource(7).rand_bytes(2048) == RandomSource(7).rand_bytes(2048)


def test_rand_bytes_matches_bit_packing_scheme():
    """Bytes follow the 6-bit packing scheme, filled back to front."""
    for seed in (0, 1, 4848484, -42):
        assert RandomSource(seed).rand_bytes(300) == _reference_letters(seed, 300)


def test_rand_bytes_zero_length_still_draws():
    """A zero-length request returns nothing but advances the source by one draw."""
    a = RandomSource(3)
    b = RandomSource(3)

    assert a.rand_bytes(0) == b""
    b.int63()
    assert a.int63() == b.int63()


def test_rand_bytes_differs_between_seeds():
    """Different seeds give different bytes."""
    assert RandomSource(1).rand_bytes(1024) != RandomSource(2).rand_bytes(1024)


def test_negative_seed_differs_from_positive():
    """Seeds of equal magnitude and opposite sign are distinct."""
    assert RandomSource(-5).rand_bytes(256) != RandomSource(5).rand_bytes(256)


def test_consecutive_calls_continue_stream():
    """Repeated calls advance the source instead of restarting it."""
    src = RandomSource(11)
    assert src.rand_bytes(512) != src.rand_bytes(512)


@pytest.mark.parametrize("seed", [SEED_MAX + 1, SEED_MIN - 1, "1", 1.5, True])
def test_invalid_seed_rejected(seed):
    """Seeds outside the signed 64-bit range or of the wrong type are rejected."""
    with pytest.raises(ValueError):
        RandomSource(seed)


def test_seed_bounds_accepted():
    """Both ends of the signed 64-bit range are valid seeds."""
    assert RandomSource(SEED_MIN).seed == SEED_MIN
    assert RandomSource(SEED_MAX).seed == SEED_MAX


def test_int63_range():
    """int63 values fit in 63 bits."""
    src = RandomSource(9)
    for _ in range(1000):
        value = src.int63()
        assert 0 <= value < 2**63


def test_intn_bounds():
    """intn stays within [0, n) and rejects non-positive bounds."""
    src = RandomSource(9)
    assert all(0 <= src.intn(5) < 5 for _ in range(500))
    assert src.intn(1) == 0

    with pytest.raises(ValueError):
        src.intn(0)


def test_shuffle_is_deterministic():
    """Same seed gives the same permutation."""
    a = list(range(50))
    b = list(range(50))

    shuffle_in_place(a, RandomSource(4848484))
    shuffle_in_place(b, RandomSource(4848484))

    assert a == b


def test_shuffle_is_a_permutation():
    """Shuffling keeps every element exactly once."""
    items = [f"file_{i}" for i in range(30)]
    shuffled = list(items)

    shuffle_in_place(shuffled, RandomSource(2))

    assert sorted(shuffled) == sorted(items)


def test_shuffle_depends_on_seed():
    """Different seeds give different orders."""
    a = list(range(40))
    b = list(range(40))

    shuffle_in_place(a, RandomSource(1))
    shuffle_in_place(b, RandomSource(2))

    assert a != b


def test_shuffle_matches_fisher_yates_draws():
    """Each position i is swapped with intn(i + 1) drawn from the source."""
    items = list("abcdefgh")
    expected = list(items)
    draws = RandomSource(21)
    for i in range(len(expected)):
        j = draws.intn(i + 1)
        expected[i], expected[j] = expected[j], expected[i]

    shuffle_in_place(items, RandomSource(21))

    assert items == expected


def test_shuffle_empty_and_single():
    """Empty and single-element lists are left as they are."""
    empty = []
    single = ["only"]

    shuffle_in_place(empty, RandomSource(1))
    shuffle_in_place(single, RandomSource(1))

    assert empty == []
    assert single == ["only"]
